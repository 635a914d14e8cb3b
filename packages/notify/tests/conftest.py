"""Notify 包测试 fixtures"""

import pytest
from clubops.notify.config import NotifyConfig
from pydantic import SecretStr

_NOTIFY_ENV_VARS = (
    "EMAILJS_SERVICE_ID",
    "EMAILJS_TEMPLATE_ID",
    "EMAILJS_EVENT_TEMPLATE_ID",
    "EMAILJS_PUBLIC_KEY",
    "EMAILJS_API_URL",
    "CLUBOPS_EMAIL_TIMEOUT_S",
    "CLUBOPS_SHEET_TIMEOUT_S",
)


@pytest.fixture
def clean_env(monkeypatch):
    """清除 Notify 相关环境变量"""
    for name in _NOTIFY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def email_config() -> NotifyConfig:
    """凭据齐全的邮件配置"""
    return NotifyConfig(
        service_id="service_club",
        template_id="template_task",
        event_template_id="template_event",
        public_key=SecretStr("pk-test"),
        api_url="https://mail.test/send",
    )
