"""NotifyConfig -- 邮件与表格读取配置加载

从环境变量加载配置；凭据缺失时邮件发送进入 "未配置" 状态并静默跳过。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

DEFAULT_EMAILJS_API_URL = "https://api.emailjs.com/api/v1.0/email/send"


class NotifyConfig(BaseModel):
    """Notify 包配置 -- 从环境变量加载

    环境变量:
        EMAILJS_SERVICE_ID: 邮件服务 ID
        EMAILJS_TEMPLATE_ID: 任务分配邮件模板 ID
        EMAILJS_EVENT_TEMPLATE_ID: 活动更新邮件模板 ID
        EMAILJS_PUBLIC_KEY: 公钥
        EMAILJS_API_URL: REST 发送地址
        CLUBOPS_EMAIL_TIMEOUT_S: 单封邮件超时（秒，默认 10）
        CLUBOPS_SHEET_TIMEOUT_S: 表格读取超时（秒，默认 15）
    """

    service_id: str = Field(default="", description="EmailJS 服务 ID")
    template_id: str = Field(default="", description="任务分配邮件模板 ID")
    event_template_id: str = Field(default="", description="活动更新邮件模板 ID")
    public_key: SecretStr = Field(
        default=SecretStr(""),
        description="EmailJS 公钥（REST 请求中的 user_id）",
    )
    api_url: str = Field(
        default=DEFAULT_EMAILJS_API_URL,
        description="EmailJS REST 发送地址",
    )
    email_timeout_s: int = Field(default=10, ge=1, description="单封邮件超时（秒）")
    sheet_timeout_s: int = Field(default=15, ge=1, description="表格读取超时（秒）")

    @property
    def is_email_configured(self) -> bool:
        """任务分配邮件所需凭据是否齐全"""
        return bool(
            self.service_id and self.template_id and self.public_key.get_secret_value()
        )

    @property
    def is_event_email_configured(self) -> bool:
        """活动更新邮件所需凭据是否齐全"""
        return bool(
            self.service_id
            and self.event_template_id
            and self.public_key.get_secret_value()
        )


def _read_int(env_var: str, default: int) -> int | None:
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        parsed = int(val)
    except ValueError:
        parsed = 0
    if parsed < 1:
        log.warning(
            "invalid_timeout_config",
            env_var=env_var,
            value=val,
            fallback=default,
        )
        return None
    return parsed


def load_notify_config() -> NotifyConfig:
    """从环境变量加载 Notify 配置

    非法的超时值记录警告并使用默认值，不阻塞启动。
    """
    kwargs: dict = {}

    if val := os.environ.get("EMAILJS_SERVICE_ID"):
        kwargs["service_id"] = val

    if val := os.environ.get("EMAILJS_TEMPLATE_ID"):
        kwargs["template_id"] = val

    if val := os.environ.get("EMAILJS_EVENT_TEMPLATE_ID"):
        kwargs["event_template_id"] = val

    if val := os.environ.get("EMAILJS_PUBLIC_KEY"):
        kwargs["public_key"] = SecretStr(val)

    if val := os.environ.get("EMAILJS_API_URL"):
        kwargs["api_url"] = val

    if (timeout := _read_int("CLUBOPS_EMAIL_TIMEOUT_S", 10)) is not None:
        kwargs["email_timeout_s"] = timeout

    if (timeout := _read_int("CLUBOPS_SHEET_TIMEOUT_S", 15)) is not None:
        kwargs["sheet_timeout_s"] = timeout

    return NotifyConfig(**kwargs)
