"""EmailDispatcher -- 通过 EmailJS REST 接口发送通知邮件

每个收件人一个请求，并行发送且互不影响（all-settled）：
单封失败只记录到 DispatchReport，从不向调用方抛出。
凭据未配置时直接跳过，不视为错误。
"""

import asyncio
from datetime import date

import httpx
import structlog
from pydantic import BaseModel, Field

from .config import NotifyConfig
from .exceptions import EmailDeliveryError

log = structlog.get_logger()

FALLBACK_RECIPIENT_NAME = "Team Member"
NO_DEADLINE_TEXT = "No deadline set"


class DispatchReport(BaseModel):
    """一批邮件的发送结果"""

    skipped: bool = Field(default=False, description="未配置凭据而整体跳过")
    sent: list[str] = Field(default_factory=list, description="发送成功的地址")
    failed: list[str] = Field(default_factory=list, description="发送失败的地址")

    @property
    def attempted(self) -> int:
        return len(self.sent) + len(self.failed)


def format_deadline(deadline: date | None) -> str:
    """截止日期的长格式文本，如 "Saturday, 18 October 2026" """
    if deadline is None:
        return NO_DEADLINE_TEXT
    return f"{deadline:%A}, {deadline.day} {deadline:%B} {deadline.year}"


class EmailDispatcher:
    """EmailJS 邮件发送器"""

    def __init__(
        self,
        config: NotifyConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            config: Notify 配置
            http_client: 可注入的 httpx 客户端（测试时传入 MockTransport 客户端）；
                为 None 时自行创建并在 aclose() 中关闭
        """
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.email_timeout_s)

    @property
    def is_configured(self) -> bool:
        return self._config.is_email_configured

    @property
    def is_event_configured(self) -> bool:
        return self._config.is_event_email_configured

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send_task_assignment_emails(
        self,
        addresses: list[str],
        names: list[str],
        task_title: str,
        deadline: date | None,
        event_title: str,
        assigned_by: str,
    ) -> DispatchReport:
        """向每个负责人发送任务分配邮件

        addresses 与 names 按下标对齐；缺少姓名时使用 "Team Member"。
        """
        if not self.is_configured:
            log.warning("email_not_configured", kind="task_assignment")
            return DispatchReport(skipped=True)

        deadline_text = format_deadline(deadline)
        batch = []
        for index, address in enumerate(addresses):
            name = names[index] if index < len(names) and names[index] else None
            batch.append(
                (
                    address,
                    {
                        "to_name": name or FALLBACK_RECIPIENT_NAME,
                        "to_email": address,
                        "task_title": task_title,
                        "deadline": deadline_text,
                        "event_title": event_title,
                        "assigned_by": assigned_by,
                    },
                )
            )
        return await self._dispatch(self._config.template_id, batch, kind="task_assignment")

    async def send_event_update_emails(
        self,
        attendees: list[tuple[str, str]],
        event_title: str,
        update_message: str,
        club_name: str,
    ) -> DispatchReport:
        """向活动参与者发送活动更新邮件（使用独立模板）"""
        if not self.is_event_configured:
            log.warning("email_not_configured", kind="event_update")
            return DispatchReport(skipped=True)

        batch = [
            (
                email,
                {
                    "to_name": name or FALLBACK_RECIPIENT_NAME,
                    "to_email": email,
                    "event_title": event_title,
                    "update_message": update_message,
                    "club_name": club_name,
                },
            )
            for name, email in attendees
        ]
        return await self._dispatch(
            self._config.event_template_id, batch, kind="event_update"
        )

    async def _dispatch(
        self,
        template_id: str,
        batch: list[tuple[str, dict[str, str]]],
        kind: str,
    ) -> DispatchReport:
        results = await asyncio.gather(
            *(self._send(template_id, address, params) for address, params in batch),
            return_exceptions=True,
        )

        report = DispatchReport()
        for (address, _), result in zip(batch, results):
            if isinstance(result, BaseException):
                report.failed.append(address)
                log.warning(
                    "email_delivery_failed",
                    kind=kind,
                    error=str(result),
                    error_type=type(result).__name__,
                )
            else:
                report.sent.append(address)

        log.info(
            "email_batch_completed",
            kind=kind,
            sent=len(report.sent),
            failed=len(report.failed),
        )
        return report

    async def _send(self, template_id: str, recipient: str, params: dict[str, str]) -> None:
        """发送单封邮件

        Raises:
            EmailDeliveryError: 网络错误或非 2xx 响应
        """
        payload = {
            "service_id": self._config.service_id,
            "template_id": template_id,
            "user_id": self._config.public_key.get_secret_value(),
            "template_params": params,
        }
        try:
            resp = await self._client.post(self._config.api_url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise EmailDeliveryError(recipient, e) from e
