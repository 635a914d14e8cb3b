"""外部协作者接口

引擎只依赖这些契约：邮件发送与外部表格读取。
具体实现位于 clubops.notify，测试中可用任意满足契约的替身。
"""

from datetime import date
from typing import Protocol

from .models.participant import TabularSource


class TaskNotifier(Protocol):
    """任务分配通知（尽力而为，单个收件人失败互不影响）"""

    async def send_task_assignment_emails(
        self,
        addresses: list[str],
        names: list[str],
        task_title: str,
        deadline: date | None,
        event_title: str,
        assigned_by: str,
    ) -> object:
        """按收件人并行发送任务分配邮件，不向调用方抛出投递错误"""
        ...


class EventUpdateNotifier(Protocol):
    """活动更新通知"""

    async def send_event_update_emails(
        self,
        attendees: list[tuple[str, str]],
        event_title: str,
        update_message: str,
        club_name: str,
    ) -> object:
        """向 (name, email) 列表发送活动更新邮件"""
        ...


class SheetSource(Protocol):
    """外部表格读取"""

    async def fetch(self, sheet_url: str) -> TabularSource:
        """读取已发布表格；传输失败时抛出异常"""
        ...
