"""TaskBoard -- 活动内的委派任务看板

任务集合是活动文档的内嵌字段：看板只修改内存中的集合，
由门面的 save_event_operations 统一落盘。
创建任务后按负责人发送通知邮件，邮件失败只记录警告，不回滚任务。
"""

from datetime import UTC, date, datetime

import structlog
from ulid import ULID

from .models.enums import TaskStatus
from .models.member import ClubMember
from .models.results import OperationResult
from .models.task import UNASSIGNED, EventTask
from .protocols import TaskNotifier

log = structlog.get_logger()


def _ordered_unique(names: list[str]) -> list[str]:
    """去除空白项与重复项，保留首次出现顺序"""
    seen: set[str] = set()
    result = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


class TaskBoard:
    """单个活动的任务看板"""

    def __init__(
        self,
        event_title: str,
        tasks: list[EventTask] | None = None,
        members: list[ClubMember] | None = None,
        notifier: TaskNotifier | None = None,
    ) -> None:
        self._event_title = event_title
        self._tasks: list[EventTask] = list(tasks or [])
        self._members: list[ClubMember] = list(members or [])
        self._notifier = notifier

    @property
    def tasks(self) -> list[EventTask]:
        """当前任务集合快照"""
        return list(self._tasks)

    def set_members(self, members: list[ClubMember]) -> None:
        """替换用于解析负责人邮箱的成员名册快照"""
        self._members = list(members)

    def get_task(self, task_id: str) -> EventTask | None:
        return next((t for t in self._tasks if t.task_id == task_id), None)

    def resolve_recipients(self, names: list[str]) -> list[tuple[str, str]]:
        """按姓名解析 (name, email)

        每个姓名取名册中第一个同名成员；不在名册中或没有邮箱的姓名不产生收件人。
        """
        recipients = []
        for name in names:
            member = next((m for m in self._members if m.name == name), None)
            if member is not None and member.email.strip():
                recipients.append((name, member.email.strip()))
        return recipients

    async def create_task(
        self,
        title: str,
        assignee_names: list[str],
        created_by: str,
        deadline: date | None = None,
    ) -> OperationResult[EventTask]:
        """创建任务并通知负责人

        Args:
            title: 任务标题（不能为空）
            assignee_names: 负责人姓名；为空时使用 "Unassigned"
            created_by: 创建者姓名
            deadline: 截止日期

        Returns:
            OperationResult，标题为空时 outcome=invalid 且不做任何修改
        """
        title = title.strip()
        if not title:
            return OperationResult.invalid("任务标题不能为空")

        assignees = _ordered_unique(assignee_names) or [UNASSIGNED]
        recipients = self.resolve_recipients(assignees)

        task = EventTask(
            task_id=str(ULID()),
            title=title,
            assigned_to=assignees,
            assigned_to_emails=[email for _, email in recipients],
            deadline=deadline,
            status=TaskStatus.PENDING,
            created_by=created_by or "Unknown",
            created_at=datetime.now(UTC),
        )
        self._tasks.append(task)

        log.info(
            "task_created",
            task_id=task.task_id,
            assignee_count=len(assignees),
            address_count=len(recipients),
        )

        if recipients and UNASSIGNED not in assignees:
            await self._notify_assignees(task, recipients)

        return OperationResult.success(task)

    async def _notify_assignees(
        self,
        task: EventTask,
        recipients: list[tuple[str, str]],
    ) -> None:
        """发送任务分配邮件（尽力而为）"""
        if self._notifier is None:
            return
        try:
            await self._notifier.send_task_assignment_emails(
                addresses=[email for _, email in recipients],
                names=[name for name, _ in recipients],
                task_title=task.title,
                deadline=task.deadline,
                event_title=self._event_title,
                assigned_by=task.created_by,
            )
        except Exception as e:
            # 通知失败不影响任务创建
            log.warning(
                "task_notification_failed",
                task_id=task.task_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    def set_status(self, task_id: str, status: TaskStatus) -> OperationResult[EventTask]:
        """无条件覆盖任务状态（任意方向均可），负责人等其他字段不变"""
        status = TaskStatus(status)
        for index, task in enumerate(self._tasks):
            if task.task_id == task_id:
                updated = task.model_copy(update={"status": status})
                self._tasks[index] = updated
                log.info(
                    "task_status_changed",
                    task_id=task_id,
                    from_status=task.status.value,
                    to_status=updated.status.value,
                )
                return OperationResult.success(updated)
        return OperationResult.not_found(f"任务不存在: {task_id}")

    def delete_task(self, task_id: str) -> OperationResult[EventTask]:
        """无条件删除任务"""
        task = self.get_task(task_id)
        if task is None:
            return OperationResult.not_found(f"任务不存在: {task_id}")
        self._tasks = [t for t in self._tasks if t.task_id != task_id]
        log.info("task_deleted", task_id=task_id)
        return OperationResult.success(task)

    def overdue(self, today: date) -> list[EventTask]:
        """已过截止日期且未完成的任务"""
        return [
            t
            for t in self._tasks
            if t.deadline is not None
            and t.deadline < today
            and t.status != TaskStatus.COMPLETED
        ]

    def status_counts(self) -> dict[TaskStatus, int]:
        """各状态任务数"""
        counts = {status: 0 for status in TaskStatus}
        for task in self._tasks:
            counts[task.status] += 1
        return counts
