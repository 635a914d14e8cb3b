"""EventOperationsService -- 活动运营门面

围绕单个活动组合 TaskBoard、BudgetLedger、ParticipantRoster：
1. load_event_operations 一次性加载三个子引擎
2. 所有修改先经过 (principal, event) 授权检查再委托给子引擎
3. save_event_operations 在同一事务内保存 tasks + budget
4. 名册修改由子引擎立即落盘，不参与合并保存

单写者假设：同一活动同一时间只有一个干事会话编辑，合并保存不做版本比对。
"""

from datetime import UTC, date, datetime
from decimal import Decimal

import structlog
from ulid import ULID

from .authz import can_publish_for, require_mutation
from .exceptions import CollisionCheckError, EventNotFoundError, PermissionDeniedError
from .ledger import BudgetLedger
from .models.budget import BudgetItem, BudgetItemUpdate
from .models.enums import Attendance, BudgetCategory, EventKind, EventStatus, TaskStatus
from .models.event import Event, EventCollision, EventDraft
from .models.member import Principal
from .models.participant import ImportSummary, Participant, TabularSource
from .models.results import OperationResult, PublishResult
from .models.task import EventTask
from .protocols import EventUpdateNotifier, SheetSource, TaskNotifier
from .roster import ParticipantRoster
from .schedule import (
    CollisionDetector,
    format_24h,
    format_clock,
    format_time_range,
    parse_24h_minute,
    parse_start_minute,
)
from .store import StoreGroup, transaction
from .task_board import TaskBoard

log = structlog.get_logger()


def _compose_time_display(start_minute: int | None, end_time: str | None) -> str | None:
    """由开始/结束时间拼接 "2:00 PM - 5:00 PM" 展示字符串"""
    if start_minute is None:
        return None
    end_minute = parse_24h_minute(end_time)
    end = format_clock(end_minute) if end_minute is not None else None
    return format_time_range(format_clock(start_minute), end)


class EventOperations:
    """一次编辑会话内的活动运营聚合"""

    def __init__(
        self,
        event: Event,
        tasks: TaskBoard,
        budget: BudgetLedger,
        roster: ParticipantRoster,
    ) -> None:
        self.event = event
        self.tasks = tasks
        self.budget = budget
        self.roster = roster

    @property
    def event_id(self) -> str:
        return self.event.event_id


class EventOperationsService:
    """活动运营业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        task_notifier: TaskNotifier | None = None,
        update_notifier: EventUpdateNotifier | None = None,
        sheet_source: SheetSource | None = None,
    ) -> None:
        self._stores = store_group
        self._task_notifier = task_notifier
        self._update_notifier = update_notifier
        self._sheet_source = sheet_source
        self._detector = CollisionDetector(store_group.event_store)

    # ---- 读取 ----

    async def get_event(self, event_id: str) -> Event:
        """查询活动，不存在时抛出 EventNotFoundError"""
        event = await self._stores.event_store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def load_event_operations(self, event_id: str) -> EventOperations:
        """加载活动并组装三个子引擎"""
        event = await self.get_event(event_id)
        members = await self._stores.member_store.get_club_members(event.club_id)
        participants = await self._stores.participant_store.list_participants(event_id)

        return EventOperations(
            event=event,
            tasks=TaskBoard(
                event_title=event.title,
                tasks=event.tasks,
                members=members,
                notifier=self._task_notifier,
            ),
            budget=BudgetLedger(event.budget),
            roster=ParticipantRoster(
                event_id=event_id,
                conn=self._stores.conn,
                participant_store=self._stores.participant_store,
                participants=participants,
            ),
        )

    async def check_collisions(
        self,
        on_date: date,
        start_time_24h: str | None,
        candidate_event_id: str | None = None,
    ) -> list[EventCollision]:
        """冲突检测透传（失败时抛出 CollisionCheckError）"""
        return await self._detector.find_collisions(
            on_date, start_time_24h, candidate_event_id
        )

    # ---- 合并保存 ----

    async def save_event_operations(
        self,
        principal: Principal,
        event_id: str,
        tasks: list[EventTask],
        budget_items: list[BudgetItem],
    ) -> None:
        """原子保存任务与预算集合

        Raises:
            EventNotFoundError: 活动不存在
            PermissionDeniedError: 无修改权限
            StoreError: 持久化失败，两个集合均未保存
        """
        event = await self.get_event(event_id)
        require_mutation(principal, event)

        saved = await transaction.save_event_operations(
            self._stores.conn,
            self._stores.event_store,
            event_id,
            tasks,
            budget_items,
        )
        if not saved:
            raise EventNotFoundError(event_id)

        log.info(
            "event_operations_saved",
            event_id=event_id,
            task_count=len(tasks),
            budget_item_count=len(budget_items),
            saved_by=principal.user_id,
        )

    async def save(self, principal: Principal, ops: EventOperations) -> None:
        """保存一次编辑会话中的任务与预算"""
        await self.save_event_operations(
            principal, ops.event_id, ops.tasks.tasks, ops.budget.items
        )

    # ---- 任务看板 ----

    async def create_task(
        self,
        principal: Principal,
        ops: EventOperations,
        title: str,
        assignee_names: list[str],
        deadline: date | None = None,
    ) -> OperationResult[EventTask]:
        """创建任务：用最新的社团成员名册解析负责人邮箱"""
        require_mutation(principal, ops.event)
        members = await self._stores.member_store.get_club_members(ops.event.club_id)
        ops.tasks.set_members(members)
        return await ops.tasks.create_task(
            title=title,
            assignee_names=assignee_names,
            created_by=principal.name,
            deadline=deadline,
        )

    def set_task_status(
        self,
        principal: Principal,
        ops: EventOperations,
        task_id: str,
        status: TaskStatus,
    ) -> OperationResult[EventTask]:
        require_mutation(principal, ops.event)
        return ops.tasks.set_status(task_id, status)

    def delete_task(
        self,
        principal: Principal,
        ops: EventOperations,
        task_id: str,
    ) -> OperationResult[EventTask]:
        require_mutation(principal, ops.event)
        return ops.tasks.delete_task(task_id)

    # ---- 预算台账 ----

    def add_budget_item(
        self,
        principal: Principal,
        ops: EventOperations,
        description: str,
        category: BudgetCategory = BudgetCategory.MISC,
        estimated_cost: Decimal | int | float = 0,
        notes: str | None = None,
    ) -> OperationResult[BudgetItem]:
        require_mutation(principal, ops.event)
        return ops.budget.add_item(description, category, estimated_cost, notes)

    def update_budget_item(
        self,
        principal: Principal,
        ops: EventOperations,
        item_id: str,
        changes: BudgetItemUpdate,
    ) -> OperationResult[BudgetItem]:
        require_mutation(principal, ops.event)
        return ops.budget.update_item(item_id, changes)

    def delete_budget_item(
        self,
        principal: Principal,
        ops: EventOperations,
        item_id: str,
    ) -> OperationResult[BudgetItem]:
        require_mutation(principal, ops.event)
        return ops.budget.delete_item(item_id)

    # ---- 参与者名册（立即落盘） ----

    async def add_participant(
        self,
        principal: Principal,
        ops: EventOperations,
        name: str,
        email: str,
    ) -> OperationResult[Participant]:
        require_mutation(principal, ops.event)
        return await ops.roster.add_participant(name, email)

    async def import_participants(
        self,
        principal: Principal,
        ops: EventOperations,
        table: TabularSource,
    ) -> OperationResult[ImportSummary]:
        require_mutation(principal, ops.event)
        return await ops.roster.import_rows(table)

    async def import_participants_from_sheet(
        self,
        principal: Principal,
        ops: EventOperations,
    ) -> OperationResult[ImportSummary]:
        """从活动绑定的报名表格导入参与者

        Raises:
            SheetFetchError: 表格读取失败（通常是表格未公开发布）
        """
        require_mutation(principal, ops.event)
        sheet_url = ops.event.response_sheet_url
        if not sheet_url:
            return OperationResult.invalid(
                "Please add a Response Spreadsheet URL in the event details first"
            )
        if self._sheet_source is None:
            return OperationResult.invalid("Spreadsheet import is not configured")

        table = await self._sheet_source.fetch(sheet_url)
        if not table.rows:
            return OperationResult.invalid("No data found in the sheet")
        return await ops.roster.import_rows(table)

    async def set_attendance(
        self,
        principal: Principal,
        ops: EventOperations,
        participant_id: str,
        status: Attendance,
    ) -> OperationResult[Participant]:
        require_mutation(principal, ops.event)
        return await ops.roster.set_attendance(participant_id, status)

    async def remove_participant(
        self,
        principal: Principal,
        ops: EventOperations,
        participant_id: str,
    ) -> OperationResult[Participant]:
        require_mutation(principal, ops.event)
        return await ops.roster.remove_participant(participant_id)

    # ---- 发布与通知 ----

    async def publish_event(
        self,
        principal: Principal,
        draft: EventDraft,
        force: bool = False,
    ) -> PublishResult:
        """发布活动，发布前做冲突检测

        有冲突或冲突状态未知时不发布（除非 force），由干事确认后带 force 重试。

        Raises:
            PermissionDeniedError: 无权为该社团发布
            StoreError: 持久化失败
        """
        if not can_publish_for(principal, draft.club_id):
            raise PermissionDeniedError(principal.user_id, f"club:{draft.club_id}")

        start_minute = parse_24h_minute(draft.start_time)
        if start_minute is None:
            start_minute = parse_start_minute(draft.time_display)
        start_time = format_24h(start_minute) if start_minute is not None else None
        time_display = draft.time_display or _compose_time_display(start_minute, draft.end_time)

        if not force and draft.kind == EventKind.EVENT and start_time is not None:
            try:
                collisions = await self._detector.find_collisions(draft.date, start_time)
            except CollisionCheckError:
                return PublishResult(
                    published=False,
                    collision_unknown=True,
                    message="Could not verify schedule conflicts; confirm to publish anyway",
                )
            if collisions:
                log.info(
                    "event_publish_blocked_by_collision",
                    club_id=draft.club_id,
                    collision_count=len(collisions),
                )
                return PublishResult(
                    published=False,
                    collisions=collisions,
                    message="Another event starts at the same time on this date",
                )

        now = datetime.now(UTC)
        event = Event(
            event_id=str(ULID()),
            title=draft.title,
            content=draft.content,
            date=draft.date,
            time_display=time_display,
            start_time=start_time,
            location=draft.location,
            club_id=draft.club_id,
            club_name=draft.club_name,
            author_id=principal.user_id,
            author_name=principal.name,
            kind=draft.kind,
            status=EventStatus.PUBLISHED,
            response_sheet_url=draft.response_sheet_url,
            created_at=now,
            updated_at=now,
        )
        await transaction.create_event(self._stores.conn, self._stores.event_store, event)
        log.info(
            "event_published",
            event_id=event.event_id,
            club_id=event.club_id,
            forced=force,
        )
        return PublishResult(published=True, event_id=event.event_id)

    async def announce_event_update(
        self,
        principal: Principal,
        event_id: str,
        update_message: str,
    ) -> OperationResult[int]:
        """向所有已登记参与者发送活动更新邮件（尽力而为）

        Returns:
            ok + 收件人数量；消息为空时 outcome=invalid
        """
        event = await self.get_event(event_id)
        require_mutation(principal, event)
        update_message = update_message.strip()
        if not update_message:
            return OperationResult.invalid("更新内容不能为空")

        participants = await self._stores.participant_store.list_participants(event_id)
        if not participants or self._update_notifier is None:
            return OperationResult.success(0)

        attendees = [(p.name, p.email) for p in participants]
        try:
            await self._update_notifier.send_event_update_emails(
                attendees=attendees,
                event_title=event.title,
                update_message=update_message,
                club_name=event.club_name,
            )
        except Exception as e:
            log.warning(
                "event_update_notification_failed",
                event_id=event_id,
                error=str(e),
                error_type=type(e).__name__,
            )
        return OperationResult.success(len(attendees))
