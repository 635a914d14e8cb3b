"""原子事务封装

每个写操作在同一 SQLite 事务内提交，失败时回滚并包装为 StoreError，
调用方不会看到部分写入的状态。
"""

from datetime import UTC, datetime

import aiosqlite
import structlog

from ..exceptions import StoreError
from ..models.budget import BudgetItem
from ..models.event import Event
from ..models.participant import Participant
from ..models.task import EventTask
from .event_store import SqliteEventStore
from .participant_store import SqliteParticipantStore

log = structlog.get_logger()


def _is_duplicate_email(error: aiosqlite.IntegrityError) -> bool:
    """判断是否为 (event_id, email_key) 唯一约束冲突"""
    message = str(error)
    return "participants.event_id" in message or "idx_participants_event_email" in message


async def create_event(
    conn: aiosqlite.Connection,
    event_store: SqliteEventStore,
    event: Event,
) -> None:
    """写入新活动并提交"""
    try:
        await event_store.create_event(event)
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        raise StoreError("create_event", e) from e


async def save_event_operations(
    conn: aiosqlite.Connection,
    event_store: SqliteEventStore,
    event_id: str,
    tasks: list[EventTask],
    budget_items: list[BudgetItem],
) -> bool:
    """在同一事务内原子保存 tasks 与 budget 两个集合

    Args:
        conn: 数据库连接（需在同一连接上操作以保证事务性）
        event_store: EventStore 实例
        event_id: 活动 ID
        tasks: 完整任务集合（整体替换）
        budget_items: 完整预算集合（整体替换）

    Returns:
        True 如果活动存在且已保存

    Raises:
        StoreError: 事务提交失败，两个集合均未保存
    """
    try:
        updated = await event_store.save_event_fields(
            event_id,
            {
                "tasks": tasks,
                "budget": budget_items,
                "updated_at": datetime.now(UTC),
            },
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        log.error("event_operations_save_failed", event_id=event_id, error=str(e))
        raise StoreError("save_event_operations", e) from e
    return updated > 0


async def add_participant(
    conn: aiosqlite.Connection,
    participant_store: SqliteParticipantStore,
    participant: Participant,
) -> bool:
    """写入参与者并递增活动报名计数

    Returns:
        True 新增成功；False 邮箱已存在（唯一约束命中，未做任何修改）

    Raises:
        StoreError: 其他数据库错误
    """
    try:
        await participant_store.insert_participant(participant)
        await participant_store.adjust_rsvp_count(
            participant.event_id, 1, participant.registered_at.isoformat()
        )
        await conn.commit()
    except aiosqlite.IntegrityError as e:
        await conn.rollback()
        if _is_duplicate_email(e):
            return False
        raise StoreError("add_participant", e) from e
    except aiosqlite.Error as e:
        await conn.rollback()
        raise StoreError("add_participant", e) from e
    return True


async def remove_participant(
    conn: aiosqlite.Connection,
    participant_store: SqliteParticipantStore,
    event_id: str,
    participant_id: str,
) -> bool:
    """删除参与者并递减活动报名计数

    Returns:
        True 如果参与者存在并已删除
    """
    try:
        deleted = await participant_store.delete_participant(event_id, participant_id)
        if deleted:
            await participant_store.adjust_rsvp_count(
                event_id, -1, datetime.now(UTC).isoformat()
            )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        raise StoreError("remove_participant", e) from e
    return deleted > 0


async def update_attendance(
    conn: aiosqlite.Connection,
    participant_store: SqliteParticipantStore,
    event_id: str,
    participant_id: str,
    attendance: str,
) -> bool:
    """更新出勤状态

    Returns:
        True 如果参与者存在并已更新
    """
    try:
        updated = await participant_store.update_attendance(
            event_id, participant_id, attendance
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        raise StoreError("update_attendance", e) from e
    return updated > 0
