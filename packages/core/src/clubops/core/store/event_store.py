"""EventStore SQLite 实现

活动文档以一行存储，tasks / budget 两个内嵌集合序列化为 JSON 数组。
此处仅提供数据库操作，提交与回滚由 transaction 模块负责。
"""

import json
from datetime import date, datetime
from typing import Any

import aiosqlite

from ..models.budget import BudgetItem
from ..models.event import Event
from ..models.task import EventTask

_EVENT_COLUMNS = (
    "event_id, title, content, date, time_display, start_time, location, "
    "club_id, club_name, author_id, author_name, kind, status, "
    "response_sheet_url, rsvp_count, tasks, budget, created_at, updated_at"
)

# save_event_fields 允许更新的列
_UPDATABLE_FIELDS = {
    "title",
    "content",
    "date",
    "time_display",
    "start_time",
    "location",
    "status",
    "response_sheet_url",
    "tasks",
    "budget",
    "updated_at",
}


def dump_tasks(tasks: list[EventTask]) -> str:
    """序列化任务集合为 JSON 数组"""
    return json.dumps([t.model_dump(mode="json") for t in tasks], ensure_ascii=False)


def dump_budget(items: list[BudgetItem]) -> str:
    """序列化预算集合为 JSON 数组"""
    return json.dumps([b.model_dump(mode="json") for b in items], ensure_ascii=False)


def _to_column(name: str, value: Any) -> Any:
    """将字段值转换为列值"""
    if name == "tasks":
        return dump_tasks(value)
    if name == "budget":
        return dump_budget(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


class SqliteEventStore:
    """EventStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_event(self, event: Event) -> None:
        """创建活动记录"""
        await self._conn.execute(
            f"""
            INSERT INTO events ({_EVENT_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.event_id,
                event.title,
                event.content,
                event.date.isoformat(),
                event.time_display,
                event.start_time,
                event.location,
                event.club_id,
                event.club_name,
                event.author_id,
                event.author_name,
                event.kind.value,
                event.status.value,
                event.response_sheet_url,
                event.rsvp_count,
                dump_tasks(event.tasks),
                dump_budget(event.budget),
                event.created_at.isoformat(),
                event.updated_at.isoformat(),
            ),
        )

    async def get_event(self, event_id: str) -> Event | None:
        """根据 event_id 查询活动"""
        cursor = await self._conn.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events WHERE event_id = ?",
            (event_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_event(row)

    async def list_events(self) -> list[Event]:
        """查询全部活动，按 created_at 倒序"""
        cursor = await self._conn.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events ORDER BY created_at DESC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    async def save_event_fields(self, event_id: str, fields: dict[str, Any]) -> int:
        """在单条 UPDATE 内写入多个字段（调用方负责提交）

        Raises:
            ValueError: 包含不允许更新的字段
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"不允许更新的字段: {sorted(unknown)}")
        if not fields:
            return 0

        names = sorted(fields)
        assignments = ", ".join(f"{name} = ?" for name in names)
        params = [_to_column(name, fields[name]) for name in names]
        cursor = await self._conn.execute(
            f"UPDATE events SET {assignments} WHERE event_id = ?",
            (*params, event_id),
        )
        return cursor.rowcount

    @staticmethod
    def _row_to_event(row: aiosqlite.Row) -> Event:
        """将数据库行转换为 Event 模型"""
        tasks_data = json.loads(row[15])  # tasks 列
        budget_data = json.loads(row[16])  # budget 列
        return Event(
            event_id=row[0],
            title=row[1],
            content=row[2],
            date=date.fromisoformat(row[3]),
            time_display=row[4],
            start_time=row[5],
            location=row[6],
            club_id=row[7],
            club_name=row[8],
            author_id=row[9],
            author_name=row[10],
            kind=row[11],
            status=row[12],
            response_sheet_url=row[13],
            rsvp_count=row[14],
            tasks=[EventTask(**t) for t in tasks_data],
            budget=[BudgetItem(**b) for b in budget_data],
            created_at=datetime.fromisoformat(row[17]),
            updated_at=datetime.fromisoformat(row[18]),
        )
