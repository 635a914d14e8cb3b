"""ParticipantStore SQLite 实现

participants 表是活动的报名子集合，(event_id, email_key) 唯一索引
保证同一活动内邮箱大小写不敏感去重。
"""

from datetime import datetime

import aiosqlite

from ..models.participant import Participant

_PARTICIPANT_COLUMNS = (
    "participant_id, event_id, name, email, registered_at, attendance"
)


class SqliteParticipantStore:
    """ParticipantStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def list_participants(self, event_id: str) -> list[Participant]:
        """查询活动参与者，按报名时间倒序"""
        cursor = await self._conn.execute(
            f"""
            SELECT {_PARTICIPANT_COLUMNS} FROM participants
            WHERE event_id = ?
            ORDER BY registered_at DESC
            """,
            (event_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_participant(row) for row in rows]

    async def insert_participant(self, participant: Participant) -> None:
        """插入参与者（邮箱重复时由唯一索引抛出 IntegrityError）"""
        await self._conn.execute(
            f"""
            INSERT INTO participants ({_PARTICIPANT_COLUMNS}, email_key)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                participant.participant_id,
                participant.event_id,
                participant.name,
                participant.email,
                participant.registered_at.isoformat(),
                participant.attendance.value,
                participant.email_key,
            ),
        )

    async def update_attendance(
        self,
        event_id: str,
        participant_id: str,
        attendance: str,
    ) -> int:
        """更新出勤状态"""
        cursor = await self._conn.execute(
            """
            UPDATE participants SET attendance = ?
            WHERE event_id = ? AND participant_id = ?
            """,
            (attendance, event_id, participant_id),
        )
        return cursor.rowcount

    async def delete_participant(self, event_id: str, participant_id: str) -> int:
        """删除参与者"""
        cursor = await self._conn.execute(
            "DELETE FROM participants WHERE event_id = ? AND participant_id = ?",
            (event_id, participant_id),
        )
        return cursor.rowcount

    async def adjust_rsvp_count(self, event_id: str, delta: int, updated_at: str) -> None:
        """调整活动的报名计数，计数不低于 0"""
        await self._conn.execute(
            """
            UPDATE events
            SET rsvp_count = MAX(0, rsvp_count + ?), updated_at = ?
            WHERE event_id = ?
            """,
            (delta, updated_at, event_id),
        )

    @staticmethod
    def _row_to_participant(row: aiosqlite.Row) -> Participant:
        """将数据库行转换为 Participant 模型"""
        return Participant(
            participant_id=row[0],
            event_id=row[1],
            name=row[2],
            email=row[3],
            registered_at=datetime.fromisoformat(row[4]),
            attendance=row[5],
        )
