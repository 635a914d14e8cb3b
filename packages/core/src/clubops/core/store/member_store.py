"""MemberStore SQLite 实现 -- 社团成员名册"""

from datetime import datetime

import aiosqlite

from ..models.member import ClubMember


class SqliteMemberStore:
    """MemberStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_club_members(self, club_id: str) -> list[ClubMember]:
        """查询社团成员，按加入时间正序"""
        cursor = await self._conn.execute(
            """
            SELECT member_id, club_id, name, email, role, joined_at
            FROM club_members WHERE club_id = ?
            ORDER BY joined_at ASC
            """,
            (club_id,),
        )
        rows = await cursor.fetchall()
        return [
            ClubMember(
                member_id=row[0],
                club_id=row[1],
                name=row[2],
                email=row[3],
                role=row[4],
                joined_at=datetime.fromisoformat(row[5]),
            )
            for row in rows
        ]

    async def add_member(self, member: ClubMember) -> None:
        """添加成员并提交"""
        await self._conn.execute(
            """
            INSERT INTO club_members (member_id, club_id, name, email, role, joined_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                member.member_id,
                member.club_id,
                member.name,
                member.email,
                member.role.value,
                member.joined_at.isoformat(),
            ),
        )
        await self._conn.commit()
