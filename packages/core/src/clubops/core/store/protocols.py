"""Store Protocol 接口定义

定义 EventStore、ParticipantStore、MemberStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
引擎只依赖这些读写契约，不关心具体持久化机制。
"""

from typing import Any, Protocol

from ..models.event import Event
from ..models.member import ClubMember
from ..models.participant import Participant


class EventStore(Protocol):
    """Event 存储接口 -- tasks / budget 作为内嵌字段随活动读写"""

    async def list_events(self) -> list[Event]:
        """查询全部活动（按 created_at 倒序）"""
        ...

    async def get_event(self, event_id: str) -> Event | None:
        """根据 event_id 查询活动"""
        ...

    async def create_event(self, event: Event) -> None:
        """创建活动记录"""
        ...

    async def save_event_fields(self, event_id: str, fields: dict[str, Any]) -> int:
        """更新活动的部分字段，返回受影响行数"""
        ...


class ParticipantStore(Protocol):
    """Participant 子集合存储接口"""

    async def list_participants(self, event_id: str) -> list[Participant]:
        """查询活动的全部参与者（按报名时间倒序）"""
        ...

    async def insert_participant(self, participant: Participant) -> None:
        """插入参与者；邮箱重复时抛出 IntegrityError"""
        ...

    async def update_attendance(
        self,
        event_id: str,
        participant_id: str,
        attendance: str,
    ) -> int:
        """更新出勤状态，返回受影响行数"""
        ...

    async def delete_participant(self, event_id: str, participant_id: str) -> int:
        """删除参与者，返回受影响行数"""
        ...

    async def adjust_rsvp_count(self, event_id: str, delta: int, updated_at: str) -> None:
        """调整活动的报名计数（下限 0）"""
        ...


class MemberStore(Protocol):
    """社团成员名册接口"""

    async def get_club_members(self, club_id: str) -> list[ClubMember]:
        """查询社团全部成员"""
        ...

    async def add_member(self, member: ClubMember) -> None:
        """添加成员"""
        ...
