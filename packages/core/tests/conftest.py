"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime
from pathlib import Path

import pytest
import pytest_asyncio
from clubops.core.models import (
    ClubMember,
    ClubRole,
    Event,
    EventKind,
    EventStatus,
    Principal,
    UserRole,
)
from clubops.core.store import StoreGroup, create_store_group
from ulid import ULID

CLUB_ID = "club-robotics"


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "core_test.db"


@pytest_asyncio.fixture
async def store_group(core_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """核心层已初始化 StoreGroup"""
    group = await create_store_group(str(core_db_path))
    yield group
    await group.conn.close()


@pytest.fixture
def make_event():
    """构造 Event 的工厂函数"""

    def _make(**overrides) -> Event:
        now = datetime.now(UTC)
        fields = {
            "event_id": str(ULID()),
            "title": "Robotics Workshop",
            "date": date(2026, 11, 14),
            "time_display": "2:00 PM - 5:00 PM",
            "start_time": "14:00",
            "location": "Lab 3",
            "club_id": CLUB_ID,
            "club_name": "Robotics Club",
            "author_id": "u-secretary",
            "author_name": "Asha",
            "kind": EventKind.EVENT,
            "status": EventStatus.PUBLISHED,
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Event(**fields)

    return _make


@pytest_asyncio.fixture
async def stored_event(store_group: StoreGroup, make_event) -> Event:
    """已写入数据库的活动"""
    event = make_event(response_sheet_url="https://docs.google.com/spreadsheets/d/abc123/edit")
    await store_group.event_store.create_event(event)
    await store_group.conn.commit()
    return event


@pytest_asyncio.fixture
async def club_members(store_group: StoreGroup) -> list[ClubMember]:
    """社团成员名册：Ravi 没有邮箱"""
    now = datetime.now(UTC)
    members = [
        ClubMember(member_id="m-1", club_id=CLUB_ID, name="Asha", email="asha@club.org",
                   role=ClubRole.SECRETARY, joined_at=now),
        ClubMember(member_id="m-2", club_id=CLUB_ID, name="Meera", email="meera@club.org",
                   role=ClubRole.MEMBER, joined_at=now),
        ClubMember(member_id="m-3", club_id=CLUB_ID, name="Ravi", email="",
                   role=ClubRole.MEMBER, joined_at=now),
    ]
    for member in members:
        await store_group.member_store.add_member(member)
    return members


@pytest.fixture
def officer() -> Principal:
    """本社团干事"""
    return Principal(
        user_id="u-secretary",
        name="Asha",
        role=UserRole.CLUB_SECRETARY,
        club_id=CLUB_ID,
    )


@pytest.fixture
def admin() -> Principal:
    return Principal(user_id="u-admin", name="Admin", role=UserRole.ADMIN)
