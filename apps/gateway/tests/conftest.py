"""apps/gateway 测试配置 -- FastAPI app + httpx AsyncClient

手动初始化 app.state（绕过 lifespan），邮件与表格协作者用 AsyncMock 替身。
"""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from clubops.core.models import ClubMember, ClubRole, Event, EventKind, EventStatus
from clubops.core.operations import EventOperationsService
from clubops.core.store import create_store_group
from httpx import ASGITransport, AsyncClient
from ulid import ULID

CLUB_ID = "club-robotics"

OFFICER_HEADERS = {
    "X-User-Id": "u-secretary",
    "X-User-Name": "Asha",
    "X-User-Role": "club-secretary",
    "X-Club-Id": CLUB_ID,
}

OUTSIDER_HEADERS = {
    "X-User-Id": "u-chess",
    "X-User-Name": "Vikram",
    "X-User-Role": "club-secretary",
    "X-Club-Id": "club-chess",
}


@pytest_asyncio.fixture
async def test_app(tmp_path: Path):
    """测试 app：真实 SQLite + 替身通知/表格协作者"""
    os.environ["CLUBOPS_DB_PATH"] = str(tmp_path / "sqlite" / "test.db")

    from clubops.gateway.main import create_app

    app = create_app()

    store_group = await create_store_group(os.environ["CLUBOPS_DB_PATH"])
    notifier = AsyncMock()
    sheet_source = AsyncMock()
    dispatcher = MagicMock()
    dispatcher.is_configured = False

    app.state.store_group = store_group
    app.state.email_dispatcher = dispatcher
    app.state.notifier = notifier
    app.state.sheet_source = sheet_source
    app.state.operations_service = EventOperationsService(
        store_group,
        task_notifier=notifier,
        update_notifier=notifier,
        sheet_source=sheet_source,
    )

    yield app

    await store_group.conn.close()
    os.environ.pop("CLUBOPS_DB_PATH", None)


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def officer_headers() -> dict[str, str]:
    return dict(OFFICER_HEADERS)


@pytest.fixture
def outsider_headers() -> dict[str, str]:
    return dict(OUTSIDER_HEADERS)


@pytest_asyncio.fixture
async def stored_event(test_app) -> Event:
    """已发布的活动 + 社团成员名册"""
    store_group = test_app.state.store_group
    now = datetime.now(UTC)
    event = Event(
        event_id=str(ULID()),
        title="Robotics Workshop",
        date=date(2026, 11, 14),
        time_display="2:00 PM - 5:00 PM",
        start_time="14:00",
        club_id=CLUB_ID,
        club_name="Robotics Club",
        kind=EventKind.EVENT,
        status=EventStatus.PUBLISHED,
        response_sheet_url="https://docs.google.com/spreadsheets/d/abc123/edit",
        created_at=now,
        updated_at=now,
    )
    await store_group.event_store.create_event(event)
    await store_group.conn.commit()

    for member_id, name, email in [
        ("m-1", "Asha", "asha@club.org"),
        ("m-2", "Meera", "meera@club.org"),
    ]:
        await store_group.member_store.add_member(
            ClubMember(
                member_id=member_id,
                club_id=CLUB_ID,
                name=name,
                email=email,
                role=ClubRole.MEMBER,
                joined_at=now,
            )
        )
    return event
