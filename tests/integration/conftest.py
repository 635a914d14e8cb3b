"""集成测试共享 fixture

真实 EmailDispatcher / SheetFetcher，外部 HTTP 由 httpx.MockTransport 模拟：
EmailJS 发送接口记录请求，表格导出接口返回固定 CSV。
"""

import json
import os
from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from clubops.core.models import ClubMember, ClubRole, Event
from clubops.core.operations import EventOperationsService
from clubops.core.store import StoreGroup, create_store_group
from clubops.notify import EmailDispatcher, NotifyConfig, SheetFetcher
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from ulid import ULID

CLUB_ID = "club-robotics"
EMAIL_API_URL = "https://mail.test/api/v1.0/email/send"

OFFICER_HEADERS = {
    "X-User-Id": "u-secretary",
    "X-User-Name": "Asha",
    "X-User-Role": "club-secretary",
    "X-Club-Id": CLUB_ID,
}


class FakeExternalServices:
    """模拟 EmailJS 与表格导出接口"""

    def __init__(self) -> None:
        self.sent_emails: list[dict] = []
        self.sheet_requests: list[str] = []
        self.sheet_csv = "Timestamp,Name,Email Address\n"
        self.sheet_status = 200
        self.rejected_recipients: set[str] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == EMAIL_API_URL:
            payload = json.loads(request.content)
            if payload["template_params"]["to_email"] in self.rejected_recipients:
                return httpx.Response(422, text="invalid recipient")
            self.sent_emails.append(payload)
            return httpx.Response(200, text="OK")
        self.sheet_requests.append(str(request.url))
        return httpx.Response(self.sheet_status, text=self.sheet_csv)

    def emails_to(self, address: str) -> list[dict]:
        return [e for e in self.sent_emails if e["template_params"]["to_email"] == address]


@pytest.fixture
def external() -> FakeExternalServices:
    return FakeExternalServices()


async def build_app(db_path: str, external: FakeExternalServices):
    """组装 app：真实 Store + 真实通知协作者（MockTransport）"""
    os.environ["CLUBOPS_DB_PATH"] = db_path

    from clubops.gateway.main import create_app

    app = create_app()
    store_group = await create_store_group(db_path)
    transport = httpx.MockTransport(external)
    config = NotifyConfig(
        service_id="service_club",
        template_id="template_task",
        event_template_id="template_event",
        public_key=SecretStr("pk-test"),
        api_url=EMAIL_API_URL,
    )
    dispatcher = EmailDispatcher(config, http_client=httpx.AsyncClient(transport=transport))
    fetcher = SheetFetcher(http_client=httpx.AsyncClient(transport=transport))

    app.state.store_group = store_group
    app.state.email_dispatcher = dispatcher
    app.state.sheet_fetcher = fetcher
    app.state.operations_service = EventOperationsService(
        store_group,
        task_notifier=dispatcher,
        update_notifier=dispatcher,
        sheet_source=fetcher,
    )
    return app, store_group


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, external: FakeExternalServices):
    """集成测试用 FastAPI app"""
    app, store_group = await build_app(str(tmp_path / "test.db"), external)

    yield app

    await store_group.conn.close()
    os.environ.pop("CLUBOPS_DB_PATH", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac


async def seed_club(store_group: StoreGroup) -> Event:
    """写入社团成员与一个带报名表格的活动"""
    now = datetime.now(UTC)
    for member_id, name, email in [
        ("m-1", "Asha", "asha@club.org"),
        ("m-2", "Meera", "meera@club.org"),
        ("m-3", "Ravi", ""),
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
    event = Event(
        event_id=str(ULID()),
        title="Robotics Workshop",
        date=date(2026, 11, 14),
        time_display="2:00 PM - 5:00 PM",
        start_time="14:00",
        club_id=CLUB_ID,
        club_name="Robotics Club",
        response_sheet_url="https://docs.google.com/spreadsheets/d/sheet42/edit#gid=0",
        created_at=now,
        updated_at=now,
    )
    await store_group.event_store.create_event(event)
    await store_group.conn.commit()
    return event


@pytest_asyncio.fixture
async def seeded_event(integration_app) -> Event:
    return await seed_club(integration_app.state.store_group)


@pytest.fixture
def app_factory(external: FakeExternalServices):
    """按数据库路径组装 app 的工厂，用于模拟进程重启"""

    async def _build(db_path: str):
        return await build_app(db_path, external)

    return _build


@pytest.fixture
def seed():
    return seed_club
