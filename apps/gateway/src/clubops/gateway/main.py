"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 邮件/表格协作者初始化 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from clubops.core.config import get_db_path
from clubops.core.operations import EventOperationsService
from clubops.core.store import create_store_group
from clubops.notify import EmailDispatcher, SheetFetcher, load_notify_config
from fastapi import FastAPI

from .errors import register_exception_handlers
from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import events, health, participants

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 与外部协作者，关闭时清理连接"""
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    notify_config = load_notify_config()
    app.state.notify_config = notify_config
    email_dispatcher = EmailDispatcher(notify_config)
    sheet_fetcher = SheetFetcher(timeout_s=notify_config.sheet_timeout_s)
    app.state.email_dispatcher = email_dispatcher
    app.state.sheet_fetcher = sheet_fetcher

    app.state.operations_service = EventOperationsService(
        store_group,
        task_notifier=email_dispatcher,
        update_notifier=email_dispatcher,
        sheet_source=sheet_fetcher,
    )
    log.info(
        "operations_service_initialized",
        email_configured=notify_config.is_email_configured,
        event_email_configured=notify_config.is_event_email_configured,
    )

    yield

    await email_dispatcher.aclose()
    await sheet_fetcher.aclose()
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="ClubOps Gateway",
        version="0.1.0",
        description="ClubOps 活动运营 API",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    setup_logging()

    app.include_router(events.router, tags=["events"])
    app.include_router(participants.router, tags=["participants"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
