"""错误响应 -- 统一 {"error": {"code", "message"}} 结构

引擎异常在此映射为 HTTP 状态码；typed result 的非 ok 结果由路由转换。
"""

import structlog
from clubops.core.exceptions import (
    EventNotFoundError,
    PermissionDeniedError,
    StoreError,
)
from clubops.core.models import OperationResult, Outcome
from clubops.notify.exceptions import SheetFetchError
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

_OUTCOME_STATUS = {
    Outcome.INVALID: (422, "INVALID_REQUEST"),
    Outcome.DUPLICATE: (409, "DUPLICATE"),
    Outcome.NOT_FOUND: (404, "NOT_FOUND"),
}


def error_response(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}, **extra},
    )


def result_error(result: OperationResult) -> JSONResponse:
    """非 ok 的 OperationResult -> 错误响应"""
    status_code, code = _OUTCOME_STATUS[result.outcome]
    return error_response(status_code, code, result.message or code.lower())


async def _permission_denied(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    log.warning("permission_denied", user_id=exc.user_id, target=exc.event_id)
    return error_response(403, "PERMISSION_DENIED", str(exc))


async def _event_not_found(request: Request, exc: EventNotFoundError) -> JSONResponse:
    return error_response(404, "EVENT_NOT_FOUND", str(exc))


async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    log.error("store_error", operation=exc.operation, error=str(exc.original_error))
    return error_response(503, "STORE_UNAVAILABLE", "Action did not complete, please retry")


async def _sheet_fetch_error(request: Request, exc: SheetFetchError) -> JSONResponse:
    return error_response(502, "SHEET_FETCH_FAILED", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PermissionDeniedError, _permission_denied)
    app.add_exception_handler(EventNotFoundError, _event_not_found)
    app.add_exception_handler(StoreError, _store_error)
    app.add_exception_handler(SheetFetchError, _sheet_fetch_error)
