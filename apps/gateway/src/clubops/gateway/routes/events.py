"""活动运营路由

POST /api/events: 发布活动（有冲突时返回 409，除非 force=true）
POST /api/events/collisions: 冲突预检
GET  /api/events/{event_id}/operations: 任务、预算、参与者一次性读取
PUT  /api/events/{event_id}/operations: 任务 + 预算合并保存
POST/PATCH/DELETE /api/events/{event_id}/tasks[/{task_id}]
POST/PATCH/DELETE /api/events/{event_id}/budget[/{item_id}]

任务与预算的单项修改都走 "加载 -> 修改 -> 合并保存"。
"""

from datetime import UTC, datetime
from datetime import date as CalendarDate
from decimal import Decimal

import structlog
from clubops.core.exceptions import CollisionCheckError
from clubops.core.models import (
    BudgetCategory,
    BudgetItem,
    BudgetItemUpdate,
    EventDraft,
    EventTask,
    Principal,
    TaskStatus,
)
from clubops.core.operations import EventOperations, EventOperationsService
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_principal, get_service
from ..errors import error_response, result_error

log = structlog.get_logger()

router = APIRouter()


class CollisionCheckRequest(BaseModel):
    """冲突预检请求体"""

    date: CalendarDate
    start_time: str | None = Field(default=None, description="24 小时制 HH:MM")
    candidate_event_id: str | None = Field(default=None, description="编辑中的活动 ID")


class BudgetItemPayload(BaseModel):
    """合并保存中的预算条目 -- 金额不允许为负"""

    item_id: str
    description: str = Field(min_length=1)
    category: BudgetCategory = BudgetCategory.MISC
    estimated_cost: Decimal = Field(default=Decimal("0"), ge=0)
    actual_cost: Decimal = Field(default=Decimal("0"), ge=0)
    paid: bool = False
    notes: str | None = None

    def to_item(self) -> BudgetItem:
        return BudgetItem(**self.model_dump())


class OperationsSaveRequest(BaseModel):
    """合并保存请求体"""

    tasks: list[EventTask] = Field(default_factory=list)
    budget: list[BudgetItemPayload] = Field(default_factory=list)


class TaskCreateRequest(BaseModel):
    """任务创建请求体"""

    title: str = Field(description="任务标题")
    assigned_to: list[str] = Field(default_factory=list, description="负责人姓名")
    deadline: CalendarDate | None = None


class TaskStatusRequest(BaseModel):
    status: TaskStatus


class BudgetItemCreateRequest(BaseModel):
    """预算条目创建请求体 -- 金额不允许为负"""

    description: str
    category: BudgetCategory = BudgetCategory.MISC
    estimated_cost: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str | None = None


class BudgetItemPatchRequest(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    category: BudgetCategory | None = None
    estimated_cost: Decimal | None = Field(default=None, ge=0)
    actual_cost: Decimal | None = Field(default=None, ge=0)
    paid: bool | None = None
    notes: str | None = None


def serialize_operations(ops: EventOperations, today: CalendarDate | None = None) -> dict:
    """EventOperations -> 响应体

    task_summary.overdue 以 UTC 当日为准列出已过期且未完成的任务 ID。
    """
    today = today or datetime.now(UTC).date()
    return {
        "event": {
            "event_id": ops.event.event_id,
            "title": ops.event.title,
            "date": ops.event.date.isoformat(),
            "time_display": ops.event.time_display,
            "club_id": ops.event.club_id,
            "club_name": ops.event.club_name,
            "rsvp_count": ops.event.rsvp_count,
        },
        "tasks": [t.model_dump(mode="json") for t in ops.tasks.tasks],
        "task_summary": {
            "status_counts": {
                status.value: count for status, count in ops.tasks.status_counts().items()
            },
            "overdue": [t.task_id for t in ops.tasks.overdue(today)],
        },
        "budget": {
            "items": [b.model_dump(mode="json") for b in ops.budget.items],
            "totals": ops.budget.totals().model_dump(mode="json"),
            "by_category": {
                category.value: totals.model_dump(mode="json")
                for category, totals in ops.budget.by_category().items()
            },
        },
        "participants": {
            "items": [p.model_dump(mode="json") for p in ops.roster.participants],
            "summary": ops.roster.attendance_summary().model_dump(mode="json"),
        },
    }


# ---- 发布与冲突 ----


@router.post("/api/events")
async def publish_event(
    body: EventDraft,
    force: bool = Query(default=False, description="忽略冲突强制发布"),
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    """发布活动

    - 发布成功返回 201
    - 同日同开始时间已有活动返回 409 + collisions
    - 冲突检查不可用返回 409 + COLLISION_UNKNOWN
    """
    result = await service.publish_event(principal, body, force=force)
    if result.published:
        return JSONResponse(status_code=201, content=result.model_dump(mode="json"))

    code = "COLLISION_UNKNOWN" if result.collision_unknown else "EVENT_COLLISION"
    return error_response(
        409,
        code,
        result.message,
        collisions=[c.model_dump(mode="json") for c in result.collisions],
    )


@router.post("/api/events/collisions")
async def check_collisions(
    body: CollisionCheckRequest,
    service: EventOperationsService = Depends(get_service),
):
    """冲突预检，检查不可用时返回 503"""
    try:
        collisions = await service.check_collisions(
            body.date, body.start_time, body.candidate_event_id
        )
    except CollisionCheckError as e:
        log.warning("collision_check_unavailable", error=str(e))
        return error_response(503, "COLLISION_UNKNOWN", "Could not verify schedule conflicts")
    return {"collisions": [c.model_dump(mode="json") for c in collisions]}


# ---- 合并读写 ----


@router.get("/api/events/{event_id}/operations")
async def get_operations(
    event_id: str,
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    return serialize_operations(ops)


@router.put("/api/events/{event_id}/operations")
async def save_operations(
    event_id: str,
    body: OperationsSaveRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    """任务与预算整体覆盖保存（两者同时成功或同时失败）"""
    budget_items = [item.to_item() for item in body.budget]
    await service.save_event_operations(principal, event_id, body.tasks, budget_items)
    return {"event_id": event_id, "saved": True}


# ---- 任务 ----


@router.post("/api/events/{event_id}/tasks")
async def create_task(
    event_id: str,
    body: TaskCreateRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = await service.create_task(
        principal, ops, body.title, body.assigned_to, body.deadline
    )
    if not result.ok:
        return result_error(result)
    await service.save(principal, ops)
    return JSONResponse(status_code=201, content=result.value.model_dump(mode="json"))


@router.patch("/api/events/{event_id}/tasks/{task_id}")
async def set_task_status(
    event_id: str,
    task_id: str,
    body: TaskStatusRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = service.set_task_status(principal, ops, task_id, body.status)
    if not result.ok:
        return result_error(result)
    await service.save(principal, ops)
    return result.value.model_dump(mode="json")


@router.delete("/api/events/{event_id}/tasks/{task_id}")
async def delete_task(
    event_id: str,
    task_id: str,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = service.delete_task(principal, ops, task_id)
    if not result.ok:
        return result_error(result)
    await service.save(principal, ops)
    return {"task_id": task_id, "deleted": True}


# ---- 预算 ----


@router.post("/api/events/{event_id}/budget")
async def add_budget_item(
    event_id: str,
    body: BudgetItemCreateRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = service.add_budget_item(
        principal, ops, body.description, body.category, body.estimated_cost, body.notes
    )
    if not result.ok:
        return result_error(result)
    await service.save(principal, ops)
    return JSONResponse(status_code=201, content=result.value.model_dump(mode="json"))


@router.patch("/api/events/{event_id}/budget/{item_id}")
async def update_budget_item(
    event_id: str,
    item_id: str,
    body: BudgetItemPatchRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    changes = BudgetItemUpdate(**body.model_dump(exclude_unset=True))
    result = service.update_budget_item(principal, ops, item_id, changes)
    if not result.ok:
        return result_error(result)
    await service.save(principal, ops)
    return result.value.model_dump(mode="json")


@router.delete("/api/events/{event_id}/budget/{item_id}")
async def delete_budget_item(
    event_id: str,
    item_id: str,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = service.delete_budget_item(principal, ops, item_id)
    if not result.ok:
        return result_error(result)
    await service.save(principal, ops)
    return {"item_id": item_id, "deleted": True}
