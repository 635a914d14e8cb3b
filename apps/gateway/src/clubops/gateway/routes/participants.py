"""参与者名册路由

名册修改立即落盘，不经过任务/预算的合并保存。

POST   /api/events/{event_id}/participants: 登记参与者（重复邮箱返回 409）
POST   /api/events/{event_id}/participants/import: 从报名表格导入
PATCH  /api/events/{event_id}/participants/{participant_id}/attendance
DELETE /api/events/{event_id}/participants/{participant_id}
POST   /api/events/{event_id}/announcements: 向参与者发送活动更新邮件
"""

from clubops.core.models import Attendance, Principal
from clubops.core.operations import EventOperationsService
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_principal, get_service
from ..errors import result_error

router = APIRouter()


class ParticipantCreateRequest(BaseModel):
    name: str = Field(description="参与者姓名")
    email: str = Field(description="参与者邮箱")


class AttendanceRequest(BaseModel):
    status: Attendance


class AnnouncementRequest(BaseModel):
    message: str = Field(description="更新内容")


@router.post("/api/events/{event_id}/participants")
async def add_participant(
    event_id: str,
    body: ParticipantCreateRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = await service.add_participant(principal, ops, body.name, body.email)
    if not result.ok:
        return result_error(result)
    return JSONResponse(status_code=201, content=result.value.model_dump(mode="json"))


@router.post("/api/events/{event_id}/participants/import")
async def import_participants(
    event_id: str,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    """从活动绑定的报名表格导入，返回 imported / skipped 计数"""
    ops = await service.load_event_operations(event_id)
    result = await service.import_participants_from_sheet(principal, ops)
    if not result.ok:
        return result_error(result)
    return result.value.model_dump(mode="json")


@router.patch("/api/events/{event_id}/participants/{participant_id}/attendance")
async def set_attendance(
    event_id: str,
    participant_id: str,
    body: AttendanceRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = await service.set_attendance(principal, ops, participant_id, body.status)
    if not result.ok:
        return result_error(result)
    return result.value.model_dump(mode="json")


@router.delete("/api/events/{event_id}/participants/{participant_id}")
async def remove_participant(
    event_id: str,
    participant_id: str,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    ops = await service.load_event_operations(event_id)
    result = await service.remove_participant(principal, ops, participant_id)
    if not result.ok:
        return result_error(result)
    return {"participant_id": participant_id, "deleted": True}


@router.post("/api/events/{event_id}/announcements")
async def announce_event_update(
    event_id: str,
    body: AnnouncementRequest,
    principal: Principal = Depends(get_principal),
    service: EventOperationsService = Depends(get_service),
):
    """邮件尽力而为发送，返回收件人数量"""
    result = await service.announce_event_update(principal, event_id, body.message)
    if not result.ok:
        return result_error(result)
    return {"event_id": event_id, "recipients": result.value}
