"""依赖注入模块 -- 通过 FastAPI Depends 注入运营服务与操作者身份

服务实例通过 app.state 管理，在 lifespan 中初始化/清理。
操作者身份由上游认证网关写入请求头。
"""

from clubops.core.models import Principal, UserRole
from clubops.core.operations import EventOperationsService
from fastapi import Header, Request


def get_service(request: Request) -> EventOperationsService:
    """从 app.state 获取 EventOperationsService 实例"""
    return request.app.state.operations_service


def get_principal(
    x_user_id: str = Header(default="anonymous"),
    x_user_name: str = Header(default="Unknown"),
    x_user_role: UserRole = Header(default=UserRole.USER),
    x_club_id: str | None = Header(default=None),
) -> Principal:
    """从请求头构造授权上下文"""
    return Principal(
        user_id=x_user_id,
        name=x_user_name,
        role=x_user_role,
        club_id=x_club_id or None,
    )
