"""活动修改授权

授权是 (principal, event) 的纯函数：平台管理员可修改任意活动；
干事（secretary / president / treasurer）只能修改本社团的活动。
读取不受限制。
"""

from .exceptions import PermissionDeniedError
from .models.enums import OFFICER_ROLES, UserRole
from .models.event import Event
from .models.member import Principal


def can_mutate(principal: Principal, event: Event) -> bool:
    """判断操作者是否可以修改该活动"""
    if principal.role == UserRole.ADMIN:
        return True
    return (
        principal.role in OFFICER_ROLES
        and principal.club_id is not None
        and principal.club_id == event.club_id
    )


def can_publish_for(principal: Principal, club_id: str) -> bool:
    """判断操作者是否可以为该社团发布活动"""
    if principal.role == UserRole.ADMIN:
        return True
    return principal.role in OFFICER_ROLES and principal.club_id == club_id


def require_mutation(principal: Principal, event: Event) -> None:
    """授权检查，未授权时抛出 PermissionDeniedError"""
    if not can_mutate(principal, event):
        raise PermissionDeniedError(principal.user_id, event.event_id)
