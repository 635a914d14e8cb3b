"""枚举定义 -- 活动运营引擎的封闭取值集合

包含 TaskStatus（任意状态之间均可切换，无终态）、BudgetCategory、Attendance、
EventKind、EventStatus、UserRole、ClubRole、Outcome 枚举。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态 -- 手动跟踪工具，任意状态之间均可切换"""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class BudgetCategory(StrEnum):
    """预算条目分类（封闭枚举）"""

    VENUE = "venue"
    CATERING = "catering"
    EQUIPMENT = "equipment"
    MARKETING = "marketing"
    PRIZES = "prizes"
    TRANSPORT = "transport"
    MISC = "misc"


class Attendance(StrEnum):
    """参与者出勤状态，pending 仅作为默认值"""

    PRESENT = "present"
    ABSENT = "absent"
    PENDING = "pending"


class EventKind(StrEnum):
    """帖子类型：只有 event 参与冲突检测"""

    EVENT = "event"
    ANNOUNCEMENT = "announcement"


class EventStatus(StrEnum):
    """活动生命周期状态"""

    DRAFT = "draft"
    PUBLISHED = "published"


class UserRole(StrEnum):
    """平台用户角色"""

    USER = "user"
    CLUB_SECRETARY = "club-secretary"
    PRESIDENT = "president"
    TREASURER = "treasurer"
    ADMIN = "admin"


# 可修改本社团活动的干事角色
OFFICER_ROLES: set[UserRole] = {
    UserRole.CLUB_SECRETARY,
    UserRole.PRESIDENT,
    UserRole.TREASURER,
}


class ClubRole(StrEnum):
    """社团成员角色"""

    PRESIDENT = "president"
    VICE_PRESIDENT = "vice-president"
    TREASURER = "treasurer"
    SECRETARY = "secretary"
    COORDINATOR = "coordinator"
    MEMBER = "member"


class Outcome(StrEnum):
    """操作结果类型 -- 校验/重复/不存在均以结果返回，不抛异常"""

    OK = "ok"
    INVALID = "invalid"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
