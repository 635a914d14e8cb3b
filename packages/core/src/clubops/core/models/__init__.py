"""ClubOps Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .budget import BudgetItem, BudgetItemUpdate, BudgetTotals
from .enums import (
    OFFICER_ROLES,
    Attendance,
    BudgetCategory,
    ClubRole,
    EventKind,
    EventStatus,
    Outcome,
    TaskStatus,
    UserRole,
)
from .event import Event, EventCollision, EventDraft
from .member import ClubMember, Principal
from .participant import (
    AttendanceSummary,
    ImportSummary,
    Participant,
    TabularSource,
    email_key,
)
from .results import OperationResult, PublishResult
from .task import UNASSIGNED, EventTask

__all__ = [
    # 枚举
    "TaskStatus",
    "BudgetCategory",
    "Attendance",
    "EventKind",
    "EventStatus",
    "UserRole",
    "ClubRole",
    "Outcome",
    # 授权
    "OFFICER_ROLES",
    # 模型
    "Event",
    "EventDraft",
    "EventCollision",
    "EventTask",
    "UNASSIGNED",
    "BudgetItem",
    "BudgetItemUpdate",
    "BudgetTotals",
    "Participant",
    "ImportSummary",
    "AttendanceSummary",
    "TabularSource",
    "email_key",
    "ClubMember",
    "Principal",
    # 结果
    "OperationResult",
    "PublishResult",
]
