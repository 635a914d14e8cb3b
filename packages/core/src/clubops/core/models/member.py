"""成员与操作者模型

ClubMember 是社团名册条目（用于解析任务负责人邮箱）；
Principal 是显式传入每个门面调用的授权上下文。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import ClubRole, UserRole


class ClubMember(BaseModel):
    """社团成员"""

    member_id: str = Field(description="唯一标识")
    club_id: str = Field(description="所属社团 ID")
    name: str = Field(description="成员姓名")
    email: str = Field(default="", description="成员邮箱，可能为空")
    role: ClubRole = Field(default=ClubRole.MEMBER, description="社团内角色")
    joined_at: datetime = Field(description="加入时间")


class Principal(BaseModel):
    """操作者授权上下文"""

    user_id: str = Field(description="用户 ID")
    name: str = Field(default="Unknown", description="用户显示名称")
    role: UserRole = Field(default=UserRole.USER, description="平台角色")
    club_id: str | None = Field(default=None, description="干事所属社团 ID")
