"""Event Domain Model -- 活动聚合根

Event 独占 tasks / budget 两个内嵌集合（随活动文档整体读写），
参与者则存放在独立的子集合中。引擎从不删除活动。
"""

from datetime import date as CalendarDate
from datetime import datetime

from pydantic import BaseModel, Field

from .budget import BudgetItem
from .enums import EventKind, EventStatus
from .task import EventTask


class Event(BaseModel):
    """Event 数据模型

    time_display 为自由格式展示字符串（如 "2:00 PM - 5:00 PM"），
    start_time 为可解析的 24 小时制开始时间（"HH:MM"）。
    """

    event_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="活动标题")
    content: str = Field(default="", description="活动描述")
    date: CalendarDate = Field(description="活动日期")
    time_display: str | None = Field(default=None, description="时间段展示字符串")
    start_time: str | None = Field(default=None, description="24 小时制开始时间 HH:MM")
    location: str | None = Field(default=None, description="地点")
    club_id: str = Field(description="所属社团 ID")
    club_name: str = Field(default="", description="所属社团名称")
    author_id: str = Field(default="", description="创建者 ID")
    author_name: str = Field(default="", description="创建者名称")
    kind: EventKind = Field(default=EventKind.EVENT, description="帖子类型")
    status: EventStatus = Field(default=EventStatus.PUBLISHED, description="生命周期状态")
    response_sheet_url: str | None = Field(default=None, description="报名表格 URL")
    rsvp_count: int = Field(default=0, ge=0, description="报名人数计数")
    tasks: list[EventTask] = Field(default_factory=list, description="任务集合")
    budget: list[BudgetItem] = Field(default_factory=list, description="预算集合")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")


class EventDraft(BaseModel):
    """发布前的活动草稿（由干事填写）"""

    title: str = Field(min_length=1, description="活动标题")
    content: str = Field(default="", description="活动描述")
    date: CalendarDate = Field(description="活动日期")
    time_display: str | None = Field(default=None, description="时间段展示字符串")
    start_time: str | None = Field(default=None, description="24 小时制开始时间 HH:MM")
    end_time: str | None = Field(
        default=None, description="24 小时制结束时间 HH:MM，time_display 为空时用于拼接"
    )
    location: str | None = None
    club_id: str = Field(description="所属社团 ID")
    club_name: str = Field(default="", description="所属社团名称")
    kind: EventKind = Field(default=EventKind.EVENT)
    response_sheet_url: str | None = None


class EventCollision(BaseModel):
    """冲突活动信息"""

    event_id: str = Field(description="冲突活动 ID")
    title: str = Field(description="冲突活动标题")
    time: str = Field(description="冲突活动时间展示")
    club_name: str = Field(description="冲突活动所属社团")
