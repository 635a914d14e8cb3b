"""EventTask Domain Model -- 活动内的委派工作项

负责人姓名列表与邮箱列表平行存储；邮箱只在创建时通过成员名册解析一次，
之后名册变化不会回溯更新任务。
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from .enums import TaskStatus

# 未选择成员时的占位负责人
UNASSIGNED = "Unassigned"


class EventTask(BaseModel):
    """活动任务数据模型

    assigned_to_emails 长度不超过 assigned_to：没有可解析邮箱的负责人不产生邮箱。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(min_length=1, description="任务标题")
    assigned_to: list[str] = Field(min_length=1, description="负责人姓名列表")
    assigned_to_emails: list[str] = Field(
        default_factory=list,
        description="负责人邮箱列表（创建时解析）",
    )
    deadline: date | None = Field(default=None, description="截止日期")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="当前状态")
    created_by: str = Field(description="创建者姓名")
    created_at: datetime = Field(description="创建时间")

    @model_validator(mode="after")
    def _check_addresses(self) -> "EventTask":
        if len(self.assigned_to_emails) > len(self.assigned_to):
            raise ValueError("assigned_to_emails 不能多于 assigned_to")
        return self

    @property
    def is_unassigned(self) -> bool:
        return UNASSIGNED in self.assigned_to
