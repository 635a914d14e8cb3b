"""Participant Domain Model -- 活动报名记录

同一活动内邮箱（大小写不敏感）唯一，重复报名是 no-op 合并而非新增一行。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import Attendance


def email_key(email: str) -> str:
    """邮箱去重键：去空白 + 小写（只折叠大小写，不做 casefold 的字符展开）"""
    return email.strip().lower()


class Participant(BaseModel):
    """参与者数据模型"""

    participant_id: str = Field(description="唯一标识，ULID 格式")
    event_id: str = Field(description="所属活动 ID")
    name: str = Field(description="显示名称")
    email: str = Field(description="邮箱，去重自然键")
    registered_at: datetime = Field(description="报名时间")
    attendance: Attendance = Field(default=Attendance.PENDING, description="出勤状态")

    @property
    def email_key(self) -> str:
        return email_key(self.email)


class ImportSummary(BaseModel):
    """表格导入汇总 -- 缺少姓名/邮箱的行不计入任何一项"""

    imported: int = Field(default=0, ge=0, description="新增人数")
    skipped: int = Field(default=0, ge=0, description="已存在而跳过的人数")


class AttendanceSummary(BaseModel):
    """出勤统计"""

    present: int = 0
    absent: int = 0
    pending: int = 0
    total: int = 0


class TabularSource(BaseModel):
    """外部表格数据：表头 + 数据行（按原始顺序）"""

    headers: list[str] = Field(default_factory=list, description="表头行")
    rows: list[list[str]] = Field(default_factory=list, description="数据行")
