"""操作结果模型

校验失败、重复、目标不存在属于可预期结果，由检测到它的组件就地返回，
不作为异常抛出。
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from .enums import Outcome
from .event import EventCollision

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """带类型的操作结果"""

    outcome: Outcome = Field(default=Outcome.OK, description="结果类型")
    value: T | None = Field(default=None, description="成功时的返回值")
    message: str = Field(default="", description="面向用户的说明")

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.OK

    @classmethod
    def success(cls, value: T, message: str = "") -> "OperationResult[T]":
        return cls(outcome=Outcome.OK, value=value, message=message)

    @classmethod
    def invalid(cls, message: str) -> "OperationResult[T]":
        return cls(outcome=Outcome.INVALID, message=message)

    @classmethod
    def duplicate(cls, message: str, value: T | None = None) -> "OperationResult[T]":
        return cls(outcome=Outcome.DUPLICATE, value=value, message=message)

    @classmethod
    def not_found(cls, message: str) -> "OperationResult[T]":
        return cls(outcome=Outcome.NOT_FOUND, message=message)


class PublishResult(BaseModel):
    """活动发布结果

    collisions 非空或 collision_unknown 为 True 时，除非 force，否则不发布。
    """

    published: bool = Field(description="是否已发布")
    event_id: str | None = Field(default=None, description="新活动 ID")
    collisions: list[EventCollision] = Field(default_factory=list)
    collision_unknown: bool = Field(default=False, description="冲突检查不可用")
    message: str = Field(default="")
