"""Core 异常体系

只有传输类失败与授权失败以异常形式传播；校验/重复等可预期情况
通过 OperationResult 返回。
"""


class EngineError(Exception):
    """活动运营引擎基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class StoreError(EngineError):
    """持久化层读写失败（传输类，可重试）

    事务已回滚，调用方不应假设任何部分状态已保存。
    """

    def __init__(self, operation: str, original_error: Exception) -> None:
        super().__init__(
            f"存储操作失败: {operation} -- {original_error}",
            recoverable=True,
        )
        self.operation = operation
        self.original_error = original_error


class CollisionCheckError(StoreError):
    """冲突检查无法取得活动列表

    检测器 fail closed：调用方必须把"冲突状态未知"当作警告处理。
    """

    def __init__(self, original_error: Exception) -> None:
        super().__init__("list_events", original_error)


class EventNotFoundError(EngineError):
    """活动不存在"""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"活动不存在: {event_id}", recoverable=False)
        self.event_id = event_id


class PermissionDeniedError(EngineError):
    """操作者无权修改该活动"""

    def __init__(self, user_id: str, event_id: str) -> None:
        super().__init__(
            f"用户 {user_id} 无权修改活动 {event_id}",
            recoverable=False,
        )
        self.user_id = user_id
        self.event_id = event_id
