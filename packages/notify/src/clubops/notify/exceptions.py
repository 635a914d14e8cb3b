"""Notify 异常体系"""


class NotifyError(Exception):
    """Notify 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class SheetFetchError(NotifyError):
    """外部表格读取失败（网络错误、非 2xx、表格未公开发布等）

    由门面直接传给调用方，提示干事检查表格的发布设置。
    """

    def __init__(
        self,
        sheet_url: str,
        original_error: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        """
        Args:
            sheet_url: 实际请求的导出地址
            original_error: 原始异常
            status_code: HTTP 状态码（传输层失败时为 None）
        """
        detail = f"HTTP {status_code}" if status_code is not None else str(original_error)
        super().__init__(
            "Failed to fetch the sheet. Make sure it is published to the web "
            f"or shared as 'Anyone with the link': {detail}",
            recoverable=True,
        )
        self.sheet_url = sheet_url
        self.original_error = original_error
        self.status_code = status_code


class EmailDeliveryError(NotifyError):
    """单封邮件投递失败

    只在 EmailDispatcher 内部产生并记录到 DispatchReport，不向调用方抛出。
    """

    def __init__(self, recipient: str, original_error: Exception) -> None:
        super().__init__(f"邮件投递失败: {recipient} -- {original_error}", recoverable=True)
        self.recipient = recipient
        self.original_error = original_error
