"""ClubOps Notify -- 外部协作者适配层

packages/notify 的公开接口导出：邮件发送与外部表格读取。
"""

# 配置
from .config import NotifyConfig, load_notify_config

# 核心组件
from .email import DispatchReport, EmailDispatcher, format_deadline

# 异常
from .exceptions import EmailDeliveryError, NotifyError, SheetFetchError
from .sheets import SheetFetcher, normalize_sheet_url, parse_csv

__all__ = [
    "EmailDispatcher",
    "DispatchReport",
    "format_deadline",
    "SheetFetcher",
    "normalize_sheet_url",
    "parse_csv",
    "NotifyConfig",
    "load_notify_config",
    "NotifyError",
    "SheetFetchError",
    "EmailDeliveryError",
]
