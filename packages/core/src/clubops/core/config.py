"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径与 SQLite 连接相关的可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("CLUBOPS_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "CLUBOPS_DB_PATH",
        str(_get_base_dir() / "sqlite" / "clubops.db"),
    )


# SQLite busy_timeout（毫秒），写冲突时由 SQLite 自身等待
SQLITE_BUSY_TIMEOUT_MS: int = int(
    os.environ.get("CLUBOPS_SQLITE_BUSY_TIMEOUT_MS", "5000")
)
