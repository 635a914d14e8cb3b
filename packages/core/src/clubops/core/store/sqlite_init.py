"""SQLite 数据库初始化

PRAGMA 配置 + 三张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

from ..config import SQLITE_BUSY_TIMEOUT_MS

# events 表 DDL（tasks / budget 以 JSON 数组内嵌在活动文档中）
_EVENTS_DDL = """
CREATE TABLE IF NOT EXISTS events (
    event_id            TEXT PRIMARY KEY,
    title               TEXT NOT NULL DEFAULT '',
    content             TEXT NOT NULL DEFAULT '',
    date                TEXT NOT NULL,
    time_display        TEXT,
    start_time          TEXT,
    location            TEXT,
    club_id             TEXT NOT NULL,
    club_name           TEXT NOT NULL DEFAULT '',
    author_id           TEXT NOT NULL DEFAULT '',
    author_name         TEXT NOT NULL DEFAULT '',
    kind                TEXT NOT NULL DEFAULT 'event',
    status              TEXT NOT NULL DEFAULT 'published',
    response_sheet_url  TEXT,
    rsvp_count          INTEGER NOT NULL DEFAULT 0,
    tasks               TEXT NOT NULL DEFAULT '[]',
    budget              TEXT NOT NULL DEFAULT '[]',
    created_at          TEXT NOT NULL,
    updated_at          TEXT NOT NULL
);
"""

_EVENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_events_date ON events(date);",
    "CREATE INDEX IF NOT EXISTS idx_events_club_id ON events(club_id);",
    "CREATE INDEX IF NOT EXISTS idx_events_created_at ON events(created_at DESC);",
]

# participants 子集合 DDL
_PARTICIPANTS_DDL = """
CREATE TABLE IF NOT EXISTS participants (
    participant_id  TEXT PRIMARY KEY,
    event_id        TEXT NOT NULL,
    name            TEXT NOT NULL,
    email           TEXT NOT NULL,
    email_key       TEXT NOT NULL,
    registered_at   TEXT NOT NULL,
    attendance      TEXT NOT NULL DEFAULT 'pending',

    FOREIGN KEY (event_id) REFERENCES events(event_id)
);
"""

_PARTICIPANTS_INDEXES = [
    # 同一活动内邮箱大小写不敏感唯一
    (
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_participants_event_email "
        "ON participants(event_id, email_key);"
    ),
    (
        "CREATE INDEX IF NOT EXISTS idx_participants_registered_at "
        "ON participants(event_id, registered_at DESC);"
    ),
]

# club_members 表 DDL
_MEMBERS_DDL = """
CREATE TABLE IF NOT EXISTS club_members (
    member_id   TEXT PRIMARY KEY,
    club_id     TEXT NOT NULL,
    name        TEXT NOT NULL,
    email       TEXT NOT NULL DEFAULT '',
    role        TEXT NOT NULL DEFAULT 'member',
    joined_at   TEXT NOT NULL
);
"""

_MEMBERS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_club_members_club_id ON club_members(club_id);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS};")

    # 创建表
    await conn.execute(_EVENTS_DDL)
    await conn.execute(_PARTICIPANTS_DDL)
    await conn.execute(_MEMBERS_DDL)

    # 创建索引
    for idx_sql in _EVENTS_INDEXES + _PARTICIPANTS_INDEXES + _MEMBERS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
