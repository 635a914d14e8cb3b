"""活动时间归一化与冲突检测

时间模型：把日期 + 12 小时制开始时间（"H:MM AM/PM"）归一化为
(日期, 当日分钟数) 组合键。
冲突检测：同一日期、归一化开始时间完全相同（精确到分钟）的已发布活动
即视为冲突；不建模时长，也不做模糊窗口。冲突是全平台范围的，不限于本社团。
"""

import re
from datetime import date
from typing import NamedTuple

import structlog

from .exceptions import CollisionCheckError
from .models.enums import EventKind, EventStatus
from .models.event import Event, EventCollision
from .store.protocols import EventStore

log = structlog.get_logger()

# "2:30 PM" 或 "2:30 PM - 5:00 PM"，只取开头的开始时间
_CLOCK_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*(AM|PM)\b", re.IGNORECASE)
_CLOCK_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

MINUTES_PER_DAY = 24 * 60


def to_24h_hour(hour: int, period: str) -> int:
    """12 小时制转 24 小时制：12 AM -> 0，12 PM -> 12，其余 PM 加 12"""
    period = period.upper()
    if period == "PM" and hour != 12:
        return hour + 12
    if period == "AM" and hour == 12:
        return 0
    return hour


def parse_start_minute(text: str | None) -> int | None:
    """解析 "H:MM AM/PM" 开始时间为当日分钟数

    小时必须在 1-12，分钟在 00-59；无法解析时返回 None。

    Examples:
        "12:00 AM" -> 0, "12:00 PM" -> 720, "1:30 PM" -> 810
    """
    if not text:
        return None
    match = _CLOCK_12H.match(text)
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if not 1 <= hour <= 12 or minute > 59:
        return None
    return to_24h_hour(hour, match.group(3)) * 60 + minute


def parse_24h_minute(text: str | None) -> int | None:
    """解析 24 小时制 "HH:MM" 为当日分钟数"""
    if not text:
        return None
    match = _CLOCK_24H.match(text)
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def format_24h(minute_of_day: int) -> str:
    """当日分钟数 -> "HH:MM" """
    hours, minutes = divmod(minute_of_day % MINUTES_PER_DAY, 60)
    return f"{hours:02d}:{minutes:02d}"


def format_clock(minute_of_day: int) -> str:
    """当日分钟数 -> 12 小时制 "2:05 PM"（0 -> "12:00 AM"，720 -> "12:00 PM"）"""
    hours, minutes = divmod(minute_of_day % MINUTES_PER_DAY, 60)
    period = "AM" if hours < 12 else "PM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def format_time_range(start: str, end: str | None = None) -> str:
    """拼接时间段展示字符串，如 "2:00 PM - 5:00 PM" """
    return f"{start} - {end}" if end else start


def event_start_minute(event: Event) -> int | None:
    """活动开始时间（当日分钟数）

    优先使用 24 小时制 start_time，否则解析 time_display 的开头部分。
    """
    minute = parse_24h_minute(event.start_time)
    if minute is not None:
        return minute
    return parse_start_minute(event.time_display)


class TimeSlot(NamedTuple):
    """冲突比较用的组合键"""

    date: date
    minute_of_day: int

    @classmethod
    def of(cls, event: Event) -> "TimeSlot | None":
        """没有可解析开始时间的活动返回 None（不参与冲突检测）"""
        minute = event_start_minute(event)
        if minute is None:
            return None
        return cls(event.date, minute)


class CollisionDetector:
    """活动时间冲突检测器 -- 纯查询，无副作用"""

    def __init__(self, event_source: EventStore) -> None:
        self._events = event_source

    async def find_collisions(
        self,
        on_date: date,
        start_time_24h: str | None,
        candidate_event_id: str | None = None,
    ) -> list[EventCollision]:
        """查找同一日期、开始时间完全相同的已发布活动

        Args:
            on_date: 候选活动日期
            start_time_24h: 候选活动 24 小时制开始时间 "HH:MM"
            candidate_event_id: 更新已有活动时传入，结果中排除自身

        Returns:
            冲突列表（按活动来源顺序）；无冲突时为空列表

        Raises:
            CollisionCheckError: 无法获取活动列表（fail closed）
        """
        minute = parse_24h_minute(start_time_24h)
        if minute is None:
            if start_time_24h:
                log.warning("collision_check_unparseable_time", start_time=start_time_24h)
            return []

        candidate = TimeSlot(on_date, minute)
        try:
            events = await self._events.list_events()
        except Exception as e:
            log.error(
                "collision_check_failed",
                date=on_date.isoformat(),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise CollisionCheckError(e) from e

        collisions = [
            EventCollision(
                event_id=event.event_id,
                title=event.title,
                time=event.time_display or format_24h(minute),
                club_name=event.club_name,
            )
            for event in events
            if event.kind == EventKind.EVENT
            and event.status == EventStatus.PUBLISHED
            and event.event_id != candidate_event_id
            and TimeSlot.of(event) == candidate
        ]

        log.debug(
            "collision_check_completed",
            date=on_date.isoformat(),
            start_time=start_time_24h,
            collision_count=len(collisions),
        )
        return collisions
