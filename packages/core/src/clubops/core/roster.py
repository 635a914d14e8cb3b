"""ParticipantRoster -- 活动报名名册

与任务/预算不同，名册的每次修改都立即落盘（出勤标记、实时导入频率更高）。
去重以邮箱为自然键（大小写不敏感），重复报名是 no-op。
"""

from datetime import UTC, datetime

import aiosqlite
import structlog
from ulid import ULID

from .models.enums import Attendance
from .models.participant import (
    AttendanceSummary,
    ImportSummary,
    Participant,
    TabularSource,
    email_key,
)
from .models.results import OperationResult
from .store import transaction
from .store.participant_store import SqliteParticipantStore

log = structlog.get_logger()


def _normalize_header(header: str) -> str:
    return header.replace('"', "").strip().lower()


def find_columns(headers: list[str]) -> tuple[int | None, int | None]:
    """按表头子串定位姓名列与邮箱列

    姓名列：第一个包含 "name" 的表头；邮箱列：第一个包含 "email" 或 "mail" 的表头。

    Returns:
        (name_index, email_index)，找不到的列为 None
    """
    normalized = [_normalize_header(h) for h in headers]
    name_idx = next((i for i, h in enumerate(normalized) if "name" in h), None)
    email_idx = next(
        (i for i, h in enumerate(normalized) if "email" in h or "mail" in h),
        None,
    )
    return name_idx, email_idx


def _cell(row: list[str], index: int) -> str:
    if index >= len(row):
        return ""
    return row[index].replace('"', "").strip()


class ParticipantRoster:
    """单个活动的参与者名册"""

    def __init__(
        self,
        event_id: str,
        conn: aiosqlite.Connection,
        participant_store: SqliteParticipantStore,
        participants: list[Participant] | None = None,
    ) -> None:
        self._event_id = event_id
        self._conn = conn
        self._store = participant_store
        self._participants: list[Participant] = list(participants or [])

    @property
    def event_id(self) -> str:
        return self._event_id

    @property
    def participants(self) -> list[Participant]:
        """当前名册快照（按报名时间倒序）"""
        return list(self._participants)

    async def refresh(self) -> list[Participant]:
        """从存储重新加载名册"""
        self._participants = await self._store.list_participants(self._event_id)
        return self.participants

    def find_by_email(self, email: str) -> Participant | None:
        key = email_key(email)
        return next((p for p in self._participants if p.email_key == key), None)

    def get(self, participant_id: str) -> Participant | None:
        return next(
            (p for p in self._participants if p.participant_id == participant_id),
            None,
        )

    async def add_participant(self, name: str, email: str) -> OperationResult[Participant]:
        """登记参与者

        Returns:
            ok: 新增成功；duplicate: 邮箱已登记（不做任何修改）；
            invalid: 姓名或邮箱为空

        Raises:
            StoreError: 持久化失败
        """
        name, email = name.strip(), email.strip()
        if not name or not email:
            return OperationResult.invalid("姓名和邮箱均不能为空")

        existing = self.find_by_email(email)
        if existing is not None:
            return OperationResult.duplicate("该邮箱已登记此活动", existing)

        participant = Participant(
            participant_id=str(ULID()),
            event_id=self._event_id,
            name=name,
            email=email,
            registered_at=datetime.now(UTC),
            attendance=Attendance.PENDING,
        )
        added = await transaction.add_participant(self._conn, self._store, participant)
        if not added:
            # 快照之外的并发登记已被唯一约束拦截
            log.info("participant_duplicate_in_store", event_id=self._event_id)
            return OperationResult.duplicate("该邮箱已登记此活动")

        self._participants.insert(0, participant)
        log.info(
            "participant_added",
            event_id=self._event_id,
            participant_id=participant.participant_id,
        )
        return OperationResult.success(participant)

    async def import_rows(self, table: TabularSource) -> OperationResult[ImportSummary]:
        """从外部表格批量导入并去重

        按源顺序逐行处理：同时与导入前名册及本批次已导入的邮箱去重（先到先得）。
        缺少姓名或邮箱不含 "@" 的行直接丢弃，不计入 imported / skipped。

        Returns:
            ok + ImportSummary；表头中找不到姓名/邮箱列时 outcome=invalid 且不处理任何行
        """
        name_idx, email_idx = find_columns(table.headers)
        if name_idx is None or email_idx is None:
            log.warning(
                "participant_import_columns_missing",
                event_id=self._event_id,
                headers=table.headers,
            )
            return OperationResult.invalid("Could not find Name and Email columns in the sheet")

        summary = ImportSummary()
        seen = {p.email_key for p in self._participants}

        for row in table.rows:
            name = _cell(row, name_idx)
            email = _cell(row, email_idx)
            if not name or "@" not in email:
                continue

            key = email_key(email)
            if key in seen:
                summary.skipped += 1
                continue

            result = await self.add_participant(name, email)
            seen.add(key)
            if result.ok:
                summary.imported += 1
            else:
                summary.skipped += 1

        log.info(
            "participant_import_completed",
            event_id=self._event_id,
            imported=summary.imported,
            skipped=summary.skipped,
            row_count=len(table.rows),
        )
        return OperationResult.success(summary)

    async def set_attendance(
        self,
        participant_id: str,
        status: Attendance,
    ) -> OperationResult[Participant]:
        """覆盖出勤状态，只接受 present / absent

        参与者不存在时不修改名册。
        """
        status = Attendance(status)
        if status == Attendance.PENDING:
            return OperationResult.invalid("出勤状态只能设置为 present 或 absent")

        participant = self.get(participant_id)
        if participant is None:
            return OperationResult.not_found(f"参与者不存在: {participant_id}")

        updated_rows = await transaction.update_attendance(
            self._conn, self._store, self._event_id, participant_id, status.value
        )
        if not updated_rows:
            return OperationResult.not_found(f"参与者不存在: {participant_id}")

        updated = participant.model_copy(update={"attendance": status})
        self._participants = [
            updated if p.participant_id == participant_id else p
            for p in self._participants
        ]
        log.info(
            "participant_attendance_set",
            event_id=self._event_id,
            participant_id=participant_id,
            attendance=status.value,
        )
        return OperationResult.success(updated)

    async def remove_participant(self, participant_id: str) -> OperationResult[Participant]:
        """删除参与者（UI 侧负责二次确认）"""
        participant = self.get(participant_id)
        removed = await transaction.remove_participant(
            self._conn, self._store, self._event_id, participant_id
        )
        if not removed:
            return OperationResult.not_found(f"参与者不存在: {participant_id}")

        self._participants = [
            p for p in self._participants if p.participant_id != participant_id
        ]
        log.info(
            "participant_removed",
            event_id=self._event_id,
            participant_id=participant_id,
        )
        return OperationResult.success(participant)

    def attendance_summary(self) -> AttendanceSummary:
        """出勤统计"""
        summary = AttendanceSummary(total=len(self._participants))
        for p in self._participants:
            if p.attendance == Attendance.PRESENT:
                summary.present += 1
            elif p.attendance == Attendance.ABSENT:
                summary.absent += 1
            else:
                summary.pending += 1
        return summary
