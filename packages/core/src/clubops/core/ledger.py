"""BudgetLedger -- 活动支出台账

与任务看板一样只修改内存中的集合，由门面统一保存。
汇总值在每次查询时从条目重新计算，从不缓存。
"""

from decimal import Decimal

import structlog
from ulid import ULID

from .models.budget import BudgetItem, BudgetItemUpdate, BudgetTotals
from .models.enums import BudgetCategory
from .models.results import OperationResult

log = structlog.get_logger()

_ZERO = Decimal("0")


class BudgetLedger:
    """单个活动的预算台账"""

    def __init__(self, items: list[BudgetItem] | None = None) -> None:
        self._items: list[BudgetItem] = list(items or [])

    @property
    def items(self) -> list[BudgetItem]:
        """当前条目快照"""
        return list(self._items)

    def get_item(self, item_id: str) -> BudgetItem | None:
        return next((b for b in self._items if b.item_id == item_id), None)

    def add_item(
        self,
        description: str,
        category: BudgetCategory = BudgetCategory.MISC,
        estimated_cost: Decimal | int | float = 0,
        notes: str | None = None,
    ) -> OperationResult[BudgetItem]:
        """新增条目，actual_cost 初始为 0，paid 初始为 False

        负数金额不在此处拒绝，由调用侧校验层处理。
        """
        description = description.strip()
        if not description:
            return OperationResult.invalid("支出描述不能为空")

        item = BudgetItem(
            item_id=str(ULID()),
            description=description,
            category=BudgetCategory(category),
            estimated_cost=Decimal(str(estimated_cost)),
            actual_cost=_ZERO,
            paid=False,
            notes=notes,
        )
        self._items.append(item)
        log.info("budget_item_added", item_id=item.item_id, category=item.category.value)
        return OperationResult.success(item)

    def update_item(
        self,
        item_id: str,
        changes: BudgetItemUpdate,
    ) -> OperationResult[BudgetItem]:
        """覆盖显式设置的字段，字段之间互不联动"""
        fields = changes.model_dump(exclude_unset=True)
        if "description" in fields and not (fields["description"] or "").strip():
            return OperationResult.invalid("支出描述不能为空")
        # 只有 notes 允许显式清空
        fields = {k: v for k, v in fields.items() if v is not None or k == "notes"}

        for index, item in enumerate(self._items):
            if item.item_id == item_id:
                updated = BudgetItem.model_validate({**item.model_dump(), **fields})
                self._items[index] = updated
                log.info("budget_item_updated", item_id=item_id, fields=sorted(fields))
                return OperationResult.success(updated)
        return OperationResult.not_found(f"预算条目不存在: {item_id}")

    def delete_item(self, item_id: str) -> OperationResult[BudgetItem]:
        """无条件删除条目"""
        item = self.get_item(item_id)
        if item is None:
            return OperationResult.not_found(f"预算条目不存在: {item_id}")
        self._items = [b for b in self._items if b.item_id != item_id]
        log.info("budget_item_deleted", item_id=item_id)
        return OperationResult.success(item)

    def totals(self) -> BudgetTotals:
        """从当前条目重新计算汇总"""
        total_estimated = sum((b.estimated_cost for b in self._items), _ZERO)
        total_actual = sum((b.actual_cost for b in self._items), _ZERO)
        total_paid = sum((b.actual_cost for b in self._items if b.paid), _ZERO)
        return BudgetTotals(
            total_estimated=total_estimated,
            total_actual=total_actual,
            total_paid=total_paid,
            total_unpaid=total_actual - total_paid,
        )

    def by_category(self) -> dict[BudgetCategory, BudgetTotals]:
        """按分类汇总（只包含出现过的分类）"""
        grouped: dict[BudgetCategory, list[BudgetItem]] = {}
        for item in self._items:
            grouped.setdefault(item.category, []).append(item)
        return {
            category: BudgetLedger(items).totals()
            for category, items in grouped.items()
        }
