"""BudgetItem Domain Model -- 活动支出台账条目

金额为单一币种的非负数，台账本身不校验负数（由调用侧校验层负责）。
paid 是手动标记，不由 actual_cost 推导。
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from .enums import BudgetCategory


class BudgetItem(BaseModel):
    """预算条目数据模型"""

    item_id: str = Field(description="唯一标识，ULID 格式")
    description: str = Field(min_length=1, description="支出描述")
    category: BudgetCategory = Field(default=BudgetCategory.MISC, description="分类")
    estimated_cost: Decimal = Field(default=Decimal("0"), description="预估金额")
    actual_cost: Decimal = Field(default=Decimal("0"), description="实际金额")
    paid: bool = Field(default=False, description="是否已支付")
    notes: str | None = Field(default=None, description="备注")


class BudgetItemUpdate(BaseModel):
    """预算条目局部更新 -- 只覆盖显式设置的字段"""

    description: str | None = Field(default=None, min_length=1)
    category: BudgetCategory | None = None
    estimated_cost: Decimal | None = None
    actual_cost: Decimal | None = None
    paid: bool | None = None
    notes: str | None = None


class BudgetTotals(BaseModel):
    """台账汇总（每次查询时从条目重新计算，不落库）"""

    total_estimated: Decimal = Field(description="预估合计")
    total_actual: Decimal = Field(description="实际合计")
    total_paid: Decimal = Field(description="已支付合计（paid 条目的 actual_cost）")
    total_unpaid: Decimal = Field(description="未支付合计 = total_actual - total_paid")
