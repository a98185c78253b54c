"""日结与服务报表 - 基于已拉取的数据生成汇总。

- build_day_closure: 日结汇总（销售、支出、应有现金、实际现金、差额）
- summarize_service_records: 服务记录汇总（营业额、提成、门店实收、按人统计）
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional

from . import cash, profit
from .models import Number, ServiceRecord, to_money


@dataclass
class DayClosureSummary:
    """日结汇总

    Attributes:
        closure_date: 日结日期。
        total_sales_amount: 销售总额。
        total_sales_count: 销售笔数。
        total_expenses_amount: 支出总额。
        total_expenses_count: 支出笔数。
        cash_in_hand_expected: 应有现金。
        cash_in_hand_actual: 实际清点现金。
        discrepancy: 差额（负数为短款）。
        notes: 备注。
    """
    closure_date: date
    total_sales_amount: Decimal
    total_sales_count: int
    total_expenses_amount: Decimal
    total_expenses_count: int
    cash_in_hand_expected: Decimal
    cash_in_hand_actual: Decimal
    discrepancy: Decimal
    notes: Optional[str] = None

    @property
    def is_balanced(self) -> bool:
        return self.discrepancy == 0


def build_day_closure(
    closure_date: date,
    sales: Iterable[Number],
    expenses: Iterable[Number],
    cash_sales: Number,
    cash_expenses: Number,
    cash_actual: Number,
    notes: Optional[str] = None,
) -> DayClosureSummary:
    """生成日结汇总

    Args:
        closure_date: 日结日期。
        sales: 当日每笔销售金额（所有支付方式）。
        expenses: 当日每笔支出金额（所有支付方式）。
        cash_sales: 当日现金销售总额。
        cash_expenses: 当日现金支出总额。
        cash_actual: 实际清点的现金。
        notes: 备注（可选）。
    """
    sales = [to_money(s) for s in sales]
    expenses = [to_money(e) for e in expenses]
    expected = cash.expected_cash(cash_sales, cash_expenses)
    actual = to_money(cash_actual)
    return DayClosureSummary(
        closure_date=closure_date,
        total_sales_amount=sum(sales, Decimal("0")),
        total_sales_count=len(sales),
        total_expenses_amount=sum(expenses, Decimal("0")),
        total_expenses_count=len(expenses),
        cash_in_hand_expected=expected,
        cash_in_hand_actual=actual,
        discrepancy=cash.discrepancy(expected, actual),
        notes=notes,
    )


@dataclass
class ServiceSummary:
    """服务记录汇总"""
    record_count: int = 0
    total_sales: Decimal = Decimal("0")
    total_commission: Decimal = Decimal("0")
    total_business: Decimal = Decimal("0")
    commission_by_provider: Dict[str, Decimal] = field(default_factory=dict)

    def net_profit(self, other_costs: Number = 0, total_expenses: Number = 0) -> Decimal:
        """净利：提成计入销售成本"""
        cost_of_sales = self.total_commission + to_money(other_costs)
        gross = profit.gross_profit(self.total_sales, cost_of_sales)
        return profit.net_profit(gross, total_expenses)

    def net_profit_margin(self, other_costs: Number = 0, total_expenses: Number = 0) -> Decimal:
        return profit.net_profit_margin(
            self.net_profit(other_costs, total_expenses), self.total_sales
        )


def summarize_service_records(records: Iterable[ServiceRecord]) -> ServiceSummary:
    """汇总服务记录（使用记录中保存的金额，不重新计算）"""
    summary = ServiceSummary()
    for record in records:
        summary.record_count += 1
        summary.total_sales += record.service_price
        summary.total_commission += record.commission_amount
        summary.total_business += record.business_amount
        name = record.service_provider_name
        summary.commission_by_provider[name] = (
            summary.commission_by_provider.get(name, Decimal("0")) + record.commission_amount
        )
    return summary
