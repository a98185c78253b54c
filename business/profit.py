"""利润指标 - 首页、报表与日结共用同一套公式。"""
from decimal import Decimal

from .models import Number, to_money

ZERO = Decimal("0")


def gross_profit(total_sales: Number, cost_of_sales: Number) -> Decimal:
    """毛利 = 销售额 - 销售成本

    销售成本应已包含服务提成（由调用方保证）。
    """
    return to_money(total_sales) - to_money(cost_of_sales)


def net_profit(gross: Number, total_expenses: Number) -> Decimal:
    """净利 = 毛利 - 总支出"""
    return to_money(gross) - to_money(total_expenses)


def net_profit_margin(net: Number, total_sales: Number) -> Decimal:
    """净利率（百分比）= 净利 / 销售额 * 100

    销售额为 0 时返回 0。
    """
    sales = to_money(total_sales)
    if sales == ZERO:
        return ZERO
    return (to_money(net) / sales) * 100
