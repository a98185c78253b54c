"""现金对账 - 日结时的应有现金与差额。

纯函数，接受任意实数（包括负数），输入校验由调用方负责。
"""
from decimal import Decimal

from .models import Number, to_money


def expected_cash(cash_sales: Number, cash_expenses: Number) -> Decimal:
    """应有现金 = 现金销售 - 现金支出"""
    return to_money(cash_sales) - to_money(cash_expenses)


def discrepancy(expected: Number, actual_cash: Number) -> Decimal:
    """现金差额 = 实际现金 - 应有现金

    负数表示短款，正数表示长款。
    """
    return to_money(actual_cash) - to_money(expected)
