"""销售统计 - 购物车金额与按时段分布。

按时段分布用于首页图表，把销售按本地时间的小时归入 7 个时段：

    0: 06:00-10:00
    1: 10:00-12:00
    2: 12:00-16:00
    3: 16:00-18:00
    4: 18:00-20:00
    5: 20:00-22:00
    6: 22:00-06:00（跨零点）

每次调用都对完整列表重新计算，不保存中间状态。
"""
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Iterable, List, Optional

from .models import CartItem, Number, SaleEvent, to_money

INTERVAL_LABELS = [
    "6AM-10AM", "10AM-12PM", "12PM-4PM", "4PM-6PM",
    "6PM-8PM", "8PM-10PM", "10PM-6AM",
]

# 未落入任何区间的小时归入 12PM-4PM
FALLBACK_INTERVAL = 2

_INTERVALS = [
    (range(6, 10), 0),
    (range(10, 12), 1),
    (range(12, 16), 2),
    (range(16, 18), 3),
    (range(18, 20), 4),
    (range(20, 22), 5),
    (range(22, 24), 6),
    (range(0, 6), 6),
]


def calculate_subtotal(items: Iterable[CartItem]) -> Decimal:
    """购物车小计"""
    return sum((item.total_price for item in items), Decimal("0"))


def calculate_total(subtotal: Number, discount: Number) -> Decimal:
    """折后总价，不低于 0"""
    return max(to_money(subtotal) - to_money(discount), Decimal("0"))


def interval_index(hour: int) -> int:
    """小时 -> 时段下标"""
    for hours, index in _INTERVALS:
        if hour in hours:
            return index
    return FALLBACK_INTERVAL


def distribute_hourly_sales(sales: Iterable[SaleEvent],
                            tz: Optional[tzinfo] = None) -> List[Decimal]:
    """按时段汇总销售额。

    Args:
        sales: 销售列表。
        tz: 计算小时使用的时区，None 表示系统本地时区。

    Returns:
        长度为 7 的列表，顺序与 INTERVAL_LABELS 一致。
    """
    buckets = [Decimal("0")] * len(INTERVAL_LABELS)
    for sale in sales:
        hour = datetime.fromtimestamp(sale.sale_date / 1000, tz=tz).hour
        buckets[interval_index(hour)] += to_money(sale.total_amount)
    return buckets
