"""销售统计测试：购物车金额与按时段分布。"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from business.models import CartItem, SaleEvent
from business.sales import (
    FALLBACK_INTERVAL, INTERVAL_LABELS, calculate_subtotal, calculate_total,
    distribute_hourly_sales, interval_index,
)


def sale_at(hour, amount, minute=0):
    """固定日期、指定 UTC 小时的一笔销售"""
    moment = datetime(2024, 1, 28, hour, minute, tzinfo=timezone.utc)
    return SaleEvent(int(moment.timestamp() * 1000), Decimal(str(amount)))


class TestCart:
    """购物车金额测试"""

    def test_item_total(self):
        """单项金额 = 单价 * 数量 - 折扣"""
        item = CartItem(unit_price=Decimal("250"), quantity=Decimal("3"), discount=Decimal("50"))
        assert item.total_price == Decimal("700")

    def test_subtotal(self):
        items = [
            CartItem(unit_price=Decimal("100")),
            CartItem(unit_price=Decimal("40"), quantity=Decimal("2")),
        ]
        assert calculate_subtotal(items) == Decimal("180")

    def test_subtotal_empty(self):
        assert calculate_subtotal([]) == 0

    def test_total_with_discount(self):
        assert calculate_total(500, 120) == Decimal("380")

    def test_total_clamped_at_zero(self):
        """折扣超过小计时总额为 0"""
        assert calculate_total(100, 150) == 0


class TestIntervalIndex:
    """小时 -> 时段下标测试"""

    @pytest.mark.parametrize("hour, expected", [
        (6, 0), (9, 0), (10, 1), (11, 1), (12, 2), (15, 2), (16, 3), (17, 3),
        (18, 4), (19, 4), (20, 5), (21, 5), (22, 6), (23, 6), (0, 6), (5, 6),
    ])
    def test_hour_ranges(self, hour, expected):
        assert interval_index(hour) == expected

    @pytest.mark.parametrize("hour", [24, -1, 99])
    def test_uncovered_hour_falls_back(self, hour):
        """不在任何区间的小时归入默认时段"""
        assert interval_index(hour) == FALLBACK_INTERVAL == 2


class TestDistributeHourlySales:
    """按时段分布测试"""

    def test_empty(self):
        result = distribute_hourly_sales([], tz=timezone.utc)
        assert result == [0] * 7
        assert len(result) == len(INTERVAL_LABELS)

    def test_late_night_sale(self):
        """23 点的销售落在夜间时段"""
        result = distribute_hourly_sales([sale_at(23, 500)], tz=timezone.utc)
        assert result == [0, 0, 0, 0, 0, 0, 500]

    def test_afternoon_sale(self):
        result = distribute_hourly_sales([sale_at(14, 200)], tz=timezone.utc)
        assert result[2] == 200
        assert sum(result) == 200

    def test_accumulates_per_bucket(self):
        """同一时段的多笔销售累加"""
        sales = [
            sale_at(7, 100), sale_at(9, 50, minute=59), sale_at(10, 30),
            sale_at(3, 20), sale_at(22, 5), sale_at(19, 12.5),
        ]
        result = distribute_hourly_sales(sales, tz=timezone.utc)
        assert result == [
            Decimal("150"), Decimal("30"), 0, 0, Decimal("12.5"), 0, Decimal("25"),
        ]

    def test_recomputes_each_call(self):
        """每次调用重新计算，不累积上一次的结果"""
        sales = [sale_at(12, 10)]
        first = distribute_hourly_sales(sales, tz=timezone.utc)
        second = distribute_hourly_sales(sales, tz=timezone.utc)
        assert first == second == [0, 0, 10, 0, 0, 0, 0]

    def test_accepts_generator(self):
        result = distribute_hourly_sales((s for s in [sale_at(16, 1)]), tz=timezone.utc)
        assert result[3] == 1
