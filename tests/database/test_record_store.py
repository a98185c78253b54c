"""SqlRecordStore 测试。

测试内容：
- insert 分配 id 与时间戳，返回 ISO-8601 字符串
- fetch 按 business_id 过滤、排序并限制条数
- update 只修改列出的字段
- 未知集合 / 字段名抛出 ValueError
"""
import os
import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from database import DatabaseConnection, RecordFilter, SqlRecordStore
from database.models import ServiceProviderModel


def provider_row(business_id="biz-1", **overrides):
    row = {
        "business_id": business_id,
        "full_name": "Wanjiru",
        "commission_type": "PERCENTAGE",
        "commission_rate": Decimal("20"),
    }
    row.update(overrides)
    return row


def record_row(offered, name, business_id="biz-1"):
    return {
        "business_id": business_id,
        "service_name": name,
        "service_provider_name": "Wanjiru",
        "service_price": Decimal("500"),
        "commission_rate_used": Decimal("20"),
        "commission_amount": Decimal("100"),
        "business_amount": Decimal("400"),
        "date_offered": offered,
    }


class TestInsert:
    """插入测试"""

    @pytest.mark.asyncio
    async def test_assigns_id_and_defaults(self, store):
        """插入时由存储端分配 id、默认值和带时区的时间戳"""
        row = await store.insert("service_providers", provider_row())

        assert row["id"]
        assert row["business_id"] == "biz-1"
        assert row["role"] == "Service Provider"
        assert row["is_active"] is True
        assert row["flat_fee"] == 0
        assert row["commission_rate"] == Decimal("20")
        assert datetime.fromisoformat(row["created_at"]).tzinfo is not None

    @pytest.mark.asyncio
    async def test_none_id_is_ignored(self, store):
        """id 为 None 时忽略，由存储端分配"""
        row = await store.insert("service_providers", provider_row(id=None))
        assert row["id"]

    @pytest.mark.asyncio
    async def test_record_date_offered_defaults_to_now(self, store):
        """未指定服务时间时使用当前时间"""
        row = record_row(None, "Haircut")
        del row["date_offered"]
        before = datetime.now(timezone.utc) - timedelta(seconds=5)

        saved = await store.insert("service_records", row)

        offered = datetime.fromisoformat(saved["date_offered"])
        assert offered.tzinfo is not None
        assert offered >= before
        assert saved["service_price"] == Decimal("500")
        assert saved["recorded_by"] is None

    @pytest.mark.asyncio
    async def test_unknown_collection(self, store):
        """未知集合名抛出 ValueError"""
        with pytest.raises(ValueError):
            await store.insert("inventory", {"business_id": "biz-1"})


class TestFetch:
    """查询测试"""

    @pytest.mark.asyncio
    async def test_filters_by_business(self, store):
        """只返回指定门店的数据"""
        await store.insert("service_providers", provider_row("biz-1", full_name="A"))
        await store.insert("service_providers", provider_row("biz-2", full_name="B"))

        rows = await store.fetch("service_providers", RecordFilter("biz-1"))

        assert [r["full_name"] for r in rows] == ["A"]

    @pytest.mark.asyncio
    async def test_order_and_limit(self, store):
        """按指定字段排序并限制条数"""
        base = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
        for hours, name in [(1, "b"), (3, "d"), (0, "a"), (2, "c")]:
            await store.insert("service_records", record_row(base + timedelta(hours=hours), name))

        newest = await store.fetch("service_records", RecordFilter(
            "biz-1", order_by="date_offered", descending=True, limit=2
        ))
        oldest = await store.fetch("service_records", RecordFilter(
            "biz-1", order_by="date_offered", descending=False
        ))

        assert [r["service_name"] for r in newest] == ["d", "c"]
        assert [r["service_name"] for r in oldest] == ["a", "b", "c", "d"]
        assert newest[0]["date_offered"] == (base + timedelta(hours=3)).isoformat()

    @pytest.mark.asyncio
    async def test_unknown_order_field(self, store):
        """未知排序字段抛出 ValueError"""
        with pytest.raises(ValueError):
            await store.fetch("service_records", RecordFilter("biz-1", order_by="nope"))

    @pytest.mark.asyncio
    async def test_empty_collection(self, store):
        assert await store.fetch("service_definitions", RecordFilter("biz-1")) == []


class TestUpdate:
    """更新测试"""

    @pytest.mark.asyncio
    async def test_only_listed_fields_change(self, store):
        """只更新列出的字段，其余字段保持不变"""
        row = await store.insert("service_providers", provider_row(role="Stylist"))

        await store.update("service_providers", row["id"], {"is_active": False})

        fetched = (await store.fetch("service_providers", RecordFilter("biz-1")))[0]
        assert fetched["is_active"] is False
        assert fetched["full_name"] == "Wanjiru"
        assert fetched["role"] == "Stylist"
        assert fetched["commission_rate"] == Decimal("20")

    @pytest.mark.asyncio
    async def test_missing_row_is_noop(self, store):
        """id 不存在时不报错"""
        await store.update("service_providers", "does-not-exist", {"is_active": False})
        assert await store.fetch("service_providers", RecordFilter("biz-1")) == []

    @pytest.mark.asyncio
    async def test_unknown_field(self, store):
        """未知字段名抛出 ValueError"""
        row = await store.insert("service_providers", provider_row())
        with pytest.raises(ValueError):
            await store.update("service_providers", row["id"], {"nickname": "W"})


class TestConnection:
    """数据库连接测试"""

    @pytest.mark.asyncio
    async def test_create_tables_on_fresh_database(self):
        """全新数据库上建表后可以正常写入"""
        temp_dir = tempfile.mkdtemp(prefix="db-tests-")
        conn = DatabaseConnection(f"sqlite:///{os.path.join(temp_dir, 'fresh.db')}")
        try:
            assert conn.is_async is False
            await conn.create_tables()
            store = SqlRecordStore(conn)
            await store.insert("service_providers", provider_row())
            with conn.get_session() as session:
                assert session.query(ServiceProviderModel).count() == 1
        finally:
            await conn.close()
            shutil.rmtree(temp_dir, ignore_errors=True)
