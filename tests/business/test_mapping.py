"""边界映射测试：snake_case 记录与业务实体的互相转换，以及解析失败时的回退。"""
import time
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from loguru import logger

from business import mapping
from business.models import (
    CommissionType, PlanType, ServiceDefinition, ServiceProvider, ServiceRecord,
    SubscriptionStatus,
)


@pytest.fixture
def warnings_log():
    """收集测试期间 loguru 输出的 WARNING 消息"""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


class TestParseTimestamp:
    """时间戳解析测试"""

    def test_utc_z_suffix(self):
        """Z 后缀按 UTC 解析"""
        assert mapping.parse_timestamp("2024-01-28T10:00:00Z") == 1706436000000

    def test_offset(self):
        assert mapping.parse_timestamp("2024-01-28T13:00:00+03:00") == 1706436000000

    def test_naive_treated_as_utc(self):
        """不带时区的时间按 UTC 处理"""
        assert mapping.parse_timestamp("2024-01-28T10:00:00") == 1706436000000

    @pytest.mark.parametrize("value", ["not-a-date", "", None, 12345])
    def test_fallback_to_now(self, value, warnings_log):
        """无法解析时回退到当前时间并记录告警"""
        before = int(time.time() * 1000)
        result = mapping.parse_timestamp(value)
        after = int(time.time() * 1000)
        assert before <= result <= after
        assert len(warnings_log) == 1


class TestParseEnum:
    """枚举解析测试"""

    def test_known(self):
        assert mapping.parse_enum(
            CommissionType, "FLAT_FEE", CommissionType.PERCENTAGE
        ) is CommissionType.FLAT_FEE

    @pytest.mark.parametrize("value", ["flat", "", None])
    def test_unknown_falls_back(self, value, warnings_log):
        """未知枚举名回退到默认值并记录告警"""
        assert mapping.parse_enum(
            CommissionType, value, CommissionType.PERCENTAGE
        ) is CommissionType.PERCENTAGE
        assert "CommissionType" in warnings_log[0]


class TestProviderMapping:
    """服务人员映射测试"""

    def test_to_row_uses_snake_case_and_symbolic_enum(self):
        """写入字段使用 snake_case，枚举存符号名，不含 id"""
        provider = ServiceProvider(
            full_name="Amina", role="Nail Tech",
            commission_type=CommissionType.FLAT_FEE, flat_fee=Decimal("80"),
        )
        row = mapping.provider_to_row("biz-1", provider)
        assert row == {
            "business_id": "biz-1",
            "full_name": "Amina",
            "role": "Nail Tech",
            "commission_type": "FLAT_FEE",
            "commission_rate": Decimal("0"),
            "flat_fee": Decimal("80"),
            "is_active": True,
        }
        assert "id" not in row

    def test_update_fields_exclude_identity(self):
        """更新字段不含 id 与 business_id"""
        provider = ServiceProvider(id="p1", full_name="Amina")
        fields = mapping.provider_update_fields(provider)
        assert set(fields) == {
            "full_name", "role", "commission_type", "commission_rate", "flat_fee", "is_active",
        }

    def test_from_row(self):
        """flat_fee 为空时取 0，float 转换无误差"""
        provider = mapping.provider_from_row({
            "id": "p1", "full_name": "Amina", "role": "Nail Tech",
            "commission_type": "PERCENTAGE", "commission_rate": 25.5,
            "flat_fee": None, "is_active": False,
        })
        assert provider.id == "p1"
        assert provider.commission_rate == Decimal("25.5")
        assert provider.flat_fee == Decimal("0")
        assert provider.is_active is False

    def test_unknown_commission_type_defaults_to_percentage(self, warnings_log):
        """未知提成类型 -> PERCENTAGE"""
        provider = mapping.provider_from_row({
            "id": "p1", "full_name": "X", "commission_type": "HOURLY",
        })
        assert provider.commission_type is CommissionType.PERCENTAGE
        assert warnings_log


class TestDefinitionMapping:
    """服务项目映射测试"""

    def test_round_trip_fields(self):
        definition = ServiceDefinition(
            name="Facial", base_price=Decimal("1500"), commission_override=Decimal("25"),
        )
        row = mapping.definition_to_row("biz-1", definition)
        assert row["base_price"] == Decimal("1500")
        assert row["commission_override"] == Decimal("25")

        restored = mapping.definition_from_row({**row, "id": "d1"})
        assert restored == ServiceDefinition(
            id="d1", name="Facial", base_price=Decimal("1500"),
            commission_override=Decimal("25"),
        )

    def test_missing_override_stays_none(self):
        """未设置覆盖比例时保持 None"""
        definition = mapping.definition_from_row({"id": "d1", "name": "Cut", "base_price": 300})
        assert definition.commission_override is None
        assert definition.is_active is True


class TestServiceRecordMapping:
    """服务记录映射测试"""

    def test_to_row_leaves_server_fields_out(self):
        """id 与 date_offered 由存储端分配"""
        record = ServiceRecord(
            service_name="Cut", service_provider_name="Amina",
            service_price=Decimal("500"), commission_rate_used=Decimal("20"),
            commission_amount=Decimal("100"), business_amount=Decimal("400"),
            service_id="d1", provider_id="p1", recorded_by="front-desk",
        )
        row = mapping.service_record_to_row("biz-1", record)
        assert "id" not in row
        assert "date_offered" not in row
        assert row["recorded_by"] == "front-desk"

    def test_from_row_keeps_stored_amounts(self):
        """使用存储的金额，不重新计算"""
        record = mapping.service_record_from_row({
            "id": "r1", "service_name": "Cut", "service_provider_name": "Amina",
            "service_price": "500", "commission_rate_used": "20",
            "commission_amount": "120", "business_amount": "380",
            "date_offered": "2024-01-28T10:00:00+00:00",
            "service_id": None, "provider_id": "p1",
        })
        assert record.commission_amount == Decimal("120")
        assert record.business_amount == Decimal("380")
        assert record.date_offered == 1706436000000
        assert record.service_id == ""


class TestSubscriptionMapping:
    """订阅信息映射测试"""

    def test_from_row(self):
        sub = mapping.subscription_from_row({
            "id": "s1", "business_id": "biz-1", "plan_type": "MONTHLY",
            "price": 249.0, "status": "ACTIVE",
            "current_period_start": "2024-06-01T00:00:00Z",
            "current_period_end": "2024-07-01T00:00:00Z",
        })
        assert sub.plan_type is PlanType.MONTHLY
        assert sub.status is SubscriptionStatus.ACTIVE
        assert sub.price == Decimal("249.0")
        assert sub.currency == "KES"
        assert sub.trial_end is None
        assert sub.current_period_end == datetime(2024, 7, 1, tzinfo=timezone.utc)

    def test_unknown_status_and_plan_fall_back(self, warnings_log):
        """未知状态 -> TRIALING，未知套餐 -> FREE_TRIAL"""
        sub = mapping.subscription_from_row({
            "business_id": "biz-1", "plan_type": "WEEKLY", "status": "SUSPENDED",
            "current_period_start": "2024-06-01T00:00:00Z",
            "current_period_end": "2024-07-01T00:00:00Z",
        })
        assert sub.plan_type is PlanType.FREE_TRIAL
        assert sub.status is SubscriptionStatus.TRIALING
        assert len(warnings_log) == 2
