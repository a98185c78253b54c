"""边界映射 - 存储记录（snake_case 字典）与业务实体之间的转换。

存储端约定：
- 键名使用 snake_case（full_name、commission_type ...）
- 枚举以符号名存储（"PERCENTAGE"、"FLAT_FEE"）
- 时间戳为 ISO-8601 字符串

解析失败时不会让整个查询失败，而是回退到默认值并记录告警：
- 未知提成类型 -> PERCENTAGE
- 未知订阅状态 -> TRIALING，未知套餐 -> FREE_TRIAL
- 无法解析的时间戳 -> 当前时间
"""
import time
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from loguru import logger

from .models import (
    CommissionType, Number, PlanType, ServiceDefinition, ServiceProvider,
    ServiceRecord, SubscriptionInfo, SubscriptionStatus, to_money
)

Row = Dict[str, Any]
E = TypeVar("E", bound=Enum)


# ================================================================
# 通用解析
# ================================================================

def now_millis() -> int:
    return int(time.time() * 1000)


def parse_enum(enum_cls: Type[E], value: Any, default: E) -> E:
    """按符号名解析枚举，失败时回退到 default。"""
    try:
        return enum_cls[value]
    except (KeyError, TypeError):
        logger.warning(
            f"Unknown {enum_cls.__name__} value {value!r}, falling back to {default.name}"
        )
        return default


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """ISO-8601 字符串 -> 带时区的 datetime，不带时区的按 UTC 处理。

    Raises:
        ValueError: 格式无效。
    """
    if value is None:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_timestamp(value: Optional[str]) -> int:
    """ISO-8601 字符串 -> epoch 毫秒，缺失或无法解析时回退到当前时间。"""
    try:
        parsed = parse_datetime(value)
    except (ValueError, AttributeError, TypeError):
        logger.warning(f"Unparseable timestamp {value!r}, falling back to now")
        return now_millis()
    if parsed is None:
        logger.warning("Missing timestamp, falling back to now")
        return now_millis()
    return int(parsed.timestamp() * 1000)


def _money(value: Any, default: Number = 0) -> Decimal:
    return to_money(default if value is None else value)


def _optional_money(value: Any) -> Optional[Decimal]:
    return None if value is None else to_money(value)


# ================================================================
# 服务人员
# ================================================================

def provider_to_row(business_id: str, provider: ServiceProvider) -> Row:
    """新建服务人员时写入的字段（不含 id，由存储端分配）"""
    return {
        "business_id": business_id,
        "full_name": provider.full_name,
        "role": provider.role,
        "commission_type": provider.commission_type.name,
        "commission_rate": to_money(provider.commission_rate),
        "flat_fee": to_money(provider.flat_fee),
        "is_active": provider.is_active,
    }


def provider_update_fields(provider: ServiceProvider) -> Row:
    """整体更新服务人员时发送的字段"""
    return {
        "full_name": provider.full_name,
        "role": provider.role,
        "commission_type": provider.commission_type.name,
        "commission_rate": to_money(provider.commission_rate),
        "flat_fee": to_money(provider.flat_fee),
        "is_active": provider.is_active,
    }


def provider_from_row(row: Row) -> ServiceProvider:
    return ServiceProvider(
        id=row.get("id") or "",
        full_name=row.get("full_name", ""),
        role=row.get("role") or "Service Provider",
        commission_type=parse_enum(
            CommissionType, row.get("commission_type"), CommissionType.PERCENTAGE
        ),
        commission_rate=_money(row.get("commission_rate")),
        flat_fee=_money(row.get("flat_fee")),
        is_active=row.get("is_active", True),
    )


# ================================================================
# 服务项目
# ================================================================

def definition_to_row(business_id: str, definition: ServiceDefinition) -> Row:
    return {
        "business_id": business_id,
        "name": definition.name,
        "base_price": to_money(definition.base_price),
        "commission_override": _optional_money(definition.commission_override),
        "is_active": definition.is_active,
    }


def definition_update_fields(definition: ServiceDefinition) -> Row:
    return {
        "name": definition.name,
        "base_price": to_money(definition.base_price),
        "commission_override": _optional_money(definition.commission_override),
        "is_active": definition.is_active,
    }


def definition_from_row(row: Row) -> ServiceDefinition:
    return ServiceDefinition(
        id=row.get("id") or "",
        name=row.get("name", ""),
        base_price=_money(row.get("base_price")),
        commission_override=_optional_money(row.get("commission_override")),
        is_active=row.get("is_active", True),
    )


# ================================================================
# 服务记录
# ================================================================

def service_record_to_row(business_id: str, record: ServiceRecord) -> Row:
    """新建服务记录时写入的字段（id 与 date_offered 由存储端分配）"""
    return {
        "business_id": business_id,
        "service_name": record.service_name,
        "service_provider_name": record.service_provider_name,
        "service_price": record.service_price,
        "commission_rate_used": record.commission_rate_used,
        "commission_amount": record.commission_amount,
        "business_amount": record.business_amount,
        "recorded_by": record.recorded_by,
        "service_id": record.service_id,
        "provider_id": record.provider_id,
    }


def service_record_from_row(row: Row) -> ServiceRecord:
    """读取时直接使用存储的金额，不重新计算提成"""
    return ServiceRecord(
        id=row.get("id") or "",
        service_name=row.get("service_name", ""),
        service_provider_name=row.get("service_provider_name", ""),
        service_price=_money(row.get("service_price")),
        commission_rate_used=_money(row.get("commission_rate_used")),
        commission_amount=_money(row.get("commission_amount")),
        business_amount=_money(row.get("business_amount")),
        date_offered=parse_timestamp(row.get("date_offered")),
        recorded_by=row.get("recorded_by"),
        service_id=row.get("service_id") or "",
        provider_id=row.get("provider_id") or "",
    )


# ================================================================
# 订阅
# ================================================================

def subscription_from_row(row: Row) -> SubscriptionInfo:
    """订阅记录 -> SubscriptionInfo

    周期起止时间是必填字段，缺失时抛出 KeyError，格式无效时抛出 ValueError。
    """
    return SubscriptionInfo(
        id=row.get("id") or "",
        business_id=row.get("business_id", ""),
        plan_type=parse_enum(PlanType, row.get("plan_type"), PlanType.FREE_TRIAL),
        status=parse_enum(
            SubscriptionStatus, row.get("status"), SubscriptionStatus.TRIALING
        ),
        price=_money(row.get("price")),
        currency=row.get("currency") or "KES",
        trial_start=parse_datetime(row.get("trial_start")),
        trial_end=parse_datetime(row.get("trial_end")),
        current_period_start=parse_datetime(row["current_period_start"]),
        current_period_end=parse_datetime(row["current_period_end"]),
    )
