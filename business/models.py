"""业务实体 - 服务交易引擎使用的内存数据结构。

与数据库表（database/models.py）不同，这里的字段名面向业务层，
金额与比例统一使用 Decimal，时间统一为 epoch 毫秒。
边界上的 snake_case 记录与这些实体之间的转换见 business/mapping.py。
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

Number = Union[int, float, str, Decimal]

T = TypeVar("T")

# 金额与比例的存储精度，与数据库 DECIMAL(*, 4) 一致
MONEY_QUANT = Decimal("0.0001")


def to_money(value: Number) -> Decimal:
    """把数值转换为 Decimal。float 先转字符串，避免二进制误差。"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: Number) -> Decimal:
    """按存储精度四舍五入（ROUND_HALF_UP）。"""
    return to_money(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


class CommissionType(Enum):
    """提成类型"""
    PERCENTAGE = "PERCENTAGE"   # 按成交价百分比
    FLAT_FEE = "FLAT_FEE"       # 每单固定金额


class SubscriptionStatus(Enum):
    """订阅状态（由外部订阅服务维护）"""
    TRIALING = "TRIALING"
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"           # 续费失败
    GRACE_PERIOD = "GRACE_PERIOD"   # 试用结束后的缓冲期
    LOCKED = "LOCKED"               # 试用/订阅彻底过期
    CANCELED = "CANCELED"


class PlanType(Enum):
    """订阅套餐"""
    FREE_TRIAL = "FREE_TRIAL"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


@dataclass
class ServiceProvider:
    """服务人员（员工）

    Attributes:
        id: 存储端分配的ID。
        full_name: 姓名。
        role: 角色。
        commission_type: 提成类型。
        commission_rate: 提成比例（百分点，例如 30 表示 30%），仅 PERCENTAGE 使用。
        flat_fee: 每单固定提成，仅 FLAT_FEE 使用。
        is_active: 是否在职。
    """
    full_name: str
    id: str = ""
    role: str = "Service Provider"
    commission_type: CommissionType = CommissionType.PERCENTAGE
    commission_rate: Decimal = Decimal("0")
    flat_fee: Decimal = Decimal("0")
    is_active: bool = True


@dataclass
class ServiceDefinition:
    """服务项目

    commission_override 不为空时优先于服务人员的提成比例。
    """
    name: str
    base_price: Decimal
    id: str = ""
    commission_override: Optional[Decimal] = None
    is_active: bool = True


@dataclass(frozen=True)
class ServiceRecord:
    """服务交易记录（创建后不可修改）

    服务名称、服务人员姓名、价格与提成均为创建时的快照。
    commission_amount + business_amount == service_price。
    """
    service_name: str
    service_provider_name: str
    service_price: Decimal
    commission_rate_used: Decimal
    commission_amount: Decimal
    business_amount: Decimal
    service_id: str
    provider_id: str
    id: str = ""
    date_offered: int = 0
    recorded_by: Optional[str] = None


@dataclass(frozen=True)
class SaleEvent:
    """一笔销售（用于按时段统计）"""
    sale_date: int              # epoch 毫秒
    total_amount: Decimal


@dataclass(frozen=True)
class CartItem:
    """购物车条目"""
    unit_price: Decimal
    quantity: Decimal = Decimal("1")
    discount: Decimal = Decimal("0")
    name: str = ""

    @property
    def total_price(self) -> Decimal:
        return self.quantity * self.unit_price - self.discount


@dataclass
class SubscriptionInfo:
    """订阅信息（外部订阅服务的只读快照）"""
    business_id: str
    plan_type: PlanType
    status: SubscriptionStatus
    current_period_start: datetime
    current_period_end: datetime
    id: str = ""
    price: Decimal = Decimal("0")
    currency: str = "KES"
    trial_start: Optional[datetime] = None
    trial_end: Optional[datetime] = None


@dataclass
class OperationResult(Generic[T]):
    """单次操作的结果

    成功时 value 为返回值；失败时 error 为可直接展示给用户的错误信息。
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "OperationResult[T]":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class CommissionBreakdown:
    """一笔交易的提成拆分"""
    commission_rate_used: Decimal
    commission_amount: Decimal
    business_amount: Decimal
