"""业务模块 - 服务交易引擎

纯计算：
- commission: 提成与门店实收拆分
- cash: 现金对账
- profit: 利润指标
- sales: 购物车金额与按时段分布
- subscription: 订阅访问控制
- closure: 日结与服务报表

编排：
- orchestrator: TransactionOrchestrator（存储读写 + 缓存同步）
- cache: ServiceCache / BusyIndicator
- mapping: 存储记录与业务实体的转换
"""
from .models import (
    CartItem, CommissionBreakdown, CommissionType, OperationResult, PlanType,
    SaleEvent, ServiceDefinition, ServiceProvider, ServiceRecord,
    SubscriptionInfo, SubscriptionStatus,
)
from .commission import calculate_commission, resolve_commission_rate, resolve_final_price
from .subscription import ALLOWED, Allowed, Blocked, GuardResult, check_access
from .cache import BusyIndicator, ServiceCache
from .orchestrator import TransactionOrchestrator

__all__ = [
    "CartItem",
    "CommissionBreakdown",
    "CommissionType",
    "OperationResult",
    "PlanType",
    "SaleEvent",
    "ServiceDefinition",
    "ServiceProvider",
    "ServiceRecord",
    "SubscriptionInfo",
    "SubscriptionStatus",
    "calculate_commission",
    "resolve_commission_rate",
    "resolve_final_price",
    "ALLOWED",
    "Allowed",
    "Blocked",
    "GuardResult",
    "check_access",
    "BusyIndicator",
    "ServiceCache",
    "TransactionOrchestrator",
]
