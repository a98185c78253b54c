"""订阅访问控制 - 根据订阅状态决定是否允许使用功能。

check_access 是无状态的分类函数，每次访问检查时调用；
订阅状态本身及其流转由外部订阅服务维护。

effective_status 等辅助函数根据当前时间推算实际生效的状态
（试用到期 -> 缓冲期 -> 锁定；订阅周期结束 -> 逾期）。
"""
import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from config.settings import settings
from .models import PlanType, SubscriptionInfo, SubscriptionStatus


class GuardResult:
    """访问检查结果基类"""

    allowed: bool = False


@dataclass(frozen=True)
class Allowed(GuardResult):
    """允许访问"""

    allowed = True


@dataclass(frozen=True)
class Blocked(GuardResult):
    """拒绝访问，reason 可直接展示给用户"""

    reason: str
    allowed = False


ALLOWED = Allowed()

_ALLOWED_STATUSES = frozenset({
    SubscriptionStatus.ACTIVE,
    SubscriptionStatus.TRIALING,
    SubscriptionStatus.GRACE_PERIOD,
})

_BLOCK_REASONS = {
    SubscriptionStatus.LOCKED: "Subscription is locked. Please renew to continue.",
    SubscriptionStatus.PAST_DUE: "Payment past due. Please update payment method.",
    SubscriptionStatus.CANCELED: "Subscription canceled.",
}

UNKNOWN_STATUS_REASON = "Subscription status unknown. Please contact support."


def check_access(status: SubscriptionStatus) -> GuardResult:
    """订阅状态 -> 访问决定

    ACTIVE / TRIALING / GRACE_PERIOD 允许访问，LOCKED / PAST_DUE / CANCELED
    拒绝并给出原因。其他任何值（包括未转换的字符串）一律拒绝。
    """
    if status in _ALLOWED_STATUSES:
        return ALLOWED
    reason = _BLOCK_REASONS.get(status)
    if reason is None:
        logger.warning(f"Unknown subscription status {status!r}, blocking access")
        return Blocked(UNKNOWN_STATUS_REASON)
    return Blocked(reason)


def can_perform_actions(status: SubscriptionStatus) -> bool:
    """是否允许执行写操作（仅 LOCKED 时禁止，非 SubscriptionStatus 值同样禁止）"""
    return isinstance(status, SubscriptionStatus) and status is not SubscriptionStatus.LOCKED


def effective_status(subscription: SubscriptionInfo, now: datetime,
                     grace_period_days: Optional[int] = None) -> SubscriptionStatus:
    """推算当前实际生效的订阅状态。

    - TRIALING：试用期内保持 TRIALING；试用结束后 grace_period_days 天内为
      GRACE_PERIOD；之后为 LOCKED。没有试用结束时间时保持 TRIALING。
    - ACTIVE：超过当前周期结束时间为 PAST_DUE。
    - 其他状态原样返回。

    Args:
        subscription: 订阅信息。
        now: 当前时间（需与订阅中的时间同为带时区或同为不带时区）。
        grace_period_days: 缓冲期天数，None 时使用 settings.grace_period_days。
    """
    if grace_period_days is None:
        grace_period_days = settings.grace_period_days

    status = subscription.status
    if status is SubscriptionStatus.TRIALING:
        trial_end = subscription.trial_end
        if trial_end is None or now < trial_end:
            return SubscriptionStatus.TRIALING
        if now < trial_end + timedelta(days=grace_period_days):
            return SubscriptionStatus.GRACE_PERIOD
        return SubscriptionStatus.LOCKED

    if status is SubscriptionStatus.ACTIVE and now > subscription.current_period_end:
        return SubscriptionStatus.PAST_DUE

    return status


def trial_days_remaining(subscription: Optional[SubscriptionInfo], now: datetime) -> int:
    """试用剩余整天数，无试用或已结束时为 0"""
    if subscription is None or subscription.trial_end is None:
        return 0
    if now >= subscription.trial_end:
        return 0
    return (subscription.trial_end - now).days


def calculate_period_end(start: datetime, plan_type: PlanType,
                         trial_days: Optional[int] = None) -> datetime:
    """计算订阅周期结束时间（结束日当天零点，保留 start 的时区）。

    FREE_TRIAL 加 trial_days 天（默认 settings.trial_period_days），
    MONTHLY 加一个月，YEARLY 加一年；目标月份没有对应日期时取月末。
    """
    day = start.date()
    if plan_type is PlanType.FREE_TRIAL:
        if trial_days is None:
            trial_days = settings.trial_period_days
        end = day + timedelta(days=trial_days)
    elif plan_type is PlanType.MONTHLY:
        end = _add_months(day, 1)
    else:
        end = _add_months(day, 12)
    return datetime(end.year, end.month, end.day, tzinfo=start.tzinfo)


def _add_months(day, months: int):
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))
