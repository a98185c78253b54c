"""提成计算 - 一笔服务交易的提成与门店实收拆分。

纯函数，无副作用，不抛异常（调用方负责保证价格为合法的非负金额）。

规则：
- 成交价：手动改价优先，否则使用服务项目的标准价
- 提成比例：服务项目的 commission_override 优先，否则使用服务人员的比例
- PERCENTAGE：提成 = 成交价 * 比例 / 100
- FLAT_FEE：提成 = 服务人员的固定金额（与成交价无关，不做上限截断，
  门店实收可能为负）
- 门店实收 = 成交价 - 提成

成交价、比例和提成都先按存储精度（4 位小数）取整，门店实收由取整后的
提成反推，保存后两者之和仍严格等于成交价。
"""
from decimal import Decimal
from typing import Optional

from .models import (
    CommissionBreakdown, CommissionType, Number,
    ServiceDefinition, ServiceProvider, quantize_money
)

HUNDRED = Decimal("100")


def resolve_final_price(definition: ServiceDefinition,
                        price_override: Optional[Number] = None) -> Decimal:
    """确定成交价。"""
    if price_override is not None:
        return quantize_money(price_override)
    return quantize_money(definition.base_price)


def resolve_commission_rate(definition: ServiceDefinition,
                            provider: ServiceProvider) -> Decimal:
    """确定本单生效的提成比例。"""
    if definition.commission_override is not None:
        return quantize_money(definition.commission_override)
    return quantize_money(provider.commission_rate)


def calculate_commission(final_price: Number, provider: ServiceProvider,
                         resolved_rate: Number) -> CommissionBreakdown:
    """计算提成与门店实收。

    Args:
        final_price: 成交价（>= 0）。
        provider: 服务人员，决定提成类型与固定金额。
        resolved_rate: 本单生效的提成比例（百分点）。

    Returns:
        CommissionBreakdown，commission_amount + business_amount 等于取整后的成交价。
    """
    price = quantize_money(final_price)
    rate = quantize_money(resolved_rate)

    if provider.commission_type is CommissionType.FLAT_FEE:
        commission = quantize_money(provider.flat_fee)
    else:
        commission = quantize_money(price * rate / HUNDRED)

    return CommissionBreakdown(
        commission_rate_used=rate,
        commission_amount=commission,
        business_amount=price - commission,
    )
