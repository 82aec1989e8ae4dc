"""
Precifica - Business Pricing Context
Aggregate a company's raw cost rows into the snapshot every pricing screen uses.

LOGIC:
- Fixed costs: sum of monthly values
- Variable cost %: sum of every fee percentage
- Average revenue: mean of the monthly revenue rows
- Fixed cost %: fixed costs over average revenue
- Channel tax rate: sum of the fees linked to the channel
"""

import logging
from collections import defaultdict
from typing import Iterable, Optional

from precifica.core.config import settings as app_settings
from precifica.models.business import (
    BusinessPricingContext,
    BusinessRows,
    BusinessSettings,
    ChannelFee,
    ChannelRow,
    Fee,
    FixedCost,
    MonthlyRevenue,
)
from precifica.models.pricing import FixedCostAllocationMode, SalesChannel
from precifica.services.pricing import compute_markup

logger = logging.getLogger(__name__)


def _channel_tax_rates(
    channels: Iterable[ChannelRow],
    fees: list[Fee],
    channel_fees: Iterable[ChannelFee],
) -> list[SalesChannel]:
    fee_rates = {fee.id: fee.percentage or 0.0 for fee in fees}

    linked: dict[int, set[int]] = defaultdict(set)
    for link in channel_fees:
        linked[link.channel_id].add(link.fee_id)

    return [
        SalesChannel(
            id=channel.id,
            name=channel.name,
            total_tax_rate=sum(fee_rates.get(fee_id, 0.0) for fee_id in linked[channel.id]),
        )
        for channel in channels
    ]


def build_pricing_context(
    business: Optional[BusinessSettings] = None,
    fixed_costs: Iterable[FixedCost] = (),
    fees: Iterable[Fee] = (),
    monthly_revenues: Iterable[MonthlyRevenue] = (),
    channels: Iterable[ChannelRow] = (),
    channel_fees: Iterable[ChannelFee] = (),
) -> BusinessPricingContext:
    """Derive the pricing context; missing settings fall back to configured defaults."""
    fees = list(fees)
    revenues = [r.revenue or 0.0 for r in monthly_revenues]

    total_fixed_costs = sum(cost.monthly_value or 0.0 for cost in fixed_costs)
    variable_cost_percent = sum(fee.percentage or 0.0 for fee in fees)
    average_monthly_revenue = sum(revenues) / len(revenues) if revenues else 0.0
    fixed_cost_percent = (
        total_fixed_costs / average_monthly_revenue * 100
        if average_monthly_revenue > 0
        else 0.0
    )

    business = business or BusinessSettings()
    desired_profit_percent = (
        business.desired_profit_percent
        if business.desired_profit_percent is not None
        else app_settings.DEFAULT_DESIRED_PROFIT_PERCENT
    )
    estimated_monthly_sales = (
        business.estimated_monthly_sales
        if business.estimated_monthly_sales is not None
        else app_settings.DEFAULT_ESTIMATED_MONTHLY_SALES
    )
    target_cmv_percent = (
        business.target_cmv_percent
        if business.target_cmv_percent is not None
        else app_settings.DEFAULT_TARGET_CMV_PERCENT
    )

    markup = compute_markup(fixed_cost_percent, variable_cost_percent, desired_profit_percent)
    if markup == 0:
        logger.warning(
            f"Cost structure is not priceable: fixed={fixed_cost_percent:.2f}% "
            f"variable={variable_cost_percent:.2f}% profit={desired_profit_percent:.2f}%"
        )

    return BusinessPricingContext(
        total_fixed_costs=total_fixed_costs,
        variable_cost_percent=variable_cost_percent,
        fixed_cost_percent=fixed_cost_percent,
        average_monthly_revenue=average_monthly_revenue,
        markup=markup,
        estimated_monthly_sales=estimated_monthly_sales,
        desired_profit_percent=desired_profit_percent,
        target_cmv_percent=target_cmv_percent,
        fixed_cost_allocation_mode=(
            business.fixed_cost_allocation_mode or FixedCostAllocationMode.REVENUE_BASED
        ),
        channels=_channel_tax_rates(channels, fees, channel_fees),
    )


def context_from_rows(rows: BusinessRows) -> BusinessPricingContext:
    return build_pricing_context(
        business=rows.settings,
        fixed_costs=rows.fixed_costs,
        fees=rows.fees,
        monthly_revenues=rows.monthly_revenues,
        channels=rows.channels,
        channel_fees=rows.channel_fees,
    )
