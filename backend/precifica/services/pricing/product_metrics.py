"""
Precifica - Product Metrics Composer
Single entry point turning a product's CMV and price plus the business cost
structure into a full financial picture.

LOGIC:
1. Markup from the cost structure percentages
2. Ideal menu price and per-channel prices
3. Per-unit variable and fixed cost (two allocation modes)
4. Gross / contribution margins and estimated profit
5. CMV and margin health status

GUARDRAILS:
- Never raises on odd configuration; every division is guarded to 0
"""

import logging

from precifica.models.pricing import (
    FixedCostAllocationMode,
    HealthStatus,
    ProductMetrics,
    ProductMetricsInput,
)
from precifica.services.pricing.ideal_price import (
    compute_all_channel_prices,
    compute_ideal_menu_price,
)
from precifica.services.pricing.markup import compute_markup, is_feasible_markup

logger = logging.getLogger(__name__)

# CMV above target by up to this many points is a warning, beyond it danger
CMV_WARNING_BAND = 5.0


def _format_count(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _percent_of(part: float, sale_price: float) -> float:
    return (part / sale_price) * 100 if sale_price > 0 else 0.0


def _allocate_fixed_cost(data: ProductMetricsInput) -> tuple[float, str]:
    """Fixed cost per unit and the explanation shown next to it."""
    if data.fixed_cost_allocation_mode == FixedCostAllocationMode.PER_UNIT:
        value = (
            data.total_fixed_costs / data.estimated_monthly_sales
            if data.estimated_monthly_sales > 0
            else 0.0
        )
        explanation = (
            f"R$ {data.total_fixed_costs:.0f} ÷ "
            f"{_format_count(data.estimated_monthly_sales)} vendas/mês"
        )
        return value, explanation

    # Revenue based (spreadsheet method)
    value = data.sale_price * (data.fixed_cost_percent / 100)
    explanation = (
        f"{data.fixed_cost_percent:.2f}% do faturamento médio "
        f"(R$ {data.average_monthly_revenue:.0f})"
    )
    return value, explanation


def classify_cmv(cmv_percent: float, target_cmv_percent: float) -> HealthStatus:
    """Boundaries belong to the lower-severity bucket."""
    if cmv_percent <= target_cmv_percent:
        return HealthStatus.HEALTHY
    if cmv_percent <= target_cmv_percent + CMV_WARNING_BAND:
        return HealthStatus.WARNING
    return HealthStatus.DANGER


def classify_margin(profit_percent: float, desired_profit_percent: float) -> HealthStatus:
    if profit_percent < 0:
        return HealthStatus.DANGER
    if profit_percent < desired_profit_percent:
        return HealthStatus.WARNING
    return HealthStatus.HEALTHY


def compute_product_metrics(data: ProductMetricsInput) -> ProductMetrics:
    """Compute the complete pricing metrics for one product."""
    # 1. Markup
    markup = compute_markup(
        data.fixed_cost_percent,
        data.variable_cost_percent,
        data.desired_profit_percent,
    )
    feasible = is_feasible_markup(markup)
    if not feasible:
        logger.debug(
            "Cost structure leaves no room for a markup: "
            f"fixed={data.fixed_cost_percent} variable={data.variable_cost_percent} "
            f"profit={data.desired_profit_percent}"
        )

    # 2. Ideal prices
    ideal_menu_price = compute_ideal_menu_price(data.cmv, markup)
    channel_prices = compute_all_channel_prices(ideal_menu_price, data.channels)

    # 3. Cost breakdown at the current price
    variable_cost_value = data.sale_price * (data.variable_cost_percent / 100)
    fixed_cost_value, fixed_cost_explanation = _allocate_fixed_cost(data)
    total_cost = data.cmv + variable_cost_value + fixed_cost_value

    # 4. Margins
    cmv_percent = _percent_of(data.cmv, data.sale_price)
    gross_margin_percent = _percent_of(data.sale_price - data.cmv, data.sale_price)
    contribution_margin_percent = _percent_of(
        data.sale_price - data.cmv - variable_cost_value, data.sale_price
    )

    # 5. Estimated profit
    profit_value = data.sale_price - total_cost
    profit_percent = _percent_of(profit_value, data.sale_price)

    return ProductMetrics(
        cmv_percent=cmv_percent,
        cmv_status=classify_cmv(cmv_percent, data.target_cmv_percent),
        gross_margin_percent=gross_margin_percent,
        contribution_margin_percent=contribution_margin_percent,
        fixed_cost_value=fixed_cost_value,
        variable_cost_value=variable_cost_value,
        total_cost=total_cost,
        profit_value=profit_value,
        profit_percent=profit_percent,
        margin_status=classify_margin(profit_percent, data.desired_profit_percent),
        markup=markup,
        ideal_menu_price=ideal_menu_price,
        channel_prices=channel_prices,
        fixed_cost_method=data.fixed_cost_allocation_mode,
        fixed_cost_explanation=fixed_cost_explanation,
        pricing_feasible=feasible,
    )
