"""
Cost simulator: what happens to a product when its CMV goes up.

Nothing is written; the suggested price is only applied by an explicit,
separate update of the product.
"""

from precifica.models.business import BusinessPricingContext
from precifica.models.pricing import CostSimulation
from precifica.services.pricing.ideal_price import compute_ideal_menu_price
from precifica.services.pricing.product_metrics import compute_product_metrics

# Shortcut increases offered to the operator
INCREASE_PRESETS = (5, 10, 20)


def simulate_cost_increase(
    cmv: float,
    sale_price: float,
    increase_percent: float,
    context: BusinessPricingContext,
) -> CostSimulation:
    """Compare current metrics with metrics after a CMV increase at the same price."""
    simulated_cmv = cmv * (1 + increase_percent / 100)

    current = compute_product_metrics(context.metrics_input(cmv, sale_price))
    simulated = compute_product_metrics(context.metrics_input(simulated_cmv, sale_price))

    return CostSimulation(
        increase_percent=increase_percent,
        current_cmv=cmv,
        simulated_cmv=simulated_cmv,
        current=current,
        simulated=simulated,
        suggested_price=compute_ideal_menu_price(simulated_cmv, current.markup),
        profit_diff=simulated.profit_value - current.profit_value,
        margin_diff=simulated.profit_percent - current.profit_percent,
    )
