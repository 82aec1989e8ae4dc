"""Pricing engine: markup, ideal prices, product metrics."""

from precifica.services.pricing.ideal_price import (
    compute_all_channel_prices,
    compute_channel_price,
    compute_ideal_menu_price,
)
from precifica.services.pricing.markup import (
    INFEASIBLE_MARKUP,
    compute_markup,
    is_feasible_markup,
)
from precifica.services.pricing.product_metrics import (
    CMV_WARNING_BAND,
    classify_cmv,
    classify_margin,
    compute_product_metrics,
)
from precifica.services.pricing.simulator import INCREASE_PRESETS, simulate_cost_increase

__all__ = [
    "CMV_WARNING_BAND",
    "INCREASE_PRESETS",
    "INFEASIBLE_MARKUP",
    "classify_cmv",
    "classify_margin",
    "compute_all_channel_prices",
    "compute_channel_price",
    "compute_ideal_menu_price",
    "compute_markup",
    "compute_product_metrics",
    "is_feasible_markup",
    "simulate_cost_increase",
]
