"""
Markup multiplier from a business cost structure.

Formula: 100 / (100 - (fixed % + variable % + desired profit %))

Channel/platform fees are NOT part of the markup; they are applied per
channel on top of the ideal menu price.
"""

# Returned when fixed + variable + profit leaves nothing for the product cost
INFEASIBLE_MARKUP = 0.0


def compute_markup(
    fixed_cost_percent: float,
    variable_cost_percent: float,
    desired_profit_percent: float,
) -> float:
    """
    Compute the markup multiplier (e.g. 1.5873 for 10 + 12 + 15).

    Returns INFEASIBLE_MARKUP (0) when the three percentages sum to 100 or
    more; callers must read 0 as "cannot price", not as a literal markup.
    """
    total_percent = fixed_cost_percent + variable_cost_percent + desired_profit_percent

    if total_percent >= 100:
        return INFEASIBLE_MARKUP

    return 100 / (100 - total_percent)


def is_feasible_markup(markup: float) -> bool:
    return markup > INFEASIBLE_MARKUP
