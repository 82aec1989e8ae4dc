"""
Recipe costing: a product's CMV from the ingredients it uses.

Quantities may be entered in a smaller unit than the one an ingredient is
costed in (g for kg, ml for l); they are converted before costing.
"""

from typing import Iterable

from precifica.models.pricing import RecipeCost, RecipeLine, RecipeLineCost

# base unit -> (smaller unit, factor)
_SUB_UNITS: dict[str, tuple[str, float]] = {
    "kg": ("g", 1000.0),
    "l": ("ml", 1000.0),
}


def available_units(base_unit: str) -> list[str]:
    """Units a quantity can be entered in for an ingredient costed in base_unit."""
    if base_unit in _SUB_UNITS:
        return [base_unit, _SUB_UNITS[base_unit][0]]
    return [base_unit]


def convert_to_base_unit(quantity: float, from_unit: str, base_unit: str) -> float:
    sub = _SUB_UNITS.get(base_unit)
    if sub and from_unit == sub[0]:
        return quantity / sub[1]
    return quantity


def compute_recipe_cost(lines: Iterable[RecipeLine]) -> RecipeCost:
    costed = []
    for line in lines:
        base_quantity = convert_to_base_unit(line.quantity, line.unit, line.base_unit)
        costed.append(RecipeLineCost(
            ingredient_name=line.ingredient_name,
            base_quantity=base_quantity,
            base_unit=line.base_unit,
            cost=base_quantity * line.cost_per_unit,
        ))

    return RecipeCost(lines=costed, total_cost=sum(c.cost for c in costed))
