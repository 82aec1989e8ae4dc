"""
Precifica - Pricing API Routes
Markup, ideal prices, product metrics and cost simulation

GUARDRAILS:
- Stateless: the cost structure arrives with every request
- Never fails on an unpriceable cost structure; check `feasible` /
  `pricing_feasible` instead
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from precifica.models.business import BusinessPricingContext
from precifica.models.pricing import (
    CostSimulation,
    IdealPriceRequest,
    IdealPriceResult,
    MarkupRequest,
    MarkupResult,
    ProductMetrics,
    ProductMetricsInput,
    RecipeCost,
    RecipeLine,
)
from precifica.services.pricing import (
    compute_all_channel_prices,
    compute_ideal_menu_price,
    compute_markup,
    compute_product_metrics,
    is_feasible_markup,
    simulate_cost_increase,
)
from precifica.services.recipes import compute_recipe_cost

router = APIRouter(prefix="/pricing", tags=["Pricing"])


class SimulationRequest(BaseModel):
    """CMV increase to simulate for one product."""
    cmv: float
    sale_price: float
    increase_percent: float = Field(default=10.0)
    context: BusinessPricingContext


class RecipeCostRequest(BaseModel):
    """Recipe lines to cost."""
    lines: list[RecipeLine]


@router.post("/markup", response_model=MarkupResult)
async def markup(request: MarkupRequest) -> MarkupResult:
    """Markup multiplier for a cost structure (0 when not priceable)."""
    value = compute_markup(
        request.fixed_cost_percent,
        request.variable_cost_percent,
        request.desired_profit_percent,
    )
    return MarkupResult(
        markup=value,
        feasible=is_feasible_markup(value),
        total_percent=(
            request.fixed_cost_percent
            + request.variable_cost_percent
            + request.desired_profit_percent
        ),
    )


@router.post("/ideal-price", response_model=IdealPriceResult)
async def ideal_price(request: IdealPriceRequest) -> IdealPriceResult:
    """Ideal menu price plus the price each channel must charge."""
    menu_price = compute_ideal_menu_price(request.cmv, request.markup)
    return IdealPriceResult(
        ideal_menu_price=menu_price,
        channel_prices=compute_all_channel_prices(menu_price, request.channels),
    )


@router.post("/metrics", response_model=ProductMetrics)
async def product_metrics(request: ProductMetricsInput) -> ProductMetrics:
    """
    Full financial picture of one product.

    Steps:
        1. Markup and ideal prices
        2. Cost breakdown at the current sale price
        3. Margins, estimated profit, CMV and margin status
    """
    return compute_product_metrics(request)


@router.post("/simulate", response_model=CostSimulation)
async def simulate(request: SimulationRequest) -> CostSimulation:
    """What-if on a CMV increase. Nothing is written."""
    return simulate_cost_increase(
        request.cmv,
        request.sale_price,
        request.increase_percent,
        request.context,
    )


@router.post("/recipe-cost", response_model=RecipeCost)
async def recipe_cost(request: RecipeCostRequest) -> RecipeCost:
    """CMV of a product from its recipe lines."""
    return compute_recipe_cost(request.lines)
