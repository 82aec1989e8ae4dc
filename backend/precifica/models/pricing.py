"""
Precifica - Pricing Schemas
Menu pricing data contracts

RULES:
- Percentages are expressed 0-100
- A markup of 0 means the cost structure cannot be priced
- ProductMetrics is derived on every call and never persisted
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(str, Enum):
    """Three-level health classification for CMV and margin."""
    HEALTHY = "healthy"
    WARNING = "warning"
    DANGER = "danger"


class FixedCostAllocationMode(str, Enum):
    """How monthly overhead is attributed to a single unit."""
    REVENUE_BASED = "revenue_based"  # sale price x fixed cost %
    PER_UNIT = "per_unit"            # total fixed costs / estimated unit sales


# =============================================================================
# CHANNELS
# =============================================================================

class SalesChannel(BaseModel):
    """Sales venue with the total fee/tax it deducts from each sale."""
    id: int
    name: str
    total_tax_rate: float = 0.0


class ChannelPricing(BaseModel):
    """Ideal price for one channel so the seller still nets the menu price."""
    model_config = ConfigDict(frozen=True)

    channel_id: int
    channel_name: str
    total_tax_rate: float
    ideal_price: float


# =============================================================================
# MARKUP / IDEAL PRICE REQUESTS
# =============================================================================

class MarkupRequest(BaseModel):
    """Cost structure percentages used to derive the markup."""
    fixed_cost_percent: float = 0.0
    variable_cost_percent: float = 0.0
    desired_profit_percent: float = 0.0


class MarkupResult(BaseModel):
    """Markup multiplier with the feasibility made explicit."""
    markup: float
    feasible: bool
    total_percent: float


class IdealPriceRequest(BaseModel):
    """CMV and markup to price, optionally per channel."""
    cmv: float
    markup: float
    channels: list[SalesChannel] = []


class IdealPriceResult(BaseModel):
    """Ideal menu price plus channel-adjusted prices."""
    ideal_menu_price: float
    channel_prices: list[ChannelPricing] = []


# =============================================================================
# PRODUCT METRICS
# =============================================================================

class ProductMetricsInput(BaseModel):
    """
    Everything needed to price a single product.

    Values are taken as-is; the engine guards divisions instead of validating.
    """
    cmv: float
    sale_price: float

    fixed_cost_percent: float
    variable_cost_percent: float
    desired_profit_percent: float

    total_fixed_costs: float = 0.0
    estimated_monthly_sales: float = 0.0
    average_monthly_revenue: float = 0.0

    channels: list[SalesChannel] = []

    fixed_cost_allocation_mode: FixedCostAllocationMode = FixedCostAllocationMode.REVENUE_BASED
    target_cmv_percent: float = Field(default=35.0)


class ProductMetrics(BaseModel):
    """
    Complete financial picture of one product at its current price.

    Immutable; recomputed from a ProductMetricsInput whenever inputs change.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "cmv_percent": 33.33,
                "cmv_status": "healthy",
                "profit_percent": 44.67,
                "margin_status": "healthy",
                "markup": 1.5873,
                "ideal_menu_price": 15.87,
            }
        },
    )

    # CMV as % of sale price, and its health vs the target
    cmv_percent: float
    cmv_status: HealthStatus

    # Margins
    gross_margin_percent: float
    contribution_margin_percent: float

    # Per-unit cost breakdown in R$
    fixed_cost_value: float
    variable_cost_value: float
    total_cost: float

    # Estimated profit per unit
    profit_value: float
    profit_percent: float
    margin_status: HealthStatus

    # Pricing
    markup: float
    ideal_menu_price: float
    channel_prices: list[ChannelPricing] = []

    # Fixed cost method actually used and a human-readable explanation
    fixed_cost_method: FixedCostAllocationMode
    fixed_cost_explanation: str

    # False when the cost structure leaves no room for a markup (markup == 0)
    pricing_feasible: bool = True


# =============================================================================
# SIMULATION & RECIPES
# =============================================================================

class CostSimulation(BaseModel):
    """What-if result of an ingredient cost increase at the current price."""
    increase_percent: float
    current_cmv: float
    simulated_cmv: float

    current: ProductMetrics
    simulated: ProductMetrics

    # Ideal menu price for the simulated CMV (0 when not priceable)
    suggested_price: float

    profit_diff: float
    margin_diff: float


class RecipeLine(BaseModel):
    """One ingredient used in a product recipe."""
    ingredient_name: str
    quantity: float
    unit: str               # unit the quantity was entered in (g, kg, ml, l, un...)
    base_unit: str          # unit the ingredient is costed in
    cost_per_unit: float    # R$ per base unit


class RecipeLineCost(BaseModel):
    """Costed recipe line, quantity expressed in the base unit."""
    ingredient_name: str
    base_quantity: float
    base_unit: str
    cost: float


class RecipeCost(BaseModel):
    """CMV of a product from its recipe."""
    lines: list[RecipeLineCost] = []
    total_cost: float = 0.0
