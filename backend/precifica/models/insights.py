"""
Precifica - Insight Schemas
Actionable pricing alerts derived from ProductMetrics
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from precifica.models.pricing import ProductMetrics


class InsightLevel(str, Enum):
    """Insight severity."""
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


class InsightKey(str, Enum):
    """Insight rules, in evaluation order."""
    NEGATIVE_MARGIN = "negative_margin"
    CMV_ABOVE_TARGET = "cmv_above_target"
    PRICE_BELOW_IDEAL = "price_below_ideal"
    PROFIT_BELOW_DESIRED = "profit_below_desired"


class Insight(BaseModel):
    """A single actionable insight for a product."""
    key: InsightKey
    level: InsightLevel
    title: str
    detail: str


class InsightProduct(BaseModel):
    """Minimal product data needed to generate insights."""
    name: str
    sale_price: Optional[float] = None


class InsightSettings(BaseModel):
    """Business targets the insights are measured against."""
    target_cmv_percent: float = 35.0
    desired_profit_percent: float = 15.0


class InsightRequest(BaseModel):
    """Pre-computed metrics plus the product and targets they belong to."""
    product: InsightProduct
    metrics: ProductMetrics
    settings: InsightSettings = Field(default_factory=InsightSettings)


class InsightReport(BaseModel):
    """Sorted insights and the single worst level among them."""
    insights: list[Insight] = []
    worst_level: Optional[InsightLevel] = None


# =============================================================================
# ACTION CENTER
# =============================================================================

class CatalogProductCost(BaseModel):
    """Product as listed in the catalog, with its current unit cost (CMV)."""
    id: int
    name: str
    cmv: Optional[float] = None
    sale_price: Optional[float] = None


class SalesTotals(BaseModel):
    """Aggregated realised sales for one product."""
    qty: float = 0.0
    total: float = 0.0


class ActionItem(BaseModel):
    """One product that needs pricing attention."""
    id: int
    name: str
    level: InsightLevel
    reason: str
