"""
Precifica - Insight API Routes
Per-product alerts and the catalog-wide action center
"""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from precifica.models.business import BusinessPricingContext
from precifica.models.insights import (
    ActionItem,
    CatalogProductCost,
    InsightReport,
    InsightRequest,
    SalesTotals,
)
from precifica.services.insights import (
    build_action_center,
    build_insights,
    get_worst_insight_level,
)

router = APIRouter(prefix="/insights", tags=["Insights"])


class ActionCenterRequest(BaseModel):
    """Catalog, cost structure and realised sales per product id."""
    products: list[CatalogProductCost]
    context: BusinessPricingContext
    sales: dict[int, SalesTotals] = {}
    limit: Optional[int] = None


@router.post("", response_model=InsightReport)
async def insights(request: InsightRequest) -> InsightReport:
    """Insights for one product from its pre-computed metrics, most severe first."""
    found = build_insights(request.product, request.metrics, request.settings)
    return InsightReport(insights=found, worst_level=get_worst_insight_level(found))


@router.post("/action-center", response_model=list[ActionItem])
async def action_center(request: ActionCenterRequest) -> list[ActionItem]:
    """Products most in need of pricing attention (danger first)."""
    return build_action_center(
        request.products,
        request.context,
        request.sales,
        limit=request.limit,
    )
