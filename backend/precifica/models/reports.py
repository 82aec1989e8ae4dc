"""
Precifica - Report Schemas
Monthly KPI contracts
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from precifica.models.business import MonthlyRevenue
from precifica.models.sales_import import ProductId


class SaleRow(BaseModel):
    """sales row as needed for KPIs."""
    product_id: ProductId
    quantity: Optional[float] = None
    sale_price: Optional[float] = None
    sold_at: Optional[datetime] = None


class ProductUnitCost(BaseModel):
    """product_costs_view row: current unit cost (CMV) per product."""
    product_id: ProductId
    unit_cost: Optional[float] = None


class MonthlyKpi(BaseModel):
    """Revenue, estimated cost and margins for one calendar month."""
    year: int
    month: int
    label: str  # YYYY-MM

    revenue_sales: float = 0.0
    revenue_manual: Optional[float] = None

    cost_estimated: float = 0.0
    profit_estimated: float = 0.0

    # None when the month has no sales revenue
    margin_percent: Optional[float] = None
    cmv_percent: Optional[float] = None

    # Sales of products without a known unit cost
    undefined_cost_qty: float = 0.0
    undefined_cost_revenue: float = 0.0


class MonthlyKpiRequest(BaseModel):
    """Pre-fetched rows to aggregate."""
    sales: list[SaleRow] = []
    unit_costs: list[ProductUnitCost] = []
    monthly_revenues: list[MonthlyRevenue] = []
    months_back: Optional[int] = None
    now: Optional[datetime] = None

