"""
Precifica - Business Settings Schemas
Rows read from the hosted tables and the pricing context derived from them

The context is a read-only snapshot; pricing functions receive it as an
explicit parameter instead of reaching for shared state.
"""

from typing import Optional

from pydantic import BaseModel

from precifica.core.types import NonNegativeMoney, Percentage
from precifica.models.insights import InsightSettings
from precifica.models.pricing import (
    FixedCostAllocationMode,
    ProductMetricsInput,
    SalesChannel,
)


# =============================================================================
# TABLE ROWS
# =============================================================================

class BusinessSettings(BaseModel):
    """business_settings row (one per company)."""
    id: Optional[int] = None
    company_id: Optional[str] = None
    desired_profit_percent: Optional[Percentage] = None
    estimated_monthly_sales: Optional[int] = None
    target_cmv_percent: Optional[Percentage] = None
    fixed_cost_allocation_mode: Optional[FixedCostAllocationMode] = None


class FixedCost(BaseModel):
    """fixed_costs row."""
    id: Optional[int] = None
    name: Optional[str] = None
    monthly_value: Optional[NonNegativeMoney] = None


class Fee(BaseModel):
    """fees row: a percentage deducted from every sale (tax, card, platform)."""
    id: int
    name: Optional[str] = None
    percentage: Optional[float] = None


class ChannelRow(BaseModel):
    """sales_channels row."""
    id: int
    name: str


class ChannelFee(BaseModel):
    """channel_fees link row."""
    channel_id: int
    fee_id: int


class MonthlyRevenue(BaseModel):
    """monthly_revenue row."""
    year: int
    month: int
    revenue: Optional[NonNegativeMoney] = None


class BusinessRows(BaseModel):
    """Everything fetched for one company before deriving its pricing context."""
    settings: Optional[BusinessSettings] = None
    fixed_costs: list[FixedCost] = []
    fees: list[Fee] = []
    monthly_revenues: list[MonthlyRevenue] = []
    channels: list[ChannelRow] = []
    channel_fees: list[ChannelFee] = []


# =============================================================================
# DERIVED CONTEXT
# =============================================================================

class BusinessPricingContext(BaseModel):
    """Cost structure snapshot shared by every pricing screen."""
    total_fixed_costs: float = 0.0
    variable_cost_percent: float = 0.0
    fixed_cost_percent: float = 0.0
    average_monthly_revenue: float = 0.0
    markup: float = 0.0

    estimated_monthly_sales: int = 1000
    desired_profit_percent: float = 15.0
    target_cmv_percent: float = 35.0
    fixed_cost_allocation_mode: FixedCostAllocationMode = FixedCostAllocationMode.REVENUE_BASED

    channels: list[SalesChannel] = []

    def metrics_input(self, cmv: float, sale_price: float) -> ProductMetricsInput:
        """Build the engine input for one product under this cost structure."""
        return ProductMetricsInput(
            cmv=cmv,
            sale_price=sale_price,
            fixed_cost_percent=self.fixed_cost_percent,
            variable_cost_percent=self.variable_cost_percent,
            desired_profit_percent=self.desired_profit_percent,
            total_fixed_costs=self.total_fixed_costs,
            estimated_monthly_sales=self.estimated_monthly_sales,
            average_monthly_revenue=self.average_monthly_revenue,
            channels=self.channels,
            fixed_cost_allocation_mode=self.fixed_cost_allocation_mode,
            target_cmv_percent=self.target_cmv_percent,
        )

    def insight_settings(self) -> InsightSettings:
        return InsightSettings(
            target_cmv_percent=self.target_cmv_percent,
            desired_profit_percent=self.desired_profit_percent,
        )
