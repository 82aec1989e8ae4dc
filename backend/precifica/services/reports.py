"""
Precifica - Monthly KPIs
Revenue, estimated cost and margins per calendar month.

LOGIC:
1. Zero-filled skeleton for the last N months (UTC)
2. Revenue = quantity x sale price of every sale in the window
3. Estimated cost from the product's current unit cost; sales of products
   without a unit cost are counted apart instead of assumed free
4. Manually entered revenue is attached alongside, never mixed in
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from precifica.core.config import settings
from precifica.models.business import MonthlyRevenue
from precifica.models.reports import MonthlyKpi, ProductUnitCost, SaleRow

logger = logging.getLogger(__name__)


def month_label(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def window_start(now: datetime, months_back: int) -> datetime:
    """First instant (UTC) of the oldest month in the window."""
    year, month = _shift_month(now.year, now.month, -(months_back - 1))
    return datetime(year, month, 1, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def build_monthly_kpis(
    sales: Iterable[SaleRow],
    unit_costs: Iterable[ProductUnitCost],
    monthly_revenues: Iterable[MonthlyRevenue] = (),
    months_back: Optional[int] = None,
    now: Optional[datetime] = None,
) -> list[MonthlyKpi]:
    """KPIs for the last ``months_back`` months, oldest first."""
    months_back = months_back or settings.KPI_MONTHS_BACK
    now = _as_utc(now or datetime.now(timezone.utc))

    kpis: dict[str, MonthlyKpi] = {}
    for offset in range(months_back - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -offset)
        label = month_label(year, month)
        kpis[label] = MonthlyKpi(year=year, month=month, label=label)

    cost_map = {str(c.product_id): c.unit_cost or 0.0 for c in unit_costs}

    skipped = 0
    for sale in sales:
        if sale.sold_at is None:
            continue

        sold_at = _as_utc(sale.sold_at)
        kpi = kpis.get(month_label(sold_at.year, sold_at.month))
        if kpi is None:
            skipped += 1
            continue

        qty = sale.quantity or 0.0
        revenue = qty * (sale.sale_price or 0.0)
        kpi.revenue_sales += revenue

        unit_cost = cost_map.get(str(sale.product_id), 0.0)
        if unit_cost > 0:
            kpi.cost_estimated += qty * unit_cost
        else:
            kpi.undefined_cost_qty += qty
            kpi.undefined_cost_revenue += revenue

    for row in monthly_revenues:
        kpi = kpis.get(month_label(row.year, row.month))
        if kpi is not None:
            kpi.revenue_manual = row.revenue or 0.0

    results = list(kpis.values())
    for kpi in results:
        kpi.profit_estimated = kpi.revenue_sales - kpi.cost_estimated
        if kpi.revenue_sales > 0:
            kpi.cmv_percent = kpi.cost_estimated / kpi.revenue_sales * 100
            kpi.margin_percent = kpi.profit_estimated / kpi.revenue_sales * 100

    if skipped:
        logger.debug(f"Monthly KPIs: {skipped} sales outside the {months_back}-month window")
    return results
