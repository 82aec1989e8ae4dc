"""
Precifica - Report API Routes
Monthly KPIs
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from precifica.bridges.store import StoreError, TableStoreClient
from precifica.core.config import settings
from precifica.dependencies import get_store
from precifica.models.reports import MonthlyKpi, MonthlyKpiRequest
from precifica.services.reports import build_monthly_kpis, window_start

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reports"])


@router.post("/reports/monthly-kpis", response_model=list[MonthlyKpi])
async def monthly_kpis(request: MonthlyKpiRequest) -> list[MonthlyKpi]:
    """Revenue, estimated cost, CMV % and margin % for the last N months."""
    return build_monthly_kpis(
        request.sales,
        request.unit_costs,
        request.monthly_revenues,
        months_back=request.months_back,
        now=request.now,
    )


@router.get("/companies/{company_id}/reports/monthly-kpis", response_model=list[MonthlyKpi])
async def company_monthly_kpis(
    company_id: str,
    months_back: Optional[int] = Query(default=None, ge=1),
    store: TableStoreClient = Depends(get_store),
) -> list[MonthlyKpi]:
    """Monthly KPIs for one company; only sales inside the window are fetched."""
    months_back = months_back or settings.KPI_MONTHS_BACK
    now = datetime.now(timezone.utc)

    try:
        sales = await store.fetch_sales(company_id, window_start(now, months_back))
        unit_costs = await store.fetch_unit_costs(company_id)
        revenues = await store.fetch_monthly_revenues(company_id)
    except StoreError as e:
        logger.error(f"Store failure loading KPIs for company {company_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Erro inesperado ao acessar o banco de dados.",
        )

    return build_monthly_kpis(sales, unit_costs, revenues, months_back=months_back, now=now)
