"""
Precifica - Business Settings API Routes
Derive the pricing context shared by every pricing screen
"""

from fastapi import APIRouter, Depends, HTTPException, status

from precifica.bridges.store import StoreError, TableStoreClient
from precifica.dependencies import get_store
from precifica.models.business import BusinessPricingContext, BusinessRows
from precifica.services.business_settings import context_from_rows

router = APIRouter(tags=["Business Settings"])


@router.post("/business/context", response_model=BusinessPricingContext)
async def business_context(rows: BusinessRows) -> BusinessPricingContext:
    """Pricing context from rows the caller already fetched."""
    return context_from_rows(rows)


@router.get("/companies/{company_id}/business/context", response_model=BusinessPricingContext)
async def company_business_context(
    company_id: str,
    store: TableStoreClient = Depends(get_store),
) -> BusinessPricingContext:
    """Pricing context for one company, read from the store."""
    try:
        rows = await store.fetch_business_rows(company_id)
    except StoreError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Erro inesperado ao acessar o banco de dados.",
        )
    return context_from_rows(rows)
