"""
Precifica - Sales Import API Routes
Paste -> review -> confirm

GUARDRAILS:
- Parsing never writes; only /commit touches the store
- A failed parse returns a generic 422 and no partial result
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from precifica.bridges.store import StoreError, TableStoreClient
from precifica.dependencies import get_store
from precifica.models.sales_import import (
    ImportBatch,
    ImportCommitRequest,
    ImportCommitResult,
    ImportPlan,
    ImportPlanRequest,
    ImportPreview,
    NotFoundFilterRequest,
    ParsedItem,
    ParseRequest,
    ParseTextRequest,
)
from precifica.services.import_commit import build_import_plan, commit_import
from precifica.services.sales_import import (
    SalesImportError,
    filter_not_found,
    parse_sales_report,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sales Import"])

STORE_UNAVAILABLE = "Erro inesperado ao acessar o banco de dados."


def _store_failure(e: StoreError) -> HTTPException:
    logger.error(f"Store failure during import: {e}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=STORE_UNAVAILABLE)


def _parse(raw_text: str, catalog) -> ImportPreview:
    try:
        return parse_sales_report(raw_text, catalog)
    except SalesImportError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


# =============================================================================
# STATELESS
# =============================================================================

@router.post("/imports/sales/parse", response_model=ImportPreview)
async def parse_sales(request: ParseRequest) -> ImportPreview:
    """
    Parse a pasted sales report against the given catalog.

    Accepts tab-separated rows with an optional Portuguese header
    (Produto | Categoria | Qtd | Total | Médio) and R$ values.
    """
    return _parse(request.raw_text, request.catalog)


@router.post("/imports/sales/not-found", response_model=list[ParsedItem])
async def not_found_items(request: NotFoundFilterRequest) -> list[ParsedItem]:
    """Unmatched items to review, drinks hidden by default."""
    return filter_not_found(request.items, request.hide_drinks, request.search)


@router.post("/imports/sales/plan", response_model=ImportPlan)
async def plan_import(request: ImportPlanRequest) -> ImportPlan:
    """Write payloads a confirmed import would produce. Nothing is written."""
    try:
        return build_import_plan(
            request.items,
            request.company_id,
            request.import_month,
            create_selected_products=request.create_selected_products,
            import_selected_sales=request.import_selected_sales,
        )
    except ValueError as e:
        # EmptyImportError or an impossible import month
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


# =============================================================================
# COMPANY SCOPED (store backed)
# =============================================================================

@router.post("/companies/{company_id}/imports/sales/parse", response_model=ImportPreview)
async def parse_company_sales(
    company_id: str,
    request: ParseTextRequest,
    store: TableStoreClient = Depends(get_store),
) -> ImportPreview:
    """Parse a paste against the company's catalog, fetched once."""
    if not request.raw_text.strip():
        return ImportPreview()
    try:
        catalog = await store.fetch_product_catalog(company_id)
    except StoreError as e:
        raise _store_failure(e)
    return _parse(request.raw_text, catalog)


@router.post("/companies/{company_id}/imports/sales/commit", response_model=ImportCommitResult)
async def commit_company_sales(
    company_id: str,
    request: ImportCommitRequest,
    store: TableStoreClient = Depends(get_store),
) -> ImportCommitResult:
    """Persist reviewed items as one import batch."""
    try:
        plan = build_import_plan(
            request.items,
            company_id,
            request.import_month,
            create_selected_products=request.create_selected_products,
            import_selected_sales=request.import_selected_sales,
        )
        return await commit_import(plan, request.items, store)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except StoreError as e:
        raise _store_failure(e)


@router.get("/companies/{company_id}/imports/sales/last-batch", response_model=ImportBatch)
async def last_batch(
    company_id: str,
    store: TableStoreClient = Depends(get_store),
) -> ImportBatch:
    """Most recent import batch, for undo."""
    try:
        batch = await store.fetch_last_batch(company_id)
    except StoreError as e:
        raise _store_failure(e)
    if batch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No import batch found")
    return batch


@router.delete("/companies/{company_id}/imports/sales/batches/{batch_id}")
async def undo_batch(
    company_id: str,
    batch_id: str,
    store: TableStoreClient = Depends(get_store),
) -> dict:
    """Delete every sale of one import batch. Cannot be undone."""
    try:
        await store.delete_batch(company_id, batch_id)
    except StoreError as e:
        raise _store_failure(e)
    return {"status": "deleted", "batch_id": batch_id}
