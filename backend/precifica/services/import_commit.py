"""
Precifica - Sales Import Commit
Turn reviewed ParsedItems into write payloads and hand them to the store.

LOGIC:
1. One batch id per confirmed import (enables bulk undo)
2. Sales dated on the last day of the reference month at 12:00
3. Matched items become sales; selected not-found items may become new
   products and, optionally, sales of those new products

GUARDRAILS:
- Planning is pure; only commit_import talks to the store
- A plan with nothing to write is rejected before any write
"""

import calendar
import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from precifica.bridges.store import StoreError, TableStoreClient
from precifica.models.sales_import import (
    ImportCommitResult,
    ImportPlan,
    ImportStatus,
    NewProductPayload,
    ParsedItem,
    ProductId,
    SaleRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_IMPORTED_CATEGORY = "Importado"


class EmptyImportError(ValueError):
    """Nothing in the reviewed items can be written."""

    def __init__(self) -> None:
        super().__init__("Nenhuma venda válida para ser importada.")


def make_batch_id(company_id: str, now: Optional[datetime] = None) -> str:
    """batch_<company>_<YYYYMMDDHHMMSS> in UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return f"batch_{company_id}_{now:%Y%m%d%H%M%S}"


def reference_sold_at(import_month: str) -> datetime:
    """Last day of a YYYY-MM month at 12:00 UTC."""
    year_str, month_str = import_month.split("-")
    year, month = int(year_str), int(month_str)
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid import month: {import_month}")
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, last_day, 12, 0, 0, tzinfo=timezone.utc)


def _sale(plan: ImportPlan, product_id: ProductId, item: ParsedItem) -> SaleRecord:
    return SaleRecord(
        product_id=product_id,
        quantity=item.qty,
        sale_price=item.avg_price,
        sold_at=plan.sold_at,
        import_batch_id=plan.batch_id,
        company_id=plan.company_id,
    )


def selected_not_found(items: Iterable[ParsedItem]) -> list[ParsedItem]:
    return [i for i in items if i.status == ImportStatus.NOT_FOUND and i.selected]


def build_import_plan(
    items: list[ParsedItem],
    company_id: str,
    import_month: str,
    create_selected_products: bool = False,
    import_selected_sales: bool = False,
    now: Optional[datetime] = None,
) -> ImportPlan:
    """
    Build everything a confirmed import will write.

    Sales for newly created products are added by attach_created_products
    once their ids exist.
    """
    plan = ImportPlan(
        batch_id=make_batch_id(company_id, now),
        company_id=company_id,
        sold_at=reference_sold_at(import_month),
        import_selected_sales=import_selected_sales,
    )

    plan.sales = [
        _sale(plan, item.existing_id, item)
        for item in items
        if item.status == ImportStatus.MATCHED and item.existing_id is not None
    ]

    pending = selected_not_found(items)
    if create_selected_products:
        plan.products_to_create = [
            NewProductPayload(
                name=item.name,
                category=item.category or DEFAULT_IMPORTED_CATEGORY,
                sale_price=item.avg_price,
                company_id=company_id,
            )
            for item in pending
        ]

    # Nothing can ever be written: no matched sales and no new products
    if not plan.sales and not (import_selected_sales and plan.products_to_create):
        raise EmptyImportError()

    return plan


def attach_created_products(
    plan: ImportPlan,
    items: Iterable[ParsedItem],
    created_ids: Mapping[str, ProductId],
) -> ImportPlan:
    """Add sales for products created from selected not-found items."""
    if not plan.import_selected_sales:
        return plan

    for item in selected_not_found(items):
        new_id = created_ids.get(item.name)
        if new_id is not None:
            plan.sales.append(_sale(plan, new_id, item))
    return plan


async def commit_import(
    plan: ImportPlan,
    items: list[ParsedItem],
    store: TableStoreClient,
) -> ImportCommitResult:
    """
    Write a plan: create products one by one, then insert all sales at once.

    Per-product failures are reported in the result and do not stop the
    import; an empty final sales list raises EmptyImportError.
    """
    errors: list[str] = []
    created_ids: dict[str, ProductId] = {}

    for payload in plan.products_to_create:
        try:
            created_ids[payload.name] = await store.insert_product(payload)
        except StoreError as e:
            logger.error(f"Error creating product {payload.name!r}: {e}")
            errors.append(f"Erro ao criar produto {payload.name}: {e}")

    attach_created_products(plan, items, created_ids)

    if not plan.sales:
        raise EmptyImportError()

    inserted = 0
    try:
        inserted = await store.insert_sales(plan.sales)
    except StoreError as e:
        logger.error(f"Error inserting sales for {plan.batch_id}: {e}")
        errors.append(f"Erro ao gravar vendas: {e}")

    logger.info(
        f"Import {plan.batch_id}: {inserted} sales, {len(created_ids)} new products, "
        f"{len(errors)} errors"
    )
    return ImportCommitResult(
        batch_id=plan.batch_id,
        sales_inserted=inserted,
        products_created=len(created_ids),
        errors=errors,
    )
