"""
Precifica - Table Store Bridge

Thin async client for the hosted table API (PostgREST dialect) that owns
every row: products, business settings, costs, fees, channels, sales.

- Reads return validated schema objects
- Writes take the payloads built by the import planner
- Any transport failure or non-2xx response raises StoreError
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from precifica.core.config import settings
from precifica.models.business import (
    BusinessRows,
    BusinessSettings,
    ChannelFee,
    ChannelRow,
    Fee,
    FixedCost,
    MonthlyRevenue,
)
from precifica.models.reports import ProductUnitCost, SaleRow
from precifica.models.sales_import import (
    CatalogProduct,
    ImportBatch,
    NewProductPayload,
    ProductId,
    SaleRecord,
)

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """The hosted table API could not serve a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _eq(value: Any) -> str:
    return f"eq.{value}"


def _rows(model: type[BaseModel], rows: list[dict[str, Any]], table: str) -> list[Any]:
    """Validate fetched rows; malformed data aborts the caller's operation."""
    try:
        return [model(**row) for row in rows]
    except ValidationError as e:
        logger.error(f"[STORE] Malformed {table} rows: {e}")
        raise StoreError(f"Malformed rows in {table}") from e


class TableStoreClient:
    """Client for the hosted table API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.STORE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.STORE_API_KEY
        self.timeout = timeout or settings.STORE_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        headers = self._headers()
        if prefer:
            headers["Prefer"] = prefer

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    f"/rest/v1/{table}",
                    params=params,
                    json=json,
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.error(f"[STORE] {method} {table} error: {e}")
            raise StoreError(f"Store request failed: {method} {table}") from e

        if response.status_code >= 300:
            logger.warning(f"[STORE] {method} {table} failed: {response.status_code} {response.text}")
            raise StoreError(
                f"Store request failed: {method} {table} ({response.status_code})",
                status_code=response.status_code,
            )

        return response

    async def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        response = await self._request("GET", table, params=params)
        return response.json() or []

    # =========================================================================
    # CATALOG
    # =========================================================================

    async def fetch_product_catalog(self, company_id: str) -> list[CatalogProduct]:
        """Product id/name pairs for one company, fetched once per parse run."""
        rows = await self._select(
            "products", {"select": "id,name", "company_id": _eq(company_id)}
        )
        return _rows(CatalogProduct, rows, "products")

    async def insert_product(self, payload: NewProductPayload) -> ProductId:
        """Create a product and return its new id."""
        response = await self._request(
            "POST",
            "products",
            params={"select": "id"},
            json=payload.model_dump(mode="json"),
            prefer="return=representation",
        )
        rows = response.json()
        new_id = rows[0].get("id") if rows else None
        if new_id is None:
            logger.error(f"[STORE] No id returned for product {payload.name!r}: {rows}")
            raise StoreError(f"Store returned no id for product {payload.name!r}")
        logger.info(f"[STORE] Created product {payload.name!r} ({new_id})")
        return new_id

    # =========================================================================
    # BUSINESS SETTINGS
    # =========================================================================

    async def fetch_business_rows(self, company_id: str) -> BusinessRows:
        """Everything needed to derive a company's pricing context."""
        company = _eq(company_id)

        settings_rows = await self._select(
            "business_settings", {"select": "*", "company_id": company, "limit": "1"}
        )
        fixed_costs = await self._select(
            "fixed_costs", {"select": "monthly_value", "company_id": company}
        )
        fees = await self._select("fees", {"select": "id,name,percentage"})
        revenues = await self._select(
            "monthly_revenue", {"select": "year,month,revenue", "company_id": company}
        )
        channels = _rows(
            ChannelRow,
            await self._select("sales_channels", {"select": "id,name", "company_id": company}),
            "sales_channels",
        )

        channel_fees: list[dict[str, Any]] = []
        if channels:
            ids = ",".join(str(c.id) for c in channels)
            channel_fees = await self._select(
                "channel_fees", {"select": "channel_id,fee_id", "channel_id": f"in.({ids})"}
            )

        return BusinessRows(
            settings=_rows(BusinessSettings, settings_rows, "business_settings")[0] if settings_rows else None,
            fixed_costs=_rows(FixedCost, fixed_costs, "fixed_costs"),
            fees=_rows(Fee, fees, "fees"),
            monthly_revenues=_rows(MonthlyRevenue, revenues, "monthly_revenue"),
            channels=channels,
            channel_fees=_rows(ChannelFee, channel_fees, "channel_fees"),
        )

    # =========================================================================
    # SALES
    # =========================================================================

    async def insert_sales(self, records: list[SaleRecord]) -> int:
        """Insert sales records in one batch request."""
        if not records:
            return 0
        await self._request(
            "POST",
            "sales",
            json=[r.model_dump(mode="json") for r in records],
            prefer="return=minimal",
        )
        logger.info(f"[STORE] Inserted {len(records)} sales ({records[0].import_batch_id})")
        return len(records)

    async def fetch_sales(self, company_id: str, since: datetime) -> list[SaleRow]:
        rows = await self._select(
            "sales",
            {
                "select": "product_id,quantity,sale_price,sold_at",
                "company_id": _eq(company_id),
                "sold_at": f"gte.{since.isoformat()}",
            },
        )
        return _rows(SaleRow, rows, "sales")

    async def fetch_unit_costs(self, company_id: str) -> list[ProductUnitCost]:
        rows = await self._select(
            "product_costs_view",
            {"select": "product_id,unit_cost", "company_id": _eq(company_id)},
        )
        return _rows(ProductUnitCost, rows, "product_costs_view")

    async def fetch_monthly_revenues(self, company_id: str) -> list[MonthlyRevenue]:
        rows = await self._select(
            "monthly_revenue",
            {"select": "year,month,revenue", "company_id": _eq(company_id)},
        )
        return _rows(MonthlyRevenue, rows, "monthly_revenue")

    # =========================================================================
    # IMPORT BATCHES
    # =========================================================================

    async def fetch_last_batch(self, company_id: str) -> Optional[ImportBatch]:
        """Most recent import batch (highest sale id) with its sales count."""
        rows = await self._select(
            "sales",
            {
                "select": "import_batch_id,id,sold_at",
                "company_id": _eq(company_id),
                "import_batch_id": "not.is.null",
                "order": "id.desc",
                "limit": "1",
            },
        )
        if not rows:
            return None

        batch_id = rows[0]["import_batch_id"]
        response = await self._request(
            "HEAD",
            "sales",
            params={
                "select": "*",
                "company_id": _eq(company_id),
                "import_batch_id": _eq(batch_id),
            },
            prefer="count=exact",
        )
        # Content-Range: 0-41/42 or */0
        content_range = response.headers.get("content-range", "")
        total = content_range.rsplit("/", 1)[-1]
        count = int(total) if total.isdigit() else 0

        return ImportBatch(id=batch_id, created_at=rows[0].get("sold_at"), count=count)

    async def delete_batch(self, company_id: str, batch_id: str) -> None:
        """Delete every sale of one import batch (bulk undo)."""
        await self._request(
            "DELETE",
            "sales",
            params={"company_id": _eq(company_id), "import_batch_id": _eq(batch_id)},
        )
        logger.info(f"[STORE] Deleted import batch {batch_id} for company {company_id}")


def get_store_client() -> TableStoreClient:
    return TableStoreClient()
