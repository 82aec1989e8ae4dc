"""Shared fixtures for Precifica tests."""

from datetime import datetime
from typing import Optional

import pytest

from precifica.bridges.store import StoreError
from precifica.models.business import BusinessPricingContext, BusinessRows, MonthlyRevenue
from precifica.models.pricing import ProductMetricsInput, SalesChannel
from precifica.models.reports import ProductUnitCost, SaleRow
from precifica.models.sales_import import (
    CatalogProduct,
    ImportBatch,
    NewProductPayload,
    SaleRecord,
)


@pytest.fixture
def base_input() -> ProductMetricsInput:
    """Reference product: CMV 10 sold at 30 under a 10/12/15 cost structure."""
    return ProductMetricsInput(
        cmv=10,
        sale_price=30,
        fixed_cost_percent=10,
        variable_cost_percent=12,
        desired_profit_percent=15,
        total_fixed_costs=5000,
        estimated_monthly_sales=1000,
        average_monthly_revenue=50000,
        channels=[SalesChannel(id=1, name="iFood", total_tax_rate=12)],
    )


@pytest.fixture
def context() -> BusinessPricingContext:
    """Pricing context equivalent to base_input's cost structure."""
    return BusinessPricingContext(
        total_fixed_costs=5000,
        variable_cost_percent=12,
        fixed_cost_percent=10,
        average_monthly_revenue=50000,
        markup=100 / 63,
        estimated_monthly_sales=1000,
        desired_profit_percent=15,
        target_cmv_percent=35,
        channels=[SalesChannel(id=1, name="iFood", total_tax_rate=12)],
    )


class FakeStore:
    """In-memory stand-in for TableStoreClient."""

    def __init__(
        self,
        catalog: Optional[list[CatalogProduct]] = None,
        rows: Optional[BusinessRows] = None,
        fail_products: tuple[str, ...] = (),
        fail_all: bool = False,
    ) -> None:
        self.catalog = catalog or []
        self.rows = rows or BusinessRows()
        self.fail_products = fail_products
        self.fail_all = fail_all
        self.created: list[NewProductPayload] = []
        self.sales: list[SaleRecord] = []
        self.deleted: list[tuple[str, str]] = []
        self._next_id = 1000
        self.sale_rows: list[SaleRow] = []
        self.unit_costs: list[ProductUnitCost] = []
        self.monthly_revenues: list[MonthlyRevenue] = []
        self.sales_since: Optional[datetime] = None

    def _check(self) -> None:
        if self.fail_all:
            raise StoreError("store down", status_code=503)

    async def fetch_product_catalog(self, company_id: str) -> list[CatalogProduct]:
        self._check()
        return self.catalog

    async def fetch_business_rows(self, company_id: str) -> BusinessRows:
        self._check()
        return self.rows

    async def insert_product(self, payload: NewProductPayload):
        self._check()
        if payload.name in self.fail_products:
            raise StoreError(f"duplicate product {payload.name}", status_code=409)
        self._next_id += 1
        self.created.append(payload)
        return self._next_id

    async def insert_sales(self, records: list[SaleRecord]) -> int:
        self._check()
        self.sales.extend(records)
        return len(records)

    async def fetch_last_batch(self, company_id: str) -> Optional[ImportBatch]:
        self._check()
        if not self.sales:
            return None
        batch_id = self.sales[-1].import_batch_id
        count = sum(1 for s in self.sales if s.import_batch_id == batch_id)
        return ImportBatch(id=batch_id, created_at=self.sales[-1].sold_at, count=count)

    async def delete_batch(self, company_id: str, batch_id: str) -> None:
        self._check()
        self.deleted.append((company_id, batch_id))
        self.sales = [s for s in self.sales if s.import_batch_id != batch_id]

    async def fetch_sales(self, company_id: str, since: datetime) -> list[SaleRow]:
        self._check()
        self.sales_since = since
        return [s for s in self.sale_rows if s.sold_at is None or s.sold_at >= since]

    async def fetch_unit_costs(self, company_id: str) -> list[ProductUnitCost]:
        self._check()
        return self.unit_costs

    async def fetch_monthly_revenues(self, company_id: str) -> list[MonthlyRevenue]:
        self._check()
        return self.monthly_revenues


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore(
        catalog=[
            CatalogProduct(id=1, name="X-Tudo"),
            CatalogProduct(id=2, name="Refrigerantes"),
            CatalogProduct(id=3, name="Pão de Queijo"),
        ]
    )
