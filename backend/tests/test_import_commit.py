"""
Tests for turning reviewed import items into write payloads and committing them.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from conftest import FakeStore
from precifica.bridges.store import TableStoreClient
from precifica.models.sales_import import ImportStatus, ParsedItem
from precifica.services.import_commit import (
    DEFAULT_IMPORTED_CATEGORY,
    EmptyImportError,
    attach_created_products,
    build_import_plan,
    commit_import,
    make_batch_id,
    reference_sold_at,
)

NOW = datetime(2026, 3, 5, 14, 7, 9, tzinfo=timezone.utc)


def matched(name: str, product_id: int, qty: int = 10, avg_price: float = 5.0) -> ParsedItem:
    return ParsedItem(
        name=name,
        category="Salgados",
        qty=qty,
        total=qty * avg_price,
        avg_price=avg_price,
        status=ImportStatus.MATCHED,
        existing_id=product_id,
    )


def not_found(name: str, selected: bool = True, category: str = "") -> ParsedItem:
    return ParsedItem(
        name=name,
        category=category,
        qty=4,
        total=100.0,
        avg_price=25.0,
        status=ImportStatus.NOT_FOUND,
        selected=selected,
    )


class TestBatchId:
    def test_format(self):
        assert make_batch_id("42", NOW) == "batch_42_20260305140709"

    def test_converted_to_utc(self):
        local = NOW.astimezone(timezone(timedelta(hours=-3)))
        assert make_batch_id("42", local) == "batch_42_20260305140709"

    def test_defaults_to_now(self):
        assert make_batch_id("42").startswith("batch_42_")


class TestReferenceSoldAt:
    @pytest.mark.parametrize("month, day", [
        ("2026-01", 31),
        ("2026-02", 28),
        ("2024-02", 29),
        ("2026-04", 30),
    ])
    def test_last_day_at_noon_utc(self, month, day):
        sold_at = reference_sold_at(month)

        assert sold_at.day == day
        assert (sold_at.hour, sold_at.minute) == (12, 0)
        assert sold_at.tzinfo == timezone.utc

    @pytest.mark.parametrize("month", ["2026-13", "2026-00", "march"])
    def test_invalid_month(self, month):
        with pytest.raises(ValueError):
            reference_sold_at(month)


class TestBuildImportPlan:
    def test_matched_items_become_sales(self):
        items = [matched("Coxinha", 1), matched("Esfiha", 2, qty=3, avg_price=6.5)]
        plan = build_import_plan(items, "42", "2026-02", now=NOW)

        assert plan.batch_id == "batch_42_20260305140709"
        assert [s.product_id for s in plan.sales] == [1, 2]
        assert plan.sales[1].quantity == 3
        assert plan.sales[1].sale_price == 6.5
        assert all(s.import_batch_id == plan.batch_id for s in plan.sales)
        assert all(s.company_id == "42" for s in plan.sales)
        assert all(s.sold_at == datetime(2026, 2, 28, 12, tzinfo=timezone.utc) for s in plan.sales)
        assert plan.products_to_create == []

    def test_selected_not_found_become_products(self):
        items = [
            matched("Coxinha", 1),
            not_found("X-Bacon", category="Lanches"),
            not_found("Batata"),
            not_found("Suco", selected=False),
        ]
        plan = build_import_plan(items, "42", "2026-02", create_selected_products=True, now=NOW)

        assert [p.name for p in plan.products_to_create] == ["X-Bacon", "Batata"]
        assert plan.products_to_create[0].category == "Lanches"
        assert plan.products_to_create[1].category == DEFAULT_IMPORTED_CATEGORY
        assert plan.products_to_create[0].sale_price == 25.0
        assert all(p.active for p in plan.products_to_create)

    def test_products_not_created_unless_requested(self):
        plan = build_import_plan([matched("Coxinha", 1), not_found("X-Bacon")], "42", "2026-02")
        assert plan.products_to_create == []

    def test_nothing_to_write(self):
        with pytest.raises(EmptyImportError):
            build_import_plan([not_found("X-Bacon")], "42", "2026-02")

    def test_new_products_without_their_sales_are_not_enough(self):
        with pytest.raises(EmptyImportError):
            build_import_plan(
                [not_found("X-Bacon")], "42", "2026-02", create_selected_products=True
            )

    def test_sales_of_new_products_only(self):
        plan = build_import_plan(
            [not_found("X-Bacon")],
            "42",
            "2026-02",
            create_selected_products=True,
            import_selected_sales=True,
        )
        assert plan.sales == []
        assert len(plan.products_to_create) == 1

    def test_attach_created_products(self):
        items = [matched("Coxinha", 1), not_found("X-Bacon"), not_found("Batata")]
        plan = build_import_plan(
            items, "42", "2026-02",
            create_selected_products=True, import_selected_sales=True, now=NOW,
        )

        attach_created_products(plan, items, {"X-Bacon": 99})

        assert [s.product_id for s in plan.sales] == [1, 99]
        assert plan.sales[1].quantity == 4
        assert plan.sales[1].import_batch_id == plan.batch_id

    def test_attach_ignored_without_sales_option(self):
        items = [matched("Coxinha", 1), not_found("X-Bacon")]
        plan = build_import_plan(items, "42", "2026-02", create_selected_products=True)

        attach_created_products(plan, items, {"X-Bacon": 99})

        assert [s.product_id for s in plan.sales] == [1]


class TestCommitImport:
    def test_writes_products_then_sales(self):
        store = FakeStore()
        items = [matched("Coxinha", 1), not_found("X-Bacon")]
        plan = build_import_plan(
            items, "42", "2026-02",
            create_selected_products=True, import_selected_sales=True, now=NOW,
        )

        result = asyncio.run(commit_import(plan, items, store))

        assert result.batch_id == "batch_42_20260305140709"
        assert result.products_created == 1
        assert result.sales_inserted == 2
        assert result.errors == []
        assert [p.name for p in store.created] == ["X-Bacon"]
        assert {s.import_batch_id for s in store.sales} == {result.batch_id}

    def test_product_failure_does_not_stop_import(self):
        store = FakeStore(fail_products=("X-Bacon",))
        items = [matched("Coxinha", 1), not_found("X-Bacon"), not_found("Batata")]
        plan = build_import_plan(
            items, "42", "2026-02",
            create_selected_products=True, import_selected_sales=True,
        )

        result = asyncio.run(commit_import(plan, items, store))

        assert result.products_created == 1
        assert result.sales_inserted == 2
        assert len(result.errors) == 1
        assert "X-Bacon" in result.errors[0]

    def test_all_creations_failed_and_no_sales(self):
        store = FakeStore(fail_products=("X-Bacon",))
        items = [not_found("X-Bacon")]
        plan = build_import_plan(
            items, "42", "2026-02",
            create_selected_products=True, import_selected_sales=True,
        )

        with pytest.raises(EmptyImportError):
            asyncio.run(commit_import(plan, items, store))
        assert store.sales == []

    def test_sales_insert_failure_reported(self):
        store = FakeStore(fail_all=True)
        items = [matched("Coxinha", 1)]
        plan = build_import_plan(items, "42", "2026-02")

        result = asyncio.run(commit_import(plan, items, store))

        assert result.sales_inserted == 0
        assert len(result.errors) == 1

    def test_product_reply_without_id_reported(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/products"):
                return httpx.Response(201, json=[{}])
            return httpx.Response(201)

        store = TableStoreClient(base_url="http://store.test", transport=httpx.MockTransport(handler))
        items = [matched("Coxinha", 1), not_found("X-Bacon")]
        plan = build_import_plan(
            items, "42", "2026-02",
            create_selected_products=True, import_selected_sales=True,
        )

        result = asyncio.run(commit_import(plan, items, store))

        assert result.products_created == 0
        assert result.sales_inserted == 1
        assert len(result.errors) == 1
        assert "X-Bacon" in result.errors[0]
