"""
Tests for deriving the business pricing context from table rows.
"""

import pytest
from pydantic import ValidationError

from precifica.models.business import (
    BusinessRows,
    BusinessSettings,
    ChannelFee,
    ChannelRow,
    Fee,
    FixedCost,
    MonthlyRevenue,
)
from precifica.models.pricing import FixedCostAllocationMode
from precifica.services.business_settings import build_pricing_context, context_from_rows


@pytest.fixture
def rows() -> BusinessRows:
    return BusinessRows(
        fixed_costs=[FixedCost(monthly_value=3000), FixedCost(monthly_value=2000)],
        fees=[
            Fee(id=1, name="Simples Nacional", percentage=8),
            Fee(id=2, name="Cartão", percentage=4),
            Fee(id=3, name="Comissão iFood", percentage=12),
        ],
        monthly_revenues=[
            MonthlyRevenue(year=2026, month=1, revenue=40000),
            MonthlyRevenue(year=2026, month=2, revenue=60000),
        ],
        channels=[ChannelRow(id=10, name="iFood"), ChannelRow(id=11, name="Balcão")],
        channel_fees=[
            ChannelFee(channel_id=10, fee_id=3),
            ChannelFee(channel_id=10, fee_id=2),
            ChannelFee(channel_id=10, fee_id=2),
        ],
    )


class TestPricingContext:
    def test_aggregates(self, rows):
        context = context_from_rows(rows)

        assert context.total_fixed_costs == 5000
        assert context.variable_cost_percent == 24
        assert context.average_monthly_revenue == 50000
        assert context.fixed_cost_percent == pytest.approx(10)
        assert context.markup == pytest.approx(100 / 51)

    def test_defaults_without_settings_row(self, rows):
        context = context_from_rows(rows)

        assert context.desired_profit_percent == 15
        assert context.target_cmv_percent == 35
        assert context.estimated_monthly_sales == 1000
        assert context.fixed_cost_allocation_mode == FixedCostAllocationMode.REVENUE_BASED

    def test_settings_row_overrides_defaults(self, rows):
        rows.settings = BusinessSettings(
            desired_profit_percent=20,
            target_cmv_percent=30,
            estimated_monthly_sales=500,
            fixed_cost_allocation_mode=FixedCostAllocationMode.PER_UNIT,
        )
        context = context_from_rows(rows)

        assert context.desired_profit_percent == 20
        assert context.target_cmv_percent == 30
        assert context.estimated_monthly_sales == 500
        assert context.fixed_cost_allocation_mode == FixedCostAllocationMode.PER_UNIT
        assert context.markup == pytest.approx(100 / 46)

    def test_channel_rates_sum_linked_fees_once(self, rows):
        channels = {c.name: c for c in context_from_rows(rows).channels}

        assert channels["iFood"].total_tax_rate == 16
        assert channels["Balcão"].total_tax_rate == 0
        assert channels["iFood"].id == 10

    def test_no_revenue_history(self):
        context = build_pricing_context(fixed_costs=[FixedCost(monthly_value=5000)])

        assert context.average_monthly_revenue == 0
        assert context.fixed_cost_percent == 0
        assert context.markup == pytest.approx(100 / 85)

    def test_missing_values_count_as_zero(self):
        context = build_pricing_context(
            fixed_costs=[FixedCost(monthly_value=None)],
            fees=[Fee(id=1, percentage=None)],
            monthly_revenues=[MonthlyRevenue(year=2026, month=1, revenue=None)],
        )

        assert context.total_fixed_costs == 0
        assert context.variable_cost_percent == 0

    def test_unpriceable_structure(self):
        context = build_pricing_context(
            business=BusinessSettings(desired_profit_percent=60),
            fees=[Fee(id=1, percentage=45)],
        )
        assert context.markup == 0

    def test_numeric_strings_from_store(self):
        cost = FixedCost.model_validate({"monthly_value": "1500.50"})
        assert cost.monthly_value == 1500.5

    @pytest.mark.parametrize("row", [
        lambda: FixedCost(monthly_value=-100),
        lambda: MonthlyRevenue(year=2026, month=1, revenue=-1),
    ])
    def test_negative_amounts_rejected(self, row):
        with pytest.raises(ValidationError):
            row()

    def test_percentage_bounds(self):
        with pytest.raises(ValidationError):
            BusinessSettings(desired_profit_percent=120)


class TestContextHelpers:
    def test_metrics_input(self, rows):
        context = context_from_rows(rows)
        data = context.metrics_input(cmv=10, sale_price=30)

        assert data.cmv == 10
        assert data.sale_price == 30
        assert data.variable_cost_percent == 24
        assert data.total_fixed_costs == 5000
        assert [c.name for c in data.channels] == ["iFood", "Balcão"]

    def test_insight_settings(self, rows):
        targets = context_from_rows(rows).insight_settings()

        assert targets.target_cmv_percent == 35
        assert targets.desired_profit_percent == 15
