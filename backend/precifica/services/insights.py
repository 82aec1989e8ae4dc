"""
Precifica - Insight Classifier
Translate ProductMetrics into ranked, human-readable pricing alerts.

RULES (evaluated independently, in this order):
1. negative_margin       danger   margin status is danger
2. cmv_above_target      warning/danger, following the CMV status
3. price_below_ideal     warning  sale price more than 5% below the ideal price
4. profit_below_desired  warning  margin status is warning (never with rule 1)

GUARDRAILS:
- Products without a positive sale price get no insights at all
- Metrics are received pre-computed; this module never prices products
"""

import logging
import math
from typing import Iterable, Mapping, Optional

from precifica.core.config import settings
from precifica.core.types import Money
from precifica.models.business import BusinessPricingContext
from precifica.models.insights import (
    ActionItem,
    CatalogProductCost,
    Insight,
    InsightKey,
    InsightLevel,
    InsightProduct,
    InsightSettings,
    SalesTotals,
)
from precifica.models.pricing import HealthStatus, ProductMetrics
from precifica.services.pricing import compute_product_metrics

logger = logging.getLogger(__name__)

# Lower = more urgent
LEVEL_PRIORITY: dict[InsightLevel, int] = {
    InsightLevel.DANGER: 0,
    InsightLevel.WARNING: 1,
    InsightLevel.INFO: 2,
}

# Prices within this fraction of the ideal price are not flagged
PRICE_TOLERANCE = 0.05

SUSPICIOUS_COST_REASON = "Custo suspeito / ficha incompleta"


def _cmv_gap(metrics: ProductMetrics, target: float) -> str:
    return (
        f"CMV de {metrics.cmv_percent:.1f}% está "
        f"{metrics.cmv_percent - target:.1f}pp acima da meta de {target:g}%."
    )


def build_insights(
    product: InsightProduct,
    metrics: ProductMetrics,
    targets: InsightSettings,
) -> list[Insight]:
    """
    Generate the insights for one product, most severe first.

    Insights of the same level keep rule-evaluation order.
    """
    sale_price = product.sale_price or 0.0
    if sale_price <= 0:
        return []

    insights: list[Insight] = []

    if metrics.margin_status == HealthStatus.DANGER:
        insights.append(Insight(
            key=InsightKey.NEGATIVE_MARGIN,
            level=InsightLevel.DANGER,
            title="Margem NEGATIVA (prejuízo)",
            detail=(
                f"Lucro de {metrics.profit_percent:.1f}%: cada unidade vendida gera "
                f"perda de {Money.format_brl(abs(metrics.profit_value), symbol=True)}."
            ),
        ))

    if metrics.cmv_status == HealthStatus.DANGER:
        insights.append(Insight(
            key=InsightKey.CMV_ABOVE_TARGET,
            level=InsightLevel.DANGER,
            title="CMV muito acima do alvo",
            detail=_cmv_gap(metrics, targets.target_cmv_percent),
        ))
    elif metrics.cmv_status == HealthStatus.WARNING:
        insights.append(Insight(
            key=InsightKey.CMV_ABOVE_TARGET,
            level=InsightLevel.WARNING,
            title="CMV acima do alvo",
            detail=_cmv_gap(metrics, targets.target_cmv_percent),
        ))

    ideal = metrics.ideal_menu_price
    if ideal > 0 and math.isfinite(ideal):
        gap = (ideal - sale_price) / ideal
        if gap > PRICE_TOLERANCE:
            insights.append(Insight(
                key=InsightKey.PRICE_BELOW_IDEAL,
                level=InsightLevel.WARNING,
                title="Preço abaixo do ideal",
                detail=(
                    f"Preço atual {Money.format_brl(sale_price, symbol=True)} está "
                    f"{gap * 100:.0f}% abaixo do preço ideal de "
                    f"{Money.format_brl(ideal, symbol=True)}."
                ),
            ))

    if metrics.margin_status == HealthStatus.WARNING:
        insights.append(Insight(
            key=InsightKey.PROFIT_BELOW_DESIRED,
            level=InsightLevel.WARNING,
            title="Lucro abaixo do desejado",
            detail=(
                f"Lucro de {metrics.profit_percent:.1f}% está abaixo da meta de "
                f"{targets.desired_profit_percent:g}%."
            ),
        ))

    # sorted() is stable: same-level insights stay in rule order
    return sorted(insights, key=lambda i: LEVEL_PRIORITY[i.level])


def get_worst_insight_level(insights: Iterable[Insight]) -> Optional[InsightLevel]:
    """Most severe level present, or None for no insights."""
    levels = [i.level for i in insights]
    if not levels:
        return None
    return min(levels, key=lambda level: LEVEL_PRIORITY[level])


# =============================================================================
# ACTION CENTER
# =============================================================================

def build_action_center(
    products: Iterable[CatalogProductCost],
    context: BusinessPricingContext,
    sales_by_product: Optional[Mapping[int, SalesTotals]] = None,
    limit: Optional[int] = None,
) -> list[ActionItem]:
    """
    Surface the products most in need of attention across a catalog.

    The realised average sale price is preferred over the catalog price when
    the product has sales. Only danger and warning products are listed.
    """
    sales_by_product = sales_by_product or {}
    limit = settings.ACTION_CENTER_LIMIT if limit is None else limit
    targets = context.insight_settings()

    items: list[ActionItem] = []
    for product in products:
        unit_cost = product.cmv or 0.0
        if unit_cost <= 0:
            items.append(ActionItem(
                id=product.id,
                name=product.name,
                level=InsightLevel.DANGER,
                reason=SUSPICIOUS_COST_REASON,
            ))
            continue

        totals = sales_by_product.get(product.id, SalesTotals())
        price = totals.total / totals.qty if totals.qty > 0 else 0.0
        if price <= 0:
            price = product.sale_price or 0.0

        metrics = compute_product_metrics(context.metrics_input(unit_cost, price))
        insights = build_insights(
            InsightProduct(name=product.name, sale_price=price), metrics, targets
        )

        worst = get_worst_insight_level(insights)
        if worst in (InsightLevel.DANGER, InsightLevel.WARNING):
            items.append(ActionItem(
                id=product.id,
                name=product.name,
                level=worst,
                reason=insights[0].title if insights else "Requer atenção",
            ))

    items.sort(key=lambda i: LEVEL_PRIORITY[i.level])
    logger.debug(f"Action center: {len(items)} products flagged, showing {min(len(items), limit)}")
    return items[:limit]
