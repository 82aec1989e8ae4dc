"""
Precifica - Sales Import Parser
Turn a sales report pasted from a spreadsheet into reviewable ParsedItems.

LOGIC:
1. Split into non-empty lines
2. Detect an optional header row and map its cells to semantic columns
   (falls back to Product | Category | Qty | Total | Avg when it can't)
3. Parse each row: locale quantity/currency, derived total/avg fallback
4. Drop rows without a positive quantity
5. Match names against the product catalog (exact, then singular/plural)

GUARDRAILS:
- Pure and in-memory: no I/O, nothing written
- Either the whole paste parses or SalesImportError is raised
- Filtering (e.g. hiding drinks) is a display concern, see filter_not_found
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from precifica.core.text import normalize_string, singular
from precifica.core.types import Money
from precifica.models.sales_import import (
    CatalogProduct,
    ColumnLayout,
    ImportColumn,
    ImportPreview,
    ImportStatus,
    ParsedItem,
    ProductId,
)

logger = logging.getLogger(__name__)

GENERIC_PARSE_ERROR = "Erro ao processar dados. Verifique o formato."


class SalesImportError(ValueError):
    """A paste could not be parsed; nothing from it should be used."""


# =============================================================================
# LOCALE
# =============================================================================

@dataclass(frozen=True)
class ImportLocale:
    """
    Report vocabulary and number formats of one locale.

    Keywords are compared against normalised text (lower case, no accents).
    """
    header_product: tuple[str, ...]
    header_quantity: tuple[str, ...]
    column_keywords: dict[ImportColumn, tuple[str, ...]]
    total_row_label: str
    parse_money: Callable[[Optional[str]], float]
    parse_quantity: Callable[[Optional[str]], int]
    drink_keywords: tuple[str, ...] = ()

    def header_column(self, cell: str) -> Optional[ImportColumn]:
        """First semantic column whose keywords appear in a normalised header cell."""
        for column, keywords in self.column_keywords.items():
            if any(keyword in cell for keyword in keywords):
                return column
        return None

    def is_header(self, normalized_line: str) -> bool:
        return any(k in normalized_line for k in self.header_product) and any(
            k in normalized_line for k in self.header_quantity
        )


# Brazilian Portuguese (iFood and POS exports). Column rules are checked in
# this order, so "Preço Médio" is an average and "Valor Total" a total.
PT_BR = ImportLocale(
    header_product=("produto",),
    header_quantity=("qtd", "quantidade"),
    column_keywords={
        ImportColumn.PRODUCT: ("produto",),
        ImportColumn.CATEGORY: ("categoria",),
        ImportColumn.TOTAL: ("faturamento", "tot", "valor"),
        ImportColumn.AVG_PRICE: ("medio", "unitario", "preco"),
        ImportColumn.QUANTITY: ("qtd", "quant"),
    },
    total_row_label="Total",
    parse_money=Money.parse_brl,
    parse_quantity=Money.parse_quantity,
    drink_keywords=(
        "coca", "guarana", "agua", "lata", "2l", "bebida",
        "suco", "refrigerante", "fanta", "sprite", "kuat",
    ),
)


# =============================================================================
# PRODUCT INDEX
# =============================================================================

CatalogEntry = Union[CatalogProduct, Mapping[str, Any]]


class ProductIndex:
    """
    Normalised name -> product id, built once per parse run.

    Matching tries the exact name, then the pasted name without a trailing
    "s", then plural catalog names reduced to singular. Nothing fuzzier.
    """

    def __init__(self, catalog: Iterable[CatalogEntry]) -> None:
        self._exact: dict[str, ProductId] = {}
        self._singular: dict[str, ProductId] = {}

        for entry in catalog:
            if isinstance(entry, CatalogProduct):
                product_id, name = entry.id, entry.name
            else:
                product_id, name = entry["id"], entry["name"]

            key = normalize_string(name)
            # Later duplicates win
            self._exact[key] = product_id
            if key.endswith("s"):
                self._singular[singular(key)] = product_id

    def __len__(self) -> int:
        return len(self._exact)

    def match(self, name: str) -> Optional[ProductId]:
        key = normalize_string(name)

        found = self._exact.get(key)
        if found is None and key.endswith("s"):
            found = self._exact.get(singular(key))
        if found is None:
            found = self._singular.get(key)
        return found


# =============================================================================
# PARSER
# =============================================================================

def _cell(cols: list[str], index: int) -> str:
    """Column value or "" when the report lacks the column or the row is short."""
    if index < 0 or index >= len(cols):
        return ""
    return cols[index]


class SalesImportParser:
    """Stateless parser for one report locale."""

    def __init__(self, locale: ImportLocale = PT_BR) -> None:
        self.locale = locale

    def detect_layout(self, lines: list[str]) -> tuple[ColumnLayout, int, bool]:
        """
        Find the header row and map its cells.

        Returns (layout, first data line index, header detected).
        """
        header_index = next(
            (i for i, line in enumerate(lines) if self.locale.is_header(normalize_string(line))),
            None,
        )
        if header_index is None:
            return ColumnLayout(), 0, False

        positions: dict[ImportColumn, int] = {}
        for i, raw in enumerate(lines[header_index].split("\t")):
            column = self.locale.header_column(normalize_string(raw))
            if column is not None:
                positions[column] = i

        if ImportColumn.PRODUCT not in positions or ImportColumn.QUANTITY not in positions:
            logger.warning("Could not identify columns by name, using default positions")
            return ColumnLayout(), 0, False

        layout = ColumnLayout(**{
            column.value: positions.get(column, -1) for column in ImportColumn
        })
        return layout, header_index + 1, True

    def parse_row(self, line: str, layout: ColumnLayout) -> Optional[dict[str, Any]]:
        """Parse one data row; None for rows that are labels or headers."""
        cols = line.strip().split("\t")

        name = _cell(cols, layout.product).strip()
        if (
            not name
            or name == self.locale.total_row_label
            or normalize_string(name) in self.locale.header_product
        ):
            return None

        category = _cell(cols, layout.category).strip()
        qty = self.locale.parse_quantity(_cell(cols, layout.quantity))

        total_cell = _cell(cols, layout.total)
        avg_cell = _cell(cols, layout.avg_price)
        total = self.locale.parse_money(total_cell) if total_cell else 0.0
        avg_price = self.locale.parse_money(avg_cell) if avg_cell else 0.0

        # Reports often carry only one of the two money columns
        if total == 0 and avg_price > 0 and qty > 0:
            total = qty * avg_price
        if avg_price == 0 and total > 0 and qty > 0:
            avg_price = total / qty

        return {
            "name": name,
            "category": category,
            "qty": qty,
            "total": total,
            "avg_price": avg_price,
        }

    def _parse(self, raw_text: str, catalog: Iterable[CatalogEntry]) -> ImportPreview:
        index = ProductIndex(catalog)
        lines = [line for line in raw_text.split("\n") if line.strip()]
        layout, start, header_detected = self.detect_layout(lines)

        items: list[ParsedItem] = []
        dropped = 0
        for line in lines[start:]:
            row = self.parse_row(line, layout)
            if row is None:
                continue

            if row["qty"] <= 0:
                dropped += 1
                logger.debug(f"Dropping row without quantity: {row['name']!r}")
                continue

            existing_id = index.match(row["name"])
            items.append(ParsedItem(
                **row,
                status=ImportStatus.MATCHED if existing_id is not None else ImportStatus.NOT_FOUND,
                existing_id=existing_id,
                selected=False,
            ))

        matched = sum(1 for i in items if i.status == ImportStatus.MATCHED)
        logger.info(
            f"Parsed sales report: {len(items)} items ({matched} matched, "
            f"{len(items) - matched} not found, {dropped} dropped) "
            f"against {len(index)} catalog products"
        )
        return ImportPreview(
            items=items,
            header_detected=header_detected,
            matched_count=matched,
            not_found_count=len(items) - matched,
        )

    def parse(self, raw_text: str, catalog: Iterable[CatalogEntry]) -> ImportPreview:
        """
        Parse a pasted report against a catalog fetched beforehand.

        Raises SalesImportError (with a generic message) on any unexpected
        failure; nothing partial is returned.
        """
        if not raw_text.strip():
            return ImportPreview()

        try:
            return self._parse(raw_text, catalog)
        except Exception as e:
            logger.exception(f"Sales import parse aborted: {e}")
            raise SalesImportError(GENERIC_PARSE_ERROR) from e


def parse_sales_report(
    raw_text: str,
    catalog: Iterable[CatalogEntry],
    locale: ImportLocale = PT_BR,
) -> ImportPreview:
    """Parse a pasted sales report (see SalesImportParser.parse)."""
    return SalesImportParser(locale).parse(raw_text, catalog)


# =============================================================================
# DISPLAY FILTERS
# =============================================================================

def is_drink(name: str, locale: ImportLocale = PT_BR) -> bool:
    normalized = normalize_string(name)
    return any(keyword in normalized for keyword in locale.drink_keywords)


def filter_not_found(
    items: Iterable[ParsedItem],
    hide_drinks: bool = True,
    search: str = "",
    locale: ImportLocale = PT_BR,
) -> list[ParsedItem]:
    """Not-found items to show for review, optionally hiding drinks and searching."""
    needle = normalize_string(search) if search else ""
    visible = []
    for item in items:
        if item.status == ImportStatus.MATCHED:
            continue
        if hide_drinks and is_drink(item.name, locale):
            continue
        if needle and needle not in normalize_string(item.name):
            continue
        visible.append(item)
    return visible
