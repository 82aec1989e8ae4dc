"""
Precifica - Sales Import Schemas
Staging contracts for pasted sales reports

LIFECYCLE:
- ParsedItem is created by a parse run and only ever toggled (selected)
- Nothing is written until a human confirms; confirmed items become
  SaleRecord / NewProductPayload write payloads tagged with one batch id
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

# Catalog ids are opaque: numeric in the hosted tables, strings elsewhere
ProductId = Union[int, str]


class ImportStatus(str, Enum):
    """Whether a pasted row matched a catalog product."""
    MATCHED = "matched"
    NOT_FOUND = "not_found"


class ImportColumn(str, Enum):
    """Semantic columns of a sales report."""
    PRODUCT = "product"
    CATEGORY = "category"
    QUANTITY = "quantity"
    TOTAL = "total"
    AVG_PRICE = "avg_price"


class ColumnLayout(BaseModel):
    """Column index per semantic column; -1 when the report lacks it."""
    product: int = 0
    category: int = 1
    quantity: int = 2
    total: int = 3
    avg_price: int = 4


class CatalogProduct(BaseModel):
    """Product name/id pair from the catalog lookup."""
    id: ProductId
    name: str


class ParsedItem(BaseModel):
    """One candidate sales line awaiting review."""
    name: str
    category: str = ""
    qty: int
    total: float
    avg_price: float
    status: ImportStatus
    existing_id: Optional[ProductId] = None
    selected: bool = False


# =============================================================================
# PARSE
# =============================================================================

class ParseRequest(BaseModel):
    """Raw pasted report text plus the catalog to match against."""
    raw_text: str
    catalog: list[CatalogProduct] = []


class ParseTextRequest(BaseModel):
    """Raw pasted report text; the catalog is fetched server-side."""
    raw_text: str


class ImportPreview(BaseModel):
    """Reviewable result of a parse run."""
    items: list[ParsedItem] = []
    header_detected: bool = False
    matched_count: int = 0
    not_found_count: int = 0


class NotFoundFilterRequest(BaseModel):
    """Display filter over the not-found items of a preview."""
    items: list[ParsedItem]
    hide_drinks: bool = True
    search: str = ""


# =============================================================================
# COMMIT
# =============================================================================

class SaleRecord(BaseModel):
    """Write payload for the sales table."""
    product_id: ProductId
    quantity: int
    sale_price: float
    sold_at: datetime
    import_batch_id: str
    company_id: str


class NewProductPayload(BaseModel):
    """Write payload for a product created from an unmatched row."""
    name: str
    category: str
    sale_price: float
    company_id: str
    active: bool = True
    description: str = "Criado via importação de vendas"


class ImportPlanRequest(BaseModel):
    """Reviewed items plus the options chosen by the operator."""
    items: list[ParsedItem]
    company_id: str
    import_month: str = Field(pattern=r"^\d{4}-\d{2}$")  # YYYY-MM
    create_selected_products: bool = False
    import_selected_sales: bool = False


class ImportCommitRequest(BaseModel):
    """Reviewed items to persist for a company."""
    items: list[ParsedItem]
    import_month: str = Field(pattern=r"^\d{4}-\d{2}$")
    create_selected_products: bool = False
    import_selected_sales: bool = False


class ImportPlan(BaseModel):
    """Everything one confirmed import will write, tagged with its batch id."""
    batch_id: str
    company_id: str
    sold_at: datetime
    sales: list[SaleRecord] = []
    products_to_create: list[NewProductPayload] = []
    import_selected_sales: bool = False


class ImportCommitResult(BaseModel):
    """Outcome of writing an import plan."""
    batch_id: str
    sales_inserted: int = 0
    products_created: int = 0
    errors: list[str] = []


class ImportBatch(BaseModel):
    """Most recent import batch, for bulk undo."""
    id: str
    created_at: Optional[datetime] = None
    count: int = 0
