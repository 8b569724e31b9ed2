"""
Input Records — the typed contract at the data-access boundary.

The data-access layer hands the engine plain records for one store and one
time window. They are validated here, once, with pydantic; the analytics
functions downstream trust these shapes and never re-check them.

Values are not range-checked: a negative quantity is a valid record and
flows through the arithmetic unchanged.

Timestamps:
  - timezone-aware values are converted to naive UTC
  - naive values are taken as UTC already
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

COMPLETED = "completed"


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    """Current time as naive UTC, the engine's timestamp convention."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Customer(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    last_visit: datetime | None = None

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("last_visit")
    @classmethod
    def normalize_last_visit(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class TransactionLineItem(BaseModel):
    product_id: str
    quantity: int
    unit_price: float = 0.0
    line_total: float = 0.0

    model_config = {"from_attributes": True, "frozen": True}


class Transaction(BaseModel):
    """A POS transaction. An empty ``items`` list means the basket is unknown."""

    id: str
    customer_id: str | None = None
    created_at: datetime
    total: float = 0.0
    status: str = COMPLETED
    items: list[TransactionLineItem] = Field(default_factory=list)

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    @property
    def item_quantity(self) -> int:
        return sum(item.quantity for item in self.items)


class Product(BaseModel):
    id: str
    name: str = "Unknown"
    sku: str = ""
    category_id: str | None = None
    category_name: str | None = None
    price: float = 0.0
    cost: float = 0.0

    model_config = {"from_attributes": True, "frozen": True}


class InventoryRecord(BaseModel):
    """Current stock snapshot. ``reorder_point`` of None or 0 means not configured."""

    product_id: str
    quantity: int = 0
    reorder_point: int | None = None

    model_config = {"from_attributes": True, "frozen": True}


class SaleLine(BaseModel):
    """A transaction line item joined with its parent transaction."""

    transaction_id: str
    product_id: str
    quantity: int
    unit_price: float = 0.0
    line_total: float = 0.0
    sold_at: datetime
    status: str = COMPLETED

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("sold_at")
    @classmethod
    def normalize_sold_at(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED
