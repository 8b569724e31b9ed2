"""
Test Configuration — Fixtures for POS records, a fixed clock and a data source.

Every test runs against the same ``as_of`` (Saturday 2024-06-15 12:00 UTC)
so day counts, weekdays and month indices are stable.
"""

from datetime import datetime, timedelta

import pytest

from analytics.records import (
    Customer,
    InventoryRecord,
    Product,
    SaleLine,
    Transaction,
    TransactionLineItem,
)
from core.config import Settings
from services.sources import StaticDataSource

AS_OF = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def settings():
    """Settings with text generation switched off and no .env influence."""
    return Settings(openai_api_key="", app_env="test", _env_file=None)


@pytest.fixture
def make_customer():
    def _make(customer_id: str, last_visit_days_ago: float | None = None, **kwargs) -> Customer:
        last_visit = AS_OF - timedelta(days=last_visit_days_ago) if last_visit_days_ago is not None else None
        return Customer(
            id=customer_id,
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", customer_id.upper()),
            email=kwargs.pop("email", f"{customer_id}@example.com"),
            last_visit=last_visit,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_transaction():
    counter = {"n": 0}

    def _make(
        customer_id: str | None,
        days_ago: float,
        total: float,
        items: list[tuple[str, int, float]] | None = None,
        status: str = "completed",
        created_at: datetime | None = None,
    ) -> Transaction:
        counter["n"] += 1
        line_items = [
            TransactionLineItem(product_id=pid, quantity=qty, unit_price=price, line_total=qty * price)
            for pid, qty, price in (items or [])
        ]
        return Transaction(
            id=f"txn-{counter['n']}",
            customer_id=customer_id,
            created_at=created_at or AS_OF - timedelta(days=days_ago),
            total=total,
            status=status,
            items=line_items,
        )

    return _make


@pytest.fixture
def make_sale():
    counter = {"n": 0}

    def _make(
        product_id: str,
        days_ago: float,
        quantity: int,
        unit_price: float = 10.0,
        status: str = "completed",
        sold_at: datetime | None = None,
    ) -> SaleLine:
        counter["n"] += 1
        return SaleLine(
            transaction_id=f"txn-{counter['n']}",
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            line_total=quantity * unit_price,
            sold_at=sold_at or AS_OF - timedelta(days=days_ago),
            status=status,
        )

    return _make


@pytest.fixture
def make_product():
    def _make(product_id: str, price: float = 10.0, cost: float = 6.0, **kwargs) -> Product:
        return Product(
            id=product_id,
            name=kwargs.pop("name", f"Product {product_id}"),
            sku=kwargs.pop("sku", f"SKU-{product_id}"),
            price=price,
            cost=cost,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_inventory():
    def _make(product_id: str, quantity: int, reorder_point: int | None = None) -> InventoryRecord:
        return InventoryRecord(product_id=product_id, quantity=quantity, reorder_point=reorder_point)

    return _make


@pytest.fixture
def empty_source():
    return StaticDataSource()
