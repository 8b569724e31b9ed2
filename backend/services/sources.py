"""
Analytics Data Source — Abstract Base Class

Every store backend (database, POS export, fixtures) implements this
interface so the report services stay storage-agnostic. Implementations
return records that are already scoped to one store; the window and status
filters described on each method are part of the contract.
"""

from abc import ABC, abstractmethod
from datetime import datetime

import structlog

from analytics.records import Customer, InventoryRecord, Product, SaleLine, Transaction

logger = structlog.get_logger()


class AnalyticsDataSource(ABC):
    """
    Read-only access to one store's POS history.

    Errors raised by an implementation propagate to the caller unchanged;
    the services never retry or mask them.
    """

    @abstractmethod
    async def get_customers(self, store_id: str) -> list[Customer]:
        """All customers of the store."""

    @abstractmethod
    async def get_transactions(self, store_id: str, since: datetime) -> list[Transaction]:
        """Completed transactions created at or after ``since``, with line items."""

    @abstractmethod
    async def get_products(self, store_id: str) -> list[Product]:
        """Active products, with the joined category name where known."""

    @abstractmethod
    async def get_inventory(self, store_id: str) -> list[InventoryRecord]:
        """Current stock snapshot, at most one record per product."""

    @abstractmethod
    async def get_sales(self, store_id: str, since: datetime) -> list[SaleLine]:
        """Completed sale lines sold at or after ``since``."""


class StaticDataSource(AnalyticsDataSource):
    """
    Serves already-materialized collections.

    Used for batch jobs over exported data and in tests. The store id is
    ignored; the window and completed-status filters are applied on read.
    """

    def __init__(
        self,
        customers: list[Customer] | None = None,
        transactions: list[Transaction] | None = None,
        products: list[Product] | None = None,
        inventory: list[InventoryRecord] | None = None,
        sales: list[SaleLine] | None = None,
    ):
        self.customers = list(customers or [])
        self.transactions = list(transactions or [])
        self.products = list(products or [])
        self.inventory = list(inventory or [])
        self.sales = list(sales or [])

    async def get_customers(self, store_id: str) -> list[Customer]:
        return list(self.customers)

    async def get_transactions(self, store_id: str, since: datetime) -> list[Transaction]:
        return [t for t in self.transactions if t.is_completed and t.created_at >= since]

    async def get_products(self, store_id: str) -> list[Product]:
        return list(self.products)

    async def get_inventory(self, store_id: str) -> list[InventoryRecord]:
        return list(self.inventory)

    async def get_sales(self, store_id: str, since: datetime) -> list[SaleLine]:
        selected = [s for s in self.sales if s.is_completed and s.sold_at >= since]
        logger.debug("sources.static_sales", store_id=store_id, total=len(self.sales), selected=len(selected))
        return selected
