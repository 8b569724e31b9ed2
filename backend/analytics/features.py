"""
Feature Extraction — raw POS records to per-entity time series.

Customer side (6-month window):
  recency, frequency and monetary value from completed transactions.

Product side (30-day window):
  daily sold quantities, per-month quantities, total units and line revenue
  from completed sale lines.

Both sides are built as pandas frames and grouped once; every downstream
stage (RFM, churn, CLV, velocity, seasonality, ABC) consumes these
structures instead of re-scanning the raw records.
"""

from dataclasses import dataclass
from datetime import date, datetime

import pandas as pd
import structlog

from analytics.records import Customer, SaleLine, Transaction

logger = structlog.get_logger()

# Recency sentinel for customers with no completed purchase in the window
NO_PURCHASE_RECENCY_DAYS = 365

TRANSACTION_COLUMNS = ["transaction_id", "customer_id", "created_at", "total"]
SALE_COLUMNS = ["product_id", "sold_at", "quantity", "line_total"]


@dataclass(frozen=True)
class CustomerActivity:
    """Recency / frequency / monetary inputs for one customer."""

    customer_id: str
    recency: int
    frequency: int
    monetary: float
    last_purchase_at: datetime | None


@dataclass(frozen=True)
class ProductSalesHistory:
    """Sales time series for one product over the analysis window."""

    product_id: str
    daily_quantities: list[tuple[date, int]]  # chronological, days with sales only
    monthly_quantities: dict[int, int]  # calendar month 0-11 → units
    total_quantity: int
    revenue: float
    first_sale_day: date


def transactions_frame(transactions: list[Transaction]) -> pd.DataFrame:
    """Completed transactions as a frame (one row per transaction)."""
    rows = [
        {
            "transaction_id": txn.id,
            "customer_id": txn.customer_id,
            "created_at": txn.created_at,
            "total": txn.total,
        }
        for txn in transactions
        if txn.is_completed
    ]
    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)


def sales_frame(sales: list[SaleLine]) -> pd.DataFrame:
    """Completed sale lines with derived ``day`` and ``month`` (0-11) columns."""
    rows = [
        {
            "product_id": sale.product_id,
            "sold_at": sale.sold_at,
            "quantity": sale.quantity,
            "line_total": sale.line_total,
        }
        for sale in sales
        if sale.is_completed
    ]
    frame = pd.DataFrame(rows, columns=SALE_COLUMNS)
    sold_at = pd.to_datetime(frame["sold_at"])
    return frame.assign(day=sold_at.dt.date, month=sold_at.dt.month - 1)


def extract_customer_activity(
    customers: list[Customer],
    transactions: list[Transaction],
    as_of: datetime,
) -> dict[str, CustomerActivity]:
    """
    Aggregate completed transactions into per-customer RFM inputs.

    Guest transactions (no customer_id) are ignored. Customers without any
    completed transaction get the 365-day recency sentinel and zero
    frequency / monetary value.
    """
    frame = transactions_frame(transactions)
    frame = frame[frame["customer_id"].notna()]

    stats: dict[str, dict] = {}
    if not frame.empty:
        grouped = frame.groupby("customer_id", sort=False).agg(
            last_purchase_at=("created_at", "max"),
            frequency=("transaction_id", "count"),
            monetary=("total", "sum"),
        )
        stats = grouped.to_dict("index")

    activity: dict[str, CustomerActivity] = {}
    for customer in customers:
        row = stats.get(customer.id)
        if row is None:
            activity[customer.id] = CustomerActivity(
                customer_id=customer.id,
                recency=NO_PURCHASE_RECENCY_DAYS,
                frequency=0,
                monetary=0.0,
                last_purchase_at=None,
            )
            continue

        last_purchase = pd.Timestamp(row["last_purchase_at"]).to_pydatetime()
        activity[customer.id] = CustomerActivity(
            customer_id=customer.id,
            recency=(as_of - last_purchase).days,
            frequency=int(row["frequency"]),
            monetary=float(row["monetary"]),
            last_purchase_at=last_purchase,
        )

    return activity


def extract_product_sales(sales: list[SaleLine]) -> dict[str, ProductSalesHistory]:
    """
    Group completed sale lines into per-product daily and monthly series.

    Products appear in the order of their first sale line. Products with no
    sale lines are absent.
    """
    frame = sales_frame(sales)
    histories: dict[str, ProductSalesHistory] = {}
    if frame.empty:
        return histories

    for product_id, group in frame.groupby("product_id", sort=False):
        daily = group.groupby("day")["quantity"].sum()
        monthly = group.groupby("month")["quantity"].sum()
        daily_quantities = [(day, int(qty)) for day, qty in daily.items()]
        histories[str(product_id)] = ProductSalesHistory(
            product_id=str(product_id),
            daily_quantities=daily_quantities,
            monthly_quantities={int(month): int(qty) for month, qty in monthly.items()},
            total_quantity=int(group["quantity"].sum()),
            revenue=float(group["line_total"].sum()),
            first_sale_day=daily_quantities[0][0],
        )

    logger.debug("features.product_sales_extracted", products=len(histories), sale_lines=len(frame))
    return histories
