import itertools
from datetime import date, datetime, timedelta, timezone

import pytest

from shop_insights import settings
from shop_insights.schemas import ExpenseRecord, PaymentRecord, SaleRecord, StockItem

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()

_ids = itertools.count(1)


def make_sale(name: str, quantity: int = 1, when: datetime = NOW - timedelta(hours=1), price: float = 10.0) -> SaleRecord:
    return SaleRecord(id=f"sale-{next(_ids)}", item_name=name, quantity=quantity, price=price, date=when)


def make_item(
    name: str,
    quantity: int = 20,
    expiry: date | None = None,
    price: float = 10.0,
    item_id: str | None = None,
    category: str = "General",
) -> StockItem:
    return StockItem(
        id=item_id or f"item-{next(_ids)}",
        item_name=name,
        category=category,
        quantity=quantity,
        price=price,
        expiry_date=expiry,
    )


def make_expense(category: str, amount: float, when: date = TODAY) -> ExpenseRecord:
    return ExpenseRecord(id=f"exp-{next(_ids)}", category=category, amount=amount, date=when)


def make_payment(name: str, amount: float, status: str = "Pending", when: date = TODAY, kind: str = "customer") -> PaymentRecord:
    return PaymentRecord(id=f"pay-{next(_ids)}", name=name, amount=amount, status=status, date=when, type=kind)


def days_ago(days: float, hours: float = 0) -> datetime:
    return NOW - timedelta(days=days, hours=hours)


@pytest.fixture(autouse=True)
def utc_reports(monkeypatch):
    """Pin the report timezone and keep tests off the network."""
    monkeypatch.setattr(settings, "REPORT_TIMEZONE", timezone.utc)
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
