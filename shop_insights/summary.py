"""Headline numbers and chart series for the dashboard and reports pages."""

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Sequence

from . import settings
from .schemas import (
    Activity,
    CategoryTotal,
    DailyPoint,
    DashboardStats,
    ExpenseRecord,
    PaymentRecord,
    PaymentStatus,
    SaleRecord,
    StockItem,
)
from .utils import aggregate, local_date, resolve_now, resolve_tz, to_instant


def _revenue(sale: SaleRecord) -> float:
    return sale.price * sale.quantity


def _money(value: float) -> float:
    return round(value, 2)


def _day_grid(today: date, days: int) -> list[date]:
    """`days` consecutive calendar days ending today, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def dashboard_stats(
    sales: Sequence[SaleRecord],
    expenses: Sequence[ExpenseRecord],
    stock: Sequence[StockItem],
    payments: Sequence[PaymentRecord],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DashboardStats:
    today = local_date(resolve_now(now, tz), tz)

    daily_sales = sum(_revenue(s) for s in sales if local_date(s.date, tz) == today)
    total_sales = sum(_revenue(s) for s in sales)
    total_expenses = sum(e.amount for e in expenses)
    stock_value = sum(item.price * item.quantity for item in stock)
    pending = sum(p.amount for p in payments if p.status == PaymentStatus.PENDING)

    return DashboardStats(
        daily_sales=_money(daily_sales),
        total_sales=_money(total_sales),
        total_expenses=_money(total_expenses),
        total_profit=_money(total_sales - total_expenses),
        stock_value=_money(stock_value),
        pending_payments=_money(pending),
    )


def sales_trend(
    sales: Sequence[SaleRecord],
    days: int = settings.SALES_TREND_DAYS,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[DailyPoint]:
    """Daily revenue for the last `days` days, zero-filled."""
    today = local_date(resolve_now(now, tz), tz)
    by_day = aggregate(sales, key=lambda s: local_date(s.date, tz), value=_revenue)
    return [DailyPoint(date=d, sales=_money(by_day.get(d, 0.0))) for d in _day_grid(today, days)]


def daily_report_series(
    sales: Sequence[SaleRecord],
    expenses: Sequence[ExpenseRecord],
    days: int = settings.REPORT_SERIES_DAYS,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[DailyPoint]:
    """Per-day sales, expenses and profit over the last `days` days."""
    today = local_date(resolve_now(now, tz), tz)
    sales_by_day = aggregate(sales, key=lambda s: local_date(s.date, tz), value=_revenue)
    expenses_by_day = aggregate(expenses, key=lambda e: e.date, value=lambda e: e.amount)

    series = []
    for d in _day_grid(today, days):
        day_sales = sales_by_day.get(d, 0.0)
        day_expenses = expenses_by_day.get(d, 0.0)
        series.append(
            DailyPoint(
                date=d,
                sales=_money(day_sales),
                expenses=_money(day_expenses),
                profit=_money(day_sales - day_expenses),
            )
        )
    return series


def expenses_by_category(expenses: Sequence[ExpenseRecord]) -> list[CategoryTotal]:
    totals = aggregate(expenses, key=lambda e: e.category, value=lambda e: e.amount)
    return [CategoryTotal(name=name, value=_money(value)) for name, value in totals.items()]


def recent_activity(
    sales: Sequence[SaleRecord],
    expenses: Sequence[ExpenseRecord],
    payments: Sequence[PaymentRecord],
    limit: int = settings.RECENT_ACTIVITY_LIMIT,
    tz: Optional[tzinfo] = None,
) -> list[Activity]:
    """
    Latest sales, expenses and settled payments, newest first. Expenses and
    payments only carry a date, so they sort as midnight of that day.
    """
    tz = resolve_tz(tz)

    def midnight(d: date) -> datetime:
        return datetime.combine(d, time.min, tzinfo=tz)

    combined = [
        Activity(
            id=f"s-{s.id}",
            type="sale",
            description=f"{s.quantity}x {s.item_name}",
            amount=_revenue(s),
            date=to_instant(s.date, tz),
        )
        for s in sales
    ]
    combined += [
        Activity(id=f"e-{e.id}", type="expense", description=e.category, amount=e.amount, date=midnight(e.date))
        for e in expenses
    ]
    combined += [
        Activity(
            id=f"p-{p.id}",
            type="payment",
            description=f"{p.status.value} from/to {p.name}",
            amount=p.amount,
            date=midnight(p.date),
        )
        for p in payments
        if p.status != PaymentStatus.PENDING
    ]

    return sorted(combined, key=lambda a: a.date, reverse=True)[:limit]
