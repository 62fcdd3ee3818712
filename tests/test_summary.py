from datetime import timedelta

from shop_insights.summary import (
    daily_report_series,
    dashboard_stats,
    expenses_by_category,
    recent_activity,
    sales_trend,
)

from conftest import NOW, TODAY, days_ago, make_expense, make_item, make_payment, make_sale


def test_dashboard_stats():
    sales = [
        make_sale("Milk", 2, when=days_ago(0, hours=2), price=28),
        make_sale("Cheese", 1, when=days_ago(2), price=250),
    ]
    expenses = [make_expense("Rent", 150), make_expense("Supplies", 20.5)]
    stock = [make_item("Milk", 20, price=28), make_item("Eggs", 5, price=6)]
    payments = [
        make_payment("Customer A", 550, "Pending"),
        make_payment("Supplier", 5000, "Paid", kind="supplier"),
    ]

    stats = dashboard_stats(sales, expenses, stock, payments, now=NOW)
    assert stats.daily_sales == 56
    assert stats.total_sales == 306
    assert stats.total_expenses == 170.5
    assert stats.total_profit == 135.5
    assert stats.stock_value == 590
    assert stats.pending_payments == 550


def test_dashboard_stats_empty():
    stats = dashboard_stats([], [], [], [], now=NOW)
    assert stats.total_sales == 0
    assert stats.total_profit == 0


def test_sales_trend_is_zero_filled_and_ends_today():
    sales = [
        make_sale("Milk", 2, when=days_ago(0, hours=1), price=10),
        make_sale("Milk", 1, when=days_ago(0, hours=3), price=10),
        make_sale("Bread", 1, when=days_ago(3), price=40),
        make_sale("Bread", 1, when=days_ago(10), price=40),
    ]
    trend = sales_trend(sales, now=NOW)
    assert len(trend) == 7
    assert trend[0].date == TODAY - timedelta(days=6)
    assert trend[-1].date == TODAY
    assert trend[-1].sales == 30
    assert trend[-4].sales == 40
    assert sum(p.sales for p in trend) == 70


def test_daily_report_series_profit():
    sales = [make_sale("Milk", 5, when=days_ago(1), price=20)]
    expenses = [make_expense("Utilities", 35, when=TODAY - timedelta(days=1))]
    series = daily_report_series(sales, expenses, days=30, now=NOW)
    assert len(series) == 30
    yesterday = series[-2]
    assert (yesterday.sales, yesterday.expenses, yesterday.profit) == (100, 35, 65)
    assert series[-1].profit == 0


def test_expenses_by_category_keeps_first_seen_order():
    expenses = [
        make_expense("Rent", 1000),
        make_expense("Utilities", 300),
        make_expense("Rent", 500),
    ]
    totals = expenses_by_category(expenses)
    assert [(t.name, t.value) for t in totals] == [("Rent", 1500), ("Utilities", 300)]


def test_recent_activity_newest_first_without_pending_payments():
    sales = [make_sale("Milk", 2, when=days_ago(0, hours=1), price=28)]
    expenses = [make_expense("Rent", 100, when=TODAY - timedelta(days=2))]
    payments = [
        make_payment("Customer A", 550, "Pending"),
        make_payment("Customer B", 1200, "Received", when=TODAY - timedelta(days=1)),
    ]
    activity = recent_activity(sales, expenses, payments)
    assert [a.type for a in activity] == ["sale", "payment", "expense"]
    assert activity[0].description == "2x Milk"
    assert activity[0].amount == 56
    assert activity[1].description == "Received from/to Customer B"


def test_recent_activity_limit():
    sales = [make_sale("Tea", when=days_ago(d)) for d in range(15)]
    activity = recent_activity(sales, [], [], limit=10)
    assert len(activity) == 10
    assert activity[0].id == f"s-{sales[0].id}"
