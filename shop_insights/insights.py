"""
The Business Insight Engine.

Pure functions over the shop's sales and stock collections. None of them
mutate their inputs or touch I/O; windowed analyses take an explicit `now`
(wall clock by default) and `tz` (settings.REPORT_TIMEZONE by default) so a
fixed pair of inputs always gives the same answer.
"""

import math
from datetime import datetime, tzinfo
from fractions import Fraction
from typing import Optional, Sequence

import pandas as pd

from . import settings
from .schemas import (
    BestSeller,
    FallingDemandItem,
    InsightReport,
    PeakHour,
    ReorderSuggestion,
    SaleRecord,
    StockItem,
)
from .utils import (
    aggregate,
    filter_window,
    first_spellings,
    hour_label,
    local_hour,
    normalize_name,
    percent,
    resolve_now,
    trailing_window,
)


def _quantity_by_item(sales: Sequence[SaleRecord]) -> dict[str, int]:
    return aggregate(sales, key=lambda s: normalize_name(s.item_name), value=lambda s: s.quantity)


def best_selling(sales: Sequence[SaleRecord], limit: int = settings.BEST_SELLER_LIMIT) -> list[BestSeller]:
    """All-time top sellers by units sold. Equal totals keep first-seen order."""
    totals = _quantity_by_item(sales)
    if not totals:
        return []

    names = first_spellings(sales)
    ranked = (
        pd.Series(totals)
        .sort_values(ascending=False, kind="stable")
        .head(limit)
    )
    return [
        BestSeller(name=names[key], quantity=int(qty))
        for key, qty in ranked.items()
    ]


def restock_needed(stock: Sequence[StockItem]) -> list[StockItem]:
    """Items below the restock threshold, out-of-stock ones included."""
    return [item for item in stock if item.quantity < settings.RESTOCK_THRESHOLD]


def slow_moving_inventory(
    stock: Sequence[StockItem],
    sales: Sequence[SaleRecord],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[StockItem]:
    """Stock items with no sale at all in the last 30 days."""
    now = resolve_now(now, tz)
    start, end = trailing_window(now, settings.SLOW_MOVING_WINDOW_DAYS)

    recent = {normalize_name(s.item_name) for s in filter_window(sales, start, end, tz=tz)}
    return [item for item in stock if normalize_name(item.item_name) not in recent]


def falling_demand(
    sales: Sequence[SaleRecord],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[FallingDemandItem]:
    """
    Items whose units sold in the last 7 days fell below half of the 7 days
    before that. Items that sold nothing in the earlier week are never flagged;
    items that stopped selling entirely show a 100% drop.
    """
    now = resolve_now(now, tz)
    days = settings.DEMAND_WINDOW_DAYS
    this_week = filter_window(sales, *trailing_window(now, days), tz=tz)
    last_week = filter_window(sales, *trailing_window(now, days, offset_days=days), tz=tz)

    current = _quantity_by_item(this_week)
    previous = _quantity_by_item(last_week)
    names = first_spellings(last_week)

    flagged = []
    for key, prev_qty in previous.items():
        if prev_qty <= 0:
            continue
        curr_qty = current.get(key, 0)
        if curr_qty < prev_qty * settings.DEMAND_DROP_RATIO:
            flagged.append(
                FallingDemandItem(
                    name=names[key],
                    drop_percent=percent(prev_qty - curr_qty, prev_qty),
                )
            )
    return flagged


def suggested_reorders(
    stock: Sequence[StockItem],
    sales: Sequence[SaleRecord],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[ReorderSuggestion]:
    """
    For low-stock items: enough units to cover the next 14 days at the last
    14 days' daily rate, plus a fixed buffer, minus what is on hand. Items
    where that comes to nothing are left out.
    """
    now = resolve_now(now, tz)
    window_days = settings.REORDER_WINDOW_DAYS
    recent = filter_window(sales, *trailing_window(now, window_days), tz=tz)
    sold = _quantity_by_item(recent)

    suggestions = []
    for item in restock_needed(stock):
        daily_avg = Fraction(sold.get(normalize_name(item.item_name), 0), window_days)
        suggested = max(
            0, math.ceil(daily_avg * window_days) + settings.REORDER_BUFFER - item.quantity
        )
        if suggested > 0:
            suggestions.append(ReorderSuggestion(item=item, suggested=suggested))
    return suggestions


def peak_selling_hours(
    sales: Sequence[SaleRecord],
    tz: Optional[tzinfo] = None,
    limit: int = settings.PEAK_HOUR_LIMIT,
) -> list[PeakHour]:
    """Busiest hours of the day by number of transactions (not units)."""
    if not sales:
        return []

    hours = pd.Series([local_hour(s.date, tz) for s in sales], name="hour")
    counts = hours.value_counts()
    # count desc, then hour asc
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    return [PeakHour(hour=hour_label(int(hour)), count=int(count)) for hour, count in ranked]


def build_insights(
    sales: Sequence[SaleRecord],
    stock: Sequence[StockItem],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> InsightReport:
    """Runs every smart-insight analysis against a single reference instant."""
    now = resolve_now(now, tz)
    return InsightReport(
        generated_at=now,
        best_selling=best_selling(sales),
        restock_needed=restock_needed(stock),
        slow_moving=slow_moving_inventory(stock, sales, now=now, tz=tz),
        falling_demand=falling_demand(sales, now=now, tz=tz),
        suggested_reorders=suggested_reorders(stock, sales, now=now, tz=tz),
        peak_hours=peak_selling_hours(sales, tz=tz),
    )
