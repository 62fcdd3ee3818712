import logging
import re
from datetime import date, datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Callable, Hashable, Iterable, Optional, TypeVar

import pandas as pd

from . import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Matches 'sales.json', 'sales_2025-06-30.json', 'sales_2025-06-30.csv', ...
_EXPORT_PATTERN = r"^{prefix}(?:_(\d{{4}}-\d{{2}}-\d{{2}}))?\.(json|csv)$"


# --- Names ---


def normalize_name(name: str) -> str:
    """The join/grouping key for item names: trimmed and lowercased."""
    return name.strip().lower()


# --- Time ---


def resolve_tz(tz: Optional[tzinfo] = None) -> tzinfo:
    return tz if tz is not None else settings.REPORT_TIMEZONE


def resolve_now(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> datetime:
    """
    Returns the reference instant for one analysis call. An explicit `now`
    wins (naive values are read in `tz`); otherwise the wall clock is read once.
    """
    tz = resolve_tz(tz)
    if now is None:
        return datetime.now(tz)
    return to_instant(now, tz)


def to_instant(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Makes a timestamp timezone-aware; naive timestamps are taken as `tz` wall time."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=resolve_tz(tz))
    return ts


def local_date(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of an instant as seen in the report timezone."""
    tz = resolve_tz(tz)
    return to_instant(ts, tz).astimezone(tz).date()


def local_hour(ts: datetime, tz: Optional[tzinfo] = None) -> int:
    tz = resolve_tz(tz)
    return to_instant(ts, tz).astimezone(tz).hour


def trailing_window(now: datetime, days: int, offset_days: int = 0) -> tuple[datetime, datetime]:
    """
    The `[start, end)` window covering `days` days and ending `offset_days`
    before `now`. offset_days=7, days=7 is "the week before last week".
    """
    end = now - timedelta(days=offset_days)
    return end - timedelta(days=days), end


def filter_window(
    records: Iterable[T],
    start: datetime,
    end: datetime,
    timestamp: Callable[[T], datetime] = lambda r: r.date,  # type: ignore[attr-defined]
    tz: Optional[tzinfo] = None,
) -> list[T]:
    """Records with start <= timestamp < end, in input order."""
    return [r for r in records if start <= to_instant(timestamp(r), tz) < end]


def hour_label(hour: int) -> str:
    """Formats an hour of day as a 12-hour range, e.g. 14 -> '2:00 - 2:59 PM'."""
    ampm = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:00 - {display_hour}:59 {ampm}"


def percent(part: float, whole: float) -> str:
    """Whole-number percentage as a string, rounding halves up (12.5 -> '13')."""
    value = Decimal(str(part / whole * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return str(int(value))


# --- Aggregation ---


def aggregate(
    records: Iterable[T],
    key: Callable[[T], Hashable],
    value: Callable[[T], float],
) -> dict[Any, Any]:
    """
    Sums `value` per `key`. The returned dict is ordered by first appearance
    of each key, which downstream stable sorts rely on for tie-breaking.
    """
    rows = [(key(r), value(r)) for r in records]
    if not rows:
        return {}

    df = pd.DataFrame(rows, columns=["key", "value"])
    totals = df.groupby("key", sort=False)["value"].sum()
    # tolist() hands back plain python ints/floats rather than numpy scalars
    return dict(zip(totals.index.tolist(), totals.tolist()))


def first_spellings(records: Iterable[Any]) -> dict[str, str]:
    """Maps each normalized item name to the first spelling seen (trimmed)."""
    names: dict[str, str] = {}
    for r in records:
        names.setdefault(normalize_name(r.item_name), r.item_name.strip())
    return names


# --- Files ---


def get_date_suffix_for_filename(today: Optional[date] = None) -> str:
    """Returns the date as a YYYY-MM-DD string for filenames."""
    return (today or datetime.now(settings.REPORT_TIMEZONE).date()).strftime("%Y-%m-%d")


def find_latest_export(input_dir: Path, prefix: str) -> tuple[Path, Optional[date]] | None:
    """
    Finds the newest export for a prefix. Dated files ('sales_2025-06-30.json')
    win over an undated 'sales.json'; among dated files the latest date wins.
    Returns (path, file_date) or None.
    """
    if not input_dir.exists():
        return None

    pattern = re.compile(_EXPORT_PATTERN.format(prefix=re.escape(prefix)), re.IGNORECASE)
    candidates = []
    for path in input_dir.iterdir():
        match = pattern.match(path.name)
        if not match:
            continue
        file_date = date.fromisoformat(match.group(1)) if match.group(1) else None
        candidates.append((file_date or date.min, path.name, path, file_date))

    if not candidates:
        return None

    _, _, path, file_date = max(candidates)
    return path, file_date


def load_table(file_path: Path) -> pd.DataFrame | None:
    """
    Loads a JSON (array of records) or CSV export into a DataFrame.
    CSV reads fall back from UTF-8 (with BOM) to latin-1.
    """
    if not file_path.exists():
        logger.info(f"Export not found at {file_path}, skipping.")
        return None

    if file_path.suffix.lower() == ".json":
        try:
            # dtype=False keeps ids and dates as the strings the app wrote
            return pd.read_json(file_path, orient="records", dtype=False, convert_dates=False)
        except ValueError as e:
            logger.error(f"Could not parse {file_path.name} as JSON. Reason: {e}")
            return None

    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", dtype=str, keep_default_na=False)
    except UnicodeDecodeError:
        logger.info(
            f"UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return pd.read_csv(file_path, encoding="latin-1", dtype=str, keep_default_na=False)
        except (ValueError, OSError) as e_latin1:
            logger.error(
                f"Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None
    except pd.errors.EmptyDataError:
        logger.warning(f"{file_path.name} is empty.")
        return pd.DataFrame()
