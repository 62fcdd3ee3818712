import logging
import re
from pathlib import Path
from typing import Optional, Type, TypeVar

import pandas as pd
from pydantic import BaseModel, ValidationError

from .schemas import ExpenseRecord, PaymentRecord, SaleRecord, StockItem
from .utils import load_table

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _column_key(column: str) -> str:
    # 'Item Name', 'item_name' and 'itemName' all map to 'itemname'
    return re.sub(r"[^a-z0-9]", "", str(column).lower())


def _normalize_columns(df: pd.DataFrame, model: Type[BaseModel]) -> pd.DataFrame:
    """
    Renames whatever header spelling the export used to the model's python
    field names and drops columns the model doesn't know about.
    """
    lookup = {}
    for name, info in model.model_fields.items():
        lookup[_column_key(name)] = name
        if info.alias:
            lookup[_column_key(info.alias)] = name

    renamed = df.rename(columns=lambda c: lookup.get(_column_key(c), c))
    known = [c for c in renamed.columns if c in model.model_fields]
    return renamed[known]


def _parse_export(file_path: Path, model: Type[ModelT]) -> Optional[list[ModelT]]:
    """
    Loads one export and validates every row against `model`.
    Returns None if the file is missing/unreadable or any row is invalid.
    """
    df = load_table(file_path)
    if df is None:
        return None
    if df.empty:
        logger.info(f"  > {file_path.name} holds no records.")
        return []

    df = _normalize_columns(df, model)
    if "id" in df.columns:
        df["id"] = df["id"].astype(str)

    # NaN/empty cells become None so optional fields validate as missing
    df = df.astype(object).where(df.notna(), None)
    records = [
        {k: v for k, v in row.items() if v is not None and v != ""}
        for row in df.to_dict("records")
    ]

    try:
        validated = [model.model_validate(row) for row in records]
    except ValidationError as e:
        logger.error(f"❌ Data validation failed for {file_path.name}!")
        logger.error(e)
        return None

    logger.info(f"✅ Parsed {file_path.name} successfully ({len(validated)} records).")
    return validated


def parse_sales_export(file_path: Path) -> Optional[list[SaleRecord]]:
    return _parse_export(file_path, SaleRecord)


def parse_stock_export(file_path: Path) -> Optional[list[StockItem]]:
    return _parse_export(file_path, StockItem)


def parse_expenses_export(file_path: Path) -> Optional[list[ExpenseRecord]]:
    return _parse_export(file_path, ExpenseRecord)


def parse_payments_export(file_path: Path) -> Optional[list[PaymentRecord]]:
    return _parse_export(file_path, PaymentRecord)
