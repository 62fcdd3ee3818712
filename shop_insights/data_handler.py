import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests
from pydantic import BaseModel

from . import settings
from . import utils

logger = logging.getLogger(__name__)


def _to_json(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, list):
        return [_to_json(item) for item in data]
    return data


def save_outputs(
    payload: Any,
    report_name: str,
    table: Optional[list[BaseModel]] = None,
    output_dir: Optional[Path] = None,
    today: Optional[date] = None,
) -> list[Path]:
    """
    Saves a report with a dated filename: the full payload as JSON (when
    SAVE_JSON_OUTPUT is on) and, if given, its main table as a flat CSV.
    Returns the paths written.
    """
    output_dir = output_dir or settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename(today)
    written = []

    if table:
        csv_path = output_dir / f"{report_name}_{date_suffix}.csv"
        rows = [item.model_dump(mode="json", by_alias=True) for item in table]
        # nested models (e.g. a reorder's stock item) become dotted columns
        pd.json_normalize(rows).to_csv(csv_path, index=False)
        logger.info(f"✅ Table saved to: {csv_path}")
        written.append(csv_path)

    if settings.SAVE_JSON_OUTPUT:
        json_path = output_dir / f"{report_name}_{date_suffix}.json"
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(_to_json(payload), f, indent=2, default=str, ensure_ascii=False)
        logger.info(f"✅ JSON output saved to: {json_path}")
        written.append(json_path)
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return written


def post_to_webhook(payload: Any, metadata: dict[str, Optional[date]], report_type: str) -> bool:
    """
    Posts the report and its source metadata (export name -> file date) to
    the webhook. Returns True on success; failures are logged, not raised.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} report to webhook: {settings.WEBHOOK_URL}")

    body = {
        "reportType": report_type,
        "reportData": _to_json(payload),
        "metadata": {
            source: dt.isoformat() if dt else None for source, dt in metadata.items()
        },
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=body, timeout=15)
        response.raise_for_status()
        logger.info("✅ Report successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
