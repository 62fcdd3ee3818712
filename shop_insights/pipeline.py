import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, tzinfo
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel

from . import data_handler, settings, utils

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Base class for report pipelines (insights, notifications).
    Follows an Extract -> Transform -> Load pattern over the shop's exports.
    """

    def __init__(
        self,
        report_type: str,
        test_mode: bool = False,
        input_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        now: Optional[datetime] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.report_type = report_type
        self.test_mode = test_mode
        self.input_dir = input_dir or settings.INPUT_DIR
        self.output_dir = output_dir or settings.OUTPUT_DIR
        self.tz = tz
        # One reference instant for the whole run
        self.now = utils.resolve_now(now, tz)
        # Status summary tracks the file date of each export read
        self.status_summary: dict[str, Optional[date]] = {}
        self.saved_paths: list[Path] = []

    def run(self) -> Optional[Any]:
        """
        Orchestrates the pipeline execution. Returns the transformed report,
        or None if nothing could be produced.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if raw_data is None:
            logger.warning(f"⚠️ No data extracted for {self.report_type}. Sending empty status.")
            self.load(None)
            return None

        # --- 2. TRANSFORM ---
        report = self.transform(raw_data)
        if report is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(report)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return report

    def read_export(self, prefix: str, parser: Callable[[Path], Optional[list]]) -> Optional[list]:
        """
        Finds the latest export for `prefix`, parses it and records its file
        date in the status summary. Returns None when missing or invalid.
        """
        found = utils.find_latest_export(self.input_dir, prefix)
        if not found:
            logger.warning(f"  > ⚠️  Export missing ({prefix}). Skipping.")
            self.status_summary[prefix] = None
            return None

        path, file_date = found
        logger.info(f"  > Found '{prefix}': {path.name} ({file_date or 'undated'})")
        self.status_summary[prefix] = file_date
        return parser(path)

    @abstractmethod
    def extract(self) -> Optional[dict[str, list]]:
        """
        Reads the exports this report needs and returns them keyed by
        collection name, or None if a required export is unavailable.
        """
        pass

    @abstractmethod
    def transform(self, data: dict[str, list]) -> Optional[BaseModel | list]:
        """Runs the analyses. Returns the report payload."""
        pass

    def table(self, report: Any) -> Optional[list[BaseModel]]:
        """The rows to flatten into the CSV output. Defaults to none."""
        return None

    def load(self, report: Optional[Any]):
        """
        Saves the report to disk and posts it to the webhook.
        """
        # 1. Status Summary
        if self.status_summary:
            logger.info("\n--- Source Status Summary ---")
            for source, file_date in self.status_summary.items():
                logger.info(f"{source}: {file_date.isoformat() if file_date else 'No date'}")

        # 2. Save Outputs (JSON/CSV)
        if report is not None:
            self.saved_paths = data_handler.save_outputs(
                report,
                f"{self.report_type}_report",
                table=self.table(report),
                output_dir=self.output_dir,
                today=utils.local_date(self.now, self.tz),
            )
        else:
            logger.warning("No data to save to disk.")

        # 3. Post to Webhook
        if not self.test_mode:
            data_handler.post_to_webhook(
                payload=report if report is not None else [],
                metadata=self.status_summary,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
