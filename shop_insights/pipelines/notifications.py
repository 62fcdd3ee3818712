import logging
from typing import Optional

from shop_insights import parsers, settings
from shop_insights.notifications import generate_notifications
from shop_insights.pipeline import DataPipeline
from shop_insights.schemas import Notification

logger = logging.getLogger(__name__)


class NotificationsPipeline(DataPipeline):
    def __init__(self, test_mode: bool = False, **kwargs):
        super().__init__("notifications", test_mode=test_mode, **kwargs)

    def extract(self) -> Optional[dict[str, list]]:
        logger.info("--- Reading Stock Export ---")
        stock = self.read_export(settings.STOCK_FILENAME_PREFIX, parsers.parse_stock_export)
        if stock is None:
            return None
        return {"stock": stock}

    def transform(self, data: dict[str, list]) -> list[Notification]:
        logger.info("\n--- Scanning Stock for Alerts ---")
        notifications = generate_notifications(data["stock"], now=self.now, tz=self.tz)
        if not notifications:
            logger.info("  > ✅ Nothing needs attention.")
        for n in notifications:
            logger.info(f"  > [{n.type.value}] {n.message}")
        return notifications

    def table(self, report: list[Notification]) -> list[Notification]:
        return report
