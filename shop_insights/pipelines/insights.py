import logging
from typing import Optional

from shop_insights import insights, parsers, settings, summary
from shop_insights.pipeline import DataPipeline
from shop_insights.schemas import DashboardReport, ReorderSuggestion

logger = logging.getLogger(__name__)


class InsightsPipeline(DataPipeline):
    """Dashboard numbers plus smart insights, built from every export."""

    def __init__(self, test_mode: bool = False, **kwargs):
        super().__init__("insights", test_mode=test_mode, **kwargs)

        # (collection, prefix, parser, required)
        self.EXPORT_REGISTRY = [
            ("sales", settings.SALES_FILENAME_PREFIX, parsers.parse_sales_export, True),
            ("stock", settings.STOCK_FILENAME_PREFIX, parsers.parse_stock_export, True),
            ("expenses", settings.EXPENSES_FILENAME_PREFIX, parsers.parse_expenses_export, False),
            ("payments", settings.PAYMENTS_FILENAME_PREFIX, parsers.parse_payments_export, False),
        ]

    def extract(self) -> Optional[dict[str, list]]:
        logger.info("--- Reading Shop Exports ---")

        data: dict[str, list] = {}
        for collection, prefix, parser, required in self.EXPORT_REGISTRY:
            records = self.read_export(prefix, parser)
            if records is None:
                if required:
                    logger.error(f"  > ERROR: Required '{collection}' export unavailable.")
                    return None
                logger.info(f"  > INFO: Optional '{collection}' export missing. Continuing.")
                records = []
            data[collection] = records

        logger.info(
            f"  > Loaded {len(data['sales'])} sales, {len(data['stock'])} stock items, "
            f"{len(data['expenses'])} expenses, {len(data['payments'])} payments."
        )
        return data

    def transform(self, data: dict[str, list]) -> DashboardReport:
        logger.info("\n--- Building Dashboard Report ---")
        sales, stock = data["sales"], data["stock"]
        expenses, payments = data["expenses"], data["payments"]

        report = DashboardReport(
            stats=summary.dashboard_stats(sales, expenses, stock, payments, now=self.now, tz=self.tz),
            sales_trend=summary.sales_trend(sales, now=self.now, tz=self.tz),
            monthly_series=summary.daily_report_series(sales, expenses, now=self.now, tz=self.tz),
            expenses_by_category=summary.expenses_by_category(expenses),
            recent_activity=summary.recent_activity(sales, expenses, payments, tz=self.tz),
            insights=insights.build_insights(sales, stock, now=self.now, tz=self.tz),
        )

        found = report.insights
        logger.info(f"  > Best sellers: {', '.join(b.name for b in found.best_selling) or 'none'}")
        logger.info(f"  > Restock needed: {len(found.restock_needed)}")
        logger.info(f"  > Slow moving: {len(found.slow_moving)}")
        logger.info(f"  > Falling demand: {len(found.falling_demand)}")
        logger.info(f"  > Reorder suggestions: {len(found.suggested_reorders)}")
        return report

    def table(self, report: DashboardReport) -> list[ReorderSuggestion]:
        # The CSV is the shopping list: what to reorder and how much.
        return list(report.insights.suggested_reorders)
