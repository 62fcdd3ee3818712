from shop_insights import settings
from shop_insights.logger import setup_logger
from shop_insights.pipelines.insights import InsightsPipeline
from shop_insights.pipelines.notifications import NotificationsPipeline


def run_process():
    """Main orchestration function: builds every report from the latest exports."""
    logger = setup_logger()
    logger.info("--- Starting Shop Insights Process ---")
    logger.info(f"Reading exports from: {settings.INPUT_DIR}")

    # --- Pipeline Registry ---
    # To add a report, add its pipeline here.
    pipelines = [
        InsightsPipeline(test_mode=settings.TEST_MODE),
        NotificationsPipeline(test_mode=settings.TEST_MODE),
    ]

    for pipeline in pipelines:
        pipeline.run()

    logger.info("\n--- Process Finished ---")


if __name__ == "__main__":
    run_process()
