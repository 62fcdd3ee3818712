import os
from pathlib import Path
from zoneinfo import ZoneInfo
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Filename Configuration ---
# Exports are matched by prefix, e.g. 'sales.json' or 'sales_2025-06-30.json'.
SALES_FILENAME_PREFIX = os.getenv("SALES_FILENAME_PREFIX", "sales")
STOCK_FILENAME_PREFIX = os.getenv("STOCK_FILENAME_PREFIX", "stock")
EXPENSES_FILENAME_PREFIX = os.getenv("EXPENSES_FILENAME_PREFIX", "expenses")
PAYMENTS_FILENAME_PREFIX = os.getenv("PAYMENTS_FILENAME_PREFIX", "payments")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Output / Run Flags ---
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() == "true"
TEST_MODE = os.getenv("TEST_MODE", "false").lower() == "true"

# --- Time Handling ---
# Hour-of-day and calendar-day boundaries are computed in this zone.
REPORT_TIMEZONE = ZoneInfo(os.getenv("REPORT_TIMEZONE", "UTC"))

# --- Shared Business Logic ---
RESTOCK_THRESHOLD = 10
BEST_SELLER_LIMIT = 5
PEAK_HOUR_LIMIT = 3

SLOW_MOVING_WINDOW_DAYS = 30

# Falling demand compares the last week against the week before it.
DEMAND_WINDOW_DAYS = 7
DEMAND_DROP_RATIO = 0.5

# Reorders cover the next 14 days of demand plus a safety buffer.
REORDER_WINDOW_DAYS = 14
REORDER_BUFFER = 5

EXPIRY_WARNING_DAYS = 7

# Dashboard / report views
SALES_TREND_DAYS = 7
REPORT_SERIES_DAYS = 30
RECENT_ACTIVITY_LIMIT = 10
