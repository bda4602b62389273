import os
from datetime import date
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Filename Configuration ---
PURCHASE_FILENAME_PREFIX = os.getenv("PURCHASE_FILENAME_PREFIX", "purchase_lines_")
REPORT_FILENAME_BASE = os.getenv("REPORT_FILENAME_BASE", "q3_price_comparison")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")

# --- Logging ---
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILENAME = os.getenv("LOG_FILENAME", "price_comparison.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Report Parameters ---
FACILITY_NAME = os.getenv("FACILITY_NAME", "Your Health System")
INFLATION_RATE = float(os.getenv("INFLATION_RATE", "0.03"))
START_DATE = date.fromisoformat(os.getenv("START_DATE", "2024-07-01"))
END_DATE = date.fromisoformat(os.getenv("END_DATE", "2025-09-30"))

# Months of purchase history read before START_DATE, used for the
# last-known-price baseline and the outlier statistics.
LOOKBACK_MONTHS = int(os.getenv("LOOKBACK_MONTHS", "12"))

# Tukey fence multiplier and the quantile interpolation used for Q1/Q3.
IQR_MULTIPLIER = float(os.getenv("IQR_MULTIPLIER", "1.5"))
PERCENTILE_INTERPOLATION = os.getenv("PERCENTILE_INTERPOLATION", "linear")

CONTRACT_TYPE = os.getenv("CONTRACT_TYPE", "ON CONTRACT")

# --- Shared Business Logic ---
# Warehouse column name -> internal column name.
COLUMN_MAP = {
    "SKU": "sku",
    "ProductDescription": "product_description",
    "CategoryName": "category_name",
    "FacilityName": "facility_name",
    "ContractType": "contract_type",
    "PurchaseDate": "purchase_date",
    "PurchaseQuantity": "purchase_quantity",
    "LineAmount": "line_amount",
    "UnitOfMeasurePrice": "uom_price",
    "UnitOfMeasureQuantity": "uom_quantity",
    "PriceEach": "price_each",
}

# Read as text so SKUs keep leading zeros and never turn into floats.
TEXT_COLUMNS = [
    "SKU",
    "ProductDescription",
    "CategoryName",
    "FacilityName",
    "ContractType",
]

NUMERIC_COLUMNS = [
    "purchase_quantity",
    "line_amount",
    "uom_price",
    "uom_quantity",
    "price_each",
]

# An item is the exact (SKU, description, category) triple.
ITEM_KEYS = ["sku", "product_description", "category_name"]

# Define the column order for the final report in one place.
OUTPUT_COLUMNS = [
    "sku",
    "product_description",
    "category_name",
    "avg_price_2024",
    "avg_price_2025",
    "spend_2024",
    "spend_2025",
    "quantity_2024",
    "quantity_2025",
    "pct_change_price_nominal",
    "pct_change_spend",
    "pct_change_quantity",
    "inflation_adjusted_price_2025",
    "inflation_adj_pct_change_price",
    "price_baseline_source",
]
