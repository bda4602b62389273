"""
Pytest configuration and shared fixtures.
"""
from datetime import date

import pandas as pd
import pytest

from price_report.schemas import ReportParameters

FACILITY = "Test Hospital"


@pytest.fixture
def params() -> ReportParameters:
    """Default Q3 2024 vs Q3 2025 window with 3% inflation."""
    return ReportParameters(
        facility_name=FACILITY,
        inflation_rate=0.03,
        start_date=date(2024, 7, 1),
        end_date=date(2025, 9, 30),
        lookback_months=12,
        iqr_multiplier=1.5,
        percentile_interpolation="linear",
        contract_type="ON CONTRACT",
    )


def make_line(
    sku: str,
    purchase_date: str,
    price: float,
    quantity: float = 10,
    spend: float | None = None,
    description: str = "Exam Gloves",
    category: str = "Med Surg",
    facility: str = FACILITY,
    contract: str | None = "On Contract",
    uom_quantity: float = 1,
    price_each: float | None = None,
) -> dict:
    """A purchase line in the internal column format; price is per unit of measure."""
    return {
        "sku": sku,
        "product_description": description,
        "category_name": category,
        "facility_name": facility,
        "contract_type": contract,
        "purchase_date": pd.Timestamp(purchase_date),
        "purchase_quantity": quantity,
        "line_amount": spend if spend is not None else price * quantity,
        "uom_price": price * uom_quantity,
        "uom_quantity": uom_quantity,
        "price_each": price_each if price_each is not None else price,
    }


def lines_frame(rows: list[dict]) -> pd.DataFrame:
    return pd.DataFrame(rows)


def monthly_frame(sku: str, prices: list[float], start: str = "2024-07-01", **keys) -> pd.DataFrame:
    """Consecutive monthly records for one item, one per price."""
    months = pd.date_range(start, periods=len(prices), freq="MS")
    return pd.DataFrame(
        {
            "sku": sku,
            "product_description": keys.get("description", "Exam Gloves"),
            "category_name": keys.get("category", "Med Surg"),
            "year_month": months,
            "avg_unit_price": prices,
            "total_spend": [p * 10 for p in prices],
            "total_quantity": 10.0,
        }
    )


@pytest.fixture
def raw_export() -> pd.DataFrame:
    """Purchase-line export with warehouse column names."""
    return pd.DataFrame(
        {
            "SKU": [1001, 1001, 1001, 1001, 1001, 1001, 2002],
            "ProductDescription": ["Syringe 10ml"] * 6 + ["Gauze Pad"],
            "CategoryName": ["Injection"] * 6 + ["Wound Care"],
            "FacilityName": [FACILITY] * 6 + ["Other Hospital"],
            "ContractType": ["On Contract"] * 6 + ["on contract"],
            "PurchaseDate": [
                "2024-07-10",
                "2024-08-10",
                "2024-09-10",
                "2025-07-10",
                "2025-08-10",
                "2025-09-10",
                "2024-07-10",
            ],
            "PurchaseQuantity": [10, 10, 10, 10, 10, 10, 5],
            "LineAmount": [20.0, 20.0, 20.0, 22.0, 22.0, 22.0, 15.0],
            "UnitOfMeasurePrice": [20.0, 20.0, 20.0, 22.0, 22.0, 22.0, 3.0],
            "UnitOfMeasureQuantity": [10, 10, 10, 10, 10, 10, 1],
            "PriceEach": [2.0, 2.0, 2.0, 2.2, 2.2, 2.2, 3.0],
        }
    )
