from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field, model_validator

from . import settings
from .utils import quarter_label, shift_months


class ReportParameters(BaseModel):
    """
    Explicit inputs of the comparison. The baseline quarter is the three
    calendar months starting at start_date; the current quarter is the three
    calendar months ending at end_date.
    """

    facility_name: str = Field(default=settings.FACILITY_NAME)
    inflation_rate: float = Field(default=settings.INFLATION_RATE, gt=-1)
    start_date: date = Field(default=settings.START_DATE)
    end_date: date = Field(default=settings.END_DATE)
    lookback_months: int = Field(default=settings.LOOKBACK_MONTHS, ge=0)
    iqr_multiplier: float = Field(default=settings.IQR_MULTIPLIER, gt=0)
    percentile_interpolation: Literal[
        "linear", "lower", "higher", "midpoint", "nearest"
    ] = Field(default=settings.PERCENTILE_INTERPOLATION)
    contract_type: str = Field(default=settings.CONTRACT_TYPE)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.current_quarter_start < self.baseline_quarter_end:
            raise ValueError(
                "window must span at least two non-overlapping quarters "
                f"({self.start_date} - {self.end_date})"
            )
        return self

    @property
    def baseline_quarter_start(self) -> date:
        return shift_months(self.start_date, 0)

    @property
    def baseline_quarter_end(self) -> date:
        """Exclusive upper bound (first day of the fourth month)."""
        return shift_months(self.start_date, 3)

    @property
    def current_quarter_end(self) -> date:
        """Exclusive upper bound (first day of the month after end_date)."""
        return shift_months(self.end_date, 1)

    @property
    def current_quarter_start(self) -> date:
        return shift_months(self.end_date, -2)

    @property
    def history_start(self) -> date:
        """Earliest purchase date read; start_date itself when there is no lookback."""
        if self.lookback_months == 0:
            return self.start_date
        return shift_months(self.start_date, -self.lookback_months)

    @property
    def baseline_label(self) -> str:
        return quarter_label(self.baseline_quarter_start)

    @property
    def current_label(self) -> str:
        return quarter_label(self.current_quarter_start)


class ComparisonRow(BaseModel):
    """
    Defines the data contract for one item in the final comparison report.
    The _2024 / _2025 fields hold the baseline and current quarter values.
    """

    sku: Optional[str] = Field(..., alias="SKU")
    product_description: Optional[str] = Field(default=None, alias="ProductDescription")
    category_name: Optional[str] = Field(default=None, alias="CategoryName")
    avg_price_2024: Optional[float] = Field(default=None, alias="Avg Price 2024")
    avg_price_2025: Optional[float] = Field(default=None, alias="Avg Price 2025")
    spend_2024: Optional[float] = Field(default=None, alias="Spend 2024")
    spend_2025: Optional[float] = Field(default=None, alias="Spend 2025")
    quantity_2024: Optional[float] = Field(default=None, alias="Quantity 2024")
    quantity_2025: Optional[float] = Field(default=None, alias="Quantity 2025")
    pct_change_price_nominal: Optional[float] = Field(default=None, alias="Price Change % (Nominal)")
    pct_change_spend: Optional[float] = Field(default=None, alias="Spend Change %")
    pct_change_quantity: Optional[float] = Field(default=None, alias="Quantity Change %")
    inflation_adjusted_price_2025: Optional[float] = Field(default=None, alias="Inflation Adjusted Price 2025")
    inflation_adj_pct_change_price: Optional[float] = Field(default=None, alias="Price Change % (Real)")
    price_baseline_source: Optional[Literal["quarter", "backfill"]] = Field(
        default=None, alias="Price Baseline Source"
    )

    class Config:
        # Build from DataFrame rows (field names), export with report aliases.
        populate_by_name = True
