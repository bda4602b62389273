"""
Quarter-over-quarter price, spend and volume comparison.

The computation is a chain of pure DataFrame transformations:

    purchase lines -> monthly records -> outlier filter
    outlier filter -> quarterly records
    outlier filter -> last known prices
    quarterly records + last known prices -> comparison rows

Prices are unweighted averages at every level: the mean of per-line unit
prices within a month, and the mean of monthly prices within a quarter.
"""

import logging
import pandas as pd

from . import settings
from .parsers import filter_purchase_lines
from .schemas import ReportParameters
from .utils import percent_change, safe_divide

logger = logging.getLogger(__name__)

ITEM_KEYS = settings.ITEM_KEYS

MONTHLY_COLUMNS = ITEM_KEYS + ["year_month", "avg_unit_price", "total_spend", "total_quantity"]
QUARTERLY_COLUMNS = ITEM_KEYS + [
    "quarter",
    "avg_unit_price_quarter",
    "total_spend_quarter",
    "total_quantity_quarter",
]
BASELINE_COLUMNS = ITEM_KEYS + ["last_price_before_window"]


def line_unit_price(lines: pd.DataFrame) -> pd.Series:
    """
    Unit-of-measure price divided by unit-of-measure quantity, falling back
    to the flat per-each price when the quantity is not positive or missing.
    """
    uom_quantity = lines["uom_quantity"]
    per_uom = safe_divide(lines["uom_price"], uom_quantity)
    return per_uom.where(uom_quantity > 0, lines["price_each"])


def aggregate_monthly(lines: pd.DataFrame) -> pd.DataFrame:
    """One row per (item, calendar month); months with net quantity <= 0 are dropped."""
    if lines.empty:
        return pd.DataFrame(columns=MONTHLY_COLUMNS)

    df = lines.assign(
        year_month=lines["purchase_date"].dt.to_period("M").dt.to_timestamp(),
        unit_price=line_unit_price(lines),
    )
    monthly = (
        df.groupby(ITEM_KEYS + ["year_month"], dropna=False)
        .agg(
            avg_unit_price=("unit_price", "mean"),
            total_spend=("line_amount", "sum"),
            total_quantity=("purchase_quantity", "sum"),
        )
        .reset_index()
    )
    return monthly[monthly["total_quantity"] > 0].reset_index(drop=True)


def filter_outliers(
    monthly: pd.DataFrame,
    multiplier: float = 1.5,
    interpolation: str = "linear",
) -> pd.DataFrame:
    """
    Tukey fence on each item's monthly average price.

    Q1 and Q3 use the same pandas quantile interpolation. When the IQR is
    zero only months priced exactly at Q1 survive, so an item with a single
    distinct price keeps all of its months.
    """
    if monthly.empty:
        return monthly.copy()

    prices = monthly.groupby(ITEM_KEYS, dropna=False)["avg_unit_price"]
    q1 = prices.transform(lambda s: s.quantile(0.25, interpolation=interpolation))
    q3 = prices.transform(lambda s: s.quantile(0.75, interpolation=interpolation))
    iqr = q3 - q1

    price = monthly["avg_unit_price"]
    inside_fence = price.between(q1 - multiplier * iqr, q3 + multiplier * iqr)
    keep = ((iqr > 0) & inside_fence) | ((iqr == 0) & (price == q1))

    dropped = int((~keep).sum())
    if dropped:
        logger.info(f"  > Outlier filter removed {dropped} of {len(monthly)} monthly records.")
    return monthly[keep].reset_index(drop=True)


def _month_in(year_month: pd.Series, start, end) -> pd.Series:
    return (year_month >= pd.Timestamp(start)) & (year_month < pd.Timestamp(end))


def aggregate_quarterly(clean: pd.DataFrame, params: ReportParameters) -> pd.DataFrame:
    """Re-aggregates filtered months into the baseline and current quarters only."""
    if clean.empty:
        return pd.DataFrame(columns=QUARTERLY_COLUMNS)

    year_month = clean["year_month"]
    in_baseline = _month_in(year_month, params.baseline_quarter_start, params.baseline_quarter_end)
    in_current = _month_in(year_month, params.current_quarter_start, params.current_quarter_end)

    quarter = (
        pd.Series(None, index=clean.index, dtype="object")
        .mask(in_baseline, params.baseline_label)
        .mask(in_current, params.current_label)
    )
    bucketed = clean.assign(quarter=quarter).dropna(subset=["quarter"])
    if bucketed.empty:
        return pd.DataFrame(columns=QUARTERLY_COLUMNS)

    return (
        bucketed.groupby(ITEM_KEYS + ["quarter"], dropna=False)
        .agg(
            avg_unit_price_quarter=("avg_unit_price", "mean"),
            total_spend_quarter=("total_spend", "sum"),
            total_quantity_quarter=("total_quantity", "sum"),
        )
        .reset_index()
    )


def resolve_baselines(clean: pd.DataFrame, params: ReportParameters) -> pd.DataFrame:
    """
    Last known price per item: the filtered monthly price of the latest month
    before the baseline quarter. The stable sort keeps the pick deterministic.
    """
    prior = clean[clean["year_month"] < pd.Timestamp(params.baseline_quarter_start)]
    if prior.empty:
        return pd.DataFrame(columns=BASELINE_COLUMNS)

    latest = (
        prior.sort_values("year_month", kind="mergesort")
        .groupby(ITEM_KEYS, dropna=False, sort=False)
        .tail(1)
    )
    return (
        latest[ITEM_KEYS + ["avg_unit_price"]]
        .rename(columns={"avg_unit_price": "last_price_before_window"})
        .reset_index(drop=True)
    )


def _quarter_side(quarterly: pd.DataFrame, label: str, suffix: str, price_col: str) -> pd.DataFrame:
    side = quarterly[quarterly["quarter"] == label]
    return side[ITEM_KEYS + ["avg_unit_price_quarter", "total_spend_quarter", "total_quantity_quarter"]].rename(
        columns={
            "avg_unit_price_quarter": price_col,
            "total_spend_quarter": f"spend_{suffix}",
            "total_quantity_quarter": f"quantity_{suffix}",
        }
    )


def compare_quarters(
    quarterly: pd.DataFrame, baselines: pd.DataFrame, params: ReportParameters
) -> pd.DataFrame:
    """
    Joins both quarters per item, falls back to the last known price when the
    baseline quarter is missing, and computes nominal and real changes.
    Sorted ascending by real price change, nulls first.
    """
    prior = _quarter_side(quarterly, params.baseline_label, "2024", "quarter_price_2024")
    current = _quarter_side(quarterly, params.current_label, "2025", "avg_price_2025")

    report = prior.merge(current, on=ITEM_KEYS, how="outer").merge(
        baselines, on=ITEM_KEYS, how="left"
    )
    numeric = [
        "quarter_price_2024",
        "avg_price_2025",
        "spend_2024",
        "spend_2025",
        "quantity_2024",
        "quantity_2025",
        "last_price_before_window",
    ]
    report[numeric] = report[numeric].astype("float64")

    has_quarter = report["quarter_price_2024"].notna()
    backfilled = ~has_quarter & report["last_price_before_window"].notna()
    report["avg_price_2024"] = report["quarter_price_2024"].where(
        has_quarter, report["last_price_before_window"]
    )
    report["price_baseline_source"] = (
        pd.Series(None, index=report.index, dtype="object")
        .mask(backfilled, "backfill")
        .mask(has_quarter, "quarter")
    )

    report["pct_change_price_nominal"] = percent_change(report["avg_price_2025"], report["avg_price_2024"])
    # Spend and volume compare against the real baseline quarter only.
    report["pct_change_spend"] = percent_change(report["spend_2025"], report["spend_2024"])
    report["pct_change_quantity"] = percent_change(report["quantity_2025"], report["quantity_2024"])

    # Single period: the two quarters are assumed to be one year apart.
    report["inflation_adjusted_price_2025"] = report["avg_price_2024"] * (1 + params.inflation_rate)
    report["inflation_adj_pct_change_price"] = percent_change(
        report["avg_price_2025"], report["inflation_adjusted_price_2025"]
    )

    report = report.sort_values(
        ["inflation_adj_pct_change_price"] + ITEM_KEYS, na_position="first"
    )
    return report[settings.OUTPUT_COLUMNS].reset_index(drop=True)


def run_comparison(lines: pd.DataFrame, params: ReportParameters) -> pd.DataFrame:
    """
    Runs every stage over purchase lines that already passed the facility,
    contract and date predicates.
    """
    monthly = aggregate_monthly(lines)
    logger.info(f"  > Monthly records: {len(monthly)}")

    clean = filter_outliers(
        monthly,
        multiplier=params.iqr_multiplier,
        interpolation=params.percentile_interpolation,
    )
    quarterly = aggregate_quarterly(clean, params)
    logger.info(
        f"  > Quarterly records: {len(quarterly)} "
        f"({params.baseline_label} vs {params.current_label})"
    )

    baselines = resolve_baselines(clean, params)
    logger.info(f"  > Items with a last known price before {params.baseline_quarter_start}: {len(baselines)}")

    return compare_quarters(quarterly, baselines, params)


def build_report(purchase_lines: pd.DataFrame, params: ReportParameters) -> pd.DataFrame:
    """Applies the purchase-line predicates, then the full comparison."""
    return run_comparison(filter_purchase_lines(purchase_lines, params), params)
