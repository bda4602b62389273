import logging
import pandas as pd
from pathlib import Path

from . import settings
from .exceptions import MissingColumnsError
from .schemas import ReportParameters
from .utils import load_csv

logger = logging.getLogger(__name__)


def normalize_purchase_lines(df: pd.DataFrame) -> pd.DataFrame:
    """
    Renames warehouse columns to the internal schema and coerces types.
    Unparseable dates and numbers become null; rows are never dropped here.
    """
    missing = [col for col in settings.COLUMN_MAP if col not in df.columns]
    if missing:
        raise MissingColumnsError(missing)

    normalized = df[list(settings.COLUMN_MAP)].rename(columns=settings.COLUMN_MAP).copy()

    # Identifiers stay text even when the export stores them as numbers.
    for col in settings.ITEM_KEYS + ["facility_name", "contract_type"]:
        normalized[col] = normalized[col].where(
            normalized[col].isna(), normalized[col].astype(str)
        )

    normalized["purchase_date"] = pd.to_datetime(
        normalized["purchase_date"], errors="coerce"
    ).dt.normalize()
    for col in settings.NUMERIC_COLUMNS:
        normalized[col] = pd.to_numeric(normalized[col], errors="coerce")

    return normalized


def filter_purchase_lines(df: pd.DataFrame, params: ReportParameters) -> pd.DataFrame:
    """
    Keeps on-contract lines for the configured facility whose purchase date
    lies between the history start and end_date (inclusive).
    """
    contract = df["contract_type"].fillna("").str.upper()
    history_start = pd.Timestamp(params.history_start)
    end = pd.Timestamp(params.end_date)

    mask = (
        (contract == params.contract_type.upper())
        & (df["facility_name"] == params.facility_name)
        & df["purchase_date"].between(history_start, end)
    )
    filtered = df[mask].copy()
    logger.info(
        f"  > Kept {len(filtered)} of {len(df)} purchase lines "
        f"({params.facility_name}, {params.history_start} to {params.end_date})."
    )
    return filtered


def parse_purchase_report(file_path: Path) -> pd.DataFrame | None:
    """Loads a purchase-line export and transforms it into the internal format."""
    df = load_csv(file_path, dtype={col: str for col in settings.TEXT_COLUMNS})
    if df is None:
        return None

    df.columns = [str(col).strip() for col in df.columns]
    parsed = normalize_purchase_lines(df)

    logger.info(f"✅ Parsed {file_path.name} successfully ({len(parsed)} rows).")
    return parsed
