import logging
import re
from datetime import date, datetime
from pathlib import Path
import pandas as pd

logger = logging.getLogger(__name__)


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def shift_months(value: date, months: int) -> date:
    """First day of the month `months` calendar months away from `value`."""
    total = value.year * 12 + (value.month - 1) + months
    return date(total // 12, total % 12 + 1, 1)


def quarter_label(value: date) -> str:
    """e.g. 2024-07-01 -> 'Q3_2024'."""
    return f"Q{(value.month - 1) // 3 + 1}_{value.year}"


def safe_divide(numerator, denominator) -> pd.Series:
    """
    Element-wise division that yields NaN instead of raising or returning inf
    when the denominator is null or zero.
    """
    if isinstance(denominator, pd.Series) and not isinstance(numerator, pd.Series):
        numerator = pd.Series(numerator, index=denominator.index)
    numerator = pd.Series(numerator, dtype="float64")
    denominator = pd.Series(denominator, dtype="float64", index=numerator.index)
    denominator = denominator.where(denominator != 0)
    return numerator / denominator


def percent_change(current, baseline) -> pd.Series:
    """(current - baseline) / baseline * 100, NaN when baseline is null or zero."""
    current = pd.Series(current, dtype="float64")
    baseline = pd.Series(baseline, dtype="float64", index=current.index)
    return safe_divide(current - baseline, baseline) * 100


def find_latest_report(directory: Path, prefix: str) -> tuple[Path, date] | None:
    """
    Finds the newest '<prefix>YYYY-MM-DD.csv' file in `directory`.
    Returns the path and the date parsed from its name.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(\d{{4}}-\d{{2}}-\d{{2}})\.csv$")
    candidates = []
    for path in directory.glob(f"{prefix}*.csv"):
        match = pattern.match(path.name)
        if not match:
            continue
        try:
            file_date = date.fromisoformat(match.group(1))
        except ValueError:
            logger.warning(f"  > Ignoring {path.name}: invalid date in filename.")
            continue
        candidates.append((file_date, path))

    if not candidates:
        return None

    file_date, path = max(candidates)
    return path, file_date


def load_csv(
    file_path: Path, skiprows: int = 0, dtype: dict[str, type] | None = None
) -> pd.DataFrame | None:
    """
    CSV loader with an encoding fallback: UTF-8 with BOM support first,
    then latin-1, which can read any byte. `dtype` is passed to read_csv as is.
    """
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", skiprows=skiprows, dtype=dtype)

    except UnicodeDecodeError:
        logger.info(
            f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return pd.read_csv(file_path, encoding="latin-1", skiprows=skiprows, dtype=dtype)
        except (OSError, ValueError, pd.errors.ParserError) as e_latin1:
            logger.error(
                f"ERROR: Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None

    except FileNotFoundError:
        logger.info(f"INFO: Report not found at {file_path}, skipping.")
        return None

    except (OSError, ValueError, pd.errors.ParserError) as e_general:
        logger.error(
            f"ERROR: An unexpected error occurred while reading {file_path.name}. Reason: {e_general}"
        )
        return None


def nan_to_none(df: pd.DataFrame) -> list[dict]:
    """DataFrame rows as dicts with NaN/NaT replaced by None."""
    return df.astype(object).where(df.notna(), None).to_dict("records")
