import logging
from pathlib import Path
import pandas as pd
from pydantic import ValidationError

from price_report import parsers, settings, utils
from price_report.comparison import build_report
from price_report.pipeline import DataPipeline
from price_report.schemas import ComparisonRow, ReportParameters

logger = logging.getLogger(__name__)


class ComparisonPipeline(DataPipeline):
    def __init__(
        self,
        params: ReportParameters | None = None,
        input_path: Path | None = None,
        test_mode: bool = False,
    ):
        super().__init__(
            "price_comparison",
            test_mode=test_mode,
            filename_base=settings.REPORT_FILENAME_BASE,
        )
        self.params = params if params is not None else ReportParameters()
        self.input_path = input_path
        self.status_summary = {
            "Facility": self.params.facility_name,
            "Baseline Quarter": self.params.baseline_label,
            "Current Quarter": self.params.current_label,
            "Inflation Rate": self.params.inflation_rate,
            "Source File": None,
            "File Date": None,
            "Items": None,
            "Backfilled Baselines": None,
        }

    def extract(self) -> pd.DataFrame | None:
        logger.info("--- Loading Purchase Lines ---")

        if self.input_path is not None:
            path, file_date = Path(self.input_path), None
        else:
            found_info = utils.find_latest_report(
                settings.INPUT_DIR, settings.PURCHASE_FILENAME_PREFIX
            )
            if not found_info:
                logger.warning(
                    f"  > ⚠️  File missing ({settings.PURCHASE_FILENAME_PREFIX}*.csv in {settings.INPUT_DIR})."
                )
                return None
            path, file_date = found_info

        logger.info(f"  > Found: {path.name} (File Date: {file_date or 'n/a'})")
        self.status_summary["Source File"] = path.name
        self.status_summary["File Date"] = file_date

        return parsers.parse_purchase_report(path)

    def transform(self, df: pd.DataFrame) -> list[ComparisonRow] | None:
        logger.info("\n--- Comparing Quarters ---")
        report = build_report(df, self.params)

        self.status_summary["Items"] = len(report)
        self.status_summary["Backfilled Baselines"] = int(
            (report["price_baseline_source"] == "backfill").sum()
        )

        try:
            logger.info("Validating data against schema...")
            validated_data = [ComparisonRow(**row) for row in utils.nan_to_none(report)]
            logger.info(f"✅ Data validation successful ({len(validated_data)} records).")
            return validated_data
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None
