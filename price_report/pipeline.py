import logging
from abc import ABC, abstractmethod
from typing import Any
import pandas as pd

from price_report import data_handler

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for report pipelines.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, report_type: str, test_mode: bool = False, filename_base: str | None = None):
        self.report_type = report_type
        self.filename_base = filename_base or f"{report_type}_report"
        self.test_mode = test_mode
        # Run metadata reported in the log summary and sent with the webhook payload
        self.status_summary: dict[str, Any] = {}

    def run(self) -> list[Any] | None:
        """
        Orchestrates the pipeline execution. Returns the validated rows,
        or None when transformation failed.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if raw_data is None or raw_data.empty:
            logger.warning(f"⚠️ No data extracted for {self.report_type}. Sending empty report.")
            self.load([])
            return []

        # --- 2. TRANSFORM ---
        validated_data = self.transform(raw_data)
        if validated_data is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(validated_data)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return validated_data

    @abstractmethod
    def extract(self) -> pd.DataFrame | None:
        """
        Finds the input, runs the parser and returns the raw DataFrame.
        Should also populate self.status_summary.
        """

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> list[Any] | None:
        """
        Runs the computation and validation.
        Returns a list of validated Pydantic models.
        """

    def load(self, validated_data: list[Any]):
        """
        Saves data to disk and posts to webhook.
        """
        logger.info("\n--- Final Status Summary ---")
        for key, value in self.status_summary.items():
            logger.info(f"{key}: {value if value is not None else 'No data'}")

        if validated_data:
            data_handler.save_outputs(validated_data, self.filename_base)
        else:
            logger.warning("No data to save to disk.")

        if not self.test_mode:
            data_handler.post_to_webhook(
                validated_data=validated_data,
                metadata=self.status_summary,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
