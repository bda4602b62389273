import argparse
import sys
from pathlib import Path
from pydantic import ValidationError

from price_report.exceptions import ReportError
from price_report.logger import setup_logger
from price_report.pipelines.comparison import ComparisonPipeline
from price_report.schemas import ReportParameters


def run_report(input_path: Path | None = None, test_mode: bool = False) -> int:
    """Builds the report parameters from settings and runs the comparison pipeline."""
    logger = setup_logger()
    logger.info("--- Starting Q3 Price Comparison Report ---")

    try:
        params = ReportParameters()
    except ValidationError as e:
        logger.error("❌ Invalid report parameters!")
        logger.error(e)
        return 1

    logger.info(
        f"Facility: {params.facility_name} | Window: {params.start_date} to {params.end_date} "
        f"| Inflation: {params.inflation_rate:.2%}"
    )

    try:
        result = ComparisonPipeline(params, input_path=input_path, test_mode=test_mode).run()
    except ReportError as e:
        logger.error(f"❌ {e}")
        return 1

    if result is None:
        return 1

    logger.info("\n--- Process Finished Successfully ---")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compare Q3 supply prices, spend and volume")
    parser.add_argument("--input", type=Path, default=None, help="Purchase-line CSV (default: newest file in INPUT_DIR)")
    parser.add_argument("--test", action="store_true", help="Skip the webhook post")
    args = parser.parse_args()

    sys.exit(run_report(args.input, test_mode=args.test))
