import logging
import sys
from logging.handlers import RotatingFileHandler
from . import settings


def setup_logger(name: str = None, log_level: int | str | None = None) -> logging.Logger:
    """
    Configures the report logger: short progress lines on stdout, and the
    full record (time, module, level) in a rotating file under LOG_DIR.
    The level defaults to LOG_LEVEL. A logger that already has handlers is
    returned untouched.
    """
    level = log_level if log_level is not None else settings.LOG_LEVEL
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    # Pipeline steps log their own emoji-prefixed lines; no decoration on stdout
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    report_log = settings.LOG_DIR / settings.LOG_FILENAME
    file_handler = RotatingFileHandler(
        report_log, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"  # 5 MB
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(name)s | %(levelname)s | %(message)s")
    )
    logger.addHandler(file_handler)

    logger.debug(f"Logging to {report_log}")
    return logger
