import os
import sys
import logging
from logging.handlers import TimedRotatingFileHandler
import datetime

# Create a logger
logger = logging.getLogger("adwsus_recon")
logger.setLevel(logging.INFO)

FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(log_dir="logs", verbose=False):
    """Attach the daily log file and the console handler (once per process)."""
    if getattr(logger, "_configured", False):
        return logger

    # Ensure log directory exists
    os.makedirs(log_dir, exist_ok=True)
    log_filename = os.path.join(log_dir, f"Reconciliation_{datetime.date.today()}.log")

    # New file every day at midnight
    file_handler = TimedRotatingFileHandler(
        log_filename, when="midnight", interval=1, backupCount=7, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(FORMAT))
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
    logger.addHandler(console)

    logger._configured = True
    return logger
