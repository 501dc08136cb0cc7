# File: subroll/core/logging_setup.py

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configures the 'subroll' logger hierarchy.

    - `level` and above go to the console.
    - DEBUG and above go to `log_file` when one is given.

    Safe to call more than once; previous handlers are replaced.
    """
    logger = logging.getLogger("subroll")
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers to prevent duplicate logs if called multiple times
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            logger.addHandler(file_handler)
            logger.info(f"Logging initialized. Detailed log file at: {log_file}")
        except OSError as e:
            logger.error(f"Failed to set up file logging to {log_file}: {e}")
            logger.info("Proceeding without file logging. All logs will go to console.")

    return logger
