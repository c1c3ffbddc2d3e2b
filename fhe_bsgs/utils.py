"""
Utility functions for the packed-FFT benchmark.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import pandas as pd

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = True, logger_name: str = "fhe_bsgs") -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Args:
        verbose: DEBUG level when True, WARNING otherwise
        logger_name: Logger to configure (the package root by default)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(console_handler)
    return logger


@contextmanager
def timed(timings: Dict[str, float], name: str):
    """Store the wall time of the enclosed block in timings[name] (seconds)."""
    start = time.perf_counter()
    try:
        yield
    finally:
        timings[name] = time.perf_counter() - start


class BenchLogger:
    """
    Collects one row per benchmark run and renders them as a table.
    """

    def __init__(self):
        self.data: List[Dict[str, Any]] = []

    def record(self, **row: Any):
        self.data.append(dict(row))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.data)

    def print_summary(self, columns: Optional[List[str]] = None):
        """
        Print the recorded rows.

        Args:
            columns: Subset of columns to show (all when None)
        """
        if not self.data:
            print("No data recorded.")
            return
        df = self.to_frame()
        if columns is not None:
            df = df[columns]
        print(df.to_string(index=False))

    def save_to_csv(self, filename: str):
        self.to_frame().to_csv(filename, index=False)
        print(f"Data saved to {filename}")
