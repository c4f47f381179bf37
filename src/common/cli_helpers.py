"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path


def setup_logging(level: int = logging.INFO) -> None:
    """Configure standard logging format for CLI tools and the API."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def parse_mock_feed(value: str) -> tuple[str, Path]:
    """Parse a KEY=PATH argument for replaying a local feed file.

    Raises:
        argparse.ArgumentTypeError: If the value is not KEY=PATH or the file is missing.
    """
    key, sep, path = value.partition("=")
    if not sep or not key.strip() or not path.strip():
        raise argparse.ArgumentTypeError("mock feed must be KEY=PATH")

    feed_path = Path(path.strip())
    if not feed_path.is_file():
        raise argparse.ArgumentTypeError(f"mock feed file not found: {feed_path}")
    return key.strip(), feed_path
