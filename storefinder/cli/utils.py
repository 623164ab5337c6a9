"""
CLI Utilities Module.

Common utility functions for CLI tools.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def validate_data_path(data_path: str) -> bool:
    """
    Validate that a record file exists.

    Args:
        data_path: Path to the JSON record file.

    Returns:
        True if valid, False otherwise.
    """
    path = Path(data_path)

    if not path.is_file():
        logger.error(f"Record file not found: {data_path}")
        return False

    return True
