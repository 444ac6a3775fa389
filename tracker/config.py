"""
Configuration module for the tracker core.

Contains constants, settings, and configuration values used throughout the application.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Version
VERSION = "0.1.0"

# Application paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
ENV_FILE = PROJECT_ROOT / ".env"

# Database configuration
DEFAULT_DB_PATH = DATA_DIR / "tracker.db"
DB_TIMEOUT = 10.0  # seconds

# Categories
DEFAULT_CATEGORY_TITLE = "Default"

# Tracker creation
MAX_TRACKER_NAME_LENGTH = 38
DEFAULT_COLOR_NAME = "selection_5"
DEFAULT_EMOJI = "🥞"

# Statistics / chart generation
DEFAULT_CHART_DAYS = 30
CHART_DPI = 150
CHART_FORMAT = "png"
CHART_WIDTH = 10
CHART_HEIGHT = 6

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def load_environment(env_path: Path = ENV_FILE) -> bool:
    """
    Load a .env file into the process environment if it exists.

    Returns:
        True if a file was loaded, False otherwise
    """
    if env_path.exists():
        load_dotenv(env_path)
        return True
    return False


def get_db_path() -> Path:
    """Get the database path, honouring the TRACKER_DB_PATH override."""
    override = os.getenv("TRACKER_DB_PATH")
    return Path(override) if override else DEFAULT_DB_PATH


def get_log_level():
    """Get the configured log level."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(os.getenv("LOG_LEVEL", LOG_LEVEL).upper(), logging.INFO)


def configure_logging():
    """Configure root logging for scripts embedding the tracker core."""
    logging.basicConfig(level=get_log_level(), format=LOG_FORMAT)
