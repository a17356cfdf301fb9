"""
Shared configuration module for the document store drivers.

Provides logging setup, environment handling and environment variable
helpers used when building driver options.
"""

import os
import sys
import json
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure logging to send INFO and DEBUG to stdout, WARNING+ to stderr.

    Args:
        level: Minimum logging level (default: logging.INFO)
    """
    root_logger = logging.getLogger()

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Handler for INFO and DEBUG -> stdout
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.addFilter(lambda record: record.levelno < logging.WARNING)
    stdout_handler.setFormatter(formatter)

    # Handler for WARNING and above -> stderr
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)


logger = logging.getLogger(__name__)

# Valid environments
VALID_ENVIRONMENTS = ["dev", "prod", "staging"]


def load_environment(dotenv_path: Optional[str] = None) -> bool:
    """Load variables from a .env file without overriding the real environment."""
    loaded = load_dotenv(dotenv_path, override=False)
    if loaded:
        logger.debug("Loaded environment variables from .env")
    return loaded


def get_environment() -> str:
    """
    Get the current environment from ENVIRONMENT variable.

    Returns:
        str: Environment name (dev, prod, or staging)

    Raises:
        ValueError: If ENVIRONMENT is not a valid value
    """
    env = os.environ.get("ENVIRONMENT", "dev")
    if env not in VALID_ENVIRONMENTS:
        raise ValueError(f"Invalid ENVIRONMENT: {env}. Must be one of: {VALID_ENVIRONMENTS}")
    return env


def get_default_collection() -> str:
    """
    Get the collection name for the current environment.

    Returns:
        str: FIRESTORE_COLLECTION if set, otherwise e.g. "dev-records"
    """
    collection = os.environ.get("FIRESTORE_COLLECTION")
    if collection:
        return collection
    return f"{get_environment()}-records"


# Environment variable helpers for drivers
def get_env_var(key: str) -> str:
    """
    Get a required environment variable or raise an error.

    Args:
        key: Environment variable name

    Returns:
        str: Environment variable value

    Raises:
        ValueError: If the environment variable is not set
    """
    value = os.getenv(key)
    if not value:
        raise ValueError(f"{key} not found in environment variables")
    return value


def get_firebase_credentials(key: str = "FIREBASE_ADMIN_KEY") -> Dict[str, Any]:
    """
    Parse the service-account JSON stored in an environment variable.

    Raises:
        ValueError: If the variable is missing or not a JSON object
    """
    raw = get_env_var(key)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"{key} is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ValueError(f"{key} must be a JSON object")
    return parsed
