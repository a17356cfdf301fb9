"""Shared utilities package for configuration and logging."""

from .config import (
    configure_logging,
    get_default_collection,
    get_environment,
    get_env_var,
    get_firebase_credentials,
    load_environment,
)

__all__ = [
    "configure_logging",
    "get_default_collection",
    "get_environment",
    "get_env_var",
    "get_firebase_credentials",
    "load_environment",
]
