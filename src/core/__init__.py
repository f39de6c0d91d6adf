"""
Core utilities shared across the application.
"""

from .database import PostgresConnection
from .logger import level_from_env, setup_logging

__all__ = ["PostgresConnection", "level_from_env", "setup_logging"]
