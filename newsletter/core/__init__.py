"""
Newsletter Core
===============

Configuration, storage binding and logging shared by the API modules.
"""

from .config import Config
from .database import Database, db
from .logging_service import LoggingService, logger

__all__ = ['Config', 'Database', 'db', 'LoggingService', 'logger']
