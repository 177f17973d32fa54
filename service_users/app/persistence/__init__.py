"""
Persistence package for Users Service.
"""

from .base import UserStore
from .postgres import PostgreSQLUserStore

__all__ = ["UserStore", "PostgreSQLUserStore"]
