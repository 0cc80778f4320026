"""
Core module - Configuration, database, security, and infrastructure clients.
"""

from erp.core.config import get_settings, settings
from erp.core.database import Base, Database, get_db
from erp.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "Database",
    "get_db",
    # Security
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
]
