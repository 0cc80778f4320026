"""
Users module - User management and authentication.
"""

from erp.modules.users.models import User, UserRole
from erp.modules.users.repository import UserRepository

__all__ = ["User", "UserRole", "UserRepository"]
