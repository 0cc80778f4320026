"""
Shared module - Base model mixin and service error type used by all modules.
"""

from erp.modules.shared.errors import ServiceError
from erp.modules.shared.models import BaseModel

__all__ = ["BaseModel", "ServiceError"]
