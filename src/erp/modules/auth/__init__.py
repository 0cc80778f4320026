"""Authentication module."""

from erp.modules.auth.router import router
from erp.modules.auth.schemas import LoginRequest, LoginResponse, RegisterRequest, TokenResponse

__all__ = ["router", "LoginRequest", "LoginResponse", "RegisterRequest", "TokenResponse"]
