"""Cestas Auth Module.

Manual username/password login issues a short-lived JWT access token;
every protected route authenticates with that token.
"""

from cestas.auth.jwt_access import create_access_token, decode_access_token, get_current_user
from cestas.auth.schemas import LoginRequest, LoginResponse, User

__all__ = [
    "get_current_user",
    "create_access_token",
    "decode_access_token",
    "LoginRequest",
    "LoginResponse",
    "User",
]
