"""Cestas Users Module - manual login and profile avatar."""

from cestas.modules.users.repository import UsersRepository
from cestas.modules.users.service import UsersService

__all__ = ["UsersRepository", "UsersService"]
