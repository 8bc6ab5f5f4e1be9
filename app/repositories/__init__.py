"""Repository layer: data access abstractions and implementations."""

from app.repositories.protocols import UserRepository
from app.repositories.user_repository import MySQLUserRepository

__all__ = [
    "UserRepository",
    "MySQLUserRepository",
]
