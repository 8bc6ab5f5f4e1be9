"""FastAPI dependency injection: repositories."""
from app.repositories import MySQLUserRepository
from app.repositories.protocols import UserRepository


def get_user_repository() -> UserRepository:
    return MySQLUserRepository()
