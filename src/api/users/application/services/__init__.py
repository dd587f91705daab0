"""Application services for the users context."""

from users.application.services.user_service import UserService

__all__ = ["UserService"]
