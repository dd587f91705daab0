"""Ports for the users context.

Ports define the interfaces (protocols) the application layer depends on,
and the exceptions implementations may raise through them.
"""

from users.ports.exceptions import DuplicateEmailError
from users.ports.repositories import IUserRepository

__all__ = [
    "DuplicateEmailError",
    "IUserRepository",
]
