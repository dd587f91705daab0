"""Users domain layer.

Pure domain objects: the User aggregate and its value objects. Nothing in
here knows about HTTP or SQL.
"""

from users.domain.aggregates import User
from users.domain.value_objects import PageCursor, UserId, UserPage

__all__ = [
    "PageCursor",
    "User",
    "UserId",
    "UserPage",
]
