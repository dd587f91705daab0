"""SQLAlchemy ORM model for the users table."""

from sqlalchemy import Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """ORM model for the users table.

    id is an auto-incrementing integer backed by a sequence, so deleted
    ids are never handed out again. Email uniqueness is case-insensitive,
    enforced by the ix_users_email unique index on lower(email).
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, email={self.email})>"


Index("ix_users_email", func.lower(UserModel.email), unique=True)
