from sqlalchemy import BigInteger, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from user_registry.database.base import Base

MIN_AGE = 0
MAX_AGE = 150


class User(Base):
    """
    SQLAlchemy model for User.

    `id` and `created_at` are assigned by the database on insert and never
    change afterwards; only name, email and age are updated.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(f"age >= {MIN_AGE} AND age <= {MAX_AGE}", name="age_range"),
        # Without AUTOINCREMENT, SQLite may hand out the id of a deleted last row again.
        {"sqlite_autoincrement": True},
    )

    # BigInteger on PostgreSQL, plain INTEGER on SQLite (required for rowid aliasing)
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False
    )

    # Email address (unique across all users, constraint uq_users_email)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False
    )

    age: Mapped[int] = mapped_column(
        Integer,
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, name={self.name!r}, email={self.email!r}, age={self.age!r})>"
