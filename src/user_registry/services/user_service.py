"""
User service: turns raw console input into validated repository calls and
repository outcomes into messages for the person at the keyboard.

Every public method returns a string and never raises for expected
failures. Store errors are logged with their traceback here and replaced by
a generic message, so database diagnostics never reach the screen.
"""

from __future__ import annotations

import logging

from user_registry.exceptions.base import (
    DuplicateEmailError,
    NotFoundError,
    RepositoryError,
)
from user_registry.models.user import User
from user_registry.repositories.user_repository import UserRepository
from user_registry.validators.user_validators import (
    is_valid_age,
    is_valid_email,
    is_valid_id,
    is_valid_name,
    parse_int,
)

logger = logging.getLogger(__name__)

# Ages are stored as 32-bit integers, ids as 64-bit.
AGE_BITS = 32
ID_BITS = 64

MSG_CREATED = "User created successfully."
MSG_CREATE_FAILED = "Failed to create user."
MSG_UPDATED = "User updated successfully."
MSG_UPDATE_FAILED = "Failed to update user. User not found or email already exists."
MSG_DELETED = "User deleted successfully."
MSG_DELETE_FAILED = "Failed to delete user. User not found."
MSG_NOT_FOUND = "User not found."
MSG_NO_USERS = "No users found."
MSG_INVALID_DATA = "Invalid data."
MSG_INVALID_ID = "Invalid identifier."
MSG_AGE_NOT_INTEGER = "Enter a valid integer for age."
MSG_ID_NOT_INTEGER = "Enter a valid integer for the identifier."
MSG_ID_OR_AGE_NOT_INTEGER = "Enter a valid integer for the identifier or age."
MSG_DATABASE_ERROR = "A database error occurred. Please try again later."

TABLE_ROW = "{:<5} {:<20} {:<30} {:<5} {:<20}"


def format_timestamp(value) -> str:
    if value is None:
        return "-"
    return value.isoformat(sep=" ", timespec="seconds")


def format_user(user: User) -> str:
    """Labeled multi-line view of a single user."""
    return (
        f"User with ID {user.id}:\n"
        f"Created at: {format_timestamp(user.created_at)}\n"
        f"Name: {user.name}, email: {user.email}, age: {user.age}"
    )


def format_user_table(users: list[User]) -> str:
    lines = ["Users:", TABLE_ROW.format("ID", "Name", "Email", "Age", "Created")]
    for user in users:
        lines.append(
            TABLE_ROW.format(user.id, user.name, user.email, user.age, format_timestamp(user.created_at))
        )
    return "\n".join(lines)


class UserService:
    """Application service for the console; one method per menu action."""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    def _database_error(self, action: str, exc: RepositoryError) -> str:
        logger.error("service.database_error", extra={"action": action}, exc_info=exc)
        return MSG_DATABASE_ERROR

    async def create(self, name: str, email: str, age: str) -> str:
        try:
            parsed_age = parse_int(age, bits=AGE_BITS)
        except ValueError:
            return MSG_AGE_NOT_INTEGER

        if not (is_valid_name(name) and is_valid_email(email) and is_valid_age(parsed_age)):
            return MSG_INVALID_DATA

        try:
            created = await self.repository.create_user(name, email, parsed_age)
        except DuplicateEmailError as exc:
            return f"Failed to create user: {exc.message}"
        except RepositoryError as exc:
            return self._database_error("create", exc)

        return MSG_CREATED if created else MSG_CREATE_FAILED

    async def read(self, user_id: str) -> str:
        try:
            parsed_id = parse_int(user_id, bits=ID_BITS)
        except ValueError:
            return MSG_ID_NOT_INTEGER

        if not is_valid_id(parsed_id):
            return MSG_INVALID_ID

        try:
            user = await self.repository.get_by_id(parsed_id)
        except RepositoryError as exc:
            return self._database_error("read", exc)

        if user is None:
            return MSG_NOT_FOUND
        return format_user(user)

    async def read_all(self) -> str:
        try:
            users = await self.repository.get_all()
        except RepositoryError as exc:
            return self._database_error("read_all", exc)

        if not users:
            return MSG_NO_USERS
        return format_user_table(users)

    async def update(self, user_id: str, name: str, email: str, age: str) -> str:
        try:
            parsed_id = parse_int(user_id, bits=ID_BITS)
            parsed_age = parse_int(age, bits=AGE_BITS)
        except ValueError:
            return MSG_ID_OR_AGE_NOT_INTEGER

        if not (
            is_valid_id(parsed_id)
            and is_valid_name(name)
            and is_valid_email(email)
            and is_valid_age(parsed_age)
        ):
            return MSG_INVALID_DATA

        try:
            updated = await self.repository.update_user(parsed_id, name, email, parsed_age)
        except DuplicateEmailError as exc:
            return f"Failed to update user: {exc.message}"
        except RepositoryError as exc:
            return self._database_error("update", exc)

        return MSG_UPDATED if updated else MSG_UPDATE_FAILED

    async def delete(self, user_id: str) -> str:
        try:
            parsed_id = parse_int(user_id, bits=ID_BITS)
        except ValueError:
            return MSG_ID_NOT_INTEGER

        if not is_valid_id(parsed_id):
            return MSG_INVALID_ID

        try:
            deleted = await self.repository.delete(parsed_id)
        except NotFoundError as exc:
            return f"Failed to delete user: {exc.message}"
        except RepositoryError as exc:
            return self._database_error("delete", exc)

        return MSG_DELETED if deleted else MSG_DELETE_FAILED
