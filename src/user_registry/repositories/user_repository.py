"""
User repository: create and update on top of the generic BaseRepository.

Both writes check email uniqueness inside their own transaction before
touching the row. The unique constraint on users.email stays in place as the
source of truth: if another writer slips in between the check and the write,
the resulting IntegrityError is reported as the same DuplicateEmailError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from user_registry.database.gateway import TransactionGateway, TransactionResult
from user_registry.exceptions.base import DuplicateEmailError, ErrorKind
from user_registry.exceptions.mapper import is_unique_violation
from user_registry.models.user import User
from user_registry.validators.user_validators import check_email_exists
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for User entity operations.

    Inherits get_by_id, get_all and delete from BaseRepository.
    """

    def __init__(self, gateway: TransactionGateway):
        super().__init__(User, gateway)

    def _unwrap_write(self, result: TransactionResult[bool], email: str) -> bool:
        if result.error_kind is ErrorKind.CONSTRAINT_VIOLATION and is_unique_violation(result.error, "email"):
            raise DuplicateEmailError(email) from result.error
        return bool(self._unwrap(result, False))

    # =================================================================================================================
    # Create Operations
    # =================================================================================================================

    async def create_user(self, name: str, email: str, age: int) -> bool:
        """
        Insert a new user; `id` and `created_at` are assigned by the database.

        Returns:
            True if the user was committed, False on an unclassified failure.

        Raises:
            DuplicateEmailError: if the email is already taken.
            StoreError: if the database could not be reached or failed.
        """
        async def _work(session: AsyncSession) -> bool:
            await check_email_exists(session, email)
            user = User(name=name, email=email, age=age)
            session.add(user)
            await session.flush()
            # load server-generated id and created_at
            await session.refresh(user)
            logger.info(
                "repo.user.create.success",
                extra={"id": user.id, "user_name": name, "email": email, "age": age},
            )
            return True

        result = await self.gateway.execute_in_transaction(
            _work, operation="user.create", context={"email": email}
        )
        return self._unwrap_write(result, email)

    # =================================================================================================================
    # Update Operations
    # =================================================================================================================

    async def update_user(self, user_id: int, name: str, email: str, age: int) -> bool:
        """
        Overwrite name, email and age of an existing user.

        The uniqueness check only runs when the email actually changes, so
        updating other fields of a user never conflicts with its own email.

        Returns:
            True if updated, False if no user has this ID.

        Raises:
            DuplicateEmailError: if the new email belongs to another user.
            StoreError: if the database could not be reached or failed.
        """
        async def _work(session: AsyncSession) -> bool:
            user = await self._find(session, user_id)
            if user is None:
                return False

            if user.email != email:
                await check_email_exists(session, email)

            user.name = name
            user.email = email
            user.age = age
            await session.flush()
            logger.info(
                "repo.user.update.success",
                extra={"id": user_id, "user_name": name, "email": email, "age": age},
            )
            return True

        result = await self.gateway.execute_in_transaction(
            _work, operation="user.update", context={"id": user_id, "email": email}
        )
        return self._unwrap_write(result, email)
