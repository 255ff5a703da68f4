"""
Base repository class providing common database operations.

Every public method is exactly one call to the TransactionGateway: the method
builds a unit of work (an inner async function receiving the session), hands
it to the gateway, and converts the TransactionResult back into a plain
return value or an app-level exception. Repositories never commit or roll
back themselves.

Model-specific repositories inherit from this class and add their own
units of work (see UserRepository).
"""
from __future__ import annotations

import logging
from typing import Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from user_registry.database.base import Base
from user_registry.database.gateway import TransactionGateway, TransactionResult
from user_registry.exceptions.base import ErrorKind, NotFoundError, StoreError

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)
R = TypeVar("R")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
            It must have an integer primary key named `id`.
    """

    def __init__(self, model: Type[ModelType], gateway: TransactionGateway):
        """
        Args:
            model: The SQLAlchemy model class (not an instance), used to build queries.
            gateway: The transaction gateway every operation runs through.
        """
        self.model = model
        self.gateway = gateway

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # =================================================================================================================
    # Result handling
    # =================================================================================================================

    def _unwrap(self, result: TransactionResult[R], default: R) -> R:
        """
        Turn a TransactionResult into a return value.

        - present: the unit of work's value (None included)
        - BUSINESS_RULE: the original error is re-raised for the caller to render
        - TRANSIENT / FATAL store errors: StoreError with a generic message
        - CONSTRAINT_VIOLATION / UNEXPECTED: `default` (already logged by the gateway)
        """
        if result.present:
            return result.value

        kind = result.error_kind
        if kind is ErrorKind.BUSINESS_RULE:
            raise result.error

        if kind in (ErrorKind.TRANSIENT_STORE_ERROR, ErrorKind.FATAL_STORE_ERROR):
            raise StoreError(f"Failed to operate on {self.model_name}", kind=kind) from result.error

        return default

    async def _find(self, session: AsyncSession, entity_id: int) -> ModelType | None:
        entity = await session.get(self.model, entity_id)
        if entity is None:
            logger.info(
                "repo.lookup.not_found",
                extra={"model": self.model_name, "id": entity_id},
            )
        return entity

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """
        Get an entity by its ID.

        Returns:
            The entity if found, otherwise None. "Not found" is a normal outcome.

        Raises:
            StoreError: if the database could not be reached or failed.
        """
        async def _work(session: AsyncSession) -> ModelType | None:
            entity = await self._find(session, entity_id)
            if entity is not None:
                logger.info("repo.get_by_id.success", extra={"model": self.model_name, "id": entity_id})
            return entity

        result = await self.gateway.execute_in_transaction(
            _work,
            operation=f"{self.model_name.lower()}.get_by_id",
            context={"id": entity_id},
        )
        return self._unwrap(result, None)

    async def get_all(self) -> list[ModelType]:
        """
        Return every entity ordered by ID; an empty list when there are none.
        """
        async def _work(session: AsyncSession) -> list[ModelType]:
            rows = await session.execute(select(self.model).order_by(self.model.id))
            entities = list(rows.scalars().all())
            logger.info("repo.get_all.success", extra={"model": self.model_name, "count": len(entities)})
            return entities

        result = await self.gateway.execute_in_transaction(
            _work, operation=f"{self.model_name.lower()}.get_all"
        )
        return self._unwrap(result, [])

    # =================================================================================================================
    # Delete Operations
    # =================================================================================================================

    async def delete(self, entity_id: int) -> bool:
        """
        Delete an entity by ID.

        Returns:
            True once the entity is deleted.

        Raises:
            NotFoundError: if no entity has this ID. Unlike update, a missing
                row is reported as an error rather than False.
            StoreError: if the database could not be reached or failed.
        """
        async def _work(session: AsyncSession) -> bool:
            entity = await self._find(session, entity_id)
            if entity is None:
                raise NotFoundError(f"{self.model_name} with ID {entity_id} does not exist", fields=["id"])
            await session.delete(entity)
            await session.flush()
            logger.info("repo.delete.success", extra={"model": self.model_name, "id": entity_id})
            return True

        result = await self.gateway.execute_in_transaction(
            _work,
            operation=f"{self.model_name.lower()}.delete",
            context={"id": entity_id},
        )
        return bool(self._unwrap(result, False))
