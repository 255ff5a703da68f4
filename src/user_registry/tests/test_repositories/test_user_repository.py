import datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from user_registry.database.gateway import TransactionGateway
from user_registry.exceptions.base import DuplicateEmailError, ErrorKind, NotFoundError, StoreError
from user_registry.models.user import User
from user_registry.repositories import user_repository as user_repository_module
from user_registry.repositories.user_repository import UserRepository


class TestUserRepositoryCreate:
    """
    Tests covering creation of users through UserRepository.create_user().

    Fixtures used:
      - user_repository: UserRepository bound to a gateway over a fresh SQLite file.
      - fetch_user_by_email: finds the stored row, since create_user only returns a bool.
    """

    async def test_create_then_read_round_trip(self, user_repository: UserRepository, fetch_user_by_email):
        """
        Behavior:
          - create_user returns True.
          - Reading the row back yields exactly the input values, a store-assigned id
            and a creation timestamp.
        """
        assert await user_repository.create_user("John Doe", "john@example.com", 30) is True

        stored = await fetch_user_by_email("john@example.com")
        user = await user_repository.get_by_id(stored.id)

        assert isinstance(user, User)
        assert (user.name, user.email, user.age) == ("John Doe", "john@example.com", 30)
        assert user.id >= 1
        assert isinstance(user.created_at, datetime.datetime)

    async def test_duplicate_email_raises_and_keeps_first(self, user_repository: UserRepository, created_user: User):
        with pytest.raises(DuplicateEmailError) as exc_info:
            await user_repository.create_user("Jane", created_user.email, 25)

        assert exc_info.value.email == created_user.email

        users = await user_repository.get_all()
        assert len(users) == 1
        assert users[0].name == created_user.name
        assert users[0].age == created_user.age

    async def test_unique_constraint_backs_up_the_precheck(
        self, user_repository: UserRepository, created_user: User, monkeypatch
    ):
        """
        If the pre-check misses a concurrent insert, the unique constraint still
        rejects the row and the caller sees the same DuplicateEmailError.
        """
        async def _no_check(session, email):
            return None

        monkeypatch.setattr(user_repository_module, "check_email_exists", _no_check)

        with pytest.raises(DuplicateEmailError):
            await user_repository.create_user("Jane", created_user.email, 25)

        assert len(await user_repository.get_all()) == 1

    async def test_ids_are_not_reused(self, user_repository: UserRepository, create_user):
        first = await create_user(email="first@example.com")
        assert await user_repository.delete(first.id) is True

        second = await create_user(email="second@example.com")
        assert second.id > first.id


class TestUserRepositoryRead:
    async def test_get_by_id_missing_returns_none(self, user_repository: UserRepository):
        assert await user_repository.get_by_id(999) is None

    async def test_get_all_empty(self, user_repository: UserRepository):
        assert await user_repository.get_all() == []

    async def test_get_all_ordered_by_id(self, user_repository: UserRepository, multiple_users: list[User]):
        users = await user_repository.get_all()
        assert [u.id for u in users] == sorted(u.id for u in multiple_users)
        assert [u.name for u in users] == ["Alice", "Bob", "Carol"]


class TestUserRepositoryUpdate:
    async def test_update_round_trip_keeps_created_at(self, user_repository: UserRepository, created_user: User):
        updated = await user_repository.update_user(created_user.id, "Johnny Doe", "johnny@example.com", 31)
        assert updated is True

        user = await user_repository.get_by_id(created_user.id)
        assert (user.name, user.email, user.age) == ("Johnny Doe", "johnny@example.com", 31)
        assert user.created_at == created_user.created_at

    async def test_update_missing_returns_false(self, user_repository: UserRepository):
        assert await user_repository.update_user(999, "Nobody", "nobody@example.com", 20) is False

    async def test_same_email_skips_uniqueness_check(
        self, user_repository: UserRepository, created_user: User, monkeypatch
    ):
        calls = []

        async def _tracking_check(session, email):
            calls.append(email)

        monkeypatch.setattr(user_repository_module, "check_email_exists", _tracking_check)

        assert await user_repository.update_user(created_user.id, created_user.name, created_user.email, 55) is True
        assert calls == []
        assert (await user_repository.get_by_id(created_user.id)).age == 55

    async def test_changed_email_is_checked(
        self, user_repository: UserRepository, multiple_users: list[User]
    ):
        alice, bob, _ = multiple_users

        with pytest.raises(DuplicateEmailError):
            await user_repository.update_user(alice.id, alice.name, bob.email, alice.age)

        unchanged = await user_repository.get_by_id(alice.id)
        assert unchanged.email == alice.email

    async def test_check_constraint_failure_returns_false(self, user_repository: UserRepository, created_user: User):
        # bypasses service validation; the CHECK constraint rejects the write
        assert await user_repository.update_user(created_user.id, "John", created_user.email, 200) is False
        assert (await user_repository.get_by_id(created_user.id)).age == created_user.age


class TestUserRepositoryDelete:
    async def test_delete_existing(self, user_repository: UserRepository, created_user: User):
        assert await user_repository.delete(created_user.id) is True
        assert await user_repository.get_by_id(created_user.id) is None

    async def test_delete_missing_raises_not_found(self, user_repository: UserRepository):
        """
        Unlike update_user, a missing row is signalled with NotFoundError, not False.
        """
        with pytest.raises(NotFoundError) as exc_info:
            await user_repository.delete(999)

        assert exc_info.value.message == "User with ID 999 does not exist"
        assert exc_info.value.fields == ["id"]


class TestStoreFailures:
    async def test_store_error_is_raised_with_cause(self, gateway: TransactionGateway, monkeypatch):
        repository = UserRepository(gateway)
        original = OperationalError("SELECT", {}, Exception("database is locked"))

        async def _failing_find(session: AsyncSession, entity_id: int):
            raise original

        monkeypatch.setattr(repository, "_find", _failing_find)

        with pytest.raises(StoreError) as exc_info:
            await repository.get_by_id(1)

        assert exc_info.value.kind is ErrorKind.TRANSIENT_STORE_ERROR
        assert exc_info.value.__cause__ is original
        assert "database is locked" not in exc_info.value.message

    async def test_unexpected_error_returns_default(self, gateway: TransactionGateway, monkeypatch):
        repository = UserRepository(gateway)

        async def _buggy_find(session: AsyncSession, entity_id: int):
            raise AttributeError("bug")

        monkeypatch.setattr(repository, "_find", _buggy_find)

        assert await repository.get_by_id(1) is None
        assert await repository.update_user(1, "John", "john@example.com", 30) is False
