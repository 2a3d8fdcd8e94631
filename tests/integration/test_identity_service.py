"""Identity service tests against the SQLAlchemy repository on SQLite."""

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select, text

from kcnotes.kernel.identity import IdentityService, PasswordHasher
from kcnotes.kernel.identity.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidCurrentCredentialError,
    MissingFieldsError,
    StorageError,
    UniqueViolationError,
    UserNotFoundError,
)
from kcnotes.kernel.models import Note, User


class TestSignup:

    @pytest.mark.asyncio
    async def test_signup_returns_token_for_new_user(self, identity_service, user_repository, jwt_manager):
        token = await identity_service.signup("alice", "secret1")

        user = await user_repository.get_by_username("alice")
        assert user is not None
        assert jwt_manager.verify_token(token).user_id == user.id

    @pytest.mark.asyncio
    async def test_signup_stores_hash_not_plaintext(self, identity_service, user_repository, password_hasher):
        await identity_service.signup("alice", "secret1")

        user = await user_repository.get_by_username("alice")
        assert user.password_hash != "secret1"
        assert password_hasher.verify("secret1", user.password_hash)
        assert user.created_at is not None
        assert user.updated_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_username(self, identity_service):
        await identity_service.signup("alice", "secret1")

        with pytest.raises(DuplicateUserError) as exc_info:
            await identity_service.signup("alice", "other")

        assert exc_info.value.message == "User with username 'alice' already exists."

    @pytest.mark.asyncio
    async def test_concurrent_signups_only_one_succeeds(self, identity_service, session_maker):
        results = await asyncio.gather(
            identity_service.signup("racer", "secret1"),
            identity_service.signup("racer", "secret2"),
            return_exceptions=True,
        )

        tokens = [r for r in results if isinstance(r, str)]
        errors = [r for r in results if isinstance(r, Exception)]
        assert len(tokens) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], DuplicateUserError)

        async with session_maker() as session:
            count = await session.scalar(
                select(func.count()).select_from(User).where(User.username == "racer")
            )
        assert count == 1

    @pytest.mark.asyncio
    async def test_unique_violation_is_remapped(self, password_hasher, jwt_manager):
        """A signup that loses the race to the unique index still reports a duplicate."""
        users = AsyncMock()
        users.get_by_username.return_value = None
        users.create.side_effect = UniqueViolationError()
        service = IdentityService(users=users, password_hasher=password_hasher, jwt_manager=jwt_manager)

        with pytest.raises(DuplicateUserError):
            await service.signup("alice", "secret1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username, password", [("", "secret1"), ("alice", "")])
    async def test_signup_requires_both_fields(self, identity_service, username, password):
        with pytest.raises(MissingFieldsError):
            await identity_service.signup(username, password)


class TestSignin:

    @pytest.mark.asyncio
    async def test_signin_returns_token(self, identity_service, test_user, jwt_manager):
        token = await identity_service.signin(test_user.username, "secret1")

        assert jwt_manager.verify_token(token).user_id == test_user.id

    @pytest.mark.asyncio
    async def test_unknown_user_and_wrong_password_are_indistinguishable(self, identity_service, test_user):
        with pytest.raises(InvalidCredentialsError) as unknown:
            await identity_service.signin("nobody", "secret1")
        with pytest.raises(InvalidCredentialsError) as wrong:
            await identity_service.signin(test_user.username, "wrong")

        assert type(unknown.value) is type(wrong.value)
        assert unknown.value.to_dict() == wrong.value.to_dict()
        assert unknown.value.message == "Invalid credentials."

    @pytest.mark.asyncio
    async def test_signin_upgrades_outdated_hash(self, identity_service, user_repository, password_hasher):
        old_hash = PasswordHasher(rounds=5).hash("secret1")
        user = await user_repository.create("legacy", old_hash)

        await identity_service.signin("legacy", "secret1")

        refreshed = await user_repository.get_by_id(user.id)
        assert refreshed.password_hash != old_hash
        assert not password_hasher.needs_rehash(refreshed.password_hash)
        assert password_hasher.verify("secret1", refreshed.password_hash)

    @pytest.mark.asyncio
    async def test_broken_store_surfaces_storage_error(self, identity_service, db_engine):
        async with db_engine.begin() as conn:
            await conn.execute(text("DROP TABLE notes"))
            await conn.execute(text("DROP TABLE users"))

        with pytest.raises(StorageError):
            await identity_service.signin("alice", "secret1")

    @pytest.mark.asyncio
    async def test_storage_failure_propagates(self, password_hasher, jwt_manager):
        users = AsyncMock()
        users.get_by_username.side_effect = StorageError()
        service = IdentityService(users=users, password_hasher=password_hasher, jwt_manager=jwt_manager)

        with pytest.raises(StorageError):
            await service.signin("alice", "secret1")


class TestUpdatePassword:

    @pytest.mark.asyncio
    async def test_update_password(self, identity_service, test_user, user_repository, password_hasher):
        message = await identity_service.update_password(test_user.id, "secret1", "secret2")

        assert message == "Password updated successfully."
        stored = await user_repository.get_by_id(test_user.id)
        assert password_hasher.verify("secret2", stored.password_hash)
        assert not password_hasher.verify("secret1", stored.password_hash)

    @pytest.mark.asyncio
    async def test_update_password_touches_updated_at(self, identity_service, test_user, user_repository):
        before = (await user_repository.get_by_id(test_user.id)).updated_at
        # CURRENT_TIMESTAMP on SQLite has one-second resolution
        await asyncio.sleep(1.1)

        await identity_service.update_password(test_user.id, "secret1", "secret2")

        after = (await user_repository.get_by_id(test_user.id)).updated_at
        assert after > before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("current, new", [("", "secret2"), ("secret1", ""), ("", "")])
    async def test_missing_fields(self, identity_service, test_user, current, new):
        with pytest.raises(MissingFieldsError) as exc_info:
            await identity_service.update_password(test_user.id, current, new)

        assert exc_info.value.message == "Current password and new password are required."

    @pytest.mark.asyncio
    async def test_unknown_user(self, identity_service):
        with pytest.raises(UserNotFoundError):
            await identity_service.update_password(uuid.uuid4(), "secret1", "secret2")

    @pytest.mark.asyncio
    async def test_wrong_current_password_leaves_credential_unchanged(
        self, identity_service, test_user, user_repository, password_hasher
    ):
        with pytest.raises(InvalidCurrentCredentialError):
            await identity_service.update_password(test_user.id, "wrong", "secret2")

        stored = await user_repository.get_by_id(test_user.id)
        assert stored.password_hash == test_user.password_hash
        assert password_hasher.verify("secret1", stored.password_hash)


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, identity_service):
        with pytest.raises(UserNotFoundError):
            await identity_service.delete_user(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_removes_user_and_notes(self, identity_service, test_user, user_repository, session_maker):
        async with session_maker() as session:
            session.add(Note(owner_id=test_user.id, title="groceries", content="milk"))
            await session.commit()

        message = await identity_service.delete_user(test_user.id)

        assert message == "User and associated notes deleted successfully."
        assert await user_repository.get_by_id(test_user.id) is None
        async with session_maker() as session:
            remaining = await session.scalar(
                select(func.count()).select_from(Note).where(Note.owner_id == test_user.id)
            )
        assert remaining == 0


@pytest.mark.asyncio
async def test_lifecycle_walkthrough(identity_service, user_repository, jwt_manager):
    """signup, signin, rotate, and delete alice."""
    t1 = await identity_service.signup("alice", "secret1")
    t2 = await identity_service.signin("alice", "secret1")
    alice = await user_repository.get_by_username("alice")
    assert jwt_manager.verify_token(t1).user_id == alice.id
    assert jwt_manager.verify_token(t2).user_id == alice.id

    with pytest.raises(InvalidCredentialsError):
        await identity_service.signin("alice", "wrong")

    await identity_service.update_password(alice.id, "secret1", "secret2")

    with pytest.raises(InvalidCredentialsError):
        await identity_service.signin("alice", "secret1")
    assert await identity_service.signin("alice", "secret2")

    await identity_service.delete_user(alice.id)
    assert await user_repository.get_by_id(alice.id) is None
