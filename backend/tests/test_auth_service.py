"""
Тесты регистрации и проверки учётных данных
"""
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from bbs.core.exceptions import (
    AuthenticationError,
    ConflictError,
    HashingFailedError,
    StorageUnavailableError,
    ValidationError,
)
from bbs.core.models import Account
from bbs.core.security import verify_password
from bbs.services.auth_service import AuthService


def count_rows(db, include_deleted=True):
    query = db.query(Account)
    if not include_deleted:
        query = query.filter(Account.deleted_at.is_(None))
    return query.count()


class TestRegister:

    def test_register_persists_hashed_account(self, service, db):
        account = service.register("bob", "secret1", "bob@example.com")

        stored = db.query(Account).filter(Account.user_id == account.user_id).one()
        assert stored.username == "bob"
        assert stored.email == "bob@example.com"
        assert stored.password != "secret1"
        assert len(stored.salt) == 32
        assert stored.created_at is not None
        assert stored.deleted_at is None
        assert stored.avatar is None and stored.homepage is None
        assert verify_password("secret1", stored.salt, stored.password)

    def test_sequential_registrations_get_increasing_ids(self, service):
        first = service.register("alice", "secret1", "alice@example.com")
        second = service.register("carol", "secret1", "carol@example.com")

        assert first.user_id != second.user_id
        assert second.user_id > first.user_id

    def test_each_account_gets_its_own_salt(self, service):
        first = service.register("alice", "secret1", "alice@example.com")
        second = service.register("carol", "secret1", "carol@example.com")

        assert first.salt != second.salt
        assert first.password != second.password

    def test_duplicate_username_conflicts_without_new_row(self, service, db):
        service.register("bob", "secret1", "bob@example.com")

        with pytest.raises(ConflictError) as exc_info:
            service.register("bob", "secret2", "other@example.com")

        assert exc_info.value.field == "username"
        assert count_rows(db) == 1

    def test_duplicate_email_conflicts_on_email_field(self, service, db):
        service.register("bob", "secret1", "bob@example.com")

        with pytest.raises(ConflictError) as exc_info:
            service.register("robert", "secret1", "bob@example.com")

        assert exc_info.value.field == "email"
        assert count_rows(db) == 1

    def test_soft_deleted_account_does_not_block_reuse(self, service, store, db):
        old = service.register("bob", "secret1", "bob@example.com")
        store.soft_delete(old)

        new = service.register("bob", "secret2", "bob@example.com")

        assert new.user_id != old.user_id
        assert count_rows(db) == 2
        assert count_rows(db, include_deleted=False) == 1

    def test_race_on_insert_maps_to_conflict(self, service, store, db, monkeypatch):
        service.register("bob", "secret1", "bob@example.com")
        # Проверка "не увидела" запись, сработает уникальный индекс
        monkeypatch.setattr(store, "find_by_username", lambda name: None)

        with pytest.raises(ConflictError) as exc_info:
            service.register("bob", "secret2", "new@example.com")

        assert exc_info.value.field == "username"
        assert count_rows(db) == 1

    def test_race_on_email_maps_to_email_conflict(self, service, store, db, monkeypatch):
        service.register("bob", "secret1", "bob@example.com")
        monkeypatch.setattr(store, "find_by_email", lambda email: None)

        with pytest.raises(ConflictError) as exc_info:
            service.register("robert", "secret2", "bob@example.com")

        assert exc_info.value.field == "email"
        assert count_rows(db) == 1

    def test_hashing_failure_writes_nothing(self, service, db):
        with pytest.raises(HashingFailedError):
            service.register("bob", "x" * 45, "bob@example.com")

        assert count_rows(db) == 0


class TestValidation:

    def setup_method(self):
        self.store = MagicMock()
        self.issuer = MagicMock()
        self.service = AuthService(self.store, self.issuer)

    @pytest.mark.parametrize("name,password,email", [
        ("bob", "12345", "bob@example.com"),
        ("bo", "secret1", "bob@example.com"),
        ("b" * 51, "secret1", "bob@example.com"),
        ("bob", "secret1", "not-an-email"),
        ("bob", "", "bob@example.com"),
    ])
    def test_invalid_input_rejected_before_storage(self, name, password, email):
        with pytest.raises(ValidationError):
            self.service.register(name, password, email)

        assert self.store.method_calls == []
        assert self.issuer.method_calls == []

    def test_message_does_not_leak_password(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.register("bob", "abc12", "bob@example.com")

        assert "abc12" not in exc_info.value.message
        assert "password" in exc_info.value.message


class TestAuthenticate:

    def test_valid_credentials(self, service):
        account = service.register("bob", "secret1", "bob@example.com")
        assert service.authenticate("bob", "secret1").user_id == account.user_id

    def test_wrong_password(self, service):
        service.register("bob", "secret1", "bob@example.com")
        with pytest.raises(AuthenticationError):
            service.authenticate("bob", "secret2")

    def test_unknown_user(self, service):
        with pytest.raises(AuthenticationError):
            service.authenticate("ghost", "secret1")

    def test_soft_deleted_user_cannot_authenticate(self, service, store):
        account = service.register("bob", "secret1", "bob@example.com")
        store.soft_delete(account)

        with pytest.raises(AuthenticationError):
            service.authenticate("bob", "secret1")


class TestStorageFailures:

    def test_registration_does_not_reread_committed_row(self, service, db, monkeypatch):
        def broken_refresh(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "refresh", broken_refresh)

        account = service.register("bob", "secret1", "bob@example.com")

        assert account.username == "bob"
        assert account.email == "bob@example.com"
        assert account.created_at is not None
        assert count_rows(db) == 1

    def test_connection_lost_on_commit_is_storage_error(self, service, db, monkeypatch):
        def broken_commit():
            raise OperationalError("INSERT", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "commit", broken_commit)

        with pytest.raises(StorageUnavailableError):
            service.register("bob", "secret1", "bob@example.com")

        monkeypatch.undo()
        assert count_rows(db) == 0
