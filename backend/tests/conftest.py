"""
Общие фикстуры: временная БД и логи, приложение импортируется уже после настройки окружения.
"""
import os
import tempfile
from pathlib import Path

import pytest

_TMP_DIR = Path(tempfile.mkdtemp(prefix="bbs-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["DATA_DIR"] = str(_TMP_DIR / "data")
os.environ["LOGS_DIR"] = str(_TMP_DIR / "logs")
os.environ["NODE_ID"] = "0"

from fastapi.testclient import TestClient  # noqa: E402

from bbs.core.database import Base, SessionLocal, engine  # noqa: E402
from bbs.core.snowflake import IdentityIssuer  # noqa: E402
from bbs.main import app  # noqa: E402
from bbs.services.account_store import AccountStore  # noqa: E402
from bbs.services.auth_service import AuthService  # noqa: E402


@pytest.fixture(autouse=True)
def clean_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def issuer():
    return IdentityIssuer(node_id=1)


@pytest.fixture
def store(db):
    return AccountStore(db)


@pytest.fixture
def service(store, issuer):
    return AuthService(store, issuer)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
