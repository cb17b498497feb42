# tests/conftest.py
import os
import sys
import tempfile
from pathlib import Path
from datetime import datetime
from typing import List

import pytest
from fastapi.testclient import TestClient

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# point settings at a scratch dir before anything from storefront is imported;
# each test then gets its own directory through the temp_data_dir fixture
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="test_data_"))
os.environ.setdefault("STORAGE_LOCK_TIMEOUT", "5")

from storefront.database import db  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.api.deps import get_notifier  # noqa: E402
from storefront.core.security import create_access_token, hash_password  # noqa: E402
from storefront.services.notifier import Notifier, OutgoingEmail  # noqa: E402


class RecordingTransport:
    """Email transport that keeps every message instead of talking to a server."""

    def __init__(self):
        self.sent: List[OutgoingEmail] = []
        self.fail = False

    def send(self, email: OutgoingEmail) -> None:
        if self.fail:
            raise ConnectionRefusedError("smtp down")
        self.sent.append(email)


@pytest.fixture(autouse=True)
def temp_data_dir(tmp_path, monkeypatch):
    """
    Every test runs against an empty data directory of its own.
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(db, "data_dir", data_dir)
    yield data_dir


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def notifier(transport):
    return Notifier(transport, admin_email="owner@example.com", store_name="Shoppy Store", currency="₹")


@pytest.fixture
def client(notifier):
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
def auth_header():
    """
    Helper that returns a callable to build Authorization header from a token.
    Usage: hdr = auth_header(token)
    """
    def _h(tok: str):
        return {"Authorization": f"Bearer {tok}"}
    return _h


def create_user_in_db(name="Asha", email=None, password="secret123", is_admin=False):
    """
    Utility to create a user row in the file-backed DB.
    Returns the created row dict (with its password hash).
    """
    if email is None:
        email = f"user_{os.urandom(4).hex()}@example.com"
    return db.create_record(
        "users",
        {
            "name": name,
            "email": email.lower(),
            "password_hash": hash_password(password),
            "is_admin": is_admin,
            "created_at": datetime.utcnow().isoformat(sep=" "),
        },
        id_field="id",
    )


@pytest.fixture
def make_user():
    """
    Create a user and return {"row", "password", "token", "headers"}.
    Usage: u = make_user(name="Ravi", is_admin=True)
    """
    def _fn(name="Asha", email=None, password="secret123", is_admin=False):
        row = create_user_in_db(name=name, email=email, password=password, is_admin=is_admin)
        token = create_access_token(subject=row["id"])
        return {"row": row, "password": password, "token": token,
                "headers": {"Authorization": f"Bearer {token}"}}
    return _fn


@pytest.fixture
def temp_user(make_user):
    return make_user()


@pytest.fixture
def admin_user(make_user):
    return make_user(name="Admin", email="admin@example.com", password="adminpass", is_admin=True)


@pytest.fixture
def make_product():
    """
    Insert a product row and return it.
    Usage: p = make_product("Mug", 120.0)
    """
    def _fn(name="Sample", price=100.0, category="general", discount=0):
        return db.create_record(
            "products",
            {"name": name, "price": price, "discount": discount, "category": category,
             "image": "", "created_at": datetime.utcnow().isoformat(sep=" ")},
            id_field="id",
        )
    return _fn


@pytest.fixture
def data_path(temp_data_dir):
    def _fn(filename: str) -> Path:
        return temp_data_dir / filename
    return _fn
