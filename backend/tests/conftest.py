# SPDX-License-Identifier: Apache-2.0
"""pytest fixtures for backend tests."""
import os
import tempfile

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ALLOW_ADMIN_REGISTRATION"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789-abcdefghij"
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="labelhub-uploads-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from app.database import build_engine, create_db_and_tables  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models import Dataset, Question, User  # noqa: E402
from app.services.blob_store import LocalBlobStore  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    """A fresh file-backed SQLite database per test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'labelhub.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "blobs", "/files")


@pytest.fixture
def client(engine, blob_store):
    """FastAPI test client over the per-test database and blob directory."""
    with TestClient(create_app(engine=engine, blob_store=blob_store)) as client:
        yield client


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _register(client, username: str, role: str) -> dict:
    r = client.post(
        "/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": "secret-pw", "role": role},
    )
    assert r.status_code == 201, r.text
    data = r.json()
    return {"id": data["user"]["id"], "token": data["token"], "headers": bearer(data["token"])}


@pytest.fixture
def admin(client):
    return _register(client, "admin", "admin")


@pytest.fixture
def user(client):
    return _register(client, "alice", "user")


@pytest.fixture
def other_user(client):
    return _register(client, "bob", "user")


@pytest.fixture
def seed(session):
    """Admin, user and one published dataset with a text question, inserted directly."""

    class Seed:
        pass

    s = Seed()
    s.admin = User(username="root", email="root@example.com", password_hash="x", role="admin")
    s.user = User(username="ursula", email="ursula@example.com", password_hash="x", role="user")
    session.add(s.admin)
    session.add(s.user)
    session.commit()
    s.dataset = Dataset(name="Pets", file_type="image", is_published=True, created_by=s.admin.id)
    session.add(s.dataset)
    session.commit()
    s.question = Question(dataset_id=s.dataset.id, question_text="Describe it", answer_type="text")
    s.other_question = Question(
        dataset_id=s.dataset.id,
        question_text="Species",
        answer_type="single_choice",
        options='["cat", "dog"]',
    )
    session.add(s.question)
    session.add(s.other_question)
    session.commit()
    for obj in (s.admin, s.user, s.dataset, s.question, s.other_question):
        session.refresh(obj)
    return s
