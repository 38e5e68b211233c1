"""
Shared pytest fixtures: test environment, database reset, auth helpers and
the memoir assembler over in-memory fakes.
"""
import os
import tempfile
from datetime import date

# Configure the environment before app modules read settings
_TMP_DIR = tempfile.mkdtemp(prefix="tripnote-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.main import app  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import engine, init_db  # noqa: E402
from app.services.memoir_service import MemoirAssembler, draft_registry  # noqa: E402
from app.services.storage_service import LocalObjectStorage  # noqa: E402
from app.tests.fakes import (  # noqa: E402
    FakeBackend, FakeTrip, FakeItem, FakeGalleryPhoto,
    FakeTripRepository, FakeItemRepository, FakePhotoRepository, FakeMemoirRepository
)


# ─────────────────────────── DATABASE / CLIENT ───────────────────────────

@pytest.fixture
def client():
    """TestClient over a freshly created schema."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    draft_registry.clear()
    with TestClient(app) as test_client:
        yield test_client
    draft_registry.clear()


@pytest.fixture
def register_user(client):
    """Sign up and log in a user, returning auth headers."""
    def _register(username: str, password: str = "testpassword123") -> dict:
        client.post(
            "/api/auth/signup",
            json={"username": username, "email": f"{username}@example.com", "password": password}
        )
        response = client.post("/api/auth/login", json={"username": username, "password": password})
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _register


@pytest.fixture
def auth_headers(register_user):
    return register_user("owner")


@pytest.fixture
def backend(tmp_path):
    """Memoir assembler over in-memory repositories and a temp storage dir."""
    trips = FakeTripRepository()
    items = FakeItemRepository()
    photos = FakePhotoRepository()
    memoirs = FakeMemoirRepository()
    storage = LocalObjectStorage(root=str(tmp_path / "storage"), url_prefix="/static")
    assembler = MemoirAssembler(trips, items, photos, memoirs, storage)
    return FakeBackend(trips, items, photos, memoirs, storage, assembler)


@pytest.fixture
def kyoto(backend):
    """Kyoto Trip, 2024-04-01..03: one activity with a cover, one food stop with two gallery photos."""
    backend.trips.trips[1] = FakeTrip(1, "Kyoto Trip", date(2024, 4, 1), date(2024, 4, 3))
    backend.items.items = [
        FakeItem(id=10, title="Fushimi Inari", type="activity", day_index=0, image_url="https://img.example/a.jpg"),
        FakeItem(id=11, title="Ramen Shop", type="food", day_index=1),
    ]
    backend.photos.photos = [
        FakeGalleryPhoto(id=1, trip_item_id=11, url="https://img.example/g1.jpg"),
        FakeGalleryPhoto(id=2, trip_item_id=11, url="https://img.example/g2.jpg"),
    ]
    return backend
