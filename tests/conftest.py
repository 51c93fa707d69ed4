import os
import threading
import time

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token, hash_password
from app.config import get_settings
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.models.video import Video
from app.services.storage import get_s3_client

TEST_BUCKET = "tubely-test"
TEST_REGION = "us-east-2"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00\x00\x00\x08free" + b"\x01" * 2048
PDF_BYTES = b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n" + b"\x00" * 600


class FakeS3Client:
    """Records put_object calls instead of talking to S3."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.delay = 0
        self.started = threading.Event()

    def put_object(self, **kwargs):
        self.started.set()
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        body = kwargs.pop("Body")
        self.calls.append({**kwargs, "Body": body.read()})
        return {"ETag": '"fake"'}


@pytest.fixture
def dirs(tmp_path, monkeypatch):
    assets = tmp_path / "assets"
    staging = tmp_path / "staging"
    monkeypatch.setenv("ASSETS_ROOT", str(assets))
    monkeypatch.setenv("UPLOAD_TEMP_DIR", str(staging))
    monkeypatch.setenv("S3_BUCKET", TEST_BUCKET)
    monkeypatch.setenv("S3_REGION", TEST_REGION)
    monkeypatch.setenv("ASSET_HOST", "localhost")
    monkeypatch.setenv("PORT", "8091")
    get_settings.cache_clear()
    yield {"assets": assets, "staging": staging}
    get_settings.cache_clear()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def overrides(dirs, db_session, fake_s3):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_s3_client] = lambda: fake_s3
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_user(db_session):
    def _make(email="owner@example.com", password="secret123"):
        user = User(email=email, password=hash_password(password))
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def owner(make_user):
    return make_user()


@pytest.fixture
def stranger(make_user):
    return make_user(email="stranger@example.com")


@pytest.fixture
def video(db_session, owner):
    v = Video(user_id=owner.id, title="Boots on the ground", description="first cut")
    db_session.add(v)
    db_session.commit()
    db_session.refresh(v)
    return v


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


def files_in(path):
    if not path.exists():
        return []
    return list(path.iterdir())
