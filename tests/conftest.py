"""Shared fixtures: per-test SQLite database, temp blob store and a fake AI engine."""

import asyncio
import os
import tempfile

# Settings are read at import time, so point them at a scratch area first.
_SCRATCH = tempfile.mkdtemp(prefix="recommendation-review-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_SCRATCH}/default.db")
os.environ.setdefault("UPLOADS_DIR", os.path.join(_SCRATCH, "uploads"))
os.environ.setdefault("LOG_FILE_PATH", os.path.join(_SCRATCH, "log", "tests.log"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import NullPool

from config import settings
from core.interfaces import IRecommendationEngine
from database.session import build_engine, create_tables, get_db
from infrastructure.file_storage import LocalFileStorage
from infrastructure.repositories import (
    SQLChatRepository, SQLFolderRepository, SQLRecommendationRepository
)
from services.decision_processor import DecisionProcessor
from services.factory import get_file_storage, get_recommendation_engine
from services.recommendation_store import RecommendationStore
from services.regeneration import RegenerationService
from services.storage_service import StorageService


class FakeRecommendationEngine(IRecommendationEngine):
    """Deterministic stand-in for the LLM-backed engine."""

    def __init__(self, default_points=None):
        self.default_points = list(default_points or [])
        self.points_by_document = {}
        self.rewrites = []
        self.questions = []

    async def extract_recommendations(self, document_name, text):
        return list(self.points_by_document.get(document_name, self.default_points))

    async def rewrite_document(self, document_name, text, points):
        self.rewrites.append((document_name, text, list(points)))
        return text + "\n" + "\n".join(f"[applied] {p}" for p in points)

    async def answer(self, message, document_name, text, trail, history):
        self.questions.append((message, document_name, len(history)))
        return f"Answer about {document_name or 'the folder'}: {message}"

    def detect_apply_intent(self, message):
        return "apply all" in message.lower()


@pytest.fixture
def fake_engine():
    return FakeRecommendationEngine(default_points=["Add signature", "Add date"])


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'recommendations.db'}", poolclass=NullPool)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def folder_repo(session):
    return SQLFolderRepository(session)


@pytest.fixture
def recommendation_repo(session):
    return SQLRecommendationRepository(session)


@pytest.fixture
def chat_repo(session):
    return SQLChatRepository(session)


@pytest.fixture
def store(folder_repo, recommendation_repo):
    return RecommendationStore(folder_repo, recommendation_repo)


@pytest.fixture
def processor(recommendation_repo):
    return DecisionProcessor(recommendation_repo, overlap_policy="error")


@pytest.fixture
def file_storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
def storage_service(folder_repo, recommendation_repo, store, file_storage, fake_engine):
    return StorageService(
        folder_repo=folder_repo,
        recommendation_repo=recommendation_repo,
        store=store,
        file_storage=file_storage,
        engine=fake_engine,
    )


@pytest.fixture
def regeneration(store, file_storage, fake_engine, chat_repo):
    return RegenerationService(
        store=store,
        file_storage=file_storage,
        engine=fake_engine,
        chat_repo=chat_repo,
    )


@pytest.fixture
def client(tmp_path, fake_engine):
    """TestClient wired to a private database, blob store and the fake engine."""
    from main import app

    api_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    asyncio.run(create_tables(api_engine))
    maker = async_sessionmaker(api_engine, expire_on_commit=False)

    async def override_get_db():
        async with maker() as session:
            yield session

    uploads = tmp_path / "api-uploads"
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: LocalFileStorage(uploads)
    app.dependency_overrides[get_recommendation_engine] = lambda: fake_engine

    test_client = TestClient(app)
    test_client.headers.update({"x-api-key": settings.API_KEY, "x-user-role": "admin"})
    yield test_client

    app.dependency_overrides.clear()
    asyncio.run(api_engine.dispose())
