"""Shared fixtures: in-memory store, stub LLM client, recording notifier and settings without external services."""

from collections.abc import Generator
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, DBHelper
from app.core.models import CategoryInfo
from app.core.seed import DEFAULT_CATEGORIES, seed_default_categories
from app.core.settings import Settings

TEST_TOKEN = "test-token"  # noqa: S105


class StubCompletions:
    """Stands in for `client.chat.completions`, recording every call."""

    def __init__(
        self,
        content: str = "Otros",
        usage: object | None = None,
        model: str = "stub-model",
        error: Exception | None = None,
    ) -> None:
        self.content = content
        self.usage = usage
        self.model = model
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs: object) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=self.usage, model=self.model)


class StubLLMClient:
    """Minimal chat-completions client exposing `chat.completions.create`."""

    def __init__(self, **kwargs: object) -> None:
        self.completions = StubCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


class RecordingNotifier:
    """Notifier that records calls instead of sending email."""

    def __init__(self) -> None:
        self.successes: list[tuple] = []
        self.failures: list[tuple] = []

    def notify_success(self, message_id: str, draft: object, categorization: object = None) -> bool:
        self.successes.append((message_id, draft, categorization))
        return True

    def notify_failure(self, message_id: str | None, error: str) -> bool:
        self.failures.append((message_id, error))
        return True


@pytest.fixture
def settings() -> Settings:
    """Settings with no AI key and no notification credentials."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        groq_api_key=None,
        webhook_bearer_token=TEST_TOKEN,
        resend_api_key=None,
        notification_email_to=None,
        seed_default_categories=False,
    )


@pytest.fixture
def db() -> Generator[DBHelper, None, None]:
    """DBHelper over a fresh in-memory SQLite database."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    helper = DBHelper(session)
    yield helper
    helper.close()
    engine.dispose()


@pytest.fixture
def seeded_db(db: DBHelper) -> DBHelper:
    """In-memory store with the default categories."""
    seed_default_categories(db)
    return db


@pytest.fixture
def default_categories() -> list[CategoryInfo]:
    """Default categories as read-only views, with ids in insertion order."""
    return [CategoryInfo(id=idx, **category) for idx, category in enumerate(DEFAULT_CATEGORIES, start=1)]


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_llm_client() -> type[StubLLMClient]:
    """Factory for stub LLM clients: `make_llm_client(content="Supermercado", usage=...)`."""
    return StubLLMClient
