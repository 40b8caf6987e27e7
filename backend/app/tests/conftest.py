import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-reels-express-tests")
os.environ["MOCK_MODE"] = "false"

from collections.abc import Callable, Generator  # noqa: E402
from datetime import timedelta  # noqa: E402
from unittest.mock import AsyncMock, MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, select  # noqa: E402

from app import crud  # noqa: E402
from app.api.deps import get_db  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.config_manager import clear_config_cache, initialize_default_configs  # noqa: E402
from app.core.db import engine  # noqa: E402
from app.core.mock import set_mock_mode  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Configuracao, User, UserCreate  # noqa: E402
from app.services.audio_library import clear_duration_cache  # noqa: E402

TEST_PASSWORD = "secret123"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    SQLModel.metadata.create_all(engine)
    clear_config_cache()
    clear_duration_cache()
    set_mock_mode(False)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)
    clear_config_cache()
    set_mock_mode(False)


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def sio_emit() -> Generator[AsyncMock, None, None]:
    with patch("app.realtime.sio.emit", new_callable=AsyncMock) as emit:
        yield emit


@pytest.fixture
def audio_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "AUDIO_DIR", str(tmp_path))
    return tmp_path


def _create_user(db: Session, email: str, role: str = "GENERAL", **quotas: int) -> User:
    user = crud.create_user(
        session=db,
        user_create=UserCreate(email=email, password=TEST_PASSWORD, name=email.split("@")[0], role=role),
    )
    if quotas:
        user.sqlmodel_update(quotas)
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    return lambda email, role="GENERAL", **quotas: _create_user(db, email, role, **quotas)


@pytest.fixture
def admin_user(db: Session) -> User:
    return _create_user(db, "admin@example.com", role="ADMIN")


@pytest.fixture
def normal_user(db: Session) -> User:
    return _create_user(db, "user@example.com")


def _token_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, timedelta(minutes=5), email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return _token_headers(admin_user)


@pytest.fixture
def user_headers(normal_user: User) -> dict[str, str]:
    return _token_headers(normal_user)


@pytest.fixture
def configured(db: Session) -> Session:
    """Seeds the default configuration with usable provider keys."""
    initialize_default_configs(db)
    for config in db.exec(select(Configuracao)).all():
        if config.chave in ("OPENROUTER_API_KEY", "ELEVEN_API_KEY"):
            config.valor = "test-key"
        elif config.chave == "VOICE_ID":
            config.valor = "voice-123"
        db.add(config)
    db.commit()
    clear_config_cache()
    return db


def _chat_response(content: str) -> MagicMock:
    mock_message = MagicMock()
    mock_message.content = content
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_response = MagicMock()
    mock_response.choices = [mock_choice]
    return mock_response


@pytest.fixture
def openai_create() -> Generator[AsyncMock, None, None]:
    """Replaces the OpenAI client; set `.return_value` or `.side_effect` on the yielded mock."""
    mock_completions = MagicMock()
    mock_completions.create = AsyncMock()
    mock_chat = MagicMock()
    mock_chat.completions = mock_completions
    mock_client_instance = AsyncMock()
    mock_client_instance.chat = mock_chat
    with patch("app.agent.llm_client.AsyncOpenAI", return_value=mock_client_instance):
        yield mock_completions.create


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    return _token_headers


@pytest.fixture
def chat_response() -> Callable[[str], MagicMock]:
    return _chat_response
