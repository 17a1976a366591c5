import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from flashcards_app.api.deps import get_openrouter_client
from flashcards_app.db.session import get_session
from flashcards_app.main import app
from flashcards_app.models.user import User
from flashcards_app.schemas.generation_schemas import FlashcardProposal
from flashcards_app.services.openrouter_client import OpenRouterConfig

SOURCE_TEXT = ("Photosynthesis converts light energy into chemical energy. " * 25)[:1200]
PASSWORD = "correct-horse-battery"


class FakeGatewayClient:
    """Substitui o OpenRouterClient: devolve propostas fixas ou levanta `error`."""

    def __init__(self, model="openai/gpt-4.1-mini"):
        self.config = OpenRouterConfig(api_key="test-key", model=model)
        self.proposals = [
            FlashcardProposal(front="What does photosynthesis convert?", back="Light energy into chemical energy."),
            FlashcardProposal(front="Where does photosynthesis happen?", back="In the chloroplasts of plant cells."),
            FlashcardProposal(front="What gas is released?", back="Oxygen."),
        ]
        self.error = None
        self.calls = []

    def generate_flashcards(self, source_text):
        self.calls.append(source_text)
        if self.error is not None:
            raise self.error
        return list(self.proposals)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def _make_user(session, email):
    user = User(email=email, password_hash="")
    user.set_password(PASSWORD)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def user(session):
    return _make_user(session, "alice@example.com")


@pytest.fixture
def other_user(session):
    return _make_user(session, "bob@example.com")


@pytest.fixture
def fake_gateway():
    return FakeGatewayClient()


@pytest.fixture
def client(engine, fake_gateway):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_openrouter_client] = lambda: fake_gateway
    # Sem `with`: o lifespan (init_db no banco real) não roda nos testes
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    """Registra (se preciso) e loga; devolve um TestClient com o cookie de sessão."""

    def _login(email):
        c = TestClient(app)
        c.post("/api/auth/register", json={
            "email": email, "password": PASSWORD, "confirmPassword": PASSWORD,
        })
        r = c.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        return c

    return _login
