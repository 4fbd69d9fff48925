"""Add backend to path so tests can use direct imports (from services..., from main import app)."""
import os
import sys
import time

_backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

# Must be set before db.session is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret-for-pytest-only-0123456789"
for _var in ("AUTH_JWKS_URL", "AUTH_JWT_AUDIENCE", "AUTH_JWT_ISSUER"):
    os.environ.pop(_var, None)

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.session import Base, build_engine, get_db
from llm_client import get_mapping_llm, get_rank_llm
from main import app


class FakeLLM:
    """Returns queued responses in order; an Exception instance in the queue is raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("FakeLLM called more times than expected")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def make_token(sub: str, secret: str | None = None, expires_in: int = 3600) -> str:
    now = int(time.time())
    payload = {"sub": sub, "email": f"{sub}@example.com", "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret or os.environ["AUTH_JWT_SECRET"], algorithm="HS256")


def auth_header(sub: str) -> dict:
    return {"Authorization": f"Bearer {make_token(sub)}"}


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def use_llm():
    """use_llm(fake, kind="rank" | "mapping") routes the given fake into the app."""

    def _install(fake, kind="rank"):
        dep = get_rank_llm if kind == "rank" else get_mapping_llm
        app.dependency_overrides[dep] = lambda: fake
        return fake

    return _install


@pytest.fixture
def alice():
    return auth_header("user-alice")


@pytest.fixture
def bob():
    return auth_header("user-bob")
