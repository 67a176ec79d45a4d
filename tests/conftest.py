
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from book_service.ai import FailureKind, ModelOutput, PriceLookup, get_price_lookup
from book_service.main import app
from book_service.storage import get_db, init_db


class FakeBridge:
    """Stands in for the model process; records every prompt it receives."""

    def __init__(self, output: ModelOutput):
        self.output = output
        self.prompts = []

    def run(self, prompt: str) -> ModelOutput:
        self.prompts.append(prompt)
        return self.output


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def bridge():
    return FakeBridge(ModelOutput(text="The book costs about $12.99 new.", exit_code=0))


@pytest.fixture
def client(engine, bridge):
    Session = sessionmaker(bind=engine, autoflush=False)

    def _get_db():
        s = Session()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_price_lookup] = lambda: PriceLookup(bridge)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_bridge():
    return FakeBridge(ModelOutput(failure=FailureKind.SPAWN))
