import pytest
from fastapi.testclient import TestClient

from urlshortener.core.config import Settings
from urlshortener.db.base import Base
from urlshortener.db.session import build_engine, build_session_factory
from urlshortener.main import create_app


BASE_URL = "http://sho.rt"
ADMIN_TOKEN = "s3cret-admin"


def _settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite:///{tmp_path / 'urls.db'}",
        "base_url": BASE_URL,
        "admin_token": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return _settings(tmp_path)


@pytest.fixture()
def client(settings):
    """Open admin endpoint (no ADMIN_TOKEN configured)."""
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture()
def secured_client(tmp_path):
    with TestClient(create_app(_settings(tmp_path, admin_token=ADMIN_TOKEN))) as c:
        yield c


@pytest.fixture()
def engine(settings):
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    with session_factory() as session:
        yield session
