"""
Snippety — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Real SQLite databases (aiosqlite) in pytest's tmp_path, so the store's
       SQL runs for real; a controllable clock stands in for "now".

Function-scoped fixtures:
    ├── clock:          FakeClock starting at a fixed UTC instant
    ├── engine:         aiosqlite engine with the schema created
    ├── store:          SnippetStore over `engine`, driven by `clock`
    ├── template_dir:   minimal layout/partial/pages written to tmp_path
    ├── app:            create_app() wired to its own SQLite file
    └── test_client:    HTTPX AsyncClient talking to `app`
"""

import os
from datetime import datetime, timedelta, timezone

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from snippety.config import Settings
from snippety.database import create_schema, create_session_factory
from snippety.services.snippet_store import SnippetStore

START = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock for SnippetStore; tests move it with advance()."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """A fresh SQLite database with the snippets table."""
    engine = create_async_engine(sqlite_url(tmp_path / "store.db"))
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine, clock):
    return SnippetStore(create_session_factory(engine), clock=clock)


@pytest.fixture
def template_dir(tmp_path):
    """
    Minimal template tree: layout, one partial, two pages.

    Tests break individual files to check construction fails as a whole.
    """
    root = tmp_path / "html"
    (root / "partials").mkdir(parents=True)
    (root / "pages").mkdir()
    (root / "base.tmpl.html").write_text(
        "<title>{% block title %}{% endblock %}</title>"
        '{% include "partials/nav.tmpl.html" %}'
        "<main>{% block main %}{% endblock %}</main>"
    )
    (root / "partials" / "nav.tmpl.html").write_text("<nav>nav</nav>")
    (root / "pages" / "home.tmpl.html").write_text(
        '{% extends "base.tmpl.html" %}'
        "{% block title %}Home{% endblock %}"
        "{% block main %}{% for s in snippets %}<p>{{ s.title }}</p>{% endfor %}{% endblock %}"
    )
    (root / "pages" / "view.tmpl.html").write_text(
        '{% extends "base.tmpl.html" %}'
        "{% block title %}{{ snippet.title }}{% endblock %}"
        "{% block main %}<time>{{ human_date(snippet.created) }}</time>{% endblock %}"
    )
    return root


@pytest.fixture
def test_settings(tmp_path):
    return Settings(database_url=sqlite_url(tmp_path / "app.db"), log_level="WARNING")


@pytest_asyncio.fixture
async def app(test_settings, clock):
    """The full application on its own SQLite file; lifespan is not run."""
    from snippety.main import create_app

    application = create_app(test_settings, clock=clock)
    await create_schema(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight to the ASGI app.

    Redirects are not followed so tests can assert on 303s.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
