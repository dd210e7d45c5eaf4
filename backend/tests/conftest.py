"""
Pytest configuration and fixtures for the dashboard backend.
"""

import os
from typing import Any, Callable

import httpx
import pytest

# Settings are cached on first use, so the environment must be ready before app imports.
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["REAMAZE_EMAIL"] = "shared@example.com"
os.environ["REAMAZE_API_TOKEN"] = "shared-token"
os.environ["LOG_LEVEL"] = "WARNING"

ADMIN_PASSWORD = "correct horse battery staple"

from app.core.security import get_password_hash  # noqa: E402

os.environ["ADMIN_PASSWORD_HASH"] = get_password_hash(ADMIN_PASSWORD)

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from app.core.deps import get_report_aggregator  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app  # noqa: E402
from app.models.brand import Brand  # noqa: E402
from app.services.brands import list_brands  # noqa: E402
from app.services.reamaze import ReamazeClient, ReamazeCredentials  # noqa: E402
from app.services.reports import ReportAggregator  # noqa: E402

SHARED_CREDENTIALS = ReamazeCredentials(email="shared@example.com", api_token="shared-token")


class FakeReamaze:
    """In-process stand-in for the Re:amaze reporting API.

    Responses are registered per ``(subdomain, metric)``. A dict is returned as
    JSON and ``bytes`` or ``str`` are sent as the raw body. An int is returned
    as that HTTP status, an exception is raised as a transport failure and a
    callable receives the request and returns any of the above.
    """

    def __init__(self):
        self.responses: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, subdomain: str, metric: str, response: Any) -> None:
        self.responses[(subdomain, metric)] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        subdomain = request.url.host.split(".", 1)[0]
        metric = request.url.path.rsplit("/", 1)[-1]
        response = self.responses.get((subdomain, metric), 404)
        if callable(response):
            response = response(request)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, int):
            return httpx.Response(response, json={"error": "upstream"})
        if isinstance(response, (bytes, str)):
            return httpx.Response(200, content=response, headers={"content-type": "application/json"})
        return httpx.Response(200, json=response)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def reamaze() -> FakeReamaze:
    return FakeReamaze()


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_brand(db_session) -> Callable[..., Brand]:
    def _make(name: str, url: str, email: str | None = None, api_token: str | None = None) -> Brand:
        brand = Brand(name=name, url=url, email=email, api_token=api_token)
        db_session.add(brand)
        db_session.commit()
        db_session.refresh(brand)
        return brand

    return _make


@pytest.fixture
def make_aggregator(reamaze) -> Callable[..., ReportAggregator]:
    """Build an aggregator over a fixed brand list, talking to the fake API."""

    def _make(brands, credentials: ReamazeCredentials = SHARED_CREDENTIALS) -> ReportAggregator:
        http = httpx.AsyncClient(transport=reamaze.transport())
        client = ReamazeClient(http, default_credentials=credentials)
        return ReportAggregator(client, lambda: brands)

    return _make


@pytest.fixture
def client(db_session, reamaze):
    async def _aggregator(db: Session = Depends(get_db)):
        async with httpx.AsyncClient(transport=reamaze.transport()) as http:
            client = ReamazeClient(http, default_credentials=SHARED_CREDENTIALS)
            yield ReportAggregator(client, lambda: list_brands(db))

    app.dependency_overrides[get_report_aggregator] = _aggregator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('admin')}"}
