# Standard library imports
import os

os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("SENTRY_DSN", "")

# Standard library imports
from collections.abc import AsyncIterator, Iterator  # noqa: E402
from pathlib import Path  # noqa: E402

# Third-party imports
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine  # noqa: E402

# Local application imports
from civic_issues.core.db import build_async_engine, build_session_factory, create_tables  # noqa: E402
from civic_issues.core.realtime.change_feed import LocalChangeFeed  # noqa: E402
from civic_issues.models.issues.issue import IssueCategory  # noqa: E402
from civic_issues.schemas.issues.issue_schemas import GeoPoint, IssueCreate  # noqa: E402
from civic_issues.services.issues.store import SqlIssueStore  # noqa: E402
from civic_issues.settings import settings  # noqa: E402

PLACEHOLDER_IMAGE_URL = "https://placehold.test/issue.png"


def make_issue_data(
    category: IssueCategory = IssueCategory.POTHOLE,
    description: str = "Large pothole on the corner of Main St and 2nd Ave",
    latitude: float = 12.9716,
    longitude: float = 77.5946,
    image_url: str | None = None,
) -> IssueCreate:
    return IssueCreate(
        category=category,
        description=description,
        location=GeoPoint(latitude=latitude, longitude=longitude),
        image_url=image_url,
    )


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = build_async_engine(sqlite_url(tmp_path / "issues.db"), echo=False)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def feed() -> LocalChangeFeed:
    return LocalChangeFeed()


@pytest.fixture
def store(engine: AsyncEngine, feed: LocalChangeFeed) -> SqlIssueStore:
    return SqlIssueStore(build_session_factory(engine), feed, PLACEHOLDER_IMAGE_URL)


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    monkeypatch.setattr(settings, "DATABASE_URL", sqlite_url(tmp_path / "api.db"))
    monkeypatch.setattr(settings, "AUTO_CREATE_TABLES", True)
    monkeypatch.setattr(settings, "REDIS_URL", None)

    # Local application imports
    from civic_issues.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def start_session(client: TestClient) -> tuple[str, dict[str, str]]:
    response = client.post(f"{settings.API_V1_STR}/auth/anonymous")
    assert response.status_code == 201
    body = response.json()
    return body["user_id"], {"Authorization": f"Bearer {body['access_token']}"}


@pytest.fixture
def session(client: TestClient) -> tuple[str, dict[str, str]]:
    return start_session(client)
