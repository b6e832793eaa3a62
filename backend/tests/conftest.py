import os
from datetime import datetime, timedelta

# Keep app startup (init_db) away from the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from tourney.database import get_session, import_models  # noqa: E402
from tourney.dependencies import get_coordinator  # noqa: E402
from tourney.main import app  # noqa: E402
from tourney.services.competition_locks import CompetitionLocks  # noqa: E402
from tourney.services.notifications import NotificationHub  # noqa: E402
from tourney.services.tournament_coordinator import TournamentCoordinator  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models imported before create_all() (import_models)
# 4. App dependencies overridden to use test_engine and a fresh coordinator
# 5. Tables dropped and recreated per test so names never collide
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

ORGANIZER = {"X-User-Id": "org-1", "X-User-Role": "organizer"}
OTHER_ORGANIZER = {"X-User-Id": "org-2", "X-User-Role": "organizer"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
USER = {"X-User-Id": "user-1", "X-User-Role": "user"}


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a clean schema"""
    import_models()
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="coordinator")
def coordinator_fixture():
    """Fresh coordinator per test: its own notification hub and locks"""
    return TournamentCoordinator(hub=NotificationHub(), locks=CompetitionLocks())


@pytest.fixture(name="client")
def client_fixture(session: Session, coordinator: TournamentCoordinator):
    """Provide a test client with overridden database session and coordinator

    Overrides are set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_coordinator] = lambda: coordinator

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


def competition_data(name: str = "Spring Cup", max_teams: int = 16, **overrides) -> dict:
    now = datetime.utcnow()
    data = {
        "name": name,
        "sport": "football",
        "venue": "Main Field",
        "description": "Single elimination cup",
        "start_date": (now + timedelta(days=10)).isoformat(),
        "end_date": (now + timedelta(days=12)).isoformat(),
        "registration_deadline": (now + timedelta(days=5)).isoformat(),
        "max_teams": max_teams,
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_competition(client: TestClient):
    """Create a competition through the API as ORGANIZER; returns its JSON"""

    def _make(name: str = "Spring Cup", headers: dict = ORGANIZER, **overrides) -> dict:
        response = client.post("/api/competitions", json=competition_data(name, **overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture
def make_teams(client: TestClient):
    """Create *count* teams (optionally registered in a competition); returns their JSON"""

    def _make(count: int, competition_id=None, prefix: str = "Team") -> list:
        teams = []
        for i in range(1, count + 1):
            body = {"name": f"{prefix} {i}"}
            if competition_id is not None:
                body["competition_id"] = competition_id
            headers = {"X-User-Id": f"captain-{prefix}-{i}", "X-User-Role": "user"}
            response = client.post("/api/teams", json=body, headers=headers)
            assert response.status_code == 201, response.text
            teams.append(response.json())
        return teams

    return _make
