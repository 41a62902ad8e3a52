"""Shared fixtures for the ServiceMap test-suite."""
import os
import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure the repository root is on sys.path so that `import servicemap_project`
# is always resolvable when tests are run from any working directory (e.g., CI).
# ---------------------------------------------------------------------------
_repo_root = Path(__file__).resolve().parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

# Widgets are created in several tests; never try to reach a display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from servicemap_project.src.models.company import User  # noqa: E402
from servicemap_project.src.services.gateway import GatewayResult, InMemoryGateway  # noqa: E402
from servicemap_project.src.services.session_service import StaticSessionProvider  # noqa: E402
from servicemap_project.src.services.settings_service import SettingsService  # noqa: E402

OWNER_EMAIL = "owner@example.com"
OTHER_EMAIL = "other@example.com"
ATTACKER_EMAIL = "attacker@example.com"

# Unit square used throughout: [[0,0],[0,1],[1,1],[1,0],[0,0]]
SQUARE_POINTS = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]
SQUARE = {"type": "Polygon", "coordinates": [[[0, 0], [0, 1], [1, 1], [1, 0], [0, 0]]]}
TRIANGLE = {"type": "Polygon", "coordinates": [[[153.0, -27.5], [153.1, -27.5], [153.05, -27.4], [153.0, -27.5]]]}


class RecordingGateway(InMemoryGateway):
    """In-memory gateway that records every call and can inject failures.

    ``failures["delete_service_area"] = "boom"`` makes the next call to that
    operation fail with ``"boom"`` without touching the store.
    """

    def __init__(self):
        super().__init__(None)
        self.calls: list[tuple[str, dict]] = []
        self.failures: dict[str, str] = {}

    def _record(self, name: str, **kwargs):
        self.calls.append((name, kwargs))
        error = self.failures.pop(name, None)
        return GatewayResult.failure(error) if error else None

    def calls_to(self, name: str) -> list[dict]:
        return [kwargs for op, kwargs in self.calls if op == name]

    def mutation_calls(self) -> list[str]:
        return [op for op, _ in self.calls if not op.startswith("list_")]

    def list_services(self, company_id):
        return self._record("list_services", company_id=company_id) or super().list_services(company_id)

    def list_service_areas(self, company_id):
        return self._record("list_service_areas", company_id=company_id) or super().list_service_areas(company_id)

    def create_service_area(self, **kwargs):
        return self._record("create_service_area", **kwargs) or super().create_service_area(**kwargs)

    def update_service_area(self, **kwargs):
        return self._record("update_service_area", **kwargs) or super().update_service_area(**kwargs)

    def delete_service_area(self, id, email):
        return self._record("delete_service_area", id=id, email=email) or super().delete_service_area(id, email)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings singleton at a throw-away file for every test."""
    monkeypatch.setattr(SettingsService, "_path", tmp_path / "settings.json")
    SettingsService.reset()
    yield
    SettingsService.reset()


@pytest.fixture
def app(qtbot):
    """Ensure a QApplication exists for the test session."""
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])


@pytest.fixture
def owner():
    return User(id="u-owner", email=OWNER_EMAIL)


@pytest.fixture
def session(owner):
    return StaticSessionProvider(owner)


@pytest.fixture
def gateway():
    """Company C1 (owner@example.com) offers two services; C2 offers one."""
    gw = RecordingGateway()
    gw.create_service(
        company_id="C1", name="Home Cleaning", description="Weekly house cleaning",
        category="CLEANING_SERVICES", email=OWNER_EMAIL,
    )
    gw.create_service(
        company_id="C1", name="Emergency Plumbing", description="24/7 callouts",
        category="HOME_SERVICES", email=OWNER_EMAIL,
    )
    gw.create_service(
        company_id="C2", name="Lawn Mowing", description="Fortnightly mowing",
        category="HOME_SERVICES", email=OTHER_EMAIL,
    )
    return gw


@pytest.fixture
def services(gateway):
    """Map of service name -> Service for every seeded service."""
    rows = gateway.list_services("C1").data + gateway.list_services("C2").data
    return {s.name: s for s in rows}


@pytest.fixture
def guard(gateway, session):
    from servicemap_project.src.services.authorization import AuthorizationGuard

    return AuthorizationGuard(gateway, session)


@pytest.fixture
def store(app, guard):
    from servicemap_project.src.controllers.area_store import AreaStore

    return AreaStore(guard, "C1")


@pytest.fixture
def selection(store):
    from servicemap_project.src.controllers.selection_controller import SelectionController

    return SelectionController(store)


@pytest.fixture
def controller(store, selection):
    from servicemap_project.src.controllers.mode_controller import ModeController

    return ModeController(store, selection)


@pytest.fixture
def inactive_area(gateway, services, store):
    """An inactive square area for "Home Cleaning", loaded into the store."""
    import json

    result = gateway.create_service_area(
        service_id=services["Home Cleaning"].id,
        company_id="C1",
        geojson=json.dumps(SQUARE),
        is_active=False,
        email=OWNER_EMAIL,
    )
    assert result.ok
    store.load()
    gateway.calls.clear()
    return store.area_by_id(result.data.id)
