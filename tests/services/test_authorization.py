import json

import pytest

from conftest import ATTACKER_EMAIL, OWNER_EMAIL, SQUARE, TRIANGLE
from servicemap_project.src.models.company import User
from servicemap_project.src.services.authorization import (
    NOT_AUTHENTICATED,
    AuthorizationGuard,
    NotAuthenticatedError,
    require_user,
)
from servicemap_project.src.services.session_service import StaticSessionProvider


def test_require_user():
    session = StaticSessionProvider()
    with pytest.raises(NotAuthenticatedError, match=NOT_AUTHENTICATED):
        require_user(session)
    session.sign_in(User(id="u1", email=OWNER_EMAIL))
    assert require_user(session).email == OWNER_EMAIL


def test_create_is_stamped_with_session_email(guard, gateway, services):
    result = guard.create_service_area(services["Home Cleaning"].id, "C1", SQUARE, True)
    assert result.ok

    (call,) = gateway.calls_to("create_service_area")
    assert call["email"] == OWNER_EMAIL
    assert call["is_active"] is True
    assert json.loads(call["geojson"]) == SQUARE


def test_update_and_delete_scoped_by_session_email(gateway, services):
    owner_guard = AuthorizationGuard(gateway, StaticSessionProvider(User(id="o", email=OWNER_EMAIL)))
    area = owner_guard.create_service_area(services["Home Cleaning"].id, "C1", SQUARE, True).data

    attacker_guard = AuthorizationGuard(gateway, StaticSessionProvider(User(id="a", email=ATTACKER_EMAIL)))
    refused = attacker_guard.update_service_area(area.id, TRIANGLE, False, area.service_id)
    assert refused.error.startswith("Error updating service area: ")
    assert gateway.calls_to("update_service_area")[-1]["email"] == ATTACKER_EMAIL

    refused = attacker_guard.delete_service_area(area.id)
    assert refused.error.startswith("Error deleting service area: ")
    assert gateway.list_service_areas("C1").data == [area]

    assert owner_guard.delete_service_area(area.id).ok


def test_signed_out_session_never_reaches_gateway(gateway, services):
    session = StaticSessionProvider(User(id="o", email=OWNER_EMAIL))
    guard = AuthorizationGuard(gateway, session)
    session.sign_out()
    gateway.calls.clear()

    assert guard.list_services("C1").error == NOT_AUTHENTICATED
    assert guard.list_service_areas("C1").error == NOT_AUTHENTICATED
    assert guard.create_service_area(services["Home Cleaning"].id, "C1", SQUARE, True).error == NOT_AUTHENTICATED
    assert guard.update_service_area("x", SQUARE, True, "").error == NOT_AUTHENTICATED
    assert guard.delete_service_area("x").error == NOT_AUTHENTICATED
    assert gateway.calls == []


def test_read_errors_are_prefixed(guard, gateway):
    gateway.failures["list_service_areas"] = "connection reset"
    result = guard.list_service_areas("C1")
    assert result.error == "Error fetching service areas: connection reset"

    gateway.failures["list_services"] = "timeout"
    assert guard.list_services("C1").error == "Error fetching services: timeout"


def test_create_error_is_prefixed(guard, services):
    result = guard.create_service_area(services["Lawn Mowing"].id, "C1", SQUARE, True)
    assert result.error.startswith("Error creating service area: ")
