import json

import pytest

from conftest import ATTACKER_EMAIL, OTHER_EMAIL, OWNER_EMAIL, SQUARE, TRIANGLE
from servicemap_project.src.services.gateway import (
    NO_MATCHING_AREA,
    NO_MATCHING_SERVICE,
    InMemoryGateway,
    PersistenceGateway,
)


def _create(gw, service, geometry=SQUARE, is_active=True, email=OWNER_EMAIL, company_id="C1"):
    return gw.create_service_area(
        service_id=service.id,
        company_id=company_id,
        geojson=json.dumps(geometry),
        is_active=is_active,
        email=email,
    )


def test_in_memory_gateway_satisfies_protocol():
    assert isinstance(InMemoryGateway(), PersistenceGateway)


def test_lists_are_scoped_to_company(gateway, services):
    _create(gateway, services["Home Cleaning"])
    _create(gateway, services["Lawn Mowing"], email=OTHER_EMAIL, company_id="C2")

    c1_services = gateway.list_services("C1").data
    assert [s.name for s in c1_services] == ["Home Cleaning", "Emergency Plumbing"]
    c1_areas = gateway.list_service_areas("C1").data
    assert len(c1_areas) == 1
    assert c1_areas[0].company_id == "C1"


def test_create_area_stores_parsed_geometry(gateway, services):
    result = _create(gateway, services["Home Cleaning"], geometry=TRIANGLE, is_active=False)
    assert result.ok
    area = result.data
    assert area.geometry == TRIANGLE
    assert area.is_active is False
    assert area.email == OWNER_EMAIL
    assert area.created_at is not None and area.created_at == area.updated_at


def test_create_area_rejects_bad_geojson(gateway, services):
    result = gateway.create_service_area(
        service_id=services["Home Cleaning"].id, company_id="C1",
        geojson="{oops", is_active=True, email=OWNER_EMAIL,
    )
    assert not result.ok
    assert result.error == "Invalid GeoJSON format"

    multi = {"type": "MultiPolygon", "coordinates": [SQUARE["coordinates"]]}
    assert not _create(gateway, services["Home Cleaning"], geometry=multi).ok
    assert gateway.list_service_areas("C1").data == []


def test_create_area_requires_service_of_same_company(gateway, services):
    result = _create(gateway, services["Lawn Mowing"])
    assert not result.ok
    assert "does not belong" in result.error


def test_create_area_missing_fields(gateway):
    result = gateway.create_service_area(
        service_id="", company_id="C1", geojson=json.dumps(SQUARE), is_active=True, email=OWNER_EMAIL,
    )
    assert result.error == "Missing required fields"


def test_update_area_scoped_by_owner_email(gateway, services):
    area = _create(gateway, services["Home Cleaning"]).data

    refused = gateway.update_service_area(
        id=area.id, geojson=json.dumps(TRIANGLE), is_active=False, service_id="", email=ATTACKER_EMAIL,
    )
    assert not refused.ok
    assert refused.error == NO_MATCHING_AREA
    assert gateway.list_service_areas("C1").data[0].geometry == SQUARE

    updated = gateway.update_service_area(
        id=area.id, geojson=json.dumps(TRIANGLE), is_active=False, service_id="", email=OWNER_EMAIL,
    )
    assert updated.ok
    assert updated.data.geometry == TRIANGLE
    assert updated.data.service_id == area.service_id
    assert updated.data.email == OWNER_EMAIL
    assert updated.data.created_at == area.created_at


def test_missing_and_foreign_rows_look_the_same(gateway, services):
    area = _create(gateway, services["Home Cleaning"]).data
    foreign = gateway.delete_service_area(area.id, ATTACKER_EMAIL)
    missing = gateway.delete_service_area("no-such-id", OWNER_EMAIL)
    assert foreign.error == missing.error == NO_MATCHING_AREA


def test_delete_area(gateway, services):
    area = _create(gateway, services["Home Cleaning"]).data
    assert gateway.delete_service_area(area.id, OWNER_EMAIL).ok
    assert gateway.list_service_areas("C1").data == []


def test_list_areas_by_service(gateway, services):
    _create(gateway, services["Home Cleaning"])
    _create(gateway, services["Emergency Plumbing"], geometry=TRIANGLE)
    rows = gateway.list_service_areas_by_service(services["Emergency Plumbing"].id).data
    assert [a.geometry for a in rows] == [TRIANGLE]


def test_service_crud_and_cascade(gateway, services):
    assert not gateway.create_service(
        company_id="C1", name="Bogus", description="x", category="astrology", email=OWNER_EMAIL,
    ).ok

    cleaning = services["Home Cleaning"]
    renamed = gateway.update_service(
        id=cleaning.id, name="Deep Cleaning", description="Monthly", category="CLEANING_SERVICES", email=OWNER_EMAIL,
    )
    assert renamed.ok and renamed.data.name == "Deep Cleaning"
    assert gateway.update_service(
        id=cleaning.id, name="Hijack", description="x", category="HOME_SERVICES", email=ATTACKER_EMAIL,
    ).error == NO_MATCHING_SERVICE

    _create(gateway, cleaning)
    _create(gateway, services["Emergency Plumbing"], geometry=TRIANGLE)
    assert gateway.delete_service(cleaning.id, OWNER_EMAIL).ok
    remaining = gateway.list_service_areas("C1").data
    assert [a.service_id for a in remaining] == [services["Emergency Plumbing"].id]


def test_file_mirror_round_trip(tmp_path, services):
    path = tmp_path / "store.json"
    gw = InMemoryGateway(path)
    service = gw.create_service(
        company_id="C1", name="Pest Control", description="Termites", category="HOME_SERVICES", email=OWNER_EMAIL,
    ).data
    area = _create(gw, service).data
    assert path.exists()

    reopened = InMemoryGateway(path)
    assert [s.id for s in reopened.list_services("C1").data] == [service.id]
    assert reopened.list_service_areas("C1").data[0].geometry == area.geometry


def test_write_failure_leaves_state_untouched(tmp_path, services):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    gw = InMemoryGateway(blocker / "store.json")
    result = gw.create_service(
        company_id="C1", name="Removals", description="Local moves", category="MOVING_AND_STORAGE", email=OWNER_EMAIL,
    )
    assert not result.ok
    assert gw.list_services("C1").data == []


def _seed_store(path, count=3):
    gw = InMemoryGateway(path)
    for n in range(count):
        gw.create_service(
            company_id="C1", name=f"Service {n}", description="x", category="HOME_SERVICES", email=OWNER_EMAIL,
        )
    return json.loads(path.read_text())


def test_invalid_row_is_skipped_and_the_rest_survive_a_write(tmp_path):
    path = tmp_path / "store.json"
    blob = _seed_store(path)
    open_ring = {"type": "Polygon", "coordinates": [[[0, 0], [0, 1], [1, 1], [1, 0]]]}
    blob["service_areas"].append({
        "id": "broken", "company_id": "C1", "service_id": blob["services"][0]["id"],
        "geometry": open_ring, "email": OWNER_EMAIL,
    })
    original = json.dumps(blob)
    path.write_text(original)

    gw = InMemoryGateway(path)
    assert len(gw.list_services("C1").data) == 3
    assert gw.list_service_areas("C1").data == []
    assert gw.backup_path.read_text() == original

    assert gw.create_service(
        company_id="C1", name="Extra", description="x", category="PET_SERVICES", email=OWNER_EMAIL,
    ).ok
    on_disk = json.loads(path.read_text())
    assert len(on_disk["services"]) == 4


@pytest.mark.parametrize("content", ["not json", '["services"]', '{"services": {"id": 1}}'])
def test_unreadable_store_file_is_copied_aside(tmp_path, content):
    path = tmp_path / "store.json"
    path.write_text(content)
    gw = InMemoryGateway(path)
    assert gw.list_services("C1").data == []
    assert gw.backup_path.read_text() == content

    assert gw.create_service(
        company_id="C1", name="Fresh", description="x", category="AUTOMOTIVE", email=OWNER_EMAIL,
    ).ok
    assert gw.backup_path.read_text() == content


def test_writes_refused_when_store_file_cannot_be_backed_up(tmp_path, monkeypatch):
    path = tmp_path / "store.json"
    _seed_store(path, count=1)
    path.write_text("not json")

    def fail_copy(*args, **kwargs):
        raise OSError("read-only directory")

    monkeypatch.setattr("servicemap_project.src.services.gateway.shutil.copy2", fail_copy)
    gw = InMemoryGateway(path)
    result = gw.create_service(
        company_id="C1", name="Fresh", description="x", category="AUTOMOTIVE", email=OWNER_EMAIL,
    )
    assert not result.ok
    assert result.error.startswith("Storage unavailable")
    assert path.read_text() == "not json"
    assert gw.list_services("C1").data == []


def test_valid_store_file_is_not_copied_aside(tmp_path):
    path = tmp_path / "store.json"
    _seed_store(path)
    gw = InMemoryGateway(path)
    assert len(gw.list_services("C1").data) == 3
    assert not gw.backup_path.exists()
