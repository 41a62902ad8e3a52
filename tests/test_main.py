from conftest import OWNER_EMAIL
from servicemap_project.src.main import _parse_args, add_services
from servicemap_project.src.services.gateway import InMemoryGateway


def test_add_service_arguments_repeat():
    args = _parse_args([
        "--email", OWNER_EMAIL,
        "--add-service", "Dog Walking:PET_SERVICES",
        "--add-service", "Car Valet:AUTOMOTIVE",
    ])
    assert args.add_service == ["Dog Walking:PET_SERVICES", "Car Valet:AUTOMOTIVE"]
    assert args.company_id == "default-company"


def test_add_services_skips_names_already_offered(gateway):
    entries = ["Home Cleaning:CLEANING_SERVICES", "Dog Walking:PET_SERVICES"]
    assert add_services(gateway, "C1", OWNER_EMAIL, entries)
    assert add_services(gateway, "C1", OWNER_EMAIL, entries)

    names = [s.name for s in gateway.list_services("C1").data]
    assert names == ["Home Cleaning", "Emergency Plumbing", "Dog Walking"]


def test_relaunch_against_store_file_does_not_duplicate(tmp_path):
    path = tmp_path / "store.json"
    for _ in range(2):
        assert add_services(InMemoryGateway(path), "C1", OWNER_EMAIL, ["Dog Walking:PET_SERVICES"])
    assert [s.name for s in InMemoryGateway(path).list_services("C1").data] == ["Dog Walking"]


def test_add_services_rejects_unknown_category(gateway):
    assert not add_services(gateway, "C1", OWNER_EMAIL, ["Gutters:other"])
    assert not add_services(gateway, "C1", OWNER_EMAIL, ["Gutters"])
    assert [s.name for s in gateway.list_services("C1").data] == ["Home Cleaning", "Emergency Plumbing"]
