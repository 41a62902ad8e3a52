import pytest
from pydantic import ValidationError

from conftest import OWNER_EMAIL, SQUARE
from servicemap_project.src.models.company import Company, User
from servicemap_project.src.models.service import Service, ServiceCategory
from servicemap_project.src.models.service_area import ServiceArea


def _area(**overrides):
    fields = dict(id="a1", company_id="C1", service_id="s1", geometry=SQUARE, email=OWNER_EMAIL)
    fields.update(overrides)
    return ServiceArea(**fields)


def test_service_area_defaults_and_ring():
    area = _area()
    assert area.is_active is True
    assert area.status_text == "Active"
    assert area.ring[0] == area.ring[-1] == (0.0, 0.0)
    assert _area(is_active=False).status_text == "Inactive"


def test_service_area_rejects_multipolygon():
    with pytest.raises(ValidationError):
        _area(geometry={"type": "MultiPolygon", "coordinates": [SQUARE["coordinates"]]})


def test_service_area_is_frozen():
    area = _area()
    with pytest.raises(ValidationError):
        area.is_active = False
    assert area.model_copy(update={"is_active": False}).is_active is False


def test_category_metadata():
    assert len(ServiceCategory) == 12
    assert ServiceCategory.MOVING_AND_STORAGE.internal_name == "MOVING_AND_STORAGE"
    assert ServiceCategory.MOVING_AND_STORAGE.display_name == "Moving & Storage"
    assert ServiceCategory.is_valid("PET_SERVICES")
    assert not ServiceCategory.is_valid("pet_services")
    assert not ServiceCategory.is_valid("astrology")
    assert not ServiceCategory.is_valid(None)
    for category in ServiceCategory:
        assert category.display_name
        assert category.display_icon


def test_categories_grouped_for_picker():
    groups = ServiceCategory.grouped()
    assert list(groups) == [
        "Home & Personal",
        "Professional & Business",
        "Health & Wellness",
        "Education & Events",
        "Transportation & Logistics",
        "Animal Care",
    ]
    assert groups["Home & Personal"] == [
        ServiceCategory.HOME_SERVICES,
        ServiceCategory.BEAUTY_AND_PERSONAL_CARE,
        ServiceCategory.CLEANING_SERVICES,
    ]
    assert groups["Animal Care"] == [ServiceCategory.PET_SERVICES]
    assert sum(len(members) for members in groups.values()) == len(ServiceCategory)


def test_service_requires_name_and_category():
    with pytest.raises(ValidationError):
        Service(id="s1", company_id="C1", name="", category="HOME_SERVICES", email=OWNER_EMAIL)
    with pytest.raises(ValidationError):
        Service(id="s1", company_id="C1", name="Gutters", email=OWNER_EMAIL)
    service = Service(id="s1", company_id="C1", name="Gutters", category="HOME_SERVICES", email=OWNER_EMAIL)
    assert service.category is ServiceCategory.HOME_SERVICES


def test_user_email_pattern():
    assert User(id="u", email=OWNER_EMAIL).email == OWNER_EMAIL
    with pytest.raises(ValidationError):
        User(id="u", email="not-an-email")
    assert Company(id="C1", company_name="Acme", email=OWNER_EMAIL).description is None
