from __future__ import annotations

"""Service model and the fixed service-category enumeration."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ServiceCategory(str, Enum):
    """Fixed enumeration of service categories a company can offer.

    Values are the internal names persisted with each service.
    """

    HOME_SERVICES = "HOME_SERVICES"
    BEAUTY_AND_PERSONAL_CARE = "BEAUTY_AND_PERSONAL_CARE"
    CLEANING_SERVICES = "CLEANING_SERVICES"
    PROFESSIONAL_SERVICES = "PROFESSIONAL_SERVICES"
    TECHNOLOGY_SERVICES = "TECHNOLOGY_SERVICES"
    HEALTH_AND_WELLNESS = "HEALTH_AND_WELLNESS"
    FITNESS_AND_RECREATION = "FITNESS_AND_RECREATION"
    EDUCATION_AND_TUTORING = "EDUCATION_AND_TUTORING"
    EVENT_SERVICES = "EVENT_SERVICES"
    AUTOMOTIVE = "AUTOMOTIVE"
    MOVING_AND_STORAGE = "MOVING_AND_STORAGE"
    PET_SERVICES = "PET_SERVICES"

    @property
    def internal_name(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _CATEGORY_META[self][0]

    @property
    def display_icon(self) -> str:
        """Freedesktop theme icon name used by the panels."""
        return _CATEGORY_META[self][1]

    @property
    def group(self) -> str:
        """Heading the category is listed under in a grouped picker."""
        return _CATEGORY_META[self][2]

    @classmethod
    def grouped(cls) -> dict[str, list["ServiceCategory"]]:
        """Categories keyed by group heading, both in declaration order."""
        groups: dict[str, list[ServiceCategory]] = {}
        for category in cls:
            groups.setdefault(category.group, []).append(category)
        return groups

    @classmethod
    def is_valid(cls, raw: str | None) -> bool:
        return raw in cls._value2member_map_


HOME_AND_PERSONAL = "Home & Personal"
PROFESSIONAL_AND_BUSINESS = "Professional & Business"
HEALTH_AND_WELLNESS = "Health & Wellness"
EDUCATION_AND_EVENTS = "Education & Events"
TRANSPORTATION_AND_LOGISTICS = "Transportation & Logistics"
ANIMAL_CARE = "Animal Care"

# internal name -> (display name, theme icon, group heading)
_CATEGORY_META: dict[ServiceCategory, tuple[str, str, str]] = {
    ServiceCategory.HOME_SERVICES: ("Home Services", "go-home", HOME_AND_PERSONAL),
    ServiceCategory.BEAUTY_AND_PERSONAL_CARE: ("Beauty & Personal Care", "face-smile", HOME_AND_PERSONAL),
    ServiceCategory.CLEANING_SERVICES: ("Cleaning Services", "edit-clear", HOME_AND_PERSONAL),
    ServiceCategory.PROFESSIONAL_SERVICES: ("Professional Services", "x-office-document", PROFESSIONAL_AND_BUSINESS),
    ServiceCategory.TECHNOLOGY_SERVICES: ("Technology Services", "computer", PROFESSIONAL_AND_BUSINESS),
    ServiceCategory.HEALTH_AND_WELLNESS: ("Health & Wellness", "emblem-favorite", HEALTH_AND_WELLNESS),
    ServiceCategory.FITNESS_AND_RECREATION: ("Fitness & Recreation", "media-playback-start", HEALTH_AND_WELLNESS),
    ServiceCategory.EDUCATION_AND_TUTORING: ("Education & Tutoring", "accessories-dictionary", EDUCATION_AND_EVENTS),
    ServiceCategory.EVENT_SERVICES: ("Event Services", "x-office-calendar", EDUCATION_AND_EVENTS),
    ServiceCategory.AUTOMOTIVE: ("Automotive", "applications-engineering", TRANSPORTATION_AND_LOGISTICS),
    ServiceCategory.MOVING_AND_STORAGE: ("Moving & Storage", "package-x-generic", TRANSPORTATION_AND_LOGISTICS),
    ServiceCategory.PET_SERVICES: ("Pet Services", "emblem-default", ANIMAL_CARE),
}


class Service(BaseModel):
    """A named offering of one company, shown in the editor's service picker."""

    model_config = ConfigDict(frozen=True)

    id: str
    company_id: str
    name: str = Field(min_length=1)
    description: str = ""
    category: ServiceCategory
    # Owner email – authorization scope for update/delete
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
