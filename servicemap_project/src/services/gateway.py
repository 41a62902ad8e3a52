from __future__ import annotations

"""gateway.py
Persistence gateway contract for Services and ServiceAreas plus the
reference implementation used by the desktop shell and the test-suite.

Every operation returns a :class:`GatewayResult` – either ``data`` or an
``error`` string – instead of raising, so callers can surface failures as
notifications without a try/except at every call site.

Ownership rules enforced here:

* ``update_*`` / ``delete_*`` only touch a row whose ``id`` **and** ``email``
  both match.  A miss produces the same message whether the row does not
  exist or belongs to someone else.
* ``create_service_area`` requires the service to belong to the same company.
* Geometry arrives as a GeoJSON string and must parse to a single Polygon.
"""

import json
import logging
import shutil
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Generic, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import ValidationError

from ..core.geometry.geojson_codec import GeometryValidationError, parse_geometry
from ..models.service import Service, ServiceCategory
from ..models.service_area import ServiceArea

__all__ = [
    "GatewayResult",
    "InMemoryGateway",
    "PersistenceGateway",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_MATCHING_AREA = "No service area found for this account"
NO_MATCHING_SERVICE = "No service found for this account"


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    """Success payload or typed error string returned by every gateway call."""

    data: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Optional[T] = None) -> "GatewayResult[T]":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: str) -> "GatewayResult[T]":
        return cls(data=None, error=error or "Unknown error")


@runtime_checkable
class PersistenceGateway(Protocol):
    """Operations the editor core consumes from the backing store."""

    def list_services(self, company_id: str) -> GatewayResult[list[Service]]: ...

    def list_service_areas(self, company_id: str) -> GatewayResult[list[ServiceArea]]: ...

    def create_service_area(
        self, *, service_id: str, company_id: str, geojson: str, is_active: bool, email: str,
    ) -> GatewayResult[ServiceArea]: ...

    def update_service_area(
        self, *, id: str, geojson: str, is_active: bool, service_id: str, email: str,
    ) -> GatewayResult[ServiceArea]: ...

    def delete_service_area(self, id: str, email: str) -> GatewayResult[None]: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryGateway:
    """Dictionary-backed gateway, optionally mirrored to a JSON file.

    Args:
        path: JSON file to load from and write through to.  ``None`` keeps
            everything in memory (tests).
    """

    def __init__(self, path: Optional[Path] = None):
        self.logger = logging.getLogger(__name__)
        self._path = Path(path) if path else None
        self._services: dict[str, Service] = {}
        self._areas: dict[str, ServiceArea] = {}
        self._write_blocked: Optional[str] = None
        if self._path is not None:
            self._load_file()

    # ------------------------------------------------------------------
    # File mirror
    # ------------------------------------------------------------------
    @property
    def backup_path(self) -> Optional[Path]:
        """Where an unreadable or partly invalid store file is copied aside."""
        return self._path.with_name(self._path.name + ".bak") if self._path else None

    def _load_file(self) -> None:
        if not self._path.exists():
            return
        try:
            with self._path.open("r", encoding="utf-8") as fp:
                blob = json.load(fp)
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.error("Failed to load store file %s: %s", self._path, exc)
            self._set_aside()
            return

        service_rows = blob.get("services", []) if isinstance(blob, dict) else None
        area_rows = blob.get("service_areas", []) if isinstance(blob, dict) else None
        if not isinstance(service_rows, list) or not isinstance(area_rows, list):
            self.logger.error("Store file %s does not hold services and service_areas lists", self._path)
            self._set_aside()
            return

        services = self._valid_rows(Service, service_rows)
        areas = self._valid_rows(ServiceArea, area_rows)
        self._services = {s.id: s for s in services}
        self._areas = {a.id: a for a in areas}
        skipped = len(service_rows) + len(area_rows) - len(services) - len(areas)
        if skipped:
            self.logger.warning("Skipped %d invalid row(s) in %s", skipped, self._path)
            self._set_aside()
        self.logger.info(
            "Loaded %d service(s) and %d service area(s) from %s",
            len(self._services), len(self._areas), self._path,
        )

    def _valid_rows(self, model: type[T], rows: list) -> list[T]:
        valid = []
        for index, row in enumerate(rows):
            try:
                valid.append(model.model_validate(row))
            except ValidationError as exc:
                self.logger.error("Invalid %s row %d in %s: %s", model.__name__, index, self._path, exc)
        return valid

    def _set_aside(self) -> None:
        """Copy the store file to :pyattr:`backup_path` before it is overwritten.

        When the copy fails, writes are refused so the original file is never
        replaced by a partial view of it.
        """
        try:
            shutil.copy2(self._path, self.backup_path)
        except OSError as exc:
            self.logger.error("Could not back up store file %s: %s", self._path, exc)
            self._write_blocked = f"Storage unavailable: {self._path} could not be read or backed up"
            return
        self.logger.warning("Copied store file %s to %s", self._path, self.backup_path)

    def _commit(self, services: dict[str, Service], areas: dict[str, ServiceArea]) -> Optional[str]:
        """Write *services*/*areas* through to disk, then adopt them in memory.

        Returns an error string when the write fails; in that case the
        in-memory state is left untouched.
        """
        if self._write_blocked:
            return self._write_blocked
        if self._path is not None:
            blob = {
                "services": [s.model_dump(mode="json") for s in services.values()],
                "service_areas": [a.model_dump(mode="json") for a in areas.values()],
            }
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("w", encoding="utf-8") as fp:
                    json.dump(blob, fp, indent=2)
            except OSError as exc:
                self.logger.error("Failed to write store file %s: %s", self._path, exc)
                return f"Storage unavailable: {exc}"
        self._services, self._areas = services, areas
        return None

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------
    def list_services(self, company_id: str) -> GatewayResult[list[Service]]:
        rows = [s for s in self._services.values() if s.company_id == company_id]
        return GatewayResult.success(rows)

    def create_service(
        self, *, company_id: str, name: str, description: str, category: str, email: str,
    ) -> GatewayResult[Service]:
        if not company_id or not name or not description or not category:
            return GatewayResult.failure("Missing required fields")
        if not ServiceCategory.is_valid(category):
            return GatewayResult.failure("Invalid service category")
        stamp = _now()
        service = Service(
            id=str(uuid.uuid4()),
            company_id=company_id,
            name=name,
            description=description,
            category=ServiceCategory(category),
            email=email,
            created_at=stamp,
            updated_at=stamp,
        )
        error = self._commit({**self._services, service.id: service}, dict(self._areas))
        if error:
            return GatewayResult.failure(error)
        self.logger.info("Created service %s (%s) for company %s", service.id, name, company_id)
        return GatewayResult.success(service)

    def update_service(
        self, *, id: str, name: str, description: str, category: str, email: str,
    ) -> GatewayResult[Service]:
        if not id or not name or not description or not category:
            return GatewayResult.failure("Missing required fields")
        if not ServiceCategory.is_valid(category):
            return GatewayResult.failure("Invalid service category")
        current = self._services.get(id)
        if current is None or current.email != email:
            return GatewayResult.failure(NO_MATCHING_SERVICE)
        service = current.model_copy(update={
            "name": name,
            "description": description,
            "category": ServiceCategory(category),
            "updated_at": _now(),
        })
        error = self._commit({**self._services, id: service}, dict(self._areas))
        if error:
            return GatewayResult.failure(error)
        return GatewayResult.success(service)

    def delete_service(self, id: str, email: str) -> GatewayResult[None]:
        """Delete a service together with the areas that reference it."""
        current = self._services.get(id)
        if current is None or current.email != email:
            return GatewayResult.failure(NO_MATCHING_SERVICE)
        services = {k: v for k, v in self._services.items() if k != id}
        areas = {k: v for k, v in self._areas.items() if v.service_id != id}
        error = self._commit(services, areas)
        if error:
            return GatewayResult.failure(error)
        self.logger.info(
            "Deleted service %s and %d dependent area(s)", id, len(self._areas) - len(areas),
        )
        return GatewayResult.success(None)

    # ------------------------------------------------------------------
    # Service areas
    # ------------------------------------------------------------------
    def list_service_areas(self, company_id: str) -> GatewayResult[list[ServiceArea]]:
        rows = [a for a in self._areas.values() if a.company_id == company_id]
        return GatewayResult.success(rows)

    def list_service_areas_by_service(self, service_id: str) -> GatewayResult[list[ServiceArea]]:
        rows = [a for a in self._areas.values() if a.service_id == service_id]
        return GatewayResult.success(rows)

    def create_service_area(
        self, *, service_id: str, company_id: str, geojson: str, is_active: bool, email: str,
    ) -> GatewayResult[ServiceArea]:
        if not service_id or not company_id or not geojson:
            return GatewayResult.failure("Missing required fields")
        try:
            geometry = parse_geometry(geojson)
        except GeometryValidationError as exc:
            return GatewayResult.failure(str(exc))
        service = self._services.get(service_id)
        if service is None or service.company_id != company_id:
            return GatewayResult.failure("Service does not belong to this company")

        stamp = _now()
        area = ServiceArea(
            id=str(uuid.uuid4()),
            company_id=company_id,
            service_id=service_id,
            geometry=geometry,
            is_active=bool(is_active),
            email=email,
            created_at=stamp,
            updated_at=stamp,
        )
        error = self._commit(dict(self._services), {**self._areas, area.id: area})
        if error:
            return GatewayResult.failure(error)
        self.logger.info("Created service area %s for service %s", area.id, service_id)
        return GatewayResult.success(area)

    def update_service_area(
        self, *, id: str, geojson: str, is_active: bool, service_id: str, email: str,
    ) -> GatewayResult[ServiceArea]:
        if not id or not geojson:
            return GatewayResult.failure("Missing required fields")
        try:
            geometry = parse_geometry(geojson)
        except GeometryValidationError as exc:
            return GatewayResult.failure(str(exc))

        current = self._areas.get(id)
        if current is None or current.email != email:
            self.logger.warning("Rejected update of service area %s: no row for caller", id)
            return GatewayResult.failure(NO_MATCHING_AREA)

        service_id = service_id or current.service_id
        service = self._services.get(service_id)
        if service is None or service.company_id != current.company_id:
            return GatewayResult.failure("Service does not belong to this company")

        area = current.model_copy(update={
            "geometry": geometry,
            "is_active": bool(is_active),
            "service_id": service_id,
            "updated_at": _now(),
        })
        error = self._commit(dict(self._services), {**self._areas, id: area})
        if error:
            return GatewayResult.failure(error)
        self.logger.info("Updated service area %s", id)
        return GatewayResult.success(area)

    def delete_service_area(self, id: str, email: str) -> GatewayResult[None]:
        current = self._areas.get(id)
        if current is None or current.email != email:
            self.logger.warning("Rejected delete of service area %s: no row for caller", id)
            return GatewayResult.failure(NO_MATCHING_AREA)
        error = self._commit(dict(self._services), {k: v for k, v in self._areas.items() if k != id})
        if error:
            return GatewayResult.failure(error)
        self.logger.info("Deleted service area %s", id)
        return GatewayResult.success(None)
