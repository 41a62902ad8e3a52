#!/usr/bin/env python3
"""
Area Store for the service-area editor.

Holds the current company's Services and ServiceAreas in memory and keeps
them reconciled with the persistence gateway.  After every successful
mutation the store reloads the *full* list rather than patching it, so the
cache always mirrors exactly what the gateway persisted (including
server-assigned timestamps).

The store is the single writer of that cache; views receive it by reference
and listen to :pyattr:`AreaStore.areasChanged`.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from PySide6.QtCore import QObject, Signal

from ..core.geometry.geojson_codec import Geometry, validate_polygon
from ..models.service import Service
from ..models.service_area import ServiceArea
from ..services.authorization import AuthorizationGuard

logger = logging.getLogger(__name__)


class AreaStore(QObject):
    """
    In-memory cache of one company's services and service areas.

    Signals:
        areasChanged (): Emitted after a successful ``load()``.
        errorOccurred (str): Gateway failure, shown as a notification.
        notified (str): Success message after a mutation.
        busyChanged (bool): Brackets every in-flight gateway request so
            triggering controls can be disabled.
    """

    areasChanged = Signal()
    errorOccurred = Signal(str)
    notified = Signal(str)
    busyChanged = Signal(bool)

    def __init__(self, guard: AuthorizationGuard, company_id: str, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self._guard = guard
        self._company_id = company_id
        self._services: list[Service] = []
        self._areas: list[ServiceArea] = []
        self._busy: bool = False

    # --------------------------------------------------------------------------
    # Read access
    # --------------------------------------------------------------------------

    @property
    def company_id(self) -> str:
        return self._company_id

    @property
    def services(self) -> tuple[Service, ...]:
        return tuple(self._services)

    @property
    def areas(self) -> tuple[ServiceArea, ...]:
        return tuple(self._areas)

    @property
    def is_busy(self) -> bool:
        return self._busy

    def area_by_id(self, area_id: Optional[str]) -> Optional[ServiceArea]:
        return next((a for a in self._areas if a.id == area_id), None)

    def service_by_id(self, service_id: Optional[str]) -> Optional[Service]:
        return next((s for s in self._services if s.id == service_id), None)

    def service_for(self, area: ServiceArea) -> Optional[Service]:
        """Return the Service an area is offered for, if it is cached."""
        return self.service_by_id(area.service_id)

    # --------------------------------------------------------------------------
    # In-flight tracking
    # --------------------------------------------------------------------------

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        self._busy = True
        self.busyChanged.emit(True)
        try:
            yield
        finally:
            self._busy = False
            self.busyChanged.emit(False)

    def _refuse_if_busy(self, action: str) -> bool:
        if self._busy:
            self.logger.warning("Ignoring %s: another request is still in flight.", action)
            return True
        return False

    # --------------------------------------------------------------------------
    # Operations
    # --------------------------------------------------------------------------

    def load(self) -> bool:
        """Fetch all services and areas for the company.

        On failure the previous cache is kept (stale but available) and
        ``errorOccurred`` is emitted.
        """
        if self._refuse_if_busy("load"):
            return False
        with self._in_flight():
            services = self._guard.list_services(self._company_id)
            areas = self._guard.list_service_areas(self._company_id)

        failed = next((r for r in (services, areas) if not r.ok), None)
        if failed is not None:
            self.logger.error("Failed to load company %s: %s", self._company_id, failed.error)
            self.errorOccurred.emit(failed.error)
            return False

        self._services = list(services.data or [])
        self._areas = list(areas.data or [])
        self.logger.info(
            "Loaded %d service(s) and %d service area(s) for company %s",
            len(self._services), len(self._areas), self._company_id,
        )
        self.areasChanged.emit()
        return True

    def create(self, service_id: str, geometry: Geometry, is_active: bool = True) -> bool:
        """Persist a new area. Raises ``GeometryValidationError`` before any gateway call."""
        validate_polygon(geometry)
        if self._refuse_if_busy("create"):
            return False
        with self._in_flight():
            result = self._guard.create_service_area(service_id, self._company_id, geometry, is_active)
        if not result.ok:
            self.errorOccurred.emit(result.error)
            return False
        self.logger.info("Service area %s created.", result.data.id if result.data else "?")
        self.notified.emit("Service area saved successfully!")
        self.load()
        return True

    def update(self, area_id: str, geometry: Geometry, is_active: bool, service_id: str) -> bool:
        """Persist edits to an existing area (scoped to the caller's email)."""
        validate_polygon(geometry)
        if self._refuse_if_busy("update"):
            return False
        with self._in_flight():
            result = self._guard.update_service_area(area_id, geometry, is_active, service_id)
        if not result.ok:
            self.errorOccurred.emit(result.error)
            return False
        self.logger.info("Service area %s updated.", area_id)
        self.notified.emit("Service area updated successfully!")
        self.load()
        return True

    def delete(self, area_id: str) -> bool:
        """Permanently delete an area (scoped to the caller's email)."""
        if self._refuse_if_busy("delete"):
            return False
        with self._in_flight():
            result = self._guard.delete_service_area(area_id)
        if not result.ok:
            self.errorOccurred.emit(result.error)
            return False
        self.logger.info("Service area %s deleted.", area_id)
        self.notified.emit("Service area deleted successfully!")
        self.load()
        return True
