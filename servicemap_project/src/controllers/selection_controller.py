from __future__ import annotations

"""selection_controller.py

Tracks the (at most one) persisted ServiceArea the user clicked on and
builds the view model for the detail panel.

Selection is independent of the editor mode, but the mode controller locks
it while Drawing/Editing so clicks on other areas are ignored.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot

from ..models.service_area import ServiceArea
from .area_store import AreaStore

__all__ = ["SelectionController", "ServiceAreaDetails"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceAreaDetails:
    """What the detail panel shows for the selected area."""

    area_id: str
    service_name: str
    category_name: str
    category_icon: str
    description: str
    is_active: bool

    @property
    def status_text(self) -> str:
        return "Active" if self.is_active else "Inactive"


class SelectionController(QObject):
    """Holds the selected area and re-resolves it after each store reload."""

    selectionChanged = Signal(object)  # ServiceArea | None

    def __init__(self, store: AreaStore, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._store = store
        self._selected: Optional[ServiceArea] = None
        self._locked: bool = False
        store.areasChanged.connect(self._on_areas_changed)

    # ------------------------------------------------------------------
    @property
    def selected(self) -> Optional[ServiceArea]:
        return self._selected

    @property
    def is_locked(self) -> bool:
        return self._locked

    def set_locked(self, locked: bool) -> None:
        """Lock/unlock user selection (locked while Drawing or Editing)."""
        self._locked = bool(locked)

    # ------------------------------------------------------------------
    def select(self, area: ServiceArea) -> bool:
        """Select *area*; a no-op while locked."""
        if self._locked:
            logger.debug("Selection of %s ignored: editor is drawing/editing.", area.id)
            return False
        self._set(area)
        return True

    @Slot()
    def clear(self) -> None:
        """Drop the selection (map background click)."""
        if self._locked:
            return
        self._set(None)

    def force_clear(self) -> None:
        """Drop the selection regardless of the lock (mode transitions)."""
        self._set(None)

    def _set(self, area: Optional[ServiceArea]) -> None:
        if area == self._selected:
            return
        self._selected = area
        logger.debug("Selected area: %s", area.id if area else None)
        self.selectionChanged.emit(area)

    # ------------------------------------------------------------------
    def details(self) -> Optional[ServiceAreaDetails]:
        """Build the detail-panel view model for the current selection."""
        area = self._selected
        if area is None:
            return None
        service = self._store.service_for(area)
        if service is None:
            return ServiceAreaDetails(
                area_id=area.id,
                service_name="Unknown service",
                category_name="",
                category_icon="",
                description="",
                is_active=area.is_active,
            )
        return ServiceAreaDetails(
            area_id=area.id,
            service_name=service.name,
            category_name=service.category.display_name,
            category_icon=service.category.display_icon,
            description=service.description,
            is_active=area.is_active,
        )

    # ------------------------------------------------------------------
    @Slot()
    def _on_areas_changed(self) -> None:
        if self._selected is None:
            return
        refreshed = self._store.area_by_id(self._selected.id)
        if refreshed is None:
            logger.info("Selected area %s no longer exists; clearing selection.", self._selected.id)
        self._set(refreshed)
