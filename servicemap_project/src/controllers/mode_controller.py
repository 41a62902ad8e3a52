from __future__ import annotations

"""mode_controller.py

Finite state machine for the service-area editor.

States form a tagged variant – ``Idle | Drawing | Editing(area_id)`` – so
that "drawing *and* editing" cannot be represented.  The controller owns the
transient (unsaved) form state: the candidate geometry computed from the
map's transient layer, the selected service and the active flag.

Transitions::

    Idle ──start_drawing()──▶ Drawing ──save()/cancel()──▶ Idle
    Idle ──start_editing()──▶ Editing(id) ──save()/delete()/cancel()──▶ Idle

The map reports every create/edit/delete of a transient shape through
:py:meth:`ModeController.on_shapes_changed`, which recomputes the candidate
geometry via the geometry codec (self-transition).
"""

import copy
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from PySide6.QtCore import QObject, Signal, Slot

from ..core.geometry.geojson_codec import (
    EXACTLY_ONE_POLYGON,
    Geometry,
    GeometryCountError,
    GeometryValidationError,
    NativeShape,
    geometry_bounds,
    geometry_from_shapes,
)
from ..models.service_area import ServiceArea
from .area_store import AreaStore
from .selection_controller import SelectionController

__all__ = [
    "Drawing",
    "Editing",
    "EditorMode",
    "IDLE",
    "Idle",
    "MISSING_REQUIRED_FIELDS",
    "MissingFieldsError",
    "ModeController",
]

logger = logging.getLogger(__name__)

MISSING_REQUIRED_FIELDS = "Missing required fields"


@dataclass(frozen=True)
class Idle:
    """Viewing persisted areas; nothing transient on the map."""


@dataclass(frozen=True)
class Drawing:
    """A new area is being drawn."""


@dataclass(frozen=True)
class Editing:
    """An existing area is being edited."""

    area_id: str


EditorMode = Union[Idle, Drawing, Editing]
IDLE = Idle()


class MissingFieldsError(ValueError):
    """Save attempted without a geometry or a selected service."""

    def __init__(self, detail: str = ""):
        super().__init__(MISSING_REQUIRED_FIELDS + (f": {detail}" if detail else ""))


class ModeController(QObject):
    """Drives Idle/Drawing/Editing transitions and confirms edits.

    Signals:
        modeChanged (object): new :data:`EditorMode`.
        transientLayerReset (object): geometry to seed the transient layer
            with, or ``None`` to clear it.
        candidateChanged (object): recomputed candidate geometry or ``None``.
        formChanged (): selected service or active flag changed.
        focusRequested (object): ``(min_lon, min_lat, max_lon, max_lat)``.
        validationFailed (str): local validation error; no state change.
    """

    modeChanged = Signal(object)
    transientLayerReset = Signal(object)
    candidateChanged = Signal(object)
    formChanged = Signal()
    focusRequested = Signal(object)
    validationFailed = Signal(str)

    def __init__(self, store: AreaStore, selection: SelectionController, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self._store = store
        self._selection = selection

        self._mode: EditorMode = IDLE
        self._candidate: Optional[Geometry] = None
        self._shape_error: Optional[str] = None
        self._service_id: Optional[str] = None
        self._is_active: bool = True

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def mode(self) -> EditorMode:
        return self._mode

    @property
    def is_idle(self) -> bool:
        return isinstance(self._mode, Idle)

    @property
    def candidate(self) -> Optional[Geometry]:
        return self._candidate

    @property
    def shape_error(self) -> Optional[str]:
        return self._shape_error

    @property
    def selected_service_id(self) -> Optional[str]:
        return self._service_id

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def is_busy(self) -> bool:
        return self._store.is_busy

    def can_save(self) -> bool:
        """True when Save would pass local validation (used to enable the button)."""
        if self.is_busy or self._shape_error is not None or self._candidate is None:
            return False
        if isinstance(self._mode, Drawing):
            return self._service_id is not None
        return isinstance(self._mode, Editing)

    # ------------------------------------------------------------------
    # Transitions out of Idle
    # ------------------------------------------------------------------
    @Slot()
    def start_drawing(self) -> bool:
        """Idle → Drawing. Clears selection, transient layer and form state."""
        if not self.is_idle:
            self.logger.warning("start_drawing ignored: editor is in %s.", self._mode)
            return False
        self._selection.force_clear()
        self._reset_form()
        self._selection.set_locked(True)
        self._set_mode(Drawing())
        self.transientLayerReset.emit(None)
        self.logger.info("Entered drawing mode.")
        return True

    def start_editing(self, area: Optional[ServiceArea] = None) -> bool:
        """Idle → Editing(area). Seeds the transient layer with the area's geometry.

        Without an argument the currently selected area is edited.
        """
        if not self.is_idle:
            self.logger.warning("start_editing ignored: editor is in %s.", self._mode)
            return False
        area = area or self._selection.selected
        if area is None:
            self.logger.warning("start_editing ignored: no service area selected.")
            return False

        self._selection.select(area)
        self._selection.set_locked(True)
        self._candidate = copy.deepcopy(area.geometry)
        self._shape_error = None
        self._service_id = area.service_id
        self._is_active = area.is_active
        self._set_mode(Editing(area.id))
        self.transientLayerReset.emit(copy.deepcopy(area.geometry))
        self.candidateChanged.emit(self._candidate)
        self.formChanged.emit()
        self.focusRequested.emit(geometry_bounds(area.geometry))
        self.logger.info("Editing service area %s.", area.id)
        return True

    @Slot()
    def edit_selected(self) -> bool:
        return self.start_editing(None)

    # ------------------------------------------------------------------
    # Self-transitions while Drawing/Editing
    # ------------------------------------------------------------------
    def on_shapes_changed(self, shapes: Sequence[NativeShape]) -> None:
        """Recompute the candidate geometry from the transient layer's shapes."""
        if self.is_idle:
            self.logger.debug("Shape event ignored while idle.")
            return
        try:
            self._candidate = geometry_from_shapes(shapes)
            self._shape_error = None
        except GeometryCountError as exc:
            self._candidate = None
            self._shape_error = EXACTLY_ONE_POLYGON
            self.validationFailed.emit(str(exc))
        except GeometryValidationError as exc:
            self._candidate = None
            self._shape_error = str(exc)
            self.validationFailed.emit(str(exc))
        self.candidateChanged.emit(self._candidate)

    def set_service(self, service_id: Optional[str]) -> None:
        """Pick the service the area is offered for (must be one of the company's)."""
        if service_id is not None and self._store.service_by_id(service_id) is None:
            self.logger.warning("Unknown service %s ignored.", service_id)
            service_id = None
        if service_id != self._service_id:
            self._service_id = service_id
            self.formChanged.emit()

    def set_active(self, is_active: bool) -> None:
        if bool(is_active) != self._is_active:
            self._is_active = bool(is_active)
            self.formChanged.emit()

    # ------------------------------------------------------------------
    # Confirmation / cancel / delete
    # ------------------------------------------------------------------
    @Slot()
    def save(self) -> bool:
        """Confirm the current draw/edit. Returns ``True`` when persisted."""
        if self.is_idle:
            self.logger.debug("save ignored while idle.")
            return False
        if self.is_busy:
            self.logger.warning("save ignored: a request is already in flight.")
            return False
        try:
            if isinstance(self._mode, Drawing):
                geometry = self._require_candidate()
                if self._service_id is None:
                    raise MissingFieldsError("select a service")
                ok = self._store.create(self._service_id, geometry, self._is_active)
            else:
                area = self._store.area_by_id(self._mode.area_id)
                if area is None:
                    raise MissingFieldsError("no service area selected")
                geometry = self._require_candidate()
                ok = self._store.update(
                    area.id, geometry, self._is_active, self._service_id or area.service_id,
                )
        except (MissingFieldsError, GeometryValidationError) as exc:
            self.logger.warning("Save refused: %s", exc)
            self.validationFailed.emit(str(exc))
            return False

        if ok:
            # The store already reloaded after the mutation.
            self._return_to_idle(reload=False)
        return ok

    @Slot()
    def cancel(self) -> None:
        """Drawing/Editing → Idle without persisting; reloads the store."""
        if self.is_idle:
            return
        self.logger.info("Cancelled %s.", self._mode)
        self._return_to_idle(reload=True)

    @Slot()
    def delete(self) -> bool:
        """Delete the selected (Idle) or edited (Editing) area."""
        if isinstance(self._mode, Drawing):
            self.logger.warning("delete ignored while drawing.")
            return False
        if self.is_busy:
            self.logger.warning("delete ignored: a request is already in flight.")
            return False
        area_id = self._mode.area_id if isinstance(self._mode, Editing) else (
            self._selection.selected.id if self._selection.selected else None
        )
        if area_id is None:
            self.validationFailed.emit(str(MissingFieldsError("no service area selected")))
            return False

        if not self._store.delete(area_id):
            return False
        self._selection.force_clear()
        if not self.is_idle:
            self._return_to_idle(reload=False)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _require_candidate(self) -> Geometry:
        if self._shape_error is not None:
            raise GeometryValidationError(self._shape_error)
        if self._candidate is None:
            if isinstance(self._mode, Editing):
                # The area's polygon was removed from the transient layer.
                raise GeometryValidationError(EXACTLY_ONE_POLYGON)
            raise MissingFieldsError("draw a service area")
        return self._candidate

    def _reset_form(self) -> None:
        self._candidate = None
        self._shape_error = None
        self._service_id = None
        self._is_active = True
        self.candidateChanged.emit(None)
        self.formChanged.emit()

    def _set_mode(self, mode: EditorMode) -> None:
        self._mode = mode
        self.modeChanged.emit(mode)

    def _return_to_idle(self, reload: bool) -> None:
        self._selection.set_locked(False)
        self._selection.force_clear()
        self._reset_form()
        self._set_mode(IDLE)
        self.transientLayerReset.emit(None)
        if reload:
            self._store.load()
