#!/usr/bin/env python3
"""Main window for the ServiceMap application.

Wires the editor core (area store, selection and mode controllers) to the
map scene/view and the side panels.
"""

import logging
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QDockWidget,
    QMainWindow,
    QStatusBar,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from ..controllers.area_store import AreaStore
from ..controllers.mode_controller import Editing, EditorMode, ModeController
from ..controllers.selection_controller import SelectionController
from ..models.company import Company
from ..services.authorization import AuthorizationGuard, require_user
from ..services.gateway import PersistenceGateway
from ..services.session_service import SessionProvider
from ..services.settings_service import SettingsService
from .detail_panel import DetailPanel
from .editor_panel import EditorPanel
from .map_scene import ServiceAreaScene
from .map_view import MapView

logger = logging.getLogger(__name__)

TOAST_TIMEOUT_MS = 4000


class MainWindow(QMainWindow):
    """Service-area editor window for one company.

    Raises:
        NotAuthenticatedError: when the session has no verified user.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        session: SessionProvider,
        company: Company,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)

        self.user = require_user(session)
        self.company = company
        self.settings = SettingsService()

        # --- Core ---
        self.guard = AuthorizationGuard(gateway, session)
        self.store = AreaStore(self.guard, company.id, self)
        self.selection = SelectionController(self.store, self)
        self.controller = ModeController(self.store, self.selection, self)

        # --- Map ---
        self.scene = ServiceAreaScene(self)
        self.view = MapView(self.scene, self)
        self.setCentralWidget(self.view)
        lat, lon = self.settings.map_center()
        self.view.set_view(lat, lon, self.settings.map_zoom())

        # --- Panels ---
        self.editor_panel = EditorPanel(self.controller, self.store)
        self.detail_panel = DetailPanel(self.selection, self.controller, self.store)
        side = QWidget()
        side_layout = QVBoxLayout(side)
        side_layout.addWidget(self.editor_panel)
        side_layout.addWidget(self.detail_panel)
        side_layout.addStretch()
        self.side_dock = QDockWidget("Service Area", self)
        self.side_dock.setObjectName("ServiceAreaDock")
        self.side_dock.setWidget(side)
        self.side_dock.setFeatures(QDockWidget.DockWidgetMovable)
        self.addDockWidget(Qt.RightDockWidgetArea, self.side_dock)

        self._create_actions()
        self._create_toolbar()
        self.setStatusBar(QStatusBar(self))
        self._connect_signals()

        self.setWindowTitle(f"ServiceMap - {company.company_name}")
        self.resize(1200, 800)
        self.logger.info("MainWindow ready for %s (%s).", company.company_name, self.user.email)

        self.store.load()
        self._on_mode_changed(self.controller.mode)

    # ------------------------------------------------------------------
    def _create_actions(self) -> None:
        self.add_area_action = QAction("Add Service Area", self)
        self.add_area_action.setStatusTip("Draw a new service area on the map")
        self.add_area_action.triggered.connect(self.controller.start_drawing)

        self.undo_action = self.scene.undoStack().createUndoAction(self, "Undo")
        self.undo_action.setShortcut(QKeySequence.Undo)
        self.redo_action = self.scene.undoStack().createRedoAction(self, "Redo")
        self.redo_action.setShortcut(QKeySequence.Redo)

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("Editor", self)
        toolbar.setObjectName("EditorToolbar")
        toolbar.addAction(self.add_area_action)
        toolbar.addSeparator()
        toolbar.addAction(self.undo_action)
        toolbar.addAction(self.redo_action)
        self.addToolBar(toolbar)

    def _connect_signals(self) -> None:
        # Map → core
        self.scene.shapesChanged.connect(self.controller.on_shapes_changed)
        self.scene.areaClicked.connect(self.selection.select)
        self.scene.backgroundClicked.connect(self.selection.clear)

        # Core → map
        self.store.areasChanged.connect(self._refresh_area_layer)
        self.controller.transientLayerReset.connect(self.scene.reset_transient)
        self.controller.focusRequested.connect(self.view.focus_bounds)
        self.controller.modeChanged.connect(self._on_mode_changed)
        self.store.busyChanged.connect(self._on_busy_changed)

        # Notifications
        self.store.notified.connect(self.show_toast)
        self.store.errorOccurred.connect(self.show_error)
        self.controller.validationFailed.connect(self.show_error)

    # ------------------------------------------------------------------
    @Slot()
    def _refresh_area_layer(self) -> None:
        names = {service.id: service.name for service in self.store.services}
        self.scene.set_areas(self.store.areas, names)

    @Slot(object)
    def _on_mode_changed(self, mode: EditorMode) -> None:
        idle = self.controller.is_idle
        self.scene.set_drawing_enabled(not idle)
        self.add_area_action.setEnabled(idle and not self.store.is_busy)
        if idle:
            self.statusBar().clearMessage()
        elif isinstance(mode, Editing):
            self.statusBar().showMessage("Drag the vertices to reshape the area, then Update.")
        else:
            self.statusBar().showMessage("Click to add vertices; double-click or Enter to close the shape.")

    @Slot(bool)
    def _on_busy_changed(self, busy: bool) -> None:
        self.add_area_action.setEnabled(self.controller.is_idle and not busy)
        self.view.setEnabled(not busy)

    @Slot(str)
    def show_toast(self, message: str) -> None:
        self.logger.info("Notification: %s", message)
        self.statusBar().showMessage(message, TOAST_TIMEOUT_MS)

    @Slot(str)
    def show_error(self, message: str) -> None:
        self.logger.warning("Error shown to user: %s", message)
        self.statusBar().showMessage(message, TOAST_TIMEOUT_MS)

    # ------------------------------------------------------------------
    def closeEvent(self, event):
        centre = self.view.mapToScene(self.view.viewport().rect().center())
        self.settings.set_map_view(-centre.y(), centre.x(), round(self.view.zoom_level()))
        super().closeEvent(event)
