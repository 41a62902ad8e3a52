# servicemap_project/src/ui/editor_panel.py

import logging
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..controllers.area_store import AreaStore
from ..controllers.mode_controller import Drawing, Editing, ModeController

logger = logging.getLogger(__name__)

SERVICE_PLACEHOLDER = "Select a service"
NO_SERVICES_HINT = "You don't have any services yet."


class EditorPanel(QWidget):
    """Form shown while Drawing/Editing: service picker, active flag, Save/Cancel.

    The panel never holds form state of its own; every change is pushed to
    the :class:`ModeController` and the widgets are refreshed from it.
    """

    def __init__(self, controller: ModeController, store: AreaStore, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._controller = controller
        self._store = store
        self._syncing = False

        self.title_label = QLabel()
        self.title_label.setStyleSheet("font-weight: bold; font-size: 14px;")

        self.service_combo = QComboBox()
        self.service_combo.setToolTip("Service offered in this area.")
        self.no_services_label = QLabel(NO_SERVICES_HINT)
        self.no_services_label.setStyleSheet("color: gray;")

        self.active_check = QCheckBox("Active")
        self.active_check.setToolTip("Inactive areas are kept but not offered to customers.")

        self.hint_label = QLabel()
        self.hint_label.setWordWrap(True)
        self.hint_label.setStyleSheet("color: #b00020;")

        self.save_button = QPushButton()
        self.cancel_button = QPushButton("Cancel")

        form = QFormLayout()
        form.addRow("Service:", self.service_combo)
        form.addRow("", self.no_services_label)
        form.addRow("", self.active_check)
        form.setLabelAlignment(Qt.AlignRight)

        buttons = QHBoxLayout()
        buttons.addWidget(self.save_button)
        buttons.addWidget(self.cancel_button)

        layout = QVBoxLayout(self)
        layout.addWidget(self.title_label)
        layout.addLayout(form)
        layout.addWidget(self.hint_label)
        layout.addLayout(buttons)
        layout.addStretch()

        self.service_combo.currentIndexChanged.connect(self._on_service_picked)
        self.active_check.toggled.connect(self._controller.set_active)
        self.save_button.clicked.connect(self._controller.save)
        self.cancel_button.clicked.connect(self._controller.cancel)

        controller.modeChanged.connect(self.refresh)
        controller.formChanged.connect(self.refresh)
        controller.candidateChanged.connect(self.refresh)
        store.busyChanged.connect(self.refresh)
        store.areasChanged.connect(self._populate_services)

        self._populate_services()
        self.refresh()

    # ------------------------------------------------------------------
    @Slot()
    def _populate_services(self) -> None:
        self._syncing = True
        try:
            self.service_combo.clear()
            self.service_combo.addItem(SERVICE_PLACEHOLDER, None)
            for service in self._store.services:
                icon = QIcon.fromTheme(service.category.display_icon)
                self.service_combo.addItem(icon, service.name, service.id)
        finally:
            self._syncing = False
        self.refresh()

    @Slot(int)
    def _on_service_picked(self, index: int) -> None:
        if self._syncing:
            return
        self._controller.set_service(self.service_combo.itemData(index))

    # ------------------------------------------------------------------
    def refresh(self, *_args) -> None:
        """Re-read mode, form state and busy flag from the controllers."""
        mode = self._controller.mode
        busy = self._store.is_busy
        editing = isinstance(mode, Editing)

        self.setVisible(isinstance(mode, (Drawing, Editing)))
        self.title_label.setText("Edit Service Area" if editing else "Add New Service Area")
        if busy:
            self.save_button.setText("Updating..." if editing else "Saving...")
        else:
            self.save_button.setText("Update Service Area" if editing else "Save Service Area")

        self._syncing = True
        try:
            index = self.service_combo.findData(self._controller.selected_service_id)
            self.service_combo.setCurrentIndex(index if index >= 0 else 0)
            self.active_check.setChecked(self._controller.is_active)
        finally:
            self._syncing = False

        has_services = bool(self._store.services)
        self.no_services_label.setVisible(not has_services)
        self.service_combo.setEnabled(has_services and not busy)
        self.active_check.setEnabled(not busy)
        self.cancel_button.setEnabled(not busy)
        self.save_button.setEnabled(self._controller.can_save())
        self.hint_label.setText(self._controller.shape_error or "")
