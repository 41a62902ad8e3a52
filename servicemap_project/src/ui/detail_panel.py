# servicemap_project/src/ui/detail_panel.py

import logging
from typing import Optional

from PySide6.QtCore import Slot
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..controllers.area_store import AreaStore
from ..controllers.mode_controller import ModeController
from ..controllers.selection_controller import SelectionController

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "Are you sure you want to delete this service area? This action cannot be undone."

_BADGE_STYLE = {
    True: "background-color: #d4edda; color: #155724; border-radius: 4px; padding: 2px 6px;",
    False: "background-color: #f8d7da; color: #721c24; border-radius: 4px; padding: 2px 6px;",
}


class DetailPanel(QWidget):
    """Read-only details of the selected area with Edit/Delete actions."""

    def __init__(
        self,
        selection: SelectionController,
        controller: ModeController,
        store: AreaStore,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self._selection = selection
        self._controller = controller
        self._store = store

        self.name_label = QLabel()
        self.name_label.setStyleSheet("font-weight: bold; font-size: 14px;")
        self.category_icon = QLabel()
        self.category_label = QLabel()
        self.description_label = QLabel()
        self.description_label.setWordWrap(True)
        self.status_badge = QLabel()

        self.edit_button = QPushButton("Edit")
        self.delete_button = QPushButton("Delete")

        buttons = QHBoxLayout()
        buttons.addWidget(self.edit_button)
        buttons.addWidget(self.delete_button)

        layout = QVBoxLayout(self)
        layout.addWidget(self.name_label)
        category_row = QHBoxLayout()
        category_row.addWidget(self.category_icon)
        category_row.addWidget(self.category_label)
        category_row.addStretch()
        layout.addLayout(category_row)
        layout.addWidget(self.description_label)
        layout.addWidget(self.status_badge)
        layout.addLayout(buttons)
        layout.addStretch()

        self.edit_button.clicked.connect(self._controller.edit_selected)
        self.delete_button.clicked.connect(self._on_delete_clicked)

        selection.selectionChanged.connect(self.refresh)
        controller.modeChanged.connect(self.refresh)
        store.busyChanged.connect(self.refresh)
        store.areasChanged.connect(self.refresh)

        self.refresh()

    def refresh(self, *_args) -> None:
        details = self._selection.details()
        self.setVisible(details is not None and self._controller.is_idle)
        if details is None:
            return
        self.name_label.setText(details.service_name)
        self.category_label.setText(details.category_name)
        self.category_label.setVisible(bool(details.category_name))
        icon = QIcon.fromTheme(details.category_icon) if details.category_icon else QIcon()
        self.category_icon.setPixmap(icon.pixmap(16, 16))
        self.category_icon.setVisible(not icon.isNull())
        self.description_label.setText(details.description)
        self.description_label.setVisible(bool(details.description))
        self.status_badge.setText(details.status_text)
        self.status_badge.setStyleSheet(_BADGE_STYLE[details.is_active])

        busy = self._store.is_busy
        self.edit_button.setEnabled(not busy)
        self.delete_button.setEnabled(not busy)

    def confirm_delete(self) -> bool:
        reply = QMessageBox.question(
            self,
            "Delete Service Area",
            DELETE_CONFIRMATION,
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        return reply == QMessageBox.Yes

    @Slot()
    def _on_delete_clicked(self) -> None:
        if self._selection.selected is None:
            return
        if not self.confirm_delete():
            logger.debug("Delete cancelled by user.")
            return
        self._controller.delete()
