"""ServiceMap UI - VertexItem

Square drag handle representing a single vertex of the transient polygon.
The handle keeps a constant on-screen size (scene units are degrees, so it
ignores the view transform), emits *moved* whenever its position changes and
*dragFinished* with the start/end positions once a drag completes so the move
can be pushed onto an undo stack.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, QPointF, Qt, Signal
from PySide6.QtGui import QBrush, QColor, QPen
from PySide6.QtWidgets import QGraphicsItem, QGraphicsRectItem

from servicemap_project.src.services.settings_service import SettingsService


class VertexItem(QObject, QGraphicsRectItem):
    """Draggable vertex handle.

    Emits:
        moved (Signal[QPointF]): new position (parent coordinates).
        dragFinished (Signal[object, QPointF, QPointF]): ``(self, old, new)``.
    """

    moved = Signal(QPointF)
    dragFinished = Signal(object, QPointF, QPointF)

    def __init__(self, pos: QPointF, parent: QGraphicsItem | None = None):
        QObject.__init__(self)
        QGraphicsRectItem.__init__(self, parent)

        half = SettingsService().vertex_handle_px() / 2.0
        self.setRect(-half, -half, 2 * half, 2 * half)
        self.setPos(pos)

        self.setFlag(QGraphicsItem.ItemIsMovable, True)
        self.setFlag(QGraphicsItem.ItemSendsGeometryChanges, True)
        self.setFlag(QGraphicsItem.ItemIgnoresTransformations, True)
        self.setAcceptHoverEvents(True)
        self.setZValue(10)

        colour = QColor(SettingsService().draft_colour())
        self._normal_brush = QBrush(QColor("white"))
        self._hover_brush = QBrush(colour)
        self.setPen(QPen(colour, 0))
        self.setBrush(self._normal_brush)

        self._drag_start: QPointF | None = None

    # ------------------------------------------------------------------
    # QGraphicsItem overrides
    # ------------------------------------------------------------------
    def hoverEnterEvent(self, _event):
        self.setBrush(self._hover_brush)

    def hoverLeaveEvent(self, _event):
        self.setBrush(self._normal_brush)

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._drag_start = QPointF(self.pos())
        QGraphicsRectItem.mousePressEvent(self, event)

    def mouseReleaseEvent(self, event):
        QGraphicsRectItem.mouseReleaseEvent(self, event)
        if self._drag_start is not None and self._drag_start != self.pos():
            self.dragFinished.emit(self, QPointF(self._drag_start), QPointF(self.pos()))
        self._drag_start = None

    def itemChange(self, change: QGraphicsItem.GraphicsItemChange, value):  # type: ignore[name-defined]
        if change == QGraphicsItem.ItemPositionHasChanged:
            self.moved.emit(QPointF(self.pos()))
        # Call QGraphicsRectItem directly to bypass QObject in the MRO
        return QGraphicsRectItem.itemChange(self, change, value)

    # ------------------------------------------------------------------
    def to_lonlat(self) -> tuple[float, float]:
        """Return the vertex as ``(lon, lat)``."""
        pos = self.scenePos()
        return (pos.x(), -pos.y())
