"""ServiceMap UI - EditableShapeItem

Polygon in the transient (unsaved) layer, built from draggable
:class:`VertexItem` handles.  Dragging a handle reshapes the polygon in
real time and emits *changed* so the scene can report the edit to the mode
controller.
"""

from __future__ import annotations

from typing import List

from PySide6.QtCore import QObject, QPointF, Qt, Signal
from PySide6.QtGui import QBrush, QColor, QPen, QPolygonF
from PySide6.QtWidgets import QGraphicsItem, QGraphicsPolygonItem

from servicemap_project.src.services.settings_service import SettingsService

from .vertex_item import VertexItem


class EditableShapeItem(QObject, QGraphicsPolygonItem):
    """Editable polygon composed of :class:`VertexItem` handles.

    Args:
        points: Ring vertices in *scene* coordinates (open ring; Qt closes it).
    """

    changed = Signal(object)  # emits self
    vertexDragFinished = Signal(object, QPointF, QPointF)  # vertex, old, new

    def __init__(self, points: List[QPointF]):
        QObject.__init__(self)
        QGraphicsPolygonItem.__init__(self)

        colour = QColor(SettingsService().draft_colour())
        pen = QPen(colour, 2, Qt.DashLine)
        pen.setCosmetic(True)
        fill = QColor(colour)
        fill.setAlphaF(0.2)
        self.setPen(pen)
        self.setBrush(QBrush(fill))
        self.setFlag(QGraphicsItem.ItemIsSelectable, True)
        self.setZValue(5)

        self._vertex_items: List[VertexItem] = []
        for pt in points:
            vertex = VertexItem(pt, parent=self)
            vertex.moved.connect(self._rebuild_polygon)
            vertex.dragFinished.connect(self.vertexDragFinished)
            self._vertex_items.append(vertex)

        self._rebuild_polygon()

    # ------------------------------------------------------------------
    def points(self) -> List[QPointF]:
        """Return the current vertex positions (scene coordinates)."""
        return [v.scenePos() for v in self._vertex_items]

    def vertices(self) -> List[VertexItem]:
        return self._vertex_items

    # ------------------------------------------------------------------
    def _rebuild_polygon(self, *_):  # slot for VertexItem.moved – ignores the position argument
        self.setPolygon(QPolygonF([v.pos() for v in self._vertex_items]))
        self.changed.emit(self)


__all__ = ["EditableShapeItem"]
