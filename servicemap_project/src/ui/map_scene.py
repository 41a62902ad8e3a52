from __future__ import annotations

# src/ui/map_scene.py

import logging
from typing import List, Optional, Sequence

from PySide6.QtCore import QPointF, Qt, Signal
from PySide6.QtGui import QColor, QKeyEvent, QPainterPath, QPen, QTransform, QUndoStack
from PySide6.QtWidgets import (
    QGraphicsItem,
    QGraphicsPathItem,
    QGraphicsScene,
    QGraphicsSceneContextMenuEvent,
    QGraphicsSceneMouseEvent,
    QMenu,
)

from servicemap_project.src.core.geometry.geojson_codec import (
    Geometry,
    geometry_to_polygon,
)
from servicemap_project.src.models.service_area import ServiceArea
from servicemap_project.src.services.settings_service import SettingsService
from servicemap_project.src.ui.commands.move_vertex_command import MoveVertexCommand
from servicemap_project.src.ui.items.area_item import ServiceAreaItem
from servicemap_project.src.ui.items.shape_item import EditableShapeItem
from servicemap_project.src.ui.items.vertex_item import VertexItem


class ServiceAreaScene(QGraphicsScene):
    """
    Map scene holding two layers:

    * the *area layer* – one read-only :class:`ServiceAreaItem` per persisted
      area, clickable while the editor is idle;
    * the *transient layer* – :class:`EditableShapeItem` polygons being drawn
      or edited.  Every create/edit/delete in this layer is reported through
      :pyattr:`shapesChanged` so the mode controller can re-validate it.

    Drawing: left clicks add vertices to a draft ring; double-click or Enter
    closes it into a shape; Backspace drops the last vertex; Escape discards
    the draft; Ctrl+click selects a shape so Delete can remove it.
    """

    # list[list[QPointF]] – every shape in the transient layer
    shapesChanged = Signal(list)
    # ServiceArea clicked while idle
    areaClicked = Signal(object)
    # Click on empty map while idle
    backgroundClicked = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self._settings = SettingsService()

        self._area_items: List[ServiceAreaItem] = []
        self._shapes: List[EditableShapeItem] = []
        self._drawing_enabled: bool = False

        self._draft_points: List[QPointF] = []
        self._draft_item: Optional[QGraphicsPathItem] = None
        draft_pen = QPen(QColor(self._settings.draft_colour()), 2, Qt.DashLine)
        draft_pen.setCosmetic(True)
        self._draft_pen = draft_pen

        self._undo_stack = QUndoStack(self)

    # --- Area layer ---

    def set_areas(self, areas: Sequence[ServiceArea], service_names: Optional[dict] = None) -> None:
        """Replace the area layer with one item per persisted area."""
        for item in self._area_items:
            if item.scene() is self:
                self.removeItem(item)
        self._area_items = []
        names = service_names or {}
        for area in areas:
            item = ServiceAreaItem(area, names.get(area.service_id))
            item.setVisible(not self._drawing_enabled)
            self.addItem(item)
            self._area_items.append(item)
        self.logger.debug("Area layer rebuilt with %d item(s).", len(self._area_items))

    def area_items(self) -> List[ServiceAreaItem]:
        return list(self._area_items)

    # --- Transient layer ---

    def set_drawing_enabled(self, enabled: bool) -> None:
        """Enable vertex input (Drawing/Editing) and hide persisted areas meanwhile."""
        self._drawing_enabled = bool(enabled)
        if not enabled:
            self.cancel_draft()
        for item in self._area_items:
            item.setVisible(not enabled)

    def is_drawing_enabled(self) -> bool:
        return self._drawing_enabled

    def transient_shapes(self) -> List[List[QPointF]]:
        return [shape.points() for shape in self._shapes]

    def shape_items(self) -> List[EditableShapeItem]:
        return list(self._shapes)

    def reset_transient(self, geometry: Optional[Geometry] = None) -> None:
        """Clear the transient layer, optionally seeding it with *geometry*.

        Seeding does not emit :pyattr:`shapesChanged`; the controller already
        knows the geometry it asked for.
        """
        self.cancel_draft()
        for shape in self._shapes:
            if shape.scene() is self:
                self.removeItem(shape)
        self._shapes = []
        self._undo_stack.clear()
        if geometry is not None:
            polygon = geometry_to_polygon(geometry)
            self._add_shape([polygon[i] for i in range(polygon.count())])

    def add_shape(self, points: Sequence[QPointF]) -> EditableShapeItem:
        """Add a finished shape to the transient layer and report the change."""
        shape = self._add_shape(points)
        self._emit_shapes()
        return shape

    def remove_shape(self, shape: EditableShapeItem) -> None:
        if shape not in self._shapes:
            return
        self._shapes.remove(shape)
        if shape.scene() is self:
            self.removeItem(shape)
        self._undo_stack.clear()
        self.logger.debug("Removed transient shape; %d left.", len(self._shapes))
        self._emit_shapes()

    def _add_shape(self, points: Sequence[QPointF]) -> EditableShapeItem:
        shape = EditableShapeItem([QPointF(p) for p in points])
        shape.changed.connect(lambda _s: self._emit_shapes())
        shape.vertexDragFinished.connect(self._on_vertex_drag_finished)
        self.addItem(shape)
        self._shapes.append(shape)
        return shape

    def _emit_shapes(self) -> None:
        self.shapesChanged.emit(self.transient_shapes())

    def _on_vertex_drag_finished(self, vertex: VertexItem, old: QPointF, new: QPointF) -> None:
        self._undo_stack.push(MoveVertexCommand(vertex, old, new))

    def undoStack(self) -> QUndoStack:  # noqa: N802 – Qt naming
        return self._undo_stack

    # --- Draft ring ---

    def add_vertex(self, pos: QPointF) -> None:
        """Append a vertex to the draft ring."""
        if not self._drawing_enabled:
            return
        self._draft_points.append(QPointF(pos))
        self._update_draft_path()
        self.logger.debug("Draft vertex at lon=%.6f lat=%.6f", pos.x(), -pos.y())

    def undo_last_vertex(self) -> None:
        if self._draft_points:
            self._draft_points.pop()
            self._update_draft_path()

    def finish_shape(self) -> Optional[EditableShapeItem]:
        """Close the draft ring into a shape; needs three vertices."""
        if len(self._draft_points) < 3:
            self.logger.debug("finish_shape ignored: only %d vertices.", len(self._draft_points))
            return None
        points = list(self._draft_points)
        self.cancel_draft()
        return self.add_shape(points)

    def cancel_draft(self) -> None:
        self._draft_points = []
        if self._draft_item is not None and self._draft_item.scene() is self:
            self.removeItem(self._draft_item)
        self._draft_item = None

    def draft_points(self) -> List[QPointF]:
        return list(self._draft_points)

    def _update_draft_path(self) -> None:
        if not self._draft_points:
            self.cancel_draft()
            return
        path = QPainterPath()
        path.moveTo(self._draft_points[0])
        for pt in self._draft_points[1:]:
            path.lineTo(pt)
        if self._draft_item is None:
            self._draft_item = QGraphicsPathItem()
            self._draft_item.setPen(self._draft_pen)
            self._draft_item.setZValue(6)
            self.addItem(self._draft_item)
        self._draft_item.setPath(path)

    # --- Event handling ---

    def _device_transform(self) -> QTransform:
        views = self.views()
        return views[0].viewportTransform() if views else QTransform()

    def _item_at(self, pos: QPointF) -> Optional[QGraphicsItem]:
        return self.itemAt(pos, self._device_transform())

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent):
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return

        item = self._item_at(event.scenePos())
        if self._drawing_enabled:
            if isinstance(item, VertexItem):
                # Let the handle start its drag
                super().mousePressEvent(event)
                return
            if isinstance(item, EditableShapeItem) and event.modifiers() & Qt.ControlModifier:
                # Ctrl+click selects a shape (for Delete) instead of adding a vertex
                super().mousePressEvent(event)
                return
            self.add_vertex(event.scenePos())
            event.accept()
            return

        if isinstance(item, ServiceAreaItem):
            self.areaClicked.emit(item.area)
        else:
            self.backgroundClicked.emit()
        event.accept()

    def mouseDoubleClickEvent(self, event: QGraphicsSceneMouseEvent):
        if self._drawing_enabled and event.button() == Qt.LeftButton:
            self.finish_shape()
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def keyPressEvent(self, event: QKeyEvent):
        if self._drawing_enabled:
            key = event.key()
            if key in (Qt.Key_Return, Qt.Key_Enter):
                self.finish_shape()
                event.accept()
                return
            if key == Qt.Key_Escape:
                self.cancel_draft()
                event.accept()
                return
            if key == Qt.Key_Backspace:
                self.undo_last_vertex()
                event.accept()
                return
            if key == Qt.Key_Delete:
                for shape in [s for s in self._shapes if s.isSelected()]:
                    self.remove_shape(shape)
                event.accept()
                return
        super().keyPressEvent(event)

    def contextMenuEvent(self, event: QGraphicsSceneContextMenuEvent):
        if not self._drawing_enabled:
            super().contextMenuEvent(event)
            return
        item = self._item_at(event.scenePos())
        while item is not None and not isinstance(item, EditableShapeItem):
            item = item.parentItem()
        if item is None:
            super().contextMenuEvent(event)
            return
        menu = QMenu()
        delete_action = menu.addAction("Delete shape")
        if menu.exec(event.screenPos()) is delete_action:
            self.remove_shape(item)
        event.accept()
