# src/ui/map_view.py

import logging
import math
from typing import Optional, Sequence

from PySide6.QtCore import QPoint, Qt
from PySide6.QtGui import QMouseEvent, QWheelEvent
from PySide6.QtWidgets import QGraphicsScene, QGraphicsView, QWidget

from ..core.geometry.geojson_codec import bounds_to_scene_rect, to_scene_point

logger = logging.getLogger(__name__)

# Web-map tile convention: the world is 256 px wide at zoom 0.
TILE_SIZE_PX = 256
MIN_ZOOM = 1
MAX_ZOOM = 19


def pixels_per_degree(zoom: float) -> float:
    return TILE_SIZE_PX * (2 ** zoom) / 360.0


class MapView(QGraphicsView):
    """
    Map viewport over a :class:`ServiceAreaScene`.

    Scene units are degrees (x = longitude, y = -latitude); the view scale
    follows the usual web-map zoom levels.  Wheel zooms around the cursor,
    middle-button drag pans.
    """

    def __init__(self, scene: QGraphicsScene, parent: Optional[QWidget] = None):
        super().__init__(scene, parent)

        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        # Let the view scroll anywhere on the globe.
        self.setSceneRect(-180.0, -90.0, 360.0, 180.0)

        self.logger = logger
        self._panning: bool = False
        self._last_pan_pos: QPoint | None = None

    # --- Zoom / centre ---

    def zoom_level(self) -> float:
        scale = self.transform().m11()
        if scale <= 0:
            return float(MIN_ZOOM)
        return math.log2(scale * 360.0 / TILE_SIZE_PX)

    def set_zoom_level(self, zoom: float) -> None:
        zoom = max(MIN_ZOOM, min(MAX_ZOOM, zoom))
        ppd = pixels_per_degree(zoom)
        self.resetTransform()
        self.scale(ppd, ppd)
        self.logger.debug("Zoom level set to %.2f (%.1f px/deg)", zoom, ppd)

    def center_on_lonlat(self, lon: float, lat: float) -> None:
        self.centerOn(to_scene_point(lon, lat))

    def set_view(self, lat: float, lon: float, zoom: float) -> None:
        self.set_zoom_level(zoom)
        self.center_on_lonlat(lon, lat)

    def focus_bounds(self, bounds: Sequence[float]) -> None:
        """Fit ``(min_lon, min_lat, max_lon, max_lat)`` into the viewport."""
        rect = bounds_to_scene_rect(bounds)
        if rect.isEmpty():
            self.centerOn(rect.center())
            return
        margin_x = rect.width() * 0.1
        margin_y = rect.height() * 0.1
        self.fitInView(rect.adjusted(-margin_x, -margin_y, margin_x, margin_y), Qt.AspectRatioMode.KeepAspectRatio)

    # --- Mouse handling ---

    def wheelEvent(self, event: QWheelEvent):
        zoom_in_factor = 1.25
        factor = zoom_in_factor if event.angleDelta().y() > 0 else 1.0 / zoom_in_factor

        current = self.zoom_level()
        target = current + math.log2(factor)
        if target < MIN_ZOOM or target > MAX_ZOOM:
            event.accept()
            return

        old_pos = self.mapToScene(event.position().toPoint())
        self.scale(factor, factor)
        new_pos = self.mapToScene(event.position().toPoint())
        delta = new_pos - old_pos
        self.translate(delta.x(), delta.y())
        event.accept()

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton:
            self._panning = True
            self._last_pan_pos = event.pos()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._panning and self._last_pan_pos is not None:
            delta: QPoint = event.pos() - self._last_pan_pos
            h_bar = self.horizontalScrollBar()
            v_bar = self.verticalScrollBar()
            h_bar.setValue(h_bar.value() - delta.x())
            v_bar.setValue(v_bar.value() - delta.y())
            self._last_pan_pos = event.pos()
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton and self._panning:
            self._panning = False
            self._last_pan_pos = None
            self.setCursor(Qt.CursorShape.ArrowCursor)
            event.accept()
        else:
            super().mouseReleaseEvent(event)
