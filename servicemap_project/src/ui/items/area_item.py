"""ServiceMap UI - ServiceAreaItem

Read-only rendering of a persisted :class:`ServiceArea`.  Styling depends on
the active flag (green vs red); clicks are routed by the scene to the
selection controller.
"""

from __future__ import annotations

from PySide6.QtWidgets import QGraphicsPolygonItem

from servicemap_project.src.core.geometry.geojson_codec import area_style, geometry_to_polygon
from servicemap_project.src.models.service_area import ServiceArea


class ServiceAreaItem(QGraphicsPolygonItem):
    """Polygon item bound to one persisted service area."""

    def __init__(self, area: ServiceArea, service_name: str | None = None):
        super().__init__(geometry_to_polygon(area.geometry))
        self._area = area
        pen, brush = area_style(area.is_active)
        self.setPen(pen)
        self.setBrush(brush)
        label = service_name or "Service area"
        self.setToolTip(f"{label} ({area.status_text})")

    @property
    def area(self) -> ServiceArea:
        return self._area


__all__ = ["ServiceAreaItem"]
