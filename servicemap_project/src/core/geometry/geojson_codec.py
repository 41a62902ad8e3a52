"""GeoJSON codec for service-area geometry.

Converts between the map's native shapes (rings of ``QPointF`` in scene
coordinates, or plain ``(lon, lat)`` pairs) and the canonical GeoJSON
``Polygon`` that is persisted through the gateway.

Scene coordinates are ``x = longitude`` and ``y = -latitude`` so that north is
up in a ``QGraphicsView``.  All public functions below that take or return
GeoJSON work in ``[longitude, latitude]`` order.

Every create/edit event coming from the map goes through
:func:`geometry_from_shapes`, which enforces the *exactly one polygon* rule
regardless of which drawing toolkit produced the shapes.
"""

from __future__ import annotations

import copy
import json
import logging
import math
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QPen, QPolygonF
from shapely.errors import GEOSException
from shapely.geometry import shape

logger = logging.getLogger(__name__)

Point2D = Tuple[float, float]
Geometry = dict[str, Any]
NativePoint = Union[QPointF, Sequence[float]]
NativeShape = Sequence[NativePoint]

EXACTLY_ONE_POLYGON = "Please ensure there is exactly one polygon in the service area."
NOT_A_POLYGON = "Service area must be a single polygon."
INVALID_GEOJSON = "Invalid GeoJSON format"

__all__ = [
    "EXACTLY_ONE_POLYGON",
    "Geometry",
    "GeometryCountError",
    "GeometryValidationError",
    "INVALID_GEOJSON",
    "NOT_A_POLYGON",
    "area_style",
    "bounds_to_scene_rect",
    "dump_geometry",
    "from_scene_point",
    "geometry_bounds",
    "geometry_from_shapes",
    "geometry_to_polygon",
    "normalize_geometry",
    "parse_geometry",
    "polygon_from_points",
    "ring_of",
    "to_scene_point",
    "validate_polygon",
]


class GeometryValidationError(ValueError):
    """Raised when a candidate geometry cannot be persisted as a service area."""


class GeometryCountError(GeometryValidationError):
    """Raised when the transient layer holds more than one shape."""

    def __init__(self, count: int):
        super().__init__(EXACTLY_ONE_POLYGON)
        self.count = count


# ---------------------------------------------------------------------------
# Scene <-> geographic coordinates
# ---------------------------------------------------------------------------

def to_scene_point(lon: float, lat: float) -> QPointF:
    """Return the scene position of a geographic coordinate."""
    return QPointF(float(lon), -float(lat))


def from_scene_point(pt: QPointF) -> Point2D:
    """Return ``(lon, lat)`` for a scene position."""
    return (pt.x(), -pt.y())


def _coerce_point(pt: NativePoint) -> Point2D:
    if isinstance(pt, QPointF):
        return from_scene_point(pt)
    if not isinstance(pt, (list, tuple)) or len(pt) < 2:
        raise GeometryValidationError(f"Invalid coordinate {pt!r}")
    lon, lat = pt[0], pt[1]
    for value in (lon, lat):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise GeometryValidationError(f"Invalid coordinate {pt!r}")
    return (float(lon), float(lat))


# ---------------------------------------------------------------------------
# Native shapes -> GeoJSON
# ---------------------------------------------------------------------------

def polygon_from_points(points: NativeShape) -> Geometry:
    """Build a closed GeoJSON Polygon from one ring of native points.

    ``QPointF`` entries are treated as scene positions, anything else as
    ``(lon, lat)``.  The ring is closed when the last point differs from the
    first.
    """
    ring = [_coerce_point(p) for p in points]
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    if len(set(ring)) < 3:
        raise GeometryValidationError("A service area needs at least three distinct vertices.")
    return {"type": "Polygon", "coordinates": [[[lon, lat] for lon, lat in ring]]}


def geometry_from_shapes(shapes: Sequence[NativeShape]) -> Optional[Geometry]:
    """Return the candidate geometry for the shapes in the transient layer.

    Returns ``None`` when the layer is empty.

    Raises:
        GeometryCountError: more than one shape is present.
        GeometryValidationError: the single shape is degenerate.
    """
    if not shapes:
        return None
    if len(shapes) > 1:
        logger.warning("Transient layer holds %d shapes; exactly one is required.", len(shapes))
        raise GeometryCountError(len(shapes))
    return polygon_from_points(shapes[0])


def normalize_geometry(obj: Mapping[str, Any]) -> Geometry:
    """Strip GeoJSON wrappers and metadata, returning a bare geometry dict.

    ``Feature`` objects are unwrapped; a ``FeatureCollection`` is accepted only
    when it holds exactly one feature.  Only ``type`` and ``coordinates`` are
    kept.
    """
    if not isinstance(obj, Mapping):
        raise GeometryValidationError(INVALID_GEOJSON)

    kind = obj.get("type")
    if kind == "FeatureCollection":
        features = obj.get("features") or []
        if len(features) != 1:
            raise GeometryCountError(len(features))
        return normalize_geometry(features[0])
    if kind == "Feature":
        geom = obj.get("geometry")
        if geom is None:
            raise GeometryValidationError("Feature has no geometry.")
        return normalize_geometry(geom)
    if "coordinates" not in obj:
        # GeometryCollection and friends carry no top-level coordinates
        raise GeometryValidationError(NOT_A_POLYGON)
    return {"type": kind, "coordinates": copy.deepcopy(obj["coordinates"])}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_polygon(geometry: Optional[Mapping[str, Any]]) -> Geometry:
    """Ensure *geometry* is a single, closed GeoJSON Polygon ring.

    Returns the geometry unchanged so callers can chain.
    """
    if geometry is None:
        raise GeometryValidationError("Service area geometry is missing.")
    if not isinstance(geometry, Mapping):
        raise GeometryValidationError(INVALID_GEOJSON)
    if geometry.get("type") != "Polygon":
        raise GeometryValidationError(NOT_A_POLYGON)

    rings = geometry.get("coordinates")
    if not isinstance(rings, list) or len(rings) != 1:
        raise GeometryValidationError("Service area polygon must consist of a single ring.")
    ring = rings[0]
    if not isinstance(ring, list) or len(ring) < 4:
        raise GeometryValidationError("Service area polygon ring needs at least four positions.")
    points = [_coerce_point(p) for p in ring]
    if points[0] != points[-1]:
        raise GeometryValidationError("Service area polygon ring is not closed.")

    try:
        geom = shape(geometry)
    except (GEOSException, ValueError, TypeError) as exc:
        raise GeometryValidationError(f"{INVALID_GEOJSON}: {exc}") from exc
    if geom.geom_type != "Polygon" or geom.is_empty:
        raise GeometryValidationError(NOT_A_POLYGON)
    return dict(geometry)


# ---------------------------------------------------------------------------
# Transport (JSON string across the gateway boundary)
# ---------------------------------------------------------------------------

def dump_geometry(geometry: Mapping[str, Any]) -> str:
    return json.dumps(geometry, separators=(",", ":"))


def parse_geometry(text: Optional[str]) -> Geometry:
    """Parse a GeoJSON string and validate it as a single Polygon."""
    if not text:
        raise GeometryValidationError("Missing required fields")
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise GeometryValidationError(INVALID_GEOJSON) from exc
    return validate_polygon(normalize_geometry(raw))


# ---------------------------------------------------------------------------
# GeoJSON -> native rendering
# ---------------------------------------------------------------------------

def ring_of(geometry: Mapping[str, Any]) -> list[Point2D]:
    """Return the exterior ring as ``(lon, lat)`` tuples (closing point included)."""
    return [_coerce_point(p) for p in geometry["coordinates"][0]]


def geometry_to_polygon(geometry: Mapping[str, Any]) -> QPolygonF:
    """Render the exterior ring as an open ``QPolygonF`` in scene coordinates.

    Qt closes polygons implicitly, so the duplicated closing point is dropped.
    """
    ring = ring_of(geometry)
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    return QPolygonF([to_scene_point(lon, lat) for lon, lat in ring])


def geometry_bounds(geometry: Mapping[str, Any]) -> tuple[float, float, float, float]:
    """Return ``(min_lon, min_lat, max_lon, max_lat)``."""
    return tuple(shape(geometry).bounds)  # type: ignore[return-value]


def bounds_to_scene_rect(bounds: Sequence[float]) -> QRectF:
    """Convert geographic bounds into the matching scene rectangle."""
    min_lon, min_lat, max_lon, max_lat = bounds
    top_left = to_scene_point(min_lon, max_lat)
    bottom_right = to_scene_point(max_lon, min_lat)
    return QRectF(top_left, bottom_right).normalized()


def area_style(is_active: bool, settings=None) -> tuple[QPen, QBrush]:
    """Return the pen/brush pair for a persisted area.

    Active areas are drawn green, inactive ones red (colours configurable via
    :class:`SettingsService`).
    """
    if settings is None:
        from ...services.settings_service import SettingsService

        settings = SettingsService()

    colour = QColor(settings.area_colour(is_active))

    line = QColor(colour)
    line.setAlphaF(settings.area_line_opacity())
    pen = QPen(line, settings.area_line_width(), Qt.SolidLine)
    pen.setCosmetic(True)  # width in screen pixels, scene units are degrees

    fill = QColor(colour)
    fill.setAlphaF(settings.area_fill_opacity())
    return pen, QBrush(fill)
