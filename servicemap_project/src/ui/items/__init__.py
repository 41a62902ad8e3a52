"""UI Graphics Items subpackage.

Provides the graphics items drawn on the service-area map.

Exports:
    VertexItem: draggable square handle for one polygon vertex.
    EditableShapeItem: in-progress polygon composed of VertexItem handles.
    ServiceAreaItem: read-only, clickable rendering of a persisted area.
"""

from __future__ import annotations

from .area_item import ServiceAreaItem
from .shape_item import EditableShapeItem
from .vertex_item import VertexItem

__all__ = [
    "EditableShapeItem",
    "ServiceAreaItem",
    "VertexItem",
]
