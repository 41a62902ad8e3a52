from __future__ import annotations

"""ServiceArea – the persisted single-polygon region where a Service is offered."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..core.geometry.geojson_codec import GeometryValidationError, ring_of, validate_polygon


class ServiceArea(BaseModel):
    """Geographic region (GeoJSON Polygon) attached to exactly one Service."""

    model_config = ConfigDict(frozen=True)

    id: str
    company_id: str
    service_id: str
    geometry: dict[str, Any]
    is_active: bool = True
    # Owner email – authorization scope for update/delete
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("geometry")
    @classmethod
    def _single_polygon(cls, value: dict[str, Any]) -> dict[str, Any]:
        try:
            return validate_polygon(value)
        except GeometryValidationError as exc:
            # pydantic wraps ValueError into its own ValidationError
            raise ValueError(str(exc)) from exc

    # -------- convenience --------
    @property
    def ring(self) -> list[tuple[float, float]]:
        """Exterior ring as ``(lon, lat)`` tuples."""
        return ring_of(self.geometry)

    @property
    def status_text(self) -> str:
        return "Active" if self.is_active else "Inactive"
