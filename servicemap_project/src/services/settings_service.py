from __future__ import annotations

"""settings_service.py
Provides application-wide persisted settings using a JSON file in the user's
home directory (``~/.servicemap/settings.json``).  Access via the *singleton*
:class:`SettingsService`.

Example
-------
>>> settings = SettingsService()
>>> settings.map_zoom()
11
>>> settings.set("map_zoom", 13)
>>> settings.save()
"""

import json
import logging
from pathlib import Path
from typing import Any, ClassVar, Optional

__all__ = ["SettingsService"]

logger = logging.getLogger(__name__)


class SettingsService:
    """Load/save user settings to *~/.servicemap/settings.json*.

    Every ``SettingsService()`` call returns the same instance until
    :py:meth:`reset` drops it.
    """

    _instance: ClassVar[Optional["SettingsService"]] = None

    _path: Path = Path.home() / ".servicemap" / "settings.json"

    _defaults: dict[str, Any] = {
        # Initial map viewport (Brisbane CBD)
        "map_center_lat": -27.4698,
        "map_center_lon": 153.0251,
        "map_zoom": 11,
        # Persisted area styling – active areas green, inactive red
        "active_colour": "#008000",
        "inactive_colour": "#ff0000",
        "area_line_width": 2,
        "area_line_opacity": 0.8,
        "area_fill_opacity": 0.3,
        # Transient (in-progress) shape styling
        "draft_colour": "#3388ff",
        "vertex_handle_px": 8,
        # Backing file for the JSON gateway; empty string → in-memory only
        "data_file": str(Path.home() / ".servicemap" / "store.json"),
    }

    def __new__(cls) -> "SettingsService":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance; the next call re-reads the file."""
        cls._instance = None

    # ------------------------------------------------------------------
    def __init__(self) -> None:  # noqa: D401
        # __new__ hands back the shared instance; initialise it once
        if getattr(self, "_initialized", False):  # type: ignore[attr-defined]
            return

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover – path issues
            logger.warning("Cannot create settings directory %s: %s", self._path.parent, exc)

        self._data: dict[str, Any] = {**self._defaults, **self._load()}
        self._initialized = True  # type: ignore[attr-defined]

    # ------------------------------------------------------------------
    def _load(self) -> dict[str, Any]:
        """Read JSON file if it exists; return dict or empty on failure."""
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
            # Only keep keys we recognise – ignore unknowns
            return {k: data[k] for k in self._defaults.keys() if k in data}
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to load settings file %s: %s", self._path, exc)
            return {}

    # ------------------------------------------------------------------
    def get(self, key: str, default: Any | None = None) -> Any | None:  # noqa: D401 – simple accessor
        """Return setting *key* or *default* if missing."""
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:  # noqa: D401 – simple mutator
        """Update setting value in memory. Call :pymeth:`save` to persist."""
        self._data[key] = value

    def save(self) -> None:  # noqa: D401 – straightforward persist
        """Write current settings to JSON file, creating directories as needed."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as fp:
                json.dump(self._data, fp, indent=2)
            logger.info("Settings saved to %s", self._path)
        except OSError as exc:  # pragma: no cover – disk full etc.
            logger.error("Failed to save settings to %s: %s", self._path, exc)

    # --- Map viewport ---
    def map_center(self) -> tuple[float, float]:
        """Return the initial map centre as ``(lat, lon)``."""
        return (
            float(self.get("map_center_lat", self._defaults["map_center_lat"])),
            float(self.get("map_center_lon", self._defaults["map_center_lon"])),
        )

    def map_zoom(self) -> int:
        """Return the initial web-map zoom level."""
        return int(self.get("map_zoom", self._defaults["map_zoom"]))

    def set_map_view(self, lat: float, lon: float, zoom: int) -> None:
        """Persist the last map centre and zoom."""
        self.set("map_center_lat", float(lat))
        self.set("map_center_lon", float(lon))
        self.set("map_zoom", int(zoom))
        self.save()

    # ------------------------------------------------------------------
    # Area styling
    # ------------------------------------------------------------------
    def area_colour(self, is_active: bool) -> str:  # noqa: D401
        """Return the outline/fill colour for an active or inactive area."""
        key = "active_colour" if is_active else "inactive_colour"
        return str(self.get(key, self._defaults[key]))

    def area_line_width(self) -> int:
        return int(self.get("area_line_width", self._defaults["area_line_width"]))

    def area_line_opacity(self) -> float:
        return float(self.get("area_line_opacity", self._defaults["area_line_opacity"]))

    def area_fill_opacity(self) -> float:
        return float(self.get("area_fill_opacity", self._defaults["area_fill_opacity"]))

    def draft_colour(self) -> str:
        return str(self.get("draft_colour", self._defaults["draft_colour"]))

    def vertex_handle_px(self) -> int:
        """Return the on-screen edge length (px) of vertex drag handles."""
        return int(self.get("vertex_handle_px", self._defaults["vertex_handle_px"]))

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    def data_file(self) -> Path | None:
        """Return the JSON store path, or ``None`` when persistence is disabled."""
        raw = self.get("data_file", self._defaults["data_file"])
        return Path(raw).expanduser() if raw else None

    def set_data_file(self, path: str | Path | None) -> None:
        self.set("data_file", str(path) if path else "")
        self.save()
