from pathlib import Path

from servicemap_project.src.services.settings_service import SettingsService


def test_defaults_center_on_brisbane():
    svc = SettingsService()
    lat, lon = svc.map_center()
    assert (lat, lon) == (-27.4698, 153.0251)
    assert svc.map_zoom() == 11
    assert svc.area_colour(True) == "#008000"
    assert svc.area_colour(False) == "#ff0000"


def test_map_view_roundtrip(tmp_path, monkeypatch):
    """Saved viewport survives a fresh singleton instance."""
    settings_file = tmp_path / "roundtrip.json"
    monkeypatch.setattr(SettingsService, "_path", settings_file)
    SettingsService.reset()

    svc = SettingsService()
    svc.set_map_view(-33.8688, 151.2093, 13)
    assert settings_file.exists()

    SettingsService.reset()
    reloaded = SettingsService()
    assert reloaded.map_center() == (-33.8688, 151.2093)
    assert reloaded.map_zoom() == 13


def test_singleton_returns_same_instance():
    assert SettingsService() is SettingsService()


def test_unknown_keys_in_file_are_ignored(tmp_path, monkeypatch):
    settings_file = tmp_path / "extra.json"
    settings_file.write_text('{"map_zoom": 9, "bogus": true}')
    monkeypatch.setattr(SettingsService, "_path", settings_file)
    SettingsService.reset()

    svc = SettingsService()
    assert svc.map_zoom() == 9
    assert svc.get("bogus") is None


def test_data_file_can_be_disabled(tmp_path):
    svc = SettingsService()
    svc.set_data_file(tmp_path / "store.json")
    assert svc.data_file() == Path(tmp_path / "store.json")
    svc.set_data_file(None)
    assert svc.data_file() is None
