"""Tests for SettingsManager persistence."""
from __future__ import annotations

from settings import AppSettings, SettingsManager


class TestSettingsManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        sm = SettingsManager(settings_dir=tmp_path)
        assert sm.settings == AppSettings()
        assert sm.settings.map.default_zoom == 13
        assert sm.settings.geocoding.user_agent

    def test_ensure_file_complete_writes_all_sections(self, tmp_path):
        sm = SettingsManager(settings_dir=tmp_path)
        sm.ensure_file_complete()
        text = sm.get_settings_path().read_text(encoding="utf-8")
        for section in ("[general]", "[canvas.handles]", "[canvas.containers]", "[map]",
                        "[geocoding]", "[popup]", "[debug]"):
            assert section in text

    def test_round_trip(self, tmp_path):
        sm = SettingsManager(settings_dir=tmp_path)
        sm.settings.theme = "Slate"
        sm.settings.map.default_zoom = 9
        sm.settings.map.scroll_zoom_disabled = False
        sm.settings.geocoding.base_url = "https://geo.example"
        sm.settings.debug.strict_invariants = True
        sm.save()

        again = SettingsManager(settings_dir=tmp_path)
        assert again.settings.theme == "Slate"
        assert again.settings.map.default_zoom == 9
        assert again.settings.map.scroll_zoom_disabled is False
        assert again.settings.geocoding.base_url == "https://geo.example"
        assert again.settings.debug.strict_invariants is True

    def test_partial_file_keeps_other_defaults(self, tmp_path):
        (tmp_path / "settings.toml").write_text("[map]\ndefault_zoom = 4\n", encoding="utf-8")
        sm = SettingsManager(settings_dir=tmp_path)
        assert sm.settings.map.default_zoom == 4
        assert sm.settings.map.default_lat == AppSettings().map.default_lat
        assert sm.settings.popup.width == 320

    def test_corrupt_file_falls_back(self, tmp_path):
        (tmp_path / "settings.toml").write_text("this is = = not toml", encoding="utf-8")
        sm = SettingsManager(settings_dir=tmp_path)
        assert sm.settings == AppSettings()

    def test_map_defaults_follow_settings(self, isolated_settings):
        from models import MapData
        isolated_settings.settings.map.default_lat = 51.5
        isolated_settings.settings.map.default_lng = -0.12
        isolated_settings.settings.map.default_zoom = 10
        data = MapData.default()
        assert data.center == (51.5, -0.12)
        assert data.zoom == 10
