"""Tests for settings loading and tagger thresholds."""

import pytest
from pydantic import ValidationError

from tradebook.core.config import Settings, TaggerConfig, load_settings
from tradebook.core.enums import StorageBackend
from tradebook.core.errors import ConfigError


class TestTaggerConfig:
    """Named defaults and validation."""

    def test_defaults(self):
        cfg = TaggerConfig()
        assert cfg.min_good_rr == 1.2
        assert cfg.overtrade_limit == 5
        assert cfg.early_entry_cutoff == "09:20"
        assert cfg.revenge_window_minutes == 15
        assert cfg.stop_loss_tolerance == 1.3

    @pytest.mark.parametrize("cutoff", ["9:20", "0920", "25:00", "09:61"])
    def test_invalid_cutoff(self, cutoff):
        with pytest.raises(ValidationError):
            TaggerConfig(early_entry_cutoff=cutoff)


class TestLoadSettings:
    """TOML file, overrides and environment."""

    def test_defaults_without_file(self):
        settings = load_settings()
        assert isinstance(settings, Settings)
        assert settings.storage.backend == StorageBackend.MEMORY

    def test_toml_file(self, tmp_path):
        path = tmp_path / "tradebook.toml"
        path.write_text(
            '[tagger]\novertrade_limit = 3\nearly_entry_cutoff = "09:30"\n'
            '[observability]\nlog_format = "json"\n'
        )
        settings = load_settings(path)
        assert settings.tagger.overtrade_limit == 3
        assert settings.tagger.early_entry_cutoff == "09:30"
        assert settings.observability.log_format == "json"

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings.tagger.overtrade_limit == 5

    def test_overrides(self):
        settings = load_settings(overrides={"tagger": {"capital": 250000}})
        assert settings.tagger.capital == 250000

    def test_env_nested(self, monkeypatch):
        monkeypatch.setenv("TRADEBOOK_TAGGER__PATIENCE", "60")
        assert load_settings().tagger.patience == 60

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[tagger\n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            load_settings(overrides={"tagger": {"overtrade_limit": "many"}})
