"""Tests for settings schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError


class TestStoreSettings:
    """Store behaviour settings."""

    def test_defaults_to_lazy(self) -> None:
        from pacconf.contracts.enums import ValidationPolicy
        from pacconf.core.config import StoreSettings

        assert StoreSettings().validation_policy is ValidationPolicy.LAZY

    def test_accepts_policy_string(self) -> None:
        from pacconf.contracts.enums import ValidationPolicy
        from pacconf.core.config import StoreSettings

        settings = StoreSettings(validation_policy="eager")  # type: ignore[arg-type]
        assert settings.validation_policy is ValidationPolicy.EAGER

    def test_unknown_policy_rejected(self) -> None:
        from pacconf.core.config import StoreSettings

        with pytest.raises(ValidationError):
            StoreSettings(validation_policy="sometimes")  # type: ignore[arg-type]

    def test_settings_are_frozen(self) -> None:
        from pacconf.contracts.enums import ValidationPolicy
        from pacconf.core.config import StoreSettings

        settings = StoreSettings()
        with pytest.raises(ValidationError):
            settings.validation_policy = ValidationPolicy.EAGER  # type: ignore[misc]


class TestLoggingSettings:
    """Logging configuration validation."""

    def test_defaults(self) -> None:
        from pacconf.contracts.enums import LogFormat
        from pacconf.core.config import LoggingSettings

        settings = LoggingSettings()
        assert settings.level == "WARNING"
        assert settings.format is LogFormat.CONSOLE

    def test_level_is_case_insensitive(self) -> None:
        from pacconf.core.config import LoggingSettings

        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]

    def test_unknown_level_rejected(self) -> None:
        from pacconf.core.config import LoggingSettings

        with pytest.raises(ValidationError):
            LoggingSettings(level="TRACE")  # type: ignore[arg-type]


class TestEmbeddingSettings:
    """Payload marker validation."""

    def test_defaults(self) -> None:
        from pacconf.core.config import (
            DEFAULT_END_MARKER,
            DEFAULT_START_MARKER,
            EmbeddingSettings,
        )

        settings = EmbeddingSettings()
        assert settings.start_marker == DEFAULT_START_MARKER
        assert settings.end_marker == DEFAULT_END_MARKER

    def test_blank_marker_rejected(self) -> None:
        from pacconf.core.config import EmbeddingSettings

        with pytest.raises(ValidationError, match="empty"):
            EmbeddingSettings(start_marker="   ")

    def test_identical_markers_rejected(self) -> None:
        from pacconf.core.config import EmbeddingSettings

        with pytest.raises(ValidationError, match="differ"):
            EmbeddingSettings(start_marker="/*X*/", end_marker="/*X*/")


class TestLoadSettings:
    """Loading from files with environment overrides."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        from pacconf.contracts.enums import ValidationPolicy
        from pacconf.core.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            "store:\n"
            "  validation_policy: eager\n"
            "logging:\n"
            "  level: info\n"
        )

        settings = load_settings(config_file)

        assert settings.store.validation_policy is ValidationPolicy.EAGER
        assert settings.logging.level == "INFO"
        assert settings.embedding.start_marker == "/**PACCONF_START**/"

    def test_load_json(self, tmp_path: Path) -> None:
        from pacconf.contracts.enums import LogFormat
        from pacconf.core.config import load_settings

        config_file = tmp_path / "settings.json"
        config_file.write_text('{"logging": {"format": "json"}}')

        assert load_settings(config_file).logging.format is LogFormat.JSON

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from pacconf.contracts.enums import ValidationPolicy
        from pacconf.core.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("store:\n  validation_policy: lazy\n")
        monkeypatch.setenv("PACCONF_STORE__VALIDATION_POLICY", "eager")

        settings = load_settings(config_file)

        assert settings.store.validation_policy is ValidationPolicy.EAGER

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        from pacconf.core.config import load_settings

        with pytest.raises(FileNotFoundError, match="not found"):
            load_settings(tmp_path / "absent.yaml")

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        from pacconf.core.config import load_settings

        config_file = tmp_path / "settings.yaml"
        config_file.write_text("store:\n  validation_policy: sometimes\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)
