"""
Settings schema and loading for pacconf.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from pacconf.contracts.enums import LogFormat, ValidationPolicy

DEFAULT_START_MARKER = "/**PACCONF_START**/"
DEFAULT_END_MARKER = "/**PACCONF_END**/"


class StoreSettings(BaseModel):
    """ConfigStore behaviour.

    Example YAML:
        store:
          validation_policy: eager
    """

    model_config = {"frozen": True}

    validation_policy: ValidationPolicy = Field(
        default=ValidationPolicy.LAZY,
        description="Re-validate on the next read (lazy) or inside set() (eager)",
    )


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum log level",
    )
    format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Console text or JSON lines",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v


class EmbeddingSettings(BaseModel):
    """Sentinel markers around the JSON payload inside the host script."""

    model_config = {"frozen": True}

    start_marker: str = Field(default=DEFAULT_START_MARKER)
    end_marker: str = Field(default=DEFAULT_END_MARKER)

    @field_validator("start_marker", "end_marker")
    @classmethod
    def validate_marker_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("marker cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_markers_distinct(self) -> "EmbeddingSettings":
        if self.start_marker == self.end_marker:
            raise ValueError("start_marker and end_marker must differ")
        return self


class PacconfSettings(BaseModel):
    """Top-level settings. Every section has defaults."""

    model_config = {"frozen": True}

    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)


def load_settings(config_path: Path) -> PacconfSettings:
    """Load settings from a YAML/TOML/JSON file with environment overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (PACCONF_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: PACCONF_STORE__VALIDATION_POLICY for nested keys.

    Raises:
        ValidationError: If settings fail Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="PACCONF",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {
        k.lower(): _lower_keys(v)
        for k, v in dynaconf_settings.as_dict().items()
        if k not in internal_keys
    }
    return PacconfSettings(**raw_config)


def _lower_keys(value: object) -> object:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
