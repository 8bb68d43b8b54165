"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, PrivateAttr, field_validator

from .domain.models import SlotFormat
from .domain.timezones import TimezoneLike, resolve_timezone


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Asia/Colombo"
    fallback_utc_offset_minutes: int = 330  # +05:30
    data_file: Path = Path("salon_data.json")
    max_days_ahead: Optional[int] = 730
    slot_format: SlotFormat = SlotFormat.ISO
    log_level: str = "WARNING"

    _base_dir: Optional[Path] = PrivateAttr(default=None)

    @field_validator("fallback_utc_offset_minutes")
    @classmethod
    def validate_offset(cls, value: int) -> int:
        """Real-world offsets lie between UTC-12:00 and UTC+14:00."""
        if not -720 <= value <= 840:
            raise ValueError(f"fallback_utc_offset_minutes must be between -720 and 840, got {value}")
        return value

    @field_validator("max_days_ahead")
    @classmethod
    def validate_max_days_ahead(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("max_days_ahead must not be negative")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def get_timezone(self) -> TimezoneLike:
        """Resolve the operating timezone, falling back to the fixed offset."""
        return resolve_timezone(self.timezone, self.fallback_utc_offset_minutes)

    def get_data_file(self) -> Path:
        """Data file path; relative paths resolve against the config file's folder."""
        if self.data_file.is_absolute() or self._base_dir is None:
            return self.data_file
        return self._base_dir / self.data_file

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        config._base_dir = config_path.parent
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    config_path = Path.cwd() / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
