"""Configuration management for the conversion tools."""

import os
import tempfile
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()

_TRUE_VALUES = ("1", "true", "yes", "on")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


@dataclass
class Config:
    """Application configuration."""

    # Merge settings
    strict: bool = field(default_factory=lambda: _env_flag("LOCBRIDGE_STRICT"))
    source_language: str = field(
        default_factory=lambda: os.getenv("LOCBRIDGE_SOURCE_LANGUAGE", "")
    )

    # Output settings
    include_stale: bool = field(default_factory=lambda: _env_flag("LOCBRIDGE_INCLUDE_STALE"))
    table_name: str = field(
        default_factory=lambda: os.getenv("LOCBRIDGE_TABLE_NAME", "Localizable")
    )
    catalog_file_name: str = "Localizable.xcstrings"

    # Web project storage
    storage_dir: str = field(
        default_factory=lambda: os.getenv(
            "LOCBRIDGE_STORAGE_DIR",
            os.path.join(tempfile.gettempdir(), "locbridge-projects"),
        )
    )

    log_level: str = field(
        default_factory=lambda: os.getenv("LOCBRIDGE_LOG_LEVEL", "WARNING").upper()
    )

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if not self.table_name.strip():
            errors.append("LOCBRIDGE_TABLE_NAME must not be empty")
        if "/" in self.table_name or "\\" in self.table_name:
            errors.append("LOCBRIDGE_TABLE_NAME must be a file name, not a path")
        if self.log_level not in LOG_LEVELS:
            errors.append(f"LOCBRIDGE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return errors


# Global config instance
config = Config()
