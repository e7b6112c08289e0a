"""Settings management for achfile.

Provides JSON-backed configuration with sensible defaults for the writer and
the entry report.
"""

import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Environment variable the CLI consults for a settings file
CONFIG_ENV_VAR = "ACHFILE_CONFIG"

SUPPORTED_REPORT_FORMATS = {'xlsx', 'csv'}

# Default settings (used when no settings file is given)
DEFAULT_SETTINGS = {
    "$schema": "achfile_settings_v1",
    "version": "1.0",

    "writer": {
        "crlf": False,
        "renumber_batches": True
    },

    "reports": {
        "default_format": "xlsx",
        "sheet_title": "Entries",
        "money_format": "#,##0.00",
        "include_removed": True
    }
}


@dataclass
class WriterConfig:
    """Switches applied when an ACH file is written back out."""
    crlf: bool = False  # Terminate every record with \r\n
    renumber: bool = True  # Assign dense batch numbers 1..n on write


@dataclass
class ReportConfig:
    """Configuration for entry report generation."""
    default_format: str = "xlsx"
    sheet_title: str = "Entries"
    money_format: str = "#,##0.00"
    include_removed: bool = True

    def resolve_format(self, output_path: Path) -> str:
        """Pick the output format from the file suffix, falling back to the default."""
        suffix = Path(output_path).suffix.lower().lstrip(".")
        if suffix in SUPPORTED_REPORT_FORMATS:
            return suffix
        return self.default_format


class Settings:
    """
    achfile settings.

    Usage:
        settings = load_settings(Path("achfile.json"))
        ach_file.apply_config(settings.writer)
    """

    def __init__(self, data: Dict[str, Any]):
        """Initialize from a settings dictionary."""
        self._raw = data

        writer = data.get("writer", {})
        self.writer = WriterConfig(
            crlf=bool(writer.get("crlf", False)),
            renumber=bool(writer.get("renumber_batches", True)),
        )

        reports = data.get("reports", {})
        default_format = reports.get("default_format", "xlsx")
        if default_format not in SUPPORTED_REPORT_FORMATS:
            logger.warning(f"Unsupported report format {default_format!r}, using xlsx")
            default_format = "xlsx"
        self.reports = ReportConfig(
            default_format=default_format,
            sheet_title=reports.get("sheet_title", "Entries"),
            money_format=reports.get("money_format", "#,##0.00"),
            include_removed=bool(reports.get("include_removed", True)),
        )

    @property
    def raw(self) -> Dict[str, Any]:
        return self._raw

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries, override takes precedence."""
        result = base.copy()
        for key, value in override.items():
            if key not in base:
                logger.warning(f"Ignoring unknown setting: {key}")
                continue
            if isinstance(result[key], dict):
                if not isinstance(value, dict):
                    logger.warning(f"Setting {key} must be an object, using defaults")
                    continue
                result[key] = Settings._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings with fallback to defaults.

    Args:
        path: JSON settings file (optional)

    Returns:
        Settings instance
    """
    data = copy.deepcopy(DEFAULT_SETTINGS)

    if path is None:
        return Settings(data)

    path = Path(path)
    if not path.exists():
        logger.warning(f"Settings file not found, using defaults: {path}")
        return Settings(data)

    try:
        with open(path, encoding='utf-8') as f:
            user_data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load settings from {path}: {e}")
        return Settings(data)

    if not isinstance(user_data, dict):
        logger.warning(f"Settings file {path} does not contain a JSON object")
        return Settings(data)

    data = Settings._deep_merge(data, user_data)
    logger.debug(f"Loaded settings from {path}")
    return Settings(data)
