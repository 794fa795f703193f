"""Configuration management for nextaction."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

NEXTACTION_HOME = Path(os.environ.get("NEXTACTION_HOME", Path.home() / "nextaction"))
CONFIG_FILE = NEXTACTION_HOME / "config" / "nextaction.conf"
DATA_DIR = NEXTACTION_HOME / "data"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """nextaction configuration."""

    tasks_file: str = field(default_factory=lambda: str(DATA_DIR / "tasks.json"))
    due_soon_days: int = 7
    log_level: str = "WARNING"
    default_project: str = ""


def _strip_value(value: str) -> str:
    """Unquote a value, or drop an inline comment from an unquoted one."""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from nextaction.conf file."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _strip_value(value.strip())

        match key:
            case "tasks_file":
                config.tasks_file = value
            case "due_soon_days":
                try:
                    config.due_soon_days = max(1, int(value))
                except ValueError:
                    logger.warning(f"Invalid DUE_SOON_DAYS {value!r}, keeping {config.due_soon_days}")
            case "log_level":
                if value.upper() in LOG_LEVELS:
                    config.log_level = value.upper()
                else:
                    logger.warning(f"Unknown LOG_LEVEL {value!r}, keeping {config.log_level}")
            case "default_project":
                config.default_project = value
            case _:
                logger.warning(f"Unknown config key {key!r} in {config_file}")

    return config
