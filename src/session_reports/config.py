"""Paths, defaults, and environment detection."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


ENV_FILE_TEMPLATE = """\
# Session Reports: server settings
# This file is read by session-reports before any command runs.
# Values already present in the environment take precedence.

# SESSION_REPORTS_DATA_FILE=~/.local/share/session-reports/reports.json
# SESSION_REPORTS_HOST=127.0.0.1
# SESSION_REPORTS_PORT=3000
# SESSION_REPORTS_MAX_BYTES=52428800
# SESSION_REPORTS_LOG_LEVEL=INFO
"""


@dataclass
class Config:
    """Runtime configuration, resolved from env vars and defaults."""

    # Flat JSON file holding every report
    data_file: Path = field(
        default_factory=lambda: Path(
            os.environ.get(
                "SESSION_REPORTS_DATA_FILE",
                _xdg_data_home() / "session-reports" / "reports.json",
            )
        ).expanduser()
    )

    # Env file seeding os.environ
    env_file: Path = field(default_factory=lambda: _xdg_config_home() / "session-reports" / "env")

    # HTTP server
    host: str = field(default_factory=lambda: os.environ.get("SESSION_REPORTS_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("SESSION_REPORTS_PORT", 3000))
    max_content_length: int = field(
        default_factory=lambda: _env_int("SESSION_REPORTS_MAX_BYTES", 50 * 1024 * 1024)
    )  # session uploads can be large

    log_level: str = field(default_factory=lambda: os.environ.get("SESSION_REPORTS_LOG_LEVEL", "INFO").upper())

    def ensure_data_dir(self) -> None:
        self.data_file.parent.mkdir(parents=True, exist_ok=True)

    def load_env_file(self) -> None:
        """Load settings from the env file into os.environ (if not already set)."""
        if not self.env_file.exists():
            return
        for line in self.env_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            # Don't overwrite keys already in the environment
            if key and key not in os.environ:
                os.environ[key] = value

    def ensure_env_file(self) -> bool:
        """Create the env file from template if it doesn't exist. Returns True if created."""
        if self.env_file.exists():
            return False
        self.env_file.parent.mkdir(parents=True, exist_ok=True)
        self.env_file.write_text(ENV_FILE_TEMPLATE)
        self.env_file.chmod(0o600)
        return True
