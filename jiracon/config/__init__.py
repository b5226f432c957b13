"""Application configuration + YAML config loader for jiracon.

All env vars defined here with JIRACON_ prefix.
YAML loaders: load_config_yaml(), parse_config_text(), write_config_text()
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings

from jiracon.config.loader import (
    CONFIG_FILE_NAME, DATA_FILE_NAME, ensure_file, load_config_yaml,
    parse_config_text, read_config_text, resolve_account, write_config_text,
)
from jiracon.config.schema import AccountYAML, ConfigYAML, DataYAML, PreferencesYAML, ProjectYAML, RosterEntry
from jiracon.config.store import ProjectStore


class JiraconConfig(BaseSettings):
    # ── App ──
    app_name: str = "jiracon"
    debug: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None              # defaults to <config_dir>/jiracon.log
    config_dir: str = "~/.jiracon"              # holds config.yml and data.yml

    # ── Jira account (override config.yml) ──
    base_url: str = ""
    username: str = ""
    password: str = ""                          # API token for Jira Cloud

    # ── HTTP ──
    request_timeout: float = 30.0               # seconds per request

    # ── Prompts ──
    page_size: int = 10                         # rows shown before a list scrolls
    fuzzy_score_cutoff: float = 50.0            # rapidfuzz WRatio minimum (0-100)

    model_config = {"env_prefix": "JIRACON_", "env_file": ".env", "extra": "ignore"}

    @property
    def config_path(self) -> Path:
        return Path(self.config_dir).expanduser()

    @property
    def log_path(self) -> Path:
        if self.log_file:
            return Path(self.log_file).expanduser()
        return self.config_path / "jiracon.log"


__all__ = [
    "JiraconConfig",
    "CONFIG_FILE_NAME",
    "DATA_FILE_NAME",
    "ensure_file",
    "load_config_yaml",
    "parse_config_text",
    "read_config_text",
    "write_config_text",
    "resolve_account",
    "AccountYAML",
    "ConfigYAML",
    "DataYAML",
    "PreferencesYAML",
    "ProjectYAML",
    "RosterEntry",
    "ProjectStore",
]
