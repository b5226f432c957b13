"""Load and validate config.yml / data.yml into Python objects.

Resolution order for config.yml:
  1. Path passed explicitly by caller
  2. <config_dir>/config.yml (copied from the bundled default on first use)

Environment settings (JIRACON_BASE_URL etc.) override the account section.
"""

import shutil
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from jiracon.config.schema import AccountYAML, ConfigYAML
from jiracon.exceptions import ConfigError

# Paths to bundled defaults
_DEFAULTS_DIR = Path(__file__).parent / "defaults"
_DEFAULT_CONFIG = _DEFAULTS_DIR / "config.yml"

CONFIG_FILE_NAME = "config.yml"
DATA_FILE_NAME = "data.yml"


def ensure_file(config_dir: Path, name: str) -> Path:
    """Return <config_dir>/<name>, seeding it from the bundled default if missing."""
    target = Path(config_dir).expanduser() / name
    if not target.exists():
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(_DEFAULTS_DIR / name, target)
    return target


def parse_config_text(text: str, path: str = "") -> ConfigYAML:
    """Parse config.yml content → ConfigYAML.

    Raises:
        ConfigError: the text is not valid YAML or does not match the schema.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML: {exc}", path=path) from exc
    if raw is not None and not isinstance(raw, dict):
        raise ConfigError("Configuration must be a YAML mapping", path=path)
    try:
        return ConfigYAML.model_validate(raw or {})
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}", path=path) from exc


def load_config_yaml(path: Optional[Path] = None, config_dir: Optional[Path] = None) -> ConfigYAML:
    """Load config.yml → ConfigYAML.

    Args:
        path:       Explicit path to config.yml.
        config_dir: Directory searched (and seeded) when no path is given.
    """
    if path is not None:
        resolved = Path(path)
        if not resolved.exists():
            raise ConfigError(f"Config file not found: {resolved}", path=str(resolved))
    elif config_dir is not None:
        resolved = ensure_file(config_dir, CONFIG_FILE_NAME)
    else:
        resolved = _DEFAULT_CONFIG
    return parse_config_text(resolved.read_text(encoding="utf-8"), path=str(resolved))


def read_config_text(path: Path) -> str:
    return Path(path).read_text(encoding="utf-8")


def write_config_text(path: Path, text: str) -> ConfigYAML:
    """Validate then save config.yml content. Nothing is written if invalid."""
    parsed = parse_config_text(text, path=str(path))
    Path(path).write_text(text, encoding="utf-8")
    return parsed


def resolve_account(settings, file_config: ConfigYAML) -> AccountYAML:
    """Merge credentials: non-empty environment settings win over config.yml."""
    account = file_config.account
    return AccountYAML(
        base_url=settings.base_url or account.base_url,
        username=settings.username or account.username,
        password=settings.password or account.password,
    )
