"""
Settings loader — builds the one Settings value for this invocation.

Settings are read once at process start and passed to every component
that needs a path or URL. Nothing below the CLI reads environment
variables or module globals for configuration.

Lookup order for the settings file:
    explicit --config path  >  BLINK_CONFIG env var  >  /etc/blink/blink.yml

The cache root can additionally be overridden with --path or BLINK_ROOT.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from blink.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path("/etc/blink/blink.yml")
DEFAULT_ROOT = Path("/var/blink")
DEFAULT_BASE_URL = (
    "https://raw.githubusercontent.com/Aperture-OS/testing-blink-repo/refs/heads/main/pseudoRepo/"
)
DEFAULT_REPO_URL = "https://github.com/Aperture-OS/testing-blink-repo/blob/main/pseudoRepo"


class Settings(BaseModel):
    """Resolved configuration for one invocation."""

    root: Path = DEFAULT_ROOT
    base_url: str = DEFAULT_BASE_URL
    repo_url: str = DEFAULT_REPO_URL
    recipe_format: Literal["json", "toml"] = "json"
    require_root: bool = True
    http_timeout: float | None = None
    build_timeout: float | None = None

    @field_validator("base_url")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    # ── Derived paths ───────────────────────────────────────────

    @property
    def etc_dir(self) -> Path:
        return self.root / "etc"

    @property
    def lock_path(self) -> Path:
        return self.etc_dir / "blink.lock"

    @property
    def manifest_path(self) -> Path:
        return self.etc_dir / "manifest.json"

    @property
    def repositories_path(self) -> Path:
        return self.etc_dir / "repositories.yml"

    @property
    def recipes_dir(self) -> Path:
        return self.root / "recipes"

    @property
    def sources_dir(self) -> Path:
        return self.root / "sources"

    @property
    def build_root(self) -> Path:
        return self.root / "build"

    @property
    def repo_cache(self) -> Path:
        return self.root / "repositories"


def find_settings_file(explicit: Path | None = None) -> Path | None:
    """Return the settings file to read, or None to use defaults.

    Raises:
        ConfigError: If an explicitly requested file does not exist.
    """
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Settings file not found: {explicit}")
        return explicit

    env_path = os.environ.get("BLINK_CONFIG")
    if env_path:
        path = Path(env_path)
        if not path.is_file():
            raise ConfigError(f"Settings file from BLINK_CONFIG not found: {path}")
        return path

    if DEFAULT_SETTINGS_FILE.is_file():
        return DEFAULT_SETTINGS_FILE
    return None


def load_settings(path: Path | None = None, root: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit settings file (``--config``).
        root: Explicit cache root (``--path``). Wins over everything else.

    Returns:
        Validated Settings.

    Raises:
        ConfigError: If the file is unreadable, not YAML, not a mapping,
            or holds invalid values.
    """
    settings_file = find_settings_file(path)
    data: dict = {}

    if settings_file is not None:
        logger.debug("Loading settings from %s", settings_file)
        try:
            raw = settings_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {settings_file}: {e}") from e
        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {settings_file}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Expected a YAML mapping in {settings_file}, got {type(loaded).__name__}"
            )
        data = loaded

    env_root = os.environ.get("BLINK_ROOT")
    if root is not None:
        data["root"] = root
    elif env_root:
        data["root"] = env_root

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        source = settings_file or "defaults"
        raise ConfigError(f"Invalid settings ({source}): {e}") from e

    logger.info("Using cache root %s", settings.root)
    return settings
