"""
Repository config — which version-controlled recipe indexes to sync.

The document is a YAML mapping of repository name to its remote:

    core:
      git_url: https://github.com/Aperture-OS/testing-blink-repo.git
      branch: main

A default single-entry document is written the first time it is needed.
The loaded map is read-only for the rest of the invocation.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

from blink.core.config.loader import Settings
from blink.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORIES = {
    "pseudoRepository": {
        "git_url": "https://github.com/Aperture-OS/testing-blink-repo.git",
        "branch": "main",
    },
}


class RepoConfig(BaseModel):
    """One recipe repository."""

    name: str
    url: str
    ref: str = "main"


def create_default_repositories(path: Path) -> None:
    """Write the default repository document to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(DEFAULT_REPOSITORIES, sort_keys=False),
        encoding="utf-8",
    )
    logger.info("Default repository config created at %s", path)


def load_repositories(settings: Settings) -> dict[str, RepoConfig]:
    """Load the repository map, creating the default document if absent.

    Raises:
        ConfigError: On unreadable/invalid YAML, bad entries, or an empty map.
    """
    path = settings.repositories_path
    if not path.is_file():
        logger.info("Repository config not found, creating default at %s", path)
        try:
            create_default_repositories(path)
        except OSError as e:
            raise ConfigError(f"Cannot create default repository config at {path}: {e}") from e

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not data:
        raise ConfigError(f"No repositories configured in {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    repos: dict[str, RepoConfig] = {}
    for name, entry in data.items():
        if not isinstance(entry, dict) or not entry.get("git_url"):
            raise ConfigError(f"Repository '{name}' in {path} is missing 'git_url'")
        repos[str(name)] = RepoConfig(
            name=str(name),
            url=str(entry["git_url"]),
            ref=str(entry.get("branch") or "main"),
        )

    logger.info("Loaded %d repositories from %s", len(repos), path)
    return repos

