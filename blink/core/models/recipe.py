"""
Recipe — the declarative description of a package.

A recipe carries the package's metadata, where to download its source
archive and what it must hash to, and the ordered shell commands of its
build lifecycle. Recipes are authored externally and cached on disk as
JSON (or TOML) documents keyed by package name.

The document keys follow the published recipe format (``type``,
``sha256``, ``opt_dependencies``); the model exposes descriptive
attribute names and accepts either spelling.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ArchiveType(str, Enum):
    """Supported source archive formats.

    Dispatch is always on the declared type, never sniffed from bytes.
    """

    TAR = "tar"
    TAR_GZ = "tar.gz"
    TAR_XZ = "tar.xz"
    TAR_BZ2 = "tar.bz2"
    TAR_ZST = "tar.zst"
    ZIP = "zip"

    @classmethod
    def parse(cls, value: str | ArchiveType) -> ArchiveType:
        """Resolve a declared type (including short aliases) to a member.

        Raises:
            ValueError: If the tag is not a supported archive type.
        """
        if isinstance(value, cls):
            return value
        tag = str(value).strip().lower().lstrip(".")
        tag = _ALIASES.get(tag, tag)
        try:
            return cls(tag)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unsupported archive type '{value}'. Valid: {valid}") from None


_ALIASES = {
    "tgz": "tar.gz",
    "txz": "tar.xz",
    "tbz2": "tar.bz2",
    "tbz": "tar.bz2",
    "tzst": "tar.zst",
}


class RecipeSource(BaseModel):
    """Where the source archive lives and what it must hash to."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    archive_type: ArchiveType = Field(alias="type")
    expected_sha256: str = Field(alias="sha256")

    @field_validator("archive_type", mode="before")
    @classmethod
    def _parse_archive_type(cls, value: str | ArchiveType) -> ArchiveType:
        return ArchiveType.parse(value)


class OptionalDependencyGroup(BaseModel):
    """A group of alternative optional dependencies (informational only)."""

    id: int = 0
    description: str = ""
    options: list[str] = Field(default_factory=list)
    default: str = ""


class BuildInstructions(BaseModel):
    """Environment and ordered lifecycle commands."""

    env: dict[str, str] = Field(default_factory=dict)
    prepare: list[str] = Field(default_factory=list)
    install: list[str] = Field(default_factory=list)
    uninstall: list[str] = Field(default_factory=list)


class Recipe(BaseModel):
    """A package recipe.

    ``dependencies`` and ``optional_dependency_groups`` are stored as-is.
    Nothing in Blink resolves, orders, or conflict-checks them.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    version: str
    release: int = 0
    description: str = ""
    author: str = ""
    license: str = ""

    source: RecipeSource
    dependencies: dict[str, str] = Field(default_factory=dict)
    optional_dependency_groups: list[OptionalDependencyGroup] = Field(
        default_factory=list,
        alias="opt_dependencies",
    )
    build: BuildInstructions = Field(default_factory=BuildInstructions)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _none_is_empty_mapping(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("optional_dependency_groups", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: object) -> object:
        return [] if value is None else value

    def summary(self, repo_url: str = "") -> str:
        """Human-readable summary block, as shown by ``info`` and ``install``."""
        lines = []
        if repo_url:
            lines += [f"Repository: {repo_url}", ""]
        lines += [
            f"Name: {self.name}",
            f"Version: {self.version}",
            f"Description: {self.description}",
            f"Author: {self.author}",
            f"License: {self.license}",
        ]
        return "\n".join(lines)
