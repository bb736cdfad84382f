"""
Tests for settings loading and the repository config.
"""

import textwrap
from pathlib import Path

import pytest

from blink.core.config.loader import DEFAULT_BASE_URL, DEFAULT_ROOT, Settings, load_settings
from blink.core.config.repositories import DEFAULT_REPOSITORIES, load_repositories
from blink.core.errors import ConfigError


class TestSettings:
    def test_defaults(self):
        s = load_settings()
        assert s.root == DEFAULT_ROOT
        assert s.base_url == DEFAULT_BASE_URL
        assert s.recipe_format == "json"
        assert s.require_root is True
        assert s.http_timeout is None

    def test_derived_paths(self, tmp_path: Path):
        s = Settings(root=tmp_path)
        assert s.lock_path == tmp_path / "etc" / "blink.lock"
        assert s.manifest_path == tmp_path / "etc" / "manifest.json"
        assert s.repositories_path == tmp_path / "etc" / "repositories.yml"
        assert s.recipes_dir == tmp_path / "recipes"
        assert s.sources_dir == tmp_path / "sources"
        assert s.build_root == tmp_path / "build"
        assert s.repo_cache == tmp_path / "repositories"

    def test_base_url_gets_trailing_slash(self):
        assert Settings(base_url="http://x/recipes").base_url == "http://x/recipes/"

    def test_from_file(self, tmp_path: Path):
        config = tmp_path / "blink.yml"
        config.write_text(textwrap.dedent("""\
            root: /srv/blink
            base_url: http://mirror.local/recipes/
            recipe_format: toml
            require_root: false
            http_timeout: 15
        """))

        s = load_settings(config)
        assert s.root == Path("/srv/blink")
        assert s.base_url == "http://mirror.local/recipes/"
        assert s.recipe_format == "toml"
        assert s.require_root is False
        assert s.http_timeout == 15

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        config = tmp_path / "blink.yml"
        config.write_text("")
        assert load_settings(config).root == DEFAULT_ROOT

    def test_explicit_root_wins(self, tmp_path: Path, monkeypatch):
        config = tmp_path / "blink.yml"
        config.write_text("root: /from/file\n")
        monkeypatch.setenv("BLINK_ROOT", "/from/env")

        assert load_settings(config, root=tmp_path / "cli").root == tmp_path / "cli"
        assert load_settings(config).root == Path("/from/env")

    def test_env_config_path(self, tmp_path: Path, monkeypatch):
        config = tmp_path / "env.yml"
        config.write_text("repo_url: http://env.example/repo\n")
        monkeypatch.setenv("BLINK_CONFIG", str(config))
        assert load_settings().repo_url == "http://env.example/repo"

    def test_explicit_missing_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yml")

    def test_env_missing_raises(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BLINK_CONFIG", str(tmp_path / "missing.yml"))
        with pytest.raises(ConfigError, match="BLINK_CONFIG"):
            load_settings()

    def test_invalid_yaml(self, tmp_path: Path):
        config = tmp_path / "blink.yml"
        config.write_text("root: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(config)

    def test_not_a_mapping(self, tmp_path: Path):
        config = tmp_path / "blink.yml"
        config.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(config)

    def test_invalid_value(self, tmp_path: Path):
        config = tmp_path / "blink.yml"
        config.write_text("recipe_format: xml\n")
        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(config)


class TestRepositories:
    def test_default_created_when_missing(self, tmp_path: Path):
        s = Settings(root=tmp_path)
        repos = load_repositories(s)

        assert s.repositories_path.is_file()
        assert list(repos) == list(DEFAULT_REPOSITORIES)
        repo = repos["pseudoRepository"]
        assert repo.url == "https://github.com/Aperture-OS/testing-blink-repo.git"
        assert repo.ref == "main"

    def test_custom_document(self, tmp_path: Path):
        s = Settings(root=tmp_path)
        s.repositories_path.parent.mkdir(parents=True)
        s.repositories_path.write_text(textwrap.dedent("""\
            core:
              git_url: https://git.example/core.git
              branch: stable
            extra:
              git_url: https://git.example/extra.git
        """))

        repos = load_repositories(s)
        assert list(repos) == ["core", "extra"]
        assert repos["core"].ref == "stable"
        assert repos["extra"].ref == "main"

    def test_missing_git_url(self, tmp_path: Path):
        s = Settings(root=tmp_path)
        s.repositories_path.parent.mkdir(parents=True)
        s.repositories_path.write_text("core:\n  branch: main\n")
        with pytest.raises(ConfigError, match="git_url"):
            load_repositories(s)

    def test_empty_document(self, tmp_path: Path):
        s = Settings(root=tmp_path)
        s.repositories_path.parent.mkdir(parents=True)
        s.repositories_path.write_text("")
        with pytest.raises(ConfigError, match="No repositories"):
            load_repositories(s)
