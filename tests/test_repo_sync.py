"""
Tests for the repository synchronizer against a recording git adapter.
"""

import pytest

from blink.adapters.mock import MockAdapter
from blink.core.config.repositories import RepoConfig
from blink.core.errors import SyncError
from blink.core.services.repo_sync import RepositorySynchronizer

REPOS = {
    "core": RepoConfig(name="core", url="https://git.example/core.git", ref="main"),
    "extra": RepoConfig(name="extra", url="https://git.example/extra.git", ref="stable"),
}


class TestSync:
    def test_clones_when_missing(self, settings):
        git = MockAdapter(adapter_name="git")
        outcomes = RepositorySynchronizer(settings, REPOS, git).sync()

        assert [o.action for o in outcomes] == ["cloned", "cloned"]
        assert git.operations() == ["clone", "clone"]

        params = git.call_log[1].action.params
        assert params["url"] == "https://git.example/extra.git"
        assert params["ref"] == "stable"
        assert params["path"] == str(settings.repo_cache / "extra")
        assert git.call_log[0].working_dir == str(settings.repo_cache)

    def test_pulls_when_present(self, settings):
        (settings.repo_cache / "core").mkdir(parents=True)
        git = MockAdapter(adapter_name="git")

        outcomes = RepositorySynchronizer(settings, REPOS, git).sync()

        assert [(o.name, o.action) for o in outcomes] == [("core", "pulled"), ("extra", "cloned")]
        assert git.operations() == ["pull", "clone"]

    def test_force_fetches_and_resets(self, settings):
        for name in REPOS:
            (settings.repo_cache / name).mkdir(parents=True)
        git = MockAdapter(adapter_name="git")

        outcomes = RepositorySynchronizer(settings, REPOS, git).sync(force=True)

        assert [o.action for o in outcomes] == ["reset", "reset"]
        assert git.operations() == ["fetch", "reset", "fetch", "reset"]
        assert git.call_log[3].action.params["ref"] == "stable"

    def test_failure_aborts_remaining(self, settings):
        git = MockAdapter(adapter_name="git")
        git.set_failure("sync:core:clone", stderr="fatal: repository not found")

        with pytest.raises(SyncError) as exc_info:
            RepositorySynchronizer(settings, REPOS, git).sync()

        assert "core" in str(exc_info.value)
        assert "repository not found" in str(exc_info.value)
        assert git.call_count == 1

    def test_creates_cache_dir(self, settings):
        RepositorySynchronizer(settings, {}, MockAdapter(adapter_name="git")).sync()
        assert settings.repo_cache.is_dir()

    def test_outcome_to_dict(self, settings):
        outcome = RepositorySynchronizer(settings, REPOS, MockAdapter(adapter_name="git")).sync()[0]
        assert outcome.to_dict() == {
            "name": "core",
            "path": str(settings.repo_cache / "core"),
            "action": "cloned",
        }
