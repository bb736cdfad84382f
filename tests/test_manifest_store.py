"""
Tests for the manifest store — persistence, uniqueness, and atomic writes.
"""

import json
import os
from pathlib import Path

import pytest

from blink.core.errors import ManifestError
from blink.core.models.manifest import InstalledEntry, Manifest
from blink.core.persistence.manifest_store import ManifestStore


def _entry(name: str, version: str = "1.0", release: int = 1) -> InstalledEntry:
    return InstalledEntry(name=name, version=version, release=release, installed_at=1700000000)


class TestLoadSave:
    def test_ensure_creates_empty_manifest(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "etc" / "manifest.json")
        store.ensure()

        data = json.loads(store.path.read_text())
        assert data == {"installed": []}

    def test_ensure_is_idempotent(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.ensure()
        store.add(_entry("foo"))
        store.ensure()
        assert store.load().names() == ["foo"]

    def test_load_missing_is_empty(self, tmp_path: Path):
        manifest = ManifestStore(tmp_path / "manifest.json").load()
        assert manifest.installed == []

    def test_load_corrupt_raises(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text("not json at all {{{")
        with pytest.raises(ManifestError, match="Corrupt manifest"):
            ManifestStore(path).load()

    def test_load_invalid_shape_raises(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps({"installed": [{"version": "1.0"}]}))
        with pytest.raises(ManifestError, match="Invalid manifest"):
            ManifestStore(path).load()

    def test_document_layout(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.add(_entry("foo", "2.3", 4))

        data = json.loads(store.path.read_text())
        assert data["installed"] == [
            {"name": "foo", "version": "2.3", "release": 4, "installed_at": 1700000000},
        ]

    def test_reads_original_layout(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text(
            '{"installed":[{"name":"zlib","version":"1.3","release":2,"installed_at":1735000000}]}'
        )
        entry = ManifestStore(path).has("zlib")
        assert entry is not None
        assert entry.release == 2


class TestMutations:
    def test_add_then_has(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        assert store.add(_entry("foo")) is True
        assert store.has("foo") is not None
        assert store.has("bar") is None

    def test_add_duplicate_is_noop(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.add(_entry("foo", "1.0"))
        assert store.add(_entry("foo", "2.0")) is False

        manifest = store.load()
        assert manifest.names() == ["foo"]
        assert manifest.get("foo").version == "1.0"

    def test_order_is_preserved(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        for name in ("c", "a", "b"):
            store.add(_entry(name))
        assert store.load().names() == ["c", "a", "b"]

    def test_remove_present(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.add(_entry("foo"))
        store.add(_entry("bar"))

        assert store.remove("foo") is True
        assert store.load().names() == ["bar"]

    def test_remove_absent(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.add(_entry("foo"))
        assert store.remove("nope") is False
        assert store.load().names() == ["foo"]

    def test_replace_keeps_one_entry(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.add(_entry("foo", "1.0", 1))
        store.add(_entry("bar"))
        store.replace(_entry("foo", "1.1", 2))

        manifest = store.load()
        assert sorted(manifest.names()) == ["bar", "foo"]
        assert manifest.get("foo").version == "1.1"
        assert manifest.get("foo").release == 2


class TestAtomicity:
    def test_no_temp_files_left(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.add(_entry("foo"))
        store.add(_entry("bar"))
        assert list(tmp_path.glob(".manifest_*.tmp")) == []

    def test_failed_rename_keeps_previous_document(self, tmp_path: Path, monkeypatch):
        store = ManifestStore(tmp_path / "manifest.json")
        store.add(_entry("foo"))
        before = store.path.read_bytes()

        def _fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", _fail)

        with pytest.raises(ManifestError, match="disk full"):
            store.add(_entry("bar"))

        assert store.path.read_bytes() == before
        assert list(tmp_path.glob(".manifest_*.tmp")) == []

    def test_save_overwrites_whole_document(self, tmp_path: Path):
        store = ManifestStore(tmp_path / "manifest.json")
        store.save(Manifest(installed=[_entry(f"pkg{i}") for i in range(50)]))
        store.save(Manifest(installed=[_entry("only")]))

        assert json.loads(store.path.read_text())["installed"][0]["name"] == "only"
        assert store.load().names() == ["only"]
