"""
Shared test fixtures and configuration.

Recipes and source archives are served from a throwaway directory by a
local ``http.server`` so every network path runs for real.
"""

import functools
import hashlib
import io
import json
import tarfile
import threading
import zipfile
from dataclasses import dataclass
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest
import zstandard

from blink.core.config.loader import Settings


@dataclass
class HttpRoot:
    """A directory served over HTTP."""

    directory: Path
    url: str


class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format, *args):  # noqa: A002
        pass


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    """Keep the host's Blink config and proxies out of every test."""
    for var in ("BLINK_CONFIG", "BLINK_ROOT", "BLINK_LOG_LEVEL", "BLINK_LOG_FILE", "BLINK_LOG_FILE_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    for var in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setattr("blink.core.config.loader.DEFAULT_SETTINGS_FILE", tmp_path / "no-such-blink.yml")


@pytest.fixture
def http_root(tmp_path: Path):
    """Serve ``tmp_path/www`` on an ephemeral localhost port."""
    directory = tmp_path / "www"
    (directory / "recipes").mkdir(parents=True)
    (directory / "sources").mkdir()

    handler = functools.partial(_QuietHandler, directory=str(directory))
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    host, port = server.server_address[:2]
    yield HttpRoot(directory=directory, url=f"http://{host}:{port}")

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


@pytest.fixture
def settings(tmp_path: Path, http_root: HttpRoot) -> Settings:
    """Settings rooted in a temp dir, pointed at the local recipe index."""
    return Settings(
        root=tmp_path / "blink",
        base_url=f"{http_root.url}/recipes/",
        repo_url="https://example.invalid/recipes",
        require_root=False,
        http_timeout=10,
        build_timeout=30,
    )


# ── Archive builders ────────────────────────────────────────────────


def build_archive(path: Path, kind: str, files: dict[str, str | bytes], modes: dict[str, int] | None = None) -> Path:
    """Write an archive of ``kind`` holding ``files`` (name → content)."""
    modes = modes or {}
    path.parent.mkdir(parents=True, exist_ok=True)

    if kind == "zip":
        with zipfile.ZipFile(path, "w") as zf:
            for name, content in files.items():
                info = zipfile.ZipInfo(name)
                info.external_attr = (0o100000 | modes.get(name, 0o644)) << 16
                zf.writestr(info, content)
        return path

    buf = io.BytesIO()
    tar_mode = {"tar": "w", "tar.gz": "w:gz", "tar.xz": "w:xz", "tar.bz2": "w:bz2", "tar.zst": "w"}[kind]
    with tarfile.open(fileobj=buf, mode=tar_mode) as tar:
        for name, content in files.items():
            data = content.encode() if isinstance(content, str) else content
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = modes.get(name, 0o644)
            tar.addfile(info, io.BytesIO(data))

    raw = buf.getvalue()
    if kind == "tar.zst":
        raw = zstandard.ZstdCompressor().compress(raw)
    path.write_bytes(raw)
    return path


@pytest.fixture
def archive_builder():
    """Expose ``build_archive`` to tests."""
    return build_archive


@pytest.fixture
def publish(http_root: HttpRoot):
    """Publish a recipe and its source archive on the local index.

    Returns a callable; keyword arguments override recipe fields. Pass
    ``sha256="..."`` to publish a deliberately wrong digest.
    """

    def _publish(
        name: str = "hello",
        version: str = "1.0",
        release: int = 1,
        files: dict[str, str] | None = None,
        kind: str = "tar.gz",
        prepare: list[str] | None = None,
        install: list[str] | None = None,
        uninstall: list[str] | None = None,
        env: dict[str, str] | None = None,
        sha256: str | None = None,
    ) -> dict:
        archive_file = f"{name}-{version}.{kind}"
        top = f"{name}-{version}"
        files = files or {f"{top}/README": f"{name} {version}\n"}
        archive = build_archive(http_root.directory / "sources" / archive_file, kind, files)

        recipe = {
            "name": name,
            "version": version,
            "release": release,
            "description": f"The {name} package",
            "author": "Aperture OS",
            "license": "GPL-3.0",
            "source": {
                "url": f"{http_root.url}/sources/{archive_file}",
                "type": kind,
                "sha256": sha256 or hashlib.sha256(archive.read_bytes()).hexdigest(),
            },
            "dependencies": {},
            "opt_dependencies": [],
            "build": {
                "env": env or {},
                "prepare": prepare or [],
                "install": install or [],
                "uninstall": uninstall or [],
            },
        }
        (http_root.directory / "recipes" / f"{name}.json").write_text(json.dumps(recipe))
        return recipe

    return _publish
