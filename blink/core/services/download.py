"""
HTTP download — stream a URL to a file on disk.

Shared by the recipe fetcher and the source acquirer. The body is
streamed into a temp file next to the destination and renamed into
place only once it is complete, so an interrupted download never
leaves a truncated file that a later run would treat as cached.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import urllib.error
import urllib.request
from pathlib import Path

from blink import __version__
from blink.core.errors import NetworkError

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024
_USER_AGENT = f"blink/{__version__}"


def download(url: str, dest: Path, *, timeout: float | None = None) -> Path:
    """Download ``url`` to ``dest``, creating parent directories.

    Args:
        url: Source URL.
        dest: Final file path.
        timeout: Socket timeout in seconds, or None to block indefinitely.

    Returns:
        ``dest``.

    Raises:
        NetworkError: On transport failure or a non-success HTTP status.
        OSError: If the destination cannot be written.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s → %s", url, dest)

    kwargs = {"timeout": timeout} if timeout is not None else {}
    try:
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        resp = urllib.request.urlopen(req, **kwargs)
    except urllib.error.HTTPError as e:
        raise NetworkError(
            f"Download failed for {url}: HTTP {e.code} {e.reason}",
            url=url,
            status=e.code,
        ) from e
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise NetworkError(f"Download failed for {url}: {e}", url=url) from e

    with resp:
        status = getattr(resp, "status", None)
        if status is not None and not 200 <= status < 300:
            raise NetworkError(f"Download failed for {url}: HTTP {status}", url=url, status=status)

        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".part")
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as out:
                shutil.copyfileobj(resp, out, _CHUNK)
            os.replace(tmp, dest)
        except (urllib.error.URLError, ConnectionError, TimeoutError) as e:
            tmp.unlink(missing_ok=True)
            raise NetworkError(f"Download of {url} interrupted: {e}", url=url) from e
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    logger.debug("Downloaded %s (%d bytes)", dest, dest.stat().st_size)
    return dest
