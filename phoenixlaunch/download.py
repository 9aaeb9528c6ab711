"""Downloading release archives with progress reporting."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import platformdirs
import requests

from .progress import UpdatePhase, UpdateProgress

log = logging.getLogger(__name__)

ProgressCallback = Callable[[UpdateProgress], None]

_CHUNK_SIZE = 64 * 1024


class DownloadError(Exception):
    """A download could not be completed."""


@dataclass(frozen=True)
class DownloadResult:
    """Where a finished download was stored and how many bytes it holds."""

    file_path: Path
    size: int


def _temp_path(dest_path: Path, temp_extension: str) -> Path:
    return dest_path.with_name(f"{dest_path.stem}.zip{temp_extension}")


def download_asset(
    url: str,
    dest_path: str | Path,
    on_progress: ProgressCallback | None = None,
    session: requests.Session | None = None,
    progress_interval: float = 0.1,
    temp_extension: str = ".part",
) -> DownloadResult:
    """Download ``url`` to ``dest_path``, reporting progress to ``on_progress``.

    Data is written to a temporary file next to the destination and renamed
    into place once complete. Progress is reported at most once every
    ``progress_interval`` seconds.
    """
    dest_path = Path(dest_path)
    report = on_progress or (lambda _progress: None)
    http = session or requests.Session()
    started = time.monotonic()

    report(UpdateProgress(phase=UpdatePhase.DOWNLOADING))

    try:
        response = http.get(url, stream=True)
    except requests.RequestException as error:
        raise DownloadError(f"Failed to connect to download server: {error}") from error

    with response:
        if not response.ok:
            reason = response.reason or "Unknown error"
            raise DownloadError(
                f"Download failed with status: {response.status_code} - {reason}"
            )

        try:
            total_size = int(response.headers.get("Content-Length", 0))
        except ValueError:
            total_size = 0

        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise DownloadError(f"Failed to create download directory: {error}") from error

        temp_path = _temp_path(dest_path, temp_extension)
        try:
            handle = open(temp_path, "wb")
        except OSError as error:
            raise DownloadError(
                f"Failed to create temporary download file: {error}"
            ) from error

        downloaded = 0
        last_downloaded = 0
        last_report = time.monotonic()
        with handle:
            chunks = response.iter_content(chunk_size=_CHUNK_SIZE)
            while True:
                try:
                    chunk = next(chunks, None)
                except requests.RequestException as error:
                    raise DownloadError(f"Error reading download stream: {error}") from error
                if chunk is None:
                    break
                if not chunk:
                    continue
                try:
                    handle.write(chunk)
                except OSError as error:
                    raise DownloadError(
                        f"Failed to write to download file: {error}"
                    ) from error
                downloaded += len(chunk)

                now = time.monotonic()
                elapsed = now - last_report
                if elapsed >= progress_interval:
                    delta = downloaded - last_downloaded
                    speed = int(delta / elapsed) if elapsed > 0 else 0
                    report(
                        UpdateProgress(
                            phase=UpdatePhase.DOWNLOADING,
                            bytes_downloaded=downloaded,
                            total_bytes=total_size,
                            speed=speed,
                        )
                    )
                    last_downloaded = downloaded
                    last_report = now

            try:
                handle.flush()
                os.fsync(handle.fileno())
            except OSError as error:
                raise DownloadError(f"Failed to sync download file: {error}") from error

    try:
        os.replace(temp_path, dest_path)
    except OSError as error:
        raise DownloadError(f"Failed to finalize download: {error}") from error

    elapsed = time.monotonic() - started
    megabytes = downloaded / 1_000_000
    rate = megabytes / elapsed if elapsed > 0 else 0.0
    log.info("Download complete: %.1f MB in %.1fs (%.1f MB/s)", megabytes, elapsed, rate)

    return DownloadResult(file_path=dest_path, size=downloaded)


def download_dir() -> Path:
    """Return the download cache directory, creating it if needed."""
    base = platformdirs.user_data_dir("Phoenix", "phoenix")
    if not base:
        raise DownloadError("Could not determine data directory")
    directory = Path(base) / "downloads"
    directory.mkdir(parents=True, exist_ok=True)
    return directory