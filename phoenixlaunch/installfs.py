"""Filesystem steps of a game update: archiving, extraction, copying and rollback."""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
from collections.abc import Callable, Iterable
from pathlib import Path, PurePosixPath

from .progress import UpdatePhase, UpdateProgress

log = logging.getLogger(__name__)

ProgressCallback = Callable[[UpdateProgress], None]

ARCHIVE_DIR_NAME = ".phoenix_archive"
OLD_ARCHIVE_DIR_NAME = ".phoenix_archive_old"
TEMP_DOWNLOAD_EXTENSION = ".part"
SAVE_DIR_NAME = "save"
CONFIG_DIR_NAME = "config"
CONFIG_SKIP_FILES = frozenset({"debug.log"})
DEFAULT_EXTRACTION_BATCH_SIZE = 100


class InstallError(Exception):
    """A step of installing an update failed."""


def _archive_names(*dirs: Path) -> set[str]:
    return {ARCHIVE_DIR_NAME, OLD_ARCHIVE_DIR_NAME, *(d.name for d in dirs)}


def _entries(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as it:
        return list(it)


def archive_current_installation(
    game_dir: str | Path,
    archive_dir: str | Path,
    old_archive_dir: str | Path,
    prevent_save_move: bool,
) -> int:
    """Move the current installation into ``archive_dir`` for rollback.

    A stale ``old_archive_dir`` is removed first, and an existing
    ``archive_dir`` is renamed to ``old_archive_dir`` so its deletion can be
    deferred. Archive directories and partial downloads are left in place,
    as is the save directory when ``prevent_save_move`` is set. Returns the
    number of entries moved.
    """
    game_dir = Path(game_dir)
    archive_dir = Path(archive_dir)
    old_archive_dir = Path(old_archive_dir)

    if old_archive_dir.exists():
        try:
            shutil.rmtree(old_archive_dir)
        except OSError as error:
            raise InstallError(
                f"Failed to remove stale old archive directory: {error}"
            ) from error

    if archive_dir.exists():
        try:
            os.replace(archive_dir, old_archive_dir)
        except OSError as error:
            raise InstallError(
                f"Failed to rename {ARCHIVE_DIR_NAME} to old archive: {error}"
            ) from error
        log.debug("Renamed existing archive to old archive (deferred deletion)")

    try:
        archive_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise InstallError(f"Failed to create {ARCHIVE_DIR_NAME} directory: {error}") from error

    try:
        entries = _entries(game_dir)
    except OSError as error:
        raise InstallError(f"Failed to read game directory: {error}") from error

    skip_names = _archive_names(archive_dir, old_archive_dir)
    moved = 0
    for entry in entries:
        name = entry.name
        if name in skip_names or name.endswith(TEMP_DOWNLOAD_EXTENSION):
            continue
        if prevent_save_move and name == SAVE_DIR_NAME:
            continue
        src = Path(entry.path)
        try:
            os.replace(src, archive_dir / name)
        except OSError as error:
            raise InstallError(f"Failed to move {src} to archive: {error}") from error
        moved += 1

    log.debug("Moved %d items to archive", moved)
    return moved


def _enclosed_parts(name: str) -> tuple[str, ...] | None:
    """Safe relative path components of a ZIP entry name, or None if unsafe."""
    if "\0" in name:
        return None
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or (len(normalized) > 1 and normalized[1] == ":"):
        return None
    parts: list[str] = []
    for part in PurePosixPath(normalized).parts:
        if part in ("", "."):
            continue
        if part == "..":
            if not parts:
                return None
            parts.pop()
            continue
        parts.append(part)
    return tuple(parts)


def extract_zip(
    zip_path: str | Path,
    destination: str | Path,
    on_progress: ProgressCallback | None = None,
    batch_size: int = DEFAULT_EXTRACTION_BATCH_SIZE,
) -> int:
    """Extract a ZIP archive into ``destination`` and return its entry count.

    Entries whose names would escape the destination are skipped. Progress is
    reported for every ``batch_size``-th entry and for the last one.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive: {batch_size}")
    destination = Path(destination)
    report = on_progress or (lambda _progress: None)

    try:
        handle = open(zip_path, "rb")
    except OSError as error:
        raise InstallError(f"Failed to open ZIP file: {error}") from error

    with handle:
        try:
            archive = zipfile.ZipFile(handle)
        except (zipfile.BadZipFile, OSError) as error:
            raise InstallError(f"Failed to read ZIP archive: {error}") from error

        with archive:
            infos = archive.infolist()
            total = len(infos)
            report(UpdateProgress(phase=UpdatePhase.EXTRACTING, total_files=total))

            for index, info in enumerate(infos):
                parts = _enclosed_parts(info.filename)
                if parts is None:
                    continue
                outpath = destination.joinpath(*parts)

                if info.filename.endswith("/"):
                    try:
                        outpath.mkdir(parents=True, exist_ok=True)
                    except OSError as error:
                        raise InstallError(
                            f"Failed to create directory {outpath}: {error}"
                        ) from error
                else:
                    parent = outpath.parent
                    if not parent.exists():
                        try:
                            parent.mkdir(parents=True, exist_ok=True)
                        except OSError as error:
                            raise InstallError(
                                f"Failed to create parent directory {parent}: {error}"
                            ) from error
                    try:
                        target = open(outpath, "wb")
                    except OSError as error:
                        raise InstallError(
                            f"Failed to create file {outpath}: {error}"
                        ) from error
                    with target:
                        try:
                            with archive.open(info) as source:
                                shutil.copyfileobj(source, target)
                        except (OSError, zipfile.BadZipFile) as error:
                            raise InstallError(
                                f"Failed to extract file {outpath}: {error}"
                            ) from error

                if index % batch_size == 0 or index == total - 1:
                    report(
                        UpdateProgress(
                            phase=UpdatePhase.EXTRACTING,
                            files_extracted=index + 1,
                            total_files=total,
                            current_file=info.filename,
                        )
                    )

    return total


def copy_dir_recursive(src: str | Path, dst: str | Path) -> None:
    """Copy the tree at ``src`` into ``dst``, overwriting files that exist."""
    src = Path(src)
    dst = Path(dst)
    try:
        dst.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise InstallError(f"Failed to create directory {dst}: {error}") from error

    try:
        entries = _entries(src)
    except OSError as error:
        raise InstallError(f"Failed to read directory {src}: {error}") from error

    for entry in entries:
        src_path = Path(entry.path)
        dst_path = dst / entry.name
        if entry.is_dir(follow_symlinks=False):
            copy_dir_recursive(src_path, dst_path)
        else:
            try:
                shutil.copy(src_path, dst_path)
            except OSError as error:
                raise InstallError(f"Failed to copy {src_path}: {error}") from error


def restore_config_directory(previous_dir: str | Path, game_dir: str | Path) -> int:
    """Replace the game's config directory with the previous one.

    Debug logs are left behind. Returns the number of files skipped.
    """
    src = Path(previous_dir) / CONFIG_DIR_NAME
    dst = Path(game_dir) / CONFIG_DIR_NAME

    if not src.exists():
        return 0

    try:
        if dst.exists():
            shutil.rmtree(dst)
        dst.mkdir(parents=True, exist_ok=True)
        entries = _entries(src)
    except OSError as error:
        raise InstallError(f"Failed to prepare config directory: {error}") from error

    skipped = 0
    for entry in entries:
        if entry.name in CONFIG_SKIP_FILES:
            skipped += 1
            continue
        src_path = Path(entry.path)
        dst_path = dst / entry.name
        if entry.is_dir(follow_symlinks=False):
            copy_dir_recursive(src_path, dst_path)
        else:
            try:
                shutil.copy(src_path, dst_path)
            except OSError as error:
                raise InstallError(f"Failed to copy {src_path}: {error}") from error

    if skipped:
        log.debug("Skipped %d debug files from config", skipped)
    return skipped


def verify_extraction(game_dir: str | Path, executables: Iterable[str]) -> bool:
    """Return True when at least one game executable exists in ``game_dir``."""
    game_dir = Path(game_dir)
    found = any((game_dir / name).exists() for name in executables)
    if not found:
        log.warning("Game executable not found after extraction")
    return found


def rollback_from_archive(game_dir: str | Path, archive_dir: str | Path) -> int:
    """Restore the archived installation into ``game_dir``.

    Everything in ``game_dir`` except the archive directories is removed,
    then the archived entries are moved back and the empty archive directory
    is deleted. Returns the number of entries restored.
    """
    game_dir = Path(game_dir)
    archive_dir = Path(archive_dir)
    log.warning("Rolling back to previous installation from archive...")

    try:
        entries = _entries(game_dir)
    except OSError as error:
        raise InstallError(
            f"Failed to read game directory during rollback: {error}"
        ) from error

    keep = _archive_names(archive_dir)
    for entry in entries:
        if entry.name in keep:
            continue
        path = Path(entry.path)
        try:
            if entry.is_dir(follow_symlinks=False):
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as error:
            log.warning("Failed to remove %s during rollback: %s", path, error)

    try:
        archived = _entries(archive_dir)
    except OSError as error:
        raise InstallError(
            f"Failed to read archive directory during rollback: {error}"
        ) from error

    restored = 0
    for entry in archived:
        src = Path(entry.path)
        try:
            os.replace(src, game_dir / entry.name)
        except OSError as error:
            raise InstallError(f"Failed to restore {src} from archive: {error}") from error
        restored += 1

    try:
        archive_dir.rmdir()
    except OSError as error:
        log.warning("Failed to remove empty archive directory: %s", error)

    log.info("Rollback complete: restored %d items", restored)
    return restored