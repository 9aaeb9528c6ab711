"""Installing a downloaded update while keeping the player's data."""

from __future__ import annotations

import logging
import shutil
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .access import check_installation_access
from .installfs import (
    ARCHIVE_DIR_NAME,
    OLD_ARCHIVE_DIR_NAME,
    SAVE_DIR_NAME,
    InstallError,
    archive_current_installation,
    copy_dir_recursive,
    extract_zip,
    restore_config_directory,
    rollback_from_archive,
    verify_extraction,
)
from .progress import UpdatePhase, UpdateProgress

log = logging.getLogger(__name__)

ProgressCallback = Callable[[UpdateProgress], None]

SIMPLE_RESTORE_DIRS: tuple[str, ...] = (SAVE_DIR_NAME, "templates", "memorial", "graveyard")
GAME_EXECUTABLES: tuple[str, ...] = (
    "cataclysm-tiles.exe",
    "cataclysm.exe",
    "cataclysm-tiles",
    "cataclysm",
)
USER_DEFAULT_MODS = "user-default-mods.json"


@dataclass
class SoundpackMerge:
    """Custom files of an old soundpack to copy into its new counterpart."""

    old_path: Path
    new_path: Path
    custom_files: list[Path] = field(default_factory=list)


@dataclass
class MigrationPlan:
    """Custom content from the previous installation that should be restored."""

    custom_mods: list[Path] = field(default_factory=list)
    custom_user_mods: list[Path] = field(default_factory=list)
    custom_tilesets: list[Path] = field(default_factory=list)
    custom_soundpacks: list[Path] = field(default_factory=list)
    soundpack_merges: list[SoundpackMerge] = field(default_factory=list)
    custom_fonts: list[Path] = field(default_factory=list)
    custom_data_fonts: list[Path] = field(default_factory=list)
    restore_user_default_mods: bool = False


PlanMigration = Callable[[Path, Path], MigrationPlan]


def _copy_file(src: Path, dst: Path) -> None:
    try:
        shutil.copy(src, dst)
    except OSError as error:
        raise InstallError(f"Failed to copy {src}: {error}") from error


def _mkdir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise InstallError(f"Failed to create directory {path}: {error}") from error


def _restore_new_dirs(sources: Iterable[Path], target_dir: Path) -> int:
    """Copy each source directory into ``target_dir`` unless it is already there."""
    count = 0
    for source in sources:
        source = Path(source)
        if not source.name:
            continue
        target = target_dir / source.name
        if not target.exists():
            copy_dir_recursive(source, target)
            count += 1
    return count


def _restore_fonts(sources: Iterable[Path], target_dir: Path) -> int:
    _mkdir(target_dir)
    count = 0
    for source in sources:
        source = Path(source)
        if not source.name:
            continue
        target = target_dir / source.name
        if source.is_file():
            _copy_file(source, target)
            count += 1
        elif source.is_dir():
            copy_dir_recursive(source, target)
            count += 1
    return count


def execute_migration_plan(
    plan: MigrationPlan, game_dir: str | Path, previous_dir: str | Path
) -> list[str]:
    """Copy the custom content named by ``plan`` into ``game_dir``.

    Content already present in the new installation is not overwritten
    (fonts excepted). Returns a summary of what was restored.
    """
    game_dir = Path(game_dir)
    previous_dir = Path(previous_dir)
    summary: list[str] = []

    if plan.custom_mods:
        count = _restore_new_dirs(plan.custom_mods, game_dir / "data" / "mods")
        if count:
            summary.append(f"{count} custom mods")

    if plan.custom_user_mods:
        user_mods_dir = game_dir / "mods"
        _mkdir(user_mods_dir)
        count = _restore_new_dirs(plan.custom_user_mods, user_mods_dir)
        if count:
            summary.append(f"{count} user mods")

    if plan.custom_tilesets:
        count = _restore_new_dirs(plan.custom_tilesets, game_dir / "gfx")
        if count:
            summary.append(f"{count} tilesets")

    if plan.custom_soundpacks:
        count = _restore_new_dirs(plan.custom_soundpacks, game_dir / "data" / "sound")
        if count:
            summary.append(f"{count} soundpacks")

    if plan.soundpack_merges:
        file_count = 0
        for merge in plan.soundpack_merges:
            for relative in merge.custom_files:
                src = Path(merge.old_path) / relative
                dst = Path(merge.new_path) / relative
                if src.exists() and not dst.exists():
                    _mkdir(dst.parent)
                    _copy_file(src, dst)
                    file_count += 1
        if file_count:
            summary.append(f"{file_count} soundpack files")

    if plan.custom_fonts:
        count = _restore_fonts(plan.custom_fonts, game_dir / "font")
        if count:
            summary.append(f"{count} fonts")

    if plan.custom_data_fonts:
        _restore_fonts(plan.custom_data_fonts, game_dir / "data" / "font")

    if plan.restore_user_default_mods:
        src = previous_dir / "data" / "mods" / USER_DEFAULT_MODS
        dst = game_dir / "data" / "mods" / USER_DEFAULT_MODS
        if src.exists() and not dst.exists():
            _mkdir(dst.parent)
            _copy_file(src, dst)
            summary.append(USER_DEFAULT_MODS)

    if summary:
        log.info("Restored custom content: %s", ", ".join(summary))
    return summary


def restore_user_directories(
    previous_dir: str | Path,
    game_dir: str | Path,
    prevent_save_move: bool,
    plan_migration: PlanMigration | None = None,
) -> list[str]:
    """Bring the player's data from ``previous_dir`` into the new installation.

    Save, template, memorial and graveyard directories are copied whole
    (save is skipped when ``prevent_save_move`` is set), the config directory
    is copied without debug logs, and custom content chosen by
    ``plan_migration(previous_dir, game_dir)`` is restored. Returns the names
    of the directories copied whole.
    """
    previous_dir = Path(previous_dir)
    game_dir = Path(game_dir)

    restored: list[str] = []
    for name in SIMPLE_RESTORE_DIRS:
        if name == SAVE_DIR_NAME and prevent_save_move:
            continue
        src = previous_dir / name
        dst = game_dir / name
        if not src.exists():
            continue
        if dst.exists():
            try:
                shutil.rmtree(dst)
            except OSError as error:
                raise InstallError(f"Failed to remove extracted {name}: {error}") from error
        copy_dir_recursive(src, dst)
        restored.append(name)

    if restored:
        log.debug("Restored directories: %s", ", ".join(restored))
    if prevent_save_move:
        log.info("Skipped save directory (prevent_save_move enabled)")

    restore_config_directory(previous_dir, game_dir)

    plan = plan_migration(previous_dir, game_dir) if plan_migration else MigrationPlan()
    execute_migration_plan(plan, game_dir, previous_dir)
    return restored


def _remove_in_background(path: Path) -> None:
    def work() -> None:
        if not path.exists():
            return
        started = time.monotonic()
        try:
            shutil.rmtree(path)
        except OSError as error:
            log.warning("Failed to remove old archive: %s", error)
            return
        log.info("Background cleanup complete in %.1fs", time.monotonic() - started)

    threading.Thread(target=work, name="archive-cleanup", daemon=True).start()


def _rollback_or_raise(stage: str, error: Exception, game_dir: Path, archive_dir: Path) -> None:
    log.error("%s failed, rolling back: %s", stage.capitalize(), error)
    try:
        rollback_from_archive(game_dir, archive_dir)
    except (InstallError, OSError) as rollback_error:
        log.error("Rollback also failed: %s", rollback_error)
        raise InstallError(
            f"Update failed during {stage} AND rollback failed.\n\n"
            f"{stage.capitalize()} error: {error}\n"
            f"Rollback error: {rollback_error}\n\n"
            "Your installation may be corrupted. Please reinstall the game."
        ) from error
    raise InstallError(
        f"Update failed during {stage}. Previous version has been restored.\n\nError: {error}"
    ) from error


def install_update(
    zip_path: str | Path,
    game_dir: str | Path,
    on_progress: ProgressCallback | None = None,
    prevent_save_move: bool = False,
    remove_previous_version: bool = False,
    plan_migration: PlanMigration | None = None,
) -> int:
    """Archive the current installation, extract ``zip_path`` and restore user data.

    If extraction or restoration fails, the archived installation is put
    back. Returns the number of archive entries extracted.
    """
    zip_path = Path(zip_path)
    game_dir = Path(game_dir)
    report = on_progress or (lambda _progress: None)
    started = time.monotonic()
    archive_dir = game_dir / ARCHIVE_DIR_NAME
    old_archive_dir = game_dir / OLD_ARCHIVE_DIR_NAME

    check_installation_access(game_dir, GAME_EXECUTABLES)

    report(UpdateProgress(phase=UpdatePhase.BACKING_UP))
    phase_start = time.monotonic()
    archive_current_installation(game_dir, archive_dir, old_archive_dir, prevent_save_move)
    log.info("Archive complete in %.1fs", time.monotonic() - phase_start)

    report(UpdateProgress(phase=UpdatePhase.EXTRACTING))
    phase_start = time.monotonic()
    try:
        total_files = extract_zip(zip_path, game_dir, report)
    except (InstallError, OSError) as error:
        _rollback_or_raise("extraction", error, game_dir, archive_dir)
    log.info("Extracted %d files in %.1fs", total_files, time.monotonic() - phase_start)

    verify_extraction(game_dir, GAME_EXECUTABLES)

    report(UpdateProgress(phase=UpdatePhase.RESTORING))
    phase_start = time.monotonic()
    try:
        restore_user_directories(archive_dir, game_dir, prevent_save_move, plan_migration)
    except (InstallError, OSError) as error:
        _rollback_or_raise("restore", error, game_dir, archive_dir)
    log.info("Restore complete in %.1fs", time.monotonic() - phase_start)

    _remove_in_background(old_archive_dir)

    if remove_previous_version:
        try:
            shutil.rmtree(archive_dir)
        except OSError as error:
            log.warning("Failed to remove installation archive: %s", error)

    report(
        UpdateProgress(
            phase=UpdatePhase.COMPLETE,
            files_extracted=total_files,
            total_files=total_files,
        )
    )
    log.info("Update complete in %.1fs total", time.monotonic() - started)
    return total_files