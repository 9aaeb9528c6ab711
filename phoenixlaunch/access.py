"""Checks that run before an update touches the game installation."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

log = logging.getLogger(__name__)

_WRITE_TEST_NAME = ".phoenix_write_test"

# Windows error codes reported when a file is locked or access is refused.
_ERROR_SHARING_VIOLATION = 32
_ERROR_ACCESS_DENIED = 5


class AccessError(Exception):
    """The installation cannot be modified right now."""


def _os_error_code(error: OSError) -> int | None:
    return getattr(error, "winerror", None)


def _lock_hint(error: OSError) -> str:
    code = _os_error_code(error)
    if code == _ERROR_SHARING_VIOLATION:
        return "The game appears to be running. Please close it before updating."
    if code == _ERROR_ACCESS_DENIED:
        return (
            "Access denied. Try running the launcher as administrator, "
            "or check if antivirus is blocking access."
        )
    return "The file may be in use by another program."


def check_installation_access(game_dir: str | Path, executables: Iterable[str]) -> None:
    """Raise :class:`AccessError` unless the game files and directory are writable.

    Each executable that exists is opened for writing (without truncating it),
    which fails when the game is running or the file is locked. Then a small
    file is written to and removed from the game directory.
    """
    game_dir = Path(game_dir)

    for exe_name in executables:
        exe_path = game_dir / exe_name
        if not exe_path.exists():
            continue
        try:
            with open(exe_path, "r+b"):
                pass
        except OSError as error:
            raise AccessError(
                f"Cannot update: {exe_name} is locked.\n\n"
                f"{_lock_hint(error)}\n\nError: {error}"
            ) from error
        log.debug("Access check passed for %s", exe_name)

    test_file = game_dir / _WRITE_TEST_NAME
    try:
        test_file.write_bytes(b"test")
    except OSError as error:
        raise AccessError(
            "Cannot write to game directory.\n\n"
            "Please check folder permissions.\n\n"
            f"Error: {error}"
        ) from error
    try:
        test_file.unlink()
    except OSError:
        pass