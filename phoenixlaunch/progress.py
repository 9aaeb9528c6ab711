"""Phases and progress of a game update."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UpdatePhase(Enum):
    """Stage of the update process."""

    IDLE = "idle"
    DOWNLOADING = "downloading"
    BACKING_UP = "backing_up"
    EXTRACTING = "extracting"
    RESTORING = "restoring"
    COMPLETE = "complete"
    FAILED = "failed"

    def description(self) -> str:
        """Human-readable description of the phase."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    UpdatePhase.IDLE: "Ready",
    UpdatePhase.DOWNLOADING: "Downloading update...",
    UpdatePhase.BACKING_UP: "Backing up current installation...",
    UpdatePhase.EXTRACTING: "Extracting new version...",
    UpdatePhase.RESTORING: "Restoring saves and settings...",
    UpdatePhase.COMPLETE: "Update complete!",
    UpdatePhase.FAILED: "Update failed",
}


@dataclass
class UpdateProgress:
    """Snapshot of update progress; ``speed`` is in bytes per second."""

    phase: UpdatePhase = UpdatePhase.IDLE
    bytes_downloaded: int = 0
    total_bytes: int = 0
    speed: int = 0
    files_extracted: int = 0
    total_files: int = 0
    current_file: str = ""

    def download_fraction(self) -> float:
        """Fraction of bytes downloaded, 0.0 when the total is unknown."""
        if self.total_bytes == 0:
            return 0.0
        return self.bytes_downloaded / self.total_bytes

    def extract_fraction(self) -> float:
        """Fraction of files extracted, 0.0 when the total is unknown."""
        if self.total_files == 0:
            return 0.0
        return self.files_extracted / self.total_files