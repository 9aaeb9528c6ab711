import zipfile

import pytest

from phoenixlaunch.installfs import (
    InstallError,
    archive_current_installation,
    copy_dir_recursive,
    extract_zip,
    restore_config_directory,
    rollback_from_archive,
    verify_extraction,
)
from phoenixlaunch.progress import UpdatePhase


def _make_zip(path, entries):
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in entries:
            archive.writestr(name, data)
    return path


def test_archive_moves_installation(tmp_path):
    game_dir = tmp_path
    (game_dir / "cataclysm-tiles.exe").write_bytes(b"fake exe")
    (game_dir / "VERSION.txt").write_bytes(b"0.G")
    (game_dir / "save").mkdir()
    (game_dir / "save" / "test_world.sav").write_bytes(b"save data")
    (game_dir / "config").mkdir()
    (game_dir / "config" / "options.json").write_bytes(b"{}")
    (game_dir / "config" / "debug.log").write_bytes(b"debug output")
    mod_dir = game_dir / "data" / "mods" / "my_custom_mod"
    mod_dir.mkdir(parents=True)
    (mod_dir / "modinfo.json").write_text('{"type": "MOD_INFO", "id": "my_custom_mod"}')

    archive_dir = game_dir / ".phoenix_archive"
    old_archive_dir = game_dir / ".phoenix_archive_old"
    moved = archive_current_installation(game_dir, archive_dir, old_archive_dir, False)

    assert moved == 5
    assert (archive_dir / "cataclysm-tiles.exe").exists()
    assert (archive_dir / "save" / "test_world.sav").exists()
    assert (archive_dir / "config" / "options.json").exists()
    assert (archive_dir / "config" / "debug.log").exists()
    assert (archive_dir / "data" / "mods" / "my_custom_mod" / "modinfo.json").exists()
    assert not (game_dir / "cataclysm-tiles.exe").exists()
    assert not (game_dir / "save").exists()


def test_archive_renames_old_archive(tmp_path):
    game_dir = tmp_path
    archive_dir = game_dir / ".phoenix_archive"
    old_archive_dir = game_dir / ".phoenix_archive_old"
    archive_dir.mkdir()
    (archive_dir / "old_file.txt").write_bytes(b"old data")
    (game_dir / "game.exe").write_bytes(b"game")

    archive_current_installation(game_dir, archive_dir, old_archive_dir, False)

    assert (old_archive_dir / "old_file.txt").exists()
    assert (archive_dir / "game.exe").exists()
    assert not (archive_dir / "old_file.txt").exists()


def test_archive_removes_stale_old_archive(tmp_path):
    archive_dir = tmp_path / ".phoenix_archive"
    old_archive_dir = tmp_path / ".phoenix_archive_old"
    old_archive_dir.mkdir()
    (old_archive_dir / "stale.txt").write_bytes(b"stale")

    archive_current_installation(tmp_path, archive_dir, old_archive_dir, False)

    assert not (old_archive_dir / "stale.txt").exists()
    assert archive_dir.is_dir()


def test_archive_keeps_save_and_temp_download(tmp_path):
    (tmp_path / "save").mkdir()
    (tmp_path / "save" / "world.sav").write_bytes(b"data")
    (tmp_path / "release.zip.part").write_bytes(b"partial")
    (tmp_path / "game.exe").write_bytes(b"game")
    archive_dir = tmp_path / ".phoenix_archive"

    moved = archive_current_installation(
        tmp_path, archive_dir, tmp_path / ".phoenix_archive_old", True
    )

    assert moved == 1
    assert (tmp_path / "save" / "world.sav").exists()
    assert (tmp_path / "release.zip.part").exists()
    assert not (archive_dir / "save").exists()
    assert (archive_dir / "game.exe").exists()


def test_copy_dir_recursive(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    (src / "subdir").mkdir(parents=True)
    (src / "file1.txt").write_bytes(b"content1")
    (src / "subdir" / "file2.txt").write_bytes(b"content2")

    copy_dir_recursive(src, dst)

    assert (dst / "file1.txt").read_text() == "content1"
    assert (dst / "subdir" / "file2.txt").read_text() == "content2"
    assert (src / "file1.txt").exists()


def test_copy_dir_recursive_missing_source(tmp_path):
    with pytest.raises(InstallError):
        copy_dir_recursive(tmp_path / "missing", tmp_path / "dst")


def test_restore_config_skips_debug_log(tmp_path):
    previous = tmp_path / "prev"
    game = tmp_path / "game"
    (previous / "config").mkdir(parents=True)
    (previous / "config" / "options.json").write_bytes(b"{}")
    (previous / "config" / "debug.log").write_bytes(b"debug output")
    (game / "config").mkdir(parents=True)
    (game / "config" / "extracted.json").write_bytes(b"new")

    skipped = restore_config_directory(previous, game)

    assert skipped == 1
    assert (game / "config" / "options.json").read_bytes() == b"{}"
    assert not (game / "config" / "debug.log").exists()
    assert not (game / "config" / "extracted.json").exists()


def test_restore_config_without_previous_config(tmp_path):
    game = tmp_path / "game"
    (game / "config").mkdir(parents=True)
    (game / "config" / "keep.json").write_bytes(b"keep")

    assert restore_config_directory(tmp_path / "prev", game) == 0
    assert (game / "config" / "keep.json").read_bytes() == b"keep"


def test_extract_zip_writes_files_and_reports_progress(tmp_path):
    zip_path = _make_zip(
        tmp_path / "release.zip",
        [("data/", b""), ("data/a.txt", b"alpha"), ("game.exe", b"exe")],
    )
    dest = tmp_path / "out"
    reports = []

    total = extract_zip(zip_path, dest, reports.append, batch_size=2)

    assert total == 3
    assert (dest / "data" / "a.txt").read_bytes() == b"alpha"
    assert (dest / "game.exe").read_bytes() == b"exe"
    assert reports[0].phase == UpdatePhase.EXTRACTING
    assert reports[0].total_files == 3
    assert reports[0].files_extracted == 0
    assert [r.files_extracted for r in reports[1:]] == [1, 3]
    assert reports[-1].current_file == "game.exe"


def test_extract_zip_skips_unsafe_paths(tmp_path):
    zip_path = _make_zip(
        tmp_path / "evil.zip", [("../escape.txt", b"bad"), ("ok.txt", b"good")]
    )
    dest = tmp_path / "out"

    total = extract_zip(zip_path, dest)

    assert total == 2
    assert (dest / "ok.txt").read_bytes() == b"good"
    assert not (tmp_path / "escape.txt").exists()


def test_extract_zip_rejects_non_zip(tmp_path):
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"not a zip")
    with pytest.raises(InstallError, match="Failed to read ZIP archive"):
        extract_zip(bogus, tmp_path / "out")


def test_extract_zip_missing_file(tmp_path):
    with pytest.raises(InstallError, match="Failed to open ZIP file"):
        extract_zip(tmp_path / "missing.zip", tmp_path / "out")


def test_verify_extraction(tmp_path):
    (tmp_path / "cataclysm-tiles").write_bytes(b"exe")
    assert verify_extraction(tmp_path, ["cataclysm-tiles.exe", "cataclysm-tiles"]) is True
    assert verify_extraction(tmp_path, ["cataclysm.exe"]) is False


def test_rollback_restores_archive(tmp_path):
    archive_dir = tmp_path / ".phoenix_archive"
    (tmp_path / "game.exe").write_bytes(b"original")
    (tmp_path / "save").mkdir()
    (tmp_path / "save" / "w.sav").write_bytes(b"save")
    archive_current_installation(
        tmp_path, archive_dir, tmp_path / ".phoenix_archive_old", False
    )
    (tmp_path / "game.exe").write_bytes(b"partial")
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "junk.json").write_bytes(b"{}")

    restored = rollback_from_archive(tmp_path, archive_dir)

    assert restored == 2
    assert (tmp_path / "game.exe").read_bytes() == b"original"
    assert (tmp_path / "save" / "w.sav").read_bytes() == b"save"
    assert not (tmp_path / "data").exists()
    assert not archive_dir.exists()


def test_rollback_without_archive_fails(tmp_path):
    with pytest.raises(InstallError, match="archive directory"):
        rollback_from_archive(tmp_path, tmp_path / ".phoenix_archive")