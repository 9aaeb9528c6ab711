# phoenixlaunch

The engine behind a game launcher for *Cataclysm: Dark Days Ahead*. It
downloads release archives, and it swaps a game installation for a new one
while keeping the player's saves and settings. If a step fails, it rolls the
installation back. It also holds the launcher's colour themes and a few small
display helpers.

## Installing

```
pip install phoenixlaunch
```

## Downloading a release

```python
from phoenixlaunch.download import download_asset, download_dir

result = download_asset(
    "https://downloads.example.com/release.zip",
    download_dir() / "release.zip",
    on_progress=lambda p: print(p.phase.description(), f"{p.download_fraction():.0%}"),
)
print(result.file_path, result.size)
```

`download_dir()` returns the `downloads` folder inside the user data
directory for "Phoenix" and creates the folder if it is missing.

`download_asset` streams the file into a temporary file that sits beside the
destination. For `release.zip` with the default `temp_extension=".part"`, that
file is `release.zip.part`. Once the download is complete, the temporary file
is renamed into place.

Progress is sent to `on_progress` as an `UpdateProgress`, at most once every
`progress_interval` seconds (the default is 0.1). Each update carries the
bytes downloaded so far, the total size and the speed in bytes per second. You
can pass your own `requests.Session` as `session`.

Any failure raises `DownloadError`. That covers a failed connection, an HTTP
error status, and a write or rename error.

## Installing an update

```python
from pathlib import Path

from phoenixlaunch.install import install_update

count = install_update(
    result.file_path,
    Path("~/games/cdda").expanduser(),
    on_progress=lambda p: print(p.phase.description()),
    prevent_save_move=False,
    remove_previous_version=False,
)
```

`install_update` returns the number of entries in the archive. It works
through these steps:

1. **Access check.** `check_installation_access` opens each game executable
   that is present for writing, then writes and removes a test file in the
   game directory. If the game is running or the directory cannot be written
   to, it raises `AccessError`.
2. **Backing up** (`UpdatePhase.BACKING_UP`). `archive_current_installation`
   moves the current installation into `.phoenix_archive`. An existing
   archive is first renamed to `.phoenix_archive_old`. Partial `.part`
   downloads stay where they are. With `prevent_save_move`, so does `save/`.
3. **Extracting** (`UpdatePhase.EXTRACTING`). `extract_zip` unpacks the
   release. Entries whose names would escape the game directory are skipped.
   Afterwards, `verify_extraction` logs a warning if no game executable was
   found.
4. **Restoring** (`UpdatePhase.RESTORING`). `restore_user_directories` copies
   back `save`, `templates`, `memorial` and `graveyard`. It leaves out `save`
   when `prevent_save_move` is set. It copies `config` without `debug.log`,
   then runs `execute_migration_plan`.
5. **Cleaning up.** `.phoenix_archive_old` is deleted on a background thread.
   With `remove_previous_version`, `.phoenix_archive` is deleted as well.
   Last, a `UpdatePhase.COMPLETE` progress is reported.

If extraction or restoring fails, `rollback_from_archive` clears the partial
install and moves the archived files back. The error is then raised as an
`InstallError`, whose message says whether the rollback worked.

### Custom content

A `MigrationPlan` lists the content to carry over from the archived
installation:

- custom mods, user mods, tilesets and soundpacks
- `SoundpackMerge` entries, each naming custom files to copy into a soundpack
  that now ships with the game
- fonts and data fonts
- whether to restore `data/mods/user-default-mods.json`

`execute_migration_plan` copies these items into the new installation. A
mod, tileset or soundpack that is already present in the new installation is
not overwritten. The function returns a short summary of what it restored.

To use a plan with `install_update` or `restore_user_directories`, pass a
callable as `plan_migration`. It is called as
`plan_migration(previous_dir, game_dir)` and must return the plan.

## Themes

```python
from phoenixlaunch.theme import ThemePreset

for preset in ThemePreset.all():
    theme = preset.theme()
    print(preset.display_name(), theme.accent.to_hex(), theme.selection.to_hex())
```

There are five presets: Amber (the default), Purple, Cyan, Green and
Catppuccin Mocha. A `Theme` is a frozen set of `Color` values.
`Color.gamma_multiply` scales every channel, alpha included.

## Helpers

- `phoenixlaunch.util.format_size(1536)` returns `"1.5 KB"`. Units are
  1024-based, and a negative size raises `ValueError`.
- `phoenixlaunch.links.convert_urls_to_links(text)` wraps bare `http://` and
  `https://` URLs in `<...>` so that a Markdown renderer shows them as links.
  URLs that are already links are left alone.

## What it does not do

- There is no graphical interface, no command-line program and no stored
  configuration.
- It does not fetch release lists or changelogs. You supply the download URL.
- It does not look through an installation to decide which mods, tilesets,
  soundpacks or fonts are custom. Without a `plan_migration` callable, no
  custom content is restored.
- It has no save-backup management and no soundpack installer.
- It does not launch the game.