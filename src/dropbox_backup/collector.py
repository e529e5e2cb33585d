"""Find candidate files in the source directory."""

import os
from collections.abc import Callable, Iterator
from pathlib import Path

from loguru import logger

from dropbox_backup.config import Config
from dropbox_backup.errors import IoError

# A traversal strategy yields file paths below a root, pruning skipped dirs.
Walker = Callable[[Path, frozenset[str]], Iterator[Path]]


def walk_recursive(root: Path, skip_dirs: frozenset[str]) -> Iterator[Path]:
    """Yield every file below root. Directories named in skip_dirs are pruned at any depth.

    An unreadable root raises OSError; unreadable subdirectories are logged and skipped.
    """

    def on_error(e: OSError) -> None:
        if e.filename in (None, os.fspath(root)):
            raise e
        logger.warning("Skipping unreadable directory {}: {}", e.filename, e)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(d for d in dirnames if d not in skip_dirs)
        for name in sorted(filenames):
            yield Path(dirpath) / name


def walk_flat(root: Path, skip_dirs: frozenset[str]) -> Iterator[Path]:
    """Yield top-level files, plus the files directly inside each top-level directory."""
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            if entry.name in skip_dirs:
                continue
            try:
                children = sorted(entry.iterdir())
            except OSError as e:
                logger.warning("Skipping unreadable directory {}: {}", entry, e)
                continue
            for child in children:
                if child.is_file():
                    yield child
        elif entry.is_file():
            yield entry


def matches_extension(path: Path, extensions: frozenset[str]) -> bool:
    """Case-insensitive match of the last suffix against normalized extensions."""
    suffix = path.suffix
    return bool(suffix) and suffix[1:].lower() in extensions


def sanitize_filename(path: Path) -> Path:
    """Rename a file in place so its name has no spaces. Returns the new path."""
    if " " not in path.name:
        return path
    new_path = path.with_name(path.name.replace(" ", "_"))
    if new_path.exists():
        msg = f"Cannot rename {str(path)!r}: {str(new_path)!r} already exists"
        raise IoError(msg)
    try:
        path.rename(new_path)
    except OSError as e:
        msg = f"Cannot rename {str(path)!r} to {str(new_path)!r}: {e}"
        raise IoError(msg) from e
    logger.info("Renamed file: {} -> {}", path, new_path)
    return new_path


def collect_files(config: Config) -> list[Path]:
    """Return sanitized candidate files in traversal order.

    A file that cannot be sanitized, or a subdirectory that cannot be read,
    is logged and left out. An unreadable source directory raises IoError.
    """
    walker: Walker = walk_recursive if config.recursive else walk_flat
    files: list[Path] = []
    try:
        for path in walker(config.source_dir, config.skip_dirs):
            if not matches_extension(path, config.extensions):
                continue
            try:
                files.append(sanitize_filename(path))
            except IoError as e:
                logger.error("Skipping {}: {}", path, e)
    except OSError as e:
        msg = f"Cannot scan {str(config.source_dir)!r}: {e}"
        raise IoError(msg) from e

    logger.debug(
        "Collected {} file(s) from {!r} (recursive {!r}, skip {!r})",
        len(files),
        str(config.source_dir),
        config.recursive,
        sorted(config.skip_dirs),
    )
    return files
