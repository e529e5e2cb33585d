"""Append-only record of files that were already uploaded."""

from pathlib import Path

from loguru import logger

from dropbox_backup.errors import IoError


class UploadLedger:
    """Line-oriented text log of uploaded local paths.

    One path per line, appended after each successful upload and read in full
    on every membership check. The file is never rewritten, so a crash can at
    worst leave a duplicate line, which is harmless.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def ensure_exists(self) -> None:
        """Create the ledger (and its parent directories) if it is missing."""
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()
        except OSError as e:
            msg = f"Cannot create ledger {str(self.path)!r}: {e}"
            raise IoError(msg) from e
        logger.debug("Created empty ledger {}", self.path)

    def contains(self, file_path: str | Path) -> bool:
        """Return True if exactly this path string was recorded before."""
        self.ensure_exists()
        needle = str(file_path)
        try:
            with open(self.path, encoding="utf-8", errors="surrogateescape") as f:
                return any(line.rstrip("\r\n") == needle for line in f)
        except OSError as e:
            msg = f"Cannot read ledger {str(self.path)!r}: {e}"
            raise IoError(msg) from e

    def __contains__(self, file_path: object) -> bool:
        if not isinstance(file_path, (str, Path)):
            return False
        return self.contains(file_path)

    def record(self, file_path: str | Path) -> None:
        """Append a path. Does not deduplicate; callers check contains() first."""
        self.ensure_exists()
        try:
            with open(self.path, "a", encoding="utf-8", errors="surrogateescape") as f:
                f.write(f"{file_path}\n")
        except OSError as e:
            msg = f"Cannot append to ledger {str(self.path)!r}: {e}"
            raise IoError(msg) from e
