"""Upload pipeline: dedup against the ledger, upload, refresh-and-retry, archive."""

import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from loguru import logger

from dropbox_backup.config import Config
from dropbox_backup.errors import BackupError, IoError, UnauthorizedError
from dropbox_backup.protocols import LedgerProtocol, TokenSourceProtocol, UploadClientProtocol


class FileState(Enum):
    """Where a single file is in the upload pipeline."""

    PENDING = "pending"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    UPLOADING = "uploading"
    REFRESHING = "refreshing"
    UPLOADING_RETRY = "uploading_retry"
    UPLOADED = "uploaded"
    FAILED = "failed"


@dataclass
class FileOutcome:
    """Final result for one candidate file."""

    path: Path
    state: FileState
    error: BackupError | None = None
    refreshed: bool = False


@dataclass
class RunSummary:
    """Outcomes of one run, in processing order."""

    outcomes: list[FileOutcome] = field(default_factory=list)

    def _with_state(self, state: FileState) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.state is state]

    @property
    def uploaded(self) -> list[FileOutcome]:
        return self._with_state(FileState.UPLOADED)

    @property
    def skipped(self) -> list[FileOutcome]:
        return self._with_state(FileState.SKIPPED_DUPLICATE)

    @property
    def failed(self) -> list[FileOutcome]:
        return self._with_state(FileState.FAILED)

    def describe(self) -> str:
        return (
            f"{len(self.outcomes)} file(s): {len(self.uploaded)} uploaded, "
            f"{len(self.skipped)} already uploaded, {len(self.failed)} failed"
        )


def move_file(source: Path, destination_dir: Path) -> Path:
    """Move a file into destination_dir keeping its base name."""
    dest = destination_dir / source.name
    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(dest))
    except OSError as e:
        msg = f"Failed to move {str(source)!r} to {str(dest)!r}: {e}"
        raise IoError(msg) from e
    return dest


class Uploader:
    """Sends candidate files one at a time.

    Per file: skip if the ledger knows it, otherwise upload with the current
    token. A 401 forces exactly one token refresh and one retry; any other
    failure (or a failing retry) is final. On success the path is recorded in
    the ledger before the file is moved to the archive directory, so an upload
    is never repeated even if the move fails.
    """

    def __init__(
        self,
        config: Config,
        client: UploadClientProtocol,
        tokens: TokenSourceProtocol,
        ledger: LedgerProtocol,
    ) -> None:
        self._client = client
        self._tokens = tokens
        self._ledger = ledger
        self.archive_dir = Path(config.archive_dir)

    def _enter(self, local_file: Path, state: FileState) -> FileState:
        logger.debug("{}: {}", local_file, state.value)
        return state

    def send_file(self, local_file: Path) -> FileOutcome:
        """Run the pipeline for one file. Failures are raised to the caller."""
        self._enter(local_file, FileState.PENDING)
        if self._ledger.contains(local_file):
            logger.info("Already uploaded, skipping: {}", local_file)
            return FileOutcome(local_file, self._enter(local_file, FileState.SKIPPED_DUPLICATE))

        token = self._tokens.load_or_create()
        self._enter(local_file, FileState.UPLOADING)
        refreshed = False
        try:
            status = self._client.upload(local_file, token)
        except UnauthorizedError:
            logger.warning("Token expired/unauthorized. Refreshing...")
            self._enter(local_file, FileState.REFRESHING)
            token = self._tokens.refresh()
            self._tokens.persist(token)
            refreshed = True
            self._enter(local_file, FileState.UPLOADING_RETRY)
            status = self._client.upload(local_file, token)

        logger.info("Uploaded {} successfully (HTTP {})", local_file, status)
        self._ledger.record(local_file)
        dest = move_file(local_file, self.archive_dir)
        logger.debug("Archived {} -> {}", local_file, dest)
        return FileOutcome(
            local_file, self._enter(local_file, FileState.UPLOADED), refreshed=refreshed
        )

    def process(self, local_file: Path) -> FileOutcome:
        """Like send_file, but a failure becomes a FAILED outcome instead of raising."""
        try:
            return self.send_file(local_file)
        except BackupError as e:
            logger.error("Failed to process {}: {}", local_file, e)
            return FileOutcome(local_file, self._enter(local_file, FileState.FAILED), error=e)

    def run(self, files: Iterable[Path]) -> RunSummary:
        """Process files strictly in order; one failure never stops the rest."""
        summary = RunSummary()
        for local_file in files:
            summary.outcomes.append(self.process(local_file))
        return summary
