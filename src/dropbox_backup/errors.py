"""Exception hierarchy for the backup agent.

Everything raised on purpose derives from BackupError, so the uploader can
isolate one file's failure from the rest of the run with a single except.
"""


class BackupError(Exception):
    """Base class for all expected failures."""


class ConfigError(BackupError):
    """A required environment value is missing or invalid."""


class IoError(BackupError):
    """Local filesystem failure (ledger, token cache, file read, archive move)."""


class AuthError(BackupError):
    """Token refresh was rejected or could not be performed."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ParseError(AuthError):
    """Token refresh response did not contain a usable access token."""


class UploadError(BackupError):
    """Upload endpoint did not accept the file.

    `status` is None when the request never got a response.
    """

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class UnauthorizedError(UploadError):
    """Upload endpoint rejected the access token (HTTP 401)."""
