"""HTTP client for the single file-upload endpoint."""

import json
from http import HTTPStatus
from pathlib import Path
from typing import Any

import requests
from loguru import logger

from dropbox_backup.config import Config
from dropbox_backup.errors import IoError, UnauthorizedError, UploadError

# Header carrying the JSON-encoded upload options.
UPLOAD_ARG_HEADER = "Dropbox-API-Arg"


def remote_path_for(remote_dir: str, local_file: Path) -> str:
    """Remote destination: configured directory plus the local base name."""
    return f"{remote_dir}/{local_file.name}"


def upload_options(remote_path: str) -> dict[str, Any]:
    # "add" never overwrites; an existing remote file is a conflict error.
    return {
        "autorename": False,
        "mode": "add",
        "mute": False,
        "path": remote_path,
        "strict_conflict": False,
    }


class UploadClient:
    """Performs one upload attempt per call; retry policy lives in the uploader."""

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        self.upload_url = config.upload_url
        self.remote_dir = config.remote_dir
        self.sess = session or requests.Session()

    def upload(self, local_file: Path, token: str) -> int:
        """Upload the whole file with the given bearer token.

        Returns:
            The (2xx) HTTP status.

        Raises:
            IoError: the local file cannot be read.
            UnauthorizedError: the endpoint answered 401.
            UploadError: any other non-success answer, or no answer at all.
        """
        remote_path = remote_path_for(self.remote_dir, local_file)
        try:
            data = local_file.read_bytes()
        except OSError as e:
            msg = f"Cannot read {str(local_file)!r}: {e}"
            raise IoError(msg) from e

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/octet-stream",
            UPLOAD_ARG_HEADER: json.dumps(upload_options(remote_path), separators=(",", ":")),
        }
        logger.debug("Making request: {} -> {!r} ({} bytes)", local_file, remote_path, len(data))

        try:
            r = self.sess.post(self.upload_url, headers=headers, data=data)
        except (requests.RequestException, UnicodeEncodeError) as e:
            # A token with non-latin-1 characters cannot be sent as a header.
            msg = f"Upload request failed: {e}"
            raise UploadError(msg) from e

        status = r.status_code
        if 200 <= status < 300:
            return status
        if status == HTTPStatus.UNAUTHORIZED:
            msg = "Upload rejected: HTTP 401 unauthorized"
            raise UnauthorizedError(msg, status=status, body=r.text)
        msg = f"Upload failed: HTTP {status} - {r.text}"
        raise UploadError(msg, status=status, body=r.text)
