"""Configuration for dropbox-backup, resolved from the environment."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from dropbox_backup.errors import ConfigError

# Values accepted as "true" for boolean flags (compared lower-cased).
TRUTHY_VALUES: frozenset[str] = frozenset({"true", "1", "t"})


@dataclass(frozen=True)
class Config:
    """Immutable settings for one run. Created once, passed to every component."""

    upload_url: str
    refresh_url: str
    client_id: str
    client_secret: str = field(repr=False)
    refresh_token: str = field(repr=False)
    remote_dir: str
    ledger_path: Path
    archive_dir: Path
    source_dir: Path
    extensions: frozenset[str]
    token_cache_path: Path
    recursive: bool = False
    skip_dirs: frozenset[str] = frozenset()
    # Read for compatibility with existing .env files, not used by the upload flow.
    api_key: str | None = field(default=None, repr=False)
    alt_remote_path: str | None = None


def _split_list(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def normalize_extension(ext: str) -> str:
    """Lower-case an extension and drop its leading dot ("." + "TXT" -> "txt")."""
    return ext.strip().lower().lstrip(".")


def parse_flag(raw: str | None) -> bool:
    if raw is None:
        return False
    return raw.strip().lower() in TRUTHY_VALUES


def load_config(
    environ: Mapping[str, str] | None = None,
    *,
    env_file: str | Path | None = None,
) -> Config:
    """Build a Config from environment variables.

    Args:
        environ: Mapping to read from. When None, a .env file is loaded first
            (existing variables win) and os.environ is used.
        env_file: Explicit .env path; only used when environ is None. Without
            it, .env is searched for in the working directory and its parents.

    Raises:
        ConfigError: a required variable is missing, or FILE_EXTENSIONS
            has no usable entries.
    """
    if environ is None:
        load_dotenv(env_file if env_file is not None else find_dotenv(usecwd=True))
        environ = os.environ

    def get(key: str) -> str:
        try:
            return environ[key]
        except KeyError:
            msg = f"Missing env var `{key}`"
            raise ConfigError(msg) from None

    extensions = frozenset(
        normalize_extension(ext) for ext in _split_list(get("FILE_EXTENSIONS"))
    ) - {""}
    if not extensions:
        msg = "FILE_EXTENSIONS must list at least one extension"
        raise ConfigError(msg)

    return Config(
        upload_url=get("API_ADDRESS"),
        refresh_url=get("API_REFRESH_ADDRESS"),
        client_id=get("APP_KEY"),
        client_secret=get("APP_SECRET"),
        refresh_token=get("REFRESH_TOKEN"),
        remote_dir=get("DROPBOX_DIR"),
        ledger_path=Path(get("UPLOADED_FILES_LOG")),
        archive_dir=Path(get("UPLOADED_DIRECTORY")),
        source_dir=Path(get("CURRENT_DIRECTORY")),
        extensions=extensions,
        token_cache_path=Path(get("SHORT_TOKEN_FILE")),
        recursive=parse_flag(environ.get("RECURSE")),
        skip_dirs=frozenset(_split_list(environ.get("SKIP_DIRS", ""))),
        api_key=environ.get("API_KEY"),
        alt_remote_path=environ.get("DROPBOX_PATH"),
    )
