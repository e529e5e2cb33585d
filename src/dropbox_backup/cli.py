"""Command-line interface for dropbox-backup."""

from pathlib import Path
from typing import Annotated

import requests
import typer
from loguru import logger

from dropbox_backup.client import UploadClient
from dropbox_backup.collector import collect_files
from dropbox_backup.config import Config, load_config
from dropbox_backup.errors import ConfigError, IoError
from dropbox_backup.ledger import UploadLedger
from dropbox_backup.logging_config import configure_logging
from dropbox_backup.tokens import TokenManager
from dropbox_backup.uploader import RunSummary, Uploader

app = typer.Typer(help="Upload new files from a local folder to Dropbox, then archive them.")

EnvFileOption = Annotated[
    Path | None,
    typer.Option("--env-file", "-e", help="Load variables from this .env file first"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", "-l", help="Also write a DEBUG audit log to this file"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose, log_file=log_file)


def build_uploader(config: Config, session: requests.Session) -> Uploader:
    """Wire the real client, token manager and ledger around one HTTP session."""
    return Uploader(
        config,
        client=UploadClient(config, session),
        tokens=TokenManager(config, session),
        ledger=UploadLedger(config.ledger_path),
    )


def run_backup(config: Config, uploader: Uploader) -> RunSummary:
    """Execute one pass over the source directory.

    Args:
        config: Loaded configuration.
        uploader: Uploader wired to a client, token source and ledger.

    Returns:
        Outcome of every collected file; empty when nothing matched.

    Raises:
        IoError: the source directory cannot be scanned.
    """
    try:
        config.archive_dir.mkdir(parents=True, exist_ok=True)
        UploadLedger(config.ledger_path).ensure_exists()
    except (OSError, IoError) as e:
        logger.warning("Could not prepare archive directory or ledger: {}", e)

    files = collect_files(config)
    if not files:
        logger.info("No files matched the provided extensions.")
        return RunSummary()

    summary = uploader.run(files)
    logger.info("Done: {}", summary.describe())
    return summary


def _load(env_file: Path | None) -> Config:
    try:
        return load_config(env_file=env_file)
    except ConfigError as e:
        logger.error("Configuration error: {}", e)
        raise typer.Exit(1) from e


@app.command()
def run(env_file: EnvFileOption = None) -> None:
    """Upload every matching file that is not in the ledger yet."""
    config = _load(env_file)
    logger.info("Starting Dropbox backup service")

    with requests.Session() as session:
        uploader = build_uploader(config, session)
        try:
            run_backup(config, uploader)
        except IoError as e:
            logger.error("{}", e)
            raise typer.Exit(1) from e


@app.command(name="check-config")
def check_config(env_file: EnvFileOption = None) -> None:
    """Validate the environment and print the resolved settings (secrets masked)."""
    config = _load(env_file)
    rows = [
        ("upload url", config.upload_url),
        ("refresh url", config.refresh_url),
        ("client id", config.client_id),
        ("client secret", "***"),
        ("refresh token", "***"),
        ("remote dir", config.remote_dir),
        ("source dir", str(config.source_dir)),
        ("archive dir", str(config.archive_dir)),
        ("ledger", str(config.ledger_path)),
        ("token cache", str(config.token_cache_path)),
        ("extensions", ", ".join(sorted(config.extensions))),
        ("recursive", str(config.recursive)),
        ("skip dirs", ", ".join(sorted(config.skip_dirs)) or "-"),
    ]
    for name, value in rows:
        typer.echo(f"  {name:<14} {value}")
