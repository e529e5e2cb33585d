"""Back up a local folder to Dropbox, one file at a time."""

from dropbox_backup.client import UploadClient
from dropbox_backup.config import Config, load_config
from dropbox_backup.ledger import UploadLedger
from dropbox_backup.protocols import LedgerProtocol, TokenSourceProtocol, UploadClientProtocol
from dropbox_backup.tokens import TokenManager
from dropbox_backup.uploader import FileOutcome, FileState, RunSummary, Uploader

__all__ = [
    "Config",
    "FileOutcome",
    "FileState",
    "LedgerProtocol",
    "RunSummary",
    "TokenManager",
    "TokenSourceProtocol",
    "UploadClient",
    "UploadClientProtocol",
    "UploadLedger",
    "Uploader",
    "load_config",
]
