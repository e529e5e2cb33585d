"""Short-lived access token lifecycle: cache file plus OAuth2 refresh."""

from pathlib import Path
from typing import Any

import requests
from loguru import logger

from dropbox_backup.config import Config
from dropbox_backup.errors import AuthError, IoError, ParseError


class TokenManager:
    """Load, refresh and persist the bearer token used for uploads.

    The token is opaque: its expiry is never computed locally. It is only
    replaced when the upload endpoint rejects it, or when no cached copy
    exists yet.
    """

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        self.cache_path = Path(config.token_cache_path)
        self.sess = session or requests.Session()
        self._refresh_url = config.refresh_url
        self._form: dict[str, str] = {
            "refresh_token": config.refresh_token,
            "grant_type": "refresh_token",
            "client_id": config.client_id,
            "client_secret": config.client_secret,
        }

    def load_or_create(self) -> str:
        """Return the cached token, fetching and caching a new one if absent."""
        try:
            return self.cache_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            pass
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read token cache {str(self.cache_path)!r}: {e}"
            raise IoError(msg) from e

        logger.warning("Token cache {} not found, requesting new token", self.cache_path)
        token = self.refresh()
        self.persist(token)
        return token

    def refresh(self) -> str:
        """Exchange the refresh token for a new access token. Does not persist."""
        logger.info("Requesting new short-lived access token")
        try:
            r = self.sess.post(self._refresh_url, data=self._form)
        except requests.RequestException as e:
            msg = f"Token refresh request failed: {e}"
            raise AuthError(msg) from e

        if not 200 <= r.status_code < 300:
            msg = f"Token refresh HTTP {r.status_code}"
            raise AuthError(msg, status=r.status_code)

        try:
            payload: Any = r.json()
        except ValueError as e:
            msg = f"Parsing token refresh JSON: {e}"
            raise ParseError(msg, status=r.status_code) from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(token, str):
            msg = "Token refresh response has no access_token"
            raise ParseError(msg, status=r.status_code)
        return token

    def persist(self, token: str) -> None:
        """Write the token to the cache file, creating parent directories."""
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(token, encoding="utf-8")
        except OSError as e:
            msg = f"Write short token file {str(self.cache_path)!r}: {e}"
            raise IoError(msg) from e
        logger.debug("Stored new access token in {}", self.cache_path)
