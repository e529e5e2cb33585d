"""Tests for TokenManager: token cache and OAuth2 refresh."""

from dataclasses import replace
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from dropbox_backup.config import Config
from dropbox_backup.errors import AuthError, IoError, ParseError
from dropbox_backup.tokens import TokenManager


def _make_response(status: int = 200, data: Any = None) -> MagicMock:
    """Create a mock HTTP response with given status and JSON data."""
    response = MagicMock()
    response.status_code = status
    response.json.return_value = data
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


def test_load_or_create_returns_trimmed_cached_token(
    config: Config, session: MagicMock
) -> None:
    """A cached token is returned verbatim (minus whitespace), without any request."""
    config.token_cache_path.parent.mkdir(parents=True)
    config.token_cache_path.write_text("  cached-token \n")
    tokens = TokenManager(config, session)

    assert tokens.load_or_create() == "cached-token"
    session.post.assert_not_called()


def test_load_or_create_bootstraps_and_persists_when_cache_missing(
    config: Config, session: MagicMock
) -> None:
    session.post.return_value = _make_response(data={"access_token": "fresh", "expires_in": 14400})
    tokens = TokenManager(config, session)

    assert tokens.load_or_create() == "fresh"
    assert session.post.call_count == 1
    assert config.token_cache_path.read_text() == "fresh"


def test_load_or_create_raises_io_error_when_cache_unreadable(
    config: Config, session: MagicMock
) -> None:
    config.token_cache_path.mkdir(parents=True)
    tokens = TokenManager(config, session)

    with pytest.raises(IoError, match="Cannot read token cache"):
        tokens.load_or_create()
    session.post.assert_not_called()


def test_refresh_posts_refresh_token_form(config: Config, session: MagicMock) -> None:
    session.post.return_value = _make_response(data={"access_token": "new"})
    tokens = TokenManager(config, session)

    tokens.refresh()

    args, kwargs = session.post.call_args
    assert args == (config.refresh_url,)
    assert kwargs["data"] == {
        "refresh_token": "long-lived-refresh",
        "grant_type": "refresh_token",
        "client_id": "app-key",
        "client_secret": "app-secret",
    }


def test_refresh_does_not_persist(config: Config, session: MagicMock) -> None:
    session.post.return_value = _make_response(data={"access_token": "new"})
    tokens = TokenManager(config, session)

    assert tokens.refresh() == "new"
    assert not config.token_cache_path.exists()


def test_refresh_raises_auth_error_on_http_failure(config: Config, session: MagicMock) -> None:
    session.post.return_value = _make_response(status=400, data={"error": "invalid_grant"})
    tokens = TokenManager(config, session)

    with pytest.raises(AuthError, match="HTTP 400") as exc_info:
        tokens.refresh()

    assert exc_info.value.status == 400
    assert not isinstance(exc_info.value, ParseError)


def test_refresh_raises_auth_error_on_connection_failure(
    config: Config, session: MagicMock
) -> None:
    session.post.side_effect = requests.ConnectionError("connection refused")
    tokens = TokenManager(config, session)

    with pytest.raises(AuthError, match="request failed"):
        tokens.refresh()


def test_refresh_raises_parse_error_on_invalid_json(config: Config, session: MagicMock) -> None:
    response = _make_response()
    response.json.side_effect = ValueError("Expecting value")
    session.post.return_value = response
    tokens = TokenManager(config, session)

    with pytest.raises(ParseError, match="Parsing token refresh JSON"):
        tokens.refresh()


@pytest.mark.parametrize("payload", [{"token_type": "bearer"}, {"access_token": 12}, ["x"]])
def test_refresh_raises_parse_error_without_access_token(
    config: Config, session: MagicMock, payload: Any
) -> None:
    session.post.return_value = _make_response(data=payload)
    tokens = TokenManager(config, session)

    with pytest.raises(ParseError, match="no access_token"):
        tokens.refresh()


def test_persist_creates_parent_directories(config: Config, session: MagicMock) -> None:
    tokens = TokenManager(config, session)

    tokens.persist("abc")

    assert config.token_cache_path.read_text() == "abc"


def test_persist_overwrites_previous_token(config: Config, session: MagicMock) -> None:
    tokens = TokenManager(config, session)
    tokens.persist("first")

    tokens.persist("second")

    assert config.token_cache_path.read_text() == "second"


def test_persist_raises_io_error_on_write_failure(
    config: Config, tmp_path: Path, session: MagicMock
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    tokens = TokenManager(replace(config, token_cache_path=blocker / "token.txt"), session)

    with pytest.raises(IoError, match="Write short token file"):
        tokens.persist("abc")


def test_load_or_create_raises_io_error_when_cache_is_not_utf8(
    config: Config, session: MagicMock
) -> None:
    config.token_cache_path.parent.mkdir(parents=True)
    config.token_cache_path.write_bytes(b"\xff\xfe garbage")
    tokens = TokenManager(config, session)

    with pytest.raises(IoError, match="Cannot read token cache"):
        tokens.load_or_create()
    session.post.assert_not_called()
