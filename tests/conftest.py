"""
Pytest config.

Tests import the local `authsession/` package without requiring an install, so the
repository root is pinned on sys.path here.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from authsession.config import AppConfig  # noqa: E402
from authsession.services.auth_client import AuthServiceClient  # noqa: E402
from authsession.services.token_store import TokenStore  # noqa: E402


def _make_response(status_code: int, body: Any = None, *, invalid_json: bool = False) -> MagicMock:
    """Build a fake `requests.Response` with a status code and a JSON body."""
    response = MagicMock()
    response.status_code = status_code
    if invalid_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(backend_url="http://auth.test", request_timeout=5.0)


@pytest.fixture
def http_session() -> MagicMock:
    """Stand-in for `requests.Session`; tests queue responses on `.request`."""
    return MagicMock()


@pytest.fixture
def client(config: AppConfig, http_session: MagicMock) -> AuthServiceClient:
    return AuthServiceClient(config, session=http_session)


@pytest.fixture
def store(tmp_path: Path) -> TokenStore:
    return TokenStore(tmp_path / "session.json")


@pytest.fixture
def make_response():
    return _make_response
