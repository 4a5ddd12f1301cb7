"""
Session controller flows against a mocked auth service.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

import authsession.services.token_store as token_store_module
from authsession.services.auth_client import AuthServiceClient
from authsession.services.session import (
    LOGIN_ERROR_MESSAGE,
    PROFILE_DESTINATION,
    REGISTER_ERROR_MESSAGE,
    ROOT_DESTINATION,
    SUCCESS_DESTINATION,
    FlowResult,
    SessionController,
)
from authsession.services.token_store import TokenStore
from authsession.state import SessionState

ALICE = {"id": 1, "username": "alice"}


def _assert_invariant(controller: SessionController) -> None:
    assert (controller.user is None) == (controller.status is not SessionState.AUTHENTICATED)


@pytest.fixture
def controller(client: AuthServiceClient, store: TokenStore) -> SessionController:
    return SessionController(client, store)


# --------------------------------------------------------------- Restoration -


def test_initial_state_without_token(controller: SessionController) -> None:
    assert controller.status is SessionState.UNAUTHENTICATED
    assert controller.user is None


def test_initial_state_with_token_is_restoring(client: AuthServiceClient, store: TokenStore) -> None:
    store.write("t1")
    controller = SessionController(client, store)
    assert controller.status is SessionState.RESTORING
    _assert_invariant(controller)


def test_restore_without_token_makes_no_network_call(
    controller: SessionController, http_session: MagicMock
) -> None:
    assert controller.restore_session() is SessionState.UNAUTHENTICATED
    http_session.request.assert_not_called()
    _assert_invariant(controller)


def test_restore_with_valid_token(
    client: AuthServiceClient, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    store.write("t1")
    http_session.request.return_value = make_response(200, {"user": {**ALICE, "email": "a@example.com"}})
    controller = SessionController(client, store)

    assert controller.restore_session() is SessionState.AUTHENTICATED
    assert controller.user is not None
    assert controller.user.username == "alice"
    assert controller.user.get("email") == "a@example.com"
    assert store.read() == "t1"
    assert http_session.request.call_args.kwargs["headers"] == {"Authorization": "Bearer t1"}
    _assert_invariant(controller)


@pytest.mark.parametrize(
    "response_kwargs",
    [
        {"status_code": 401, "body": {"message": "expired"}},
        {"status_code": 200, "body": {"nope": True}},
        {"status_code": 200, "body": {"user": {"username": "alice"}}},
        {"status_code": 200, "invalid_json": True},
        {"status_code": 500, "invalid_json": True},
    ],
)
def test_restore_with_rejected_or_malformed_response_clears_store(
    client: AuthServiceClient, store: TokenStore, http_session: MagicMock, make_response, response_kwargs
) -> None:
    store.write("stale")
    http_session.request.return_value = make_response(**response_kwargs)
    controller = SessionController(client, store)

    assert controller.restore_session() is SessionState.UNAUTHENTICATED
    assert controller.user is None
    assert store.read() is None
    _assert_invariant(controller)


def test_restore_network_failure_clears_store(
    client: AuthServiceClient, store: TokenStore, http_session: MagicMock
) -> None:
    store.write("t1")
    http_session.request.side_effect = requests.ConnectionError("unreachable")
    controller = SessionController(client, store)

    assert controller.restore_session() is SessionState.UNAUTHENTICATED
    assert store.read() is None


def test_restore_runs_only_once(
    client: AuthServiceClient, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    store.write("t1")
    http_session.request.return_value = make_response(200, {"user": ALICE})
    controller = SessionController(client, store)

    controller.restore_session()
    controller.restore_session()

    assert http_session.request.call_count == 1
    assert controller.status is SessionState.AUTHENTICATED


# --------------------------------------------------------------------- Login -


def test_login_success(
    controller: SessionController, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    http_session.request.side_effect = [
        make_response(200, {"token": "t1"}),
        make_response(200, {"user": ALICE}),
    ]

    result = controller.login("alice", "pw")

    assert result == FlowResult.success(PROFILE_DESTINATION)
    assert result.message == ""
    assert controller.status is SessionState.AUTHENTICATED
    assert controller.user is not None and controller.user.username == "alice"
    assert store.read() == "t1"

    login_call, identity_call = http_session.request.call_args_list
    assert login_call.args == ("POST", "http://auth.test/login")
    assert login_call.kwargs["json"] == {"username": "alice", "password": "pw"}
    assert identity_call.args == ("GET", "http://auth.test/user/me")
    assert identity_call.kwargs["headers"] == {"Authorization": "Bearer t1"}
    _assert_invariant(controller)


def test_login_rejected_returns_server_message(
    controller: SessionController, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    http_session.request.return_value = make_response(401, {"message": "bad credentials"})

    result = controller.login("alice", "wrong")

    assert not result.ok
    assert result.message == "bad credentials"
    assert result.destination is None
    assert controller.status is SessionState.UNAUTHENTICATED
    assert store.read() is None
    assert http_session.request.call_count == 1
    _assert_invariant(controller)


def test_login_identity_rejection_surfaces_message_and_keeps_token(
    controller: SessionController, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    http_session.request.side_effect = [
        make_response(200, {"token": "t1"}),
        make_response(403, {"message": "account disabled"}),
    ]

    result = controller.login("alice", "pw")

    assert result.message == "account disabled"
    assert result.destination is None
    assert controller.status is SessionState.UNAUTHENTICATED
    assert store.read() == "t1"
    _assert_invariant(controller)


def test_login_network_failure_returns_generic_message(
    controller: SessionController, store: TokenStore, http_session: MagicMock
) -> None:
    http_session.request.side_effect = requests.Timeout("slow")

    result = controller.login("alice", "pw")

    assert result == FlowResult.failure(LOGIN_ERROR_MESSAGE)
    assert controller.status is SessionState.UNAUTHENTICATED
    assert store.read() is None


def test_login_without_token_in_response_persists_nothing(
    controller: SessionController, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    http_session.request.return_value = make_response(200, {"ok": True})

    result = controller.login("alice", "pw")

    assert result.message == LOGIN_ERROR_MESSAGE
    assert store.read() is None
    assert http_session.request.call_count == 1


def test_login_malformed_identity_returns_generic_message(
    controller: SessionController, http_session: MagicMock, make_response
) -> None:
    http_session.request.side_effect = [
        make_response(200, {"token": "t1"}),
        make_response(200, invalid_json=True),
    ]

    result = controller.login("alice", "pw")

    assert result.message == LOGIN_ERROR_MESSAGE
    assert controller.user is None


# ------------------------------------------------------------------ Register -


def test_register_success_does_not_touch_session(
    controller: SessionController, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    http_session.request.return_value = make_response(201, invalid_json=True)

    result = controller.register({"username": "bob", "email": "bob@example.com", "password": "x"})

    assert result == FlowResult.success(SUCCESS_DESTINATION)
    assert result.message == ""
    assert controller.status is SessionState.UNAUTHENTICATED
    assert store.read() is None
    assert http_session.request.call_args.kwargs["json"]["email"] == "bob@example.com"


def test_register_rejected_returns_server_message(
    controller: SessionController, http_session: MagicMock, make_response
) -> None:
    http_session.request.return_value = make_response(409, {"message": "username taken"})

    result = controller.register({"username": "bob"})

    assert result == FlowResult.failure("username taken")


def test_register_network_failure_returns_generic_message(
    controller: SessionController, http_session: MagicMock
) -> None:
    http_session.request.side_effect = requests.ConnectionError("down")

    assert controller.register({"username": "bob"}).message == REGISTER_ERROR_MESSAGE


# -------------------------------------------------------------------- Logout -


def test_logout_from_authenticated(
    controller: SessionController, store: TokenStore, http_session: MagicMock, make_response
) -> None:
    http_session.request.side_effect = [
        make_response(200, {"token": "t1"}),
        make_response(200, {"user": ALICE}),
    ]
    controller.login("alice", "pw")

    result = controller.logout()

    assert result == FlowResult.success(ROOT_DESTINATION)
    assert controller.status is SessionState.UNAUTHENTICATED
    assert controller.user is None
    assert store.read() is None
    _assert_invariant(controller)


def test_logout_when_unauthenticated_is_a_noop(controller: SessionController, store: TokenStore) -> None:
    listener = MagicMock()
    controller.state.subscribe(listener)

    result = controller.logout()

    assert result.destination == ROOT_DESTINATION
    assert controller.status is SessionState.UNAUTHENTICATED
    assert store.read() is None
    listener.assert_not_called()


# ------------------------------------------------------------ Authorization -


def test_authorization_headers_follow_session(
    controller: SessionController, http_session: MagicMock, make_response
) -> None:
    assert controller.authorization_headers() == {}

    http_session.request.side_effect = [
        make_response(200, {"token": "t1"}),
        make_response(200, {"user": ALICE}),
    ]
    controller.login("alice", "pw")
    assert controller.authorization_headers() == {"Authorization": "Bearer t1"}

    controller.logout()
    assert controller.authorization_headers() == {}


def test_logout_survives_unremovable_token_file(
    client: AuthServiceClient, store: TokenStore, http_session: MagicMock, make_response, monkeypatch
) -> None:
    http_session.request.side_effect = [
        make_response(200, {"token": "t1"}),
        make_response(200, {"user": ALICE}),
    ]
    controller = SessionController(client, store)
    controller.login("alice", "pw")

    def locked(path) -> None:
        raise PermissionError("locked")

    monkeypatch.setattr(token_store_module.os, "remove", locked)

    result = controller.logout()

    assert result == FlowResult.success(ROOT_DESTINATION)
    assert controller.status is SessionState.UNAUTHENTICATED
    assert controller.user is None
    _assert_invariant(controller)


def test_restore_survives_unremovable_token_file(
    client: AuthServiceClient, store: TokenStore, http_session: MagicMock, make_response, monkeypatch
) -> None:
    store.write("stale")
    http_session.request.return_value = make_response(401, {"message": "expired"})
    controller = SessionController(client, store)

    def locked(path) -> None:
        raise PermissionError("locked")

    monkeypatch.setattr(token_store_module.os, "remove", locked)

    assert controller.restore_session() is SessionState.UNAUTHENTICATED
    assert controller.user is None
