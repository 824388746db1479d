import logging

import pytest
import requests

from auth import AuthClient, AuthError, AuthUser
from http_fakes import FakeResponse, FakeSession, error, ok
from rpc import RpcClient


def _auth(*responses):
    session = FakeSession(list(responses))
    return AuthClient(RpcClient("http://backend.test", session=session)), session


def test_register_returns_user_and_sends_name() -> None:
    auth, session = _auth(ok({"id": 1, "email": "a@b.c", "name": "Ana"}))

    user = auth.register("a@b.c", "secret", name="Ana")

    assert user == AuthUser(id=1, email="a@b.c", name="Ana", raw={"id": 1, "email": "a@b.c", "name": "Ana"})
    assert session.procedures == ["auth.register"]
    assert session.requests[0][2]["json"] == {"json": {"email": "a@b.c", "password": "secret", "name": "Ana"}}


def test_register_failure_defaults_message() -> None:
    auth, _ = _auth(FakeResponse(500, {}))

    with pytest.raises(AuthError, match="Registration failed"):
        auth.register("a@b.c", "secret")


def test_login_failure_uses_backend_message() -> None:
    auth, _ = _auth(error(401, "Invalid email or password"))

    with pytest.raises(AuthError) as exc_info:
        auth.login("a@b.c", "wrong")

    assert exc_info.value.message == "Invalid email or password"
    assert exc_info.value.status == 401


def test_login_without_user_in_body_fails() -> None:
    auth, _ = _auth(ok(None))

    with pytest.raises(AuthError, match="Login failed"):
        auth.login("a@b.c", "secret")


def test_current_user_none_on_unauthorized() -> None:
    auth, _ = _auth(error(401, "UNAUTHORIZED"))
    assert auth.current_user() is None


def test_current_user_swallows_transport_errors(caplog) -> None:
    auth, _ = _auth(requests.ConnectionError("down"))

    with caplog.at_level(logging.WARNING, logger="auth"):
        assert auth.current_user() is None

    assert "Failed to get user" in caplog.text


def test_logout_is_best_effort() -> None:
    auth, session = _auth(requests.Timeout("slow"))

    auth.logout()

    assert session.procedures == ["auth.logout"]


def test_is_authenticated() -> None:
    auth, _ = _auth(ok({"id": 7, "email": "x@y.z"}), error(401))

    assert auth.is_authenticated() is True
    assert auth.is_authenticated() is False
