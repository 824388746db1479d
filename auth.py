from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st

from rpc import DEFAULT_TIMEOUT, RpcClient, RpcError

logger = logging.getLogger(__name__)


# -----------------------------
# Connection / state helpers
# -----------------------------

# One client per browser session: the cookie jar must not be shared
# between visitors, so this lives in session_state rather than st.connection.
CLIENT_KEY = "rpc_client"


def get_client(base_url: str, timeout: float = DEFAULT_TIMEOUT) -> RpcClient:
    client = st.session_state.get(CLIENT_KEY)
    if client is None or client.base_url != base_url.rstrip("/"):
        client = RpcClient(base_url, timeout=timeout)
        st.session_state[CLIENT_KEY] = client
    return client


# -----------------------------
# User model
# -----------------------------

@dataclass(frozen=True)
class AuthUser:
    id: Any
    email: Optional[str] = None
    name: Optional[str] = None
    raw: Optional[dict] = None


def _to_auth_user(user_obj: Any) -> Optional[AuthUser]:
    if not isinstance(user_obj, dict):
        return None

    user_id = user_obj.get("id")
    if user_id is None:
        return None

    return AuthUser(
        id=user_id,
        email=user_obj.get("email"),
        name=user_obj.get("name") or None,
        raw=user_obj,
    )


class AuthError(RpcError):
    """Register or login was refused by the backend."""


# -----------------------------
# Core auth functions
# -----------------------------

class AuthClient:
    def __init__(self, client: RpcClient):
        self.client = client

    def _authenticate(self, procedure: str, payload: dict, fallback: str) -> AuthUser:
        try:
            data = self.client.mutate(procedure, payload, fallback=fallback)
        except RpcError as e:
            raise AuthError(e.message, status=e.status) from e

        user = _to_auth_user(data)
        if user is None:
            raise AuthError(fallback)
        return user

    def register(self, email: str, password: str, name: Optional[str] = None) -> AuthUser:
        """Create an account. The backend also opens a session for it."""
        payload = {"email": email, "password": password}
        if name:
            payload["name"] = name
        return self._authenticate("auth.register", payload, "Registration failed")

    def login(self, email: str, password: str) -> AuthUser:
        return self._authenticate(
            "auth.login", {"email": email, "password": password}, "Login failed"
        )

    def current_user(self) -> Optional[AuthUser]:
        """
        Passive check used for gating the page; never raises.
        """
        try:
            data = self.client.query("auth.me", fallback="Failed to get user")
        except RpcError as e:
            logger.warning("Failed to get user: %s", e)
            return None
        return _to_auth_user(data)

    def logout(self) -> None:
        try:
            self.client.mutate("auth.logout", fallback="Failed to logout")
        except RpcError as e:
            logger.warning("Failed to logout: %s", e)

    def is_authenticated(self) -> bool:
        """
        Guard for screens that only need a yes/no. Callers that also need
        the user (the page's sign-in gate) call current_user() instead.
        """
        return self.current_user() is not None
