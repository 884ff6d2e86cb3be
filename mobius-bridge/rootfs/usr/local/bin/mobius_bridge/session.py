"""Login and session credential lifecycle for the Mobius cloud."""
import logging
import re
from typing import Optional

import requests

from .const import LOGIN_PATH, USER_AGENT
from .exceptions import AuthenticationError, TransportError

_LOGGER = logging.getLogger(__name__)

_AUTH_COOKIE_RE = re.compile(r"auth=([^;]+)")


class SessionManager:
    """Holds the `auth` cookie; Unauthenticated until `ensure_session` succeeds."""

    def __init__(self, http: requests.Session, *, base_url: str, email: str, password: str, timeout: float = 15) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.password = password
        self.timeout = timeout
        self._token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def ensure_session(self) -> str:
        """Return the session credential, logging in first when none is held.

        Raises:
            AuthenticationError: Login rejected or response had no auth cookie.
            TransportError: The request itself failed.
        """
        if self._token is not None:
            return self._token

        _LOGGER.info("Logging in to Mobius...")
        try:
            resp = self.http.post(
                f"{self.base_url}{LOGIN_PATH}",
                json={"user": self.email, "password": self.password},
                headers={"Content-Type": "application/json", "User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
        except requests.RequestException as err:
            raise TransportError(f"Login request failed: {err}") from err

        if not resp.ok:
            raise AuthenticationError(f"Login failed ({resp.status_code}): {resp.text[:200]}")

        set_cookie = resp.headers.get("Set-Cookie")
        if not set_cookie:
            raise AuthenticationError("Login succeeded but no Set-Cookie header received")
        match = _AUTH_COOKIE_RE.search(set_cookie)
        if not match:
            raise AuthenticationError("No auth cookie found in Set-Cookie header")

        self._token = f"auth={match.group(1)}"
        _LOGGER.info("Login successful")
        return self._token

    def invalidate(self) -> None:
        if self._token is not None:
            _LOGGER.debug("Session invalidated")
        self._token = None
        # the jar would otherwise replay the stale cookie
        self.http.cookies.clear()
