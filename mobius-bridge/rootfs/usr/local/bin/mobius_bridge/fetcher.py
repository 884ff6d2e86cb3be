"""Fetch of the full tank/device configuration document."""
import logging
from http import HTTPStatus

import requests

from .const import CONFIG_PATH, USER_AGENT
from .exceptions import ConfigFetchError, TransportError
from .models import ConfigurationDocument
from .session import SessionManager

_LOGGER = logging.getLogger(__name__)


class ConfigFetcher:
    def __init__(self, session: SessionManager, *, timeout: float = 15) -> None:
        self.session = session
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.session.base_url}{CONFIG_PATH}"

    def _get(self) -> requests.Response:
        token = self.session.ensure_session()
        try:
            return self.session.http.get(
                self.url,
                headers={"Cookie": token, "User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
        except requests.RequestException as err:
            raise TransportError(f"Config request failed: {err}") from err

    def fetch(self) -> ConfigurationDocument:
        """Fetch and parse config.json.

        A 401 forces exactly one re-login and one retried request; whatever
        the retry returns is final.

        Raises:
            ConfigFetchError: Final response not 2xx, or body is not JSON.
            AuthenticationError: (Re-)login failed.
            TransportError: A request failed at the network level.
        """
        resp = self._get()
        if resp.status_code == HTTPStatus.UNAUTHORIZED:
            _LOGGER.info("Session expired, re-logging...")
            self.session.invalidate()
            resp = self._get()

        if not resp.ok:
            raise ConfigFetchError(f"Config fetch failed ({resp.status_code})", status=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as err:
            raise ConfigFetchError("Config response is not valid JSON", status=resp.status_code) from err

        document = ConfigurationDocument.from_dict(payload)
        _LOGGER.debug("Fetched config: %d tank(s)", len(document.tanks))
        return document
