"""Add-on options, read from the environment once at startup."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .exceptions import ConfigError

DEFAULT_BASE_URL = "https://cloud.mobius.app"
MIN_POLL_INTERVAL = 15


def _env_bool(env: Mapping[str, str], name: str, default: str = "false") -> bool:
    return env.get(name, default).strip().lower() == "true"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    email: str
    password: str
    base_url: str = DEFAULT_BASE_URL
    poll_interval: int = 60
    max_backoff: int = 900
    http_timeout: int = 15
    topic_prefix: str = "homeassistant"
    debug: bool = False
    mqtt_host: str = "127.0.0.1"
    mqtt_port: int = 1883
    mqtt_username: Optional[str] = None
    mqtt_password: Optional[str] = None

    @property
    def mqtt_auth(self) -> bool:
        return bool(self.mqtt_username and self.mqtt_password)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        email = env.get("MOBIUS_EMAIL", "").strip()
        password = env.get("MOBIUS_PASSWORD", "")
        if not email or not password:
            raise ConfigError("MOBIUS_EMAIL and MOBIUS_PASSWORD are required")

        poll_interval = max(MIN_POLL_INTERVAL, _env_int(env, "MOBIUS_POLL_INTERVAL", 60))
        max_backoff = max(poll_interval, _env_int(env, "MOBIUS_MAX_BACKOFF", 900))
        http_timeout = _env_int(env, "MOBIUS_HTTP_TIMEOUT", 15)
        if http_timeout < 1:
            http_timeout = 1

        return cls(
            email=email,
            password=password,
            base_url=(env.get("MOBIUS_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/"),
            poll_interval=poll_interval,
            max_backoff=max_backoff,
            http_timeout=http_timeout,
            topic_prefix=(env.get("MQTT_TOPIC_PREFIX") or "homeassistant").strip().rstrip("/"),
            debug=_env_bool(env, "MOBIUS_DEBUG"),
            mqtt_host=env.get("MQTT_HOST") or "127.0.0.1",
            mqtt_port=_env_int(env, "MQTT_PORT", 1883),
            mqtt_username=env.get("MQTT_USERNAME") or None,
            mqtt_password=env.get("MQTT_PASSWORD") or None,
        )

    def describe(self) -> str:
        return " ".join([
            f"base_url={self.base_url}",
            f"user={'set' if self.email else 'none'}",
            f"poll_interval={self.poll_interval}",
            f"max_backoff={self.max_backoff}",
            f"http_timeout={self.http_timeout}",
            f"topic_prefix={self.topic_prefix}",
            f"mqtt={self.mqtt_host}:{self.mqtt_port}",
            f"mqtt_auth={'set' if self.mqtt_auth else 'none'}",
            f"debug={self.debug}",
        ])
