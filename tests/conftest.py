"""Shared fakes for the MQTT client, the HTTP session and timers."""

from __future__ import annotations

import base64
import json
import struct
from dataclasses import dataclass, field
from typing import Any

import pytest
from requests.cookies import RequestsCookieJar
from requests.structures import CaseInsensitiveDict

from mobius_bridge.config import Settings


def light_payload(*records: tuple[int, int]) -> str:
    return base64.b64encode(b"".join(struct.pack("<BH", ch, raw) for ch, raw in records)).decode()


def pump_payload(raw: int) -> str:
    return base64.b64encode(struct.pack(">H", raw)).decode()


@dataclass
class Published:
    topic: str
    payload: Any
    qos: int
    retain: bool


class FakeClient:
    def __init__(self) -> None:
        self.published: list[Published] = []
        self.disconnected = False

    def publish(self, topic, payload=None, qos=0, retain=False):
        self.published.append(Published(topic, payload, qos, retain))

    def disconnect(self):
        self.disconnected = True

    def topics(self) -> list[str]:
        return [p.topic for p in self.published]

    def last(self, topic: str) -> Published:
        return [p for p in self.published if p.topic == topic][-1]

    def configs(self) -> list[Published]:
        return [p for p in self.published if p.topic.endswith("/config")]

    def clear(self) -> None:
        self.published.clear()


class FakeResponse:
    def __init__(self, status_code: int = 200, *, body: Any = None, text: str | None = None,
                 headers: dict[str, str] | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")
        self.headers = CaseInsensitiveDict(headers or {})

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        return json.loads(self.text)


@dataclass
class FakeHttp:
    """Returns queued responses for POST (login) and GET (config) in order."""

    posts: list[Any] = field(default_factory=list)
    gets: list[Any] = field(default_factory=list)
    calls: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)
    cookies: RequestsCookieJar = field(default_factory=RequestsCookieJar)

    def _next(self, queue: list[Any]):
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self._next(self.posts)

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self._next(self.gets)

    def count(self, method: str) -> int:
        return sum(1 for c in self.calls if c[0] == method)


def login_ok(token: str = "tok123") -> FakeResponse:
    return FakeResponse(200, body={"ok": True}, headers={"Set-Cookie": f"auth={token}; Path=/; HttpOnly"})


class ManualTimer:
    """threading.Timer stand-in that only fires when the test says so."""

    def __init__(self, interval, function) -> None:
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function()


class TimerFactory:
    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, interval, function) -> ManualTimer:
        timer = ManualTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> ManualTimer:
        return self.timers[-1]


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def timers() -> TimerFactory:
    return TimerFactory()


@pytest.fixture
def settings() -> Settings:
    return Settings(email="me@example.com", password="pw", base_url="https://cloud.test")
