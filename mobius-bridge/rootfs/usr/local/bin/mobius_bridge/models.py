"""Typed view of the Mobius `config.json` document.

The cloud omits fields freely, so every optional value is explicit and the
`from_dict` builders skip entries that are not mappings instead of failing.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_minutes(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _as_address(value: Any) -> Optional[bytes]:
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value):
            return bytes(value)
        return None
    if isinstance(value, str):
        s = value.replace(":", "").replace("-", "").strip()
        try:
            return bytes.fromhex(s) or None
        except ValueError:
            return None
    return None


def _mappings(items: Any) -> List[Mapping[str, Any]]:
    if not isinstance(items, list):
        return []
    return [it for it in items if isinstance(it, Mapping)]


@dataclass(frozen=True)
class SchedulePoint:
    time: Optional[float] = None  # minutes since midnight
    data: Optional[str] = None  # base64 payload

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SchedulePoint":
        data = raw.get("data")
        return cls(time=_as_minutes(raw.get("time")), data=data if isinstance(data, str) else None)


@dataclass(frozen=True)
class Schedule:
    points: Tuple[SchedulePoint, ...] = ()
    last_index_used: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Schedule":
        if not isinstance(raw, Mapping):
            return cls()
        return cls(
            points=tuple(SchedulePoint.from_dict(p) for p in _mappings(raw.get("points"))),
            last_index_used=_as_int(raw.get("lastIndexUsed")),
        )


@dataclass(frozen=True)
class Device:
    model: Optional[int] = None
    serial_number: Optional[str] = None
    address: Optional[bytes] = None
    name: Optional[str] = None
    device_id: Optional[int] = None
    schedule: Schedule = field(default_factory=Schedule)
    feed_mode_return_delay: Any = None

    @property
    def in_feed_mode(self) -> bool:
        return bool(self.feed_mode_return_delay)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Device":
        vectra = raw.get("vectraInfo")
        return cls(
            model=_as_int(raw.get("model")),
            serial_number=_as_text(raw.get("serialNumber")),
            address=_as_address(raw.get("address")),
            name=_as_text(raw.get("name")),
            device_id=_as_int(raw.get("id")),
            schedule=Schedule.from_dict(raw.get("schedule")),
            feed_mode_return_delay=vectra.get("feedModeReturnDelay") if isinstance(vectra, Mapping) else None,
        )


@dataclass(frozen=True)
class Tank:
    name: Optional[str] = None
    devices: Tuple[Device, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Tank":
        return cls(
            name=_as_text(raw.get("name")),
            devices=tuple(Device.from_dict(d) for d in _mappings(raw.get("devices"))),
        )


@dataclass(frozen=True)
class ConfigurationDocument:
    tanks: Tuple[Tank, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "ConfigurationDocument":
        if not isinstance(raw, Mapping):
            return cls()
        return cls(tanks=tuple(Tank.from_dict(t) for t in _mappings(raw.get("tanks"))))


def minutes_of_day(now: datetime) -> float:
    return now.hour * 60 + now.minute + now.second / 60


def sort_points(points: Sequence[SchedulePoint]) -> List[SchedulePoint]:
    """Stable-sort points by time; untimed points keep their index."""
    ordered = list(points)
    slots = [i for i, p in enumerate(ordered) if p.time is not None]
    timed = sorted((ordered[i] for i in slots), key=lambda p: p.time)
    for i, p in zip(slots, timed):
        ordered[i] = p
    return ordered


def select_active_point(points: Sequence[SchedulePoint], now: Optional[datetime] = None) -> Optional[SchedulePoint]:
    """Return the schedule point in effect at `now` (local wall clock).

    The last point at or before the current minute wins. Before the first
    point of the day, the last point of the previous day is still active.
    """
    if not points:
        return None
    current = minutes_of_day(now or datetime.now())
    ordered = sort_points(points)
    active = None
    last_timed = None
    for p in ordered:
        if p.time is None:
            continue
        last_timed = p
        if p.time <= current:
            active = p
    if active is not None:
        return active
    return last_timed if last_timed is not None else ordered[-1]
