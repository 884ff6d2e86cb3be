"""Decoders for the base64 schedule point payloads.

Radion and VorTech use unrelated layouts:
- Radion: repeated 3-byte records [channel, raw LE16]; raw is tenths of a percent.
- VorTech: first two bytes are speed as BE16 tenths of a percent.
Malformed input decodes to an empty/absent result, never an exception.
"""
import base64
import binascii
import logging
import struct
from typing import Dict, NamedTuple, Optional

from .const import PERCENT_SCALE

_LOGGER = logging.getLogger(__name__)

_RADION_RECORD = struct.Struct("<BH")
_PUMP_SPEED = struct.Struct(">H")


class ChannelReading(NamedTuple):
    percent: float
    raw: int


def _b64(data) -> Optional[bytes]:
    if not data:
        return None
    try:
        return base64.b64decode(data)
    except (binascii.Error, TypeError, ValueError) as e:
        _LOGGER.debug("bad base64 payload %r: %s", data, e)
        return None


def to_percent(raw: int) -> float:
    return round(raw / PERCENT_SCALE, 1)


# [BRIDGE DOC] Radion point -> {channel: ChannelReading}; trailing partial record is dropped.
def decode_light_point(data) -> Dict[int, ChannelReading]:
    raw = _b64(data)
    if not raw:
        return {}
    channels = {}
    for i in range(0, len(raw) - _RADION_RECORD.size + 1, _RADION_RECORD.size):
        channel, value = _RADION_RECORD.unpack_from(raw, i)
        channels[channel] = ChannelReading(to_percent(value), value)
    return channels


# [BRIDGE DOC] VorTech point -> speed percent, None when shorter than 2 bytes.
def decode_pump_point(data) -> Optional[float]:
    raw = _b64(data)
    if not raw or len(raw) < _PUMP_SPEED.size:
        return None
    return to_percent(_PUMP_SPEED.unpack_from(raw)[0])
