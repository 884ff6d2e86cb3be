"""MQTT rendering of discovery configs, sensor states and availability.

Topic layout:
- `<prefix>/sensor/mobius_<type>/<id>/<key>/config`  discovery, JSON, retained
- `<prefix>/sensor/mobius_<type>/<id>/<key>/state`   state, plain string
- `<prefix>/mobius/status`                           online/offline, retained
"""
import json
import logging
from datetime import datetime
from typing import Optional

from .const import (
    DEVICE_TYPE_RADION,
    DEVICE_TYPE_VORTECH,
    MANUFACTURER,
    MODEL_NAME_BY_TYPE,
    PAYLOAD_OFFLINE,
    PAYLOAD_ONLINE,
    RADION_SENSORS,
    SENSORS_BY_TYPE,
    STATE_UNAVAILABLE,
    SensorDescription,
)
from .decoder import decode_light_point, decode_pump_point
from .models import Device, Tank, select_active_point
from .registry import DiscoveryRecord

_LOGGER = logging.getLogger(__name__)


def status_topic(prefix: str) -> str:
    return f"{prefix}/mobius/status"


# Unified builder for Home Assistant device descriptor
def make_device(device_type: str, device_id: str, device: Device, tank: Optional[Tank] = None) -> dict:
    model = MODEL_NAME_BY_TYPE.get(device_type, device_type)
    out = {
        "identifiers": [f"mobius_{device_type}_{device_id}"],
        "name": device.name or f"Mobius {model} {device_id}",
        "manufacturer": MANUFACTURER,
        "model": model,
    }
    if device.serial_number:
        out["serial_number"] = device.serial_number
    if tank is not None and tank.name:
        out["suggested_area"] = tank.name
    return out


class StatePublisher:
    def __init__(self, client, record: DiscoveryRecord, *, topic_prefix: str = "homeassistant") -> None:
        self.client = client
        self.record = record
        self.prefix = topic_prefix.rstrip("/")
        self._last_availability: Optional[str] = None

    @property
    def availability_topic(self) -> str:
        return status_topic(self.prefix)

    def sensor_topic(self, device_type: str, device_id: str, key: str, kind: str) -> str:
        return f"{self.prefix}/sensor/mobius_{device_type}/{device_id}/{key}/{kind}"

    # [BRIDGE DOC] Publish wrapper: JSON-encode dicts, debug logging.
    def pub(self, topic: str, payload, retain: bool = False, qos: int = 0):
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload, ensure_ascii=False)
        elif not isinstance(payload, (str, bytes, bytearray)):
            payload = str(payload)
        _LOGGER.debug("PUB %s len=%d retain=%s", topic, len(payload), retain)
        return self.client.publish(topic, payload, qos=qos, retain=retain)

    def discovery_config(self, device_type: str, device_id: str, sensor: SensorDescription, device_info: dict) -> dict:
        uid = f"mobius_{device_type}_{device_id}_{sensor.key}"
        conf = {
            "name": sensor.name,
            "unique_id": uid,
            "object_id": uid,
            "state_topic": self.sensor_topic(device_type, device_id, sensor.key, "state"),
            "availability_topic": self.availability_topic,
            "device": device_info,
        }
        if sensor.unit:
            conf["unit_of_measurement"] = sensor.unit
            conf["state_class"] = "measurement"
        if sensor.icon:
            conf["icon"] = sensor.icon
        return conf

    # [BRIDGE DOC] Emit HA discovery for one device, once per (type, id).
    def ensure_discovery(self, device_id: str, device: Device, tank: Optional[Tank], device_type: str) -> bool:
        """Publish one retained discovery config per sensor of the device type.

        Returns False (and publishes nothing) when the device was already
        announced during this process lifetime.
        """
        if self.record.is_discovered(device_type, device_id):
            return False
        device_info = make_device(device_type, device_id, device, tank)
        for sensor in SENSORS_BY_TYPE[device_type]:
            conf = self.discovery_config(device_type, device_id, sensor, device_info)
            self.pub(self.sensor_topic(device_type, device_id, sensor.key, "config"), conf, retain=True)
        self.record.mark(device_type, device_id)
        _LOGGER.info("Announced %s %s (%s)", device_type, device_id, device_info["name"])
        return True

    def publish_state(self, device_type: str, device_id: str, key: str, value) -> None:
        self.pub(self.sensor_topic(device_type, device_id, key, "state"),
                 STATE_UNAVAILABLE if value is None else value)

    def publish_light_state(self, device_id: str, device: Device, now: Optional[datetime] = None) -> None:
        point = select_active_point(device.schedule.points, now)
        channels = decode_light_point(point.data) if point is not None else {}
        for sensor in RADION_SENSORS:
            reading = channels.get(sensor.channel)
            self.publish_state(DEVICE_TYPE_RADION, device_id, sensor.key,
                               reading.percent if reading is not None else None)

    def publish_pump_state(self, device_id: str, device: Device, now: Optional[datetime] = None) -> None:
        point = select_active_point(device.schedule.points, now)
        speed = decode_pump_point(point.data) if point is not None else None
        self.publish_state(DEVICE_TYPE_VORTECH, device_id, "speed", speed)
        self.publish_state(DEVICE_TYPE_VORTECH, device_id, "mode", "Feed" if device.in_feed_mode else "Run")

    def publish_unavailable(self, device_type: str, device_id: str) -> None:
        for sensor in SENSORS_BY_TYPE[device_type]:
            self.publish_state(device_type, device_id, sensor.key, None)

    def publish_availability(self, is_online: bool) -> bool:
        """Publish online/offline (retained) only when it changed. Returns True if sent."""
        value = PAYLOAD_ONLINE if is_online else PAYLOAD_OFFLINE
        if value == self._last_availability:
            return False
        self.pub(self.availability_topic, value, retain=True)
        self._last_availability = value
        return True

    def reset_availability(self) -> None:
        # broker may hold the last will by now
        self._last_availability = None
