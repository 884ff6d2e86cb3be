"""Fixed values of the Mobius cloud API and of the HA discovery layout."""

from typing import NamedTuple, Optional

USER_AGENT = "Mobius/2.24; iPhone18,2 Version/26.2; Mobile"
LOGIN_PATH = "/api/login"
CONFIG_PATH = "/mobius/fs/config.json"

MQTT_CLIENT_ID = "mobius-ha-node"
MANUFACTURER = "EcoTech Marine"

PAYLOAD_ONLINE = "online"
PAYLOAD_OFFLINE = "offline"
STATE_UNAVAILABLE = "unavailable"

# Radion channel values and VorTech speed are both stored as tenths of a percent
PERCENT_SCALE = 10

DEVICE_TYPE_RADION = "radion"
DEVICE_TYPE_VORTECH = "vortech"


class SensorDescription(NamedTuple):
    key: str
    name: str
    unit: Optional[str] = None
    channel: Optional[int] = None
    icon: Optional[str] = None


RADION_SENSORS = (
    SensorDescription("point_intensity", "Point Intensity", "%", 1, "mdi:brightness-percent"),
    SensorDescription("uv", "UV", "%", 21, "mdi:led-on"),
    SensorDescription("violet", "Violet", "%", 23, "mdi:led-on"),
    SensorDescription("royal_blue", "Royal Blue", "%", 18, "mdi:led-on"),
    SensorDescription("blue", "Blue", "%", 17, "mdi:led-on"),
    SensorDescription("green", "Green", "%", 19, "mdi:led-on"),
    SensorDescription("red", "Red", "%", 20, "mdi:led-on"),
    SensorDescription("warm_white", "Warm White", "%", 31, "mdi:led-on"),
    SensorDescription("cool_white", "Cool White", "%", 16, "mdi:led-on"),
)

VORTECH_SENSORS = (
    SensorDescription("speed", "Speed", "%", icon="mdi:fan"),
    SensorDescription("mode", "Mode", icon="mdi:waves"),
)

SENSORS_BY_TYPE = {
    DEVICE_TYPE_RADION: RADION_SENSORS,
    DEVICE_TYPE_VORTECH: VORTECH_SENSORS,
}

MODEL_IDS_BY_TYPE = {
    DEVICE_TYPE_RADION: frozenset({179}),
    DEVICE_TYPE_VORTECH: frozenset({147}),
}

MODEL_NAME_BY_TYPE = {
    DEVICE_TYPE_RADION: "Radion",
    DEVICE_TYPE_VORTECH: "VorTech",
}
