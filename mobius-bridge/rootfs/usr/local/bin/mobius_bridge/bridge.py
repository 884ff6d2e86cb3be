"""Wiring of cloud poller, device registry and MQTT publisher.

Control flow: MQTT connect -> PollScheduler.start -> poll_once every
interval (fetch -> discover -> publish state -> reconcile -> availability).
MQTT disconnect stops polling; the next connect resumes it.
"""
import logging
import threading
import time
from datetime import datetime
from typing import Optional

import paho.mqtt.client as mqtt
import requests

from .config import Settings
from .const import (
    DEVICE_TYPE_RADION,
    DEVICE_TYPE_VORTECH,
    MODEL_IDS_BY_TYPE,
    MQTT_CLIENT_ID,
    PAYLOAD_OFFLINE,
)
from .exceptions import MobiusError
from .fetcher import ConfigFetcher
from .models import ConfigurationDocument
from .publisher import StatePublisher, status_topic
from .registry import DeviceRegistry
from .scheduler import PollScheduler
from .session import SessionManager

_LOGGER = logging.getLogger(__name__)

MQTT_KEEPALIVE = 60
MQTT_CONNECT_BACKOFF_MAX = 30


def build_client(settings: Settings) -> mqtt.Client:
    client = mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id=MQTT_CLIENT_ID,
        clean_session=True,
        protocol=mqtt.MQTTv311,
    )
    if settings.mqtt_auth:
        client.username_pw_set(settings.mqtt_username, settings.mqtt_password)
    client.will_set(status_topic(settings.topic_prefix), PAYLOAD_OFFLINE, qos=0, retain=True)
    return client


class MobiusBridge:
    def __init__(self, settings: Settings, *, client=None, http: Optional[requests.Session] = None,
                 timer_factory=threading.Timer) -> None:
        self.settings = settings
        self.client = client if client is not None else build_client(settings)
        self.http = http if http is not None else requests.Session()
        self.session = SessionManager(
            self.http,
            base_url=settings.base_url,
            email=settings.email,
            password=settings.password,
            timeout=settings.http_timeout,
        )
        self.fetcher = ConfigFetcher(self.session, timeout=settings.http_timeout)
        self.registry = DeviceRegistry()
        self.publisher = StatePublisher(self.client, self.registry.record, topic_prefix=settings.topic_prefix)
        self.scheduler = PollScheduler(
            self.poll_once,
            base_interval=settings.poll_interval,
            max_interval=settings.max_backoff,
            timer_factory=timer_factory,
        )
        self.client.on_connect = self.on_connect
        self.client.on_disconnect = self.on_disconnect

    # ===== MQTT callbacks =====
    def on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            _LOGGER.error("MQTT connect refused: %s", reason_code)
            return
        _LOGGER.info("MQTT connected")
        self.publisher.reset_availability()
        self.scheduler.start()

    def on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        _LOGGER.info("MQTT disconnected: %s", reason_code)
        self.scheduler.stop()

    # ===== Poll cycle =====
    def process(self, document: ConfigurationDocument, now: Optional[datetime] = None) -> None:
        for device_type in (DEVICE_TYPE_RADION, DEVICE_TYPE_VORTECH):
            active = set()
            for device, tank in self.registry.find_devices(document, MODEL_IDS_BY_TYPE[device_type]):
                device_id = self.registry.identifier_for(device)
                active.add(device_id)
                self.publisher.ensure_discovery(device_id, device, tank, device_type)
                if device_type == DEVICE_TYPE_RADION:
                    self.publisher.publish_light_state(device_id, device, now)
                else:
                    self.publisher.publish_pump_state(device_id, device, now)
            self.registry.reconcile(device_type, active, self.publisher.publish_unavailable)

    def poll_once(self, now: Optional[datetime] = None) -> bool:
        """One poll cycle. Any failure goes offline and drops the session."""
        try:
            document = self.fetcher.fetch()
            self.process(document, now)
        except MobiusError as err:
            _LOGGER.error("Polling failed: %s", err)
        except Exception:
            _LOGGER.exception("Polling failed")
        else:
            self.publisher.publish_availability(True)
            return True
        self.publisher.publish_availability(False)
        self.session.invalidate()
        return False

    # ===== Lifecycle =====
    def shutdown(self) -> None:
        _LOGGER.info("Shutting down")
        self.scheduler.stop()
        self.publisher.reset_availability()
        self.publisher.publish_availability(False)
        self.client.disconnect()

    # [BRIDGE DOC] MQTT connect loop with exponential backoff on errors.
    def run(self) -> None:
        backoff = 1
        while True:
            try:
                _LOGGER.info("Connecting to %s:%s auth=%s", self.settings.mqtt_host,
                             self.settings.mqtt_port, self.settings.mqtt_auth)
                self.client.connect(self.settings.mqtt_host, self.settings.mqtt_port, keepalive=MQTT_KEEPALIVE)
                self.client.loop_forever(retry_first_connection=True)
                return
            except OSError as e:
                _LOGGER.warning("MQTT reconnect in %s sec: %s", backoff, e)
                time.sleep(backoff)
                backoff = min(MQTT_CONNECT_BACKOFF_MAX, backoff * 2)
