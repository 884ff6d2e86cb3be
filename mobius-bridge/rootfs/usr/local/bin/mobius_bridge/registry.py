"""Device lookup, stable identifiers and the record of announced devices."""
import logging
import re
import secrets
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .models import ConfigurationDocument, Device, Tank

_LOGGER = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[^a-z0-9]+")


class DiscoveryRecord:
    """Device ids already announced to the bus, per device type.

    Only grows: a device that drops out of the cloud config keeps its
    discovery and is reported unavailable instead.
    """

    def __init__(self) -> None:
        self._ids: Dict[str, Set[str]] = {}

    def is_discovered(self, device_type: str, device_id: str) -> bool:
        return device_id in self._ids.get(device_type, ())

    def mark(self, device_type: str, device_id: str) -> None:
        self._ids.setdefault(device_type, set()).add(device_id)

    def ids(self, device_type: str) -> FrozenSet[str]:
        return frozenset(self._ids.get(device_type, ()))


def _token(text: str) -> str:
    return _TOKEN_RE.sub("_", text.strip().lower()).strip("_")


class DeviceRegistry:
    def __init__(self, record: Optional[DiscoveryRecord] = None) -> None:
        self.record = record if record is not None else DiscoveryRecord()

    @staticmethod
    def find_devices(document: ConfigurationDocument, model_ids: Iterable[int]) -> List[Tuple[Device, Tank]]:
        """All (device, tank) pairs whose model is in `model_ids`, in document order."""
        wanted = frozenset(model_ids)
        return [(d, t) for t in document.tanks for d in t.devices if d.model in wanted]

    @staticmethod
    def identifier_for(device: Device) -> str:
        """Bus identifier: serial, else address hex, else numeric id.

        A device with none of these gets a random id on every call and
        cannot be tracked across polls.
        """
        if device.serial_number:
            tok = _token(device.serial_number)
            if tok:
                return tok
        if device.address:
            return device.address.hex()
        if device.device_id is not None:
            return str(device.device_id)
        fallback = secrets.token_hex(4)
        _LOGGER.warning("Device %r (model %s) has no serial/address/id, using random id %s",
                        device.name, device.model, fallback)
        return fallback

    def reconcile(self, device_type: str, active_ids: Iterable[str],
                  mark_unavailable: Callable[[str, str], None]) -> List[str]:
        """Report discovered devices missing from this poll as unavailable.

        Returns the missing ids; the discovery record is left untouched.
        """
        active = set(active_ids)
        missing = sorted(self.record.ids(device_type) - active)
        for device_id in missing:
            _LOGGER.info("%s %s missing from config, marking unavailable", device_type, device_id)
            mark_unavailable(device_type, device_id)
        return missing
