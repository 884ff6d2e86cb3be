"""Tests for device lookup, identifiers and reconciliation."""

from __future__ import annotations

from mobius_bridge.models import ConfigurationDocument, Device, Tank
from mobius_bridge.registry import DeviceRegistry, DiscoveryRecord


def test_find_devices_filters_by_model_across_tanks() -> None:
    r1, v1, r2 = Device(model=179, name="r1"), Device(model=147, name="v1"), Device(model=179, name="r2")
    t1, t2 = Tank("A", (r1, v1)), Tank("B", (Device(model=1), r2))
    doc = ConfigurationDocument((t1, t2))

    assert DeviceRegistry.find_devices(doc, {179}) == [(r1, t1), (r2, t2)]
    assert DeviceRegistry.find_devices(doc, {147}) == [(v1, t1)]
    assert DeviceRegistry.find_devices(ConfigurationDocument(), {179}) == []


def test_identifier_prefers_serial_then_address_then_id() -> None:
    full = Device(serial_number=" AB-12 cd ", address=b"\x01\x02", device_id=9)
    assert DeviceRegistry.identifier_for(full) == "ab_12_cd"
    assert DeviceRegistry.identifier_for(Device(address=b"\x0a\xff", device_id=9)) == "0aff"
    assert DeviceRegistry.identifier_for(Device(device_id=9)) == "9"
    assert DeviceRegistry.identifier_for(Device(serial_number="--", device_id=0)) == "0"


def test_identifier_is_stable_for_same_device() -> None:
    dev = Device(serial_number="XYZ")
    assert DeviceRegistry.identifier_for(dev) == DeviceRegistry.identifier_for(Device(serial_number="xyz"))


def test_identifier_random_fallback() -> None:
    a = DeviceRegistry.identifier_for(Device(model=179))
    b = DeviceRegistry.identifier_for(Device(model=179))
    assert len(a) == 8
    assert a != b


def test_discovery_record_grows_per_type() -> None:
    record = DiscoveryRecord()
    record.mark("radion", "a")
    record.mark("vortech", "a")
    record.mark("radion", "a")

    assert record.ids("radion") == frozenset({"a"})
    assert record.is_discovered("vortech", "a")
    assert not record.is_discovered("radion", "b")
    assert record.ids("other") == frozenset()


def test_reconcile_reports_missing_without_forgetting() -> None:
    registry = DeviceRegistry()
    for dev_id in ("a", "b", "c"):
        registry.record.mark("radion", dev_id)
    calls = []

    missing = registry.reconcile("radion", {"b"}, lambda t, i: calls.append((t, i)))

    assert missing == ["a", "c"]
    assert calls == [("radion", "a"), ("radion", "c")]
    assert registry.record.ids("radion") == frozenset({"a", "b", "c"})


def test_reconcile_nothing_discovered() -> None:
    calls = []
    assert DeviceRegistry().reconcile("vortech", set(), lambda t, i: calls.append(i)) == []
    assert calls == []
