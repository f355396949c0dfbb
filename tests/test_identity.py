import re

import pytest

from pulleys.identity import (
    STATION_REGISTRY,
    TRAVELER_REGISTRY,
    Identity,
    device_id_from_mac,
    lookup_label,
)
from pulleys.protocol import DeviceType

MAC = bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x01])
OTHER_MAC = bytes([0x02, 0x00, 0x00, 0x00, 0x00, 0x02])


def test_device_id_in_range():
    for last in range(256):
        mac = bytes([0x02, 0, 0x11, 0x22, 0x33, last])
        assert 0 <= device_id_from_mac(mac) <= 0xFFFF


def test_device_id_deterministic():
    assert device_id_from_mac(MAC) == device_id_from_mac(bytes(MAC))


def test_device_id_ignores_first_two_bytes():
    a = bytes([0x02, 0x00, 0x10, 0x20, 0x30, 0x40])
    b = bytes([0x0A, 0xBB, 0x10, 0x20, 0x30, 0x40])
    assert device_id_from_mac(a) == device_id_from_mac(b)


def test_device_id_zero_tail():
    assert device_id_from_mac(bytes([0x02, 0x00, 0, 0, 0, 0])) == 0


def test_device_id_accepts_string():
    assert device_id_from_mac("02:00:00:00:00:01") == device_id_from_mac(MAC)


def test_different_macs_differ():
    assert device_id_from_mac(MAC) != device_id_from_mac(OTHER_MAC)


@pytest.mark.parametrize("bad", [b"", b"\x00" * 5, b"\x00" * 7])
def test_bad_mac_length(bad):
    with pytest.raises(ValueError):
        device_id_from_mac(bad)


def test_lookup_registered_labels():
    for device_id, label in TRAVELER_REGISTRY.items():
        assert lookup_label(device_id, DeviceType.TRAVELER) == label
    for device_id, label in STATION_REGISTRY.items():
        assert lookup_label(device_id, DeviceType.STATION) == label


def test_lookup_registries_are_separate():
    assert lookup_label(0x6910, DeviceType.TRAVELER) == 1
    assert lookup_label(0x6910, DeviceType.STATION) == 0


def test_from_mac_fields():
    ident = Identity.from_mac(MAC, DeviceType.TRAVELER)
    assert ident.device_id == device_id_from_mac(MAC)
    assert ident.label == lookup_label(ident.device_id, DeviceType.TRAVELER)
    assert ident.mac == MAC


def test_names():
    traveler = Identity.from_mac(MAC, DeviceType.TRAVELER)
    station = Identity.from_mac(MAC, DeviceType.STATION)
    assert re.fullmatch(r"T-[0-9A-F]{4}", traveler.name)
    assert re.fullmatch(r"S-[0-9A-F]{4}", station.name)
    assert traveler.name[2:] == station.name[2:]


def test_banner_contents():
    ident = Identity(mac=MAC, device_type=DeviceType.TRAVELER, device_id=0x6910, label=1)
    lines = ident.banner().split("\n")
    assert len(lines) == 5
    assert lines[0] == lines[-1]
    assert lines[1] == "  PULLEYS Traveler"
    assert "T-6910 (0x6910)" in lines[2]
    assert "Label: #01" in lines[2]
    assert lines[3] == "  MAC: 02:00:00:00:00:01"


def test_banner_station():
    ident = Identity.from_mac(MAC, DeviceType.STATION)
    assert "PULLEYS Station" in ident.banner()
    assert ident.name in ident.banner()