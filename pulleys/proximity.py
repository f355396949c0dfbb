"""Proximity tracking of nearby devices from smoothed BLE signal strength."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterator, Optional

from pulleys.protocol import Color, Culture, DeviceType, Packet

log = logging.getLogger(__name__)


class ProximityZone(IntEnum):
    """How close a device is, from not heard to culture-exchange range."""

    GONE = 0
    FAR = 1
    NEAR = 2
    CLOSE = 3


_NO_CULTURE = Culture(Color(0, 0, 0), Color(0, 0, 0), 0)


@dataclass
class TrackedDevice:
    """What is known about one device that has been heard."""

    device_id: int = 0
    device_type: int = 0
    culture: Culture = _NO_CULTURE
    rssi_smooth: float = -100.0
    zone: ProximityZone = ProximityZone.GONE
    last_seen_ms: int = 0
    active: bool = False

    @property
    def name(self) -> str:
        """Readable name such as ``T-1A2B``."""
        prefix = "T" if self.device_type == DeviceType.TRAVELER else "S"
        return f"{prefix}-{self.device_id:04X}"


ZoneChangeCallback = Callable[[TrackedDevice, ProximityZone, ProximityZone], None]


class ProximityTracker:
    """Tracks up to 32 devices by id and reports when they change zone."""

    MAX_TRACKED = 32
    RSSI_ALPHA = 0.3
    RSSI_CLOSE = -58
    RSSI_NEAR = -73
    RSSI_FAR = -80
    HYSTERESIS = 5
    TIMEOUT_MS = 10000

    def __init__(self, on_zone_change: Optional[ZoneChangeCallback] = None) -> None:
        self.on_zone_change = on_zone_change
        self._slots: list[Optional[TrackedDevice]] = [None] * self.MAX_TRACKED

    def update(self, packet: Packet, rssi: int, now_ms: int) -> Optional[TrackedDevice]:
        """Feed one received beacon; return the tracked device, or None if the table is full."""
        device = self._find_or_create(packet.device_id)
        if device is None:
            return None

        device.device_type = packet.device_type
        device.culture = packet.culture
        device.last_seen_ms = now_ms
        device.active = True

        if device.rssi_smooth < -99.0:
            device.rssi_smooth = float(rssi)
        else:
            device.rssi_smooth = (
                device.rssi_smooth * (1.0 - self.RSSI_ALPHA) + rssi * self.RSSI_ALPHA
            )

        new_zone = self._classify(device.rssi_smooth, device.zone)
        if new_zone != device.zone:
            old_zone = device.zone
            device.zone = new_zone
            log.info("  [PROX] %s: %s → %s (RSSI %.0f dBm)",
                     device.name, old_zone.name, new_zone.name, device.rssi_smooth)
            if self.on_zone_change is not None:
                self.on_zone_change(device, old_zone, new_zone)
        return device

    def prune_stale(self, now_ms: int) -> None:
        """Forget devices not heard for longer than the timeout."""
        for index, device in enumerate(self._slots):
            if device is None:
                continue
            if ((now_ms - device.last_seen_ms) & 0xFFFFFFFF) <= self.TIMEOUT_MS:
                continue
            if device.zone != ProximityZone.GONE:
                old_zone = device.zone
                device.zone = ProximityZone.GONE
                log.info("  [PROX] %s: %s → GONE (timeout)", device.name, old_zone.name)
                if self.on_zone_change is not None:
                    self.on_zone_change(device, old_zone, ProximityZone.GONE)
            device.active = False
            self._slots[index] = None

    def get_device(self, device_id: int) -> Optional[TrackedDevice]:
        """Return the active device with this id, or None."""
        return next((d for d in self.active_devices() if d.device_id == device_id), None)

    def count_in_zone(self, zone: ProximityZone) -> int:
        """Number of active devices in ``zone``."""
        return sum(1 for d in self.active_devices() if d.zone == zone)

    def active_devices(self) -> Iterator[TrackedDevice]:
        """Yield every active device in table order."""
        return (d for d in self._slots if d is not None)

    def _find_or_create(self, device_id: int) -> Optional[TrackedDevice]:
        empty: Optional[int] = None
        for index, device in enumerate(self._slots):
            if device is not None and device.device_id == device_id:
                return device
            if device is None and empty is None:
                empty = index
        if empty is None:
            return None
        device = TrackedDevice(device_id=device_id)
        self._slots[empty] = device
        return device

    @classmethod
    def _classify(cls, rssi: float, current: ProximityZone) -> ProximityZone:
        h = cls.HYSTERESIS
        thresholds = (
            (ProximityZone.CLOSE, cls.RSSI_CLOSE),
            (ProximityZone.NEAR, cls.RSSI_NEAR),
            (ProximityZone.FAR, cls.RSSI_FAR),
        )
        for zone, threshold in thresholds:
            if rssi >= threshold + (-h if current >= zone else h):
                return zone
        return ProximityZone.GONE