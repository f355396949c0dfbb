"""Traveler: carries a culture, beacons it and watches for nearby stations."""

from __future__ import annotations

import logging
import random
from typing import Optional, Union

from pulleys.culture import format_culture, random_culture
from pulleys.identity import Identity
from pulleys.patterns import PatternRenderer, nscale8
from pulleys.protocol import Color, Culture, DeviceType, Packet, ProtocolError, parse
from pulleys.proximity import ProximityTracker, TrackedDevice
from pulleys.ritual import RitualDetector

log = logging.getLogger(__name__)

LED_COUNT = 64
MAX_BRIGHTNESS = 21
BEACON_INTERVAL_MS = 500
LED_FPS = 30
IMU_INTERVAL_MS = 100
BLE_INTERVAL_UNITS = BEACON_INTERVAL_MS * 1000 // 625
MATRIX_COLS = 8

_BLACK = Color(0, 0, 0)


def _elapsed(now_ms: int, since_ms: int) -> int:
    return (now_ms - since_ms) & 0xFFFFFFFF


class Traveler:
    """A traveler device: renders its culture and beacons it periodically."""

    def __init__(self, mac: Union[bytes, str], culture: Optional[Culture] = None,
                 rng: Optional[random.Random] = None,
                 led_count: int = LED_COUNT, now_ms: int = 0) -> None:
        self.identity = Identity.from_mac(mac, DeviceType.TRAVELER)
        self.culture = culture if culture is not None else random_culture(rng)
        self.counter = 0
        self.led_count = led_count
        self.pattern = PatternRenderer(led_count, MAX_BRIGHTNESS,
                                       self.identity.device_id, now_ms)
        self.pattern.set_density(0.2)
        self.pattern.set_culture(self.culture)
        self.proximity = ProximityTracker()
        self.ritual = RitualDetector()
        self._last_beacon = 0
        self._last_led = 0
        self._last_prune = 0
        self._last_imu = 0
        log.info("Starting culture:\n%s", format_culture("mine", self.culture))

    @property
    def leds(self) -> list[Color]:
        """Current LED colors."""
        return self.pattern.leds

    def payload(self) -> bytes:
        """Manufacturer data advertising this traveler's culture and counter."""
        packet = Packet(DeviceType.TRAVELER, self.identity.device_id,
                        self.culture, self.counter)
        return packet.to_bytes()

    def handle_advertisement(self, data: bytes, rssi: int,
                             now_ms: int) -> Optional[TrackedDevice]:
        """Feed raw manufacturer data; return the tracked station, or None if ignored."""
        try:
            packet = parse(data)
        except ProtocolError:
            return None
        if packet.device_type != DeviceType.STATION:
            return None
        return self.proximity.update(packet, rssi, now_ms)

    def boot_preview(self) -> list[Color]:
        """Frame shown at boot: the two culture colors on the two middle rows."""
        frame = [_BLACK] * self.led_count
        row_a = (self.led_count // MATRIX_COLS) // 2 - 1
        row_b = row_a + 1
        color_a = nscale8(self.culture.color_a, MAX_BRIGHTNESS)
        color_b = nscale8(self.culture.color_b, MAX_BRIGHTNESS)
        for row, color in ((row_a, color_a), (row_b, color_b)):
            start = row * MATRIX_COLS
            for index in range(max(start, 0), min(start + MATRIX_COLS, self.led_count)):
                frame[index] = color
        return frame

    def tick(self, now_ms: int) -> Optional[bytes]:
        """Run one pass of the main loop; return the new beacon payload if one was due."""
        if _elapsed(now_ms, self._last_led) >= 1000 // LED_FPS:
            self._last_led = now_ms
            self.pattern.update(now_ms)

        beacon: Optional[bytes] = None
        if _elapsed(now_ms, self._last_beacon) >= BEACON_INTERVAL_MS:
            self._last_beacon = now_ms
            self.counter = (self.counter + 1) & 0xFFFFFFFF
            beacon = self.payload()
            log.debug("Beacon #%d", self.counter)

        if _elapsed(now_ms, self._last_prune) >= 1000:
            self._last_prune = now_ms
            self.proximity.prune_stale(now_ms)

        if _elapsed(now_ms, self._last_imu) >= IMU_INTERVAL_MS:
            self._last_imu = now_ms

        return beacon