"""Station: keeps four culture slots and adopts cultures from close travelers."""

from __future__ import annotations

import logging
import math
import random
from typing import Optional, Sequence

from pulleys.culture import color_name, osc_to_hz, random_culture
from pulleys.patterns import nscale8, scale8
from pulleys.protocol import Color, Culture, DeviceType, ProtocolError, parse
from pulleys.proximity import ProximityTracker, ProximityZone, TrackedDevice

log = logging.getLogger(__name__)

MAX_BRIGHTNESS = 15
LED_FPS = 60
MATE_COOLDOWN_MS = 30000
NUM_SLOTS = 4
ROWS_PER_SLOT = 8
COLS = 8
LED_COUNT = NUM_SLOTS * ROWS_PER_SLOT * COLS
MAX_COOLDOWNS = 32

_BLACK = Color(0, 0, 0)


def pillow_map(rows: int = ROWS_PER_SLOT, cols: int = COLS) -> list[list[int]]:
    """Return a rows x cols table of 0..255 factors, brightest in the middle."""
    cx_mid = (cols - 1) * 0.5
    cy_slot = (rows - 1) * 0.5
    table = []
    for r in range(rows):
        vy = math.cos((r - cy_slot) / cy_slot * math.pi * 0.5) ** 2
        row = []
        for c in range(cols):
            dx = (c - cx_mid) / (cx_mid + 0.5)
            vx = math.cos(dx * math.pi * 0.5) ** 2
            row.append(int(vy * vx * 255.0))
        table.append(row)
    return table


def xy_to_index(row: int, col: int, cols: int = COLS) -> int:
    """Index of (row, col) on a serpentine matrix whose odd rows run backwards."""
    if row & 1:
        col = (cols - 1) - col
    return row * cols + col


def _mix(a: Color, b: Color, t: float) -> Color:
    return Color(int(a.r + (b.r - a.r) * t),
                 int(a.g + (b.g - a.g) * t),
                 int(a.b + (b.b - a.b) * t))


def _elapsed(now_ms: int, since_ms: int) -> int:
    return (now_ms - since_ms) & 0xFFFFFFFF


class Station:
    """A station showing four cultures, replacing one when a traveler comes close."""

    def __init__(self, slots: Optional[Sequence[Culture]] = None,
                 rng: Optional[random.Random] = None,
                 led_count: int = LED_COUNT) -> None:
        self._rng = rng if rng is not None else random.Random()
        if slots is None:
            slots = [random_culture(self._rng) for _ in range(NUM_SLOTS)]
        if len(slots) != NUM_SLOTS:
            raise ValueError(f"a station has {NUM_SLOTS} slots, got {len(slots)}")
        self.slots: list[Culture] = list(slots)
        self.slots_old: list[Culture] = list(slots)
        self.transition_start: list[Optional[int]] = [None] * NUM_SLOTS
        self.leds: list[Color] = [_BLACK] * led_count
        self.cooldowns: dict[int, int] = {}
        self._pending: Optional[tuple[int, Culture, Culture]] = None
        self._pillow = pillow_map()
        self._now_ms = 0
        self.proximity = ProximityTracker(
            lambda dev, old, new: self.on_zone_change(dev, old, new, self._now_ms))

    @property
    def pending_slot(self) -> Optional[int]:
        """Slot waiting to receive a new culture, or None."""
        return None if self._pending is None else self._pending[0]

    def on_zone_change(self, device: TrackedDevice, old_zone: ProximityZone,
                       new_zone: ProximityZone, now_ms: int) -> Optional[int]:
        """React to a traveler changing zone; return the slot queued for its culture."""
        if device.device_type != DeviceType.TRAVELER:
            return None
        chosen: Optional[int] = None
        if new_zone == ProximityZone.CLOSE:
            chosen = self._adopt(device, now_ms)
        if new_zone == ProximityZone.GONE and old_zone >= ProximityZone.NEAR:
            log.info("  T-%04X departed.", device.device_id)
        return chosen

    def _adopt(self, device: TrackedDevice, now_ms: int) -> Optional[int]:
        since = self.cooldowns.get(device.device_id)
        if since is not None and _elapsed(now_ms, since) < MATE_COOLDOWN_MS:
            left = (MATE_COOLDOWN_MS - _elapsed(now_ms, since)) // 1000
            log.info("☆ T-%04X CLOSE — cooldown (%ds left)", device.device_id, left)
            return None

        slot = self._rng.randrange(NUM_SLOTS)
        self._pending = (slot, device.culture, self.slots[slot])
        culture = device.culture
        log.info("★ T-%04X → slot %d: %s/%s %.2fHz", device.device_id, slot,
                 color_name(culture.color_a), color_name(culture.color_b),
                 osc_to_hz(culture.oscillation))

        self.cooldowns = {
            dev_id: when for dev_id, when in self.cooldowns.items()
            if _elapsed(now_ms, when) < MATE_COOLDOWN_MS * 2
        }
        if device.device_id in self.cooldowns or len(self.cooldowns) < MAX_COOLDOWNS:
            self.cooldowns[device.device_id] = now_ms
        return slot

    def handle_advertisement(self, data: bytes, rssi: int,
                             now_ms: int) -> Optional[TrackedDevice]:
        """Feed raw manufacturer data; return the tracked traveler, or None if ignored."""
        try:
            packet = parse(data)
        except ProtocolError:
            return None
        if packet.device_type != DeviceType.TRAVELER:
            return None
        self._now_ms = now_ms
        return self.proximity.update(packet, rssi, now_ms)

    def apply_pending(self, now_ms: int) -> Optional[int]:
        """Install a queued culture and start its transition; return the slot."""
        if self._pending is None:
            return None
        slot, culture, old = self._pending
        self._pending = None
        self.slots_old[slot] = old
        self.slots[slot] = culture
        self.transition_start[slot] = now_ms
        return slot

    def _slot_state(self, slot: int, now_ms: int) -> tuple[Culture, float]:
        start = self.transition_start[slot]
        if start is None:
            return self.slots[slot], 1.0
        elapsed = _elapsed(now_ms, start) / 1000.0
        if elapsed < 1.0:
            return self.slots_old[slot], 1.0 - elapsed
        if elapsed < 2.0:
            return self.slots[slot], (elapsed - 1.0) * 3.0
        if elapsed < 6.0:
            return self.slots[slot], 3.0 - (elapsed - 2.0) * 0.5
        self.transition_start[slot] = None
        return self.slots[slot], 1.0

    def render(self, now_ms: int) -> list[Color]:
        """Draw all slots for time ``now_ms`` and return the LED colors."""
        t = now_ms / 1000.0
        for slot in range(NUM_SLOTS):
            active, bri_mul = self._slot_state(slot, now_ms)
            hz = osc_to_hz(active.oscillation)
            wave = (math.sin(t * hz * 2.0 * math.pi) + 1.0) * 0.5
            left = _mix(active.color_a, active.color_b, wave)
            right = _mix(active.color_a, active.color_b, 1.0 - wave)
            b_scale = min(int(bri_mul * MAX_BRIGHTNESS) & 0xFF, 3 * MAX_BRIGHTNESS)
            start_row = slot * ROWS_PER_SLOT
            for r, pillow_row in enumerate(self._pillow):
                for c, factor in enumerate(pillow_row):
                    index = xy_to_index(start_row + r, c)
                    if index >= len(self.leds):
                        continue
                    color = left if c < COLS // 2 else right
                    self.leds[index] = nscale8(color, scale8(factor, b_scale))
        return self.leds

    def prune(self, now_ms: int) -> None:
        """Forget travelers that have not been heard for a while."""
        self._now_ms = now_ms
        self.proximity.prune_stale(now_ms)

    def report(self) -> list[str]:
        """Summary lines of the travelers heard; empty when there are none."""
        travelers = [d for d in self.proximity.active_devices()
                     if d.device_type == DeviceType.TRAVELER]
        if not travelers:
            return []
        lines = [f"── {len(travelers)} traveler(s) heard ──"]
        for d in travelers:
            c = d.culture
            lines.append(
                f"  T-{d.device_id:04X} {d.zone.name:<5} {d.rssi_smooth:4.0f}dBm  "
                f"{color_name(c.color_a)}/{color_name(c.color_b)} "
                f"{osc_to_hz(c.oscillation):.2f}Hz"
            )
        return lines