"""Gesture detection from IMU readings that modifies culture exchange."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class RitualGesture(IntEnum):
    """Gestures a traveler can perform."""

    NONE = 0
    SHAKE = 1
    SPIN = 2
    HOLD_STILL = 3


@dataclass
class RitualDetector:
    """Tracks the current gesture; no gesture is recognised yet."""

    current_gesture: RitualGesture = RitualGesture.NONE

    def update(self, ax: float, ay: float, az: float,
               gx: float, gy: float, gz: float) -> RitualGesture:
        """Feed one accelerometer and gyroscope reading; return the gesture."""
        self.current_gesture = RitualGesture.NONE
        return self.current_gesture

    def exchange_multiplier(self) -> float:
        """Factor by which the current gesture scales culture exchange."""
        return 1.0