"""Wire format of the 16-byte manufacturer-data beacon shared by all devices."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

COMPANY_ID = 0xFFFF
"""Company identifier placed at the start of every beacon (development id)."""

MFR_LEN = 16
"""Length in bytes of a serialized beacon."""

_LAYOUT = struct.Struct("<HBH7BI")


class ProtocolError(ValueError):
    """Raised when bytes are not a valid beacon."""


class DeviceType(IntEnum):
    """Kind of device that sent a beacon."""

    STATION = 0x01
    TRAVELER = 0x02


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be in 0..255, got {value}")


@dataclass(frozen=True)
class Color:
    """An RGB color with 8-bit channels."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            _check_byte(name, getattr(self, name))


@dataclass(frozen=True)
class Culture:
    """Two colors and an oscillation byte: the pattern a device carries."""

    color_a: Color
    color_b: Color
    oscillation: int

    def __post_init__(self) -> None:
        _check_byte("oscillation", self.oscillation)


@dataclass(frozen=True)
class Packet:
    """One beacon: who sent it, its culture and a running counter."""

    device_type: int
    device_id: int
    culture: Culture
    counter: int = 0

    def __post_init__(self) -> None:
        _check_byte("device_type", self.device_type)
        if not 0 <= self.device_id <= 0xFFFF:
            raise ValueError(f"device_id must be in 0..0xFFFF, got {self.device_id}")
        if not 0 <= self.counter <= 0xFFFFFFFF:
            raise ValueError(f"counter must be in 0..0xFFFFFFFF, got {self.counter}")
        try:
            object.__setattr__(self, "device_type", DeviceType(self.device_type))
        except ValueError:
            object.__setattr__(self, "device_type", int(self.device_type))

    def to_bytes(self) -> bytes:
        """Serialize this packet into its 16-byte wire form."""
        return serialize(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Packet":
        """Parse a packet from manufacturer data."""
        return parse(data)


def serialize(packet: Packet) -> bytes:
    """Return the 16-byte manufacturer data for ``packet``."""
    c = packet.culture
    return _LAYOUT.pack(
        COMPANY_ID,
        int(packet.device_type),
        packet.device_id,
        c.color_a.r,
        c.color_a.g,
        c.color_a.b,
        c.color_b.r,
        c.color_b.g,
        c.color_b.b,
        c.oscillation,
        packet.counter,
    )


def parse(data: bytes) -> Packet:
    """Parse manufacturer data; extra trailing bytes are ignored."""
    data = bytes(data)
    if len(data) < MFR_LEN:
        raise ProtocolError(f"beacon too short: {len(data)} bytes, need {MFR_LEN}")
    (company, device_type, device_id,
     ar, ag, ab, br, bg, bb, osc, counter) = _LAYOUT.unpack_from(data)
    if company != COMPANY_ID:
        raise ProtocolError(f"unexpected company id 0x{company:04X}")
    culture = Culture(Color(ar, ag, ab), Color(br, bg, bb), osc)
    return Packet(device_type, device_id, culture, counter)