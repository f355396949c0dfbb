"""Stable device identity derived from a MAC address."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from pulleys.protocol import DeviceType

TRAVELER_REGISTRY: dict[int, int] = {
    0x6910: 1,
    0xA08A: 2,
    0x194A: 3,
}
"""Known traveler device ids mapped to their physical label numbers."""

STATION_REGISTRY: dict[int, int] = {
    0xF563: 1,
    0xD25E: 2,
    0xD3C5: 3,
}
"""Known station device ids mapped to their physical label numbers."""

_RULE = "━" * 40

MacLike = Union[bytes, bytearray, str, Iterable[int]]


def _mac_bytes(mac: MacLike) -> bytes:
    if isinstance(mac, str):
        raw = bytes.fromhex(mac.replace(":", "").replace("-", ""))
    else:
        raw = bytes(mac)
    if len(raw) != 6:
        raise ValueError(f"a MAC address has 6 bytes, got {len(raw)}")
    return raw


def device_id_from_mac(mac: MacLike) -> int:
    """Hash the last four bytes of a MAC address into a 16-bit device id."""
    m = _mac_bytes(mac)
    h = m[2] ^ (m[3] << 3) ^ (m[4] << 7) ^ (m[5] << 11)
    h = ((h * 2654435761) & 0xFFFFFFFF) >> 16
    return h & 0xFFFF


def lookup_label(device_id: int, device_type: int) -> int:
    """Return the board's label number, or 0 if it is not registered."""
    registry = TRAVELER_REGISTRY if device_type == DeviceType.TRAVELER else STATION_REGISTRY
    return registry.get(device_id, 0)


@dataclass(frozen=True)
class Identity:
    """A device's MAC, type, derived id and label."""

    mac: bytes
    device_type: int
    device_id: int
    label: int = 0

    @property
    def is_traveler(self) -> bool:
        return self.device_type == DeviceType.TRAVELER

    @property
    def name(self) -> str:
        """Readable name such as ``T-1A2B`` or ``S-1A2B``."""
        prefix = "T" if self.is_traveler else "S"
        return f"{prefix}-{self.device_id:04X}"

    @classmethod
    def from_mac(cls, mac: MacLike, device_type: int) -> "Identity":
        """Derive the identity of a device of ``device_type`` with this MAC."""
        raw = _mac_bytes(mac)
        device_id = device_id_from_mac(raw)
        return cls(raw, device_type, device_id, lookup_label(device_id, device_type))

    def banner(self) -> str:
        """Return the multi-line boot banner for this device."""
        type_name = "Traveler" if self.is_traveler else "Station"
        mac_text = ":".join(f"{b:02X}" for b in self.mac)
        return "\n".join([
            _RULE,
            f"  PULLEYS {type_name}",
            f"  ID:  {self.name} (0x{self.device_id:04X})  Label: #{self.label:02d}",
            f"  MAC: {mac_text}",
            _RULE,
        ])