"""Culture beacons, proximity zones and LED patterns for travelers and stations."""

__version__ = "0.1.0"