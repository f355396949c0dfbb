# pulleys

`pulleys` models a small interactive light installation with two kinds of
device:

- **Travelers** carry an 8×8 LED matrix and a *culture*. A culture is two
  colours plus an oscillation byte. Travelers broadcast their culture in a
  16-byte beacon.
- **Stations** listen for travelers. When a traveler comes close, the station
  takes its culture into one of four slots and shows it on its own LEDs.

The package covers the beacon format, cultures and how they blend, device
identity, proximity zones with hysteresis, and the renderers that turn a
culture into LED colours. The caller always passes time in as milliseconds.
That means everything can be driven by a real clock, a simulation or a test.

## Modules

| Module              | Contents                                                            |
|---------------------|---------------------------------------------------------------------|
| `pulleys.protocol`  | `Color`, `Culture`, `Packet`, `DeviceType`, `ProtocolError`; `serialize` and `parse` |
| `pulleys.culture`   | `osc_to_hz`, `hz_to_osc`, `hsv_to_rgb`, `is_cop_pair`, `random_culture`, `blend`, `color_name`, `format_culture` |
| `pulleys.identity`  | `device_id_from_mac`, `lookup_label`, `Identity` (`from_mac`, `name`, `banner`) |
| `pulleys.ritual`    | `RitualGesture` and `RitualDetector`                                |
| `pulleys.proximity` | `ProximityZone`, `TrackedDevice`, `ProximityTracker`                |
| `pulleys.patterns`  | `scale8`, `nscale8`, `PatternRenderer`                              |
| `pulleys.station`   | `Station`, `pillow_map`, `xy_to_index`                              |
| `pulleys.traveler`  | `Traveler`                                                          |

## Beacon format

Manufacturer data is 16 bytes. Multi-byte fields are little-endian.

| Bytes  | Field                                   |
|--------|-----------------------------------------|
| 0–1    | company id (`0xFFFF`)                   |
| 2      | device type (1 = station, 2 = traveler) |
| 3–4    | device id                               |
| 5–7    | colour A (R, G, B)                      |
| 8–10   | colour B (R, G, B)                      |
| 11     | oscillation byte                        |
| 12–15  | counter                                 |

`parse` ignores extra trailing bytes. It raises `ProtocolError` when the data
is too short or carries another company id. `Color`, `Culture` and `Packet`
raise `ValueError` when a field is out of range.

## Cultures

```python
import random

from pulleys.culture import blend, color_name, format_culture, osc_to_hz, random_culture

rng = random.Random(7)
mine = random_culture(rng)
theirs = random_culture(rng)

print(format_culture("mine", mine))
print(color_name(mine.color_a), osc_to_hz(mine.oscillation))
print(format_culture("mixed", blend(mine, theirs, 0.5)))
```

`osc_to_hz` maps the oscillation byte onto roughly 0.2–2.0 Hz.

`random_culture` picks two vivid hues at least 22° apart. It never pairs red
with blue.

## Proximity

`ProximityTracker.update(packet, rssi, now_ms)` keeps an exponential moving
average of each device's RSSI. It sorts each device into a `ProximityZone`
(`GONE`, `FAR`, `NEAR`, `CLOSE`), using hysteresis so a device near a
threshold does not flicker between zones. When a device changes zone, the
tracker calls the optional `on_zone_change(device, old_zone, new_zone)`
callback.

- `prune_stale(now_ms)` drops devices that have not been heard for 10 seconds.
- `get_device`, `count_in_zone` and `active_devices` query the table.
- The table holds at most 32 devices.

## Stations and travelers

```python
import random

from pulleys.station import Station
from pulleys.traveler import Traveler

traveler = Traveler("02:00:00:00:00:01", rng=random.Random(1))
station = Station(rng=random.Random(2))

payload = traveler.tick(now_ms=500)          # beacon bytes when one is due
station.handle_advertisement(payload, rssi=-50, now_ms=500)
slot = station.apply_pending(now_ms=516)     # slot that took the culture
frame = station.render(now_ms=516)           # list of Color, one per LED
print(station.report())
```

### Traveler

- `tick(now_ms)` advances the traveler's `PatternRenderer`, increments the
  beacon counter every 500 ms and prunes stale stations.
- `payload()` gives the current beacon.
- `boot_preview()` gives the start-up frame: the two culture colours on the
  two middle rows.

### Station

- After a traveler has donated its culture, the station ignores it for
  30 seconds.
- A new culture fades in over six seconds: the old culture fades out, then the
  new one fades in brighter and settles.
- `Identity.from_mac(mac, device_type)` derives the 16-bit id, the name (for
  example `T-1A2B`) and the board label from a MAC address.

Status messages go to the standard `logging` module under the module names,
for example `pulleys.proximity`.

## What the package does not do

The package does not talk to a radio or to LEDs, and it runs no command-line
program.

- **Radio:** scanning for and sending advertisements is left to the caller,
  who passes bytes and RSSI in and takes payloads out.
- **LEDs:** the renderers only fill lists of `Color`, and the caller sends
  them to the lights.
- **Gestures:** `RitualDetector` recognises no gestures yet.
  `update` always reports `RitualGesture.NONE`, and `exchange_multiplier`
  returns `1.0`.

## Running the tests

Install the `test` extra, then run `pytest` from the project directory.