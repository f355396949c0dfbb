import random

import pytest

from pulleys.patterns import nscale8
from pulleys.protocol import Color, Culture, DeviceType, Packet
from pulleys.proximity import ProximityZone, TrackedDevice
from pulleys.station import (
    COLS,
    MATE_COOLDOWN_MS,
    NUM_SLOTS,
    ROWS_PER_SLOT,
    Station,
    pillow_map,
    xy_to_index,
)

RED_BLUE = Culture(Color(255, 0, 0), Color(0, 0, 255), 128)
GREEN_WHITE = Culture(Color(0, 255, 0), Color(255, 255, 255), 40)
TRAVELER_CULTURE = Culture(Color(255, 255, 0), Color(0, 255, 255), 200)


def make_station(seed=1):
    return Station(slots=[RED_BLUE, GREEN_WHITE, RED_BLUE, GREEN_WHITE],
                   rng=random.Random(seed))


def traveler(device_id=0x1234, culture=TRAVELER_CULTURE):
    return TrackedDevice(device_id=device_id, device_type=DeviceType.TRAVELER,
                         culture=culture, active=True)


def slot_indices(slot):
    return [xy_to_index(r, c) for r in range(slot * ROWS_PER_SLOT, (slot + 1) * ROWS_PER_SLOT)
            for c in range(COLS)]


def test_xy_to_index_is_permutation():
    indices = [xy_to_index(r, c) for r in range(8) for c in range(COLS)]
    assert sorted(indices) == list(range(64))


def test_xy_to_index_reverses_odd_rows():
    assert xy_to_index(0, 0) == 0
    for c in range(COLS):
        assert xy_to_index(1, c) == xy_to_index(1, 0) - c
        assert xy_to_index(2, c) == xy_to_index(2, 0) + c


def test_pillow_map_shape_and_symmetry():
    table = pillow_map(8, 8)
    assert len(table) == 8 and all(len(row) == 8 for row in table)
    for r in range(8):
        for c in range(8):
            assert 0 <= table[r][c] <= 255
            assert table[r][c] == table[7 - r][7 - c]
    assert table[0][0] == 0
    assert max(max(row) for row in table) == table[3][3]


def test_close_traveler_queues_and_applies():
    station = make_station()
    slot = station.on_zone_change(traveler(), ProximityZone.NEAR, ProximityZone.CLOSE, 1000)
    assert 0 <= slot < NUM_SLOTS
    assert station.pending_slot == slot
    old = station.slots[slot]
    assert station.apply_pending(1000) == slot
    assert station.slots[slot] == TRAVELER_CULTURE
    assert station.slots_old[slot] == old
    assert station.transition_start[slot] == 1000
    assert station.apply_pending(1001) is None


def test_cooldown_blocks_repeat_then_expires():
    station = make_station()
    assert station.on_zone_change(traveler(), ProximityZone.NEAR,
                                  ProximityZone.CLOSE, 1000) is not None
    station.apply_pending(1000)
    assert station.on_zone_change(traveler(), ProximityZone.NEAR,
                                  ProximityZone.CLOSE, 1000 + MATE_COOLDOWN_MS - 1) is None
    assert station.pending_slot is None
    assert station.on_zone_change(traveler(), ProximityZone.NEAR,
                                  ProximityZone.CLOSE, 1000 + MATE_COOLDOWN_MS) is not None


def test_non_traveler_ignored():
    station = make_station()
    dev = TrackedDevice(device_id=7, device_type=DeviceType.STATION, culture=TRAVELER_CULTURE)
    assert station.on_zone_change(dev, ProximityZone.NEAR, ProximityZone.CLOSE, 0) is None
    assert station.pending_slot is None


def test_handle_advertisement_filters_and_tracks():
    station = make_station()
    assert station.handle_advertisement(b"\x00" * 16, -40, 0) is None
    station_pkt = Packet(DeviceType.STATION, 9, TRAVELER_CULTURE).to_bytes()
    assert station.handle_advertisement(station_pkt, -40, 0) is None
    pkt = Packet(DeviceType.TRAVELER, 0x4242, TRAVELER_CULTURE, 3).to_bytes()
    dev = station.handle_advertisement(pkt, -40, 500)
    assert dev.device_id == 0x4242
    assert dev.zone == ProximityZone.CLOSE
    slot = station.apply_pending(500)
    assert station.slots[slot] == TRAVELER_CULTURE


def test_render_size_and_dark_corner():
    station = make_station()
    leds = station.render(1234)
    assert len(leds) == NUM_SLOTS * ROWS_PER_SLOT * COLS
    assert leds[xy_to_index(0, 0)] == Color(0, 0, 0)
    assert any(led != Color(0, 0, 0) for led in leds)


def test_transition_starts_with_old_culture():
    station = make_station()
    reference = make_station()
    station.on_zone_change(traveler(), ProximityZone.NEAR, ProximityZone.CLOSE, 1000)
    station.apply_pending(1000)
    assert station.render(1000) == reference.render(1000)


def test_transition_goes_dark_then_settles():
    station = make_station()
    slot = station.on_zone_change(traveler(), ProximityZone.NEAR, ProximityZone.CLOSE, 1000)
    station.apply_pending(1000)
    leds = station.render(2000)
    assert all(leds[i] == Color(0, 0, 0) for i in slot_indices(slot))

    slots = [RED_BLUE, GREEN_WHITE, RED_BLUE, GREEN_WHITE]
    slots[slot] = TRAVELER_CULTURE
    reference = Station(slots=slots, rng=random.Random(0))
    assert station.render(8000) == reference.render(8000)
    assert station.transition_start[slot] is None


def test_render_peak_during_transition_is_brighter():
    station = make_station()
    slot = station.on_zone_change(traveler(), ProximityZone.NEAR, ProximityZone.CLOSE, 0)
    station.apply_pending(1)
    slots = [RED_BLUE, GREEN_WHITE, RED_BLUE, GREEN_WHITE]
    slots[slot] = TRAVELER_CULTURE
    reference = Station(slots=slots, rng=random.Random(0))
    bright = station.render(2001)
    normal = reference.render(2001)
    total = sum(bright[i].r + bright[i].g + bright[i].b for i in slot_indices(slot))
    base = sum(normal[i].r + normal[i].g + normal[i].b for i in slot_indices(slot))
    assert total > base


def test_report_and_prune():
    station = make_station()
    assert station.report() == []
    pkt = Packet(DeviceType.TRAVELER, 0x0ABC, TRAVELER_CULTURE).to_bytes()
    station.handle_advertisement(pkt, -90, 0)
    lines = station.report()
    assert lines[0] == "── 1 traveler(s) heard ──"
    assert lines[1].startswith("  T-0ABC ")
    station.prune(20000)
    assert station.proximity.get_device(0x0ABC) is None
    assert station.report() == []


def test_wrong_slot_count_rejected():
    with pytest.raises(ValueError):
        Station(slots=[RED_BLUE])


def test_render_uses_scaled_colors_only():
    station = make_station()
    leds = station.render(500)
    assert all(max(led.r, led.g, led.b) <= nscale8(Color(255, 255, 255), 15).r for led in leds)