"""LED pattern renderer driven by a culture: a two-color wave with ripples."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from pulleys.culture import osc_to_hz
from pulleys.protocol import Color, Culture

log = logging.getLogger(__name__)

_TWO_PI = 6.2832
_BLACK = Color(0, 0, 0)


def scale8(value: int, scale: int) -> int:
    """Scale an 8-bit value by ``scale``/256, where 255 keeps the value."""
    return (value * (scale + 1)) >> 8


def nscale8(color: Color, scale: int) -> Color:
    """Scale every channel of ``color`` by ``scale``/256."""
    return Color(scale8(color.r, scale), scale8(color.g, scale), scale8(color.b, scale))


class _Random8:
    """The 16-bit linear congruential generator LED strips commonly use."""

    def __init__(self, seed: int) -> None:
        self._seed = seed & 0xFFFF

    def add_entropy(self, entropy: int) -> None:
        self._seed = (self._seed + entropy) & 0xFFFF

    def __call__(self) -> int:
        self._seed = (self._seed * 2053 + 13849) & 0xFFFF
        return ((self._seed & 0xFF) + (self._seed >> 8)) & 0xFF


@dataclass
class _Drift:
    """Smoothed random walk: jerk drives acceleration, which drives velocity."""

    acc: float = 0.0
    vel: float = 0.0

    def step(self, jerk: float, dt: float, vel_damping: float) -> float:
        self.acc += jerk
        self.acc *= math.exp(-2.0 * dt)
        self.vel += self.acc * dt
        self.vel *= math.exp(-vel_damping * dt)
        return self.vel * dt

    def bounce(self, value: float, lo: float, hi: float) -> float:
        if value < lo:
            value = lo
            self.vel = abs(self.vel)
        if value > hi:
            value = hi
            self.vel = -abs(self.vel)
        return value


def _lerp(a: Color, b: Color, t: float) -> Color:
    return Color(int(a.r + (b.r - a.r) * t),
                 int(a.g + (b.g - a.g) * t),
                 int(a.b + (b.b - a.b) * t))


class PatternRenderer:
    """Renders a culture onto an LED matrix; the last row shows its status."""

    MAX_LEDS = 256

    def __init__(self, num_leds: int, max_brightness: int = 50,
                 device_id: int = 0, now_ms: int = 0) -> None:
        self.leds: list[Color] = [_BLACK] * min(num_leds, self.MAX_LEDS)
        self._max_bri = max_brightness
        self._density = 1.0
        self._rows = 8
        self._cols = 8
        self._serpentine = False
        self._sparkle = [0] * len(self.leds)
        self._culture = Culture(_BLACK, _BLACK, 0)
        self._last_ms = now_ms
        self._last_debug_ms = 0
        self._phase = 0.0
        self._ripple_freq = 1.8
        self._spatial_freq_base = 1.8

        self._random8 = _Random8(device_id)
        self._random8.add_entropy(device_id)
        self._ripple_speed = ((self._random8() / 255.0) - 0.5) * 10.0
        self._spatial_freq_mul = 0.3 + (self._random8() / 255.0) * 0.7
        self._ripple_phase = (self._random8() / 255.0) * _TWO_PI
        self._cx = (self._cols - 1) * 0.5
        self._cy = (self._rows - 1) * 0.5
        self._rs = _Drift()
        self._sf = _Drift()
        self._cxd = _Drift()
        self._cyd = _Drift()
        self._wd = _Drift()
        self._wave_dir = 0.0

    @property
    def culture(self) -> Culture:
        return self._culture

    @property
    def phase(self) -> float:
        return self._phase

    @property
    def center(self) -> tuple[float, float]:
        """Current (x, y) center of the radial ripple."""
        return (self._cx, self._cy)

    @property
    def ripple_speed(self) -> float:
        return self._ripple_speed

    @property
    def spatial_freq_mul(self) -> float:
        return self._spatial_freq_mul

    def set_culture(self, culture: Culture) -> None:
        """Show ``culture`` from the next frame on."""
        self._culture = culture
        self._spatial_freq_base = 2.0

    def set_density(self, density: float) -> None:
        """Sparkle density: 1.0 lights every pixel, lower values sparkle sparsely."""
        self._density = density

    def set_matrix_size(self, rows: int, cols: int, serpentine: bool = False) -> None:
        """Set the matrix dimensions and whether odd rows run backwards."""
        self._rows = rows
        self._cols = cols
        self._serpentine = serpentine

    def _jerk(self, scale: float, dt: float) -> float:
        return ((self._random8() / 255.0) - 0.5) * 2.0 * scale * dt

    def update(self, now_ms: int) -> None:
        """Advance the animation to ``now_ms`` and redraw ``leds``."""
        if not self.leds:
            return

        hz = osc_to_hz(self._culture.oscillation)
        dt = ((now_ms - self._last_ms) & 0xFFFFFFFF) / 1000.0
        if self._last_ms == 0:
            dt = 0.033
        self._last_ms = now_ms

        self._phase += hz * 2.0 * 1.2 * math.pi * dt
        if self._phase > _TWO_PI:
            self._phase -= _TWO_PI

        self._ripple_speed += self._rs.step(self._jerk(10.0, dt), dt, 0.3)
        self._ripple_speed = self._rs.bounce(self._ripple_speed, -6.0, 6.0)

        self._spatial_freq_mul += self._sf.step(self._jerk(1.0, dt), dt, 0.3)
        self._spatial_freq_mul = self._sf.bounce(self._spatial_freq_mul, 0.3, 1.0)
        self._ripple_freq = self._spatial_freq_base * self._spatial_freq_mul

        self._ripple_phase += self._ripple_speed * dt
        if self._ripple_phase > 100.0:
            self._ripple_phase -= 100.0
        if self._ripple_phase < -100.0:
            self._ripple_phase += 100.0

        jerk_x = self._jerk(5.0, dt)
        jerk_y = self._jerk(5.0, dt)
        self._cx += self._cxd.step(jerk_x, dt, 0.3)
        self._cy += self._cyd.step(jerk_y, dt, 0.3)
        self._cx = self._cxd.bounce(self._cx, 1.0, float(self._cols - 2))
        self._cy = self._cyd.bounce(self._cy, 1.0, float(self._rows - 2))

        self._wave_dir += self._wd.step(self._jerk(1.5, dt), dt, 0.5)
        wave_dx = math.cos(self._wave_dir)
        wave_dy = math.sin(self._wave_dir)

        if ((now_ms - self._last_debug_ms) & 0xFFFFFFFF) >= 1000:
            self._last_debug_ms = now_ms
            log.debug("  [PAT] cx=%.2f cy=%.2f vx=%.2f vy=%.2f ax=%.2f ay=%.2f",
                      self._cx, self._cy, self._cxd.vel, self._cyd.vel,
                      self._cxd.acc, self._cyd.acc)

        color_a = self._culture.color_a
        color_b = self._culture.color_b
        cols = self._cols
        pattern_leds = max(len(self.leds) - cols, 0)

        for i in range(pattern_leds):
            row, col = divmod(i, cols)
            if self._serpentine and row & 1:
                col = (cols - 1) - col
            proj = col * wave_dx + row * wave_dy
            pixel_phase = self._phase + proj * 2.0 * math.pi / cols
            raw = (math.sin(pixel_phase) + 1.0) * 0.5
            if raw < 0.05:
                mix = 0.0
            elif raw > 0.95:
                mix = 1.0
            else:
                mix = (raw - 0.05) / 0.9
            base = nscale8(_lerp(color_a, color_b, mix), self._max_bri)

            dist = math.hypot(col - self._cx, row - self._cy)
            ripple = max(math.sin(dist * self._ripple_freq - self._ripple_phase), 0.0)
            base = nscale8(base, int(ripple * 255.0))

            if self._density >= 1.0:
                self.leds[i] = base
                continue
            if self._sparkle[i] == 0 and self._random8() < 2:
                self._sparkle[i] = 255
            self.leds[i] = nscale8(base, max(self._sparkle[i], 40))
            decay = int((1.0 - self._density) * 20.0 + 4.0)
            self._sparkle[i] = self._sparkle[i] - decay if self._sparkle[i] > decay else 0

        half = self._max_bri // 2
        status_a = nscale8(color_a, half)
        status_b = nscale8(color_b, half)
        pulse = (math.sin(self._phase) + 1.0) * 0.5
        level = int(pulse * self._max_bri / 2)
        pulse_color = Color(level, level, level)
        status = [status_a] * 3 + [status_b] * 3 + [pulse_color] * 2
        for offset, color in enumerate(status):
            index = pattern_leds + offset
            if index < len(self.leds):
                self.leds[index] = color