"""Cultures: generating, blending, naming and describing color patterns."""

from __future__ import annotations

import random
from typing import Optional

from pulleys.protocol import Color, Culture


def osc_to_hz(osc: int) -> float:
    """Map an oscillation byte (1..255) to a frequency of about 0.2..2.0 Hz."""
    if osc == 0:
        osc = 1
    return 0.2 + (osc / 255.0) * 1.8


def hz_to_osc(hz: float) -> int:
    """Map a frequency in Hz back to an oscillation byte."""
    norm = min(max((hz - 0.2) / 1.8, 0.0), 1.0)
    return int(norm * 255.0)


def hsv_to_rgb(h: int, s: int, v: int) -> Color:
    """Convert HSV (h 0..360, s and v 0..255) to RGB with integer arithmetic."""
    if s == 0:
        return Color(v, v, v)
    region = (h // 60) % 6
    rem = (h % 60) * 255 // 60
    p = (v * (255 - s)) >> 8
    q = (v * (255 - ((s * rem) >> 8))) >> 8
    t = (v * (255 - ((s * (255 - rem)) >> 8))) >> 8
    channels = {
        0: (v, t, p),
        1: (q, v, p),
        2: (p, v, t),
        3: (p, q, v),
        4: (t, p, v),
    }.get(region, (v, p, q))
    return Color(*channels)


def _is_red(hue: int) -> bool:
    return hue <= 15 or hue >= 345


def _is_blue(hue: int) -> bool:
    return 225 <= hue <= 255


def is_cop_pair(hue_a: int, hue_b: int) -> bool:
    """True if the two hues make a red and blue pair."""
    return (_is_red(hue_a) and _is_blue(hue_b)) or (_is_red(hue_b) and _is_blue(hue_a))


def random_culture(rng: Optional[random.Random] = None) -> Culture:
    """Return a random culture of two vivid colors that are not red and blue."""
    rng = rng if rng is not None else random.Random()
    for _ in range(10):
        hue_a = rng.randrange(0, 360)
        offset = rng.randrange(22, 339)
        hue_b = (hue_a + offset) % 360
        if is_cop_pair(hue_a, hue_b):
            continue
        color_a = hsv_to_rgb(hue_a, rng.randrange(200, 256), 255)
        color_b = hsv_to_rgb(hue_b, rng.randrange(200, 256), 255)
        return Culture(color_a, color_b, rng.randrange(12, 255))
    color_a = hsv_to_rgb(60, rng.randrange(200, 256), 255)
    color_b = hsv_to_rgb(180, rng.randrange(200, 256), 255)
    return Culture(color_a, color_b, rng.randrange(12, 255))


def _lerp8(a: int, b: int, t: float) -> int:
    return int(a + (b - a) * t)


def _lerp_color(a: Color, b: Color, t: float) -> Color:
    return Color(_lerp8(a.r, b.r, t), _lerp8(a.g, b.g, t), _lerp8(a.b, b.b, t))


def blend(a: Culture, b: Culture, ratio: float) -> Culture:
    """Blend two cultures; ratio 0 gives ``a``, 1 gives ``b``, clamped in between."""
    ratio = min(max(ratio, 0.0), 1.0)
    return Culture(
        _lerp_color(a.color_a, b.color_a, ratio),
        _lerp_color(a.color_b, b.color_b, ratio),
        _lerp8(a.oscillation, b.oscillation, ratio),
    )


def color_name(color: Color) -> str:
    """Return a rough English name for an RGB color."""
    top = max(color.r, color.g, color.b)
    if top < 30:
        return "black"
    r, g, b = color.r / top, color.g / top, color.b / top
    if r > 0.8 and g > 0.8 and b > 0.8:
        return "white"
    if r > 0.8 and g > 0.8 and b < 0.4:
        return "yellow"
    if r > 0.8 and g < 0.4 and b > 0.8:
        return "magenta"
    if r < 0.4 and g > 0.8 and b > 0.8:
        return "cyan"
    if r > 0.7 and 0.3 < g < 0.7 and b < 0.3:
        return "orange"
    if r > 0.7 and g < 0.4 and b < 0.4:
        return "red"
    if r < 0.4 and g > 0.7 and b < 0.4:
        return "green"
    if r < 0.4 and g < 0.4 and b > 0.7:
        return "blue"
    if r > 0.6 and g < 0.3 and b > 0.5:
        return "purple"
    if r > 0.6 and g > 0.5 and b > 0.5:
        return "pink"
    if r < 0.3 and g > 0.5 and b > 0.5:
        return "teal"
    return "mix"


def format_culture(label: str, culture: Culture) -> str:
    """Return a one-line description of a culture for logs."""
    a, b = culture.color_a, culture.color_b
    return (
        f"  {label}: A={color_name(a):<7}({a.r:3d},{a.g:3d},{a.b:3d}) "
        f"B={color_name(b):<7}({b.r:3d},{b.g:3d},{b.b:3d}) "
        f"osc={culture.oscillation} ({osc_to_hz(culture.oscillation):.2f}Hz)"
    )