from __future__ import annotations

"""
Perceptually spaced identifier palettes.

Candidates are sampled from an 8x8 hue/saturation grid at a single HSL
lightness, projected into CIELAB, and picked greedily so each new color is
as far as possible (CIEDE2000) from its nearest already-picked neighbour.

Helpers:
- generate_palette(count, foreground_luminance) -> Palette
- foreground_luminance(color) -> float   (0.5 when the color is unknown)
- ciede2000(lab1, lab2) -> float
"""

import colorsys
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

Lab = Tuple[float, float, float]
RGB = Tuple[float, float, float]

GRID_SIZE = 8
DEFAULT_LUMINANCE = 0.5
DEFAULT_LUMINANCE_BOUNDS: Tuple[float, float] = (0.35, 0.8)
DEFAULT_SATURATION_BOUNDS: Tuple[float, float] = (0.0, 1.0)

# D65 reference white
_XN, _YN, _ZN = 0.95047, 1.0, 1.08883
_EPSILON = 216.0 / 24389.0
_KAPPA = 24389.0 / 27.0

# --------------------------
# Color space conversion
# --------------------------

def _srgb_to_linear(c: float) -> float:
    if c > 0.04045:
        return ((c + 0.055) / 1.055) ** 2.4
    return c / 12.92


def _linear_to_srgb(c: float) -> float:
    if c > 0.0031308:
        return 1.055 * (c ** (1.0 / 2.4)) - 0.055
    return 12.92 * c


def rgb_to_lab(rgb: Sequence[float]) -> Lab:
    """sRGB triple in [0, 1] -> CIELAB (L in 0..100)."""
    r, g, b = (_srgb_to_linear(float(c)) for c in rgb)
    x = (r * 0.4124564 + g * 0.3575761 + b * 0.1804375) / _XN
    y = (r * 0.2126729 + g * 0.7151522 + b * 0.0721750) / _YN
    z = (r * 0.0193339 + g * 0.1191920 + b * 0.9503041) / _ZN

    def f(t: float) -> float:
        return t ** (1.0 / 3.0) if t > _EPSILON else (_KAPPA * t + 16.0) / 116.0

    fx, fy, fz = f(x), f(y), f(z)
    return (116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def lab_to_rgb(lab: Sequence[float]) -> RGB:
    """CIELAB -> sRGB triple, clipped to [0, 1]."""
    L, a, b = (float(c) for c in lab)
    fy = (L + 16.0) / 116.0
    fx = a / 500.0 + fy
    fz = fy - b / 200.0

    x = fx ** 3 if fx ** 3 > _EPSILON else (116.0 * fx - 16.0) / _KAPPA
    y = fy ** 3 if L > _KAPPA * _EPSILON else L / _KAPPA
    z = fz ** 3 if fz ** 3 > _EPSILON else (116.0 * fz - 16.0) / _KAPPA
    x *= _XN
    y *= _YN
    z *= _ZN

    r = x * 3.2404542 - y * 1.5371385 - z * 0.4985314
    g = -x * 0.9692660 + y * 1.8760108 + z * 0.0415560
    bl = x * 0.0556434 - y * 0.2040259 + z * 1.0572252
    return tuple(min(1.0, max(0.0, _linear_to_srgb(c))) for c in (r, g, bl))  # type: ignore[return-value]


def ciede2000(lab1: Sequence[float], lab2: Sequence[float]) -> float:
    """CIEDE2000 color difference (kL = kC = kH = 1)."""
    L1, a1, b1 = lab1
    L2, a2, b2 = lab2

    c_bar = (math.hypot(a1, b1) + math.hypot(a2, b2)) / 2.0
    c_bar7 = c_bar ** 7
    g = 0.5 * (1.0 - math.sqrt(c_bar7 / (c_bar7 + 25.0 ** 7)))
    a1p = (1.0 + g) * a1
    a2p = (1.0 + g) * a2
    c1p = math.hypot(a1p, b1)
    c2p = math.hypot(a2p, b2)
    h1p = math.degrees(math.atan2(b1, a1p)) % 360.0 if c1p else 0.0
    h2p = math.degrees(math.atan2(b2, a2p)) % 360.0 if c2p else 0.0

    d_lp = L2 - L1
    d_cp = c2p - c1p
    if c1p * c2p == 0.0:
        d_hp = 0.0
    else:
        d_hp = h2p - h1p
        if d_hp > 180.0:
            d_hp -= 360.0
        elif d_hp < -180.0:
            d_hp += 360.0
    d_big_hp = 2.0 * math.sqrt(c1p * c2p) * math.sin(math.radians(d_hp / 2.0))

    l_barp = (L1 + L2) / 2.0
    c_barp = (c1p + c2p) / 2.0
    if c1p * c2p == 0.0:
        h_barp = h1p + h2p
    elif abs(h1p - h2p) > 180.0:
        h_barp = (h1p + h2p + 360.0) / 2.0 if h1p + h2p < 360.0 else (h1p + h2p - 360.0) / 2.0
    else:
        h_barp = (h1p + h2p) / 2.0

    t = (1.0
         - 0.17 * math.cos(math.radians(h_barp - 30.0))
         + 0.24 * math.cos(math.radians(2.0 * h_barp))
         + 0.32 * math.cos(math.radians(3.0 * h_barp + 6.0))
         - 0.20 * math.cos(math.radians(4.0 * h_barp - 63.0)))
    d_theta = 30.0 * math.exp(-(((h_barp - 275.0) / 25.0) ** 2))
    c_barp7 = c_barp ** 7
    r_c = 2.0 * math.sqrt(c_barp7 / (c_barp7 + 25.0 ** 7))
    s_l = 1.0 + (0.015 * (l_barp - 50.0) ** 2) / math.sqrt(20.0 + (l_barp - 50.0) ** 2)
    s_c = 1.0 + 0.045 * c_barp
    s_h = 1.0 + 0.015 * c_barp * t
    r_t = -math.sin(math.radians(2.0 * d_theta)) * r_c

    dl = d_lp / s_l
    dc = d_cp / s_c
    dh = d_big_hp / s_h
    return math.sqrt(dl * dl + dc * dc + dh * dh + r_t * dc * dh)

# --------------------------
# Color / Palette values
# --------------------------

@dataclass(frozen=True)
class Color:
    """A palette entry: CIELAB point plus its sRGB rendering."""

    lab: Lab
    rgb: RGB

    @classmethod
    def from_lab(cls, lab: Sequence[float]) -> "Color":
        lab_t = (float(lab[0]), float(lab[1]), float(lab[2]))
        return cls(lab=lab_t, rgb=lab_to_rgb(lab_t))

    @classmethod
    def from_rgb(cls, rgb: Sequence[float]) -> "Color":
        rgb_t = (float(rgb[0]), float(rgb[1]), float(rgb[2]))
        return cls(lab=rgb_to_lab(rgb_t), rgb=rgb_t)

    @classmethod
    def from_hsl(cls, hue: float, saturation: float, lightness: float) -> "Color":
        return cls.from_rgb(colorsys.hls_to_rgb(hue, lightness, saturation))

    @property
    def hex(self) -> str:
        r, g, b = (int(round(c * 255)) for c in self.rgb)
        return f"#{r:02x}{g:02x}{b:02x}"

    @property
    def lightness(self) -> float:
        return colorsys.rgb_to_hls(*self.rgb)[1]


@dataclass(frozen=True)
class Palette:
    """Immutable ordered colors sharing one HSL lightness."""

    colors: Tuple[Color, ...] = ()
    lightness: float = DEFAULT_LUMINANCE

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[Color]:
        return iter(self.colors)

    def __getitem__(self, index: int) -> Color:
        return self.colors[index]

    def __bool__(self) -> bool:
        return bool(self.colors)

    def hex_colors(self) -> List[str]:
        return [c.hex for c in self.colors]


EMPTY_PALETTE = Palette()

# --------------------------
# Generation
# --------------------------

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _check_bounds(name: str, bounds: Tuple[float, float]) -> Tuple[float, float]:
    lo, hi = float(bounds[0]), float(bounds[1])
    if lo > hi:
        raise ValueError(f"{name} lower bound {lo} exceeds upper bound {hi}")
    return lo, hi


def _candidate_grid(lightness: float, saturation_bounds: Tuple[float, float]) -> List[Lab]:
    # hue-major, saturation-minor; this order is also the tie-break order
    min_s, max_s = saturation_bounds
    span = max_s - min_s
    out: List[Lab] = []
    for h in range(GRID_SIZE):
        hue = h / float(GRID_SIZE)
        for s in range(GRID_SIZE):
            sat = min_s + (s + 1) / float(GRID_SIZE) * span
            out.append(rgb_to_lab(colorsys.hls_to_rgb(hue, lightness, sat)))
    return out


def generate_palette(
    count: int,
    foreground_luminance: Optional[float] = None,
    luminance_bounds: Tuple[float, float] = DEFAULT_LUMINANCE_BOUNDS,
    saturation_bounds: Tuple[float, float] = DEFAULT_SATURATION_BOUNDS,
) -> Palette:
    """Pick up to ``count`` mutually distant colors at a clamped lightness.

    Greedy max-min selection starting from the first grid candidate. When
    several candidates share the largest nearest-neighbour distance the one
    earliest in grid order wins (lowest hue index, then lowest saturation
    index), so the result is deterministic and every palette is a prefix of
    any larger palette built from the same inputs.

    Equal saturation bounds leave one saturation per hue, so at most 8
    picks are distinct (one when that saturation is 0) and larger palettes
    repeat them. Settings loaded from a config file never carry such bounds.
    """
    if count < 0:
        raise ValueError(f"palette size must be >= 0, got {count}")
    lo, hi = _check_bounds("luminance", luminance_bounds)
    sat_bounds = _check_bounds("saturation", saturation_bounds)
    lum = DEFAULT_LUMINANCE if foreground_luminance is None else float(foreground_luminance)
    lightness = _clamp(lum, lo, hi)
    if count == 0:
        return Palette((), lightness)

    remaining = _candidate_grid(lightness, sat_bounds)
    chosen: List[Lab] = [remaining.pop(0)]
    nearest = [ciede2000(c, chosen[0]) for c in remaining]

    while len(chosen) < count and remaining:
        best = 0
        for i in range(1, len(nearest)):
            if nearest[i] > nearest[best]:
                best = i
        pick = remaining.pop(best)
        nearest.pop(best)
        chosen.append(pick)
        for i, cand in enumerate(remaining):
            d = ciede2000(cand, pick)
            if d < nearest[i]:
                nearest[i] = d

    return Palette(tuple(Color.from_lab(lab) for lab in chosen), lightness)

# --------------------------
# Theme helpers
# --------------------------

def _parse_hex(css: str) -> Optional[RGB]:
    s = css.strip().lstrip('#')
    if len(s) == 3:
        s = ''.join(ch * 2 for ch in s)
    if len(s) != 6:
        return None
    try:
        return (int(s[0:2], 16) / 255.0, int(s[2:4], 16) / 255.0, int(s[4:6], 16) / 255.0)
    except ValueError:
        return None


def foreground_luminance(color: Union[str, Sequence[float], None]) -> float:
    """HSL lightness of a foreground color, or 0.5 when it cannot be resolved."""
    if color is None:
        return DEFAULT_LUMINANCE
    if isinstance(color, str):
        rgb = _parse_hex(color)
    else:
        try:
            rgb = (float(color[0]), float(color[1]), float(color[2]))
        except (TypeError, ValueError, IndexError):
            rgb = None
    if rgb is None:
        return DEFAULT_LUMINANCE
    return colorsys.rgb_to_hls(*rgb)[1]
