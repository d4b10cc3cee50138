from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


CONFIG_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), "settings.json")


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    try:
        with open(path or CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(cfg: Dict[str, Any], path: Optional[str] = None) -> None:
    try:
        with open(path or CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(cfg, f, indent=2)
    except (OSError, TypeError, ValueError):
        pass


def _bounds(raw, default: Tuple[float, float], strict: bool = False) -> Tuple[float, float]:
    try:
        lo, hi = float(raw[0]), float(raw[1])
    except (TypeError, ValueError, IndexError, KeyError):
        return default
    lo, hi = max(0.0, min(1.0, lo)), max(0.0, min(1.0, hi))
    ok = lo < hi if strict else lo <= hi
    return (lo, hi) if ok else default


def _positive(raw, default: float) -> float:
    try:
        v = float(raw)
    except (TypeError, ValueError):
        return default
    return v if v > 0 else default


@dataclass
class ColorIdentifiersSettings:
    num_colors: int = 10
    luminance_bounds: Tuple[float, float] = (0.35, 0.8)
    saturation_bounds: Tuple[float, float] = (0.0, 1.0)
    coloring_method: str = "sequential"  # or "hash"
    recoloring_delay: float = 5.0  # seconds idle after an edit
    refresh_interval: float = 5.0  # seconds, periodic fallback
    debug: bool = False

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ColorIdentifiersSettings":
        d = cls()
        try:
            num = int(cfg.get("num_colors", d.num_colors))
        except (TypeError, ValueError):
            num = d.num_colors
        method = cfg.get("coloring_method", d.coloring_method)
        debug = cfg.get("debug", d.debug)
        return cls(
            num_colors=num if num >= 1 else d.num_colors,
            luminance_bounds=_bounds(cfg.get("luminance_bounds"), d.luminance_bounds),
            saturation_bounds=_bounds(cfg.get("saturation_bounds"), d.saturation_bounds, strict=True),
            coloring_method=method if method in ("sequential", "hash") else d.coloring_method,
            recoloring_delay=_positive(cfg.get("recoloring_delay"), d.recoloring_delay),
            refresh_interval=_positive(cfg.get("refresh_interval"), d.refresh_interval),
            debug=debug if isinstance(debug, bool) else d.debug,
        )

    def to_config(self) -> Dict[str, Any]:
        return {
            "num_colors": self.num_colors,
            "luminance_bounds": list(self.luminance_bounds),
            "saturation_bounds": list(self.saturation_bounds),
            "coloring_method": self.coloring_method,
            "recoloring_delay": self.recoloring_delay,
            "refresh_interval": self.refresh_interval,
            "debug": self.debug,
        }


def load_settings(path: Optional[str] = None) -> ColorIdentifiersSettings:
    return ColorIdentifiersSettings.from_config(load_config(path))


def save_settings(settings: ColorIdentifiersSettings, path: Optional[str] = None) -> None:
    # keep unrelated keys other tools may have written
    cfg = load_config(path)
    cfg.update(settings.to_config())
    save_config(cfg, path)
