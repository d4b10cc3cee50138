from __future__ import annotations

"""
Per-document coloring state and the process-wide refresh timer.

A ColorIdentifiersDocument owns the palette, the identifier registry and the
rotating counter of one document. Hosts call:
- colorize(limit, start) from their redraw/fontification pass
- refresh() from an idle or periodic timer
- regenerate_palette() when the theme or foreground color changes
"""

from typing import Callable, List, Optional

from ..utils.config import ColorIdentifiersSettings
from .palette import EMPTY_PALETTE, Color, Palette, generate_palette
from .registry import IdentifierRegistry, RotatingCounter
from .rules import LexicalRule, get_rule
from .scanner import collect_identifiers, scan
from .text_model import TextSource

LOG_PREFIX = "[color-identifiers]"

TimerFactory = Callable[[float, Callable[[], None]], object]


class SharedRefreshTimer:
    """One periodic timer for every document with coloring enabled.

    The timer handle is created through ``timer_factory(interval, callback)``
    when the first document is acquired and ``cancel()``-ed when the last one
    is released. Without a factory, documents are only tracked and the host
    drives refresh itself.
    """

    def __init__(self, timer_factory: Optional[TimerFactory] = None, interval: float = 5.0):
        self._factory = timer_factory
        self.interval = float(interval)
        self._documents: List["ColorIdentifiersDocument"] = []
        self._handle = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def refcount(self) -> int:
        return len(self._documents)

    def install_factory(self, timer_factory: Optional[TimerFactory], interval: Optional[float] = None) -> None:
        self._stop()
        self._factory = timer_factory
        if interval is not None:
            self.interval = float(interval)
        if self._documents:
            self._start()

    def acquire(self, document: "ColorIdentifiersDocument") -> None:
        if document in self._documents:
            return
        self._documents.append(document)
        if self._handle is None:
            self._start()

    def release(self, document: "ColorIdentifiersDocument") -> None:
        if document in self._documents:
            self._documents.remove(document)
        if not self._documents:
            self._stop()

    def tick(self) -> None:
        for doc in list(self._documents):
            doc.refresh()

    def _start(self) -> None:
        if self._factory is not None and self._handle is None:
            self._handle = self._factory(self.interval, self.tick)

    def _stop(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.cancel()


shared_timer = SharedRefreshTimer()


class ColorIdentifiersDocument:
    """Identifier coloring for one document.

    ``input_pending`` is polled during refresh scans; when it returns True
    the scan stops and the previous registry stays in place. ``redraw`` is
    called after a refresh installed a new registry.
    """

    def __init__(
        self,
        source: TextSource,
        language: Optional[str],
        settings: Optional[ColorIdentifiersSettings] = None,
        foreground_luminance: Optional[float] = None,
        input_pending: Optional[Callable[[], bool]] = None,
        redraw: Optional[Callable[[], None]] = None,
        timer: Optional[SharedRefreshTimer] = None,
        debug: Optional[bool] = None,
    ):
        self.source = source
        self.language = language
        self.settings = settings or ColorIdentifiersSettings()
        self.foreground_luminance = foreground_luminance
        self.input_pending = input_pending
        self.redraw = redraw
        self.timer = timer if timer is not None else shared_timer
        self.debug = self.settings.debug if debug is None else bool(debug)

        self.active = False
        self.palette: Palette = EMPTY_PALETTE
        self.registry = IdentifierRegistry(self.settings.coloring_method)
        self.counter = RotatingCounter()
        self._refreshing = False

    def _log(self, msg: str) -> None:
        if self.debug:
            print(f"{LOG_PREFIX} {msg}")

    @property
    def rule(self) -> Optional[LexicalRule]:
        return get_rule(self.language)

    # Mode lifecycle

    def enable(self) -> None:
        if self.active:
            return
        self.active = True
        self.counter.reset()
        self.registry = IdentifierRegistry(self.settings.coloring_method)
        self.regenerate_palette()
        self.timer.acquire(self)

    def disable(self) -> None:
        if not self.active:
            return
        self.active = False
        self.timer.release(self)
        self.registry = IdentifierRegistry(self.settings.coloring_method)
        self.counter.reset()
        self.palette = EMPTY_PALETTE

    # Palette

    def regenerate_palette(self, foreground_luminance: Optional[float] = None) -> Palette:
        if foreground_luminance is not None:
            self.foreground_luminance = foreground_luminance
        s = self.settings
        palette = generate_palette(
            s.num_colors,
            self.foreground_luminance,
            luminance_bounds=s.luminance_bounds,
            saturation_bounds=s.saturation_bounds,
        )
        self.palette = palette
        self._log(f"palette: {len(palette)} colors at lightness {palette.lightness:.3f}")
        return palette

    # Colorizer

    def color_of(self, text: str) -> Optional[Color]:
        palette = self.palette
        if not palette:
            return None
        slot = self.registry.assign(text, len(palette), self.counter)
        return palette[slot % len(palette)]

    def colorize(self, limit: int, start: int = 0, source: Optional[TextSource] = None) -> None:
        if not self.active:
            return
        src = source if source is not None else self.source
        text = src.text

        def _visit(s: int, e: int) -> None:
            color = self.color_of(text[s:e])
            if color is not None:
                src.apply_color(s, e, color.hex)
            src.mark_classified(s, e)

        scan(self.rule, src, start, limit, _visit)

    # Refresh orchestrator

    def refresh(self) -> bool:
        """Rebuild the registry from a full scan. Returns True if a new
        registry was installed."""
        if not self.active or self._refreshing:
            return False
        rule = self.rule
        if rule is None:
            return False
        pending = self.input_pending
        should_continue = (lambda: not pending()) if pending is not None else None
        self._refreshing = True
        try:
            found = collect_identifiers(rule, self.source, should_continue)
        finally:
            self._refreshing = False
        if found is None:
            self._log("refresh aborted: input pending")
            return False
        palette = self.palette
        if not palette:
            return False
        registry = IdentifierRegistry(self.settings.coloring_method)
        registry.assign_full(found, len(palette))
        self.registry = registry
        self._log(f"refresh: {len(registry)} distinct identifiers")
        if self.redraw is not None:
            self.redraw()
        return True
