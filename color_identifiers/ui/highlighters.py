from __future__ import annotations

"""
Qt highlighter that colors every identifier by its own stable hue.

- Tokenizes each block with Pygments when available; token types become the
  style tags that lexical rules select on (undecorated text otherwise).
- Theme fidelity: the palette lightness follows the application's text
  color; with no app palette it falls back to mid lightness.
- Refresh runs after the document has been idle for a while and on the
  shared periodic timer; typing in the document cancels a running refresh.

Factory helper:
- create_identifier_highlighter(document, language) -> IdentifierHighlighter | None
"""

from bisect import bisect_right
from typing import Dict, Iterator, List, Optional, Tuple

try:
    from PySide6.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor
    from PySide6.QtWidgets import QApplication
    from PySide6.QtGui import QPalette
    QT6 = True
except Exception:
    from PySide2.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor  # type: ignore
    from PySide2.QtWidgets import QApplication  # type: ignore
    from PySide2.QtGui import QPalette  # type: ignore
    QT6 = False

from ..backends.languages import canonical_language, register_default_rules
from ..backends.rules import get_rule
from ..backends.session import LOG_PREFIX, ColorIdentifiersDocument
from ..backends.text_model import TextSource
from ..utils.config import ColorIdentifiersSettings, load_settings
from .scheduling import IdleTrigger, InputMonitor

# Pygments lexer names that differ from our language tags
_PYGMENTS_NAMES = {"elisp": "emacs-lisp"}

# --------------------------
# Theme / color helpers
# --------------------------

def _qcolor_from_css(css: str) -> QColor:
    c = QColor(css)
    return c if c.isValid() else QColor("#cccccc")


def _theme_palette():
    app = QApplication.instance()
    return app.palette() if app else None


def _theme_foreground_luminance() -> Optional[float]:
    """HSL lightness of the theme text color, None when there is no theme."""
    pal = _theme_palette()
    if pal is None:
        return None
    c = pal.color(QPalette.Text)
    return c.lightnessF() if c.isValid() else None

# --------------------------
# Pygments tokens
# --------------------------

def _first_available_style(names):
    try:
        from pygments.styles import get_style_by_name
        from pygments.util import ClassNotFound
    except Exception:
        return None
    for nm in names:
        try:
            get_style_by_name(nm)
            return nm
        except ClassNotFound:
            continue
    return None


def make_lexer(language: str, debug: bool = False):
    """Pygments lexer for a language tag, or None (text stays undecorated)."""
    try:
        from pygments.lexers import get_lexer_by_name
        from pygments.util import ClassNotFound
    except Exception as exc:
        if debug:
            print(f"{LOG_PREFIX} Pygments not available: {exc}")
        return None
    name = _PYGMENTS_NAMES.get(language, language)
    try:
        return get_lexer_by_name(name, stripnl=False, ensurenl=False)
    except ClassNotFound as exc:
        if debug:
            print(f"{LOG_PREFIX} no lexer for {language}: {exc}; using undecorated text")
        return None


def token_spans(lexer, text: str) -> Iterator[Tuple[int, int, object]]:
    if lexer is None or not text:
        return
    from pygments import lex

    pos = 0
    n = len(text)
    for ttype, value in lex(text, lexer):
        end = min(n, pos + len(value))
        if end > pos:
            yield pos, end, ttype
        pos = end
        if pos >= n:
            break


def style_tag(ttype) -> Optional[str]:
    """Pygments token name used as a style tag, None for plain text."""
    from pygments.token import Token

    return None if ttype in Token.Text else str(ttype)


def token_tags(spans, length: int) -> List[Optional[str]]:
    """One style tag per character from ``(start, end, ttype)`` token spans."""
    tags: List[Optional[str]] = [None] * length
    for start, end, ttype in spans:
        tag = style_tag(ttype)
        if tag is None:
            continue
        for i in range(start, end):
            tags[i] = tag
    return tags


def _style_formats(style_name: Optional[str]) -> Dict[object, QTextCharFormat]:
    try:
        from pygments.styles import get_style_by_name
        from pygments.util import ClassNotFound
    except Exception:
        return {}
    if style_name is None:
        style_name = _first_available_style(("native", "monokai", "friendly", "default")) or "default"
    try:
        style = get_style_by_name(style_name)
    except ClassNotFound:
        style = get_style_by_name("default")

    def parse_spec(spec: str) -> QTextCharFormat:
        fmt = QTextCharFormat()
        for part in (spec or "").split():
            p = part.lower()
            if p == 'italic':
                fmt.setFontItalic(True)
            elif p == 'underline':
                fmt.setFontUnderline(True)
            elif p.startswith('#'):
                fmt.setForeground(_qcolor_from_css(p))
        return fmt

    return {token: parse_spec(spec) for token, spec in getattr(style, 'styles', {}).items()}

# --------------------------
# Text sources
# --------------------------

class QtDocumentSource(TextSource):
    """Whole-document snapshot shared by refresh and block highlighting.

    The snapshot (plain text, Pygments tokens, token tags) is rebuilt lazily
    once the document changed; ``stale`` tells a running scan that the
    document moved on and ``generation`` counts rebuilds. Blocks take their
    tokens from this snapshot so multi-line tokens (docstrings, block
    comments) keep their type on every line.
    """

    def __init__(self, document, lexer=None, on_edit=None):
        self.document = document
        self.lexer = lexer
        self.on_edit = on_edit
        self.edits = 0
        self.generation = 0
        self._snap_key = None
        self._text = ""
        self._spans: List[Tuple[int, int, object]] = []
        self._starts: List[int] = []
        self._tags: List[Optional[str]] = []
        document.contentsChange.connect(self._on_contents_change)
        document.undoCommandAdded.connect(self._on_edit)

    def _on_contents_change(self, position: int, removed: int, added: int) -> None:
        # highlighter format updates arrive with removed == added
        if removed != added:
            self._on_edit()

    def _on_edit(self) -> None:
        self.edits += 1
        if self.on_edit is not None:
            self.on_edit()

    def _key(self) -> Tuple[int, int]:
        # revision() moves before contentsChange reaches our slot
        return self.edits, self.document.revision()

    @property
    def stale(self) -> bool:
        return self._snap_key != self._key()

    def _rebuild(self) -> None:
        self._text = self.document.toPlainText()
        self._spans = list(token_spans(self.lexer, self._text))
        self._starts = [s for s, _e, _t in self._spans]
        self._tags = token_tags(self._spans, len(self._text))
        self._snap_key = self._key()
        self.generation += 1

    @property
    def text(self) -> str:
        if self.stale:
            self._rebuild()
        return self._text

    def tag_at(self, pos: int) -> Optional[str]:
        return self._tags[pos]

    def block_tokens(self, position: int, text: str) -> Optional[List[Tuple[int, int, object]]]:
        """Tokens covering one block, relative to ``position``.

        None when the current snapshot disagrees with the block text
        (``toPlainText`` normalizes a few characters, e.g. non-breaking spaces).
        """
        end = position + len(text)
        if self.text[position:end] != text:
            return None
        out = []
        i = max(0, bisect_right(self._starts, position) - 1)
        while i < len(self._spans):
            s, e, ttype = self._spans[i]
            if s >= end:
                break
            if e > position:
                out.append((max(s, position) - position, min(e, end) - position, ttype))
            i += 1
        return out

    def tag_after(self, position: int) -> Optional[str]:
        """Tag of the character ending a block (its newline), None past the end."""
        return self._tags[position] if position < len(self._tags) else None

    def line_start(self, pos: int) -> int:
        return self._text.rfind("\n", 0, pos) + 1


class _BlockSource(TextSource):
    """One block being highlighted; colors go straight to setFormat."""

    def __init__(self, highlighter: "IdentifierHighlighter", text: str, tags: List[Optional[str]]):
        self._hl = highlighter
        self._text = text
        self._tags = tags
        self._classified = bytearray(len(text))

    @property
    def text(self) -> str:
        return self._text

    def tag_at(self, pos: int) -> Optional[str]:
        return self._tags[pos]

    def is_classified(self, pos: int) -> bool:
        return bool(self._classified[pos])

    def mark_classified(self, start: int, end: int) -> None:
        for i in range(start, min(end, len(self._text))):
            self._classified[i] = 1

    def apply_color(self, start: int, end: int, color: str) -> None:
        self._hl._set_identifier_color(start, end, color)

# --------------------------
# Highlighter
# --------------------------

class IdentifierHighlighter(QSyntaxHighlighter):
    """QSyntaxHighlighter giving each distinct identifier its own color.

    Base token colors come from a Pygments style (when Pygments is present);
    identifier spans are then re-colored from the perceptual palette.
    """

    def __init__(
        self,
        document,
        language: str,
        settings: Optional[ColorIdentifiersSettings] = None,
        style_name: Optional[str] = None,
        debug: Optional[bool] = None,
        enable: bool = True,
    ):
        QSyntaxHighlighter.__init__(self, document)
        self.settings = settings if settings is not None else load_settings()
        self._debug = self.settings.debug if debug is None else bool(debug)
        self.language = canonical_language(language)
        if self._debug:
            print(f"{LOG_PREFIX} Highlighter: language={self.language} style={style_name or 'auto'}")

        self.lexer = make_lexer(self.language, self._debug)
        self.formats = _style_formats(style_name) if self.lexer is not None else {}
        self.default_format = QTextCharFormat()
        self._colors: Dict[str, QColor] = {}
        self._block_states: Dict[Optional[str], int] = {None: 0}

        self._idle = IdleTrigger(self.settings.recoloring_delay, self.refresh, parent=self)
        self.source = QtDocumentSource(document, self.lexer, on_edit=self._idle.poke)
        self.context = ColorIdentifiersDocument(
            self.source,
            self.language,
            settings=self.settings,
            foreground_luminance=_theme_foreground_luminance(),
            input_pending=InputMonitor(self.source),
            redraw=self.rehighlight,
            debug=self._debug,
        )
        if enable:
            self.enable()

    # Mode lifecycle

    def enable(self) -> None:
        self.context.enable()
        if not self.context.refresh():
            self.rehighlight()

    def disable(self) -> None:
        self._idle.stop()
        self.context.disable()
        self.rehighlight()

    def refresh(self) -> bool:
        return self.context.refresh()

    def regenerate_palette(self, foreground_luminance: Optional[float] = None) -> None:
        """Call on theme/style change."""
        if foreground_luminance is None:
            foreground_luminance = _theme_foreground_luminance()
        self.context.regenerate_palette(foreground_luminance)
        self.rehighlight()

    # Rendering

    def _format_for(self, token) -> QTextCharFormat:
        if token in self.formats:
            return self.formats[token]
        cur = token
        while getattr(cur, 'parent', None) is not None:
            cur = cur.parent
            if cur in self.formats:
                self.formats[token] = self.formats[cur]
                return self.formats[cur]
        return self.default_format

    def _set_identifier_color(self, start: int, end: int, color: str) -> None:
        qc = self._colors.get(color)
        if qc is None:
            qc = self._colors[color] = _qcolor_from_css(color)
        fmt = QTextCharFormat(self.format(start))
        fmt.setForeground(qc)
        self.setFormat(start, end - start, fmt)

    def highlightBlock(self, text: str) -> None:  # type: ignore
        tags: List[Optional[str]] = [None] * len(text)
        if self.lexer is not None:
            position = self.currentBlock().position()
            tokens = self.source.block_tokens(position, text)
            if tokens is None:
                tokens = list(token_spans(self.lexer, text))
            else:
                # block state follows the token open at the block's end, so
                # opening or closing a multi-line string re-highlights what follows
                tag = self.source.tag_after(position + len(text))
                state = self._block_states.setdefault(tag, len(self._block_states))
                self.setCurrentBlockState(state)
            for start, end, ttype in tokens:
                self.setFormat(start, end - start, self._format_for(ttype))
                tag = style_tag(ttype)
                if tag is not None:
                    for i in range(start, end):
                        tags[i] = tag
        if text:
            self.context.colorize(len(text), source=_BlockSource(self, text, tags))

# --------------------------
# Factories
# --------------------------

def create_identifier_highlighter(
    document,
    language: str,
    settings: Optional[ColorIdentifiersSettings] = None,
    style_name: Optional[str] = None,
    register_defaults: bool = True,
):
    """Attach an IdentifierHighlighter, or return None for a language with no rule.

    With ``register_defaults`` the bundled rule for the language is
    registered first if nobody registered one.
    """
    lang = canonical_language(language)
    if get_rule(lang) is None and register_defaults:
        register_default_rules([lang])
    if get_rule(lang) is None:
        return None
    return IdentifierHighlighter(document, lang, settings=settings, style_name=style_name)
