"""
Color Identifiers: give every distinct identifier in a document its own color.

Editor-agnostic core (no Qt needed):
- backends.palette: perceptually spaced palettes at a fixed lightness
- backends.rules: per-language lexical rules and the language table
- backends.scanner: incremental identifier scanning over a styled text source
- backends.session: per-document registry, colorizer and refresh

Qt integration lives in ``color_identifiers.ui`` (PySide6, or PySide2) and is
only imported on demand; ``launch_standalone()`` opens a demo editor.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from .backends.languages import canonical_language, register_default_rules
from .backends.palette import Color, Palette, foreground_luminance, generate_palette
from .backends.registry import IdentifierRegistry, RotatingCounter
from .backends.rules import LexicalRule, get_rule, register_rule, unregister_rule
from .backends.scanner import collect_identifiers, scan, scan_language
from .backends.session import ColorIdentifiersDocument, SharedRefreshTimer, shared_timer
from .backends.text_model import StyledBuffer, TextSource
from .utils.config import ColorIdentifiersSettings, load_settings, save_settings

__all__ = [
    "Color",
    "ColorIdentifiersDocument",
    "ColorIdentifiersSettings",
    "IdentifierRegistry",
    "LexicalRule",
    "Palette",
    "RotatingCounter",
    "SharedRefreshTimer",
    "StyledBuffer",
    "TextSource",
    "canonical_language",
    "collect_identifiers",
    "foreground_luminance",
    "generate_palette",
    "get_rule",
    "launch_standalone",
    "load_settings",
    "register_default_rules",
    "register_rule",
    "save_settings",
    "scan",
    "scan_language",
    "shared_timer",
    "unregister_rule",
]

_DEMO_TEXT = '''def fib(count):
    first, second = 0, 1
    for index in range(count):
        first, second = second, first + second
    return first


total = fib(10)
print(total, fib.__name__)
'''


def launch_standalone(path: Optional[str] = None, language: Optional[str] = None):
    """Open a plain-text editor with identifier coloring.

    ``color-identifiers [FILE [LANGUAGE]]``; the language defaults to the file
    extension, and to Python for the built-in demo text.
    """
    args = sys.argv[1:]
    if path is None and args:
        path = args[0]
    if language is None and len(args) > 1:
        language = args[1]

    try:
        from PySide6.QtWidgets import QApplication, QPlainTextEdit  # type: ignore
    except Exception:
        try:
            from PySide2.QtWidgets import QApplication, QPlainTextEdit  # type: ignore
        except Exception as exc:
            print("[color-identifiers] PySide6/PySide2 is required for standalone launch:", exc)
            sys.exit(1)

    from .ui.highlighters import create_identifier_highlighter
    from .ui.scheduling import install_qt_timer

    text = _DEMO_TEXT
    if path:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()
        except OSError as exc:
            print(f"[color-identifiers] cannot read {path}: {exc}")
            sys.exit(1)
        if language is None:
            language = os.path.splitext(path)[1].lstrip(".")
    language = canonical_language(language or "python")

    app = QApplication.instance() or QApplication(sys.argv)
    settings = load_settings()
    install_qt_timer(settings.refresh_interval)

    editor = QPlainTextEdit()
    editor.setWindowTitle(f"Color Identifiers - {path or 'demo'} [{language}]")
    editor.resize(800, 600)
    editor.setPlainText(text)
    highlighter = create_identifier_highlighter(editor.document(), language, settings=settings)
    if highlighter is None:
        print(f"[color-identifiers] no lexical rule for language '{language}'; showing plain text")
    editor.show()
    try:
        rc = app.exec()
    except Exception:
        rc = app.exec_()
    sys.exit(rc)
