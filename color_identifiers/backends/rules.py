from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Pattern, Tuple, Union

PatternLike = Union[str, Pattern]
TagSpec = Union[Iterable[Optional[str]], Callable[[], Iterable[Optional[str]]]]


def _source_and_flags(p: PatternLike) -> Tuple[str, int]:
    if isinstance(p, str):
        return p, 0
    return p.pattern, p.flags & ~re.UNICODE


@dataclass
class LexicalRule:
    """How one language spells identifiers.

    context:    must match the line text right before the cursor
                (e.g. ``[^.]\\s*`` rejects member-access suffixes)
    identifier: matched at the cursor; group 1 is the identifier
    tags:       style tags a position must carry to be considered; ``None``
                in the set also accepts undecorated text. May be a
                zero-argument callable evaluated once per scan.
    exclusion:  optional; a candidate matching it at the cursor is rejected
    """

    context: PatternLike
    identifier: PatternLike
    tags: TagSpec = (None,)
    exclusion: Optional[PatternLike] = None
    _context_re: Pattern = field(init=False, repr=False, compare=False)
    _identifier_re: Pattern = field(init=False, repr=False, compare=False)
    _exclusion_re: Optional[Pattern] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        src, flags = _source_and_flags(self.context)
        self._context_re = re.compile(f"(?:{src})\\Z", flags)
        src, flags = _source_and_flags(self.identifier)
        self._identifier_re = re.compile(src, flags)
        if self._identifier_re.groups < 1:
            raise ValueError(f"identifier pattern needs a capture group: {src!r}")
        if self.exclusion is not None:
            src, flags = _source_and_flags(self.exclusion)
            self._exclusion_re = re.compile(src, flags)
        else:
            self._exclusion_re = None

    def style_tags(self) -> FrozenSet[Optional[str]]:
        tags = self.tags() if callable(self.tags) else self.tags
        return frozenset(tags or ())

    def matches_before(self, text: str, pos: int, line_start: int = 0) -> bool:
        # the line start reads as a preceding newline
        window = "\n" + text[line_start:pos]
        return self._context_re.search(window) is not None

    def matches_at(self, text: str, pos: int) -> Optional[Tuple[int, int]]:
        if self._exclusion_re is not None and self._exclusion_re.match(text, pos):
            return None
        m = self._identifier_re.match(text, pos)
        if m is None:
            return None
        start, end = m.span(1)
        if start < 0 or end <= start:
            return None
        return start, end

    def match_end(self, text: str, pos: int) -> Optional[int]:
        """End of the identifier pattern's match at ``pos``, ignoring context
        and exclusion; None when nothing (or nothing non-empty) matches."""
        m = self._identifier_re.match(text, pos)
        if m is None or m.end() <= pos:
            return None
        return m.end()

    def search_forward(self, text: str, pos: int, limit: int) -> Optional[int]:
        m = self._identifier_re.search(text, pos, limit)
        return m.start() if m else None

# --------------------------
# Language table
# --------------------------

_RULES: Dict[str, LexicalRule] = {}


def _lang_key(language: Optional[str]) -> str:
    return (language or "").strip().lower()


def register_rule(language: str, rule) -> LexicalRule:
    """Register (or replace) the rule for a language tag.

    ``rule`` is a LexicalRule or a ``(context, identifier, tags[, exclusion])``
    tuple.
    """
    key = _lang_key(language)
    if not key:
        raise ValueError("language tag must be non-empty")
    if not isinstance(rule, LexicalRule):
        rule = LexicalRule(*rule)
    _RULES[key] = rule
    return rule


def unregister_rule(language: str) -> None:
    _RULES.pop(_lang_key(language), None)


def get_rule(language: Optional[str]) -> Optional[LexicalRule]:
    return _RULES.get(_lang_key(language))


def registered_languages() -> List[str]:
    return sorted(_RULES)
