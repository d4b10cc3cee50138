from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .rules import LexicalRule, get_rule
from .text_model import TextSource

Visit = Callable[[int, int], None]
ShouldContinue = Callable[[], bool]


def scan(
    rule: Optional[LexicalRule],
    source: TextSource,
    start: int,
    limit: int,
    visit: Visit,
    should_continue: Optional[ShouldContinue] = None,
) -> bool:
    """Walk ``source`` from ``start`` to ``limit`` calling ``visit(start, end)``
    for every identifier span.

    Positions whose tag is not in the rule's tag set (and that are not
    already classified) are skipped up to the next tag change. Returns False
    when ``should_continue`` asked to stop, True otherwise, including when
    there is no rule or no further match.
    """
    if rule is None:
        return True
    text = source.text
    limit = min(limit, len(text))
    tags = rule.style_tags()
    pos = max(0, start)

    while pos < limit:
        if should_continue is not None and not should_continue():
            return False
        if not (source.is_classified(pos) or source.tag_at(pos) in tags):
            pos = source.next_change(pos, limit)
            continue
        span = None
        if rule.matches_before(text, pos, source.line_start(pos)):
            span = rule.matches_at(text, pos)
        if span is None:
            # a rejected word is skipped whole, never re-entered at its tail
            skip = rule.match_end(text, pos)
            nxt = rule.search_forward(text, skip if skip is not None else pos + 1, limit)
            if nxt is None:
                return True
            pos = nxt
            continue
        visit(span[0], span[1])
        pos = max(span[1], pos + 1)
    return True


def scan_language(
    language: Optional[str],
    source: TextSource,
    start: int,
    limit: int,
    visit: Visit,
    should_continue: Optional[ShouldContinue] = None,
) -> bool:
    return scan(get_rule(language), source, start, limit, visit, should_continue)


def collect_identifiers(
    rule: Optional[LexicalRule],
    source: TextSource,
    should_continue: Optional[ShouldContinue] = None,
) -> Optional[List[Tuple[str, int]]]:
    """Distinct identifiers of the whole source in first-occurrence order,
    as ``(text, position)`` pairs, or None if the scan was cancelled."""
    text = source.text
    seen = set()
    found: List[Tuple[str, int]] = []

    def _visit(s: int, e: int) -> None:
        word = text[s:e]
        if word not in seen:
            seen.add(word)
            found.append((word, s))

    if not scan(rule, source, 0, len(text), _visit, should_continue):
        return None
    return found
