from __future__ import annotations

from typing import List, Optional


class TextSource:
    """What the scanner and colorizer need from a host text model.

    Hosts expose the plain text, the style tag attached at a position, a
    per-position "classified" marker that the colorizer sets on every span it
    visits, and a way to apply a foreground color. Hosts are responsible for
    clearing markers and colors on text they invalidate.
    """

    @property
    def text(self) -> str:
        raise NotImplementedError

    def __len__(self) -> int:
        return len(self.text)

    def tag_at(self, pos: int) -> Optional[str]:
        return None

    def is_classified(self, pos: int) -> bool:
        return False

    def mark_classified(self, start: int, end: int) -> None:
        pass

    def apply_color(self, start: int, end: int, color: str) -> None:
        pass

    def line_start(self, pos: int) -> int:
        return self.text.rfind("\n", 0, pos) + 1

    def next_change(self, pos: int, limit: int) -> int:
        """First position after ``pos`` (capped at ``limit``) whose tag or
        classified marker differs from the one at ``pos``."""
        key = (self.tag_at(pos), self.is_classified(pos))
        i = pos + 1
        while i < limit and (self.tag_at(i), self.is_classified(i)) == key:
            i += 1
        return min(i, limit)


class StyledBuffer(TextSource):
    """In-memory mutable text with per-character tags, markers and colors.

    Edits invalidate classification and colors on every line they touch,
    the same way an editor refontifies modified lines.
    """

    def __init__(self, text: str = "", tags: Optional[List[Optional[str]]] = None):
        self._text = text
        if tags is not None and len(tags) != len(text):
            raise ValueError("tags must cover the text one entry per character")
        self._tags: List[Optional[str]] = list(tags) if tags is not None else [None] * len(text)
        self._classified = bytearray(len(text))
        self._colors: List[Optional[str]] = [None] * len(text)

    @property
    def text(self) -> str:
        return self._text

    def tag_at(self, pos: int) -> Optional[str]:
        return self._tags[pos]

    def is_classified(self, pos: int) -> bool:
        return bool(self._classified[pos])

    def mark_classified(self, start: int, end: int) -> None:
        for i in range(max(0, start), min(end, len(self._text))):
            self._classified[i] = 1

    def apply_color(self, start: int, end: int, color: str) -> None:
        for i in range(max(0, start), min(end, len(self._text))):
            self._colors[i] = color

    def color_at(self, pos: int) -> Optional[str]:
        return self._colors[pos]

    def set_tag(self, start: int, end: int, tag: Optional[str]) -> None:
        for i in range(max(0, start), min(end, len(self._text))):
            self._tags[i] = tag

    def colored_spans(self) -> List[tuple]:
        """(start, end, color) runs of applied colors, in buffer order."""
        out = []
        i = 0
        n = len(self._text)
        while i < n:
            c = self._colors[i]
            if c is None:
                i += 1
                continue
            j = i + 1
            while j < n and self._colors[j] == c:
                j += 1
            out.append((i, j, c))
            i = j
        return out

    # Edits

    def _line_bounds(self, start: int, end: int) -> tuple:
        lo = self._text.rfind("\n", 0, start) + 1
        hi = self._text.find("\n", end)
        return lo, (len(self._text) if hi == -1 else hi)

    def invalidate(self, start: int, end: int) -> None:
        lo, hi = self._line_bounds(start, end)
        for i in range(lo, hi):
            self._classified[i] = 0
            self._colors[i] = None

    def insert(self, pos: int, text: str, tag: Optional[str] = None) -> None:
        if not 0 <= pos <= len(self._text):
            raise IndexError(f"insert position {pos} out of range")
        n = len(text)
        self._text = self._text[:pos] + text + self._text[pos:]
        self._tags[pos:pos] = [tag] * n
        self._classified[pos:pos] = bytes(n)
        self._colors[pos:pos] = [None] * n
        self.invalidate(pos, pos + n)

    def delete(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._text):
            raise IndexError(f"delete range {start}:{end} out of range")
        self._text = self._text[:start] + self._text[end:]
        del self._tags[start:end]
        del self._classified[start:end]
        del self._colors[start:end]
        self.invalidate(start, start)
