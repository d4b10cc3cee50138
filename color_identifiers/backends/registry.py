from __future__ import annotations

import hashlib
from typing import Dict, Iterable, Optional, Tuple

COLORING_METHODS = ("sequential", "hash")


def hash_slot(text: str, size: int) -> int:
    """Slot derived from the spelling alone; stable across runs."""
    digest = hashlib.md5(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % size


class RotatingCounter:
    """Monotonic counter handing out temporary slots between refreshes."""

    def __init__(self, start: int = 0):
        self.value = int(start)

    def next(self) -> int:
        self.value += 1
        return self.value

    def reset(self) -> None:
        self.value = 0


class IdentifierRegistry:
    """Spelling -> palette slot for one document.

    ``assign_full`` rebuilds the whole mapping from scan order; ``assign``
    adds a single spelling outside a refresh using the rotating counter.
    """

    def __init__(self, method: str = "sequential"):
        if method not in COLORING_METHODS:
            raise ValueError(f"unknown coloring method {method!r}; expected one of {COLORING_METHODS}")
        self.method = method
        self._slots: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, text: str) -> bool:
        return text in self._slots

    def slot_of(self, text: str) -> Optional[int]:
        return self._slots.get(text)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._slots)

    def clear(self) -> None:
        self._slots = {}

    def assign_full(self, spellings: Iterable[Tuple[str, int]], size: int) -> None:
        if size < 1:
            raise ValueError(f"palette size must be >= 1, got {size}")
        slots: Dict[str, int] = {}
        for text, _pos in spellings:
            if text in slots:
                continue
            if self.method == "hash":
                slots[text] = hash_slot(text, size)
            else:
                slots[text] = len(slots) % size
        # replaced wholesale, never built in place
        self._slots = slots

    def assign(self, text: str, size: int, counter: RotatingCounter) -> int:
        slot = self._slots.get(text)
        if slot is not None:
            return slot
        if size < 1:
            raise ValueError(f"palette size must be >= 1, got {size}")
        if self.method == "hash":
            slot = hash_slot(text, size)
        else:
            slot = counter.next() % size
        self._slots[text] = slot
        return slot
