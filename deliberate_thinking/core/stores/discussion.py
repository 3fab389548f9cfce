from __future__ import annotations

from typing import Iterable, Optional

from deliberate_thinking.core.model import DiscussionPoint


class DiscussionLog:
    def __init__(self) -> None:
        self._points: list[DiscussionPoint] = []

    def __len__(self) -> int:
        return len(self._points)

    def append_many(self, points: Iterable[DiscussionPoint]) -> tuple[DiscussionPoint, ...]:
        added = tuple(points)
        self._points.extend(added)
        return added

    def all(self) -> tuple[DiscussionPoint, ...]:
        return tuple(self._points)

    def last(self) -> Optional[DiscussionPoint]:
        return self._points[-1] if self._points else None
