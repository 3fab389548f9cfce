from __future__ import annotations

from typing import Optional

from deliberate_thinking.core.model import BacklogStory


class BacklogStore:
    """Stories keyed by id.

    Snapshot order is insertion order; re-upserting an id keeps its original slot.
    """

    def __init__(self) -> None:
        self._stories: dict[str, BacklogStory] = {}

    def __len__(self) -> int:
        return len(self._stories)

    def __contains__(self, story_id: object) -> bool:
        return story_id in self._stories

    def upsert(self, story: BacklogStory) -> Optional[BacklogStory]:
        previous = self._stories.get(story.id)
        self._stories[story.id] = story
        return previous

    def remove(self, story_id: str) -> Optional[BacklogStory]:
        return self._stories.pop(story_id, None)

    def get(self, story_id: str) -> Optional[BacklogStory]:
        return self._stories.get(story_id)

    def snapshot(self) -> dict[str, BacklogStory]:
        return dict(self._stories)
