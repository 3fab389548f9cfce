from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from deliberate_thinking.core.ledger.thought_ledger import ThoughtLedger
from deliberate_thinking.core.model import BacklogStory, DiscussionPoint
from deliberate_thinking.core.stores.backlog import BacklogStore
from deliberate_thinking.core.stores.discussion import DiscussionLog
from deliberate_thinking.core.stores.trackers import ConsensusTracker, SprintTracker


@dataclass
class SessionState:
    """Everything one session remembers. Owned by a single SessionEngine."""

    ledger: ThoughtLedger = field(default_factory=ThoughtLedger)
    discussion: DiscussionLog = field(default_factory=DiscussionLog)
    backlog: BacklogStore = field(default_factory=BacklogStore)
    sprint: SprintTracker = field(default_factory=SprintTracker)
    consensus: ConsensusTracker = field(default_factory=ConsensusTracker)
    waiting_on_user: bool = False
    pm_summaries: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AppliedChange:
    """What a single call did to the stores; input to the report."""

    new_points: tuple[DiscussionPoint, ...] = ()
    # (story as stored now, story before this call or None)
    upserted: tuple[tuple[BacklogStory, Optional[BacklogStory]], ...] = ()
    removed: tuple[BacklogStory, ...] = ()
    sprint_set: bool = False
    consensus_set: bool = False
    unknown_committed_ids: tuple[str, ...] = ()
    waiting_on_user: bool = False
    pm_summary: Optional[str] = None
