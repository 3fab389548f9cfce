from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from deliberate_thinking.core.model import (
    BacklogStory,
    ConsensusState,
    DiscussionPoint,
    Role,
    SprintPlan,
)
from deliberate_thinking.core.session.state import AppliedChange, SessionState


WAITING_BULLET = "Waiting on user: the team needs guidance before proceeding"


@dataclass(frozen=True)
class PmReport:
    bullets: list[str]
    pm_summary: str
    new_discussion_points: list[DiscussionPoint]
    backlog_snapshot: dict[str, BacklogStory]
    active_sprint: Optional[SprintPlan]
    consensus: ConsensusState
    waiting_on_user: bool
    last_pm_summary: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "bullets": list(self.bullets),
            "pmSummary": self.pm_summary,
            "newDiscussionPoints": [p.to_dict() for p in self.new_discussion_points],
            "backlogSnapshot": {k: s.to_dict() for k, s in self.backlog_snapshot.items()},
            "activeSprint": self.active_sprint.to_dict() if self.active_sprint else None,
            "consensus": self.consensus.to_dict(),
            "waitingOnUser": self.waiting_on_user,
            "lastPmSummary": self.last_pm_summary,
        }


def generate_report(state: SessionState, change: AppliedChange, role: Optional[Role] = None) -> PmReport:
    """Build the PM report for the call that produced ``change``.

    Pure: reads ``state`` after the delta was applied and never writes to it.
    Bullet order is fixed (discussion, backlog, sprint, consensus, waiting) so
    repeated runs over the same calls produce identical reports.
    """

    bullets: list[str] = []

    for point in change.new_points:
        bullets.append(f"[{point.role}] {point.detail}")

    backlog_ids: list[str] = []
    for story, previous in change.upserted:
        if previous is not None and (previous.status, previous.priority) == (story.status, story.priority):
            continue
        backlog_ids.append(story.id)
        bullets.append(f"Backlog: {story.id} — {story.status} ({story.priority})")
    for story in change.removed:
        backlog_ids.append(story.id)
        bullets.append(f"Backlog: {story.id} — removed")

    plan = state.sprint.current()
    if change.sprint_set and plan is not None:
        bullets.append(f"Sprint: {plan.name} — {plan.goal} ({_plural(plan.duration_days, 'day')})")
        for participant in plan.participants:
            line = f"Sprint participant: [{participant.role}]"
            if participant.reasoning and participant.reasoning.strip():
                line += f" {participant.reasoning.strip()}"
            if participant.responsibilities:
                line += f" - {', '.join(participant.responsibilities)}"
            bullets.append(line)
        for sid in change.unknown_committed_ids:
            bullets.append(f"Sprint warning: {sid} is not in the backlog")

    consensus = state.consensus.current()
    if change.consensus_set:
        bullets.append(_consensus_bullet(consensus))

    if change.waiting_on_user:
        bullets.append(WAITING_BULLET)

    return PmReport(
        bullets=bullets,
        pm_summary=_narrative(state, change, plan, backlog_ids, role),
        new_discussion_points=list(change.new_points),
        backlog_snapshot=state.backlog.snapshot(),
        active_sprint=plan,
        consensus=consensus,
        waiting_on_user=change.waiting_on_user,
        last_pm_summary=state.pm_summaries[-1] if state.pm_summaries else None,
    )


def _consensus_bullet(consensus: ConsensusState) -> str:
    if consensus.ready_for_code_changes:
        return "Consensus: ready"
    if not consensus.blockers:
        return "Consensus: blocked"
    return "Consensus: blocked — " + ", ".join(consensus.blockers)


def _narrative(
    state: SessionState,
    change: AppliedChange,
    plan: Optional[SprintPlan],
    backlog_ids: list[str],
    role: Optional[Role],
) -> str:
    if change.sprint_set and plan is not None:
        goal = plan.goal.strip().rstrip(".")
        return f"Sprint focus: {plan.name} aims to {goal} over {_plural(plan.duration_days, 'day')}."

    if backlog_ids:
        return (
            f"Backlog focus: {_plural(len(backlog_ids), 'story update')} ({', '.join(backlog_ids)})"
            f" with {_plural(len(state.backlog), 'story', 'stories')} now in the backlog."
        )

    if change.new_points:
        roles = list(dict.fromkeys(p.role for p in change.new_points))
        return f"Discussion focus: {_plural(len(change.new_points), 'point')} raised by {', '.join(roles)}."

    who = f" from {role}" if role else ""
    return (
        f"No new updates{who} this call;"
        f" {_plural(len(state.backlog), 'story', 'stories')} in the backlog."
    )


def _plural(n: int, singular: str, plural: Optional[str] = None) -> str:
    if n == 1:
        return f"{n} {singular}"
    return f"{n} {plural or singular + 's'}"
