from __future__ import annotations

import threading
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Literal, Optional

from deliberate_thinking.core.errors import SessionError
from deliberate_thinking.core.log import get_logger
from deliberate_thinking.core.model import CallDelta, DiscussionPoint
from deliberate_thinking.core.report.generate_report import PmReport, generate_report
from deliberate_thinking.core.session.state import AppliedChange, SessionState
from deliberate_thinking.core.validate.validate_call import validate_call


logger = get_logger(__name__)

EnginePhase = Literal["Idle", "Validating", "Applying", "Reporting"]


@dataclass(frozen=True)
class ThinkingResponse:
    thought_number: Optional[int]
    total_thoughts: int
    next_thought_needed: bool
    needs_more_thoughts: Optional[bool]
    branches: list[str]
    thought_history_length: int
    pm_report: PmReport

    def to_dict(self) -> dict[str, Any]:
        return {
            "thoughtNumber": self.thought_number,
            "totalThoughts": self.total_thoughts,
            "nextThoughtNeeded": self.next_thought_needed,
            "needsMoreThoughts": self.needs_more_thoughts,
            "branches": list(self.branches),
            "thoughtHistoryLength": self.thought_history_length,
            "pmReport": self.pm_report.to_dict(),
        }


class SessionEngine:
    """Folds tool calls into one session's state and reports on each.

    One lock covers validate -> apply -> report, so concurrent callers see a
    serial order of whole calls. A call is applied to a copy of the state and
    swapped in at the end, so a rejected or interrupted call leaves nothing behind.
    """

    def __init__(self, state: Optional[SessionState] = None) -> None:
        self._state = state or SessionState()
        self._lock = threading.Lock()
        self._phase: EnginePhase = "Idle"

    @property
    def phase(self) -> EnginePhase:
        return self._phase

    @property
    def state(self) -> SessionState:
        return self._state

    def process(self, payload: Any) -> ThinkingResponse:
        with self._lock:
            try:
                self._phase = "Validating"
                delta, errors = validate_call(payload)
                if errors or delta is None:
                    raise errors[0]
                self._state.ledger.check(delta.thought.revision_of, delta.thought.branch_from)

                # Writes go to a staged copy; the session only sees it once the report is built.
                self._phase = "Applying"
                staged = deepcopy(self._state)
                number, change = _apply(staged, delta)

                self._phase = "Reporting"
                report = generate_report(staged, change, delta.role)
                response = _respond(staged, delta, number, report)
                self._state = staged
            except SessionError as e:
                logger.warning("Call rejected", code=e.code, path=e.path, error=e.message)
                raise
            finally:
                self._phase = "Idle"

        _log_call(delta, number)
        return response

    def handle(self, payload: Any) -> dict[str, Any]:
        """Transport-facing wrapper: a response dict, or ``{"error": {...}}`` for a rejected call."""
        try:
            return self.process(payload).to_dict()
        except SessionError as e:
            return {"error": e.to_dict()}


def _apply(state: SessionState, delta: CallDelta) -> tuple[Optional[int], AppliedChange]:
    thought = delta.thought

    number: Optional[int] = None
    if not thought.is_empty:
        number = state.ledger.append(
            thought.content,
            revision_of=thought.revision_of,
            branch_from=thought.branch_from,
            branch_label=thought.branch_label,
            role=delta.role,
        )

    points = list(delta.discussion_points)
    pm_summary: Optional[str] = None
    if delta.role == "ProjectManager":
        pm_summary = thought.content.strip()
        state.pm_summaries.append(pm_summary)
    elif delta.role is not None and not points and not thought.is_empty:
        # A role's thought with no explicit points counts as that role's point.
        points.append(DiscussionPoint(role=delta.role, detail=thought.content.strip()))
    new_points = state.discussion.append_many(points)

    upserted = tuple((story, state.backlog.upsert(story)) for story in delta.backlog_upserts)
    removed = tuple(
        r for r in (state.backlog.remove(sid) for sid in delta.remove_story_ids) if r is not None
    )

    unknown: tuple[str, ...] = ()
    if delta.sprint_plan is not None:
        state.sprint.set(delta.sprint_plan)
        unknown = tuple(sid for sid in delta.sprint_plan.committed_story_ids if sid not in state.backlog)

    if delta.consensus is not None:
        state.consensus.set(delta.consensus)

    state.waiting_on_user = delta.waiting_on_user

    return number, AppliedChange(
        new_points=new_points,
        upserted=upserted,
        removed=removed,
        sprint_set=delta.sprint_plan is not None,
        consensus_set=delta.consensus is not None,
        unknown_committed_ids=unknown,
        waiting_on_user=delta.waiting_on_user,
        pm_summary=pm_summary,
    )


def _respond(
    state: SessionState, delta: CallDelta, number: Optional[int], report: PmReport
) -> ThinkingResponse:
    ledger = state.ledger
    total = max(delta.thought.total_thoughts or len(ledger), number or 0, 1)
    return ThinkingResponse(
        thought_number=number,
        total_thoughts=total,
        next_thought_needed=delta.thought.next_thought_needed,
        needs_more_thoughts=delta.thought.needs_more_thoughts,
        branches=ledger.branches(),
        thought_history_length=len(ledger),
        pm_report=report,
    )


def _log_call(delta: CallDelta, number: Optional[int]) -> None:
    logger.info(
        "Deliberate thinking step",
        thought_number=number,
        requested_number=delta.thought.thought_number,
        role=delta.role,
        branch=delta.thought.branch_label,
        revises=delta.thought.revision_of,
        discussion_points=len(delta.discussion_points),
        backlog_upserts=len(delta.backlog_upserts),
        backlog_removals=len(delta.remove_story_ids),
        sprint_plan=delta.sprint_plan is not None,
        consensus_ready=delta.consensus.ready_for_code_changes if delta.consensus else None,
        waiting_on_user=delta.waiting_on_user,
    )
