from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


Role = Literal["ProjectManager", "PragmaticProgrammer", "ProductVisionary"]
Priority = Literal["High", "Medium", "Low"]
StoryStatus = Literal["Todo", "InProgress", "Blocked", "Done"]

ALLOWED_ROLES: tuple[str, ...] = ("ProjectManager", "PragmaticProgrammer", "ProductVisionary")
ALLOWED_PRIORITIES: tuple[str, ...] = ("High", "Medium", "Low")
ALLOWED_STATUSES: tuple[str, ...] = ("Todo", "InProgress", "Blocked", "Done")


@dataclass(frozen=True)
class Thought:
    number: int
    content: str
    revision_of: Optional[int] = None
    branch_from: Optional[int] = None
    branch_label: Optional[str] = None
    role: Optional[Role] = None


@dataclass(frozen=True)
class DiscussionPoint:
    role: Role
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "detail": self.detail}


@dataclass(frozen=True)
class BacklogStory:
    id: str
    title: str
    priority: Priority
    status: StoryStatus

    owner: Optional[Role] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "priority": self.priority,
            "status": self.status,
        }
        if self.owner is not None:
            out["owner"] = self.owner
        if self.notes is not None:
            out["notes"] = self.notes
        return out


@dataclass(frozen=True)
class SprintParticipant:
    role: Role
    reasoning: Optional[str] = None
    responsibilities: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "reasoning": self.reasoning,
            "responsibilities": list(self.responsibilities),
        }


@dataclass(frozen=True)
class SprintPlan:
    name: str
    goal: str
    duration_days: int
    participants: tuple[SprintParticipant, ...] = ()
    committed_story_ids: tuple[str, ...] = ()
    risks: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "sprintName": self.name,
            "goal": self.goal,
            "durationDays": self.duration_days,
            "participants": [p.to_dict() for p in self.participants],
            "committedStoryIds": list(self.committed_story_ids),
            "risks": list(self.risks),
        }


@dataclass(frozen=True)
class ConsensusState:
    ready_for_code_changes: bool = False
    blockers: tuple[str, ...] = ()
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "readyForCodeChanges": self.ready_for_code_changes,
            "blockers": list(self.blockers),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ThoughtRequest:
    """Thought half of a call. Numbers here are caller hints; the ledger assigns the real one."""

    content: str
    thought_number: Optional[int] = None
    total_thoughts: Optional[int] = None
    next_thought_needed: bool = False
    needs_more_thoughts: Optional[bool] = None
    revision_of: Optional[int] = None
    branch_from: Optional[int] = None
    branch_label: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()


@dataclass(frozen=True)
class CallDelta:
    thought: ThoughtRequest
    role: Optional[Role] = None
    discussion_points: list[DiscussionPoint] = field(default_factory=list)
    backlog_upserts: list[BacklogStory] = field(default_factory=list)
    remove_story_ids: list[str] = field(default_factory=list)
    sprint_plan: Optional[SprintPlan] = None
    consensus: Optional[ConsensusState] = None
    waiting_on_user: bool = False
