from __future__ import annotations

from typing import Any, Iterable, Optional, cast

from deliberate_thinking.core.errors import ValidationError
from deliberate_thinking.core.model import (
    ALLOWED_PRIORITIES,
    ALLOWED_ROLES,
    ALLOWED_STATUSES,
    BacklogStory,
    CallDelta,
    ConsensusState,
    DiscussionPoint,
    Priority,
    Role,
    SprintParticipant,
    SprintPlan,
    StoryStatus,
    ThoughtRequest,
)


_MISSING = object()


def _get(raw: dict[str, Any], *keys: str) -> Any:
    """First present key wins; nested objects accept snake_case and camelCase names."""
    for k in keys:
        if k in raw:
            return raw[k]
    return _MISSING


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and bool(v.strip())


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_list_of_str(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def parse_enum(value: Any, allowed: tuple[str, ...]) -> Optional[str]:
    """Return the canonical variant for ``value`` or None.

    Accepts the PascalCase name and its camelCase spelling (``InProgress`` / ``inProgress``).
    Nothing else is coerced.
    """
    if not isinstance(value, str):
        return None
    for name in allowed:
        if value == name or value == name[0].lower() + name[1:]:
            return name
    return None


def validate_call(payload: Any) -> tuple[Optional[CallDelta], list[ValidationError]]:
    """Validate one tool call payload.

    Returns (delta, errors). Delta is None when errors exist. No side effects.
    """

    errors: list[ValidationError] = []

    if not isinstance(payload, dict):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="call payload must be an object",
                path=None,
            )
        )
        return None, errors

    thought = _validate_thought(payload, errors)

    role: Optional[Role] = None
    raw_role = payload.get("role")
    if raw_role is not None:
        role = cast(Optional[Role], _enum_or_error(raw_role, ALLOWED_ROLES, "role", errors))
        if role == "ProjectManager" and thought is not None and thought.is_empty:
            errors.append(
                ValidationError(
                    code="E_REQUIRED_FIELD",
                    message="project manager updates must include a summary thought",
                    path="thought",
                )
            )

    points = _validate_discussion_points(payload.get("discussionPoints"), errors)
    stories = _validate_backlog_stories(payload.get("backlogStories"), errors)
    remove_ids = _validate_remove_ids(payload.get("removeStoryIds"), errors)

    plan: Optional[SprintPlan] = None
    if payload.get("sprintPlan") is not None:
        plan = _validate_sprint_plan(payload["sprintPlan"], errors)

    consensus: Optional[ConsensusState] = None
    if payload.get("consensusUpdate") is not None:
        consensus = _validate_consensus(payload["consensusUpdate"], errors)

    waiting = payload.get("requiresUserInput")
    if waiting is not None and not isinstance(waiting, bool):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="requiresUserInput must be a boolean",
                path="requiresUserInput",
            )
        )

    if errors or thought is None:
        return None, _sorted(errors)

    delta = CallDelta(
        thought=thought,
        role=role,
        discussion_points=points,
        backlog_upserts=stories,
        remove_story_ids=remove_ids,
        sprint_plan=plan,
        consensus=consensus,
        waiting_on_user=bool(waiting),
    )
    return delta, []


def _validate_thought(payload: dict[str, Any], errors: list[ValidationError]) -> Optional[ThoughtRequest]:
    content = payload.get("thought")
    if not isinstance(content, str):
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="thought is required and must be a string",
                path="thought",
            )
        )
        return None

    ints: dict[str, Optional[int]] = {}
    for key in ("thoughtNumber", "totalThoughts", "revisesThought", "branchFromThought"):
        v = payload.get(key)
        if v is None:
            ints[key] = None
            continue
        if not _is_int(v) or v < 1:
            errors.append(
                ValidationError(
                    code="E_INVALID_VALUE",
                    message=f"{key} must be an integer >= 1",
                    path=key,
                )
            )
            ints[key] = None
            continue
        ints[key] = v

    flags: dict[str, Optional[bool]] = {}
    for key in ("nextThoughtNeeded", "needsMoreThoughts", "isRevision"):
        v = payload.get(key)
        if v is not None and not isinstance(v, bool):
            errors.append(
                ValidationError(
                    code="E_INVALID_TYPE",
                    message=f"{key} must be a boolean",
                    path=key,
                )
            )
            v = None
        flags[key] = v

    branch_label = payload.get("branchId")
    if branch_label is not None and not _is_non_empty_str(branch_label):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="branchId must be a non-empty string",
                path="branchId",
            )
        )
        branch_label = None

    if payload.get("branchFromThought") is not None and payload.get("branchId") is None:
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="branchId is required when branchFromThought is set",
                path="branchId",
            )
        )
    if payload.get("branchId") is not None and payload.get("branchFromThought") is None:
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="branchFromThought is required when branchId is set",
                path="branchFromThought",
            )
        )
    if flags["isRevision"] and payload.get("revisesThought") is None:
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="revisesThought is required when isRevision is true",
                path="revisesThought",
            )
        )

    has_reference = payload.get("revisesThought") is not None or payload.get("branchFromThought") is not None
    if has_reference and not content.strip():
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="a revision or branch must carry a non-empty thought",
                path="thought",
            )
        )

    return ThoughtRequest(
        content=content,
        thought_number=ints["thoughtNumber"],
        total_thoughts=ints["totalThoughts"],
        next_thought_needed=bool(flags["nextThoughtNeeded"]),
        needs_more_thoughts=flags["needsMoreThoughts"],
        revision_of=ints["revisesThought"],
        branch_from=ints["branchFromThought"],
        branch_label=branch_label,
    )


def _validate_discussion_points(raw: Any, errors: list[ValidationError]) -> list[DiscussionPoint]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="discussionPoints must be an array",
                path="discussionPoints",
            )
        )
        return []

    points: list[DiscussionPoint] = []
    for i, item in enumerate(raw):
        item_path = f"discussionPoints[{i}]"
        if not isinstance(item, dict):
            errors.append(
                ValidationError(
                    code="E_INVALID_TYPE",
                    message="discussion point must be an object",
                    path=item_path,
                )
            )
            continue
        role = _enum_or_error(item.get("role"), ALLOWED_ROLES, f"{item_path}.role", errors)
        detail = item.get("detail")
        if not _is_non_empty_str(detail):
            errors.append(
                ValidationError(
                    code="E_REQUIRED_FIELD",
                    message="detail is required and must be a non-empty string",
                    path=f"{item_path}.detail",
                )
            )
            continue
        if role is None:
            continue
        points.append(DiscussionPoint(role=cast(Role, role), detail=detail))
    return points


def _validate_backlog_stories(raw: Any, errors: list[ValidationError]) -> list[BacklogStory]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="backlogStories must be an array",
                path="backlogStories",
            )
        )
        return []

    # Duplicate ids within one call: last write wins, first position kept.
    by_id: dict[str, BacklogStory] = {}
    for i, item in enumerate(raw):
        item_path = f"backlogStories[{i}]"
        if not isinstance(item, dict):
            errors.append(
                ValidationError(
                    code="E_INVALID_TYPE",
                    message="backlog story must be an object",
                    path=item_path,
                )
            )
            continue

        sid = item.get("id")
        if not _is_non_empty_str(sid):
            errors.append(
                ValidationError(
                    code="E_REQUIRED_FIELD",
                    message="id is required and must be a non-empty string",
                    path=f"{item_path}.id",
                )
            )
            continue

        title = item.get("title")
        if not _is_non_empty_str(title):
            errors.append(
                ValidationError(
                    code="E_REQUIRED_FIELD",
                    message="title is required and must be a non-empty string",
                    path=f"{item_path}.title",
                )
            )
            continue

        priority = _enum_or_error(item.get("priority"), ALLOWED_PRIORITIES, f"{item_path}.priority", errors)
        status = _enum_or_error(item.get("status"), ALLOWED_STATUSES, f"{item_path}.status", errors)

        owner = None
        if item.get("owner") is not None:
            owner = _enum_or_error(item["owner"], ALLOWED_ROLES, f"{item_path}.owner", errors)
            if owner is None:
                continue

        notes = item.get("notes")
        if notes is not None and not isinstance(notes, str):
            errors.append(
                ValidationError(
                    code="E_INVALID_TYPE",
                    message="notes must be a string",
                    path=f"{item_path}.notes",
                )
            )
            continue

        if priority is None or status is None:
            continue

        by_id[sid] = BacklogStory(
            id=sid,
            title=title,
            priority=cast(Priority, priority),
            status=cast(StoryStatus, status),
            owner=cast(Optional[Role], owner),
            notes=notes,
        )
    return list(by_id.values())


def _validate_remove_ids(raw: Any, errors: list[ValidationError]) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="removeStoryIds must be an array of strings",
                path="removeStoryIds",
            )
        )
        return []

    ids: list[str] = []
    for i, sid in enumerate(raw):
        if not _is_non_empty_str(sid):
            errors.append(
                ValidationError(
                    code="E_REQUIRED_FIELD",
                    message="story id must be a non-empty string",
                    path=f"removeStoryIds[{i}]",
                )
            )
            continue
        ids.append(sid)
    return ids


def _validate_sprint_plan(raw: Any, errors: list[ValidationError]) -> Optional[SprintPlan]:
    if not isinstance(raw, dict):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="sprintPlan must be an object",
                path="sprintPlan",
            )
        )
        return None

    start = len(errors)

    name = _get(raw, "sprint_name", "sprintName")
    if not _is_non_empty_str(name):
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="sprint_name is required and must be a non-empty string",
                path="sprintPlan.sprint_name",
            )
        )

    goal = raw.get("goal")
    if not _is_non_empty_str(goal):
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="goal is required and must be a non-empty string",
                path="sprintPlan.goal",
            )
        )

    duration = _get(raw, "duration_days", "durationDays")
    if duration is _MISSING or duration is None:
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="duration_days is required",
                path="sprintPlan.duration_days",
            )
        )
    elif not _is_int(duration) or duration < 1:
        errors.append(
            ValidationError(
                code="E_INVALID_VALUE",
                message="duration_days must be a positive integer",
                path="sprintPlan.duration_days",
            )
        )

    participants: list[SprintParticipant] = []
    raw_participants = _get(raw, "participants")
    if raw_participants is _MISSING or raw_participants is None:
        raw_participants = []
    if not isinstance(raw_participants, list):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="participants must be an array",
                path="sprintPlan.participants",
            )
        )
        raw_participants = []

    for i, p in enumerate(raw_participants):
        p_path = f"sprintPlan.participants[{i}]"
        if not isinstance(p, dict):
            errors.append(
                ValidationError(
                    code="E_INVALID_TYPE",
                    message="participant must be an object",
                    path=p_path,
                )
            )
            continue
        role = _enum_or_error(p.get("role"), ALLOWED_ROLES, f"{p_path}.role", errors)
        reasoning = p.get("reasoning")
        if reasoning is not None and not isinstance(reasoning, str):
            errors.append(
                ValidationError(
                    code="E_INVALID_TYPE",
                    message="reasoning must be a string",
                    path=f"{p_path}.reasoning",
                )
            )
            continue
        responsibilities = p.get("responsibilities") or []
        if not _is_list_of_str(responsibilities):
            errors.append(
                ValidationError(
                    code="E_INVALID_TYPE",
                    message="responsibilities must be an array of strings",
                    path=f"{p_path}.responsibilities",
                )
            )
            continue
        if role is None:
            continue
        participants.append(
            SprintParticipant(
                role=cast(Role, role),
                reasoning=reasoning,
                responsibilities=tuple(responsibilities),
            )
        )

    committed = _get(raw, "committed_story_ids", "committedStoryIds")
    if committed is _MISSING or committed is None:
        committed = []
    if not _is_list_of_str(committed):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="committed_story_ids must be an array of strings",
                path="sprintPlan.committed_story_ids",
            )
        )
        committed = []

    risks = raw.get("risks") or []
    if not _is_list_of_str(risks):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="risks must be an array of strings",
                path="sprintPlan.risks",
            )
        )
        risks = []

    if len(errors) > start:
        return None

    return SprintPlan(
        name=cast(str, name),
        goal=cast(str, goal),
        duration_days=cast(int, duration),
        participants=tuple(participants),
        committed_story_ids=tuple(dict.fromkeys(committed)),
        risks=tuple(risks),
    )


def _validate_consensus(raw: Any, errors: list[ValidationError]) -> Optional[ConsensusState]:
    if not isinstance(raw, dict):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="consensusUpdate must be an object",
                path="consensusUpdate",
            )
        )
        return None

    start = len(errors)

    ready = _get(raw, "ready_for_code_changes", "readyForCodeChanges")
    if not isinstance(ready, bool):
        errors.append(
            ValidationError(
                code="E_REQUIRED_FIELD",
                message="ready_for_code_changes is required and must be a boolean",
                path="consensusUpdate.ready_for_code_changes",
            )
        )

    blockers = raw.get("blockers") or []
    if not _is_list_of_str(blockers):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="blockers must be an array of strings",
                path="consensusUpdate.blockers",
            )
        )

    notes = raw.get("notes")
    if notes is not None and not isinstance(notes, str):
        errors.append(
            ValidationError(
                code="E_INVALID_TYPE",
                message="notes must be a string",
                path="consensusUpdate.notes",
            )
        )

    if len(errors) > start:
        return None

    return ConsensusState(
        ready_for_code_changes=cast(bool, ready),
        blockers=tuple(blockers),
        notes=notes,
    )


def _enum_or_error(
    value: Any, allowed: tuple[str, ...], path: str, errors: list[ValidationError]
) -> Optional[str]:
    parsed = parse_enum(value, allowed)
    if parsed is None:
        errors.append(
            ValidationError(
                code="E_INVALID_ENUM",
                message=f"{path.rsplit('.', 1)[-1]} must be one of {list(allowed)}",
                path=path,
            )
        )
    return parsed


def _sorted(errors: Iterable[ValidationError]) -> list[ValidationError]:
    return sorted(list(errors), key=lambda e: (e.path or "", e.code))
