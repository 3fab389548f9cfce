from deliberate_thinking.core.model import (
    BacklogStory,
    ConsensusState,
    DiscussionPoint,
    SprintParticipant,
    SprintPlan,
)
from deliberate_thinking.core.report.generate_report import WAITING_BULLET, generate_report
from deliberate_thinking.core.session.state import AppliedChange, SessionState


def _story(sid, priority="High", status="Todo", title="Export"):
    return BacklogStory(id=sid, title=title, priority=priority, status=status)


def test_report_empty_change_has_no_bullets():
    state = SessionState()
    report = generate_report(state, AppliedChange())
    assert report.bullets == []
    assert report.pm_summary == "No new updates this call; 0 stories in the backlog."
    assert report.waiting_on_user is False
    assert report.active_sprint is None
    assert report.consensus == ConsensusState()


def test_report_bullet_order():
    state = SessionState()
    s1 = _story("S-1")
    state.backlog.upsert(s1)
    plan = SprintPlan(
        name="Sprint 1",
        goal="ship export",
        duration_days=10,
        participants=(
            SprintParticipant("PragmaticProgrammer", "owns exporter"),
            SprintParticipant("ProductVisionary"),
        ),
        committed_story_ids=("S-1", "S-9"),
    )
    state.sprint.set(plan)
    state.consensus.set(ConsensusState(ready_for_code_changes=False, blockers=("pricing", "legal")))
    point = DiscussionPoint("ProjectManager", "Scope is export only")

    change = AppliedChange(
        new_points=(point,),
        upserted=((s1, None),),
        sprint_set=True,
        consensus_set=True,
        unknown_committed_ids=("S-9",),
        waiting_on_user=True,
    )
    report = generate_report(state, change, "ProjectManager")

    assert report.bullets == [
        "[ProjectManager] Scope is export only",
        "Backlog: S-1 — Todo (High)",
        "Sprint: Sprint 1 — ship export (10 days)",
        "Sprint participant: [PragmaticProgrammer] owns exporter",
        "Sprint participant: [ProductVisionary]",
        "Sprint warning: S-9 is not in the backlog",
        "Consensus: blocked — pricing, legal",
        WAITING_BULLET,
    ]
    assert report.pm_summary == "Sprint focus: Sprint 1 aims to ship export over 10 days."
    assert report.waiting_on_user is True


def test_report_skips_unchanged_backlog_story():
    state = SessionState()
    before = _story("S-1", title="Export")
    after = _story("S-1", title="Export to CSV")
    state.backlog.upsert(after)

    report = generate_report(state, AppliedChange(upserted=((after, before),)))
    assert report.bullets == []


def test_report_backlog_focus_and_removal():
    state = SessionState()
    s2 = _story("S-2", priority="Low", status="InProgress")
    state.backlog.upsert(s2)
    change = AppliedChange(
        upserted=((s2, _story("S-2", priority="Low", status="Todo")),),
        removed=(_story("S-1"),),
    )
    report = generate_report(state, change)

    assert report.bullets == ["Backlog: S-2 — InProgress (Low)", "Backlog: S-1 — removed"]
    assert report.pm_summary == "Backlog focus: 2 story updates (S-2, S-1) with 1 story now in the backlog."
    assert list(report.backlog_snapshot) == ["S-2"]


def test_report_discussion_focus():
    state = SessionState()
    points = (
        DiscussionPoint("ProductVisionary", "Delight users"),
        DiscussionPoint("PragmaticProgrammer", "Keep it small"),
        DiscussionPoint("ProductVisionary", "Dark mode"),
    )
    report = generate_report(state, AppliedChange(new_points=points))
    assert report.pm_summary == "Discussion focus: 3 points raised by ProductVisionary, PragmaticProgrammer."
    assert report.bullets[0] == "[ProductVisionary] Delight users"


def test_report_consensus_ready():
    state = SessionState()
    state.consensus.set(ConsensusState(ready_for_code_changes=True))
    report = generate_report(state, AppliedChange(consensus_set=True))
    assert report.bullets == ["Consensus: ready"]


def test_report_to_dict_shape():
    state = SessionState()
    state.backlog.upsert(_story("S-1"))
    state.pm_summaries.append("Export first")
    d = generate_report(state, AppliedChange()).to_dict()

    assert set(d) == {
        "bullets",
        "pmSummary",
        "newDiscussionPoints",
        "backlogSnapshot",
        "activeSprint",
        "consensus",
        "waitingOnUser",
        "lastPmSummary",
    }
    assert d["backlogSnapshot"]["S-1"] == {
        "id": "S-1",
        "title": "Export",
        "priority": "High",
        "status": "Todo",
    }
    assert d["consensus"] == {"readyForCodeChanges": False, "blockers": [], "notes": None}
    assert d["lastPmSummary"] == "Export first"


def test_report_does_not_mutate_state():
    state = SessionState()
    state.backlog.upsert(_story("S-1"))
    before = (state.backlog.snapshot(), state.discussion.all(), state.sprint.current(), state.consensus.current())
    generate_report(state, AppliedChange(upserted=((_story("S-1"), None),), consensus_set=True))
    after = (state.backlog.snapshot(), state.discussion.all(), state.sprint.current(), state.consensus.current())
    assert before == after
