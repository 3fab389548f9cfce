from deliberate_thinking.core.model import (
    BacklogStory,
    ConsensusState,
    DiscussionPoint,
    SprintParticipant,
    SprintPlan,
)
from deliberate_thinking.core.stores.backlog import BacklogStore
from deliberate_thinking.core.stores.discussion import DiscussionLog
from deliberate_thinking.core.stores.trackers import ConsensusTracker, SprintTracker


def _story(sid, title="t", priority="Medium", status="Todo"):
    return BacklogStory(id=sid, title=title, priority=priority, status=status)


def test_backlog_upsert_replaces_by_id():
    store = BacklogStore()
    assert store.upsert(_story("S-1", title="Export")) is None
    previous = store.upsert(_story("S-1", title="Export CSV", priority="High", status="InProgress"))

    assert previous.title == "Export"
    assert len(store) == 1
    assert store.get("S-1") == _story("S-1", title="Export CSV", priority="High", status="InProgress")


def test_backlog_remove_missing_is_noop():
    store = BacklogStore()
    store.upsert(_story("S-1"))
    before = store.snapshot()

    assert store.remove("S-404") is None
    assert store.snapshot() == before

    assert store.remove("S-1") == _story("S-1")
    assert "S-1" not in store
    assert store.remove("S-1") is None


def test_backlog_snapshot_order_is_stable():
    store = BacklogStore()
    for sid in ("S-3", "S-1", "S-2"):
        store.upsert(_story(sid))
    store.upsert(_story("S-3", status="Done"))

    assert list(store.snapshot()) == ["S-3", "S-1", "S-2"]
    assert list(store.snapshot()) == list(store.snapshot())

    snap = store.snapshot()
    store.upsert(_story("S-9"))
    assert "S-9" not in snap


def test_discussion_log_keeps_append_order():
    log = DiscussionLog()
    first = log.append_many([DiscussionPoint("ProjectManager", "scope"), DiscussionPoint("ProductVisionary", "ux")])
    second = log.append_many([DiscussionPoint("PragmaticProgrammer", "effort")])

    assert [p.detail for p in first] == ["scope", "ux"]
    assert [p.detail for p in second] == ["effort"]
    assert [p.detail for p in log.all()] == ["scope", "ux", "effort"]
    assert log.last().role == "PragmaticProgrammer"


def test_sprint_tracker_replaces_wholesale():
    tracker = SprintTracker()
    first = SprintPlan(
        name="Sprint 1",
        goal="export",
        duration_days=10,
        participants=(SprintParticipant("PragmaticProgrammer", "owns exporter"),),
        committed_story_ids=("S-1",),
    )
    second = SprintPlan(name="Sprint 2", goal="import", duration_days=5)

    assert tracker.current() is None
    assert tracker.set(first) is None
    assert tracker.set(second) == first
    assert tracker.current() == second
    assert tracker.current().participants == ()
    assert tracker.current().committed_story_ids == ()


def test_consensus_tracker_initial_and_replace():
    tracker = ConsensusTracker()
    assert tracker.current() == ConsensusState(ready_for_code_changes=False, blockers=(), notes=None)

    blocked = ConsensusState(ready_for_code_changes=False, blockers=("pricing",))
    tracker.set(blocked)
    previous = tracker.set(ConsensusState(ready_for_code_changes=True))

    assert previous == blocked
    assert tracker.current().ready_for_code_changes is True
    assert tracker.current().blockers == ()
