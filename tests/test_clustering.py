"""Tests for keyword clustering and urgency recounts."""

from campusvoice.complaints.clustering import ClusterEngine, keyword_overlap
from campusvoice.complaints.models import (
    ClusterGroup,
    Complaint,
    Urgency,
    calculate_urgency,
)
from campusvoice.storage import MemoryStorage


def _add_members(storage, cluster_id, n, solved=False):
    members = []
    for i in range(n):
        c = Complaint(author_id="u1", author_name="u1", text=f"complaint {i}", cluster_id=cluster_id, solved=solved)
        storage.add_complaint(c)
        members.append(c)
    return members


# ── Urgency tiers ────────────────────────────────────────────────────


def test_calculate_urgency_thresholds():
    assert calculate_urgency(0) == Urgency.normal
    assert calculate_urgency(9) == Urgency.normal
    assert calculate_urgency(10) == Urgency.urgent
    assert calculate_urgency(24) == Urgency.urgent
    assert calculate_urgency(25) == Urgency.critical
    assert calculate_urgency(50) == Urgency.top_priority
    assert calculate_urgency(99) == Urgency.top_priority
    assert calculate_urgency(100) == Urgency.emergency
    assert calculate_urgency(10_000) == Urgency.emergency


def test_urgency_is_monotonic():
    levels = [calculate_urgency(c).level for c in range(0, 150)]
    assert levels == sorted(levels)


# ── Overlap ──────────────────────────────────────────────────────────


def test_keyword_overlap():
    assert keyword_overlap(["wifi", "library"], ["WIFI", "library"]) == 1.0
    assert keyword_overlap(["a"], ["b"]) == 0.0
    assert keyword_overlap([], ["a"]) == 0.0
    assert keyword_overlap(None, ["a"]) == 0.0
    assert keyword_overlap(["wifi", "library", "exams"], ["wifi", "exam", "connectivity"]) == 0.2


def test_overlap_boundary_is_inclusive():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    # 3 shared of 10 total -> exactly 0.30
    base = [f"k{i}" for i in range(10)]
    first = engine.get_or_create_cluster(base[:3] + ["a1", "a2", "a3", "a4", "a5", "a6", "a7"])
    second = engine.get_or_create_cluster(base[:3])
    assert keyword_overlap(base[:3], first.keywords) == 0.3
    assert second.id == first.id


def test_overlap_just_below_threshold_creates_cluster():
    storage = MemoryStorage()
    engine = ClusterEngine(storage, threshold=0.30)
    first = engine.get_or_create_cluster(["wifi", "library", "exams"])
    second = engine.get_or_create_cluster(["wifi", "exam", "connectivity"])
    assert second.id != first.id
    assert len(storage.list_clusters()) == 2


def test_empty_keywords_are_not_clustered():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    assert engine.get_or_create_cluster([]) is None
    assert engine.get_or_create_cluster(None) is None
    assert storage.list_clusters() == []


def test_new_cluster_starts_normal_with_one_member():
    engine = ClusterEngine(MemoryStorage())
    cluster = engine.get_or_create_cluster(["wifi", "library", "exams"])
    assert cluster.problem_count == 1
    assert cluster.urgency == Urgency.normal


def test_first_match_wins_over_best_match():
    storage = MemoryStorage()
    storage.add_cluster(ClusterGroup(keywords=["wifi", "hostel", "night"]))
    storage.add_cluster(ClusterGroup(keywords=["wifi", "hostel", "night", "slow"]))
    engine = ClusterEngine(storage)
    chosen = engine.get_or_create_cluster(["wifi", "hostel", "night", "slow"])
    assert chosen.keywords == ["wifi", "hostel", "night"]


def test_cluster_with_empty_keywords_never_matches():
    storage = MemoryStorage()
    storage.add_cluster(ClusterGroup(keywords=[]))
    engine = ClusterEngine(storage)
    created = engine.get_or_create_cluster(["wifi"])
    assert created.keywords == ["wifi"]
    assert len(storage.list_clusters()) == 2


# ── Recount ──────────────────────────────────────────────────────────


def test_update_cluster_count_fans_out():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    cluster = engine.get_or_create_cluster(["wifi"])
    members = _add_members(storage, cluster.id, 10)

    count, urgency = engine.update_cluster_count(cluster.id)

    assert (count, urgency) == (10, Urgency.urgent)
    stored = storage.get_cluster(cluster.id)
    assert stored.problem_count == 10
    assert stored.urgency == Urgency.urgent
    for m in members:
        c = storage.get_complaint(m.id)
        assert c.similar_complaints_count == 10
        assert c.urgency == Urgency.urgent


def test_solved_members_are_excluded_and_untouched():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    cluster = engine.get_or_create_cluster(["wifi"])
    _add_members(storage, cluster.id, 3)
    solved = _add_members(storage, cluster.id, 1, solved=True)[0]
    solved.similar_complaints_count = 42
    storage.save_complaint(solved)

    count, _ = engine.update_cluster_count(cluster.id)

    assert count == 3
    assert storage.get_complaint(solved.id).similar_complaints_count == 42


def test_recount_is_idempotent():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    cluster = engine.get_or_create_cluster(["wifi"])
    _add_members(storage, cluster.id, 26)

    first = engine.update_cluster_count(cluster.id)
    second = engine.update_cluster_count(cluster.id)

    assert first == second == (26, Urgency.critical)


def test_recount_of_missing_cluster_still_fans_out():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    members = _add_members(storage, "ghost", 2)
    assert engine.update_cluster_count("ghost") == (2, Urgency.normal)
    assert storage.get_complaint(members[0].id).similar_complaints_count == 2


def test_recalculate_urgencies_repairs_drift():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    a = engine.get_or_create_cluster(["wifi"])
    b = engine.get_or_create_cluster(["mess", "food"])
    _add_members(storage, a.id, 12)
    drifted = storage.get_cluster(b.id)
    drifted.problem_count = 77
    drifted.urgency = Urgency.top_priority
    storage.save_cluster(drifted)

    assert engine.recalculate_urgencies() == 2
    assert storage.get_cluster(a.id).urgency == Urgency.urgent
    assert storage.get_cluster(b.id).problem_count == 0
    assert storage.get_cluster(b.id).urgency == Urgency.normal


def test_prune_empty_clusters():
    storage = MemoryStorage()
    engine = ClusterEngine(storage)
    kept = engine.get_or_create_cluster(["wifi"])
    orphan = engine.get_or_create_cluster(["mess"])
    _add_members(storage, kept.id, 1, solved=True)

    assert engine.prune_empty_clusters() == [orphan.id]
    assert storage.get_cluster(orphan.id) is None
    assert storage.get_cluster(kept.id) is not None
