"""Tests for the in-memory and JSON-file storage backends."""

import json
import tempfile
from datetime import timedelta
from pathlib import Path

from campusvoice.auth.models import Role, Session, User
from campusvoice.complaints.models import AbuseLog, ClusterGroup, Complaint, Urgency, Vote, utcnow
from campusvoice.config import Settings
from campusvoice.notes.models import ItemType, PaymentStatus, Purchase
from campusvoice.storage import JsonFileStorage, MemoryStorage, create_storage


def _complaint(**overrides):
    data = {"author_id": "u1", "author_name": "alice", "text": "Library wifi disconnects"}
    data.update(overrides)
    return Complaint(**data)


# ── Memory storage ───────────────────────────────────────────────────


def test_records_are_copied_in_and_out():
    storage = MemoryStorage()
    c = _complaint()
    storage.add_complaint(c)

    c.text = "changed locally"
    fetched = storage.get_complaint(c.id)
    assert fetched.text == "Library wifi disconnects"

    fetched.likes_count = 5
    assert storage.get_complaint(c.id).likes_count == 0


def test_list_complaints_filters_and_orders_newest_first():
    storage = MemoryStorage()
    now = utcnow()
    old = _complaint(cluster_id="k1", created_at=now - timedelta(hours=2))
    new = _complaint(cluster_id="k1", created_at=now)
    solved = _complaint(cluster_id="k1", solved=True)
    other = _complaint(cluster_id="k2", author_id="u2")
    for c in (old, new, solved, other):
        storage.add_complaint(c)

    assert [c.id for c in storage.list_complaints(cluster_id="k1", solved=False)] == [new.id, old.id]
    assert storage.count_complaints(cluster_id="k1") == 3
    assert storage.count_complaints(cluster_id="k1", solved=False) == 2
    assert [c.id for c in storage.list_complaints(author_id="u2")] == [other.id]


def test_save_missing_record_raises():
    storage = MemoryStorage()
    try:
        storage.save_complaint(_complaint())
        assert False, "expected KeyError"
    except KeyError:
        pass


def test_transaction_rolls_back_on_error():
    storage = MemoryStorage()
    kept = _complaint()
    storage.add_complaint(kept)

    try:
        with storage.transaction():
            storage.add_complaint(_complaint(text="inside"))
            storage.add_cluster(ClusterGroup(keywords=["wifi"]))
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert [c.id for c in storage.list_complaints()] == [kept.id]
    assert storage.list_clusters() == []


def test_nested_transactions_join_outer():
    storage = MemoryStorage()
    try:
        with storage.transaction():
            with storage.transaction():
                storage.add_cluster(ClusterGroup(keywords=["a"]))
            raise RuntimeError("outer fails")
    except RuntimeError:
        pass
    assert storage.list_clusters() == []


def test_delete_complaint_cascades_to_votes():
    storage = MemoryStorage()
    c = _complaint()
    storage.add_complaint(c)
    storage.save_vote(Vote(complaint_id=c.id, user_id="u2", is_like=True))

    assert storage.delete_complaint(c.id)
    assert storage.get_vote(c.id, "u2") is None
    assert not storage.delete_complaint(c.id)


def test_abuse_log_ids_are_unique():
    storage = MemoryStorage()
    log = AbuseLog(user_id="u1", username="alice", flagged_text="x", detected_words=["x"])
    storage.add_abuse_log(log)
    try:
        storage.add_abuse_log(log)
        assert False, "expected ValueError"
    except ValueError:
        pass


def test_sessions_by_token():
    storage = MemoryStorage()
    storage.add_session(Session(user_id="u1", token="tok", expires_at=utcnow()))
    assert storage.get_session("tok").user_id == "u1"
    assert storage.delete_session("tok")
    assert storage.get_session("tok") is None
    assert not storage.delete_session("tok")


def test_user_lookup_by_email_is_case_insensitive():
    storage = MemoryStorage()
    storage.add_user(User(username="alice", email="Alice@College.edu", password_hash="h"))
    assert storage.get_user_by_email("alice@college.edu").username == "alice"
    assert storage.get_user_by_username("ALICE") is None


# ── JSON storage ─────────────────────────────────────────────────────


def test_json_storage_round_trip():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = JsonFileStorage(tmpdir)
        user = User(username="alice", email="a@college.edu", password_hash="h", role=Role.moderator)
        user.banned_until = utcnow() + timedelta(hours=3)
        storage.add_user(user)
        cluster = ClusterGroup(keywords=["wifi"], problem_count=10, urgency=Urgency.urgent)
        storage.add_cluster(cluster)
        c = _complaint(cluster_id=cluster.id, keywords=["wifi", "library"])
        storage.add_complaint(c)
        storage.add_purchase(Purchase(item_type=ItemType.bundle, item_id="b1", buyer_id=user.id, payment_proof="upi"))

        reopened = JsonFileStorage(tmpdir)

        u = reopened.get_user(user.id)
        assert u.role == Role.moderator
        assert u.banned_until == user.banned_until
        assert u.is_banned()
        k = reopened.get_cluster(cluster.id)
        assert k.urgency == Urgency.urgent
        assert k.problem_count == 10
        loaded = reopened.get_complaint(c.id)
        assert loaded.keywords == ["wifi", "library"]
        assert loaded.created_at == c.created_at
        p = reopened.list_purchases(buyer_id=user.id)[0]
        assert p.item_type == ItemType.bundle
        assert p.status == PaymentStatus.pending


def test_json_storage_abuse_logs_are_appended():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = JsonFileStorage(tmpdir)
        storage.add_abuse_log(AbuseLog(user_id="u1", username="a", flagged_text="x", detected_words=["x"]))
        storage.add_abuse_log(AbuseLog(user_id="u2", username="b", flagged_text="y", detected_words=["y"]))

        lines = (Path(tmpdir) / "abuse_logs.jsonl").read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["username"] == "a"
        assert len(JsonFileStorage(tmpdir).list_abuse_logs()) == 2


def test_json_storage_rollback_writes_nothing():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = JsonFileStorage(tmpdir)
        try:
            with storage.transaction():
                storage.add_complaint(_complaint())
                storage.add_abuse_log(AbuseLog(user_id="u1", username="a", flagged_text="x"))
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert not (Path(tmpdir) / "complaints.json").exists()
        assert not (Path(tmpdir) / "abuse_logs.jsonl").exists()
        assert JsonFileStorage(tmpdir).list_complaints() == []


def test_create_storage_selects_backend():
    with tempfile.TemporaryDirectory() as tmpdir:
        assert isinstance(create_storage(Settings()), MemoryStorage)
        json_storage = create_storage(Settings(storage_backend="json", data_dir=tmpdir))
        assert isinstance(json_storage, JsonFileStorage)
        assert (Path(tmpdir) / "data").is_dir()
