"""Dict-backed storage, used for development, tests and as the base of the JSON store."""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from campusvoice.auth.models import Session, User
from campusvoice.complaints.models import AbuseLog, ClusterGroup, Complaint, Reaction, Vote
from campusvoice.notes.models import NotesBundle, NotesCategory, NotesFile, PaymentStatus, Purchase
from campusvoice.storage.base import Storage

T = TypeVar("T")

# Collection name -> record class
KINDS: dict[str, type] = {
    "users": User,
    "sessions": Session,
    "complaints": Complaint,
    "clusters": ClusterGroup,
    "votes": Vote,
    "reactions": Reaction,
    "abuse_logs": AbuseLog,
    "categories": NotesCategory,
    "files": NotesFile,
    "bundles": NotesBundle,
    "purchases": Purchase,
}


class MemoryStorage(Storage):
    """In-process storage. Records are copied on the way in and out."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {kind: {} for kind in KINDS}
        self._lock = threading.RLock()
        self._depth = 0
        self._snapshot: Optional[dict[str, dict[str, Any]]] = None
        self._dirty: set[str] = set()

    # -- unit of work --------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._snapshot = copy.deepcopy(self._data)
                self._dirty = set()
            self._depth += 1
            try:
                yield
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._data = self._snapshot
                    self._snapshot = None
                    self._dirty = set()
                    self._discard()
                raise
            self._depth -= 1
            if outermost:
                self._snapshot = None
                dirty, self._dirty = self._dirty, set()
                self._flush(dirty)

    def _flush(self, kinds: set[str]) -> None:
        """Make committed changes durable. Nothing to do in memory."""

    def _discard(self) -> None:
        """Forget buffered changes after a rollback."""

    # -- generic helpers -----------------------------------------------------

    def _put(self, kind: str, record: T) -> T:
        with self.transaction():
            self._data[kind][record.id] = copy.deepcopy(record)
            self._dirty.add(kind)
        return record

    def _get(self, kind: str, record_id: str) -> Optional[Any]:
        with self._lock:
            record = self._data[kind].get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def _find(self, kind: str, predicate: Callable[[Any], bool]) -> list[Any]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._data[kind].values() if predicate(r)]

    def _remove(self, kind: str, record_id: str) -> bool:
        with self.transaction():
            if self._data[kind].pop(record_id, None) is None:
                return False
            self._dirty.add(kind)
            return True

    def _save(self, kind: str, record: T) -> T:
        with self.transaction():
            if record.id not in self._data[kind]:
                raise KeyError(f"{kind} record not found: {record.id}")
            return self._put(kind, record)

    @staticmethod
    def _newest_first(records: list[Any]) -> list[Any]:
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    # -- users ---------------------------------------------------------------

    def add_user(self, user: User) -> User:
        return self._put("users", user)

    def get_user(self, user_id: str) -> Optional[User]:
        return self._get("users", user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        found = self._find("users", lambda u: u.username == username)
        return found[0] if found else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        found = self._find("users", lambda u: u.email.lower() == email.lower())
        return found[0] if found else None

    def list_users(self) -> list[User]:
        return self._newest_first(self._find("users", lambda u: True))

    def save_user(self, user: User) -> User:
        return self._save("users", user)

    # -- sessions ------------------------------------------------------------

    def add_session(self, session: Session) -> Session:
        return self._put("sessions", session)

    def get_session(self, token: str) -> Optional[Session]:
        found = self._find("sessions", lambda s: s.token == token)
        return found[0] if found else None

    def delete_session(self, token: str) -> bool:
        session = self.get_session(token)
        return self._remove("sessions", session.id) if session else False

    # -- complaints ----------------------------------------------------------

    def add_complaint(self, complaint: Complaint) -> Complaint:
        return self._put("complaints", complaint)

    def get_complaint(self, complaint_id: str) -> Optional[Complaint]:
        return self._get("complaints", complaint_id)

    def list_complaints(
        self,
        *,
        cluster_id: Optional[str] = None,
        solved: Optional[bool] = None,
        author_id: Optional[str] = None,
    ) -> list[Complaint]:
        def matches(c: Complaint) -> bool:
            if cluster_id is not None and c.cluster_id != cluster_id:
                return False
            if solved is not None and c.solved != solved:
                return False
            if author_id is not None and c.author_id != author_id:
                return False
            return True

        return self._newest_first(self._find("complaints", matches))

    def count_complaints(
        self,
        *,
        cluster_id: Optional[str] = None,
        solved: Optional[bool] = None,
    ) -> int:
        with self._lock:
            return sum(
                1
                for c in self._data["complaints"].values()
                if (cluster_id is None or c.cluster_id == cluster_id)
                and (solved is None or c.solved == solved)
            )

    def save_complaint(self, complaint: Complaint) -> Complaint:
        return self._save("complaints", complaint)

    def delete_complaint(self, complaint_id: str) -> bool:
        with self.transaction():
            if not self._remove("complaints", complaint_id):
                return False
            for kind in ("votes", "reactions"):
                stale = [r.id for r in self._data[kind].values() if r.complaint_id == complaint_id]
                for record_id in stale:
                    self._remove(kind, record_id)
            return True

    # -- clusters ------------------------------------------------------------

    def add_cluster(self, cluster: ClusterGroup) -> ClusterGroup:
        return self._put("clusters", cluster)

    def get_cluster(self, cluster_id: str) -> Optional[ClusterGroup]:
        return self._get("clusters", cluster_id)

    def list_clusters(self) -> list[ClusterGroup]:
        # dicts keep insertion order, which is creation order here
        return self._find("clusters", lambda c: True)

    def save_cluster(self, cluster: ClusterGroup) -> ClusterGroup:
        return self._save("clusters", cluster)

    def delete_cluster(self, cluster_id: str) -> bool:
        return self._remove("clusters", cluster_id)

    # -- votes and reactions -------------------------------------------------

    def get_vote(self, complaint_id: str, user_id: str) -> Optional[Vote]:
        found = self._find("votes", lambda v: v.complaint_id == complaint_id and v.user_id == user_id)
        return found[0] if found else None

    def save_vote(self, vote: Vote) -> Vote:
        return self._put("votes", vote)

    def delete_vote(self, vote_id: str) -> bool:
        return self._remove("votes", vote_id)

    def find_reaction(self, complaint_id: str, user_id: str, emoji: str) -> Optional[Reaction]:
        found = self._find(
            "reactions",
            lambda r: r.complaint_id == complaint_id and r.user_id == user_id and r.emoji == emoji,
        )
        return found[0] if found else None

    def list_reactions(self, complaint_id: str) -> list[Reaction]:
        return self._find("reactions", lambda r: r.complaint_id == complaint_id)

    def add_reaction(self, reaction: Reaction) -> Reaction:
        return self._put("reactions", reaction)

    def delete_reaction(self, reaction_id: str) -> bool:
        return self._remove("reactions", reaction_id)

    # -- abuse logs ----------------------------------------------------------

    def add_abuse_log(self, log: AbuseLog) -> AbuseLog:
        if log.id in self._data["abuse_logs"]:
            raise ValueError(f"Abuse log {log.id} already recorded")
        return self._put("abuse_logs", log)

    def list_abuse_logs(self) -> list[AbuseLog]:
        return self._newest_first(self._find("abuse_logs", lambda a: True))

    # -- notes marketplace ---------------------------------------------------

    def add_category(self, category: NotesCategory) -> NotesCategory:
        return self._put("categories", category)

    def get_category(self, category_id: str) -> Optional[NotesCategory]:
        return self._get("categories", category_id)

    def list_categories(self) -> list[NotesCategory]:
        return sorted(
            self._find("categories", lambda c: True),
            key=lambda c: (c.branch, c.semester, c.subject),
        )

    def add_file(self, notes_file: NotesFile) -> NotesFile:
        return self._put("files", notes_file)

    def get_file(self, file_id: str) -> Optional[NotesFile]:
        return self._get("files", file_id)

    def list_files(self, category_id: Optional[str] = None) -> list[NotesFile]:
        return self._newest_first(
            self._find("files", lambda f: category_id is None or f.category_id == category_id)
        )

    def add_bundle(self, bundle: NotesBundle) -> NotesBundle:
        return self._put("bundles", bundle)

    def get_bundle(self, bundle_id: str) -> Optional[NotesBundle]:
        return self._get("bundles", bundle_id)

    def list_bundles(self, category_id: Optional[str] = None) -> list[NotesBundle]:
        return self._newest_first(
            self._find("bundles", lambda b: category_id is None or b.category_id == category_id)
        )

    def add_purchase(self, purchase: Purchase) -> Purchase:
        return self._put("purchases", purchase)

    def get_purchase(self, purchase_id: str) -> Optional[Purchase]:
        return self._get("purchases", purchase_id)

    def save_purchase(self, purchase: Purchase) -> Purchase:
        return self._save("purchases", purchase)

    def list_purchases(
        self,
        *,
        buyer_id: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
    ) -> list[Purchase]:
        return self._newest_first(
            self._find(
                "purchases",
                lambda p: (buyer_id is None or p.buyer_id == buyer_id)
                and (status is None or p.status == status),
            )
        )
