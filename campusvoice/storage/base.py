"""Persistence interface consumed by the services.

Every getter returns a detached copy: callers change a record and hand it back
through the matching ``save_*`` method. Multi-step sequences that must not
interleave with other writers run inside :meth:`Storage.transaction`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional

from campusvoice.auth.models import Session, User
from campusvoice.complaints.models import AbuseLog, ClusterGroup, Complaint, Reaction, Vote
from campusvoice.notes.models import NotesBundle, NotesCategory, NotesFile, PaymentStatus, Purchase


class Storage(ABC):
    """CRUD and filtered counts for every campusvoice record type."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Unit of work: writes inside are applied together or not at all.

        Re-entrant; nested blocks join the outermost one.
        """

    # -- users ---------------------------------------------------------------

    @abstractmethod
    def add_user(self, user: User) -> User: ...

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def list_users(self) -> list[User]:
        """All users, newest first."""

    @abstractmethod
    def save_user(self, user: User) -> User: ...

    # -- sessions ------------------------------------------------------------

    @abstractmethod
    def add_session(self, session: Session) -> Session: ...

    @abstractmethod
    def get_session(self, token: str) -> Optional[Session]: ...

    @abstractmethod
    def delete_session(self, token: str) -> bool: ...

    # -- complaints ----------------------------------------------------------

    @abstractmethod
    def add_complaint(self, complaint: Complaint) -> Complaint: ...

    @abstractmethod
    def get_complaint(self, complaint_id: str) -> Optional[Complaint]: ...

    @abstractmethod
    def list_complaints(
        self,
        *,
        cluster_id: Optional[str] = None,
        solved: Optional[bool] = None,
        author_id: Optional[str] = None,
    ) -> list[Complaint]:
        """Complaints matching every given filter, newest first."""

    @abstractmethod
    def count_complaints(
        self,
        *,
        cluster_id: Optional[str] = None,
        solved: Optional[bool] = None,
    ) -> int: ...

    @abstractmethod
    def save_complaint(self, complaint: Complaint) -> Complaint: ...

    @abstractmethod
    def delete_complaint(self, complaint_id: str) -> bool:
        """Remove a complaint with its votes and reactions."""

    # -- clusters ------------------------------------------------------------

    @abstractmethod
    def add_cluster(self, cluster: ClusterGroup) -> ClusterGroup: ...

    @abstractmethod
    def get_cluster(self, cluster_id: str) -> Optional[ClusterGroup]: ...

    @abstractmethod
    def list_clusters(self) -> list[ClusterGroup]:
        """All clusters in creation order."""

    @abstractmethod
    def save_cluster(self, cluster: ClusterGroup) -> ClusterGroup: ...

    @abstractmethod
    def delete_cluster(self, cluster_id: str) -> bool: ...

    # -- votes and reactions -------------------------------------------------

    @abstractmethod
    def get_vote(self, complaint_id: str, user_id: str) -> Optional[Vote]: ...

    @abstractmethod
    def save_vote(self, vote: Vote) -> Vote: ...

    @abstractmethod
    def delete_vote(self, vote_id: str) -> bool: ...

    @abstractmethod
    def find_reaction(self, complaint_id: str, user_id: str, emoji: str) -> Optional[Reaction]: ...

    @abstractmethod
    def list_reactions(self, complaint_id: str) -> list[Reaction]: ...

    @abstractmethod
    def add_reaction(self, reaction: Reaction) -> Reaction: ...

    @abstractmethod
    def delete_reaction(self, reaction_id: str) -> bool: ...

    # -- abuse logs (append-only) --------------------------------------------

    @abstractmethod
    def add_abuse_log(self, log: AbuseLog) -> AbuseLog: ...

    @abstractmethod
    def list_abuse_logs(self) -> list[AbuseLog]:
        """All abuse logs, newest first."""

    # -- notes marketplace ---------------------------------------------------

    @abstractmethod
    def add_category(self, category: NotesCategory) -> NotesCategory: ...

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[NotesCategory]: ...

    @abstractmethod
    def list_categories(self) -> list[NotesCategory]: ...

    @abstractmethod
    def add_file(self, notes_file: NotesFile) -> NotesFile: ...

    @abstractmethod
    def get_file(self, file_id: str) -> Optional[NotesFile]: ...

    @abstractmethod
    def list_files(self, category_id: Optional[str] = None) -> list[NotesFile]: ...

    @abstractmethod
    def add_bundle(self, bundle: NotesBundle) -> NotesBundle: ...

    @abstractmethod
    def get_bundle(self, bundle_id: str) -> Optional[NotesBundle]: ...

    @abstractmethod
    def list_bundles(self, category_id: Optional[str] = None) -> list[NotesBundle]: ...

    @abstractmethod
    def add_purchase(self, purchase: Purchase) -> Purchase: ...

    @abstractmethod
    def get_purchase(self, purchase_id: str) -> Optional[Purchase]: ...

    @abstractmethod
    def save_purchase(self, purchase: Purchase) -> Purchase: ...

    @abstractmethod
    def list_purchases(
        self,
        *,
        buyer_id: Optional[str] = None,
        status: Optional[PaymentStatus] = None,
    ) -> list[Purchase]: ...
