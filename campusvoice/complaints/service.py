"""Complaint workflows: submission, resolution, deletion, votes and reactions.

The service owns every sequence that touches cluster membership, so the
cluster engine's recount runs after each one.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from campusvoice.analysis import ComplaintAnalyzer
from campusvoice.auth.models import Role, User
from campusvoice.auth.permissions import has_permission
from campusvoice.complaints.clustering import ClusterEngine
from campusvoice.complaints.models import (
    EMOJI_REACTIONS,
    AbuseLog,
    Complaint,
    ComplaintStatus,
    Reaction,
    Urgency,
    Vote,
    utcnow,
)
from campusvoice.config import Settings
from campusvoice.errors import BannedError, NotFoundError, PermissionDeniedError, ValidationError
from campusvoice.moderation import AbuseCheckResult, AbuseDetector, ban_expiration
from campusvoice.storage.base import Storage

logger = logging.getLogger(__name__)


def abuse_rejection_message(hours: int) -> str:
    return (
        "Your submission contains inappropriate language. "
        f"Your account has been suspended for {hours} hours."
    )


@dataclass
class SubmissionOutcome:
    """Result of :meth:`ComplaintService.submit`.

    Exactly one of ``complaint`` (accepted) or ``banned_until`` (rejected as
    abusive) is set.
    """

    complaint: Optional[Complaint] = None
    banned_until: Optional[datetime] = None
    message: str = ""
    abuse: Optional[AbuseCheckResult] = None

    @property
    def accepted(self) -> bool:
        return self.complaint is not None


@dataclass
class LeaderboardEntry:
    complaint: Complaint
    reactions: dict[str, int] = field(default_factory=dict)
    user_liked: bool = False
    user_disliked: bool = False
    user_reactions: list[str] = field(default_factory=list)


class ComplaintService:
    """Complaint lifecycle on top of a :class:`Storage`."""

    def __init__(
        self,
        storage: Storage,
        detector: AbuseDetector,
        analyzer: ComplaintAnalyzer,
        clusters: Optional[ClusterEngine] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._storage = storage
        self.detector = detector
        self.analyzer = analyzer
        self._settings = settings or Settings()
        self.clusters = clusters or ClusterEngine(
            storage, threshold=self._settings.cluster_overlap_threshold
        )

    # -- lookup --------------------------------------------------------------

    def get(self, complaint_id: str) -> Complaint:
        complaint = self._storage.get_complaint(complaint_id)
        if complaint is None:
            raise NotFoundError(f"Complaint not found: {complaint_id}")
        return complaint

    def list_complaints(
        self, *, solved: Optional[bool] = None, author_id: Optional[str] = None
    ) -> list[Complaint]:
        return self._storage.list_complaints(solved=solved, author_id=author_id)

    # -- submission ----------------------------------------------------------

    def submit(self, author: User, text: str) -> SubmissionOutcome:
        """Screen, analyse, cluster and store a new complaint.

        Raises
        ------
        ValidationError
            If *text* is blank.
        BannedError
            If *author* is currently banned.
        """
        if not text or not text.strip():
            raise ValidationError("Complaint text is required")

        current = self._storage.get_user(author.id) or author
        if current.is_banned():
            raise BannedError(current.banned_until)

        check = self.detector.detect(text)
        if check.is_abusive:
            return self._reject_abusive(current, text, check)

        analysis = self.analyzer.analyze(text)
        if analysis.fallback_reason:
            logger.info("Heuristic analysis used: %s", analysis.fallback_reason)

        with self._storage.transaction():
            cluster = self.clusters.get_or_create_cluster(analysis.keywords)
            complaint = Complaint(
                author_id=current.id,
                author_name=current.username,
                text=text,
                summary=analysis.summary,
                severity=analysis.severity,
                keywords=list(analysis.keywords),
                status=ComplaintStatus.pending,
                urgency=Urgency.normal,
                similar_complaints_count=1 if cluster else 0,
                cluster_id=cluster.id if cluster else None,
            )
            self._storage.add_complaint(complaint)

        if complaint.cluster_id:
            self.clusters.update_cluster_count(complaint.cluster_id)
            complaint = self.get(complaint.id)

        logger.info("Complaint %s submitted by %s", complaint.id, current.username)
        return SubmissionOutcome(complaint=complaint, abuse=check)

    def _reject_abusive(self, user: User, text: str, check: AbuseCheckResult) -> SubmissionOutcome:
        hours = self._settings.abuse_ban_hours
        until = ban_expiration(hours)
        with self._storage.transaction():
            user.banned_until = until
            self._storage.save_user(user)
            self._storage.add_abuse_log(
                AbuseLog(
                    user_id=user.id,
                    username=user.username,
                    flagged_text=text,
                    detected_words=list(check.detected_words),
                )
            )
        logger.warning(
            "Rejected abusive submission from %s (%s via %s); banned until %s",
            user.username,
            ", ".join(check.detected_words),
            check.detected_by.value,
            until.isoformat(),
        )
        return SubmissionOutcome(
            banned_until=until,
            message=abuse_rejection_message(hours),
            abuse=check,
        )

    # -- status changes ------------------------------------------------------

    def resolve(self, complaint_id: str, resolver: User) -> Complaint:
        """Mark a complaint solved and shrink its cluster."""
        complaint = self.get(complaint_id)
        self._mark_solved(complaint, resolver)
        self._storage.save_complaint(complaint)
        if complaint.cluster_id:
            self.clusters.update_cluster_count(complaint.cluster_id)
        logger.info("Complaint %s solved by %s", complaint.id, resolver.username)
        return self.get(complaint.id)

    @staticmethod
    def _mark_solved(complaint: Complaint, resolver: User) -> None:
        complaint.solved = True
        complaint.status = ComplaintStatus.solved
        complaint.solved_by = resolver.id
        complaint.solved_at = utcnow()
        complaint.urgency = Urgency.normal
        complaint.similar_complaints_count = 0

    def admin_update(
        self,
        complaint_id: str,
        editor: User,
        text: Optional[str] = None,
        status: Optional[ComplaintStatus | str] = None,
    ) -> Complaint:
        """Edit a complaint's text and/or status."""
        complaint = self.get(complaint_id)
        previous = complaint.status

        if text is not None:
            if not text.strip():
                raise ValidationError("Complaint text cannot be blank")
            complaint.text = text

        if status is not None:
            try:
                status = ComplaintStatus(status)
            except ValueError:
                raise ValidationError(f"Invalid status: {status}") from None
            if status == ComplaintStatus.solved:
                self._mark_solved(complaint, editor)
            else:
                complaint.status = status
                complaint.solved = False
                complaint.solved_by = None
                complaint.solved_at = None

        self._storage.save_complaint(complaint)

        if complaint.cluster_id and status is not None and status != previous:
            self.clusters.update_cluster_count(complaint.cluster_id)
        return self.get(complaint.id)

    # -- deletion ------------------------------------------------------------

    def delete(self, complaint_id: str, actor: User) -> None:
        """Delete a complaint. Allowed for its author and for moderators."""
        complaint = self.get(complaint_id)
        if complaint.author_id != actor.id and not has_permission(actor, Role.moderator):
            raise PermissionDeniedError("Not authorized to delete this complaint")

        self._storage.delete_complaint(complaint.id)
        if complaint.cluster_id:
            self.clusters.update_cluster_count(complaint.cluster_id)
        logger.info("Complaint %s deleted by %s", complaint.id, actor.username)

    def delete_bulk(self, complaint_ids: Iterable[str]) -> int:
        """Delete many complaints, recounting each affected cluster once.

        Unknown ids are skipped. Returns how many were deleted.
        """
        affected: dict[str, None] = {}
        deleted = 0
        with self._storage.transaction():
            for complaint_id in complaint_ids:
                complaint = self._storage.get_complaint(complaint_id)
                if complaint is None:
                    continue
                self._storage.delete_complaint(complaint_id)
                deleted += 1
                if complaint.cluster_id:
                    affected[complaint.cluster_id] = None

        for cluster_id in affected:
            self.clusters.update_cluster_count(cluster_id)
        logger.info("Bulk deleted %d complaints across %d clusters", deleted, len(affected))
        return deleted

    # -- votes ---------------------------------------------------------------

    def vote(self, complaint_id: str, user: User, is_like: bool) -> Complaint:
        """Like or dislike.

        Repeating the same vote withdraws it; the opposite vote replaces it.
        """
        with self._storage.transaction():
            complaint = self.get(complaint_id)
            existing = self._storage.get_vote(complaint_id, user.id)
            if existing is None:
                self._storage.save_vote(Vote(complaint_id=complaint_id, user_id=user.id, is_like=is_like))
                self._adjust(complaint, is_like, +1)
            elif existing.is_like == is_like:
                self._storage.delete_vote(existing.id)
                self._adjust(complaint, is_like, -1)
            else:
                existing.is_like = is_like
                self._storage.save_vote(existing)
                self._adjust(complaint, is_like, +1)
                self._adjust(complaint, not is_like, -1)
            self._storage.save_complaint(complaint)
        return complaint

    def remove_vote(self, complaint_id: str, user: User) -> Complaint:
        with self._storage.transaction():
            complaint = self.get(complaint_id)
            existing = self._storage.get_vote(complaint_id, user.id)
            if existing is not None:
                self._storage.delete_vote(existing.id)
                self._adjust(complaint, existing.is_like, -1)
                self._storage.save_complaint(complaint)
        return complaint

    @staticmethod
    def _adjust(complaint: Complaint, is_like: bool, delta: int) -> None:
        if is_like:
            complaint.likes_count = max(0, complaint.likes_count + delta)
        else:
            complaint.dislikes_count = max(0, complaint.dislikes_count + delta)

    # -- reactions -----------------------------------------------------------

    def react(self, complaint_id: str, user: User, emoji: str) -> bool:
        """Toggle an emoji reaction. Returns True if it is now present."""
        if emoji not in EMOJI_REACTIONS:
            raise ValidationError(f"Unsupported reaction: {emoji}")
        with self._storage.transaction():
            self.get(complaint_id)
            existing = self._storage.find_reaction(complaint_id, user.id, emoji)
            if existing is not None:
                self._storage.delete_reaction(existing.id)
                return False
            self._storage.add_reaction(Reaction(complaint_id=complaint_id, user_id=user.id, emoji=emoji))
            return True

    def reaction_counts(self, complaint_id: str) -> dict[str, int]:
        counts = Counter(r.emoji for r in self._storage.list_reactions(complaint_id))
        return {emoji: counts[emoji] for emoji in EMOJI_REACTIONS if counts[emoji]}

    # -- views ---------------------------------------------------------------

    def leaderboard(self, viewer: Optional[User] = None) -> list[LeaderboardEntry]:
        """All complaints, biggest clusters first, then most liked, then newest."""
        complaints = sorted(
            self._storage.list_complaints(),
            key=lambda c: (c.similar_complaints_count, c.likes_count, c.created_at),
            reverse=True,
        )
        entries = []
        for complaint in complaints:
            entry = LeaderboardEntry(complaint=complaint, reactions=self.reaction_counts(complaint.id))
            if viewer is not None:
                vote = self._storage.get_vote(complaint.id, viewer.id)
                if vote is not None:
                    entry.user_liked = vote.is_like
                    entry.user_disliked = not vote.is_like
                entry.user_reactions = [
                    r.emoji for r in self._storage.list_reactions(complaint.id) if r.user_id == viewer.id
                ]
            entries.append(entry)
        return entries

    def admin_stats(self) -> dict[str, int]:
        complaints = self._storage.list_complaints()
        users = self._storage.list_users()
        return {
            "total_complaints": len(complaints),
            "pending_complaints": sum(1 for c in complaints if c.status == ComplaintStatus.pending),
            "solved_complaints": sum(1 for c in complaints if c.solved),
            "urgent_count": sum(1 for c in complaints if c.urgency == Urgency.urgent),
            "critical_count": sum(
                1 for c in complaints if c.urgency in (Urgency.critical, Urgency.top_priority)
            ),
            "emergency_count": sum(1 for c in complaints if c.urgency == Urgency.emergency),
            "total_users": len(users),
            "banned_users": sum(1 for u in users if u.is_banned()),
            "abuse_logs": len(self._storage.list_abuse_logs()),
        }
