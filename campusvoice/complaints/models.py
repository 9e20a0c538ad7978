"""Complaint domain models: complaints, clusters, votes, reactions, abuse logs."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Severity(str, Enum):
    """Impact rating assigned by the analyzer, independent of urgency."""

    good = "good"
    average = "average"
    poor = "poor"
    bad = "bad"
    worst = "worst"
    critical = "critical"


class ComplaintStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    solved = "solved"


class Urgency(str, Enum):
    """Attention tier derived from the active size of a cluster.

    Ordered: normal < urgent < critical < top_priority < emergency.
    """

    normal = "normal"
    urgent = "urgent"
    critical = "critical"
    top_priority = "top_priority"
    emergency = "emergency"

    @property
    def level(self) -> int:
        """Return numeric level for comparison (higher = more pressing)."""
        return {
            Urgency.normal: 0,
            Urgency.urgent: 10,
            Urgency.critical: 25,
            Urgency.top_priority: 50,
            Urgency.emergency: 100,
        }[self]


# Evaluated highest first
URGENCY_THRESHOLDS: tuple[tuple[int, Urgency], ...] = (
    (100, Urgency.emergency),
    (50, Urgency.top_priority),
    (25, Urgency.critical),
    (10, Urgency.urgent),
)

EMOJI_REACTIONS: tuple[str, ...] = ("thumbsup", "thumbsdown", "fire", "warning", "check")


def calculate_urgency(count: int) -> Urgency:
    """Map an active-complaint count to its urgency tier."""
    for threshold, urgency in URGENCY_THRESHOLDS:
        if count >= threshold:
            return urgency
    return Urgency.normal


@dataclass
class Complaint:
    """A single student-submitted issue report."""

    author_id: str
    author_name: str
    text: str
    summary: str = ""
    severity: Severity = Severity.average
    keywords: list[str] = field(default_factory=list)
    status: ComplaintStatus = ComplaintStatus.pending
    solved: bool = False
    solved_by: Optional[str] = None
    solved_at: Optional[datetime] = None
    urgency: Urgency = Urgency.normal
    similar_complaints_count: int = 0
    cluster_id: Optional[str] = None
    likes_count: int = 0
    dislikes_count: int = 0
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if isinstance(self.severity, str):
            self.severity = Severity(self.severity)
        if isinstance(self.status, str):
            self.status = ComplaintStatus(self.status)
        if isinstance(self.urgency, str):
            self.urgency = Urgency(self.urgency)


@dataclass
class ClusterGroup:
    """Complaints judged similar by keyword overlap."""

    keywords: list[str]
    problem_count: int = 0
    urgency: Urgency = Urgency.normal
    id: str = field(default_factory=new_id)
    last_updated: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if isinstance(self.urgency, str):
            self.urgency = Urgency(self.urgency)


@dataclass
class Vote:
    """A like (``is_like=True``) or dislike on a complaint."""

    complaint_id: str
    user_id: str
    is_like: bool
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Reaction:
    complaint_id: str
    user_id: str
    emoji: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class AbuseLog:
    """Append-only record of a rejected abusive submission."""

    user_id: str
    username: str
    flagged_text: str
    detected_words: list[str] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
