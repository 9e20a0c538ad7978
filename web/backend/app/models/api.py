"""Pydantic models for API request/response serialization.

These models mirror the campusvoice dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from campusvoice.auth.models import User
from campusvoice.complaints.models import Complaint
from campusvoice.notes.models import NotesBundle, NotesCategory, NotesFile, Purchase


# ---------------------------------------------------------------------------
# Auth models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public representation of a user. Never carries the password hash."""

    id: str
    username: str
    email: str
    role: str = "student"
    roll_number: str = ""
    user_type: str = "student"
    banned_until: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_user(cls, u: User) -> "UserResponse":
        return cls(
            id=u.id,
            username=u.username,
            email=u.email,
            role=u.role.value,
            roll_number=u.roll_number,
            user_type=u.user_type,
            banned_until=u.banned_until,
            created_at=u.created_at,
        )


class SignupRequest(BaseModel):
    username: str
    email: str
    password: str
    roll_number: str = Field(default="", alias="rollNumber")
    user_type: str = Field(default="student", alias="userType")

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    username: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(alias="newPassword")

    model_config = {"populate_by_name": True}


class LoginResponse(BaseModel):
    """Response after successful login or signup."""

    token: str
    expires_at: datetime
    user: UserResponse


class AuthStatusResponse(BaseModel):
    """Response for the /me endpoint."""

    authenticated: bool
    user: Optional[UserResponse] = None


class RoleUpdateRequest(BaseModel):
    """Request body for updating a user's role."""

    role: str


class BanRequest(BaseModel):
    hours: Optional[int] = None


class BanResponse(BaseModel):
    success: bool = True
    banned_until: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Complaint models
# ---------------------------------------------------------------------------


class ComplaintResponse(BaseModel):
    """A complaint as shown on the board. The author id is not exposed."""

    id: str
    text: str
    summary: str
    severity: str
    keywords: list[str] = Field(default_factory=list)
    status: str
    solved: bool
    solved_at: Optional[datetime] = None
    urgency: str
    similar_complaints_count: int
    cluster_id: Optional[str] = None
    likes_count: int = 0
    dislikes_count: int = 0
    created_at: datetime

    @classmethod
    def from_complaint(cls, c: Complaint) -> "ComplaintResponse":
        return cls(
            id=c.id,
            text=c.text,
            summary=c.summary,
            severity=c.severity.value,
            keywords=list(c.keywords),
            status=c.status.value,
            solved=c.solved,
            solved_at=c.solved_at,
            urgency=c.urgency.value,
            similar_complaints_count=c.similar_complaints_count,
            cluster_id=c.cluster_id,
            likes_count=c.likes_count,
            dislikes_count=c.dislikes_count,
            created_at=c.created_at,
        )


class AdminComplaintResponse(ComplaintResponse):
    """Admin view, including who filed and who solved the complaint."""

    author_id: str
    author_name: str
    solved_by: Optional[str] = None

    @classmethod
    def from_complaint(cls, c: Complaint) -> "AdminComplaintResponse":
        base = ComplaintResponse.from_complaint(c).model_dump()
        return cls(**base, author_id=c.author_id, author_name=c.author_name, solved_by=c.solved_by)


class ComplaintCreateRequest(BaseModel):
    text: str = Field(alias="originalText")

    model_config = {"populate_by_name": True}


class ComplaintSubmitResponse(BaseModel):
    complaint: ComplaintResponse


class ComplaintUpdateRequest(BaseModel):
    """Admin edit of a complaint's text and/or status."""

    text: Optional[str] = Field(default=None, alias="originalText")
    status: Optional[str] = None

    model_config = {"populate_by_name": True}


class BulkDeleteRequest(BaseModel):
    ids: list[str]


class BulkDeleteResponse(BaseModel):
    success: bool = True
    deleted: int


class ReactionRequest(BaseModel):
    emoji: str


class ReactionResponse(BaseModel):
    active: bool
    reactions: dict[str, int] = Field(default_factory=dict)


class LeaderboardItem(ComplaintResponse):
    reactions: dict[str, int] = Field(default_factory=dict)
    user_liked: bool = False
    user_disliked: bool = False
    user_reactions: list[str] = Field(default_factory=list)


class LeaderboardStats(BaseModel):
    total: int
    urgent: int
    critical: int
    emergency: int
    solved: int


class LeaderboardResponse(BaseModel):
    complaints: list[LeaderboardItem] = Field(default_factory=list)
    stats: LeaderboardStats


class AdminStatsResponse(BaseModel):
    total_complaints: int
    pending_complaints: int
    solved_complaints: int
    urgent_count: int
    critical_count: int
    emergency_count: int
    total_users: int
    banned_users: int
    abuse_logs: int


class AbuseLogResponse(BaseModel):
    id: str
    user_id: str
    username: str
    flagged_text: str
    detected_words: list[str] = Field(default_factory=list)
    created_at: datetime


class AdminDashboardResponse(BaseModel):
    stats: AdminStatsResponse
    complaints: list[AdminComplaintResponse] = Field(default_factory=list)
    users: list[UserResponse] = Field(default_factory=list)
    abuse_logs: list[AbuseLogResponse] = Field(default_factory=list)


class MaintenanceResponse(BaseModel):
    clusters: int


# ---------------------------------------------------------------------------
# Notes marketplace models
# ---------------------------------------------------------------------------


class CategoryRequest(BaseModel):
    branch: str
    semester: int
    subject: str


class CategoryResponse(BaseModel):
    id: str
    branch: str
    semester: int
    subject: str

    @classmethod
    def from_category(cls, c: NotesCategory) -> "CategoryResponse":
        return cls(id=c.id, branch=c.branch, semester=c.semester, subject=c.subject)


class NotesFileRequest(BaseModel):
    category_id: str
    title: str
    file_path: str
    price: int = 0
    description: str = ""


class NotesFileResponse(BaseModel):
    id: str
    category_id: str
    title: str
    description: str = ""
    price: int
    is_free: bool
    created_at: datetime

    @classmethod
    def from_file(cls, f: NotesFile) -> "NotesFileResponse":
        return cls(
            id=f.id,
            category_id=f.category_id,
            title=f.title,
            description=f.description,
            price=f.price,
            is_free=f.is_free,
            created_at=f.created_at,
        )


class BundleRequest(BaseModel):
    category_id: str
    name: str
    file_ids: list[str]
    discount_percentage: int = 0
    description: str = ""


class BundleResponse(BaseModel):
    id: str
    category_id: str
    name: str
    description: str = ""
    file_ids: list[str] = Field(default_factory=list)
    discount_percentage: int
    price: int

    @classmethod
    def from_bundle(cls, b: NotesBundle) -> "BundleResponse":
        return cls(
            id=b.id,
            category_id=b.category_id,
            name=b.name,
            description=b.description,
            file_ids=list(b.file_ids),
            discount_percentage=b.discount_percentage,
            price=b.price,
        )


class PurchaseRequest(BaseModel):
    item_type: str
    item_id: str
    payment_proof: str


class PurchaseResponse(BaseModel):
    id: str
    item_type: str
    item_id: str
    buyer_id: str
    payment_proof: str
    status: str
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_purchase(cls, p: Purchase) -> "PurchaseResponse":
        return cls(
            id=p.id,
            item_type=p.item_type.value,
            item_id=p.item_id,
            buyer_id=p.buyer_id,
            payment_proof=p.payment_proof,
            status=p.status.value,
            verified_by=p.verified_by,
            verified_at=p.verified_at,
            created_at=p.created_at,
        )


class DownloadResponse(BaseModel):
    file_id: str
    file_path: str
