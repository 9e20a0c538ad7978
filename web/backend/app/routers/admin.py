"""Admin router -- dashboard, complaint moderation, user bans and roles.

Everything here needs a moderator or admin; role changes need an admin.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from campusvoice.auth.models import User
from campusvoice.services import Services
from web.backend.app.middleware.auth import get_admin_user, get_services, get_staff_user
from web.backend.app.models.api import (
    AbuseLogResponse,
    AdminComplaintResponse,
    AdminDashboardResponse,
    AdminStatsResponse,
    BanRequest,
    BanResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    ComplaintUpdateRequest,
    MaintenanceResponse,
    RoleUpdateRequest,
    UserResponse,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard", response_model=AdminDashboardResponse, summary="Stats, complaints, users and abuse logs")
async def dashboard(
    _: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    logs = services.storage.list_abuse_logs()
    return AdminDashboardResponse(
        stats=AdminStatsResponse(**services.complaints.admin_stats()),
        complaints=[AdminComplaintResponse.from_complaint(c) for c in services.complaints.list_complaints()],
        users=[UserResponse.from_user(u) for u in services.auth.list_users()],
        abuse_logs=[
            AbuseLogResponse(
                id=log.id,
                user_id=log.user_id,
                username=log.username,
                flagged_text=log.flagged_text,
                detected_words=log.detected_words,
                created_at=log.created_at,
            )
            for log in logs
        ],
    )


@router.get("/stats", response_model=AdminStatsResponse, summary="Board-wide totals")
async def stats(
    _: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    return AdminStatsResponse(**services.complaints.admin_stats())


# ---------------------------------------------------------------------------
# Complaint moderation
# ---------------------------------------------------------------------------


@router.put("/complaints/{complaint_id}", response_model=AdminComplaintResponse, summary="Edit text or status")
async def update_complaint(
    complaint_id: str,
    body: ComplaintUpdateRequest,
    user: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    complaint = services.complaints.admin_update(complaint_id, user, text=body.text, status=body.status)
    return AdminComplaintResponse.from_complaint(complaint)


@router.delete("/complaints/bulk", response_model=BulkDeleteResponse, summary="Delete many complaints")
async def bulk_delete(
    body: BulkDeleteRequest,
    _: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    return BulkDeleteResponse(deleted=services.complaints.delete_bulk(body.ids))


@router.post("/recalculate", response_model=MaintenanceResponse, summary="Recount every cluster")
async def recalculate(
    _: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    return MaintenanceResponse(clusters=services.clusters.recalculate_urgencies())


@router.post("/prune-clusters", response_model=MaintenanceResponse, summary="Delete empty clusters")
async def prune_clusters(
    _: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    return MaintenanceResponse(clusters=len(services.clusters.prune_empty_clusters()))


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}/role", response_model=UserResponse, summary="Change a user's role (admin only)")
async def update_role(
    user_id: str,
    body: RoleUpdateRequest,
    _: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    return UserResponse.from_user(services.auth.set_role(user_id, body.role))


@router.put("/users/{user_id}/ban", response_model=BanResponse, summary="Suspend a user")
async def ban_user(
    user_id: str,
    body: Optional[BanRequest] = None,
    _: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    """Suspend for ``hours`` (48 when omitted)."""
    user = services.auth.ban(user_id, body.hours if body else None)
    return BanResponse(banned_until=user.banned_until)


@router.put("/users/{user_id}/unban", response_model=BanResponse, summary="Lift a suspension")
async def unban_user(
    user_id: str,
    _: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    services.auth.unban(user_id)
    return BanResponse()
