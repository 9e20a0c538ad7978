"""Complaints router -- submission, voting, reactions, solving and deletion."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from campusvoice.auth.models import User
from campusvoice.services import Services
from web.backend.app.middleware.auth import (
    get_current_user,
    get_optional_user,
    get_services,
    get_staff_user,
)
from web.backend.app.models.api import (
    ComplaintCreateRequest,
    ComplaintResponse,
    ComplaintSubmitResponse,
    LeaderboardItem,
    LeaderboardResponse,
    LeaderboardStats,
    ReactionRequest,
    ReactionResponse,
)

router = APIRouter(prefix="/api/complaints", tags=["complaints"])
leaderboard_router = APIRouter(prefix="/api/leaderboard", tags=["complaints"])


@router.post(
    "",
    response_model=ComplaintSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a complaint",
)
async def submit_complaint(
    body: ComplaintCreateRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Screen, analyse and file a complaint.

    Abusive text is not stored: the author is suspended and the response is
    ``403`` with the suspension end in ``banned_until``.
    """
    outcome = services.complaints.submit(user, body.text)
    if not outcome.accepted:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={
                "detail": outcome.message,
                "banned_until": outcome.banned_until.isoformat(),
            },
        )
    return ComplaintSubmitResponse(complaint=ComplaintResponse.from_complaint(outcome.complaint))


@router.get("", response_model=list[ComplaintResponse], summary="List complaints")
async def list_complaints(
    solved: Optional[bool] = None,
    services: Services = Depends(get_services),
):
    return [ComplaintResponse.from_complaint(c) for c in services.complaints.list_complaints(solved=solved)]


@router.get("/mine", response_model=list[ComplaintResponse], summary="The current user's complaints")
async def my_complaints(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return [
        ComplaintResponse.from_complaint(c)
        for c in services.complaints.list_complaints(author_id=user.id)
    ]


@router.get("/{complaint_id}", response_model=ComplaintResponse, summary="Get one complaint")
async def get_complaint(complaint_id: str, services: Services = Depends(get_services)):
    return ComplaintResponse.from_complaint(services.complaints.get(complaint_id))


@router.post("/{complaint_id}/like", response_model=ComplaintResponse, summary="Toggle a like")
async def like(
    complaint_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return ComplaintResponse.from_complaint(services.complaints.vote(complaint_id, user, True))


@router.post("/{complaint_id}/dislike", response_model=ComplaintResponse, summary="Toggle a dislike")
async def dislike(
    complaint_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return ComplaintResponse.from_complaint(services.complaints.vote(complaint_id, user, False))


@router.delete("/{complaint_id}/vote", response_model=ComplaintResponse, summary="Withdraw a vote")
async def remove_vote(
    complaint_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return ComplaintResponse.from_complaint(services.complaints.remove_vote(complaint_id, user))


@router.post("/{complaint_id}/react", response_model=ReactionResponse, summary="Toggle an emoji reaction")
async def react(
    complaint_id: str,
    body: ReactionRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    active = services.complaints.react(complaint_id, user, body.emoji)
    return ReactionResponse(active=active, reactions=services.complaints.reaction_counts(complaint_id))


@router.put("/{complaint_id}/solve", response_model=ComplaintResponse, summary="Mark solved (staff)")
async def solve(
    complaint_id: str,
    user: User = Depends(get_staff_user),
    services: Services = Depends(get_services),
):
    return ComplaintResponse.from_complaint(services.complaints.resolve(complaint_id, user))


@router.delete("/{complaint_id}", summary="Delete a complaint (author or staff)")
async def delete_complaint(
    complaint_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.complaints.delete(complaint_id, user)
    return {"success": True}


@leaderboard_router.get("", response_model=LeaderboardResponse, summary="Ranked board with stats")
async def leaderboard(
    viewer: Optional[User] = Depends(get_optional_user),
    services: Services = Depends(get_services),
):
    """Complaints ranked by cluster size, then likes, then recency."""
    items = []
    for entry in services.complaints.leaderboard(viewer):
        base = ComplaintResponse.from_complaint(entry.complaint).model_dump()
        items.append(
            LeaderboardItem(
                **base,
                reactions=entry.reactions,
                user_liked=entry.user_liked,
                user_disliked=entry.user_disliked,
                user_reactions=entry.user_reactions,
            )
        )

    totals = services.complaints.admin_stats()
    stats = LeaderboardStats(
        total=totals["total_complaints"],
        urgent=totals["urgent_count"],
        critical=totals["critical_count"],
        emergency=totals["emergency_count"],
        solved=totals["solved_complaints"],
    )
    return LeaderboardResponse(complaints=items, stats=stats)
