"""Notes router -- catalogue browsing, uploads, bundles and purchase review."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from campusvoice.auth.models import User
from campusvoice.errors import PermissionDeniedError
from campusvoice.services import Services
from web.backend.app.middleware.auth import get_admin_user, get_current_user, get_services
from web.backend.app.models.api import (
    BundleRequest,
    BundleResponse,
    CategoryRequest,
    CategoryResponse,
    DownloadResponse,
    NotesFileRequest,
    NotesFileResponse,
    PurchaseRequest,
    PurchaseResponse,
)

router = APIRouter(prefix="/api/notes", tags=["notes"])


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    branch: Optional[str] = None,
    semester: Optional[int] = None,
    services: Services = Depends(get_services),
):
    return [CategoryResponse.from_category(c) for c in services.notes.list_categories(branch, semester)]


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryRequest,
    user: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    category = services.notes.create_category(user, body.branch, body.semester, body.subject)
    return CategoryResponse.from_category(category)


@router.get("/files", response_model=list[NotesFileResponse])
async def list_files(
    category_id: Optional[str] = None,
    services: Services = Depends(get_services),
):
    return [NotesFileResponse.from_file(f) for f in services.notes.list_files(category_id)]


@router.post("/files", response_model=NotesFileResponse, status_code=status.HTTP_201_CREATED)
async def add_file(
    body: NotesFileRequest,
    user: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    notes_file = services.notes.add_file(
        user,
        body.category_id,
        body.title,
        body.file_path,
        body.price,
        description=body.description,
    )
    return NotesFileResponse.from_file(notes_file)


@router.get("/files/{file_id}/download", response_model=DownloadResponse)
async def download(
    file_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Return the stored path of a file the user is entitled to."""
    if not services.notes.can_download(user, file_id):
        raise PermissionDeniedError("Purchase required to download this file")
    notes_file = services.notes.get_file(file_id)
    return DownloadResponse(file_id=notes_file.id, file_path=notes_file.file_path)


@router.get("/bundles", response_model=list[BundleResponse])
async def list_bundles(
    category_id: Optional[str] = None,
    services: Services = Depends(get_services),
):
    return [BundleResponse.from_bundle(b) for b in services.notes.list_bundles(category_id)]


@router.post("/bundles", response_model=BundleResponse, status_code=status.HTTP_201_CREATED)
async def create_bundle(
    body: BundleRequest,
    user: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    bundle = services.notes.create_bundle(
        user,
        body.category_id,
        body.name,
        body.file_ids,
        discount_percentage=body.discount_percentage,
        description=body.description,
    )
    return BundleResponse.from_bundle(bundle)


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------


@router.post("/purchases", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
async def request_purchase(
    body: PurchaseRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    purchase = services.notes.request_purchase(user, body.item_type, body.item_id, body.payment_proof)
    return PurchaseResponse.from_purchase(purchase)


@router.get("/purchases/mine", response_model=list[PurchaseResponse])
async def my_purchases(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return [PurchaseResponse.from_purchase(p) for p in services.notes.purchases_for(user)]


@router.get("/purchases/pending", response_model=list[PurchaseResponse])
async def pending_purchases(
    _: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    return [PurchaseResponse.from_purchase(p) for p in services.notes.pending_purchases()]


@router.put("/purchases/{purchase_id}/verify", response_model=PurchaseResponse)
async def verify_purchase(
    purchase_id: str,
    user: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    return PurchaseResponse.from_purchase(services.notes.verify_purchase(user, purchase_id))


@router.put("/purchases/{purchase_id}/reject", response_model=PurchaseResponse)
async def reject_purchase(
    purchase_id: str,
    user: User = Depends(get_admin_user),
    services: Services = Depends(get_services),
):
    return PurchaseResponse.from_purchase(services.notes.reject_purchase(user, purchase_id))
