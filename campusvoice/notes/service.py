"""Notes marketplace: categories, files, bundles and manually verified purchases.

Payments happen outside the system; a buyer submits a payment-proof reference
and an admin verifies or rejects it. Download access follows from verified
purchases.
"""

from __future__ import annotations

import logging
from typing import Optional

from campusvoice.auth.models import Role, User
from campusvoice.auth.permissions import has_permission, require_role
from campusvoice.complaints.models import utcnow
from campusvoice.errors import ConflictError, NotFoundError, ValidationError
from campusvoice.notes.models import (
    ItemType,
    NotesBundle,
    NotesCategory,
    NotesFile,
    PaymentStatus,
    Purchase,
)
from campusvoice.storage.base import Storage

logger = logging.getLogger(__name__)

BRANCHES = ("cs", "ce", "me", "ee")
SEMESTERS = range(1, 9)
FREE_SEMESTER = 1


def bundle_price(files: list[NotesFile], discount_percentage: int) -> int:
    """Sum of member prices less the discount, rounded to whole rupees."""
    total = sum(f.price for f in files)
    return round(total * (100 - discount_percentage) / 100)


class NotesService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    # -- catalogue -----------------------------------------------------------

    def create_category(self, actor: User, branch: str, semester: int, subject: str) -> NotesCategory:
        require_role(actor, Role.admin)
        branch = (branch or "").lower()
        if branch not in BRANCHES:
            raise ValidationError(f"Branch must be one of: {', '.join(BRANCHES)}")
        if semester not in SEMESTERS:
            raise ValidationError("Semester must be between 1 and 8")
        if not subject or not subject.strip():
            raise ValidationError("Subject is required")

        for existing in self._storage.list_categories():
            if (existing.branch, existing.semester, existing.subject.lower()) == (
                branch,
                semester,
                subject.strip().lower(),
            ):
                raise ConflictError("Category already exists")

        category = NotesCategory(branch=branch, semester=semester, subject=subject.strip())
        self._storage.add_category(category)
        logger.info("Created notes category %s/%d/%s", branch, semester, category.subject)
        return category

    def list_categories(
        self, branch: Optional[str] = None, semester: Optional[int] = None
    ) -> list[NotesCategory]:
        return [
            c
            for c in self._storage.list_categories()
            if (branch is None or c.branch == branch.lower())
            and (semester is None or c.semester == semester)
        ]

    def _category(self, category_id: str) -> NotesCategory:
        category = self._storage.get_category(category_id)
        if category is None:
            raise NotFoundError(f"Category not found: {category_id}")
        return category

    def add_file(
        self,
        actor: User,
        category_id: str,
        title: str,
        file_path: str,
        price: int,
        description: str = "",
    ) -> NotesFile:
        """Register an uploaded file. First-semester notes are always free."""
        require_role(actor, Role.admin)
        category = self._category(category_id)
        if not title or not title.strip():
            raise ValidationError("Title is required")
        if not file_path:
            raise ValidationError("File path is required")
        if price < 0:
            raise ValidationError("Price cannot be negative")

        is_free = category.semester == FREE_SEMESTER or price == 0
        notes_file = NotesFile(
            category_id=category.id,
            title=title.strip(),
            file_path=file_path,
            price=0 if is_free else price,
            uploaded_by=actor.id,
            description=description,
            is_free=is_free,
        )
        self._storage.add_file(notes_file)
        logger.info("Added notes file %s to category %s", notes_file.id, category.id)
        return notes_file

    def get_file(self, file_id: str) -> NotesFile:
        notes_file = self._storage.get_file(file_id)
        if notes_file is None:
            raise NotFoundError(f"File not found: {file_id}")
        return notes_file

    def list_files(self, category_id: Optional[str] = None) -> list[NotesFile]:
        return self._storage.list_files(category_id)

    def create_bundle(
        self,
        actor: User,
        category_id: str,
        name: str,
        file_ids: list[str],
        discount_percentage: int = 0,
        description: str = "",
    ) -> NotesBundle:
        require_role(actor, Role.admin)
        category = self._category(category_id)
        if not name or not name.strip():
            raise ValidationError("Bundle name is required")
        if not 0 <= discount_percentage <= 100:
            raise ValidationError("Discount must be between 0 and 100")
        unique_ids = list(dict.fromkeys(file_ids or []))
        if len(unique_ids) < 2:
            raise ValidationError("A bundle needs at least two files")

        files = [self.get_file(file_id) for file_id in unique_ids]
        if any(f.category_id != category.id for f in files):
            raise ValidationError("All bundle files must belong to the bundle's category")

        bundle = NotesBundle(
            category_id=category.id,
            name=name.strip(),
            file_ids=unique_ids,
            discount_percentage=discount_percentage,
            price=bundle_price(files, discount_percentage),
            description=description,
        )
        self._storage.add_bundle(bundle)
        return bundle

    def get_bundle(self, bundle_id: str) -> NotesBundle:
        bundle = self._storage.get_bundle(bundle_id)
        if bundle is None:
            raise NotFoundError(f"Bundle not found: {bundle_id}")
        return bundle

    def list_bundles(self, category_id: Optional[str] = None) -> list[NotesBundle]:
        return self._storage.list_bundles(category_id)

    # -- purchases -----------------------------------------------------------

    def request_purchase(
        self, buyer: User, item_type: ItemType | str, item_id: str, payment_proof: str
    ) -> Purchase:
        """Record a buyer's payment claim for a file or bundle, pending review.

        Raises
        ------
        ValidationError
            For free files, an unknown item type or a missing payment proof.
        ConflictError
            If the buyer already has a pending or verified purchase of the item.
        """
        try:
            item_type = ItemType(item_type)
        except ValueError:
            raise ValidationError(f"Invalid item type: {item_type}") from None
        if not payment_proof or not payment_proof.strip():
            raise ValidationError("Payment proof is required")

        if item_type == ItemType.file:
            if self.get_file(item_id).is_free:
                raise ValidationError("This file is free; no purchase needed")
        else:
            self.get_bundle(item_id)

        with self._storage.transaction():
            for existing in self._storage.list_purchases(buyer_id=buyer.id):
                if (
                    existing.item_type == item_type
                    and existing.item_id == item_id
                    and existing.status != PaymentStatus.rejected
                ):
                    raise ConflictError("A purchase of this item is already pending or verified")

            purchase = Purchase(
                item_type=item_type,
                item_id=item_id,
                buyer_id=buyer.id,
                payment_proof=payment_proof.strip(),
            )
            self._storage.add_purchase(purchase)

        logger.info(
            "Purchase %s requested by %s for %s %s",
            purchase.id,
            buyer.username,
            item_type.value,
            item_id,
        )
        return purchase

    def _review(self, actor: User, purchase_id: str, status: PaymentStatus) -> Purchase:
        require_role(actor, Role.admin)
        purchase = self._storage.get_purchase(purchase_id)
        if purchase is None:
            raise NotFoundError(f"Purchase not found: {purchase_id}")
        if purchase.status != PaymentStatus.pending:
            raise ConflictError(f"Purchase already {purchase.status.value}")
        purchase.status = status
        purchase.verified_by = actor.id
        purchase.verified_at = utcnow()
        self._storage.save_purchase(purchase)
        logger.info("Purchase %s %s by %s", purchase.id, status.value, actor.username)
        return purchase

    def verify_purchase(self, actor: User, purchase_id: str) -> Purchase:
        return self._review(actor, purchase_id, PaymentStatus.verified)

    def reject_purchase(self, actor: User, purchase_id: str) -> Purchase:
        return self._review(actor, purchase_id, PaymentStatus.rejected)

    def pending_purchases(self) -> list[Purchase]:
        return self._storage.list_purchases(status=PaymentStatus.pending)

    def purchases_for(self, buyer: User) -> list[Purchase]:
        return self._storage.list_purchases(buyer_id=buyer.id)

    def can_download(self, user: User, file_id: str) -> bool:
        """Whether *user* may fetch *file_id*.

        True for free files, the uploader, admins, a verified purchase of the
        file, or a verified purchase of a bundle containing it.
        """
        notes_file = self.get_file(file_id)
        if notes_file.is_free or notes_file.uploaded_by == user.id or has_permission(user, Role.admin):
            return True

        for purchase in self._storage.list_purchases(buyer_id=user.id, status=PaymentStatus.verified):
            if purchase.item_type == ItemType.file and purchase.item_id == file_id:
                return True
            if purchase.item_type == ItemType.bundle:
                bundle = self._storage.get_bundle(purchase.item_id)
                if bundle is not None and file_id in bundle.file_ids:
                    return True
        return False
