"""Notes marketplace models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from campusvoice.complaints.models import new_id, utcnow


class PaymentStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class ItemType(str, Enum):
    file = "file"
    bundle = "bundle"


@dataclass
class NotesCategory:
    """A branch / semester / subject shelf."""

    branch: str
    semester: int
    subject: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class NotesFile:
    category_id: str
    title: str
    file_path: str
    price: int  # rupees
    uploaded_by: str
    description: str = ""
    is_free: bool = False
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class NotesBundle:
    """Several files of one category sold together at a discount."""

    category_id: str
    name: str
    file_ids: list[str]
    discount_percentage: int
    price: int
    description: str = ""
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Purchase:
    """A buyer's claim to have paid, pending manual verification."""

    item_type: ItemType
    item_id: str
    buyer_id: str
    payment_proof: str  # screenshot URL or reference
    status: PaymentStatus = PaymentStatus.pending
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if isinstance(self.item_type, str):
            self.item_type = ItemType(self.item_type)
        if isinstance(self.status, str):
            self.status = PaymentStatus(self.status)
