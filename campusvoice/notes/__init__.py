"""Notes marketplace."""

from campusvoice.notes.models import ItemType, NotesBundle, NotesCategory, NotesFile, PaymentStatus, Purchase

__all__ = ["ItemType", "NotesBundle", "NotesCategory", "NotesFile", "PaymentStatus", "Purchase"]
