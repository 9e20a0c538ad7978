"""Tests for the notes marketplace."""

from campusvoice.auth.models import Role, User
from campusvoice.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from campusvoice.notes.models import ItemType, PaymentStatus
from campusvoice.notes.service import NotesService, bundle_price
from campusvoice.storage import MemoryStorage


def _setup():
    storage = MemoryStorage()
    admin = User(username="admin", email="admin@college.edu", password_hash="x", role=Role.admin)
    buyer = User(username="buyer", email="buyer@college.edu", password_hash="x")
    storage.add_user(admin)
    storage.add_user(buyer)
    return NotesService(storage), admin, buyer


def _expect(exc_type, fn, *args, **kwargs):
    try:
        fn(*args, **kwargs)
    except exc_type as e:
        return e
    assert False, f"expected {exc_type.__name__}"


def _catalogue(svc, admin):
    sem3 = svc.create_category(admin, "cs", 3, "Data Structures")
    a = svc.add_file(admin, sem3.id, "Trees", "notes/trees.pdf", 50)
    b = svc.add_file(admin, sem3.id, "Graphs", "notes/graphs.pdf", 70)
    return sem3, a, b


def test_categories():
    svc, admin, buyer = _setup()
    svc.create_category(admin, "CS", 3, "Data Structures")
    svc.create_category(admin, "ee", 1, "Circuits")

    assert [c.subject for c in svc.list_categories(branch="cs")] == ["Data Structures"]
    assert [c.subject for c in svc.list_categories(semester=1)] == ["Circuits"]
    _expect(ConflictError, svc.create_category, admin, "cs", 3, "data structures")
    _expect(ValidationError, svc.create_category, admin, "it", 3, "Networks")
    _expect(ValidationError, svc.create_category, admin, "cs", 9, "Networks")
    _expect(PermissionDeniedError, svc.create_category, buyer, "cs", 4, "Networks")


def test_first_semester_files_are_free():
    svc, admin, _ = _setup()
    sem1 = svc.create_category(admin, "me", 1, "Mechanics")
    f = svc.add_file(admin, sem1.id, "Statics", "notes/statics.pdf", 40)
    assert f.is_free
    assert f.price == 0


def test_add_file_validation():
    svc, admin, _ = _setup()
    sem3, _, _ = _catalogue(svc, admin)
    _expect(ValidationError, svc.add_file, admin, sem3.id, "Heaps", "notes/heaps.pdf", -1)
    _expect(NotFoundError, svc.add_file, admin, "missing", "Heaps", "notes/heaps.pdf", 10)


def test_bundle_price_applies_discount():
    svc, admin, _ = _setup()
    sem3, a, b = _catalogue(svc, admin)
    bundle = svc.create_bundle(admin, sem3.id, "Full DS", [a.id, b.id, a.id], discount_percentage=20)
    assert bundle.file_ids == [a.id, b.id]
    assert bundle.price == 96
    assert bundle_price([a, b], 0) == 120


def test_bundle_validation():
    svc, admin, _ = _setup()
    sem3, a, b = _catalogue(svc, admin)
    other = svc.create_category(admin, "cs", 4, "Algorithms")
    c = svc.add_file(admin, other.id, "Sorting", "notes/sort.pdf", 30)
    _expect(ValidationError, svc.create_bundle, admin, sem3.id, "One", [a.id])
    _expect(ValidationError, svc.create_bundle, admin, sem3.id, "Mixed", [a.id, c.id])
    _expect(ValidationError, svc.create_bundle, admin, sem3.id, "Too much", [a.id, b.id], discount_percentage=120)


def test_purchase_verification_grants_download():
    svc, admin, buyer = _setup()
    _, a, b = _catalogue(svc, admin)
    assert not svc.can_download(buyer, a.id)

    purchase = svc.request_purchase(buyer, "file", a.id, "UPI-12345")
    assert purchase.status == PaymentStatus.pending
    assert [p.id for p in svc.pending_purchases()] == [purchase.id]
    assert not svc.can_download(buyer, a.id)

    verified = svc.verify_purchase(admin, purchase.id)
    assert verified.status == PaymentStatus.verified
    assert verified.verified_by == admin.id
    assert svc.can_download(buyer, a.id)
    assert not svc.can_download(buyer, b.id)
    assert svc.pending_purchases() == []


def test_bundle_purchase_grants_member_files():
    svc, admin, buyer = _setup()
    sem3, a, b = _catalogue(svc, admin)
    bundle = svc.create_bundle(admin, sem3.id, "Full DS", [a.id, b.id], discount_percentage=10)
    purchase = svc.request_purchase(buyer, ItemType.bundle, bundle.id, "UPI-999")
    svc.verify_purchase(admin, purchase.id)
    assert svc.can_download(buyer, a.id)
    assert svc.can_download(buyer, b.id)


def test_duplicate_and_free_purchases():
    svc, admin, buyer = _setup()
    _, a, _ = _catalogue(svc, admin)
    sem1 = svc.create_category(admin, "cs", 1, "Programming")
    free = svc.add_file(admin, sem1.id, "Intro", "notes/intro.pdf", 0)

    assert svc.can_download(buyer, free.id)
    _expect(ValidationError, svc.request_purchase, buyer, "file", free.id, "UPI-1")
    _expect(ValidationError, svc.request_purchase, buyer, "file", a.id, "  ")
    _expect(ValidationError, svc.request_purchase, buyer, "course", a.id, "UPI-1")

    first = svc.request_purchase(buyer, "file", a.id, "UPI-1")
    _expect(ConflictError, svc.request_purchase, buyer, "file", a.id, "UPI-2")

    svc.reject_purchase(admin, first.id)
    retry = svc.request_purchase(buyer, "file", a.id, "UPI-3")
    assert retry.status == PaymentStatus.pending


def test_review_rules():
    svc, admin, buyer = _setup()
    _, a, _ = _catalogue(svc, admin)
    purchase = svc.request_purchase(buyer, "file", a.id, "UPI-1")
    _expect(PermissionDeniedError, svc.verify_purchase, buyer, purchase.id)
    svc.reject_purchase(admin, purchase.id)
    _expect(ConflictError, svc.verify_purchase, admin, purchase.id)
    _expect(NotFoundError, svc.verify_purchase, admin, "missing")


def test_uploader_and_admin_can_download():
    svc, admin, _ = _setup()
    _, a, _ = _catalogue(svc, admin)
    assert svc.can_download(admin, a.id)
