"""Complaint records, keyword clustering and urgency tiers."""

from campusvoice.complaints.models import (
    AbuseLog,
    ClusterGroup,
    Complaint,
    ComplaintStatus,
    Severity,
    Urgency,
    calculate_urgency,
)

__all__ = [
    "AbuseLog",
    "ClusterGroup",
    "Complaint",
    "ComplaintStatus",
    "Severity",
    "Urgency",
    "calculate_urgency",
]
