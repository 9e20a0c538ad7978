"""Abuse detection for submitted complaint text."""

from campusvoice.moderation.classifier import AbuseClassifier, ClassifierUnavailable, LLMAbuseClassifier
from campusvoice.moderation.detector import AbuseDetector, ban_expiration, normalize_leetspeak
from campusvoice.moderation.models import AbuseCheckResult, ClassifierVerdict, DetectionMethod, FallbackOutcome
from campusvoice.moderation.wordlists import profanity_list_sizes

__all__ = [
    "AbuseCheckResult",
    "AbuseClassifier",
    "AbuseDetector",
    "ClassifierUnavailable",
    "ClassifierVerdict",
    "DetectionMethod",
    "FallbackOutcome",
    "LLMAbuseClassifier",
    "ban_expiration",
    "normalize_leetspeak",
    "profanity_list_sizes",
]
