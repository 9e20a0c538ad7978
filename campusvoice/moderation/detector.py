"""Abuse detection cascade: word list, phrase pattern, external classifier.

The first two stages are local and always run. The classifier stage runs only
when they found nothing, and any failure there is logged and treated as "not
abusive" so a flaky model never blocks a submission.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from campusvoice.moderation.classifier import AbuseClassifier, ClassifierUnavailable
from campusvoice.moderation.models import AbuseCheckResult, DetectionMethod, FallbackOutcome
from campusvoice.moderation.wordlists import ABUSIVE_PHRASES, LEETSPEAK_MAP, PROFANITY_LIST

logger = logging.getLogger(__name__)

_NON_LETTERS = re.compile(r"[^a-z]")


def normalize_leetspeak(text: str) -> str:
    """Lowercase *text* and undo the common leetspeak substitutions."""
    normalized = text.lower()
    for leet, letter in LEETSPEAK_MAP.items():
        normalized = normalized.replace(leet, letter)
    return normalized


def ban_expiration(hours: int = 3, now: Optional[datetime] = None) -> datetime:
    """Return the moment a ban issued at *now* for *hours* runs out."""
    start = now or datetime.now(timezone.utc)
    return start + timedelta(hours=hours)


class AbuseDetector:
    """Runs the detection cascade over submitted text."""

    def __init__(self, classifier: Optional[AbuseClassifier] = None) -> None:
        self._classifier = classifier

    @staticmethod
    def _match_words(normalized: str) -> list[str]:
        hits: list[str] = []
        for token in normalized.split():
            cleaned = _NON_LETTERS.sub("", token)
            if not cleaned:
                continue
            for entry in PROFANITY_LIST:
                if entry in cleaned or cleaned in entry:
                    hits.append(token)
                    break
        return hits

    @staticmethod
    def _match_phrases(normalized: str) -> list[str]:
        return [phrase for phrase in ABUSIVE_PHRASES if phrase in normalized]

    def detect(self, text: str) -> AbuseCheckResult:
        """Classify *text*. Never raises for any input."""
        normalized = normalize_leetspeak(text or "")
        detected = self._match_words(normalized)
        method = DetectionMethod.word_list

        phrases = self._match_phrases(normalized)
        if phrases:
            detected.extend(phrases)
            method = DetectionMethod.pattern

        fallback = FallbackOutcome.not_attempted
        fallback_error = ""
        if not detected:
            if self._classifier is None:
                fallback = FallbackOutcome.unavailable
            else:
                try:
                    verdict = self._classifier.classify(text)
                except ClassifierUnavailable as exc:
                    fallback = FallbackOutcome.unavailable
                    fallback_error = str(exc)
                except Exception as exc:
                    logger.warning("AI abuse detection failed, using word list only: %s", exc)
                    fallback = FallbackOutcome.failed
                    fallback_error = str(exc) or type(exc).__name__
                else:
                    if verdict.is_abusive:
                        detected.extend(verdict.detected_words)
                        method = DetectionMethod.ai
                        fallback = FallbackOutcome.flagged
                    else:
                        fallback = FallbackOutcome.clean

        unique = list(dict.fromkeys(detected))
        if unique:
            logger.info("Abusive content detected by %s: %s", method.value, unique)
        return AbuseCheckResult(
            is_abusive=bool(unique),
            detected_words=unique,
            detected_by=method,
            fallback=fallback,
            fallback_error=fallback_error,
        )
