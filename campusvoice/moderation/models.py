"""Data models for the abuse detection cascade."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DetectionMethod(str, Enum):
    """Which stage of the cascade produced the evidence (informational only)."""

    word_list = "word_list"
    pattern = "pattern"
    ai = "ai"


class FallbackOutcome(str, Enum):
    """What happened to the external classifier step."""

    not_attempted = "not_attempted"  # local heuristics already matched
    clean = "clean"
    flagged = "flagged"
    unavailable = "unavailable"  # no classifier or no API key
    failed = "failed"  # classifier raised; treated as not abusive


@dataclass
class ClassifierVerdict:
    """Answer from an external abuse classifier."""

    is_abusive: bool
    detected_words: list[str] = field(default_factory=list)


@dataclass
class AbuseCheckResult:
    """Result of running the detection cascade over one text."""

    is_abusive: bool
    detected_words: list[str] = field(default_factory=list)
    detected_by: DetectionMethod = DetectionMethod.word_list
    fallback: FallbackOutcome = FallbackOutcome.not_attempted
    fallback_error: str = ""
