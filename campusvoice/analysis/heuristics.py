"""Deterministic complaint analysis used when no model is available."""

from __future__ import annotations

import re
from collections import Counter

from campusvoice.complaints.models import Severity

MAX_SUMMARY_LENGTH = 100
MAX_KEYWORDS = 5

STOP_WORDS: frozenset[str] = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "dare",
    "ought", "used", "to", "of", "in", "for", "on", "with", "at", "by",
    "from", "as", "into", "through", "during", "before", "after", "above",
    "below", "between", "under", "again", "further", "then", "once", "here",
    "there", "when", "where", "why", "how", "all", "each", "few", "more",
    "most", "other", "some", "such", "no", "nor", "not", "only", "own",
    "same", "so", "than", "too", "very", "just", "and", "but", "if", "or",
    "because", "until", "while", "this", "that", "these", "those",
    "i", "me", "my", "myself", "we", "our", "ours", "ourselves", "you",
    "your", "yours", "yourself", "yourselves", "he", "him", "his", "himself",
    "she", "her", "hers", "herself", "it", "its", "itself", "they", "them",
    "their", "theirs", "themselves", "what", "which", "who", "whom",
})

# Checked in order; the first tier with a hit wins
SEVERITY_MARKERS: tuple[tuple[Severity, tuple[str, ...]], ...] = (
    (Severity.critical, ("emergency", "danger", "life-threatening", "urgent", "critical", "immediately")),
    (Severity.worst, ("broken", "failure", "unusable", "blocked", "shutdown")),
    (Severity.bad, ("problem", "issue", "not working", "failed", "error")),
    (Severity.poor, ("slow", "delay", "inconvenient", "frustrating")),
    (Severity.average, ("could be better", "improvement", "suggestion")),
)

_NOT_LETTER_OR_SPACE = re.compile(r"[^a-z\s]")
_SENTENCE_END = re.compile(r"[.!?]+")


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """Most frequent content words of *text*; ties keep first appearance."""
    words = [
        word
        for word in _NOT_LETTER_OR_SPACE.sub("", text.lower()).split()
        if len(word) > 3 and word not in STOP_WORDS
    ]
    return [word for word, _ in Counter(words).most_common(limit)]


def summarize(text: str) -> str:
    """First two sentences of *text*, capped at :data:`MAX_SUMMARY_LENGTH`."""
    sentences = [s.strip() for s in _SENTENCE_END.split(text) if s.strip()]
    if len(sentences) <= 2:
        return text.strip()[:MAX_SUMMARY_LENGTH]
    return ". ".join(sentences[:2])[: MAX_SUMMARY_LENGTH - 3] + "..."


def determine_severity(text: str) -> Severity:
    lowered = text.lower()
    for severity, markers in SEVERITY_MARKERS:
        if any(marker in lowered for marker in markers):
            return severity
    return Severity.average
