"""Complaint analysis: summary, severity and clustering keywords.

The analyzer prefers the LLM and falls back to the local heuristics whenever
the model is not configured, errors out, or answers with something unusable.
:meth:`ComplaintAnalyzer.analyze` never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from campusvoice.analysis.heuristics import (
    MAX_KEYWORDS,
    MAX_SUMMARY_LENGTH,
    determine_severity,
    extract_keywords,
    summarize,
)
from campusvoice.complaints.models import Severity
from campusvoice.llm.client import LLMClient, extract_json_object
from campusvoice.llm.prompts import ANALYSIS_PROMPT, ANALYSIS_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    summary: str
    severity: Severity
    keywords: list[str] = field(default_factory=list)
    source: str = "heuristic"  # "llm" | "heuristic"
    fallback_reason: str = ""


def heuristic_analysis(text: str, reason: str = "") -> AnalysisResult:
    """Analyse *text* with the local heuristics only."""
    return AnalysisResult(
        summary=summarize(text),
        severity=determine_severity(text),
        keywords=extract_keywords(text),
        source="heuristic",
        fallback_reason=reason,
    )


class ComplaintAnalyzer:
    """Analysis collaborator for the submission workflow."""

    def __init__(self, client: Optional[LLMClient] = None) -> None:
        self._client = client

    def analyze(self, text: str) -> AnalysisResult:
        if self._client is None or not self._client.configured:
            return heuristic_analysis(text, "llm not configured")

        try:
            resp = self._client.complete(
                ANALYSIS_PROMPT.format(text=text),
                system_prompt=ANALYSIS_SYSTEM_PROMPT,
                max_tokens=200,
            )
            data = extract_json_object(resp.content)
        except Exception as exc:
            logger.warning("LLM analysis failed, using fallback: %s", exc)
            return heuristic_analysis(text, str(exc) or type(exc).__name__)

        return self._merge(text, data)

    @staticmethod
    def _merge(text: str, data: dict[str, Any]) -> AnalysisResult:
        """Fill gaps in a model answer from the heuristics."""
        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            summary = summarize(text)

        try:
            severity = Severity(str(data.get("severity", "")).strip().lower())
        except ValueError:
            severity = determine_severity(text)

        raw_keywords = data.get("keywords")
        keywords: list[str] = []
        if isinstance(raw_keywords, list):
            keywords = [str(k).strip() for k in raw_keywords if str(k).strip()]
        if not keywords:
            keywords = extract_keywords(text)

        return AnalysisResult(
            summary=summary.strip()[:MAX_SUMMARY_LENGTH],
            severity=severity,
            keywords=keywords[:MAX_KEYWORDS],
            source="llm",
        )
