"""External abuse classifiers used as the last stage of the cascade."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from campusvoice.llm.client import LLMClient, extract_json_object
from campusvoice.llm.prompts import ABUSE_PROMPT, ABUSE_SYSTEM_PROMPT
from campusvoice.moderation.models import ClassifierVerdict

logger = logging.getLogger(__name__)


class ClassifierUnavailable(RuntimeError):
    """The classifier cannot be reached or is not configured."""


class AbuseClassifier(ABC):
    """Decides whether a text is abusive. Implementations may raise freely."""

    @abstractmethod
    def classify(self, text: str) -> ClassifierVerdict:
        ...


class LLMAbuseClassifier(AbuseClassifier):
    """Asks the LLM for an ``{"isAbusive", "detectedWords"}`` verdict."""

    def __init__(self, client: LLMClient) -> None:
        self._client = client

    def classify(self, text: str) -> ClassifierVerdict:
        if not self._client.configured:
            raise ClassifierUnavailable("LLM not configured")

        resp = self._client.complete(
            ABUSE_PROMPT.format(text=text),
            system_prompt=ABUSE_SYSTEM_PROMPT,
            max_tokens=150,
        )
        data = extract_json_object(resp.content)

        flagged = data.get("isAbusive")
        if not isinstance(flagged, bool):
            raise ValueError(f"isAbusive must be a boolean, got {flagged!r}")
        words = data.get("detectedWords") or []
        if not isinstance(words, list):
            raise ValueError("detectedWords must be a list")

        return ClassifierVerdict(
            is_abusive=flagged,
            detected_words=[str(w) for w in words if str(w).strip()],
        )
