"""LLM client wrapper.

A thin layer over the Anthropic SDK used by the complaint analyzer and the
abuse classifier. When no API key is configured the client reports itself as
unconfigured and :meth:`LLMClient.complete` raises :class:`LLMNotConfigured`;
callers decide how to degrade.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Any

import anthropic

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-3-5-20241022"


class LLMNotConfigured(RuntimeError):
    """Raised when a completion is requested without an API key."""


@dataclass
class LLMResponse:
    """Structured response from an LLM call."""

    content: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0


class LLMClient:
    """Thin wrapper around the Anthropic Python SDK.

    Parameters
    ----------
    model : str
        Model identifier to use for completions.
    api_key : str | None
        Anthropic API key.  Falls back to the ``ANTHROPIC_API_KEY``
        environment variable when *None*.
    timeout : float
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        timeout: float = 20.0,
    ) -> None:
        self.model = model
        self.api_key = api_key if api_key is not None else os.environ.get("ANTHROPIC_API_KEY", "")
        self._configured = bool(self.api_key)

        if self._configured:
            self._client = anthropic.Anthropic(api_key=self.api_key, timeout=timeout, max_retries=1)
        else:
            self._client = None  # type: ignore[assignment]

    @property
    def configured(self) -> bool:
        """Return *True* if an API key is available."""
        return self._configured

    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 300,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """Send a completion request and return an :class:`LLMResponse`.

        SDK errors (timeouts, HTTP failures) propagate unchanged.
        """
        if not self._configured:
            raise LLMNotConfigured("LLM not configured. Set ANTHROPIC_API_KEY.")

        kwargs: dict = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        start = time.monotonic()
        response = self._client.messages.create(**kwargs)
        latency_ms = int((time.monotonic() - start) * 1000)

        content = response.content[0].text if response.content else ""
        logger.debug("LLM call to %s took %d ms", self.model, latency_ms)
        return LLMResponse(
            content=content,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            latency_ms=latency_ms,
        )


def extract_json_object(raw: str) -> dict[str, Any]:
    """Pull the first JSON object out of raw model output.

    Strips markdown fences and any prose around the outermost braces.
    Raises ``ValueError`` when no object can be decoded.
    """
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
    if text.endswith("```"):
        text = text[: text.rfind("```")]

    match = re.search(r"\{.*\}", text, re.DOTALL)
    if not match:
        raise ValueError("Model output does not contain a JSON object")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Model output is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Model output is not a JSON object")
    return parsed
