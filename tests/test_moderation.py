"""Tests for the abuse detection cascade."""

from datetime import datetime, timedelta, timezone

from campusvoice.llm import LLMResponse
from campusvoice.moderation import (
    AbuseClassifier,
    AbuseDetector,
    ClassifierUnavailable,
    ClassifierVerdict,
    DetectionMethod,
    FallbackOutcome,
    LLMAbuseClassifier,
    ban_expiration,
    normalize_leetspeak,
    profanity_list_sizes,
)

CLEAN_TEXT = "Library wifi disconnects during exams"


class StaticClassifier(AbuseClassifier):
    def __init__(self, verdict=None, error=None):
        self.verdict = verdict
        self.error = error
        self.calls = []

    def classify(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.verdict


class FakeLLM:
    def __init__(self, content, configured=True):
        self.content = content
        self.configured = configured

    def complete(self, prompt, system_prompt=None, max_tokens=300, temperature=0.0):
        return LLMResponse(content=self.content, model="fake")


# ── Normalization ────────────────────────────────────────────────────


def test_normalize_leetspeak():
    assert normalize_leetspeak("Sh1t $tuff") == "shit stuff"
    assert normalize_leetspeak("@55") == "ass"


def test_normalize_is_idempotent():
    for text in ("H3ll0 W0rld!", "plain text", "f*ck", ""):
        once = normalize_leetspeak(text)
        assert normalize_leetspeak(once) == once


def test_profanity_list_sizes():
    sizes = profanity_list_sizes()
    assert sizes["total"] == sizes["english"] + sizes["hindi"] + sizes["phrases"]
    assert sizes["english"] > 0 and sizes["hindi"] > 0


# ── Word list and phrases ────────────────────────────────────────────


def test_word_list_flags_profanity():
    result = AbuseDetector().detect("The fuck is this wifi")
    assert result.is_abusive
    assert result.detected_by == DetectionMethod.word_list
    assert "fuck" in result.detected_words


def test_word_list_matches_extended_token():
    result = AbuseDetector().detect("fuckk")
    assert result.is_abusive
    assert result.detected_words == ["fuckk"]


def test_short_token_contained_in_entry_matches():
    result = AbuseDetector().detect("as")
    assert result.is_abusive
    assert result.detected_words == ["as"]


def test_substring_containment_false_positive():
    result = AbuseDetector().detect("class assignment")
    assert result.is_abusive
    assert result.detected_words == ["class", "assignment"]


def test_leetspeak_is_detected():
    result = AbuseDetector().detect("this is sh1t")
    assert result.is_abusive
    assert "sh1t" not in result.detected_words
    assert "shit" in result.detected_words


def test_evidence_keeps_punctuation_of_token():
    result = AbuseDetector().detect("idiot??")
    assert result.detected_words == ["idiot??"]


def test_phrase_pattern_marks_method():
    result = AbuseDetector().detect("sir will tod denge")
    assert result.is_abusive
    assert result.detected_by == DetectionMethod.pattern
    assert result.detected_words == ["tod", "tod denge"]


def test_detected_words_are_unique():
    result = AbuseDetector().detect("fuck you fuck you")
    assert result.is_abusive
    assert result.detected_by == DetectionMethod.pattern
    assert result.detected_words == ["fuck", "you", "fuck you"]


def test_empty_and_whitespace_are_clean():
    for text in ("", "   ", "!!! ???"):
        result = AbuseDetector().detect(text)
        assert not result.is_abusive
        assert result.detected_words == []


# ── Classifier fallback ──────────────────────────────────────────────


def test_clean_text_without_classifier():
    result = AbuseDetector().detect(CLEAN_TEXT)
    assert not result.is_abusive
    assert result.fallback == FallbackOutcome.unavailable


def test_classifier_not_consulted_when_word_list_hits():
    classifier = StaticClassifier(ClassifierVerdict(is_abusive=False))
    result = AbuseDetector(classifier).detect("The fuck is this wifi")
    assert result.is_abusive
    assert result.fallback == FallbackOutcome.not_attempted
    assert classifier.calls == []


def test_classifier_clean_verdict():
    classifier = StaticClassifier(ClassifierVerdict(is_abusive=False))
    result = AbuseDetector(classifier).detect(CLEAN_TEXT)
    assert not result.is_abusive
    assert result.fallback == FallbackOutcome.clean
    assert classifier.calls == [CLEAN_TEXT]


def test_classifier_flags_text():
    classifier = StaticClassifier(ClassifierVerdict(is_abusive=True, detected_words=["threat", "threat"]))
    result = AbuseDetector(classifier).detect(CLEAN_TEXT)
    assert result.is_abusive
    assert result.detected_by == DetectionMethod.ai
    assert result.fallback == FallbackOutcome.flagged
    assert result.detected_words == ["threat"]


def test_classifier_abusive_without_words_is_not_abusive():
    classifier = StaticClassifier(ClassifierVerdict(is_abusive=True, detected_words=[]))
    result = AbuseDetector(classifier).detect(CLEAN_TEXT)
    assert not result.is_abusive


def test_classifier_failure_degrades_to_clean():
    classifier = StaticClassifier(error=RuntimeError("timeout"))
    result = AbuseDetector(classifier).detect(CLEAN_TEXT)
    assert not result.is_abusive
    assert result.fallback == FallbackOutcome.failed
    assert result.fallback_error == "timeout"


def test_classifier_unavailable():
    classifier = StaticClassifier(error=ClassifierUnavailable("LLM not configured"))
    result = AbuseDetector(classifier).detect(CLEAN_TEXT)
    assert not result.is_abusive
    assert result.fallback == FallbackOutcome.unavailable


# ── LLM classifier ───────────────────────────────────────────────────


def test_llm_classifier_parses_verdict():
    llm = FakeLLM('```json\n{"isAbusive": true, "detectedWords": ["kill"]}\n```')
    verdict = LLMAbuseClassifier(llm).classify("text")
    assert verdict.is_abusive
    assert verdict.detected_words == ["kill"]


def test_llm_classifier_unconfigured():
    llm = FakeLLM("{}", configured=False)
    try:
        LLMAbuseClassifier(llm).classify("text")
        assert False, "expected ClassifierUnavailable"
    except ClassifierUnavailable:
        pass


def test_llm_classifier_rejects_bad_shape():
    llm = FakeLLM('{"isAbusive": "yes"}')
    result = AbuseDetector(LLMAbuseClassifier(llm)).detect(CLEAN_TEXT)
    assert not result.is_abusive
    assert result.fallback == FallbackOutcome.failed


# ── Bans ─────────────────────────────────────────────────────────────


def test_ban_expiration_default_and_explicit():
    now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert ban_expiration(now=now) == now + timedelta(hours=3)
    assert ban_expiration(48, now=now) == now + timedelta(hours=48)
