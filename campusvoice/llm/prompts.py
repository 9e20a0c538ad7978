"""Prompt templates for the LLM collaborators.

Each template uses ``{placeholder}`` syntax for substitution via
``str.format()``.
"""

# ---------------------------------------------------------------------------
# Complaint analysis
# ---------------------------------------------------------------------------

ANALYSIS_SYSTEM_PROMPT = """\
You are an assistant that analyzes student complaints for a campus \
complaint board. You answer with a single JSON object and nothing else.
"""

ANALYSIS_PROMPT = """\
Given the complaint below, provide:
1. A brief summary (max 100 characters)
2. A severity rating: good, average, poor, bad, worst, or critical
3. Up to 5 keywords for clustering similar complaints

Respond in this exact JSON format:
{{"summary": "Brief summary here", "severity": "average", "keywords": ["keyword1", "keyword2"]}}

Complaint:
{text}
"""

# ---------------------------------------------------------------------------
# Abuse classification
# ---------------------------------------------------------------------------

ABUSE_SYSTEM_PROMPT = """\
You are a content moderator for a student complaint board. Complaints may be \
written in English, Hindi, Urdu or a mix of them, sometimes with leetspeak. \
Criticism of facilities or staff is allowed; insults, slurs, threats and \
profanity are not. You answer with a single JSON object and nothing else.
"""

ABUSE_PROMPT = """\
Decide whether the text below is abusive or inappropriate.

Respond in this exact JSON format:
{{"isAbusive": false, "detectedWords": []}}

List the offending words or phrases in "detectedWords" when "isAbusive" is true.

Text:
{text}
"""
