"""Blocklists used by the word-list and phrase-pattern stages."""

from __future__ import annotations

ENGLISH_PROFANITY: tuple[str, ...] = (
    "fuck", "shit", "ass", "bitch", "damn", "hell", "crap",
    "bastard", "dick", "pussy", "cock", "cunt", "whore",
    "slut", "fag", "nigger", "retard", "idiot", "stupid",
    "dumb", "moron", "asshole", "bullshit", "motherfucker",
)

# Hindi / Urdu, romanised
HINDI_PROFANITY: tuple[str, ...] = (
    "chutiya", "chutia", "madarchod", "madar chod", "bhosdike",
    "bhenchod", "behen chod", "gandu", "gaandu", "lauda", "lund",
    "chut", "gaand", "bhosda", "randi", "kutta", "kuttiya",
    "saala", "sala", "harami", "kamina", "ullu", "bewakoof",
)

# Mixed-language threats and insults, matched against the whole text
ABUSIVE_PHRASES: tuple[str, ...] = (
    "number kat", "marks kat", "fail kar", "tod denge", "maar denge",
    "fuck you", "fuck off", "screw you", "go to hell", "die",
)

PROFANITY_LIST: tuple[str, ...] = ENGLISH_PROFANITY + HINDI_PROFANITY + ABUSIVE_PHRASES

LEETSPEAK_MAP: dict[str, str] = {
    "0": "o",
    "1": "i",
    "3": "e",
    "4": "a",
    "5": "s",
    "7": "t",
    "@": "a",
    "$": "s",
    "!": "i",
    "*": "a",
}


def profanity_list_sizes() -> dict[str, int]:
    """Return the size of each list and of the combined list."""
    return {
        "english": len(ENGLISH_PROFANITY),
        "hindi": len(HINDI_PROFANITY),
        "phrases": len(ABUSIVE_PHRASES),
        "total": len(PROFANITY_LIST),
    }
