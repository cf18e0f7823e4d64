"""Generation Prompts — system prompts and voice settings for derived artifacts.

Invariants:
    - Breakdown prompt depends on device variant (desktop tables vs. mobile lists) and language
    - Phonetic prompt is Japanese furigana annotation; text is substituted, never concatenated raw
    - Voice selection is per language code, with a default voice for everything else
    - PURE: constants and string formatting only

Design Decisions:
    - Prompts kept in Python (not .txt files): versioned with the code, importable in tests
"""

from dataclasses import dataclass

from kondo.core.domain_types import ArtifactVariant

_LANGUAGE_NAMES: dict[str, str] = {
    "ja": "Japanese",
    "ko": "Korean",
    "es": "Spanish",
    "ar": "Arabic",
    "zh": "Chinese",
    "fr": "French",
    "de": "German",
}

_BREAKDOWN_BASE = (
    "You are a {language} language tutor. The user gives you a {language} "
    "expression followed by the original sentence they wanted to say. "
    "Break the expression down word by word: give each word's reading, "
    "meaning, part of speech and any grammar point it illustrates. "
    "Finish with one short note on nuance or register. "
    "Answer in English."
)

_DESKTOP_FORMAT = (
    " Format the word-by-word section as a Markdown table with the columns "
    "Word | Reading | Meaning | Notes."
)

_MOBILE_FORMAT = (
    " The reader is on a phone: do NOT use tables. Use a compact bulleted "
    "list, one bullet per word, and keep each bullet under 80 characters."
)

PHONETIC_PROMPT = (
    "Add furigana to the following Japanese text. Wrap every kanji word in "
    "<ruby> tags with its hiragana reading in <rt>, for example "
    "<ruby>日本語<rt>にほんご</rt></ruby>. Leave kana, punctuation and "
    "Latin characters unchanged. Return only the annotated text.\n\n"
    "{japanese_text}"
)


def language_name(language_code: str | None) -> str:
    """Human language name for prompts; falls back to the code itself."""
    if not language_code:
        return "target"
    return _LANGUAGE_NAMES.get(language_code, language_code)


def breakdown_system_prompt(
    variant: ArtifactVariant, language_code: str | None,
) -> str:
    """System prompt for the desktop or mobile breakdown."""
    base = _BREAKDOWN_BASE.format(language=language_name(language_code))
    if variant == ArtifactVariant.BREAKDOWN_MOBILE:
        return base + _MOBILE_FORMAT
    return base + _DESKTOP_FORMAT


def phonetic_prompt(japanese_text: str) -> str:
    """User prompt asking for furigana annotation of `japanese_text`."""
    return PHONETIC_PROMPT.format(japanese_text=japanese_text)


# ─── Speech ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class VoiceParams:
    """Voice selection for speech synthesis."""
    voice_id: str
    speed: float
    stability: float = 0.50
    similarity_boost: float = 0.75


_VOICES: dict[str, str] = {
    "ja": "b34JylakFZPlGS0BnwyY",
    "ko": "z6Kj0hecH20CdetSElRT",
    "es": "2Lb1en5ujrODDIqmp7F3",
    "ar": "21m00Tcm4TlvDq8ikWAM",
    "zh": "GgmlugwQ4LYXBbEXENWm",
}
_DEFAULT_VOICE = "pNInz6obpgDQGcFmaJgB"


def voice_for_language(language_code: str | None) -> VoiceParams:
    """Voice and speaking rate for a language (Japanese is read slightly faster)."""
    speed = 0.75 if language_code == "ja" else 0.70
    return VoiceParams(
        voice_id=_VOICES.get(language_code or "", _DEFAULT_VOICE),
        speed=speed,
    )
