"""Languages recommendations can be generated in."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    native_name: str
    flag: str


SUPPORTED_LANGUAGES: tuple[Language, ...] = (
    Language("en", "English", "English", "\U0001F1FA\U0001F1F8"),
    Language("fr", "French", "Français", "\U0001F1EB\U0001F1F7"),
    Language("de", "German", "Deutsch", "\U0001F1E9\U0001F1EA"),
    Language("es", "Spanish", "Español", "\U0001F1EA\U0001F1F8"),
    Language("it", "Italian", "Italiano", "\U0001F1EE\U0001F1F9"),
    Language("ja", "Japanese", "日本語", "\U0001F1EF\U0001F1F5"),
    Language("pt", "Portuguese", "Português", "\U0001F1F5\U0001F1F9"),
    Language("nl", "Dutch", "Nederlands", "\U0001F1F3\U0001F1F1"),
    Language("pl", "Polish", "Polski", "\U0001F1F5\U0001F1F1"),
)

DEFAULT_LANGUAGE_CODE = "en"

_BY_CODE = {language.code: language for language in SUPPORTED_LANGUAGES}


def get_language_by_code(code: Optional[str]) -> Optional[Language]:
    return _BY_CODE.get(code or "")


def get_default_language() -> Language:
    return _BY_CODE.get(DEFAULT_LANGUAGE_CODE, SUPPORTED_LANGUAGES[0])


def is_language_supported(code: Optional[str]) -> bool:
    return (code or "") in _BY_CODE


def get_supported_language_codes() -> list[str]:
    return [language.code for language in SUPPORTED_LANGUAGES]
