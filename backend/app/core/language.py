from typing import Any

SUPPORTED_LANGUAGES = ("pt-BR", "en")
DEFAULT_LANGUAGE = "pt-BR"

INVALID_LANGUAGE_MESSAGE = (
    "Invalid language parameter. Only 'pt-BR' and 'en' are supported."
)


class UnsupportedLanguageError(ValueError):
    pass


def normalize_language(value: Any) -> str:
    if not value or not isinstance(value, str):
        return DEFAULT_LANGUAGE
    normalized = value.strip()
    return normalized if normalized in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def resolve_language(requested: Any, user_language: str | None) -> str:
    """An explicit language must be supported; otherwise the user's language wins."""
    requested_clean = requested.strip() if isinstance(requested, str) else None
    if requested_clean:
        if requested_clean not in SUPPORTED_LANGUAGES:
            raise UnsupportedLanguageError(INVALID_LANGUAGE_MESSAGE)
        return requested_clean
    return normalize_language(user_language)


def localized(language: str, pt: str, en: str) -> str:
    return en if language == "en" else pt
