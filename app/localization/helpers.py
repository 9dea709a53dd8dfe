"""Localization helper functions."""
from __future__ import annotations

from typing import Optional
from fastapi import Request

from app.config import settings
from app.localization.translations import TRANSLATIONS


def get_locale_from_request(request: Optional[Request] = None, default: Optional[str] = None) -> str:
    """Extract locale from request Accept-Language header or return default."""
    if default is None:
        default = settings.DEFAULT_LOCALE
    if request is None:
        return default

    accept_language = request.headers.get("Accept-Language", "")
    if not accept_language:
        return default

    # Parse Accept-Language header (e.g., "es-ES,es;q=0.9,en;q=0.8")
    # We'll take the first language code
    languages = accept_language.split(",")
    if languages:
        first_lang = languages[0].split(";")[0].strip().lower()
        if first_lang.startswith("es"):
            return "es"
        elif first_lang.startswith("en"):
            return "en"

    return default


def get_translation(key: str, locale: Optional[str] = None, **kwargs) -> str:
    """Get translated message for a key, with optional formatting."""
    if locale is None:
        locale = settings.DEFAULT_LOCALE
    translations = TRANSLATIONS.get(locale.lower(), TRANSLATIONS["en"])
    message = translations.get(key) or TRANSLATIONS["en"].get(key, key)

    # Format message with kwargs if provided
    if kwargs:
        try:
            message = message.format(**kwargs)
        except (KeyError, ValueError, IndexError):
            # If formatting fails, return message as-is
            pass

    return message

