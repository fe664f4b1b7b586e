"""
Локализация бота (en, ru).
"""

from .loader import (
    I18n,
    get_i18n,
    t,
    detect_language,
    get_language_name,
    SUPPORTED_LANGUAGES,
    BASE_LANGUAGES,
    FALLBACK_LANGUAGE,
)

__all__ = [
    'I18n',
    'get_i18n',
    't',
    'detect_language',
    'get_language_name',
    'SUPPORTED_LANGUAGES',
    'BASE_LANGUAGES',
    'FALLBACK_LANGUAGE',
]
