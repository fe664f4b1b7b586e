"""
Error Classifier: маппинг исключений → категория и текст для пользователя.

Две категории с разным поведением:
- unauthorized (HTTP 401): сессия истекла, пользователю отправляется
  ссылка на вход в веб-приложение;
- всё остальное: обычная ошибка (toast), текст подбирается по статусу.

403/404/400/429 влияют только на текст сообщения, не на поведение.
"""

import asyncio

import aiohttp

from clients.api import ApiError

UNAUTHORIZED = "unauthorized"
GENERIC = "generic"


# ═══════════════════════════════════════════════════════════
# PATTERNS
# ═══════════════════════════════════════════════════════════

# ORDER MATTERS: первое совпадение побеждает.
# match: статус ApiError (int) или класс исключения.
PATTERNS: list[dict] = [
    {"match": 401, "category": UNAUTHORIZED, "i18n_key": "errors.unauthorized", "redirect_login": True},
    {"match": 403, "category": GENERIC, "i18n_key": "errors.forbidden", "redirect_login": False},
    {"match": 404, "category": GENERIC, "i18n_key": "errors.not_found", "redirect_login": False},
    {"match": 400, "category": GENERIC, "i18n_key": "errors.validation", "redirect_login": False},
    {"match": 429, "category": GENERIC, "i18n_key": "errors.rate_limited", "redirect_login": False},
    {"match": asyncio.TimeoutError, "category": GENERIC, "i18n_key": "errors.timeout", "redirect_login": False},
    {"match": aiohttp.ClientError, "category": GENERIC, "i18n_key": "errors.network", "redirect_login": False},
]

FALLBACK = {"category": GENERIC, "i18n_key": "errors.generic", "redirect_login": False}

# Ошибки запроса, которые стейт показывает toast'ом, не уходя в common.error.
# asyncio.TimeoutError до 3.11 не совпадает со встроенным TimeoutError.
REQUEST_ERRORS = (ApiError, aiohttp.ClientError, asyncio.TimeoutError, OSError)


# ═══════════════════════════════════════════════════════════
# CLASSIFICATION
# ═══════════════════════════════════════════════════════════

def _matches(pattern, exc: BaseException) -> bool:
    if isinstance(pattern, int):
        return isinstance(exc, ApiError) and exc.status == pattern
    return isinstance(exc, pattern)


def classify_error(exc: BaseException) -> dict:
    """Классифицировать ошибку.

    Returns:
        {"category": str, "i18n_key": str, "redirect_login": bool}
    """
    for p in PATTERNS:
        if _matches(p["match"], exc):
            return {k: p[k] for k in ("category", "i18n_key", "redirect_login")}
    return dict(FALLBACK)


def is_unauthorized(exc: BaseException) -> bool:
    return classify_error(exc)["category"] == UNAUTHORIZED
