"""
Клиенты для внешних API.

Содержит:
- api.py: ApiClient: HTTP-клиент REST API веб-приложения (cookie-сессия на чат)
- backend.py: BackendAPI: эндпоинты приложения поверх ApiClient и QueryCache
"""

from .api import ApiClient, ApiError
from .backend import BackendAPI

__all__ = [
    'ApiClient',
    'ApiError',
    'BackendAPI',
]
