"""
HTTP-клиент REST API веб-приложения.

Каждый Telegram-чат ходит в API со своей cookie-сессией (connect.sid),
поэтому у каждого chat_id свой aiohttp.ClientSession с отдельным CookieJar.

Формат ответов:
    {"ok": true, "data": ...}     → возвращается data
    {"ok": false, "error": {...}} → ApiError
    любой другой JSON             → возвращается как есть (pods, progress)

Изменяющие запросы (POST/PUT/PATCH/DELETE) несут заголовок X-CSRF-Token
со значением cookie csrf_token. Если cookie ещё нет, она запрашивается
через GET /api/auth/csrf. Повторов при ошибке нет: ошибка сразу уходит
вызывающему коду.

Использование:
    from clients.api import ApiClient

    api = ApiClient("https://app.example.com")
    api.set_session_cookie(chat_id, token)
    sessions = await api.get(chat_id, "/api/product-launch/sessions")
"""

from typing import Any, Optional

import aiohttp
from yarl import URL

from config import (
    API_BASE_URL,
    API_TIMEOUT,
    CSRF_COOKIE_NAME,
    CSRF_HEADER_NAME,
    SESSION_COOKIE_NAME,
    get_logger,
)

logger = get_logger(__name__)

SAFE_METHODS = ("GET", "HEAD", "OPTIONS")


class ApiError(Exception):
    """Ошибка API: не-2xx ответ или {"ok": false}."""

    def __init__(self, status: int, message: str, payload: Any = None):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.payload = payload

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    @property
    def is_forbidden(self) -> bool:
        return self.status == 403

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_validation(self) -> bool:
        return self.status == 400

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429


def _error_message(body: Any, fallback: str) -> str:
    """Текст ошибки из тела ответа: error.message → message → fallback."""
    if isinstance(body, dict):
        error = body.get('error')
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
        if isinstance(error, str) and error:
            return error
        if body.get('message'):
            return str(body['message'])
    if isinstance(body, str) and body.strip():
        return body.strip()[:300]
    return fallback


class ApiClient:
    """HTTP-клиент REST API с cookie-сессией на каждый чат."""

    def __init__(self, base_url: str = API_BASE_URL, timeout: float = API_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._sessions: dict[int, aiohttp.ClientSession] = {}

    def get_api_url(self, path: str) -> str:
        """Абсолютный URL для пути API ("/api/..." → "https://host/api/...")."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get_session(self, chat_id: int) -> aiohttp.ClientSession:
        session = self._sessions.get(chat_id)
        if session is None or session.closed:
            session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                cookie_jar=aiohttp.CookieJar(unsafe=True),
            )
            self._sessions[chat_id] = session
        return session

    # ── Cookies ────────────────────────────────────────────

    def set_session_cookie(self, chat_id: int, token: str) -> None:
        """Привязать чат к сессии веб-приложения."""
        session = self._get_session(chat_id)
        session.cookie_jar.update_cookies({SESSION_COOKIE_NAME: token}, URL(self.base_url))
        logger.info(f"[API] Сессия привязана к chat_id={chat_id}")

    def _cookie(self, chat_id: int, name: str) -> Optional[str]:
        session = self._sessions.get(chat_id)
        if session is None:
            return None
        morsel = session.cookie_jar.filter_cookies(URL(self.base_url)).get(name)
        return morsel.value if morsel else None

    def has_session(self, chat_id: int) -> bool:
        return bool(self._cookie(chat_id, SESSION_COOKIE_NAME))

    def forget(self, chat_id: int) -> None:
        """Сбросить cookie чата (logout)."""
        session = self._sessions.get(chat_id)
        if session is not None:
            session.cookie_jar.clear()

    async def _csrf_token(self, chat_id: int) -> Optional[str]:
        token = self._cookie(chat_id, CSRF_COOKIE_NAME)
        if token:
            return token
        body = await self.request(chat_id, "GET", "/api/auth/csrf")
        token = self._cookie(chat_id, CSRF_COOKIE_NAME)
        if not token and isinstance(body, dict):
            token = body.get('token')
        return token

    # ── Requests ───────────────────────────────────────────

    async def request(self, chat_id: int, method: str, path: str,
                      json: Any = None, params: Optional[dict] = None) -> Any:
        """
        Выполнить запрос к API и развернуть конверт ответа.

        Raises:
            ApiError: не-2xx ответ или {"ok": false}
            aiohttp.ClientError: сетевые ошибки
        """
        method = method.upper()
        session = self._get_session(chat_id)
        headers = {"Accept": "application/json"}

        if method not in SAFE_METHODS:
            token = await self._csrf_token(chat_id)
            if token:
                headers[CSRF_HEADER_NAME] = token

        url = self.get_api_url(path)
        async with session.request(method, url, json=json, params=params, headers=headers) as resp:
            body = await self._read_body(resp)

            if resp.status >= 400:
                message = _error_message(body, resp.reason or f"HTTP {resp.status}")
                logger.warning(f"[API] {method} {path} → {resp.status}: {message}")
                raise ApiError(resp.status, message, body)

        if resp.status == 204 or body is None:
            return None

        if isinstance(body, dict) and 'ok' in body:
            if not body['ok']:
                message = _error_message(body, "Request failed")
                logger.warning(f"[API] {method} {path} → ok=false: {message}")
                raise ApiError(resp.status, message, body)
            return body.get('data')

        return body

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> Any:
        if resp.status == 204:
            return None
        if resp.content_type == "application/json":
            return await resp.json()
        text = await resp.text()
        return text or None

    async def get(self, chat_id: int, path: str, params: Optional[dict] = None) -> Any:
        return await self.request(chat_id, "GET", path, params=params)

    async def post(self, chat_id: int, path: str, json: Any = None) -> Any:
        return await self.request(chat_id, "POST", path, json=json)

    async def put(self, chat_id: int, path: str, json: Any = None) -> Any:
        return await self.request(chat_id, "PUT", path, json=json)

    async def delete(self, chat_id: int, path: str) -> Any:
        return await self.request(chat_id, "DELETE", path)

    async def close(self) -> None:
        """Закрыть все HTTP-сессии."""
        for session in self._sessions.values():
            if not session.closed:
                await session.close()
        self._sessions.clear()
