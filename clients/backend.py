"""
Эндпоинты веб-приложения, которыми пользуется бот.

Каждый GET идёт через QueryCache с ключом (chat_id, путь, *параметры).
Каждая мутация: один запрос через core.mutations.mutate() и сброс
зависимых ключей кеша. Повторов нет.

Использование:
    from clients.backend import BackendAPI

    backend = BackendAPI(api, cache)
    session = await backend.ensure_session(chat_id)
    await backend.save_strengths(chat_id, session['id'], payload)
"""

from datetime import date
from typing import Any, Optional

from clients.api import ApiClient, ApiError
from config import get_logger
from core.mutations import mutate
from core.query_cache import QueryCache

logger = get_logger(__name__)

# Пути API
AUTH_ME = "/api/auth/me"
AUTH_LOGOUT = "/api/auth/logout"
VISION_SESSIONS = "/api/vision/sessions"
VISION_CURRENT = "/api/vision/sessions/current"
VISION_HABITS = "/api/vision/habits"
LAUNCH_SESSIONS = "/api/product-launch/sessions"
DAILY_PROGRESS = "/api/daily-tasks/progress"
DAILY_COMPLETE = "/api/daily-tasks/complete"
ME_PROGRESS = "/api/me/progress"
PRAYER_PODS = "/api/prayer-pods"
MY_PODS = "/api/prayer-pods/my-pods"
SPARKS_FEATURED = "/api/sparks/featured"


class BackendAPI:
    """Типизированные обёртки над REST API веб-приложения."""

    def __init__(self, api: ApiClient, cache: QueryCache):
        self.api = api
        self.cache = cache

    async def _query(self, chat_id: int, path: str, *segments: Any,
                     query: Optional[dict] = None, force: bool = False) -> Any:
        """GET через кеш.

        ("/api/vision/sessions", 7, "wheel") → /api/vision/sessions/7/wheel,
        ключ кеша (chat_id, "/api/vision/sessions", 7, "wheel").
        """
        key = (chat_id, path, *segments)
        if query:
            key += (tuple(sorted(query.items())),)
        url = "/".join([path, *(str(s) for s in segments)])
        return await self.cache.fetch(key, lambda: self.api.get(chat_id, url, query), force=force)

    # ── Auth ───────────────────────────────────────────────

    async def me(self, chat_id: int) -> Optional[dict]:
        """Профиль текущего пользователя (None если сессии нет)."""
        try:
            body = await self._query(chat_id, AUTH_ME)
        except ApiError as e:
            if e.is_unauthorized:
                return None
            raise
        if isinstance(body, dict) and 'user' in body:
            return body['user']
        return body

    async def logout(self, chat_id: int) -> None:
        try:
            await self.api.post(chat_id, AUTH_LOGOUT)
        finally:
            self.api.forget(chat_id)
            self.cache.drop_chat(chat_id)

    # ── Vision session ─────────────────────────────────────

    async def current_session(self, chat_id: int) -> Optional[dict]:
        """Текущая vision-сессия или None."""
        try:
            return await self._query(chat_id, VISION_CURRENT)
        except ApiError as e:
            if e.is_not_found:
                return None
            raise

    async def ensure_session(self, chat_id: int) -> dict:
        """Текущая vision-сессия; создаётся, если её ещё нет."""
        session = await self.current_session(chat_id)
        if session:
            return session
        payload = {
            'seasonType': 'new_year',
            'seasonLabel': f"{date.today().year} Reset",
            'themeWord': '',
            'mode': 'faith',
        }
        session = await mutate(
            self.cache,
            self.api.post(chat_id, VISION_SESSIONS, payload),
            invalidate=[(chat_id, VISION_CURRENT)],
        )
        logger.info(f"[API] Создана vision-сессия {session.get('id') if session else None} для chat_id={chat_id}")
        return session

    async def _save_tool(self, chat_id: int, session_id: int, tool: str, payload: dict) -> Any:
        return await mutate(
            self.cache,
            self.api.put(chat_id, f"{VISION_SESSIONS}/{session_id}/{tool}", payload),
            invalidate=[(chat_id, VISION_SESSIONS, session_id, tool), (chat_id, VISION_CURRENT)],
        )

    async def save_eq(self, chat_id: int, session_id: int, payload: dict) -> Any:
        return await self._save_tool(chat_id, session_id, "eq", payload)

    async def save_strengths(self, chat_id: int, session_id: int, payload: dict) -> Any:
        return await self._save_tool(chat_id, session_id, "strengths", payload)

    async def save_style(self, chat_id: int, session_id: int, payload: dict) -> Any:
        return await self._save_tool(chat_id, session_id, "style", payload)

    async def get_wheel(self, chat_id: int, session_id: int) -> Optional[dict]:
        return await self._query(chat_id, VISION_SESSIONS, session_id, "wheel")

    async def save_wheel(self, chat_id: int, session_id: int, payload: dict) -> Any:
        return await self._save_tool(chat_id, session_id, "wheel", payload)

    async def analyze(self, chat_id: int, session_id: int, tool: str, data: dict) -> dict:
        """Рекомендации коуча по результатам инструмента."""
        result = await self.api.post(
            chat_id, f"{VISION_SESSIONS}/{session_id}/ai/analyze", {'tool': tool, 'data': data}
        )
        return result or {}

    # ── Habits ─────────────────────────────────────────────

    async def list_habits(self, chat_id: int, session_id: int) -> list[dict]:
        return await self._query(chat_id, VISION_SESSIONS, session_id, "habits") or []

    async def create_habit(self, chat_id: int, session_id: int, title: str,
                           frequency: str, target_per_week: int) -> Any:
        payload = {
            'sessionId': int(session_id),
            'title': title,
            'frequency': frequency,
            'targetPerWeek': target_per_week,
        }
        return await mutate(
            self.cache,
            self.api.post(chat_id, VISION_HABITS, payload),
            invalidate=[(chat_id, VISION_SESSIONS, session_id, "habits")],
        )

    async def delete_habit(self, chat_id: int, session_id: int, habit_id: int) -> Any:
        return await mutate(
            self.cache,
            self.api.delete(chat_id, f"{VISION_HABITS}/{habit_id}"),
            invalidate=[(chat_id, VISION_SESSIONS, session_id, "habits")],
        )

    async def habit_logs(self, chat_id: int, habit_id: int) -> list[dict]:
        return await self._query(chat_id, VISION_HABITS, habit_id, "logs") or []

    async def log_habit(self, chat_id: int, habit_id: int, day: str, completed: bool) -> Any:
        return await mutate(
            self.cache,
            self.api.post(chat_id, f"{VISION_HABITS}/{habit_id}/log", {'date': day, 'completed': completed}),
            invalidate=[(chat_id, VISION_HABITS, habit_id, "logs")],
        )

    # ── Product launch (SWOT) ──────────────────────────────

    async def launch_sessions(self, chat_id: int) -> list[dict]:
        return await self._query(chat_id, LAUNCH_SESSIONS) or []

    async def launch_session(self, chat_id: int, session_id: int) -> Optional[dict]:
        return await self._query(chat_id, LAUNCH_SESSIONS, session_id)

    async def save_swot(self, chat_id: int, session_id: int, swot: dict) -> Any:
        return await mutate(
            self.cache,
            self.api.put(chat_id, f"{LAUNCH_SESSIONS}/{session_id}/swot", swot),
            invalidate=[(chat_id, LAUNCH_SESSIONS, session_id)],
        )

    # ── Daily tasks ────────────────────────────────────────

    async def daily_progress(self, chat_id: int, day: str, force: bool = False) -> Optional[dict]:
        return await self._query(chat_id, DAILY_PROGRESS, query={"date": day}, force=force)

    async def complete_task(self, chat_id: int, task_id: str, points: int, day: str) -> Any:
        return await mutate(
            self.cache,
            self.api.post(chat_id, DAILY_COMPLETE, {'taskId': task_id, 'points': points, 'date': day}),
            invalidate=[(chat_id, DAILY_PROGRESS), (chat_id, ME_PROGRESS)],
        )

    async def me_progress(self, chat_id: int) -> Optional[dict]:
        return await self._query(chat_id, ME_PROGRESS)

    # ── Community ──────────────────────────────────────────

    async def prayer_pods(self, chat_id: int) -> list[dict]:
        return await self._query(chat_id, PRAYER_PODS) or []

    async def my_pods(self, chat_id: int) -> list[dict]:
        return await self._query(chat_id, MY_PODS) or []

    async def join_pod(self, chat_id: int, pod_id: int) -> Any:
        return await mutate(
            self.cache,
            self.api.post(chat_id, f"{PRAYER_PODS}/{pod_id}/join"),
            invalidate=[(chat_id, PRAYER_PODS), (chat_id, MY_PODS)],
        )

    async def featured_sparks(self, chat_id: int) -> list[dict]:
        return await self._query(chat_id, SPARKS_FEATURED) or []
