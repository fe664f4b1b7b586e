"""
Тесты toast-уведомлений и мутаций (core/notifications.py, core/mutations.py).
"""

import asyncio

import pytest

from clients.api import ApiError
from core.mutations import mutate
from core.notifications import Notifier
from core.query_cache import QueryCache


class FakeBot:
    def __init__(self):
        self.sent = []

    async def send_message(self, chat_id, text, **kwargs):
        self.sent.append((chat_id, text, kwargs))


class FakeCallback:
    def __init__(self):
        self.answers = []

    async def answer(self, text=None, show_alert=False):
        self.answers.append((text, show_alert))


class TestNotifier:

    def test_error_on_callback_is_alert(self, user):
        bot, callback = FakeBot(), FakeCallback()
        asyncio.run(Notifier(bot).report_error(user, ApiError(404, "missing"), callback))
        text, alert = callback.answers[0]
        assert alert is True
        assert "Not found" in text
        assert bot.sent == []

    def test_action_key_overrides_text(self, user):
        bot = FakeBot()
        asyncio.run(Notifier(bot).report_error(user, ApiError(500, "x"), action_key="errors.save_failed"))
        assert bot.sent[0][1] == "⚠️ Failed to save. Please try again."

    def test_unauthorized_sends_login_link(self, user):
        bot, callback = FakeBot(), FakeCallback()
        info = asyncio.run(Notifier(bot).report_error(user, ApiError(401, "x"), callback))
        assert info["redirect_login"]
        assert callback.answers == [(None, False)]
        chat_id, text, kwargs = bot.sent[0]
        button = kwargs["reply_markup"].inline_keyboard[0][0]
        assert button.url.endswith("/login")

    def test_success_message(self, user):
        bot = FakeBot()
        asyncio.run(Notifier(bot).success(user.chat_id, "Saved"))
        assert bot.sent == [(user.chat_id, "✅ Saved", {})]


class TestMutate:

    def test_success_invalidates(self):
        cache = QueryCache()
        cache.set((1, "/api/vision/habits"), [])

        async def request():
            return {"id": 7}

        result = asyncio.run(mutate(cache, request(), [(1, "/api/vision/habits")]))
        assert result == {"id": 7}
        assert cache.is_stale((1, "/api/vision/habits"))

    def test_failure_keeps_cache(self):
        cache = QueryCache()
        cache.set((1, "/api/vision/habits"), [])

        async def request():
            raise ApiError(500, "down")

        with pytest.raises(ApiError):
            asyncio.run(mutate(cache, request(), [(1, "/api/vision/habits")]))
        assert not cache.is_stale((1, "/api/vision/habits"))
