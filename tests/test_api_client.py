"""
Тесты HTTP-клиента API (clients/api.py) против локального aiohttp-сервера.
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from clients.api import ApiClient, ApiError

CHAT_ID = 42


def _app() -> web.Application:
    async def me(request):
        if request.cookies.get("connect.sid") != "token-1":
            return web.json_response({"ok": False, "error": {"message": "Not authenticated"}}, status=401)
        return web.json_response({"ok": True, "data": {"id": "u1", "firstName": "Ann"}})

    async def csrf(request):
        response = web.json_response({"token": "csrf-abc"})
        response.set_cookie("csrf_token", "csrf-abc")
        return response

    async def echo(request):
        return web.json_response({"ok": True, "data": {
            "csrf": request.headers.get("X-CSRF-Token"),
            "body": await request.json(),
        }})

    async def pods(request):
        return web.json_response([{"id": 1, "name": "Morning pod"}])

    async def rejected(request):
        return web.json_response({"ok": False, "error": {"message": "Invalid date"}})

    async def remove(request):
        return web.Response(status=204)

    async def crash(request):
        return web.Response(status=500, text="Internal error")

    app = web.Application()
    app.router.add_get("/api/auth/me", me)
    app.router.add_get("/api/auth/csrf", csrf)
    app.router.add_post("/api/echo", echo)
    app.router.add_get("/api/prayer-pods", pods)
    app.router.add_get("/api/rejected", rejected)
    app.router.add_delete("/api/vision/habits/1", remove)
    app.router.add_get("/api/crash", crash)
    return app


def run_with_client(scenario):
    """Поднять сервер, выполнить сценарий с клиентом, всё закрыть."""
    async def main():
        server = test_utils.TestServer(_app())
        await server.start_server()
        client = ApiClient(str(server.make_url("/")), timeout=5)
        try:
            return await scenario(client)
        finally:
            await client.close()
            await server.close()
    return asyncio.run(main())


class TestEnvelope:

    def test_ok_envelope_unwrapped(self):
        async def scenario(client):
            client.set_session_cookie(CHAT_ID, "token-1")
            return await client.get(CHAT_ID, "/api/auth/me")

        assert run_with_client(scenario) == {"id": "u1", "firstName": "Ann"}

    def test_plain_json_returned_as_is(self):
        async def scenario(client):
            return await client.get(CHAT_ID, "/api/prayer-pods")

        assert run_with_client(scenario) == [{"id": 1, "name": "Morning pod"}]

    def test_ok_false_raises(self):
        async def scenario(client):
            with pytest.raises(ApiError) as info:
                await client.get(CHAT_ID, "/api/rejected")
            return info.value

        error = run_with_client(scenario)
        assert error.message == "Invalid date"

    def test_no_content(self):
        async def scenario(client):
            return await client.delete(CHAT_ID, "/api/vision/habits/1")

        assert run_with_client(scenario) is None


class TestErrors:

    def test_unauthorized_without_cookie(self):
        async def scenario(client):
            with pytest.raises(ApiError) as info:
                await client.get(CHAT_ID, "/api/auth/me")
            return info.value

        error = run_with_client(scenario)
        assert error.status == 401
        assert error.is_unauthorized
        assert error.message == "Not authenticated"

    def test_server_error_text_body(self):
        async def scenario(client):
            with pytest.raises(ApiError) as info:
                await client.get(CHAT_ID, "/api/crash")
            return info.value

        error = run_with_client(scenario)
        assert error.status == 500
        assert error.message == "Internal error"


class TestSession:

    def test_csrf_header_on_mutation(self):
        async def scenario(client):
            return await client.post(CHAT_ID, "/api/echo", json={"a": 1})

        assert run_with_client(scenario) == {"csrf": "csrf-abc", "body": {"a": 1}}

    def test_sessions_isolated_per_chat(self):
        async def scenario(client):
            client.set_session_cookie(CHAT_ID, "token-1")
            return client.has_session(CHAT_ID), client.has_session(CHAT_ID + 1)

        assert run_with_client(scenario) == (True, False)

    def test_forget_clears_cookie(self):
        async def scenario(client):
            client.set_session_cookie(CHAT_ID, "token-1")
            client.forget(CHAT_ID)
            return client.has_session(CHAT_ID)

        assert run_with_client(scenario) is False
