"""
Тесты классификации ошибок (core/error_classifier.py).
"""

import asyncio

import aiohttp
import pytest

from clients.api import ApiError
from core.error_classifier import classify_error, is_unauthorized, REQUEST_ERRORS, UNAUTHORIZED, GENERIC


@pytest.mark.parametrize("status,key", [
    (403, "errors.forbidden"),
    (404, "errors.not_found"),
    (400, "errors.validation"),
    (429, "errors.rate_limited"),
    (500, "errors.generic"),
])
def test_status_selects_text_only(status, key):
    result = classify_error(ApiError(status, "x"))
    assert result == {"category": GENERIC, "i18n_key": key, "redirect_login": False}


def test_unauthorized_redirects_to_login():
    result = classify_error(ApiError(401, "Not authenticated"))
    assert result["category"] == UNAUTHORIZED
    assert result["redirect_login"] is True
    assert is_unauthorized(ApiError(401, ""))


def test_network_and_timeout():
    assert classify_error(aiohttp.ClientConnectionError())["i18n_key"] == "errors.network"
    assert classify_error(asyncio.TimeoutError())["i18n_key"] == "errors.timeout"


def test_unknown_exception_is_generic():
    assert classify_error(ValueError("x"))["i18n_key"] == "errors.generic"
    assert not is_unauthorized(ValueError("x"))


@pytest.mark.parametrize("exc", [
    ApiError(500, "x"),
    aiohttp.ClientConnectionError(),
    asyncio.TimeoutError(),
    ConnectionResetError(),
])
def test_request_errors_cover_client_failures(exc):
    assert isinstance(exc, REQUEST_ERRORS)


def test_request_errors_skip_programming_errors():
    assert not isinstance(ValueError("x"), REQUEST_ERRORS)
    assert not isinstance(KeyError("x"), REQUEST_ERRORS)
