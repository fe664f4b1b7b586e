"""
Мутации: изменяющий запрос + инвалидация кеша.

Мутация выполняется один раз. При успехе сбрасываются указанные
ключи кеша, при ошибке исключение уходит вызывающему коду, а кеш
остаётся как был.
"""

import logging
from typing import Any, Awaitable, Iterable

from core.query_cache import QueryCache, QueryKey

logger = logging.getLogger(__name__)


async def mutate(cache: QueryCache, request: Awaitable[Any], invalidate: Iterable[QueryKey] = ()) -> Any:
    """Выполнить мутацию и сбросить зависимые запросы.

    Args:
        cache: кеш запросов
        request: корутина запроса (post/put/delete)
        invalidate: префиксы ключей, которые нужно сбросить при успехе

    Returns:
        Результат запроса
    """
    try:
        result = await request
    except Exception as e:
        logger.warning(f"[Mutation] Запрос не выполнен: {e}")
        raise
    for prefix in invalidate:
        cache.invalidate(prefix)
    return result
