"""
Сообщество: молитвенные группы (pods) и искры дня (sparks).
"""

from typing import Iterable

from config import FEATURED_SPARKS_LIMIT

FOCUS_ALL = "all"


def filter_by_focus(pods: Iterable[dict], focus: str) -> list[dict]:
    """Группы с заданным фокусом ("all": все)."""
    if focus == FOCUS_ALL:
        return list(pods)
    return [pod for pod in pods if pod.get('focus') == focus]


def joined_ids(my_pods: Iterable[dict]) -> set:
    return {pod.get('id') for pod in my_pods}


def featured(sparks: list[dict], compact: bool = False) -> list[dict]:
    """Первые 4 искры (в компактном виде: одна)."""
    return sparks[:1] if compact else sparks[:FEATURED_SPARKS_LIMIT]
