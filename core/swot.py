"""
SWOT-доска сессии запуска продукта.

Данные доски сохраняются целиком (PUT .../swot). Локальные правки
помечаются флагом has_changes до успешного сохранения.
"""

import time
from typing import Callable, Optional

QUADRANTS = ("strengths", "weaknesses", "opportunities", "threats")


class SwotBoard:
    """Четыре квадранта с пунктами и размышлениями."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self.items: dict[str, list[dict]] = {q: [] for q in QUADRANTS}
        self.action_items: list = []
        self.prayer_points: list = []
        self.has_changes = False
        self._last_id_ms = 0

    @classmethod
    def from_payload(cls, swot: Optional[dict], clock: Callable[[], float] = time.time) -> "SwotBoard":
        """Доска из tools.swot сессии запуска."""
        board = cls(clock=clock)
        if swot:
            for quadrant in QUADRANTS:
                board.items[quadrant] = [dict(item) for item in swot.get(quadrant) or []]
            board.action_items = list(swot.get('actionItems') or [])
            board.prayer_points = list(swot.get('prayerPoints') or [])
        return board

    def _next_id(self, quadrant: str) -> str:
        ms = int(self._clock() * 1000)
        if ms <= self._last_id_ms:
            ms = self._last_id_ms + 1
        self._last_id_ms = ms
        return f"{quadrant}-{ms}"

    def add(self, quadrant: str, text: str) -> Optional[dict]:
        """Добавить пункт; пустой текст игнорируется."""
        if quadrant not in self.items:
            raise KeyError(f"Неизвестный квадрант: {quadrant}")
        text = text.strip()
        if not text:
            return None
        item = {'id': self._next_id(quadrant), 'item': text}
        self.items[quadrant].append(item)
        self.has_changes = True
        return item

    def remove(self, quadrant: str, item_id: str) -> bool:
        before = len(self.items[quadrant])
        self.items[quadrant] = [item for item in self.items[quadrant] if item.get('id') != item_id]
        removed = len(self.items[quadrant]) != before
        if removed:
            self.has_changes = True
        return removed

    def find(self, quadrant: str, item_id: str) -> Optional[dict]:
        for item in self.items.get(quadrant, []):
            if item.get('id') == item_id:
                return item
        return None

    def update_reflection(self, quadrant: str, item_id: str, text: str) -> bool:
        item = self.find(quadrant, item_id)
        if item is None:
            return False
        item['faithReflection'] = text.strip()
        self.has_changes = True
        return True

    @property
    def total(self) -> int:
        return sum(len(items) for items in self.items.values())

    def to_payload(self) -> dict:
        payload = {quadrant: [dict(item) for item in self.items[quadrant]] for quadrant in QUADRANTS}
        payload['actionItems'] = list(self.action_items)
        payload['prayerPoints'] = list(self.prayer_points)
        return payload

    def mark_saved(self) -> None:
        self.has_changes = False
