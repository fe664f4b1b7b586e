"""
Колесо баланса: оценка 8 сфер и выбор фокусных.

Две фазы: assess (оценить все сферы) → focus (выбрать до 3 сфер).
Переход в focus возможен только когда оценены все сферы.
Данные предзаполняются из последнего сохранения (GET .../wheel).
"""

from typing import Optional, Sequence

from config import DEFAULT_RATING, RATING_MIN, RATING_MAX, WHEEL_MAX_FOCUS
from core.summaries import lowest_areas

PHASE_ASSESS = "assess"
PHASE_FOCUS = "focus"


class WheelBoard:
    """Оценки сфер, заметки и фокусные сферы."""

    def __init__(self, categories: Sequence[str], max_focus: int = WHEEL_MAX_FOCUS):
        self.categories = list(categories)
        self.max_focus = max_focus
        self.scores: dict[str, int] = {}
        self.notes: dict[str, str] = {}
        self.focus: list[str] = []
        self.phase = PHASE_ASSESS

    def load(self, saved: Optional[dict]) -> None:
        """Предзаполнить из ответа GET /api/vision/sessions/{id}/wheel."""
        if not saved:
            return
        for item in saved.get('categories') or []:
            key = item.get('categoryKey')
            if key not in self.categories:
                continue
            if item.get('score') is not None:
                self.scores[key] = int(item['score'])
            if item.get('notes'):
                self.notes[key] = item['notes']
        self.focus = [key for key in (saved.get('focusAreas') or []) if key in self.categories][:self.max_focus]

    def rate(self, key: str, score: int) -> None:
        if key not in self.categories:
            raise KeyError(f"Неизвестная сфера: {key}")
        if not RATING_MIN <= score <= RATING_MAX:
            raise ValueError(f"Оценка вне диапазона {RATING_MIN}–{RATING_MAX}: {score}")
        self.scores[key] = score

    def set_note(self, key: str, text: str) -> None:
        if key not in self.categories:
            raise KeyError(f"Неизвестная сфера: {key}")
        text = text.strip()
        if text:
            self.notes[key] = text
        else:
            self.notes.pop(key, None)

    @property
    def all_scored(self) -> bool:
        return all(key in self.scores for key in self.categories)

    def to_focus(self) -> bool:
        """assess → focus; False если оценены не все сферы."""
        if not self.all_scored:
            return False
        self.phase = PHASE_FOCUS
        return True

    def back(self) -> bool:
        """focus → assess; False если уже в assess (выход из инструмента)."""
        if self.phase == PHASE_FOCUS:
            self.phase = PHASE_ASSESS
            return True
        return False

    def toggle_focus(self, key: str) -> bool:
        """Переключить фокусную сферу. False если лимит исчерпан."""
        if key in self.focus:
            self.focus.remove(key)
            return True
        if len(self.focus) >= self.max_focus:
            return False
        self.focus.append(key)
        return True

    @property
    def can_save(self) -> bool:
        return len(self.focus) >= 1

    def lowest(self) -> list[str]:
        return lowest_areas(self.scores, self.categories)

    def average(self) -> float:
        if not self.categories:
            return 0.0
        return sum(self.scores.get(key, DEFAULT_RATING) for key in self.categories) / len(self.categories)

    def to_payload(self) -> dict:
        return {
            'categories': [
                {
                    'categoryKey': key,
                    'score': self.scores.get(key, DEFAULT_RATING),
                    'notes': self.notes.get(key) or None,
                }
                for key in self.categories
            ],
            'focusAreas': list(self.focus),
        }
