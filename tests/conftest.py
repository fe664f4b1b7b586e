"""
pytest конфигурация: корень проекта в sys.path, общие фейки.
"""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


class FakeUser:
    """Минимальный пользователь чата для стейтов и доски задач."""

    def __init__(self, chat_id: int = 42, language: str = "en", audience_segment: str = "general"):
        self.chat_id = chat_id
        self.language = language
        self.audience_segment = audience_segment
        self.current_state = None
        self.reminders = True


@pytest.fixture
def user():
    return FakeUser()
