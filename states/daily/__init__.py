"""
Задачи дня.
"""

from .tasks import DailyTasksState

__all__ = [
    'DailyTasksState',
]
