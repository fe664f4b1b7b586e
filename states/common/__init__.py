"""
Общие стейты: старт, главное меню, ошибка.
"""

from .start import StartState
from .menu import MenuState
from .error import ErrorState

__all__ = [
    'StartState',
    'MenuState',
    'ErrorState',
]
