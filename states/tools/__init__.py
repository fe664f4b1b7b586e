"""
Инструменты самооценки: EQ, сильные стороны, стили общения,
колесо баланса, привычки, SWOT.
"""

from .eq import EqState
from .strengths import StrengthsState
from .styles import StylesState
from .wheel import WheelState
from .habits import HabitsState
from .swot import SwotState

__all__ = [
    'EqState',
    'StrengthsState',
    'StylesState',
    'WheelState',
    'HabitsState',
    'SwotState',
]
