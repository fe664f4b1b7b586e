"""
Сообщество: искры дня, молитвенные группы, подкаст.
"""

from .sparks import SparksState
from .pods import PodsState
from .podcast import PodcastState

__all__ = [
    'SparksState',
    'PodsState',
    'PodcastState',
]
