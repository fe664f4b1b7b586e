"""
Итоги инструментов самооценки.

Чистые функции над ответами: top-N сильных сторон, средние по доменам EQ,
профиль стиля общения, самые низкие сферы колеса баланса.
Пропущенный рейтинг везде считается как DEFAULT_RATING.
"""

from typing import Mapping, Optional, Sequence

from config import DEFAULT_RATING, STRENGTHS_TOP_N, WHEEL_LOWEST_HIGHLIGHT

# Порог «зоны роста» для домена EQ
GROWTH_AREA_THRESHOLD = 6

# Пороги меток результата: (минимум, ключ метки)
SCORE_LABELS = [
    (8, "strong"),
    (6, "good"),
    (4, "developing"),
]

# Канонический порядок стилей общения (разрешает ничьи)
STYLE_ORDER = ("driver", "expressive", "amiable", "analytical")


def top_n(
    ratings: Mapping[str, int],
    order: Optional[Sequence[str]] = None,
    n: int = STRENGTHS_TOP_N,
) -> list[str]:
    """Ключи с наибольшим рейтингом.

    Args:
        ratings: ключ → рейтинг
        order: все ключи в исходном порядке (по умолчанию порядок ratings)
        n: сколько ключей вернуть

    Сортировка устойчивая: при равенстве побеждает ключ, стоящий раньше в order.
    """
    keys = list(order) if order is not None else list(ratings)
    ordered = sorted(keys, key=lambda key: ratings.get(key, DEFAULT_RATING), reverse=True)
    return ordered[:n]


def domain_averages(ratings: Mapping[str, int], domains: Sequence[dict]) -> dict[str, float]:
    """Средний рейтинг по каждому домену EQ.

    Вопросы адресуются ключом "<domain>:<index>".
    """
    averages = {}
    for domain in domains:
        key = domain['key']
        count = len(domain.get('questions', []))
        if not count:
            continue
        total = sum(ratings.get(f"{key}:{i}", DEFAULT_RATING) for i in range(count))
        averages[key] = total / count
    return averages


def score_label(score: float) -> str:
    """Ключ метки для среднего балла: strong / good / developing / growth_area."""
    for minimum, label in SCORE_LABELS:
        if score >= minimum:
            return label
    return "growth_area"


def is_growth_area(score: float) -> bool:
    return score < GROWTH_AREA_THRESHOLD


def overall_score(averages: Mapping[str, float]) -> float:
    if not averages:
        return 0.0
    return sum(averages.values()) / len(averages)


def style_profile(choices: Mapping[str, str], styles: Sequence[str] = STYLE_ORDER) -> dict:
    """Профиль стиля общения по выбранным вариантам.

    Args:
        choices: id вопроса → выбранный стиль
        styles: стили в каноническом порядке

    Returns:
        {'primary': str, 'secondary': str, 'scores': {style: count}}
    """
    scores = {style: 0 for style in styles}
    for style in choices.values():
        if style in scores:
            scores[style] += 1

    ranked = sorted(styles, key=lambda style: scores[style], reverse=True)
    return {
        'primary': ranked[0] if ranked else None,
        'secondary': ranked[1] if len(ranked) > 1 else None,
        'scores': scores,
    }


def lowest_areas(
    scores: Mapping[str, Optional[int]],
    categories: Sequence[str],
    n: int = WHEEL_LOWEST_HIGHLIGHT,
) -> list[str]:
    """Сферы с наименьшей оценкой, устойчиво по порядку categories."""
    ordered = sorted(categories, key=lambda key: scores.get(key) or DEFAULT_RATING)
    return ordered[:n]
