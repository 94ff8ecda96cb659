"""Rubric scoring engine.

Single source of truth for the recitation rubric: criterion weights inside each
category and category weights inside the final score. Every weight table sums to
exactly 1, so equal inputs always produce that same value as output.

The engine is pure: it validates marks, never clamps them, and returns full
precision floats (rounding to two decimals is left to the presentation layer).
Arithmetic is done in Decimal so that in-range marks cannot drift outside [0, 100].
"""

import math
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Mapping

from RecitationReportApp.core.choices import ScoreBand

MARK_MIN = Decimal("0")
MARK_MAX = Decimal("100")

# Category keys double as the related names of the category models.
PRONUNCIATION = "pronunciation"
RECITATION_RULES = "recitation_rules"
RHYTHM = "rhythm"
VOICE = "voice"
CONDUCT = "conduct"

CRITERION_WEIGHTS: dict[str, dict[str, Decimal]] = {
    PRONUNCIATION: {
        "articulation_point": Decimal("0.25"),
        "articulation_manner": Decimal("0.25"),
        "vowel_marks": Decimal("0.25"),
        "elongation_shortening": Decimal("0.25"),
    },
    RECITATION_RULES: {
        "nasal_letter_rule": Decimal("0.20"),
        "meem_letter_rule": Decimal("0.20"),
        "elongation_rule": Decimal("0.20"),
        "pause_rule": Decimal("0.20"),
        "emphasis_rule": Decimal("0.20"),
    },
    RHYTHM: {
        "tempo": Decimal("0.33"),
        "calm": Decimal("0.33"),
        "fluency": Decimal("0.34"),
    },
    VOICE: {
        "voice": Decimal("0.5"),
        "tone": Decimal("0.5"),
    },
    CONDUCT: {
        "attitude": Decimal("1.0"),
    },
}

CATEGORY_WEIGHTS: dict[str, Decimal] = {
    PRONUNCIATION: Decimal("0.30"),
    RECITATION_RULES: Decimal("0.30"),
    RHYTHM: Decimal("0.25"),
    VOICE: Decimal("0.05"),
    CONDUCT: Decimal("0.10"),
}

CATEGORIES: tuple[str, ...] = tuple(CATEGORY_WEIGHTS)

GOOD_THRESHOLD = 80
FAIR_THRESHOLD = 60


class InvalidInput(ValueError):
    """Marks handed to the engine are malformed or outside [0, 100]."""


@dataclass(frozen=True)
class Scores:
    """Five category scores plus the weighted final score."""
    pronunciation: float
    recitation_rules: float
    rhythm: float
    voice: float
    conduct: float
    final: float

    def category(self, key: str) -> float:
        return getattr(self, key)

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def weight_table_errors() -> list[str]:
    """Describe every weight table that does not sum to exactly 1."""
    errors = []
    for category, weights in CRITERION_WEIGHTS.items():
        total = sum(weights.values(), Decimal("0"))
        if total != Decimal("1"):
            errors.append(f"criterion weights of '{category}' sum to {total}, expected 1")
    total = sum(CATEGORY_WEIGHTS.values(), Decimal("0"))
    if total != Decimal("1"):
        errors.append(f"category weights sum to {total}, expected 1")
    if set(CRITERION_WEIGHTS) != set(CATEGORY_WEIGHTS):
        errors.append("criterion and category tables name different categories")
    return errors


def _to_decimal(category: str, criterion: str, value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidInput(f"{category}.{criterion}: mark must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidInput(f"{category}.{criterion}: mark must be finite")
    mark = Decimal(value) if not isinstance(value, Decimal) else value
    if not mark.is_finite():
        raise InvalidInput(f"{category}.{criterion}: mark must be finite")
    if mark < MARK_MIN or mark > MARK_MAX:
        raise InvalidInput(f"{category}.{criterion}: mark {value} outside [0, 100]")
    return mark


def _weighted_sum(values: Mapping[str, Decimal], weights: Mapping[str, Decimal]) -> Decimal:
    return sum((values[key] * weight for key, weight in weights.items()), Decimal("0"))


def category_score(category: str, marks: Mapping[str, Any]) -> float:
    """Weighted score of one category from its complete set of criterion marks."""
    try:
        weights = CRITERION_WEIGHTS[category]
    except KeyError:
        raise InvalidInput(f"Unknown category '{category}'") from None
    unknown = set(marks) - set(weights)
    if unknown:
        raise InvalidInput(f"{category}: unknown criteria {sorted(unknown)}")
    missing = set(weights) - set(marks)
    if missing:
        raise InvalidInput(f"{category}: missing criteria {sorted(missing)}")
    values = {key: _to_decimal(category, key, marks[key]) for key in weights}
    return float(_weighted_sum(values, weights))


def final_score(category_scores: Mapping[str, float]) -> float:
    """Weighted final score from the five category scores."""
    missing = set(CATEGORY_WEIGHTS) - set(category_scores)
    if missing:
        raise InvalidInput(f"missing category scores {sorted(missing)}")
    values = {
        key: _to_decimal(key, "score", category_scores[key]) for key in CATEGORY_WEIGHTS
    }
    return float(_weighted_sum(values, CATEGORY_WEIGHTS))


def compute_scores(marks: Mapping[str, Mapping[str, Any]]) -> Scores:
    """Compute all category scores and the final score.

    Args:
        marks: Category key -> {criterion name -> mark in [0, 100]}; all five
            categories and all of their criteria must be present.

    Raises:
        InvalidInput: On unknown/missing categories or criteria, or bad marks.
    """
    unknown = set(marks) - set(CRITERION_WEIGHTS)
    if unknown:
        raise InvalidInput(f"Unknown categories {sorted(unknown)}")
    missing = set(CRITERION_WEIGHTS) - set(marks)
    if missing:
        raise InvalidInput(f"Missing categories {sorted(missing)}")
    per_category = {key: category_score(key, marks[key]) for key in CATEGORIES}
    return Scores(final=final_score(per_category), **per_category)


def zero_filled(partial: Mapping[str, Mapping[str, Any]] | None) -> dict[str, dict[str, Any]]:
    """Complete a partial marks mapping, filling absent categories/criteria with 0.

    Unknown keys are kept so that compute_scores can reject them.
    """
    partial = partial or {}
    filled: dict[str, dict[str, Any]] = {}
    for category in set(CRITERION_WEIGHTS) | set(partial):
        given = partial.get(category) or {}
        if not isinstance(given, Mapping):
            raise InvalidInput(f"{category}: marks must be a mapping of criterion to mark")
        defaults = {name: 0 for name in CRITERION_WEIGHTS.get(category, {})}
        filled[category] = {**defaults, **{k: v for k, v in given.items() if v is not None}}
    return filled


def score_band(score: float) -> ScoreBand:
    """Report band for a score: >= 80 good, >= 60 fair, otherwise needs improvement."""
    if score >= GOOD_THRESHOLD:
        return ScoreBand.GOOD
    if score >= FAIR_THRESHOLD:
        return ScoreBand.FAIR
    return ScoreBand.NEEDS_IMPROVEMENT
