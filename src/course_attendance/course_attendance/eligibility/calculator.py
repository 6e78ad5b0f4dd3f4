"""Attendance eligibility arithmetic.

Two rounding conventions coexist on purpose: report views show whole
percentages (``percentage``), stored summaries keep two decimals
(``summary_percentage``). Both round half up.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Eligibility:
    percentage: float
    gap: float
    classes_needed: int
    eligible: bool


def _ratio(attended: int, total: int) -> float:
    return attended / total * 100


def _round_half_up(value: float, places: str) -> Decimal:
    return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def percentage(attended: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(_round_half_up(_ratio(attended, total), "1"))


def summary_percentage(attended: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return float(_round_half_up(_ratio(attended, total), "0.01"))


def attendance_gap(attended: int, total: int, threshold: float) -> float:
    """Percentage points missing to reach ``threshold`` (<= 0 when met)."""
    return float(_round_half_up(float(threshold) - summary_percentage(attended, total), "0.01"))


def is_below(attended: int, total: int, threshold: float) -> bool:
    current = _ratio(attended, total) if total > 0 else 0.0
    return current < float(threshold)


def classes_needed(attended: int, total: int, threshold: float) -> int:
    """Consecutive classes to attend before reaching ``threshold``.

    Each simulated class raises both attended and total by one, so the answer
    is found by stepping rather than by a closed-form division.
    """

    threshold = float(threshold)
    if threshold < 0 or threshold > 100:
        raise ValidationError("threshold must be between 0 and 100")
    if attended < 0 or total < 0 or attended > total:
        raise ValidationError("attended must be between 0 and total")

    if not is_below(attended, total, threshold):
        return 0
    if threshold >= 100 and attended < total:
        raise ValidationError("threshold of 100% can no longer be reached")

    needed = 0
    new_attended, new_total = attended, total
    while True:
        needed += 1
        new_attended += 1
        new_total += 1
        if _ratio(new_attended, new_total) >= threshold:
            return needed


def evaluate(attended: int, total: int, threshold: float) -> Eligibility:
    return Eligibility(
        percentage=summary_percentage(attended, total),
        gap=attendance_gap(attended, total, threshold),
        classes_needed=classes_needed(attended, total, threshold),
        eligible=not is_below(attended, total, threshold),
    )
