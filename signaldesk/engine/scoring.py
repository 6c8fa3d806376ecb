"""
Scoring Engine

Deterministic four-component confidence scoring for (text, source type) pairs.

Components:
- signal_quality: evidence markers raise it, weak-signal markers lower it [8, 45]
- source_reliability: fixed per source type
- recency: recency markers plus a bonus for explicit near-term years [0, 18]
- contradiction_penalty: contradiction markers and question marks [0, 24]

total = clamp(8, 95, signal_quality + source_reliability + recency - contradiction_penalty)
"""

import math
from types import MappingProxyType
from typing import List, Mapping

from ..common.schemas import ScoreBreakdown, SourceType
from .signals import (
    CONTRADICTION_TERMS,
    EVIDENCE_TERMS,
    NEAR_TERM_YEARS,
    RECENCY_TERMS,
    WEAK_SIGNAL_TERMS,
    count_matches,
)


TOTAL_MIN = 8
TOTAL_MAX = 95

SOURCE_RELIABILITY: Mapping[SourceType, int] = MappingProxyType({
    SourceType.DOCUMENT: 24,
    SourceType.URL: 20,
    SourceType.TRANSCRIPT: 17,
    SourceType.NOTE: 13,
})

SIGNAL_BASELINE = 18
EVIDENCE_WEIGHT = 8
WEAK_SIGNAL_WEIGHT = 6
LENGTH_BONUS = 4
LENGTH_BONUS_THRESHOLD = 90
SIGNAL_QUALITY_RANGE = (8, 45)

RECENCY_WEIGHT = 6
NEAR_TERM_YEAR_BONUS = 4
RECENCY_RANGE = (0, 18)

CONTRADICTION_WEIGHT = 6
CONTRADICTION_RANGE = (0, 24)


def clamp(low, high, value):
    """Bound value to [low, high]"""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounding up"""
    return int(math.floor(value + 0.5))


def compose_breakdown(
    signal_quality: int,
    source_reliability: int,
    recency: int,
    contradiction_penalty: int,
    rationale: List[str],
) -> ScoreBreakdown:
    """Assemble a breakdown from its components, clamping the total to [8, 95]"""
    total = clamp(
        TOTAL_MIN,
        TOTAL_MAX,
        signal_quality + source_reliability + recency - contradiction_penalty,
    )
    return ScoreBreakdown(
        signal_quality=signal_quality,
        source_reliability=source_reliability,
        recency=recency,
        contradiction_penalty=contradiction_penalty,
        total=total,
        rationale=rationale,
    )


def score_breakdown(text: str, source_type: SourceType) -> ScoreBreakdown:
    """
    Score a piece of text from a given source type.

    Pure function: identical inputs always yield an identical breakdown,
    rationale strings included.

    Args:
        text: Raw source text
        source_type: Classification of the source the text came from

    Returns:
        ScoreBreakdown with components, clamped total and rationale trace
    """
    lower = text.lower()

    evidence_hits = count_matches(lower, EVIDENCE_TERMS)
    weak_hits = count_matches(lower, WEAK_SIGNAL_TERMS)
    recency_hits = count_matches(lower, RECENCY_TERMS)
    contradiction_hits = count_matches(lower, CONTRADICTION_TERMS) + (1 if "?" in text else 0)

    length_bonus = LENGTH_BONUS if len(text) > LENGTH_BONUS_THRESHOLD else 0
    signal_quality = clamp(
        *SIGNAL_QUALITY_RANGE,
        SIGNAL_BASELINE + evidence_hits * EVIDENCE_WEIGHT - weak_hits * WEAK_SIGNAL_WEIGHT + length_bonus,
    )

    source_reliability = SOURCE_RELIABILITY[SourceType(source_type)]

    year_bonus = NEAR_TERM_YEAR_BONUS if any(year in text for year in NEAR_TERM_YEARS) else 0
    recency = clamp(*RECENCY_RANGE, recency_hits * RECENCY_WEIGHT + year_bonus)

    contradiction_penalty = clamp(*CONTRADICTION_RANGE, contradiction_hits * CONTRADICTION_WEIGHT)

    source_label = SourceType(source_type).value
    rationale = [
        f"signal quality {signal_quality} from evidence({evidence_hits})/weak({weak_hits}) markers",
        f"source reliability {source_reliability} for {source_label}",
        f"recency {recency} from recency markers({recency_hits})",
        f"contradiction penalty -{contradiction_penalty}",
    ]

    return compose_breakdown(signal_quality, source_reliability, recency, contradiction_penalty, rationale)


def score_confidence(text: str, source_type: SourceType) -> int:
    """Shorthand for the breakdown total"""
    return score_breakdown(text, source_type).total
