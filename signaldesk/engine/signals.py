"""
Signal Keyword Tables

Static keyword sets used by the scoring engine and claim extractor.
Matching is case-insensitive substring containment, and each term counts at
most once no matter how often it appears.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from ..common.schemas import ClaimType


CLAIM_SIGNALS: Mapping[ClaimType, Tuple[str, ...]] = MappingProxyType({
    ClaimType.OPPORTUNITY: (
        "launch", "growth", "demand", "adoption", "win",
        "expand", "retention", "upsell", "pipeline",
    ),
    ClaimType.RISK: (
        "risk", "decline", "churn", "cost", "delay",
        "blocked", "incident", "burn", "friction", "drop",
    ),
    ClaimType.ASSUMPTION: (
        "assume", "likely", "should", "expect", "hypothesis", "probably",
    ),
    ClaimType.UNKNOWN: (
        "unknown", "tbd", "unclear", "missing", "need data", "?",
    ),
})

EVIDENCE_TERMS: Tuple[str, ...] = (
    "data", "confirmed", "published", "survey", "metric", "evidence", "reported",
)
WEAK_SIGNAL_TERMS: Tuple[str, ...] = (
    "maybe", "possibly", "guess", "perhaps", "rumor",
)
RECENCY_TERMS: Tuple[str, ...] = (
    "today", "this week", "current", "latest", "2026", "q1", "q2", "q3", "q4",
)
CONTRADICTION_TERMS: Tuple[str, ...] = (
    "however", "but", "except", "contradict", "conflict",
)

# Explicit near-term years earn a recency bonus on top of keyword hits
NEAR_TERM_YEARS: Tuple[str, ...] = ("2025", "2026")


def count_matches(lowered_text: str, terms: Iterable[str]) -> int:
    """
    Count how many distinct terms occur in already-lowercased text.

    Args:
        lowered_text: Input text, lowercased once by the caller
        terms: Keyword set

    Returns:
        Number of terms present (each term counted once)
    """
    return sum(1 for term in terms if term in lowered_text)
