"""
Decision Ranker

Aggregates claims into exactly three horizon decisions (24h, 7d, 30d), scores
each one and assigns an auto-governance status.

Two numbers are computed per decision:
- score_breakdown.total: clamped confidence used for governance
- score: weighted ranking key (impact, urgency, effort, plus small confidence
  and conflict adjustments)
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Tuple

from ..common.schemas import (
    Claim,
    ClaimType,
    Decision,
    DecisionStatus,
    Horizon,
    ScoreBreakdown,
    format_fixed,
)
from .scoring import clamp, compose_breakdown, round_half_up


GOVERNANCE_THRESHOLD = 46
CONFLICT_PENALTY_PER_SOURCE = 8
MAX_IMPACT = 10

HORIZON_RECENCY: Mapping[Horizon, int] = MappingProxyType({
    Horizon.H24: 16,
    Horizon.D7: 10,
    Horizon.D30: 6,
})

REASON_LOW_CONFIDENCE = "low-confidence score requires reviewer approval"
REASON_CONFLICT = "conflicting claims detected in sources: {sources}"
REASON_PASSES = "passes deterministic scoring and conflict checks"


@dataclass(frozen=True)
class DecisionTemplate:
    """Fixed decision row; impact and rationale depend on claim type counts"""
    horizon: Horizon
    title: str
    base_impact: int
    effort: int
    urgency: int
    counted_types: Tuple[ClaimType, ...]
    rationale: Callable[[int], str]


DECISION_TEMPLATES: Tuple[DecisionTemplate, ...] = (
    DecisionTemplate(
        horizon=Horizon.H24,
        title="Run one high-leverage experiment against the strongest upside signal",
        base_impact=5,
        effort=4,
        urgency=8,
        counted_types=(ClaimType.OPPORTUNITY,),
        rationale=lambda n: f"Anchors on {n} opportunity signals.",
    ),
    DecisionTemplate(
        horizon=Horizon.D7,
        title="Contain downside with owner-assigned mitigation plan",
        base_impact=4,
        effort=5,
        urgency=7,
        counted_types=(ClaimType.RISK,),
        rationale=lambda n: f"{n} risk signals detected; convert each into mitigation with owner + SLA.",
    ),
    DecisionTemplate(
        horizon=Horizon.D30,
        title="Resolve assumptions/unknowns with targeted evidence sprint",
        base_impact=4,
        effort=6,
        urgency=6,
        counted_types=(ClaimType.ASSUMPTION, ClaimType.UNKNOWN),
        rationale=lambda n: f"{n} uncertain claims must be validated before larger bets.",
    ),
)


def average_confidence_score(claims: List[Claim]) -> float:
    """Mean claim confidence score (0 when there are no claims)"""
    if not claims:
        return 0
    return sum(c.confidence_score for c in claims) / len(claims)


def compute_conflict_source_ids(claims: List[Claim]) -> List[str]:
    """
    Source ids that produced both an opportunity and a risk claim.

    Detection is intake-wide; ids are returned in first-seen order.
    """
    types_by_source: Dict[str, set] = {}
    for claim in claims:
        types_by_source.setdefault(claim.source_id, set()).add(claim.type)

    return [
        source_id
        for source_id, types in types_by_source.items()
        if ClaimType.OPPORTUNITY in types and ClaimType.RISK in types
    ]


def decision_id(horizon: Horizon, index: int) -> str:
    return f"d-{horizon.value}-{index + 1}"


def score_decision_breakdown(
    impact: int,
    horizon: Horizon,
    claims: List[Claim],
    conflict_source_ids: List[str],
) -> ScoreBreakdown:
    """
    Decision-level breakdown.

    Impact stands in for signal quality and the mean claim confidence for
    source reliability; recency is fixed per horizon.
    """
    avg = average_confidence_score(claims)
    contradiction_penalty = len(conflict_source_ids) * CONFLICT_PENALTY_PER_SOURCE
    signal_quality = clamp(10, 40, round_half_up(impact * 3.2))
    source_reliability = clamp(8, 30, round_half_up(avg / 3))
    recency = HORIZON_RECENCY[horizon]

    rationale = [
        f"signal quality {signal_quality} from impact {impact}",
        f"source reliability {source_reliability} from avg claim confidence {format_fixed(avg)}",
        f"recency {recency} from horizon {horizon.value}",
        f"contradiction penalty -{contradiction_penalty}",
    ]
    return compose_breakdown(signal_quality, source_reliability, recency, contradiction_penalty, rationale)


def auto_governance_status(total: int, conflict_source_ids: List[str]) -> Tuple[DecisionStatus, List[str]]:
    """
    Auto-governance for one decision.

    needs-review when the total is below 46 and/or conflicts exist (both
    reasons recorded when both apply); accepted otherwise.
    """
    reasons = []
    status = DecisionStatus.ACCEPTED

    if total < GOVERNANCE_THRESHOLD:
        status = DecisionStatus.NEEDS_REVIEW
        reasons.append(REASON_LOW_CONFIDENCE)
    if conflict_source_ids:
        status = DecisionStatus.NEEDS_REVIEW
        reasons.append(REASON_CONFLICT.format(sources=", ".join(conflict_source_ids)))

    if not reasons:
        reasons.append(REASON_PASSES)

    return status, reasons


def weighted_score(impact: int, urgency: int, effort: int, breakdown: ScoreBreakdown) -> float:
    """Ranking key: impact*1.8 + urgency*1.2 - effort + total/50 - penalty/10"""
    return (
        impact * 1.8
        + urgency * 1.2
        - effort
        + breakdown.total / 50
        - breakdown.contradiction_penalty / 10
    )


def build_decisions(claims: List[Claim]) -> List[Decision]:
    """
    Build the three ranked decisions.

    Always returns exactly three decisions, one per horizon, sorted by score
    descending; equal scores keep 24h, 7d, 30d order.
    """
    counts = {t: 0 for t in ClaimType}
    for claim in claims:
        counts[claim.type] += 1

    conflicts = compute_conflict_source_ids(claims)

    decisions = []
    for index, template in enumerate(DECISION_TEMPLATES):
        counted = sum(counts[t] for t in template.counted_types)
        impact = min(MAX_IMPACT, template.base_impact + counted)

        breakdown = score_decision_breakdown(impact, template.horizon, claims, conflicts)
        status, reasons = auto_governance_status(breakdown.total, conflicts)

        decisions.append(Decision(
            id=decision_id(template.horizon, index),
            title=template.title,
            rationale=template.rationale(counted),
            impact=impact,
            effort=template.effort,
            urgency=template.urgency,
            score=weighted_score(impact, template.urgency, template.effort, breakdown),
            horizon=template.horizon,
            score_breakdown=breakdown,
            governance_reasons=reasons,
            status=status,
            conflict_source_ids=list(conflicts),
        ))

    # sorted() is stable, so ties keep template (horizon) order
    return sorted(decisions, key=lambda d: d.score, reverse=True)
