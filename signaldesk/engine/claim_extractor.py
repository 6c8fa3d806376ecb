"""
Claim Extractor

Applies keyword-signal rules to each source and emits typed claims.

Rules:
- One claim per matched category (opportunity, risk, assumption, unknown)
- URL sources always yield an opportunity claim
- No match → one fallback claim (assumption for notes, unknown otherwise)
- All claims from a source share that source's score breakdown
"""

from typing import List

from ..common.schemas import Claim, ClaimType, SourceItem, SourceType
from .scoring import score_breakdown
from .signals import CLAIM_SIGNALS, count_matches


EXCERPT_LENGTH = 120

CLAIM_LABELS = {
    ClaimType.OPPORTUNITY: "Opportunity signal",
    ClaimType.RISK: "Risk signal",
    ClaimType.ASSUMPTION: "Assumption to validate",
    ClaimType.UNKNOWN: "Unknown requiring evidence",
}
FALLBACK_LABEL = "Context captured but under-specified"


def _matched_types(source: SourceItem) -> List[ClaimType]:
    """Claim categories triggered by a source, in fixed category order"""
    lower = source.raw.lower()
    matched = []
    for claim_type, terms in CLAIM_SIGNALS.items():
        hits = count_matches(lower, terms)
        if hits > 0 or (claim_type == ClaimType.OPPORTUNITY and source.type == SourceType.URL):
            matched.append(claim_type)
    return matched


def extract_claims_for_source(source: SourceItem) -> List[Claim]:
    """
    Extract claims from one source.

    Always returns at least one claim.
    """
    breakdown = score_breakdown(source.raw, source.type)
    excerpt = source.raw[:EXCERPT_LENGTH]

    def make(claim_type: ClaimType, label: str) -> Claim:
        return Claim(
            text=f"{label}: {excerpt}",
            type=claim_type,
            confidence_score=breakdown.total,
            score_breakdown=breakdown,
            source_id=source.id,
        )

    claims = [make(t, CLAIM_LABELS[t]) for t in _matched_types(source)]

    if not claims:
        fallback_type = ClaimType.ASSUMPTION if source.type == SourceType.NOTE else ClaimType.UNKNOWN
        claims.append(make(fallback_type, FALLBACK_LABEL))

    return claims


def build_claims(sources: List[SourceItem]) -> List[Claim]:
    """Extract claims from every source, preserving source order"""
    return [claim for source in sources for claim in extract_claims_for_source(source)]
