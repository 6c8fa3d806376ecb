"""
Pipeline

Runs intake → sources → claims → decisions → reviewer merge → roadmap/packets
in one synchronous pass. Identical intake and reviewer state always produce
identical results.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from ..common.schemas import (
    Claim,
    Decision,
    IntelligencePack,
    Packet,
    ReviewerDecision,
    RoadmapItem,
    SourceItem,
)
from .claim_extractor import build_claims
from .decision_ranker import build_decisions
from .packets import build_packets, build_roadmap
from .review import has_pending_review, intake_scope_key, merge_reviewer_decisions, reviewer_trail
from .source_parser import invalid_urls, parse_sources

logger = logging.getLogger("signaldesk.engine.pipeline")


@dataclass
class PipelineRun:
    """Everything one pipeline pass produced"""
    intake_text: str
    scope_key: str
    sources: List[SourceItem]
    claims: List[Claim]
    auto_decisions: List[Decision]
    decisions: List[Decision]
    roadmap: List[RoadmapItem]
    packets: List[Packet]
    reviewer_trail: List[ReviewerDecision] = field(default_factory=list)

    @property
    def pending_review(self) -> bool:
        return has_pending_review(self.decisions)

    @property
    def invalid_urls(self) -> List[SourceItem]:
        return invalid_urls(self.sources)

    @property
    def pack(self) -> IntelligencePack:
        return IntelligencePack(
            sources=self.sources,
            claims=self.claims,
            decisions=self.decisions,
            roadmap=self.roadmap,
            packets=self.packets,
            reviewer_trail=self.reviewer_trail,
        )


def run_pipeline(
    intake_text: str,
    reviewer_map: Optional[Mapping[str, ReviewerDecision]] = None,
    session_id: Optional[str] = None,
) -> PipelineRun:
    """
    Run the full pipeline.

    Args:
        intake_text: Raw multiline intake
        reviewer_map: Reviewer entries already loaded for this intake's scope
        session_id: Optional explicit session id used for the scope key

    Returns:
        PipelineRun with both the auto-governed and the final decisions
    """
    reviewer_map = reviewer_map or {}

    sources = parse_sources(intake_text)
    claims = build_claims(sources)
    auto_decisions = build_decisions(claims)
    decisions = merge_reviewer_decisions(auto_decisions, reviewer_map)

    run = PipelineRun(
        intake_text=intake_text,
        scope_key=intake_scope_key(intake_text, session_id),
        sources=sources,
        claims=claims,
        auto_decisions=auto_decisions,
        decisions=decisions,
        roadmap=build_roadmap(decisions),
        packets=build_packets(decisions, claims),
        reviewer_trail=reviewer_trail(reviewer_map),
    )

    logger.debug(
        "Pipeline run %s: %d sources, %d claims, pending_review=%s",
        run.scope_key, len(sources), len(claims), run.pending_review,
    )
    return run


def build_pack(
    intake_text: str,
    reviewer_map: Optional[Mapping[str, ReviewerDecision]] = None,
) -> IntelligencePack:
    """Shorthand for run_pipeline(...).pack"""
    return run_pipeline(intake_text, reviewer_map).pack
