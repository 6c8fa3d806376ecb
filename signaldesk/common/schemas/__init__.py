"""
SignalDesk Schemas

Typed records for sources, claims, decisions, reviewer entries and exports.
"""

from .records import (
    SourceType,
    ClaimType,
    Confidence,
    PacketRole,
    Horizon,
    DecisionStatus,
    HORIZON_ORDER,
    bucket_confidence,
    SourceItem,
    ScoreBreakdown,
    Claim,
    Decision,
    ReviewerDecision,
    ReviewerMap,
    RoadmapItem,
    Packet,
    SavedSession,
    IntelligencePack,
)
from .templates import render_pack_markdown, render_packet_markdown, format_fixed, PACK_HEADERS

__all__ = [
    "SourceType",
    "ClaimType",
    "Confidence",
    "PacketRole",
    "Horizon",
    "DecisionStatus",
    "HORIZON_ORDER",
    "bucket_confidence",
    "SourceItem",
    "ScoreBreakdown",
    "Claim",
    "Decision",
    "ReviewerDecision",
    "ReviewerMap",
    "RoadmapItem",
    "Packet",
    "SavedSession",
    "IntelligencePack",
    "render_pack_markdown",
    "render_packet_markdown",
    "format_fixed",
    "PACK_HEADERS",
]
