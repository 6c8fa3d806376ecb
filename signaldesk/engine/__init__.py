"""
SignalDesk Engine - Scoring and Governance Pipeline

Key Components:
- parse_sources: intake lines → classified SourceItems
- score_breakdown: deterministic 4-component confidence score
- build_claims: keyword-signal claim extraction
- build_decisions: three ranked, auto-governed horizon decisions
- merge_reviewer_decisions: reviewer overlay with scope isolation
- build_roadmap / build_packets: derived execution artifacts
- export_pack: gated Markdown/JSON export

Rules:
1. Every pipeline stage is a pure function of its inputs
2. Exactly three decisions per run, one per horizon
3. Confidence bucket always follows the score
4. Reviewer overlays copy decisions, never mutate them
5. No final export while any decision needs review
"""

from .source_parser import classify, is_valid_url, parse_sources
from .scoring import score_breakdown, score_confidence
from .claim_extractor import build_claims, extract_claims_for_source
from .decision_ranker import build_decisions
from .review import (
    has_pending_review,
    intake_scope_key,
    merge_reviewer_decisions,
    reviewer_trail,
)
from .packets import build_packets, build_roadmap
from .export import (
    ExportFormat,
    ExportResult,
    export_blockers,
    export_pack,
    load_pack_json,
    packet_to_markdown,
    to_json,
    to_markdown,
    validate_intake,
)
from .pipeline import PipelineRun, build_pack, run_pipeline

__all__ = [
    "classify",
    "is_valid_url",
    "parse_sources",
    "score_breakdown",
    "score_confidence",
    "build_claims",
    "extract_claims_for_source",
    "build_decisions",
    "has_pending_review",
    "intake_scope_key",
    "merge_reviewer_decisions",
    "reviewer_trail",
    "build_packets",
    "build_roadmap",
    "ExportFormat",
    "ExportResult",
    "export_blockers",
    "export_pack",
    "load_pack_json",
    "packet_to_markdown",
    "to_json",
    "to_markdown",
    "validate_intake",
    "PipelineRun",
    "build_pack",
    "run_pipeline",
]
