"""
SignalDesk Record Schemas

Typed entities flowing through the intake → claims → decisions → export pipeline.
Python attributes are snake_case; the wire format (JSON export, HTTP API) is
camelCase so exported packs keep the console's field names.
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


# ============================================================================
# Enums
# ============================================================================

class SourceType(str, Enum):
    """Classification of one intake line"""
    URL = "url"
    NOTE = "note"
    TRANSCRIPT = "transcript"
    DOCUMENT = "document"


class ClaimType(str, Enum):
    """Signal category of an extracted claim"""
    OPPORTUNITY = "opportunity"
    RISK = "risk"
    ASSUMPTION = "assumption"
    UNKNOWN = "unknown"


class Confidence(str, Enum):
    """Confidence bucket derived from a 0-100 score"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PacketRole(str, Enum):
    """Execution packet owner roles"""
    CODER = "Coder"
    RESEARCHER = "Researcher"
    WRITER = "Writer"
    NOTION = "Notion"


class Horizon(str, Enum):
    """Planning windows, in ranking tie-break order"""
    H24 = "24h"
    D7 = "7d"
    D30 = "30d"


class DecisionStatus(str, Enum):
    """Governance status of a decision"""
    ACCEPTED = "accepted"
    NEEDS_REVIEW = "needs-review"
    REJECTED = "rejected"


HORIZON_ORDER = (Horizon.H24, Horizon.D7, Horizon.D30)

HIGH_CONFIDENCE_THRESHOLD = 72
MEDIUM_CONFIDENCE_THRESHOLD = 46


def bucket_confidence(score: float) -> Confidence:
    """Map a confidence score onto its bucket (>=72 high, >=46 medium, else low)"""
    if score >= HIGH_CONFIDENCE_THRESHOLD:
        return Confidence.HIGH
    if score >= MEDIUM_CONFIDENCE_THRESHOLD:
        return Confidence.MEDIUM
    return Confidence.LOW


# ============================================================================
# Base
# ============================================================================

class CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting either spelling"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict with camelCase keys"""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Pipeline entities
# ============================================================================

class SourceItem(CamelModel):
    """One classified, non-empty line of intake text"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Positional id: s-1, s-2, ...")
    raw: str
    type: SourceType
    valid: bool = True


class ScoreBreakdown(CamelModel):
    """
    Four-component confidence score with a human-readable trace.

    total = clamp(8, 95, signal_quality + source_reliability + recency - contradiction_penalty)
    """
    model_config = ConfigDict(frozen=True)

    signal_quality: int = Field(ge=0)
    source_reliability: int = Field(ge=0)
    recency: int = Field(ge=0)
    contradiction_penalty: int = Field(ge=0)
    total: int = Field(ge=8, le=95)
    rationale: List[str] = Field(default_factory=list)


class Claim(CamelModel):
    """
    Typed assertion extracted from a source.

    The confidence bucket is always derived from confidence_score and cannot
    be set on its own.
    """
    text: str
    type: ClaimType
    confidence_score: int
    score_breakdown: ScoreBreakdown
    source_id: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def confidence(self) -> Confidence:
        return bucket_confidence(self.confidence_score)


class Decision(CamelModel):
    """One of the three horizon-scoped recommendations"""
    id: str
    title: str
    rationale: str
    impact: int
    effort: int
    urgency: int
    score: float
    horizon: Horizon
    score_breakdown: ScoreBreakdown
    governance_reasons: List[str] = Field(default_factory=list)
    status: DecisionStatus
    conflict_source_ids: List[str] = Field(default_factory=list)


class ReviewerDecision(CamelModel):
    """A reviewer's disposition for one decision within one intake scope"""
    decision_id: str
    status: DecisionStatus
    notes: str = ""
    updated_at: str


class RoadmapItem(CamelModel):
    """Roadmap row for one horizon"""
    horizon: Horizon
    action: str
    owner: str
    success_metric: str


class Packet(CamelModel):
    """Role handoff packet"""
    role: PacketRole
    objective: str
    context: str
    tasks: List[str] = Field(default_factory=list)
    acceptance_criteria: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    handoff_prompt: str
    output: str


class SavedSession(CamelModel):
    """User-named snapshot of raw intake text"""
    id: str
    name: str
    created_at: str
    intake_text: str


# ============================================================================
# Export model
# ============================================================================

ReviewerMap = Dict[str, ReviewerDecision]


class IntelligencePack(CamelModel):
    """
    Full in-memory model handed to the exporters.

    The JSON export is this model dumped by alias; loading it back yields an
    equal pack.
    """
    sources: List[SourceItem] = Field(default_factory=list)
    claims: List[Claim] = Field(default_factory=list)
    decisions: List[Decision] = Field(default_factory=list)
    roadmap: List[RoadmapItem] = Field(default_factory=list)
    packets: List[Packet] = Field(default_factory=list)
    reviewer_trail: List[ReviewerDecision] = Field(default_factory=list)
