"""
Export Assembler

Renders an IntelligencePack to Markdown or JSON behind the export gate.

Final export is refused when:
- intake fails validation (empty, or longer than the configured limit)
- any post-review decision is still needs-review
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ..common.schemas import (
    Claim,
    Decision,
    IntelligencePack,
    Packet,
    ReviewerDecision,
    RoadmapItem,
    SourceItem,
    render_pack_markdown,
    render_packet_markdown,
)
from .review import pending_decision_ids

logger = logging.getLogger("signaldesk.engine.export")

MAX_INTAKE_CHARS = 5000
DEFAULT_TITLE = "SignalDesk Intelligence Pack"

ISSUE_EMPTY = "Intake cannot be empty."
ISSUE_TOO_LONG = "Intake exceeds {limit:,} characters. Split into smaller sessions."
BLOCKER_PENDING_REVIEW = "Resolve needs-review decisions before final export: {ids}"


class ExportFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


@dataclass
class ExportResult:
    """Outcome of an export attempt"""
    ok: bool
    fmt: ExportFormat
    content: str = ""
    blocked_reasons: List[str] = field(default_factory=list)

    @property
    def filename(self) -> str:
        suffix = "md" if self.fmt == ExportFormat.MARKDOWN else "json"
        return f"signaldesk-pack.{suffix}"


def validate_intake(intake_text: str, max_chars: int = MAX_INTAKE_CHARS) -> List[str]:
    """Blocking intake issues (empty list when the intake is exportable)"""
    issues = []
    if not intake_text.strip():
        issues.append(ISSUE_EMPTY)
    if len(intake_text) > max_chars:
        issues.append(ISSUE_TOO_LONG.format(limit=max_chars))
    return issues


def export_blockers(
    intake_text: str,
    decisions: List[Decision],
    max_chars: int = MAX_INTAKE_CHARS,
) -> List[str]:
    """Every reason final export is currently refused"""
    reasons = validate_intake(intake_text, max_chars)
    pending = pending_decision_ids(decisions)
    if pending:
        reasons.append(BLOCKER_PENDING_REVIEW.format(ids=", ".join(pending)))
    return reasons


def to_markdown(
    title: str,
    sources: List[SourceItem],
    claims: List[Claim],
    decisions: List[Decision],
    roadmap: List[RoadmapItem],
    packets: List[Packet],
    reviewer_trail: List[ReviewerDecision],
    generated_at: Optional[datetime] = None,
) -> str:
    return render_pack_markdown(
        title, sources, claims, decisions, roadmap, packets, reviewer_trail, generated_at=generated_at,
    )


def pack_to_markdown(
    pack: IntelligencePack,
    title: str = DEFAULT_TITLE,
    generated_at: Optional[datetime] = None,
) -> str:
    return to_markdown(
        title,
        pack.sources,
        pack.claims,
        pack.decisions,
        pack.roadmap,
        pack.packets,
        pack.reviewer_trail,
        generated_at=generated_at,
    )


def packet_to_markdown(packet: Packet, generated_at: Optional[datetime] = None) -> str:
    return render_packet_markdown(packet, generated_at=generated_at)


def to_json(pack: IntelligencePack) -> str:
    """
    Serialise a pack with camelCase keys: sources, claims, decisions,
    roadmap, packets, reviewerTrail.
    """
    return pack.model_dump_json(by_alias=True, indent=2)


def load_pack_json(text: str) -> IntelligencePack:
    """Inverse of to_json"""
    return IntelligencePack.model_validate_json(text)


def export_pack(
    pack: IntelligencePack,
    intake_text: str,
    fmt: ExportFormat = ExportFormat.MARKDOWN,
    title: str = DEFAULT_TITLE,
    max_chars: int = MAX_INTAKE_CHARS,
    generated_at: Optional[datetime] = None,
) -> ExportResult:
    """
    Produce a final export artifact, or refuse with the blocking reasons.

    Args:
        pack: Pack built from the post-review decisions
        intake_text: The raw intake the pack was built from
        fmt: markdown or json
        title: Markdown document title
        max_chars: Intake length limit
        generated_at: Fixed timestamp for reproducible markdown

    Returns:
        ExportResult with ok=False and empty content when blocked
    """
    fmt = ExportFormat(fmt)
    reasons = export_blockers(intake_text, pack.decisions, max_chars)
    if reasons:
        logger.info("Export refused (%s): %s", fmt.value, "; ".join(reasons))
        return ExportResult(ok=False, fmt=fmt, blocked_reasons=reasons)

    if fmt == ExportFormat.JSON:
        content = to_json(pack)
    else:
        content = pack_to_markdown(pack, title=title, generated_at=generated_at)

    logger.info("Exported %s pack (%d decisions, %d reviewer entries)",
                fmt.value, len(pack.decisions), len(pack.reviewer_trail))
    return ExportResult(ok=True, fmt=fmt, content=content)
