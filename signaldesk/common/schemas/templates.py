"""
Markdown Templates

Renders intelligence packs and single execution packets to Markdown.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .records import (
        Claim,
        Decision,
        Packet,
        ReviewerDecision,
        RoadmapItem,
        SourceItem,
    )


NO_REVIEWER_ACTIONS = "- No reviewer actions recorded."

PACK_HEADERS = [
    "## Intake Sources",
    "## Intelligence Brief",
    "## Ranked Decisions",
    "## Reviewer Trail",
    "## 24h / 7d / 30d Roadmap",
    "## Execution Packets",
]


def format_fixed(value: float, places: int = 1) -> str:
    """
    Fixed-point text with ties rounded away from zero.

    Uses the exact binary value of the float, so 40.25 renders as "40.3"
    while 1.005 (stored just below 1.005) renders as "1.00" with places=2.
    """
    quantum = Decimal(1).scaleb(-places)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):.{places}f}"


def _timestamp(generated_at: Optional[datetime]) -> str:
    moment = generated_at or datetime.now(timezone.utc)
    return moment.isoformat()


def _bullets(items: List[str], indent: str = "") -> List[str]:
    return [f"{indent}- {item}" for item in items]


def _format_sources(sources: List["SourceItem"]) -> List[str]:
    return [f"- [{s.type.value.upper()}] {s.raw}" for s in sources]


def _format_claims(claims: List["Claim"]) -> List[str]:
    lines = []
    for c in claims:
        why = "; ".join(c.score_breakdown.rationale)
        lines.append(
            f"- ({c.confidence.value}/{c.confidence_score}) {c.type.value.upper()}: {c.text} | why: {why}"
        )
    return lines


def _format_decisions(decisions: List["Decision"]) -> List[str]:
    lines = []
    for d in decisions:
        why = "; ".join(d.score_breakdown.rationale)
        governance = " | ".join(d.governance_reasons)
        lines.append(
            f"- {d.title} | status:{d.status.value} | score:{format_fixed(d.score)} "
            f"impact:{d.impact} effort:{d.effort} urgency:{d.urgency} "
            f"| why: {why} | governance: {governance}"
        )
    return lines


def _format_reviewer_trail(trail: List["ReviewerDecision"]) -> List[str]:
    if not trail:
        return [NO_REVIEWER_ACTIONS]

    lines = []
    for item in trail:
        line = f"- {item.decision_id} → {item.status.value} @ {item.updated_at}"
        if item.notes:
            line += f" | notes: {item.notes}"
        lines.append(line)
    return lines


def _format_roadmap(roadmap: List["RoadmapItem"]) -> List[str]:
    return [
        f"- [{item.horizon.value}] {item.action} | owner:{item.owner} | success:{item.success_metric}"
        for item in roadmap
    ]


def _format_packet_block(packet: "Packet") -> List[str]:
    lines = [
        f"### {packet.role.value}",
        f"- Objective: {packet.objective}",
        f"- Context: {packet.context}",
        "- Tasks:",
        *_bullets(packet.tasks, "  "),
        "- Acceptance criteria:",
        *_bullets(packet.acceptance_criteria, "  "),
        "- Dependencies:",
        *_bullets(packet.dependencies, "  "),
        "- Risks:",
        *_bullets(packet.risks, "  "),
        f"- Handoff prompt: {packet.handoff_prompt}",
        f"- Output: {packet.output}",
        "",
    ]
    return lines


def render_pack_markdown(
    title: str,
    sources: List["SourceItem"],
    claims: List["Claim"],
    decisions: List["Decision"],
    roadmap: List["RoadmapItem"],
    packets: List["Packet"],
    reviewer_trail: List["ReviewerDecision"],
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Render the full intelligence pack.

    Sections: Intake Sources, Intelligence Brief, Ranked Decisions, Reviewer
    Trail, Roadmap, Execution Packets. Pass generated_at for byte-identical
    output across runs.
    """
    bodies = [
        _format_sources(sources),
        _format_claims(claims),
        _format_decisions(decisions),
        _format_reviewer_trail(reviewer_trail),
        _format_roadmap(roadmap),
    ]

    lines = [f"# {title}", "", f"Generated: {_timestamp(generated_at)}", ""]
    for header, body in zip(PACK_HEADERS, bodies):
        lines.extend([header, *body, ""])
    lines.append(PACK_HEADERS[-1])

    for packet in packets:
        lines.extend(_format_packet_block(packet))

    return "\n".join(lines)


def render_packet_markdown(packet: "Packet", generated_at: Optional[datetime] = None) -> str:
    """Render one packet as a standalone task brief"""
    lines = [
        f"# SignalDesk Task Packet: {packet.role.value}",
        "",
        f"Generated: {_timestamp(generated_at)}",
        "",
        "## Objective",
        packet.objective,
        "",
        "## Context",
        packet.context,
        "",
        "## Tasks",
        *_bullets(packet.tasks),
        "",
        "## Acceptance Criteria",
        *_bullets(packet.acceptance_criteria),
        "",
        "## Dependencies",
        *_bullets(packet.dependencies),
        "",
        "## Risks",
        *_bullets(packet.risks),
        "",
        "## Handoff Prompt",
        packet.handoff_prompt,
        "",
        "## Expected Output",
        packet.output,
        "",
    ]
    return "\n".join(lines)
