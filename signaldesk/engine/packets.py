"""
Roadmap and Execution Packets

Derives the 24h/7d/30d roadmap and the four role handoff packets from the
final (post-review) decisions and the extracted claims. Everything except the
context and risk lines is fixed template text.
"""

from typing import Dict, List

from ..common.schemas import (
    HORIZON_ORDER,
    Claim,
    ClaimType,
    Decision,
    Horizon,
    Packet,
    PacketRole,
    RoadmapItem,
    format_fixed,
)


PACKET_CLAIM_LIMIT = 3

ROADMAP_OWNERS = {
    Horizon.H24: "Operator + Coder",
    Horizon.D7: "Ops Lead",
    Horizon.D30: "Strategy Lead",
}

ROADMAP_SUCCESS_METRICS = {
    Horizon.H24: "First experiment launched with baseline metric",
    Horizon.D7: "Mitigation and opportunity progress reviewed with evidence",
    Horizon.D30: "Validated playbook + next-quarter plan approved",
}

# Used only if a horizon is missing from the decision set
ROADMAP_FALLBACK = {
    Horizon.H24: RoadmapItem(
        horizon=Horizon.H24,
        action="Define decision owner + first measurable move",
        owner="Operator",
        success_metric="Owner + KPI documented",
    ),
    Horizon.D7: RoadmapItem(
        horizon=Horizon.D7,
        action="Run execution sprint and mitigate top risk",
        owner="Cross-functional",
        success_metric="Risk register reduced by 30%",
    ),
    Horizon.D30: RoadmapItem(
        horizon=Horizon.D30,
        action="Institutionalize learnings into repeatable workflow",
        owner="Leadership",
        success_metric="Strategy cycle time drops week-over-week",
    ),
}


def build_roadmap(decisions: List[Decision]) -> List[RoadmapItem]:
    """One roadmap item per horizon, in 24h/7d/30d order"""
    by_horizon: Dict[Horizon, Decision] = {}
    for decision in decisions:
        by_horizon[decision.horizon] = decision

    roadmap = []
    for horizon in HORIZON_ORDER:
        decision = by_horizon.get(horizon)
        if decision is None:
            roadmap.append(ROADMAP_FALLBACK[horizon].model_copy())
            continue

        roadmap.append(RoadmapItem(
            horizon=horizon,
            action=decision.title,
            owner=ROADMAP_OWNERS[horizon],
            success_metric=ROADMAP_SUCCESS_METRICS[horizon],
        ))
    return roadmap


def _claim_lines(claims: List[Claim], claim_type: ClaimType) -> List[str]:
    """First few claim texts of one type, in original order"""
    return [c.text for c in claims if c.type == claim_type][:PACKET_CLAIM_LIMIT]


def build_packets(decisions: List[Decision], claims: List[Claim]) -> List[Packet]:
    """Build the Coder, Researcher, Writer and Notion packets"""
    top = decisions[0] if decisions else None
    risk_lines = _claim_lines(claims, ClaimType.RISK)
    unknown_lines = _claim_lines(claims, ClaimType.UNKNOWN)
    opportunity_lines = _claim_lines(claims, ClaimType.OPPORTUNITY)

    if top is not None:
        coder_context = f"Top decision score: {format_fixed(top.score)} ({top.status.value})."
    else:
        coder_context = "Top decision score: n/a (n/a)."

    return [
        Packet(
            role=PacketRole.CODER,
            objective=top.title if top is not None else "Build the highest-impact execution slice.",
            context=coder_context,
            tasks=[
                "Translate decision into an implementation plan with milestones (today/this week/this month).",
                "Implement the minimum production-usable slice with instrumentation hooks.",
                "Document rollback path, risks, and measurable success conditions.",
            ],
            acceptance_criteria=[
                "A runnable implementation exists with clear setup instructions.",
                "At least one metric is tracked against decision success.",
                "PR includes changelog and risk notes.",
            ],
            dependencies=["Access to codebase + deployment target", "Metric sink (analytics/logging)"],
            risks=risk_lines or ["Scope expansion without measurable milestone"],
            handoff_prompt=(
                "You are the implementation owner. Execute the tasks in order, keep scope tight, "
                "and return a PR summary with KPI deltas."
            ),
            output="PR + release notes + KPI dashboard hook.",
        ),
        Packet(
            role=PacketRole.RESEARCHER,
            objective="Resolve unknowns and de-risk assumptions with evidence.",
            context=f"{len(unknown_lines)} unknown signals and {len(risk_lines)} risk signals currently active.",
            tasks=[
                "Prioritize unknown queue by decision impact.",
                "Collect 5 corroborating/disproving data points per top unknown.",
                "Publish confidence delta memo with keep/kill/iterate recommendation.",
            ],
            acceptance_criteria=[
                "Each top unknown has at least one primary source and one secondary source.",
                "Confidence updates are quantified and tied to evidence links.",
                "Recommendation includes explicit next decision owner.",
            ],
            dependencies=["Source access (links/docs/transcripts)", "Timebox for evidence sprint"],
            risks=["Confirmation bias from single-source evidence", *risk_lines[:2]],
            handoff_prompt=(
                "You are the research lead. Produce an evidence-backed memo, update confidence per claim, "
                "and flag any decision that should be paused."
            ),
            output="Evidence memo + confidence update matrix.",
        ),
        Packet(
            role=PacketRole.WRITER,
            objective="Translate strategy into operator-ready narratives.",
            context=(
                f"{len(opportunity_lines)} opportunities and {len(risk_lines)} risks "
                "must be represented clearly."
            ),
            tasks=[
                "Draft narrative flow: signal summary → ranked decisions → roadmap.",
                "Prepare two versions: 90-second standup and stakeholder digest.",
                "Include explicit ask/decision points and next check-in date.",
            ],
            acceptance_criteria=[
                "Narrative contains decision rationale, not just summary text.",
                "Each roadmap horizon has one owner and one success metric.",
                "Language is concise and non-ambiguous for handoff.",
            ],
            dependencies=["Latest decision ranking", "Roadmap + risk watchlist"],
            risks=["Overly generic language that hides tradeoffs"],
            handoff_prompt=(
                "You are the strategy writer. Deliver concise, decision-first updates that operators "
                "can execute without clarification loops."
            ),
            output="Briefing copy (standup + stakeholder variants).",
        ),
        Packet(
            role=PacketRole.NOTION,
            objective="Materialize roadmap into an execution database.",
            context="Operationalize all decisions with traceability back to source claims.",
            tasks=[
                "Create database schema with impact, effort, urgency, confidence, horizon, owner.",
                "Generate filtered views for 24h/7d/30d planning cadences.",
                "Attach each row to evidence links and packet owner role.",
            ],
            acceptance_criteria=[
                "Every decision appears as a trackable row with owner and due window.",
                "Views exist for daily execution and weekly review.",
                "Fields support confidence changes over time.",
            ],
            dependencies=["Notion workspace + template import permission", "Final roadmap items"],
            risks=["Schema drift if fields are renamed without migration notes"],
            handoff_prompt=(
                "You are the operations system owner. Build a clean Notion execution layer that mirrors "
                "roadmap horizons and supports status reporting."
            ),
            output="Import-ready Notion schema + seeded execution board.",
        ),
    ]


def find_packet(packets: List[Packet], role: str) -> Packet:
    """Look up a packet by role name (case-insensitive)"""
    wanted = role.strip().lower()
    for packet in packets:
        if packet.role.value.lower() == wanted:
            return packet
    raise KeyError(role)
