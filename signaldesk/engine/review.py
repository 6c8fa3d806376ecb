"""
Reviewer Merge

Overlays reviewer dispositions onto auto-governed decisions and derives the
scope key that partitions reviewer state per intake.

Rules:
- merge never mutates its inputs; matching decisions are copied
- governance reasons are extended, never replaced
- reviewer state is scoped by intake so one dataset's approvals never
  unblock another
"""

import hashlib
from typing import List, Mapping, Optional

from ..common.schemas import Decision, DecisionStatus, ReviewerDecision


SCOPE_HASH_LENGTH = 16


def intake_scope_key(intake_text: str, session_id: Optional[str] = None) -> str:
    """
    Derive the reviewer-state scope for an intake.

    An explicit session id wins. Otherwise the trimmed, case-folded intake is
    hashed, so identical intakes share a scope across reloads and any edit
    moves to a fresh one.
    """
    if session_id:
        return f"session:{session_id}"

    normalized = intake_text.strip().casefold()
    if not normalized:
        return "intake:empty"

    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
    return f"intake:{digest[:SCOPE_HASH_LENGTH]}"


def merge_reviewer_decisions(
    decisions: List[Decision],
    reviewer_map: Mapping[str, ReviewerDecision],
) -> List[Decision]:
    """
    Apply reviewer entries keyed by decision id.

    Args:
        decisions: Auto-governed decisions
        reviewer_map: decision id → ReviewerDecision for the current scope

    Returns:
        New list; reviewed decisions are copies with the reviewer's status
        and extra governance reasons, the rest are passed through.
    """
    merged = []
    for decision in decisions:
        review = reviewer_map.get(decision.id)
        if review is None:
            merged.append(decision)
            continue

        status = DecisionStatus(review.status)
        reasons = list(decision.governance_reasons)
        reasons.append(f"reviewer set status to {status.value}")
        notes = review.notes.strip()
        if notes:
            reasons.append(f"reviewer note: {notes}")

        merged.append(decision.model_copy(update={
            "status": status,
            "governance_reasons": reasons,
            "conflict_source_ids": list(decision.conflict_source_ids),
        }))

    return merged


def has_pending_review(decisions: List[Decision]) -> bool:
    """True when any decision still needs review (blocks final export)"""
    return any(d.status == DecisionStatus.NEEDS_REVIEW for d in decisions)


def pending_decision_ids(decisions: List[Decision]) -> List[str]:
    return [d.id for d in decisions if d.status == DecisionStatus.NEEDS_REVIEW]


def reviewer_trail(reviewer_map: Mapping[str, ReviewerDecision]) -> List[ReviewerDecision]:
    """Reviewer entries ordered by updated_at ascending"""
    return sorted(reviewer_map.values(), key=lambda r: r.updated_at)
