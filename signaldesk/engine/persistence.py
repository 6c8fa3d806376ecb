"""
Session and Reviewer Persistence

The only functions that touch a KeyValueStore. Each performs a
read-then-write of one JSON blob; concurrent writers are not coordinated
(last write wins).

- Sessions: list of SavedSession, newest first, capped (default 20)
- Reviewer entries: scope key → decision id → ReviewerDecision

Corrupt stored JSON is treated as empty. Write failures surface as
StorageWriteError from the store.
"""

import json
import logging
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from ..common.config import REVIEWER_KEY, SESSION_KEY
from ..common.schemas import ReviewerDecision, ReviewerMap, SavedSession
from ..common.storage import KeyValueStore

logger = logging.getLogger("signaldesk.engine.persistence")

DEFAULT_SESSION_CAP = 20

ReviewerStore = Dict[str, Dict[str, ReviewerDecision]]

_sessions_adapter = TypeAdapter(List[SavedSession])
_reviewer_store_adapter = TypeAdapter(ReviewerStore)


def _dump(value, adapter: TypeAdapter) -> str:
    return json.dumps(adapter.dump_python(value, mode="json", by_alias=True))


# ============================================================================
# Sessions
# ============================================================================

def load_sessions(store: KeyValueStore) -> List[SavedSession]:
    """Load saved sessions; missing or corrupt data yields []"""
    raw = store.get(SESSION_KEY)
    if not raw:
        return []

    try:
        return _sessions_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning("Discarding unreadable session list (%d errors)", e.error_count())
        return []


def save_session_to_storage(
    session: SavedSession,
    existing: List[SavedSession],
    store: KeyValueStore,
    cap: int = DEFAULT_SESSION_CAP,
) -> List[SavedSession]:
    """
    Prepend a session and persist the list, keeping the newest `cap` entries.

    Raises:
        StorageWriteError: the store rejected the write
    """
    merged = [session, *existing][:cap]
    store.set(SESSION_KEY, _dump(merged, _sessions_adapter))
    logger.info("Saved session %s (%d stored)", session.id, len(merged))
    return merged


def find_session(sessions: List[SavedSession], session_id: str) -> Optional[SavedSession]:
    for session in sessions:
        if session.id == session_id:
            return session
    return None


# ============================================================================
# Reviewer entries
# ============================================================================

def _load_reviewer_store(store: KeyValueStore) -> ReviewerStore:
    raw = store.get(REVIEWER_KEY)
    if not raw:
        return {}

    try:
        return _reviewer_store_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning("Discarding unreadable reviewer store (%d errors)", e.error_count())
        return {}


def load_reviewer_decisions(scope_key: str, store: KeyValueStore) -> ReviewerMap:
    """Reviewer entries for one scope (empty when none or unreadable)"""
    return dict(_load_reviewer_store(store).get(scope_key, {}))


def save_reviewer_decision(
    entry: ReviewerDecision,
    current: ReviewerMap,
    scope_key: str,
    store: KeyValueStore,
) -> ReviewerMap:
    """
    Upsert a reviewer entry within a scope and persist the whole store.

    Args:
        entry: New disposition; replaces any entry for the same decision id
        current: The scope's entries as currently held by the caller
        scope_key: Scope from intake_scope_key()
        store: Backing store

    Returns:
        The scope's updated entries

    Raises:
        StorageWriteError: the store rejected the write
    """
    next_scope = {**current, entry.decision_id: entry}
    next_store = {**_load_reviewer_store(store), scope_key: next_scope}
    store.set(REVIEWER_KEY, _dump(next_store, _reviewer_store_adapter))
    logger.info("Recorded reviewer status %s for %s in %s", entry.status.value, entry.decision_id, scope_key)
    return next_scope
