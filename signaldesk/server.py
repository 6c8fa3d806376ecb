"""
SignalDesk Server

FastAPI service exposing the operator console's operations.

Endpoints:
- GET /health: Health check
- POST /analyze: Run the pipeline for an intake
- GET /review: Reviewer entries for an intake's scope
- POST /review/{decision_id}: Record a reviewer disposition
- POST /export/{fmt}: Gated markdown/json export
- POST /packets/{role}: Single packet brief
- GET /sessions, POST /sessions, GET /sessions/{session_id}: Saved intakes
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response

from .common.config import SignalDeskConfig, ensure_directories, load_config
from .common.errors import StorageWriteError
from .common.schemas import DecisionStatus, ReviewerDecision, SavedSession
from .common.schemas.records import CamelModel
from .common.storage import JsonFileStore, KeyValueStore
from .engine.export import (
    ExportFormat,
    export_pack,
    packet_to_markdown,
    validate_intake,
)
from .engine.packets import find_packet
from .engine.persistence import (
    find_session,
    load_reviewer_decisions,
    load_sessions,
    save_reviewer_decision,
    save_session_to_storage,
)
from .engine.pipeline import PipelineRun, run_pipeline
from .engine.review import intake_scope_key

load_dotenv()

logger = logging.getLogger("signaldesk.server")

# Global state
config: Optional[SignalDeskConfig] = None
session_store: Optional[KeyValueStore] = None
reviewer_store: Optional[KeyValueStore] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config and open the file-backed stores"""
    global config, session_store, reviewer_store

    config = load_config()
    ensure_directories(config)

    session_store = JsonFileStore(config.storage.sessions_path)
    reviewer_store = JsonFileStore(config.storage.reviewers_path)
    logger.info("SignalDesk ready (data dir: %s)", config.storage.data_dir)

    yield

    logger.info("SignalDesk shutting down")


app = FastAPI(
    title="SignalDesk",
    description="Deterministic intelligence briefs, ranked decisions and gated exports",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Request Models
# =============================================================================

class IntakeRequest(CamelModel):
    """Intake text plus optional explicit session scope"""
    intake_text: str
    session_id: Optional[str] = None


class ReviewSubmission(IntakeRequest):
    """Reviewer disposition for one decision"""
    status: DecisionStatus
    notes: str = ""


class SessionSubmission(CamelModel):
    """Named intake snapshot"""
    name: str
    intake_text: str


# =============================================================================
# Helpers
# =============================================================================

def _require_stores() -> None:
    if config is None or session_store is None or reviewer_store is None:
        raise HTTPException(status_code=503, detail="Stores not initialized")


def _run(request: IntakeRequest) -> PipelineRun:
    """Run the pipeline with the reviewer entries of the request's scope"""
    _require_stores()
    scope_key = intake_scope_key(request.intake_text, request.session_id)
    reviewer_map = load_reviewer_decisions(scope_key, reviewer_store)
    return run_pipeline(request.intake_text, reviewer_map, session_id=request.session_id)


def _storage_failure(e: StorageWriteError) -> HTTPException:
    logger.error("Storage write failed: %s", e)
    return HTTPException(status_code=507, detail=str(e))


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "signaldesk",
        "initialized": config is not None,
    }


@app.post("/analyze")
async def analyze(request: IntakeRequest):
    """Run the pipeline and report governance state"""
    run = _run(request)
    return {
        "scopeKey": run.scope_key,
        "pendingReview": run.pending_review,
        "intakeIssues": validate_intake(request.intake_text, config.intake.max_chars),
        "invalidUrls": [s.id for s in run.invalid_urls],
        "pack": run.pack.to_wire(),
    }


@app.get("/review")
async def get_reviews(
    intake_text: str = Query(..., alias="intakeText"),
    session_id: Optional[str] = Query(None, alias="sessionId"),
):
    """Reviewer entries recorded for an intake's scope"""
    run = _run(IntakeRequest(intake_text=intake_text, session_id=session_id))
    return {
        "scopeKey": run.scope_key,
        "entries": [entry.to_wire() for entry in run.reviewer_trail],
    }


@app.post("/review/{decision_id}")
async def submit_review(decision_id: str, submission: ReviewSubmission):
    """Record a reviewer status for a decision in the intake's scope"""
    run = _run(submission)

    if decision_id not in {d.id for d in run.auto_decisions}:
        raise HTTPException(status_code=404, detail=f"Unknown decision: {decision_id}")

    entry = ReviewerDecision(
        decision_id=decision_id,
        status=submission.status,
        notes=submission.notes,
        updated_at=datetime.now(timezone.utc).isoformat(),
    )
    current = load_reviewer_decisions(run.scope_key, reviewer_store)

    try:
        reviewer_map = save_reviewer_decision(entry, current, run.scope_key, reviewer_store)
    except StorageWriteError as e:
        raise _storage_failure(e)

    merged = run_pipeline(submission.intake_text, reviewer_map, session_id=submission.session_id)
    return {
        "scopeKey": merged.scope_key,
        "pendingReview": merged.pending_review,
        "decisions": [d.to_wire() for d in merged.decisions],
    }


@app.post("/export/{fmt}")
async def export(fmt: ExportFormat, request: IntakeRequest):
    """Final export; 409 with the blocking reasons while gated"""
    run = _run(request)
    result = export_pack(
        run.pack,
        request.intake_text,
        fmt=fmt,
        title=config.export.title,
        max_chars=config.intake.max_chars,
    )

    if not result.ok:
        raise HTTPException(
            status_code=409,
            detail={"message": "Export blocked", "reasons": result.blocked_reasons},
        )

    headers = {"Content-Disposition": f'attachment; filename="{result.filename}"'}
    if result.fmt == ExportFormat.JSON:
        return Response(content=result.content, media_type="application/json", headers=headers)
    return PlainTextResponse(content=result.content, media_type="text/markdown", headers=headers)


@app.post("/packets/{role}")
async def export_packet(role: str, request: IntakeRequest):
    """Standalone markdown brief for one role packet"""
    run = _run(request)
    try:
        packet = find_packet(run.packets, role)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown packet role: {role}")

    return PlainTextResponse(content=packet_to_markdown(packet), media_type="text/markdown")


@app.get("/sessions")
async def list_sessions():
    """Saved sessions, newest first"""
    _require_stores()
    return {"sessions": [s.to_wire() for s in load_sessions(session_store)]}


@app.post("/sessions")
async def save_session(submission: SessionSubmission):
    """Save a named intake snapshot"""
    _require_stores()

    if not submission.name.strip():
        raise HTTPException(status_code=400, detail="Add a session name before saving.")
    issues = validate_intake(submission.intake_text, config.intake.max_chars)
    if issues:
        raise HTTPException(status_code=400, detail={"message": "Fix intake validation issues before saving.", "issues": issues})

    session = SavedSession(
        id=str(uuid.uuid4()),
        name=submission.name.strip(),
        created_at=datetime.now(timezone.utc).isoformat(),
        intake_text=submission.intake_text,
    )

    try:
        sessions = save_session_to_storage(
            session, load_sessions(session_store), session_store, cap=config.intake.session_cap,
        )
    except StorageWriteError as e:
        raise _storage_failure(e)

    return {"session": session.to_wire(), "count": len(sessions)}


@app.get("/sessions/{session_id}")
async def get_session(session_id: str):
    """Restore one saved session"""
    _require_stores()
    session = find_session(load_sessions(session_store), session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Selected session is unavailable.")
    return session.to_wire()


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the SignalDesk server"""
    import uvicorn

    config = load_config()
    logger.info("Starting server on %s:%d", config.server.host, config.server.port)
    uvicorn.run(
        "signaldesk.server:app",
        host=config.server.host,
        port=config.server.port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
