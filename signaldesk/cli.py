"""
SignalDesk CLI

Usage:
    signaldesk analyze intake.txt
    signaldesk export intake.txt --format json --output pack.json
    signaldesk review intake.txt d-24h-1 accepted --notes "checked numbers"
    signaldesk sessions save "Launch review" intake.txt
    signaldesk serve

Pass "-" as the intake file to read from stdin.
"""

import argparse
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .common.config import SignalDeskConfig, ensure_directories, load_config
from .common.errors import StorageWriteError
from .common.schemas import DecisionStatus, ReviewerDecision, SavedSession, format_fixed
from .common.storage import JsonFileStore
from .engine.export import ExportFormat, export_pack, validate_intake
from .engine.persistence import (
    find_session,
    load_reviewer_decisions,
    load_sessions,
    save_reviewer_decision,
    save_session_to_storage,
)
from .engine.pipeline import PipelineRun, run_pipeline
from .engine.review import intake_scope_key

logger = logging.getLogger("signaldesk.cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 2
EXIT_STORAGE = 3


def _read_intake(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _stores(config: SignalDeskConfig):
    ensure_directories(config)
    return (
        JsonFileStore(config.storage.sessions_path),
        JsonFileStore(config.storage.reviewers_path),
    )


def _run(intake_text: str, session_id: Optional[str], reviewer_store) -> PipelineRun:
    scope_key = intake_scope_key(intake_text, session_id)
    return run_pipeline(intake_text, load_reviewer_decisions(scope_key, reviewer_store), session_id=session_id)


# =============================================================================
# Commands
# =============================================================================

def cmd_analyze(args, config: SignalDeskConfig) -> int:
    intake_text = _read_intake(args.file)
    _, reviewer_store = _stores(config)
    run = _run(intake_text, args.session_id, reviewer_store)

    print(f"Scope: {run.scope_key}")
    for issue in validate_intake(intake_text, config.intake.max_chars):
        print(f"Intake issue: {issue}")

    print(f"Sources: {len(run.sources)}")
    for source in run.sources:
        flag = "" if source.valid else " (invalid url)"
        print(f"  {source.id} [{source.type.value}]{flag} {source.raw}")

    print(f"Claims: {len(run.claims)}")
    for claim in run.claims:
        print(f"  {claim.source_id} {claim.type.value} {claim.confidence.value} ({claim.confidence_score})")

    print("Decisions:")
    for decision in run.decisions:
        print(f"  {decision.id} [{decision.status.value}] score={format_fixed(decision.score, 2)} {decision.title}")
        for reason in decision.governance_reasons:
            print(f"      - {reason}")

    print(f"Export: {'blocked (needs review)' if run.pending_review else 'ready'}")
    return EXIT_OK


def cmd_export(args, config: SignalDeskConfig) -> int:
    intake_text = _read_intake(args.file)
    _, reviewer_store = _stores(config)
    run = _run(intake_text, args.session_id, reviewer_store)

    result = export_pack(
        run.pack,
        intake_text,
        fmt=ExportFormat(args.format),
        title=config.export.title,
        max_chars=config.intake.max_chars,
    )
    if not result.ok:
        print("Export blocked:", file=sys.stderr)
        for reason in result.blocked_reasons:
            print(f"  - {reason}", file=sys.stderr)
        return EXIT_BLOCKED

    if args.output:
        Path(args.output).write_text(result.content, encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        sys.stdout.write(result.content)
        if not result.content.endswith("\n"):
            sys.stdout.write("\n")
    return EXIT_OK


def cmd_review(args, config: SignalDeskConfig) -> int:
    intake_text = _read_intake(args.file)
    _, reviewer_store = _stores(config)
    run = _run(intake_text, args.session_id, reviewer_store)

    if args.decision_id not in {d.id for d in run.auto_decisions}:
        print(f"Unknown decision: {args.decision_id}", file=sys.stderr)
        return EXIT_ERROR

    entry = ReviewerDecision(
        decision_id=args.decision_id,
        status=DecisionStatus(args.status),
        notes=args.notes,
        updated_at=datetime.now(timezone.utc).isoformat(),
    )
    current = load_reviewer_decisions(run.scope_key, reviewer_store)
    save_reviewer_decision(entry, current, run.scope_key, reviewer_store)

    print(f"{args.decision_id} -> {entry.status.value} ({run.scope_key})")
    return EXIT_OK


def cmd_sessions(args, config: SignalDeskConfig) -> int:
    session_store, _ = _stores(config)
    sessions = load_sessions(session_store)

    if args.action == "list":
        if not sessions:
            print("No saved sessions.")
        for session in sessions:
            print(f"{session.id}  {session.created_at}  {session.name}")
        return EXIT_OK

    if args.action == "show":
        session = find_session(sessions, args.session)
        if session is None:
            print(f"Session not found: {args.session}", file=sys.stderr)
            return EXIT_ERROR
        sys.stdout.write(session.intake_text)
        if not session.intake_text.endswith("\n"):
            sys.stdout.write("\n")
        return EXIT_OK

    # save
    name = args.name.strip()
    if not name:
        print("Add a session name before saving.", file=sys.stderr)
        return EXIT_ERROR

    intake_text = _read_intake(args.file)
    issues = validate_intake(intake_text, config.intake.max_chars)
    if issues:
        for issue in issues:
            print(issue, file=sys.stderr)
        return EXIT_ERROR

    session = SavedSession(
        id=str(uuid.uuid4()),
        name=name,
        created_at=datetime.now(timezone.utc).isoformat(),
        intake_text=intake_text,
    )
    save_session_to_storage(session, sessions, session_store, cap=config.intake.session_cap)
    print(f"Saved session {session.id}")
    return EXIT_OK


def cmd_serve(args, config: SignalDeskConfig) -> int:
    from .server import run_server

    run_server()
    return EXIT_OK


# =============================================================================
# Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signaldesk",
        description="Deterministic intelligence briefs, ranked decisions and gated exports.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Summarise sources, claims and decisions")
    analyze.add_argument("file", help="Intake file, or - for stdin")
    analyze.add_argument("--session-id", default=None, help="Scope reviewer state to a session")
    analyze.set_defaults(func=cmd_analyze)

    export = sub.add_parser("export", help="Write the final intelligence pack")
    export.add_argument("file", help="Intake file, or - for stdin")
    export.add_argument(
        "--format",
        default=ExportFormat.MARKDOWN.value,
        choices=[f.value for f in ExportFormat],
        help="Export format",
    )
    export.add_argument("--output", default=None, help="Output path (default: stdout)")
    export.add_argument("--session-id", default=None, help="Scope reviewer state to a session")
    export.set_defaults(func=cmd_export)

    review = sub.add_parser("review", help="Record a reviewer status for a decision")
    review.add_argument("file", help="Intake file, or - for stdin")
    review.add_argument("decision_id", help="Decision id, e.g. d-24h-1")
    review.add_argument("status", choices=[s.value for s in DecisionStatus])
    review.add_argument("--notes", default="", help="Reviewer note")
    review.add_argument("--session-id", default=None, help="Scope reviewer state to a session")
    review.set_defaults(func=cmd_review)

    sessions = sub.add_parser("sessions", help="Manage saved intake sessions")
    session_actions = sessions.add_subparsers(dest="action", required=True)
    session_actions.add_parser("list", help="List saved sessions")
    save = session_actions.add_parser("save", help="Save an intake under a name")
    save.add_argument("name")
    save.add_argument("file", help="Intake file, or - for stdin")
    show = session_actions.add_parser("show", help="Print a saved session's intake")
    show.add_argument("session")
    sessions.set_defaults(func=cmd_sessions)

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    config = load_config()

    try:
        return args.func(args, config)
    except StorageWriteError as e:
        logger.error("Storage write failed: %s", e)
        print(f"Storage error: {e}", file=sys.stderr)
        return EXIT_STORAGE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
