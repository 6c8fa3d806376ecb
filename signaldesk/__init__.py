"""
SignalDesk

Deterministic intelligence pipeline: freeform operator intake becomes typed
claims, ranked decisions and execution packets, with export gated on
reviewer governance.

Philosophy:
- Same intake + same reviewer state → identical output
- Every score carries a human-readable rationale
- Reviewer state is scoped per intake; one dataset never unblocks another

Usage:
    from signaldesk.engine import run_pipeline, export_pack
    from signaldesk.engine.persistence import load_reviewer_decisions
    from signaldesk.common.storage import MemoryStore, JsonFileStore
"""

__version__ = "0.1.0"
