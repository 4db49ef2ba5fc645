"""Validation gates, in the order a manifest must pass them.

Each gate has its own repair budget. What happens when the budget runs
out is a property of the gate: fatal gates raise their error, the quality
gate logs and lets the manifest through.
"""

from dataclasses import dataclass

from core.errors import LintFailure, QualityShortfall, StructureViolation, SyntaxViolation
from core.state import GateState


@dataclass(frozen=True)
class Gate:
    name: str
    budget_key: str         # key in DEFAULTS
    fatal: bool
    error: type
    repair_prompt: str      # "shape" or "issues"
    progress: str


GATES = (
    Gate(
        name="structure",
        budget_key="structure_repair_attempts",
        fatal=True,
        error=StructureViolation,
        repair_prompt="shape",
        progress="[3/7] Restoring {count} missing file(s) (pass {attempt}/{budget})...",
    ),
    Gate(
        name="syntax",
        budget_key="syntax_repair_attempts",
        fatal=True,
        error=SyntaxViolation,
        repair_prompt="issues",
        progress="[4/7] Resolving {count} syntax issue(s) (pass {attempt}/{budget})...",
    ),
    Gate(
        name="quality",
        budget_key="quality_repair_attempts",
        fatal=False,
        error=QualityShortfall,
        repair_prompt="issues",
        progress="[4/7] Improving mobile layout and navigation (pass {attempt}/{budget})...",
    ),
    Gate(
        name="lint",
        budget_key="lint_repair_attempts",
        fatal=True,
        error=LintFailure,
        repair_prompt="issues",
        progress="[5/7] Fixing {count} lint issue(s) (pass {attempt}/{budget})...",
    ),
)

PARSE = "parse"


def initial_counters(config):
    """Fresh per-request counters: one per gate plus the parse-repair budget."""
    counters = {g.name: GateState(name=g.name, budget=config[g.budget_key]) for g in GATES}
    counters[PARSE] = GateState(name=PARSE, budget=config["parse_repair_attempts"])
    return counters
