"""Main pipeline — generate, validate and repair a project within fixed budgets.

One request runs as a sequential state machine:

    prompt -> model -> recover -> shape -> reconcile/augment
           -> structure -> syntax -> quality -> lint -> result

A failing gate feeds its issues back to the model, the new response
replaces the manifest wholesale, and validation starts again from the
structure gate. Budgets are per gate and survive the restart, so each
gate can repair at most its own budget per request. The caller publishes
the terminal phase once the result is stored.
"""

import logging
import time

from agents.generator import GeneratorAgent
from agents.linter import LintRunner
from config.defaults import DEFAULTS
from core.augmenter import augment
from core.dependencies import reconcile
from core.errors import Cancelled, ManifestRejected, RecoverableParseFailure
from core.gates import GATES, PARSE, initial_counters
from core.json_recovery import recover
from core.quality import audit
from core.shape import check_required, validate_shape
from core.state import (
    GenerationRequest,
    GenerationResult,
    LintReport,
    PipelineState,
    ProjectManifest,
    RepairAttempt,
)
from core.syntax import check_syntax

logger = logging.getLogger(__name__)


class Pipeline:
    """Runs generate/edit requests end to end.

    Args:
        client: connected LLMClient (anything with `complete(system, user, attachments)`).
        linter: object with `lint(path, content) -> [LintMessage]`; ESLint by default.
        config: overrides merged over DEFAULTS.
        progress: callable(str) receiving human-readable checkpoints.
            Fire-and-forget: its failures are logged and ignored.
        on_status: callable(str) receiving phase changes, same contract.
        is_cancelled: callable(request_id) -> bool, polled at checkpoints.
        lookup: callable(package) -> version | None for unknown packages.
            Fire-and-forget as well.
    """

    def __init__(self, client, linter=None, config=None, progress=None, on_status=None,
                 is_cancelled=None, lookup=None, sleep=time.sleep):
        self.config = {**DEFAULTS, **(config or {})}
        self.generator = GeneratorAgent(client, self.config, sleep=sleep)
        self.lint_runner = LintRunner(linter, self.config["lint_batch_size"])
        self.progress = progress
        self.on_status = on_status
        self.is_cancelled = is_cancelled
        self.lookup = lookup

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, prompt, attachments=(), request_id=""):
        request = GenerationRequest(prompt=prompt, attachments=tuple(attachments), request_id=request_id)
        return self.run(request)

    def edit(self, existing_manifest, edit_prompt, request_id=""):
        request = GenerationRequest(prompt=edit_prompt, prior=existing_manifest, request_id=request_id)
        return self.run(request)

    def run(self, request):
        state = PipelineState(request=request, gates=initial_counters(self.config))
        self._checkpoint(state)

        self._notify("[1/7] Analyzing requirements...")
        if request.prior is not None:
            message = self.generator.build_edit_prompt(request)
        else:
            message = self.generator.build_generate_prompt(request)
        self._checkpoint(state)

        self._set_status(state, "generating")
        self._notify("[2/7] Generating code...")
        text = self._invoke(state, message, request.attachments)

        self._notify("[3/7] Parsing model output...")
        state.manifest = self._acquire(state, text)

        self._set_status(state, "validating")
        self._run_gates(state)

        self._notify("[6/7] Finalizing project files...")
        logger.info(
            "Generated %d file(s) in %d model invocation(s)",
            len(state.manifest.files), state.invocations,
        )
        result = GenerationResult(
            files=list(state.manifest.files),
            dependencies=dict(state.manifest.dependencies),
            lint_report=state.lint_report or LintReport(),
            attempt_count=state.invocations,
        )
        self._notify("[7/7] Generation complete.")
        return result

    # ------------------------------------------------------------------
    # Model output -> manifest
    # ------------------------------------------------------------------

    def _invoke(self, state, message, attachments=()):
        text = self.generator.invoke(message, attachments)
        state.invocations += 1
        self._checkpoint(state)
        return text

    def _prepare(self, manifest):
        deps = reconcile(manifest.files, manifest.dependencies, self._lookup)
        return augment(ProjectManifest(files=manifest.files, dependencies=deps))

    def _acquire(self, state, text):
        """Recover, shape-check and augment a response, spending the parse budget on failures."""
        counter = state.gates[PARSE]
        while True:
            try:
                recovery = recover(text)
                shaped = validate_shape(
                    recovery.data,
                    max_files=self.config["max_file_count"],
                    max_content=self.config["max_file_content_length"],
                )
                return self._prepare(shaped.manifest)
            except (RecoverableParseFailure, ManifestRejected) as e:
                if counter.exhausted:
                    raise
                counter.attempts += 1
                logger.warning("[parse] Attempt %d/%d: %s", counter.attempts, counter.budget, e)
                self._checkpoint(state)
                text = self._invoke(state, self.generator.build_json_repair_prompt(text, str(e)))

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _check(self, gate, state):
        files = state.manifest.files
        if gate.name == "structure":
            return check_required(state.manifest)
        if gate.name == "syntax":
            return check_syntax(files)
        if gate.name == "quality":
            return audit(files)
        if gate.name == "lint":
            if state.lint_report is None:
                self._set_status(state, "linting")
                self._notify("[5/7] Running lint checks...")
            state.lint_report = self.lint_runner.run(files)
            return state.lint_report.issues()
        raise ValueError(f"Unknown gate: {gate.name}")

    def _repair_prompt(self, gate, state, issues):
        if gate.repair_prompt == "shape":
            error = gate.error(issues)
            return self.generator.build_shape_repair_prompt(state.request, state.manifest, str(error))
        return self.generator.build_repair_prompt(state.request, state.manifest, issues)

    def _run_gates(self, state):
        index = 0
        while index < len(GATES):
            gate = GATES[index]
            counter = state.gates[gate.name]
            issues = self._check(gate, state)
            counter.issues = issues
            if not issues:
                index += 1
                continue

            if counter.exhausted:
                error = gate.error(issues)
                if gate.fatal:
                    logger.error("[%s] Repair budget exhausted: %s", gate.name, error)
                    raise error
                logger.warning("[%s] Max attempts reached, continuing: %s", gate.name, error)
                state.warnings.extend(issues)
                index += 1
                continue

            counter.attempts += 1
            state.last_attempt = RepairAttempt(gate=gate.name, number=counter.attempts, issues=issues)
            first = issues[0]
            logger.warning(
                "[%s] Attempt %d/%d - %d issue(s). First issue: %s %s",
                gate.name, counter.attempts, counter.budget, len(issues), first.location(), first.message,
            )
            self._notify(gate.progress.format(count=len(issues), attempt=counter.attempts, budget=counter.budget))
            self._checkpoint(state)
            text = self._invoke(state, self._repair_prompt(gate, state, issues))
            state.manifest = self._acquire(state, text)
            # A repair replaces every file, so earlier gates see the new draft too
            state.warnings = []
            index = 0

    # ------------------------------------------------------------------
    # Side channels
    # ------------------------------------------------------------------

    def _checkpoint(self, state):
        if self.is_cancelled is not None and self.is_cancelled(state.request.request_id):
            logger.info("Generation cancelled: %s", state.request.request_id or "(no id)")
            raise Cancelled()

    def _notify(self, message):
        if self.progress is None:
            return
        try:
            self.progress(message)
        except Exception as e:
            logger.debug("Progress sink failed: %s", e)

    def _set_status(self, state, status):
        state.status = status
        if self.on_status is None:
            return
        try:
            self.on_status(status)
        except Exception as e:
            logger.debug("Status sink failed: %s", e)

    def _lookup(self, name):
        if self.lookup is None:
            return None
        try:
            return self.lookup(name)
        except Exception as e:
            logger.debug("Package lookup failed for %s: %s", name, e)
            return None
