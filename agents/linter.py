"""Lint runner — lints every source file through ESLint, in concurrent batches. Zero LLM calls."""

import json
import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor

from config.defaults import DEFAULTS
from config.rules import LINT_RULES
from config.stacks import NEXTJS
from core.sandbox import run_in_sandbox
from core.state import FileLintResult, LintMessage, LintReport

logger = logging.getLogger(__name__)


class LintExecutionError(RuntimeError):
    """The linter could not produce a result for a file."""


def _rule_args(rules):
    args = []
    for rule, setting in rules.items():
        if isinstance(setting, list):
            value = "[" + ", ".join(str(s) for s in setting) + "]"
        else:
            value = setting
        args.extend(["--rule", f"{rule}: {value}"])
    return args


class EslintLinter:
    """Runs ESLint on one file's text via stdin and parses its JSON report."""

    name = "eslint"

    def __init__(self, command=None, rules=None, timeout=None):
        self.command = list(command or DEFAULTS["lint_command"])
        self.rules = rules or LINT_RULES
        self.timeout = timeout or DEFAULTS["lint_timeout"]

    def lint(self, path, content):
        command = self.command + [
            "--no-config-lookup",
            "--stdin",
            "--stdin-filename", path,
            "--format", "json",
        ] + _rule_args(self.rules)

        with tempfile.TemporaryDirectory(prefix="lint_") as work_dir:
            result = run_in_sandbox(
                command, cwd=work_dir, timeout=self.timeout, input_text=content,
            )

        # ESLint exits 1 when it found problems, 2 when it failed to run.
        if result.returncode not in (0, 1):
            detail = result.stderr or result.stdout or f"exit code {result.returncode}"
            raise LintExecutionError(detail.strip()[:300])
        try:
            report = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise LintExecutionError(f"Unreadable ESLint output: {e}") from e
        return parse_eslint_report(report)


def parse_eslint_report(report):
    """Convert ESLint's JSON formatter output into LintMessage entries."""
    messages = []
    for file_result in report or []:
        for m in file_result.get("messages", []):
            messages.append(LintMessage(
                line=m.get("line") or 1,
                column=m.get("column") or 1,
                severity="error" if m.get("severity") == 2 else "warning",
                rule=m.get("ruleId"),
                message=m.get("message", ""),
            ))
    return messages


def is_lintable(path, extensions=None):
    extensions = tuple(extensions or NEXTJS["lint_extensions"])
    return os.path.splitext(path)[1].lower() in extensions


class LintRunner:
    """Partitions files, lints the lintable ones in fixed-size batches, aggregates."""

    name = "linter"

    def __init__(self, linter=None, batch_size=None):
        self.linter = linter or EslintLinter()
        self.batch_size = batch_size or DEFAULTS["lint_batch_size"]

    def _lint_one(self, path, content):
        try:
            return FileLintResult(path=path, messages=self.linter.lint(path, content))
        except Exception as e:
            # One file's failure is that file's error, never the batch's.
            logger.warning("Failed to lint %s: %s", path, e)
            return FileLintResult(path=path, messages=[LintMessage(
                line=1,
                column=1,
                severity="error",
                rule=None,
                message=f"Lint execution failed: {e}",
            )])

    def run(self, files):
        """Lint `files` and return a LintReport."""
        lintable = [f for f in files if is_lintable(f.path)]
        results = []

        with ThreadPoolExecutor(max_workers=self.batch_size) as pool:
            for start in range(0, len(lintable), self.batch_size):
                batch = lintable[start:start + self.batch_size]
                futures = [pool.submit(self._lint_one, f.path, f.content) for f in batch]
                results.extend(future.result() for future in futures)

        errors = sum(r.error_count for r in results)
        warnings = sum(r.warning_count for r in results)
        logger.info(
            "Linted %d of %d file(s): %d error(s), %d warning(s)",
            len(lintable), len(files), errors, warnings,
        )
        return LintReport(
            passed=errors == 0,
            error_count=errors,
            warning_count=warnings,
            files=results,
        )
