#!/usr/bin/env python3
"""SiteSmith - turn a prompt into a lint-clean Next.js project.

Usage:
    python main.py generate --prompt "simple landing page for a bakery"
    python main.py generate --prompt "..." --attach mockup.png --out ./site
    python main.py edit --project ./site --prompt "add a pricing section"
    python main.py check --project ./site
"""

import argparse
import logging
import mimetypes
import os
import sys

from agents.linter import EslintLinter, LintRunner
from core.errors import GenerationError
from core.gates import GATES
from core.orchestrator import Pipeline
from core.project_io import load_manifest, write_manifest
from core.quality import audit
from core.shape import check_required
from core.state import Attachment
from core.syntax import check_syntax
from utils.folder_naming import get_output_dir
from utils.llm import LLMClient
from utils.registry import NpmRegistry


def _format_issues(issues):
    """Format issues for CLI display."""
    lines = []
    for issue in issues:
        marker = "ERROR" if issue.severity == "error" else "WARN"
        rule = f" [{issue.rule}]" if issue.rule else ""
        lines.append(f"  [{marker}] {issue.location()}{rule} {issue.message}")
        if issue.suggestion:
            lines.append(f"           Fix: {issue.suggestion}")
    return "\n".join(lines)


def _load_attachments(paths):
    attachments = []
    for path in paths or []:
        media_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        with open(path, "rb") as f:
            attachments.append(Attachment(name=os.path.basename(path), media_type=media_type, data=f.read()))
    return attachments


def _print_result(result, output_dir):
    report = result.lint_report
    print(f"\nOutput:       {output_dir}")
    print(f"Invocations:  {result.attempt_count}")
    print(f"Lint:         {report.error_count} error(s), {report.warning_count} warning(s)")
    print(f"Dependencies: {len(result.dependencies)}")
    print(f"\nGenerated {len(result.files)} file(s):")
    for f in result.files:
        print(f"  {f.path}")


def _run(args, action):
    with LLMClient() as client:
        pipeline = Pipeline(client, linter=EslintLinter(), progress=print, lookup=NpmRegistry())
        try:
            return action(pipeline)
        except GenerationError as e:
            print(f"\nGeneration failed: {e}", file=sys.stderr)
            return None


def cmd_generate(args):
    attachments = _load_attachments(args.attach)
    result = _run(args, lambda p: p.generate(args.prompt, attachments))
    if result is None:
        return 1
    output_dir = args.out or get_output_dir(args.prompt)
    write_manifest(result.manifest, output_dir)
    _print_result(result, output_dir)
    return 0


def cmd_edit(args):
    existing = load_manifest(args.project)
    result = _run(args, lambda p: p.edit(existing, args.prompt))
    if result is None:
        return 1
    output_dir = args.out or args.project
    write_manifest(result.manifest, output_dir)
    _print_result(result, output_dir)
    return 0


def cmd_check(args):
    """Run the offline gates on an existing project. No model calls."""
    manifest = load_manifest(args.project)
    report = LintRunner(EslintLinter()).run(manifest.files)
    found = {
        "structure": check_required(manifest),
        "syntax": check_syntax(manifest.files),
        "quality": audit(manifest.files),
        "lint": report.issues(),
    }
    failed = False
    for gate in GATES:
        issues = found[gate.name]
        status = "ok" if not issues else f"{len(issues)} issue(s)"
        print(f"{gate.name:<10} {status}")
        if issues:
            print(_format_issues(issues))
            failed = failed or gate.fatal
    return 1 if failed else 0


def main():
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Debug logging")

    parser = argparse.ArgumentParser(
        prog="sitesmith",
        description="Generate and repair Next.js projects from a prompt",
    )
    subparsers = parser.add_subparsers(dest="command")

    gen_parser = subparsers.add_parser("generate", parents=[common], help="Generate a new project")
    gen_parser.add_argument("--prompt", required=True, help="Natural language request")
    gen_parser.add_argument("--attach", nargs="*", help="Images or PDFs to send with the prompt")
    gen_parser.add_argument("--out", help="Output directory (default: generated_sites/<slug>)")

    edit_parser = subparsers.add_parser("edit", parents=[common], help="Edit an existing project")
    edit_parser.add_argument("--project", required=True, help="Project directory to edit")
    edit_parser.add_argument("--prompt", required=True, help="Requested change")
    edit_parser.add_argument("--out", help="Output directory (default: edit in place)")

    check_parser = subparsers.add_parser("check", parents=[common], help="Validate an existing project")
    check_parser.add_argument("--project", required=True, help="Project directory to check")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    commands = {"generate": cmd_generate, "edit": cmd_edit, "check": cmd_check}
    if args.command not in commands:
        parser.print_help()
        return 1
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
