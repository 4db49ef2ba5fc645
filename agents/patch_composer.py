"""Patch composer — turns validation issues into repair instructions. Zero LLM calls."""

from config.defaults import DEFAULTS
from core.quality import needs_navigation_guidance


class PatchComposer:
    """Formats the issues of one failed gate for the next repair prompt."""

    name = "patch_composer"

    def __init__(self, max_issues=None):
        self.max_issues = max_issues or DEFAULTS["max_repair_issues"]

    def format_issues(self, issues):
        """One line per issue: `- path:line:col [rule] message`, errors first."""
        ordered = sorted(issues, key=lambda i: 0 if i.severity == "error" else 1)
        lines = []
        for issue in ordered[:self.max_issues]:
            line = f"- {issue.location()} [{issue.rule or 'parse'}] {issue.message}"
            if issue.suggestion:
                line += f" Fix: {issue.suggestion}"
            lines.append(line)
        hidden = len(ordered) - self.max_issues
        if hidden > 0:
            lines.append(f"- ... and {hidden} more issue(s) of the same kind")
        return "\n".join(lines)

    def wants_navigation_guidance(self, issues):
        return needs_navigation_guidance(issues)
