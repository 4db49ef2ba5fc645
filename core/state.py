"""Pipeline state models shared across all stages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Attachment:
    name: str
    media_type: str     # "image/png", "application/pdf", ...
    data: bytes


@dataclass(frozen=True)
class FileEntry:
    path: str           # relative path e.g. "app/page.tsx"
    content: str


@dataclass
class ProjectManifest:
    files: list[FileEntry] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)

    def paths(self):
        return [f.path for f in self.files]

    def get(self, path):
        for f in self.files:
            if f.path == path:
                return f
        return None

    def to_dict(self):
        return {
            "files": [{"path": f.path, "content": f.content} for f in self.files],
            "dependencies": dict(self.dependencies),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            files=[FileEntry(path=f["path"], content=f["content"]) for f in data.get("files", [])],
            dependencies=dict(data.get("dependencies") or {}),
        )


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    attachments: tuple[Attachment, ...] = ()
    prior: ProjectManifest | None = None     # set in edit mode
    request_id: str = ""


@dataclass
class Issue:
    category: str       # "structure", "syntax", "quality", "lint"
    severity: str       # "error", "warning"
    path: str
    line: int
    column: int
    message: str
    rule: str | None = None
    suggestion: str = ""

    def location(self):
        return f"{self.path}:{self.line}:{self.column}"

    def to_dict(self):
        return {
            "category": self.category,
            "severity": self.severity,
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "rule": self.rule,
            "suggestion": self.suggestion,
        }


@dataclass
class LintMessage:
    line: int
    column: int
    severity: str       # "error" | "warning"
    rule: str | None
    message: str


@dataclass
class FileLintResult:
    path: str
    messages: list[LintMessage] = field(default_factory=list)

    @property
    def error_count(self):
        return sum(1 for m in self.messages if m.severity == "error")

    @property
    def warning_count(self):
        return sum(1 for m in self.messages if m.severity == "warning")


@dataclass
class LintReport:
    passed: bool = True
    error_count: int = 0
    warning_count: int = 0
    files: list[FileLintResult] = field(default_factory=list)

    def issues(self):
        """Lint errors as repair issues, in file order."""
        return [
            Issue(
                category="lint",
                severity="error",
                path=result.path,
                line=m.line,
                column=m.column,
                message=m.message,
                rule=m.rule,
            )
            for result in self.files
            for m in result.messages
            if m.severity == "error"
        ]

    def to_dict(self):
        return {
            "passed": self.passed,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "files": [
                {
                    "path": r.path,
                    "messages": [
                        {
                            "line": m.line,
                            "column": m.column,
                            "severity": m.severity,
                            "rule": m.rule,
                            "message": m.message,
                        }
                        for m in r.messages
                    ],
                }
                for r in self.files
            ],
        }


@dataclass
class RepairAttempt:
    gate: str
    number: int
    issues: list[Issue]


@dataclass
class GateState:
    name: str
    budget: int
    attempts: int = 0
    issues: list[Issue] = field(default_factory=list)

    @property
    def exhausted(self):
        return self.attempts >= self.budget


@dataclass
class PipelineState:
    request: GenerationRequest
    manifest: ProjectManifest | None = None
    gates: dict[str, GateState] = field(default_factory=dict)
    last_attempt: RepairAttempt | None = None
    lint_report: LintReport | None = None
    invocations: int = 0
    status: str = "queued"              # queued|generating|validating|linting
    warnings: list[Issue] = field(default_factory=list)


@dataclass
class GenerationResult:
    files: list[FileEntry]
    dependencies: dict[str, str]
    lint_report: LintReport
    attempt_count: int

    @property
    def manifest(self):
        return ProjectManifest(files=list(self.files), dependencies=dict(self.dependencies))

    def to_dict(self):
        return {
            "files": [{"path": f.path, "content": f.content} for f in self.files],
            "dependencies": dict(self.dependencies),
            "lint_report": self.lint_report.to_dict(),
            "attempt_count": self.attempt_count,
        }
