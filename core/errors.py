"""Error taxonomy for the generation pipeline."""


class GenerationError(Exception):
    """Base class for every terminal pipeline error."""


def _first_issue(issues):
    if not issues:
        return ""
    first = issues[0]
    return f"{first.location()} {first.message}"


class RecoverableParseFailure(GenerationError):
    """Every recovery strategy failed to produce a parsed object."""

    def __init__(self, message, length=0, head="", tail="", position=None):
        super().__init__(message)
        self.length = length
        self.head = head
        self.tail = tail
        self.position = position


class _IssueError(GenerationError):
    prefix = ""

    def __init__(self, issues, message=None):
        self.issues = list(issues)
        super().__init__(message or f"{self.prefix} First issue: {_first_issue(self.issues)}")

    @property
    def first(self):
        return self.issues[0] if self.issues else None


class StructureViolation(_IssueError):
    def __init__(self, issues, message=None):
        missing = ", ".join(i.path for i in issues)
        super().__init__(issues, message or f"Generated project is missing required files: {missing}")


class ManifestRejected(StructureViolation):
    """Manifest unusable for this attempt (empty, oversize, wrong shape)."""

    def __init__(self, message):
        super().__init__([], message)


class SyntaxViolation(_IssueError):
    prefix = "Syntax repair failed."


class QualityShortfall(_IssueError):
    prefix = "Quality issues remain after repair attempts."


class LintFailure(_IssueError):
    prefix = "Lint failed after repair attempts."


class BackendError(GenerationError):
    """Generative backend call failed."""


class BackendOverload(BackendError):
    """Backend is temporarily overloaded; safe to retry after a delay."""


class RateLimit(BackendError):
    """Rate limit or quota exhausted; never retried automatically."""


class Cancelled(GenerationError):
    def __init__(self, message="Generation cancelled by user"):
        super().__init__(message)
