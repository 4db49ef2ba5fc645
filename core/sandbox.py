"""Runs allowlisted Node tooling (ESLint) as a subprocess with a timeout.

The child gets a minimal environment: PATH, HOME and any NODE_*/NPM_*
variables from the parent, plus settings that keep ESLint's output plain.
"""

import os
import subprocess
from dataclasses import dataclass

from config.defaults import DEFAULTS

# Output beyond this is cut; a JSON lint report for one file is far smaller.
MAX_OUTPUT_CHARS = 2_000_000

_PASSTHROUGH_PREFIXES = ("NODE_", "NPM_", "npm_")
_PASSTHROUGH = ("PATH", "HOME", "SYSTEMROOT", "APPDATA", "LOCALAPPDATA")


@dataclass
class CommandResult:
    stdout: str
    stderr: str
    returncode: int
    timed_out: bool = False

    @property
    def ok(self):
        return self.returncode == 0


def _child_env():
    env = {
        k: v for k, v in os.environ.items()
        if k in _PASSTHROUGH or k.startswith(_PASSTHROUGH_PREFIXES)
    }
    env["NO_COLOR"] = "1"
    env["FORCE_COLOR"] = "0"
    env["CI"] = "1"
    return env


def _check_command(command):
    if not command or not isinstance(command, list):
        raise ValueError("Command must be a non-empty list of strings")
    executable = command[0]
    allowed = DEFAULTS["allowed_commands"]
    if os.path.basename(executable) != executable or executable not in allowed:
        raise ValueError(f"Command '{executable}' not in allowlist: {allowed}")
    return executable


def run_in_sandbox(command, cwd, timeout=None, input_text=None):
    """Run an allowlisted command and capture its output.

    Args:
        command: argv list, e.g. ["npx", "--no-install", "eslint", "--stdin"]
        cwd: working directory (must exist)
        timeout: seconds before the process is killed (default from config)
        input_text: text piped to the process on stdin

    Returns:
        CommandResult. A timeout or a missing executable is reported with
        returncode -1 rather than raised.

    Raises:
        ValueError: command not allowlisted or cwd invalid.
    """
    executable = _check_command(command)
    if timeout is None:
        timeout = DEFAULTS["sandbox_timeout"]

    cwd = os.path.realpath(cwd)
    if not os.path.isdir(cwd):
        raise ValueError(f"Working directory does not exist: {cwd}")

    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            input=input_text,
            env=_child_env(),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return CommandResult("", f"{executable} timed out after {timeout}s", -1, timed_out=True)
    except FileNotFoundError:
        return CommandResult("", f"Command not found: {executable}", -1)

    return CommandResult(
        stdout=(completed.stdout or "")[:MAX_OUTPUT_CHARS],
        stderr=(completed.stderr or "")[:MAX_OUTPUT_CHARS],
        returncode=completed.returncode,
    )
