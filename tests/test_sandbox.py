"""Tests for core.sandbox — subprocess is mocked throughout."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from core.sandbox import MAX_OUTPUT_CHARS, CommandResult, run_in_sandbox


def _completed(stdout="", stderr="", returncode=0):
    return MagicMock(stdout=stdout, stderr=stderr, returncode=returncode)


@patch("core.sandbox.subprocess.run")
def test_allowed_command_pipes_stdin(mock_run, tmp_path):
    mock_run.return_value = _completed(stdout="[]", returncode=1)
    result = run_in_sandbox(["npx", "eslint", "--stdin"], cwd=str(tmp_path), input_text="const a = 1;")
    assert result == CommandResult(stdout="[]", stderr="", returncode=1)
    assert not result.ok
    kwargs = mock_run.call_args.kwargs
    assert kwargs["input"] == "const a = 1;"
    assert kwargs["text"] is True


@patch("core.sandbox.subprocess.run")
def test_child_environment_is_minimal(mock_run, tmp_path, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "secret")
    monkeypatch.setenv("NODE_OPTIONS", "--max-old-space-size=2048")
    mock_run.return_value = _completed()
    run_in_sandbox(["npx", "eslint"], cwd=str(tmp_path))
    env = mock_run.call_args.kwargs["env"]
    assert "ANTHROPIC_API_KEY" not in env
    assert env["NODE_OPTIONS"] == "--max-old-space-size=2048"
    assert env["NO_COLOR"] == "1"


@patch("core.sandbox.subprocess.run")
def test_output_is_capped(mock_run, tmp_path):
    mock_run.return_value = _completed(stdout="x" * (MAX_OUTPUT_CHARS + 10))
    assert len(run_in_sandbox(["node", "-v"], cwd=str(tmp_path)).stdout) == MAX_OUTPUT_CHARS


@pytest.mark.parametrize("command", [
    ["rm", "-rf", "/"],
    ["bash", "-c", "echo pwned"],
    ["/tmp/npx", "eslint"],
])
def test_disallowed_command(command, tmp_path):
    with pytest.raises(ValueError, match="not in allowlist"):
        run_in_sandbox(command, cwd=str(tmp_path))


def test_invalid_cwd():
    with pytest.raises(ValueError, match="does not exist"):
        run_in_sandbox(["npx", "--version"], cwd="/nonexistent/path")


def test_empty_command(tmp_path):
    with pytest.raises(ValueError, match="non-empty list"):
        run_in_sandbox([], cwd=str(tmp_path))


@patch("core.sandbox.subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="npx", timeout=1))
def test_timeout(mock_run, tmp_path):
    result = run_in_sandbox(["npx", "eslint"], cwd=str(tmp_path), timeout=1)
    assert result.returncode == -1
    assert result.timed_out
    assert "timed out" in result.stderr


@patch("core.sandbox.subprocess.run", side_effect=FileNotFoundError())
def test_command_not_found(mock_run, tmp_path):
    result = run_in_sandbox(["node", "-v"], cwd=str(tmp_path))
    assert result.returncode == -1
    assert "not found" in result.stderr.lower()
