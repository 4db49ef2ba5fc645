"""Default pipeline settings."""

DEFAULTS = {
    "model": "claude-sonnet-4-5-20250929",
    "max_tokens": 32768,
    # Repair budgets, one per gate. Parse covers malformed or unusable
    # model output before any gate runs.
    "parse_repair_attempts": 2,
    "structure_repair_attempts": 2,
    "syntax_repair_attempts": 2,
    "quality_repair_attempts": 3,
    "lint_repair_attempts": 2,
    # Backend overload backoff: delay = base * 2 ** retry
    "overload_retries": 3,
    "overload_base_delay": 2.0,
    "max_file_count": 300,
    "max_file_content_length": 300_000,
    "max_repair_issues": 40,
    "truncation_candidates": 256,
    "lint_batch_size": 5,
    "lint_command": ["npx", "--no-install", "eslint"],
    "lint_timeout": 60,
    "sandbox_timeout": 30,
    "allowed_commands": ["npx", "eslint", "node"],
    "status_ttl": 30 * 60,
    "status_max_log_lines": 250,
    "job_ttl": 3600,
    "max_jobs": 50,
}
