"""File-backed status records for running generation jobs.

One JSON file per request id:

    {"id", "phase", "logs", "error", "result_location", "updated_at", "expires_at"}

Writes go to a temp file in the same directory and are renamed into place,
so readers never see a half-written record. Records expire a fixed time
after their last update.
"""

import json
import logging
import os
import re
import tempfile
import threading
import time

from config.defaults import DEFAULTS

logger = logging.getLogger(__name__)

PHASES = ("queued", "generating", "validating", "linting", "ready", "failed", "cancelled")

_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class StatusStore:
    def __init__(self, directory, ttl=None, max_log_lines=None, clock=time.time):
        self.directory = directory
        self.ttl = ttl or DEFAULTS["status_ttl"]
        self.max_log_lines = max_log_lines or DEFAULTS["status_max_log_lines"]
        self.clock = clock
        self._lock = threading.Lock()
        os.makedirs(directory, exist_ok=True)

    def _path(self, request_id):
        if not _ID_RE.match(request_id or ""):
            raise ValueError(f"Invalid request id: {request_id!r}")
        return os.path.join(self.directory, f"{request_id}.json")

    def _read(self, request_id):
        try:
            with open(self._path(request_id), "r", encoding="utf-8") as f:
                record = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring malformed status record for %s", request_id)
            return None
        return record if isinstance(record, dict) else None

    def _write(self, record):
        now = self.clock()
        record["updated_at"] = now
        record["expires_at"] = now + self.ttl
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".status-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record, f)
            os.replace(tmp_path, self._path(record["id"]))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        return record

    def _update(self, request_id, **changes):
        with self._lock:
            record = self._read(request_id)
            if record is None or self._expired(record):
                record = self._blank(request_id)
            record.update(changes)
            return self._write(record)

    def _expired(self, record):
        return record.get("expires_at", 0) <= self.clock()

    @staticmethod
    def _blank(request_id):
        return {
            "id": request_id,
            "phase": "queued",
            "logs": [],
            "error": None,
            "result_location": None,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def init(self, request_id):
        self.cleanup()
        with self._lock:
            return self._write(self._blank(request_id))

    def get(self, request_id):
        record = self._read(request_id)
        if record is None or self._expired(record):
            return None
        return record

    def set_phase(self, request_id, phase):
        if phase not in PHASES:
            raise ValueError(f"Unknown phase: {phase}")
        return self._update(request_id, phase=phase)

    def append_log(self, request_id, line):
        line = (line or "").strip()
        if not line:
            return self.get(request_id)
        with self._lock:
            record = self._read(request_id)
            if record is None or self._expired(record):
                record = self._blank(request_id)
            logs = list(record.get("logs") or [])
            logs.append(line)
            record["logs"] = logs[-self.max_log_lines:]
            return self._write(record)

    def complete(self, request_id, result_location):
        return self._update(request_id, phase="ready", result_location=result_location, error=None)

    def fail(self, request_id, error, phase="failed"):
        return self._update(request_id, phase=phase, error=str(error))

    def cleanup(self):
        """Delete expired records. Malformed files are left alone. Returns the count removed."""
        removed = 0
        now = self.clock()
        for name in os.listdir(self.directory):
            if not name.endswith(".json"):
                continue
            path = os.path.join(self.directory, name)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    record = json.load(f)
                expires_at = float(record["expires_at"])
            except (OSError, ValueError, KeyError, TypeError):
                continue
            if expires_at <= now:
                try:
                    os.unlink(path)
                    removed += 1
                except FileNotFoundError:
                    pass
        if removed:
            logger.info("Removed %d expired status record(s)", removed)
        return removed
