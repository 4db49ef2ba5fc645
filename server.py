#!/usr/bin/env python3
"""SiteSmith - HTTP job API for the generation pipeline."""

import base64
import binascii
import logging
import os
import threading
import time
import uuid

from flask import Flask, jsonify, request

from agents.linter import EslintLinter
from config.defaults import DEFAULTS
from core.errors import Cancelled, GenerationError
from core.orchestrator import Pipeline
from core.project_io import write_manifest
from core.state import Attachment, ProjectManifest
from core.status_store import StatusStore
from utils.folder_naming import get_output_dir
from utils.llm import LLMClient
from utils.registry import NpmRegistry

logger = logging.getLogger(__name__)

app = Flask(__name__)

STATUS_DIR = os.environ.get(
    "SITESMITH_STATUS_DIR",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "tmp", "generation-status"),
)
status_store = StatusStore(STATUS_DIR)
registry = NpmRegistry()

# Jobs keyed by job_id: {"result": GenerationResult | None, "created": timestamp, "done": bool}
_jobs = {}
_jobs_lock = threading.Lock()
_cancelled = set()
_MAX_JOBS = DEFAULTS["max_jobs"]
_JOB_TTL = DEFAULTS["job_ttl"]


def _cleanup_jobs():
    """Remove expired jobs. Called under _jobs_lock."""
    now = time.time()
    expired = [jid for jid, job in _jobs.items() if now - job["created"] > _JOB_TTL]
    for jid in expired:
        del _jobs[jid]
        _cancelled.discard(jid)
    # If still over limit, remove oldest finished jobs
    if len(_jobs) > _MAX_JOBS:
        finished = sorted(
            (item for item in _jobs.items() if item[1]["done"]),
            key=lambda x: x[1]["created"],
        )
        for jid, _ in finished[:len(_jobs) - _MAX_JOBS]:
            del _jobs[jid]
            _cancelled.discard(jid)


def _create_job():
    job_id = uuid.uuid4().hex[:12]
    with _jobs_lock:
        _cleanup_jobs()
        _jobs[job_id] = {"result": None, "created": time.time(), "done": False}
    status_store.init(job_id)
    return job_id


def _get_job(job_id):
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job and time.time() - job["created"] > _JOB_TTL:
            _jobs.pop(job_id, None)
            return None
        return job


def _is_cancelled(job_id):
    with _jobs_lock:
        return job_id in _cancelled


def _build_pipeline(job_id):
    """Pipeline wired to this job's status record. Tests patch this."""
    client = LLMClient()
    pipeline = Pipeline(
        client,
        linter=EslintLinter(),
        progress=lambda line: status_store.append_log(job_id, line),
        on_status=lambda phase: status_store.set_phase(job_id, phase),
        is_cancelled=_is_cancelled,
        lookup=registry,
    )
    return client, pipeline


def _finish(job_id, result=None):
    with _jobs_lock:
        if job_id in _jobs:
            _jobs[job_id]["result"] = result
            _jobs[job_id]["done"] = True


def _run_job(job_id, prompt, attachments=(), existing=None):
    """Run one job. The job is marked done before its record turns terminal."""
    client, pipeline = _build_pipeline(job_id)
    try:
        client.connect()
        if existing is not None:
            result = pipeline.edit(existing, prompt, request_id=job_id)
        else:
            result = pipeline.generate(prompt, attachments, request_id=job_id)
        output_dir = get_output_dir(prompt)
        write_manifest(result.manifest, output_dir)
        _finish(job_id, result)
        status_store.complete(job_id, output_dir)
    except Cancelled as e:
        _finish(job_id)
        status_store.fail(job_id, e, phase="cancelled")
    except GenerationError as e:
        logger.error("Job %s failed: %s", job_id, e)
        _finish(job_id)
        status_store.fail(job_id, e)
    except Exception as e:
        logger.exception("Job %s crashed", job_id)
        _finish(job_id)
        status_store.fail(job_id, e)
    finally:
        client.close()


def _spawn(target, *args):
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


def _parse_attachments(raw):
    attachments = []
    for item in raw or []:
        if not isinstance(item, dict) or not item.get("data"):
            raise ValueError("Each attachment needs base64 'data'")
        try:
            data = base64.b64decode(item["data"], validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Attachment is not valid base64: {item.get('name', '?')}") from e
        attachments.append(Attachment(
            name=item.get("name", "attachment"),
            media_type=item.get("media_type", "application/octet-stream"),
            data=data,
        ))
    return tuple(attachments)


@app.route("/api/generate", methods=["POST"])
def api_generate():
    """Start a generation job. Poll /api/status/<job_id> for progress."""
    data = request.get_json(silent=True)
    if not data or not str(data.get("prompt", "")).strip():
        return jsonify({"error": "Missing prompt"}), 400
    try:
        attachments = _parse_attachments(data.get("attachments"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    job_id = _create_job()
    _spawn(_run_job, job_id, data["prompt"].strip(), attachments)
    return jsonify({"job_id": job_id}), 202


@app.route("/api/edit", methods=["POST"])
def api_edit():
    """Start an edit job from a finished job's result or an explicit manifest."""
    data = request.get_json(silent=True)
    if not data or not str(data.get("prompt", "")).strip():
        return jsonify({"error": "Missing prompt"}), 400

    if data.get("job_id"):
        job = _get_job(data["job_id"])
        if not job or job["result"] is None:
            return jsonify({"error": "Job not found or has no result"}), 404
        existing = job["result"].manifest
    elif isinstance(data.get("files"), list):
        try:
            existing = ProjectManifest.from_dict(data)
        except (KeyError, TypeError):
            return jsonify({"error": "Each file needs 'path' and 'content'"}), 400
    else:
        return jsonify({"error": "Missing job_id or files"}), 400

    job_id = _create_job()
    _spawn(_run_job, job_id, data["prompt"].strip(), (), existing)
    return jsonify({"job_id": job_id}), 202


@app.route("/api/status/<job_id>")
def api_status(job_id):
    try:
        record = status_store.get(job_id)
    except ValueError:
        record = None
    if not record:
        return jsonify({"error": "Job not found"}), 404
    return jsonify(record)


@app.route("/api/result/<job_id>")
def api_result(job_id):
    job = _get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found"}), 404
    if not job["done"]:
        return jsonify({"error": "Job still running"}), 409
    if job["result"] is None:
        record = status_store.get(job_id) or {}
        return jsonify({"error": record.get("error") or "Job produced no result"}), 409
    return jsonify(job["result"].to_dict())


@app.route("/api/cancel/<job_id>", methods=["POST"])
def api_cancel(job_id):
    job = _get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found"}), 404
    if job["done"]:
        return jsonify({"error": "Job already finished"}), 409
    with _jobs_lock:
        _cancelled.add(job_id)
    status_store.append_log(job_id, "Cancellation requested.")
    return jsonify({"job_id": job_id, "cancelled": True})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    port = int(os.environ.get("PORT", 5001))
    print(f"SiteSmith running at http://localhost:{port}")
    app.run(debug=False, port=port)
