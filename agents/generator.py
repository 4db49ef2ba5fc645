"""Generator agent — builds prompts and invokes the model for first drafts and repairs."""

import json
import logging
import os
import time
from string import Template

from agents.patch_composer import PatchComposer
from config.defaults import DEFAULTS
from config.stacks import NEXTJS
from core.errors import BackendOverload

logger = logging.getLogger(__name__)

_PROMPT_DIR = os.path.join(os.path.dirname(__file__), "prompts")

# Malformed text echoed back for JSON repair is capped to keep the prompt bounded.
_MAX_ECHO_CHARS = 200_000


def _load_prompt(name):
    with open(os.path.join(_PROMPT_DIR, f"{name}.txt"), encoding="utf-8") as f:
        return f.read()


def _render(name, **variables):
    return Template(_load_prompt(name)).safe_substitute(variables)


def _files_json(manifest):
    return json.dumps([{"path": f.path, "content": f.content} for f in manifest.files])


class GeneratorAgent:
    """Every model invocation in the pipeline goes through this agent.

    Overload errors are retried here with exponential backoff
    (base_delay * 2 ** n); every other backend error propagates.
    """

    name = "generator"

    def __init__(self, client, config=None, sleep=time.sleep, composer=None):
        config = {**DEFAULTS, **(config or {})}
        self.client = client
        self.retries = config["overload_retries"]
        self.base_delay = config["overload_base_delay"]
        self.sleep = sleep
        self.composer = composer or PatchComposer(config["max_repair_issues"])
        self.system_prompt = _load_prompt("system")

    def invoke(self, user_message, attachments=()):
        for retry in range(self.retries + 1):
            try:
                return self.client.complete(self.system_prompt, user_message, attachments)
            except BackendOverload as e:
                if retry >= self.retries:
                    raise
                delay = self.base_delay * (2 ** retry)
                logger.warning("Backend overloaded (%s); retrying in %.1fs", e, delay)
                self.sleep(delay)

    # ------------------------------------------------------------------
    # Prompt builders
    # ------------------------------------------------------------------

    def build_generate_prompt(self, request):
        return _render("generate", prompt=request.prompt)

    def build_edit_prompt(self, request):
        return _render(
            "edit",
            prompt=request.prompt,
            files=_files_json(request.prior),
            dependencies=json.dumps(request.prior.dependencies),
        )

    def build_repair_prompt(self, request, manifest, issues):
        guidance = ""
        if self.composer.wants_navigation_guidance(issues):
            guidance = _load_prompt("navigation")
        return _render(
            "repair",
            prompt=request.prompt,
            issues=self.composer.format_issues(issues),
            files=_files_json(manifest),
            dependencies=json.dumps(manifest.dependencies),
            guidance=guidance,
        )

    def build_shape_repair_prompt(self, request, manifest, error):
        return _render(
            "shape_repair",
            prompt=request.prompt,
            error=error,
            manifest=json.dumps(manifest.to_dict()),
            required=", ".join(NEXTJS["required_files"]),
        )

    def build_json_repair_prompt(self, text, error):
        return _render("json_repair", text=text[:_MAX_ECHO_CHARS], error=error)
