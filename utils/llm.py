"""Claude API client for code generation."""

import base64
import logging
import os

import anthropic

from config.defaults import DEFAULTS
from core.errors import BackendError, BackendOverload, RateLimit

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = ("rate_limit", "rate limit", "quota", "credit balance", "billing")


def build_content(user_message, attachments=()):
    """Message content blocks: attachments first, then the instruction text."""
    blocks = []
    for att in attachments:
        if att.media_type.startswith("image/"):
            blocks.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": att.media_type,
                    "data": base64.b64encode(att.data).decode("ascii"),
                },
            })
        elif att.media_type == "application/pdf":
            blocks.append({
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": att.media_type,
                    "data": base64.b64encode(att.data).decode("ascii"),
                },
            })
        else:
            text = att.data.decode("utf-8", errors="replace")
            blocks.append({"type": "text", "text": f"Attachment {att.name}:\n{text}"})
    if not blocks:
        return user_message
    blocks.append({"type": "text", "text": user_message})
    return blocks


def classify_api_error(error):
    """Map an anthropic SDK error onto the pipeline's backend errors."""
    if isinstance(error, anthropic.APIConnectionError):
        return BackendOverload(f"Backend unreachable: {error}")
    status = getattr(error, "status_code", None)
    text = str(error).lower()
    if status == 529 or "overloaded" in text:
        return BackendOverload(f"Backend overloaded: {error}")
    if status in (402, 429) or any(marker in text for marker in _QUOTA_MARKERS):
        return RateLimit(f"Backend rate limit or quota exhausted: {error}")
    return BackendError(f"Backend request failed: {error}")


class LLMClient:
    """Explicitly constructed Anthropic client with a connect/close lifecycle.

        with LLMClient() as llm:
            text = llm.complete(system_prompt, user_message)
    """

    def __init__(self, api_key=None, model=None, max_tokens=None):
        self.api_key = api_key
        self.model = model or DEFAULTS["model"]
        self.max_tokens = max_tokens or DEFAULTS["max_tokens"]
        self._client = None

    def connect(self):
        if self._client is not None:
            return self
        api_key = self.api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise RuntimeError(
                "ANTHROPIC_API_KEY environment variable is not set. "
                "Get a key at https://console.anthropic.com/ and run:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'"
            )
        self._client = anthropic.Anthropic(api_key=api_key)
        return self

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def connected(self):
        return self._client is not None

    def complete(self, system_prompt, user_message, attachments=()):
        """Stream one completion and return its full text.

        No internal retry: overload surfaces as BackendOverload for the
        caller to back off on, rate limits as RateLimit.
        """
        if self._client is None:
            raise RuntimeError("LLMClient is not connected; call connect() first")

        text = ""
        try:
            # Streaming avoids the SDK timeout for large max_tokens
            with self._client.messages.stream(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": build_content(user_message, attachments)}],
            ) as stream:
                for chunk in stream.text_stream:
                    text += chunk
                final = stream.get_final_message()
        except anthropic.APIError as e:
            raise classify_api_error(e) from e

        if final.stop_reason == "max_tokens":
            logger.warning("Response hit the token limit after %d chars; output is truncated", len(text))
        logger.info("Model returned %d chars", len(text))
        return text
