"""npm registry lookup for packages missing from the known-version table.

Best-effort: any failure yields None and the caller falls back to "latest".
Uses stdlib urllib.
"""

import json
import logging
import threading
import urllib.error
import urllib.parse
import urllib.request

logger = logging.getLogger(__name__)

REGISTRY_URL = "https://registry.npmjs.org"


class NpmRegistry:
    """Resolves a package's latest published version to a caret range."""

    def __init__(self, base_url=REGISTRY_URL, timeout=5):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._cache = {}
        self._lock = threading.Lock()

    def latest_version(self, name):
        with self._lock:
            if name in self._cache:
                return self._cache[name]

        version = None
        url = f"{self.base_url}/{urllib.parse.quote(name, safe='@')}/latest"
        try:
            req = urllib.request.Request(url, headers={"Accept": "application/json"})
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                data = json.loads(resp.read().decode("utf-8"))
            if isinstance(data, dict) and isinstance(data.get("version"), str):
                version = f"^{data['version']}"
        except Exception as e:
            # Lookup is advisory; never let it affect the pipeline.
            logger.debug("npm lookup failed for %s: %s", name, e)

        with self._lock:
            self._cache[name] = version
        return version

    __call__ = latest_version
