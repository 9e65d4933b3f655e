# MIT License
# Copyright (c) 2025 Hashborn

"""
Minter node HTTP API client.

Only transport concerns live here: timeouts, JSON decoding, mapping network
problems to NodeUnavailable. Interpreting `code` is left to the callers,
they differ in what a non-zero code means.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from ..protocol.config.params import DEFAULT_REQUEST_TIMEOUT
from ..protocol.types.common import MalformedResponse, NodeUnavailable

logger = logging.getLogger(__name__)


class NodeClient:
    def __init__(self, base_url: str, timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def __repr__(self):
        return f"NodeClient({self.base_url})"

    def _decode(self, resp, url: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse(f"Non-JSON response from {url} (HTTP {resp.status_code}): {e}")
        if not isinstance(data, dict):
            raise MalformedResponse(f"Unexpected response shape from {url}: {type(data).__name__}")
        return data

    def _get(self, path: str) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NodeUnavailable(f"GET {url} failed: {e}")
        return self._decode(resp, url)

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise NodeUnavailable(f"POST {url} failed: {e}")
        return self._decode(resp, url)

    def get_validators(self) -> List[Dict[str, Any]]:
        """GET /api/validators -> raw `result` entries."""
        data = self._get("/api/validators")
        code = data.get("code")
        if code != 0:
            raise NodeUnavailable(f"{self.base_url}/api/validators returned code {code}: {data.get('log', '')}")
        result = data.get("result")
        if not isinstance(result, list):
            raise NodeUnavailable(f"{self.base_url}/api/validators: `result` is not a list")
        return result

    def get_transaction_count(self, address: str) -> int:
        """GET /api/transactionCount/{address} -> outgoing tx count."""
        data = self._get(f"/api/transactionCount/{address}")
        code = data.get("code")
        if code != 0:
            raise NodeUnavailable(f"transactionCount for {address} returned code {code}: {data.get('log', '')}")
        try:
            return int(data["result"]["count"])
        except (KeyError, TypeError, ValueError) as e:
            raise NodeUnavailable(f"Malformed transactionCount response: {e}")

    def send_transaction(self, tx_hex: str) -> Dict[str, Any]:
        """POST /api/sendTransaction. Returns the decoded body as is."""
        logger.debug(f"Sending transaction ({len(tx_hex) // 2} bytes) to {self.base_url}")
        return self._post("/api/sendTransaction", {"transaction": tx_hex})
