"""
HTTP tool provider.

Talks to a remote tool server exposing an MCP-shaped JSON API:

- ``GET  {base_url}/tools`` returns ``{"tools": [{"name", "description", "inputSchema"}]}``
- ``POST {base_url}/tools/{name}`` with the arguments as JSON body returns
  ``{"content": [{"type": "text", "text": ...}], "isError": false}``
"""

import logging
from typing import Any, Mapping, Optional

import requests
from requests.utils import quote

from ..errors import ProviderError
from ..models import ToolCallResult
from .base import BackendProvider

logger = logging.getLogger(__name__)


class HttpToolProvider(BackendProvider):
    """Provider backed by a remote HTTP tool server."""

    def __init__(
        self,
        name: str,
        base_url: str,
        timeout: int = 30,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(name)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}

    def _request(self, method: str, path: str, payload: Optional[dict] = None) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method,
                url,
                json=payload,
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self._connected = False
            logger.warning("Provider '%s' unreachable at %s: %s", self.name, url, e)
            raise ProviderError(self.name, f"transport failure ({method} {url}): {e}") from e

        if response.status_code == 404:
            raise ProviderError(self.name, f"not found: {path}")
        try:
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            raise ProviderError(self.name, f"HTTP error ({method} {url}): {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON from {url}: {e}") from e

    def list_tools(self) -> list[dict]:
        data = self._request("GET", "/tools")
        self._connected = True
        tools = data.get("tools", []) if isinstance(data, dict) else []
        logger.debug("Provider '%s' lists %d tools", self.name, len(tools))
        return tools

    def call_tool(self, name: str, args: Mapping[str, Any]) -> ToolCallResult:
        logger.debug("Calling tool '%s' on '%s' with args: %s", name, self.name, dict(args))
        data = self._request("POST", f"/tools/{quote(name, safe='')}", dict(args))
        return ToolCallResult(
            success=not data.get("isError", False),
            text=self._extract_text(data),
            provider=self.name,
        )

    @staticmethod
    def _extract_text(data: Mapping[str, Any]) -> str:
        """Join the text parts of an MCP-style content list."""
        parts = [
            part.get("text", "")
            for part in data.get("content") or []
            if isinstance(part, Mapping) and part.get("type", "text") == "text"
        ]
        return "\n".join(parts)
