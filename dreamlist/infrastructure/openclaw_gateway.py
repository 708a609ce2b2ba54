"""
OpenClaw gateway client.

Invokes the assistant's session tools (sessions_list, sessions_history)
through the gateway's HTTP tool endpoint.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when a gateway tool call fails."""


def _unwrap_result(result: Any) -> Dict[str, Any]:
    """
    Normalize a tool result into a plain dict.

    Tool results come either as the structured object itself, as
    {"details": {...}}, or as {"content": [{"type": "text", "text": "<json>"}]}.
    """
    if not isinstance(result, dict):
        return {}

    details = result.get("details")
    if isinstance(details, dict):
        return details

    content = result.get("content")
    if isinstance(content, list):
        for part in content:
            if isinstance(part, dict) and part.get("type") == "text":
                try:
                    decoded = json.loads(part.get("text") or "")
                except ValueError:
                    continue
                if isinstance(decoded, dict):
                    return decoded

    return result


class OpenClawGateway:
    """Session listing and history over HTTP."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def invoke(self, tool: str, args: Dict[str, Any]) -> Dict[str, Any]:
        """
        Invoke a gateway tool.

        Args:
            tool: Tool name
            args: Tool arguments

        Returns:
            The unwrapped tool result

        Raises:
            GatewayError: On transport errors, non-2xx answers or ok=false
        """
        try:
            response = await self._client.post("/tools/invoke", json={"tool": tool, "args": args})
        except httpx.HTTPError as e:
            raise GatewayError(f"{tool} failed: {e}") from e

        if not response.is_success:
            raise GatewayError(f"{tool} failed: HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise GatewayError(f"{tool} returned invalid JSON") from e

        if not isinstance(body, dict) or not body.get("ok", False):
            error = body.get("error") if isinstance(body, dict) else None
            raise GatewayError(f"{tool} failed: {error or 'unknown error'}")

        return _unwrap_result(body.get("result"))

    async def list_sessions(self, kinds: Sequence[str], limit: int) -> List[Dict[str, Any]]:
        """
        List active sessions.

        Args:
            kinds: Session kinds to include
            limit: Maximum number of sessions

        Returns:
            Session records, each with at least a "key"
        """
        result = await self.invoke("sessions_list", {"kinds": list(kinds), "limit": limit})
        sessions = result.get("sessions") or []
        return [s for s in sessions if isinstance(s, dict) and s.get("key")]

    async def session_history(self, session_key: str, limit: int) -> List[Dict[str, Any]]:
        """
        Fetch the most recent messages of a session, oldest first.

        Args:
            session_key: Session key
            limit: Maximum number of messages

        Returns:
            Raw message records
        """
        result = await self.invoke(
            "sessions_history",
            {"sessionKey": session_key, "limit": limit, "includeTools": False},
        )
        messages = result.get("messages") or []
        return [m for m in messages if isinstance(m, dict)]
