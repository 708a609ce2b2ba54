"""
Session sources: where the sync loop gets assistant messages from.

Two interchangeable strategies share the SessionSource protocol:
- RemoteSessionSource asks the assistant gateway for recent session history
- TranscriptFileSource rescans a directory of JSONL transcripts

Each poll is a fresh, bounded fetch. Dedup state (cache and cursors) is owned
by the caller and passed in.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from dreamlist.domain.message import SessionMessage
from dreamlist.domain.processed_message import ProcessedMessageCache
from dreamlist.utils.time import parse_timestamp

logger = logging.getLogger(__name__)


class SessionCursors:
    """Last message id seen per session key (remote strategy only)."""

    def __init__(self) -> None:
        self._last_ids: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._last_ids)

    def get(self, session_key: str) -> Optional[str]:
        return self._last_ids.get(session_key)

    def advance(self, updates: Dict[str, str]) -> None:
        self._last_ids.update(updates)


@dataclass
class PollBatch:
    """Result of one poll: candidate messages plus the cursor positions observed."""

    messages: List[SessionMessage] = field(default_factory=list)
    cursors: Dict[str, str] = field(default_factory=dict)


class SessionSource(Protocol):
    """Produces messages not yet known to the cache."""

    async def poll_new_messages(
        self,
        cache: ProcessedMessageCache,
        cursors: SessionCursors,
    ) -> PollBatch:
        ...


class SessionGateway(Protocol):
    """Session listing and history capability used by RemoteSessionSource."""

    async def list_sessions(self, kinds: Sequence[str], limit: int) -> List[Dict[str, Any]]:
        ...

    async def session_history(self, session_key: str, limit: int) -> List[Dict[str, Any]]:
        ...


def flatten_content(content: Any) -> str:
    """Turn string / list-of-parts / nested message content into plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type", "text") == "text":
                text = item.get("text")
                if isinstance(text, str) and text:
                    parts.append(text)
        return "\n".join(parts)
    if isinstance(content, dict):
        if "content" in content:
            return flatten_content(content["content"])
        text = content.get("text")
        if isinstance(text, str):
            return text
    return ""


def record_to_message(
    record: Dict[str, Any],
    session_key: str,
    file_path: Optional[str] = None,
) -> Optional[SessionMessage]:
    """
    Build a SessionMessage from a raw history/transcript record.

    Args:
        record: Decoded record with an id field and a message/content field
        session_key: Session the record belongs to
        file_path: Transcript path, if the record came from a file

    Returns:
        The message, or None if the record has no id or no text
    """
    message_id = record.get("messageId") or record.get("id")
    body = record.get("message")
    if body is None:
        body = record.get("content")
    text = flatten_content(body).strip()

    if not message_id or not text:
        return None

    timestamp = record.get("timestamp")
    if timestamp is None and isinstance(body, dict):
        timestamp = body.get("timestamp")

    return SessionMessage(
        session_key=session_key,
        message_id=str(message_id),
        text=text,
        timestamp=parse_timestamp(timestamp),
        file_path=file_path,
    )


def session_kind(session_key: str) -> str:
    """Classify a session key as "main", "subagent" or "other"."""
    if ":subagent:" in session_key:
        return "subagent"
    parts = session_key.split(":")
    if len(parts) == 3 and parts[0] == "agent" and parts[2] == "main":
        return "main"
    return "other"


def _after_cursor(messages: List[SessionMessage], cursor: Optional[str]) -> List[SessionMessage]:
    """Messages newer than the cursor; all of them if the cursor is not in the window."""
    if cursor is None:
        return messages
    for index in range(len(messages) - 1, -1, -1):
        if messages[index].message_id == cursor:
            return messages[index + 1:]
    return messages


class RemoteSessionSource:
    """Polls recent session history through the assistant gateway."""

    def __init__(
        self,
        gateway: SessionGateway,
        list_kinds: Iterable[str] = ("main", "other"),
        session_filter: Iterable[str] = ("main", "subagent"),
        list_limit: int = 20,
        history_limit: int = 50,
    ):
        self.gateway = gateway
        self.list_kinds = list(list_kinds)
        self.session_filter = set(session_filter)
        self.list_limit = list_limit
        self.history_limit = history_limit

    async def poll_new_messages(
        self,
        cache: ProcessedMessageCache,
        cursors: SessionCursors,
    ) -> PollBatch:
        """
        Fetch new messages from every monitored session.

        A failure to list sessions propagates to the caller; a failure on a
        single session only skips that session. Only messages after the
        session cursor are candidates, so keys evicted from the cache are
        not re-emitted while they stay in the fetched history.
        """
        sessions = await self.gateway.list_sessions(self.list_kinds, self.list_limit)
        batch = PollBatch()

        for session in sessions:
            session_key = session.get("key") if isinstance(session, dict) else None
            if not session_key:
                logger.debug(f"Skipping session record without key: {session!r}")
                continue
            if session_kind(session_key) not in self.session_filter:
                continue

            try:
                records = await self.gateway.session_history(session_key, self.history_limit)
            except Exception as e:
                logger.warning(f"Error fetching history for session {session_key}: {e}")
                continue

            messages = [
                message
                for message in (record_to_message(r, session_key) for r in records)
                if message is not None
            ]
            if not messages:
                continue

            newest_id = messages[-1].message_id
            cursor = cursors.get(session_key)
            if cursor == newest_id:
                continue

            batch.messages.extend(m for m in _after_cursor(messages, cursor) if not cache.seen(m.key))
            batch.cursors[session_key] = newest_id

        return batch


class TranscriptFileSource:
    """
    Rescans a directory of JSONL transcripts on every poll.

    There is no file offset: every line not already in the cache is a
    candidate. The session key is the transcript file name without suffix.
    """

    def __init__(self, directory: Path, pattern: str = "*.jsonl"):
        self.directory = Path(directory).expanduser()
        self.pattern = pattern

    async def poll_new_messages(
        self,
        cache: ProcessedMessageCache,
        cursors: SessionCursors,
    ) -> PollBatch:
        messages = await asyncio.to_thread(self._scan_directory)
        return PollBatch(messages=[m for m in messages if not cache.seen(m.key)])

    def _scan_directory(self) -> List[SessionMessage]:
        if not self.directory.is_dir():
            logger.debug(f"Transcript directory {self.directory} does not exist")
            return []

        messages: List[SessionMessage] = []
        for path in sorted(self.directory.glob(self.pattern)):
            if path.is_file():
                messages.extend(self._read_transcript(path))
        return messages

    def _read_transcript(self, path: Path) -> List[SessionMessage]:
        try:
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            logger.warning(f"Cannot read transcript {path}: {e}")
            return []

        messages = []
        for line_no, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except ValueError:
                # Usually a partially written last line
                logger.debug(f"Skipping malformed line {line_no} in {path.name}")
                continue
            if not isinstance(record, dict):
                continue

            message = record_to_message(record, session_key=path.stem, file_path=str(path))
            if message is not None:
                messages.append(message)
        return messages
