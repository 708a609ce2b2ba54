"""
Session message and extracted task models.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from dreamlist.domain.todo import Priority
from dreamlist.utils.time import to_epoch_ms


def message_key(session_key: str, message_id: str) -> str:
    """Canonical dedup identity: message id scoped by its session key."""
    return f"{session_key}:{message_id}"


class SessionMessage(BaseModel):
    """A message observed in an assistant session. Immutable once observed."""

    model_config = ConfigDict(frozen=True)

    session_key: str
    message_id: str
    text: str
    timestamp: Optional[datetime] = None
    file_path: Optional[str] = None  # set by the transcript file source

    @property
    def key(self) -> str:
        return message_key(self.session_key, self.message_id)


class ExtractedTask(BaseModel):
    """A task phrase found in a message, ready to be sent to the task store."""

    text: str = Field(..., min_length=1, max_length=200)
    priority: Priority
    session_key: str
    message_id: str
    extracted_at: datetime
    file_path: Optional[str] = None

    def metadata(self) -> Dict[str, Any]:
        """Provenance attached to the created todo."""
        meta: Dict[str, Any] = {
            "sessionKey": self.session_key,
            "messageId": self.message_id,
            "timestamp": to_epoch_ms(self.extracted_at),
        }
        if self.file_path:
            meta["filePath"] = self.file_path
        return meta

    def to_payload(self, source: str, tag: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the POST /todos body for this task.

        Args:
            source: Value for the "source" field (e.g. "openclaw")
            tag: Optional tag (e.g. "bot")

        Returns:
            JSON-serializable payload
        """
        payload: Dict[str, Any] = {
            "text": self.text,
            "priority": self.priority.value,
            "source": source,
            "metadata": self.metadata(),
        }
        if tag:
            payload["tag"] = tag
        return payload
