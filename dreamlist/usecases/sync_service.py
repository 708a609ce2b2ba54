"""
Todo sync service: the loop that turns assistant messages into todos.

One run walks IDLE -> POLLING -> EXTRACTING -> DISPATCHING -> IDLE. Messages
are marked as processed right after evaluation, before dispatch, so a failed
dispatch is dropped rather than retried (at-most-once per message).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol

from dreamlist.domain.message import ExtractedTask, SessionMessage
from dreamlist.domain.processed_message import ProcessedMessageCache
from dreamlist.extraction.priority import classify_priority
from dreamlist.extraction.task_extractor import extract_task
from dreamlist.infrastructure.session_source import SessionCursors, SessionSource
from dreamlist.utils.time import utc_now

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    """Sync loop states."""
    IDLE = "idle"
    POLLING = "polling"
    EXTRACTING = "extracting"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


class TaskDispatcher(Protocol):
    """Task store operations the sync loop needs."""

    async def check_connection(self) -> bool:
        ...

    async def add_todo(self, task: ExtractedTask) -> Optional[str]:
        ...


@dataclass
class SyncReport:
    """Counters for one run."""
    polled: int = 0
    extracted: int = 0
    dispatched: int = 0
    failed: int = 0
    evicted: int = 0
    source_error: bool = False


def evaluate_message(message: SessionMessage) -> Optional[ExtractedTask]:
    """
    Run a message through extraction and priority classification.

    Args:
        message: The message to evaluate

    Returns:
        The extracted task, or None if the message holds no task
    """
    phrase = extract_task(message.text)
    if phrase is None:
        return None

    return ExtractedTask(
        text=phrase,
        priority=classify_priority(phrase, context=message.text),
        session_key=message.session_key,
        message_id=message.message_id,
        extracted_at=utc_now(),
        file_path=message.file_path,
    )


class TodoSyncService:
    """Owns the dedup cache and session cursors for one agent instance."""

    def __init__(
        self,
        source: SessionSource,
        dispatcher: TaskDispatcher,
        cache: Optional[ProcessedMessageCache] = None,
        cursors: Optional[SessionCursors] = None,
    ):
        self.source = source
        self.dispatcher = dispatcher
        self.cache = cache if cache is not None else ProcessedMessageCache()
        self.cursors = cursors if cursors is not None else SessionCursors()
        self.state = SyncState.IDLE
        self._stop_requested = False
        self._running = False

    @property
    def stopped(self) -> bool:
        return self.state == SyncState.TERMINATED

    def stop(self) -> None:
        """Ask the loop to terminate at the next state boundary."""
        self._stop_requested = True
        if not self._running:
            self.state = SyncState.TERMINATED

    async def probe(self) -> bool:
        """
        Startup connectivity check against the task store.

        A failure is fatal for the agent: the loop is terminated.
        """
        ok = await self.dispatcher.check_connection()
        if not ok:
            self.state = SyncState.TERMINATED
        return ok

    def _enter(self, state: SyncState) -> bool:
        if self._stop_requested:
            self.state = SyncState.TERMINATED
            return False
        self.state = state
        return True

    async def run_once(self) -> SyncReport:
        """
        Execute one poll/extract/dispatch cycle.

        Never raises for source or dispatch failures; those are logged and
        the next scheduled run retries.
        """
        report = SyncReport()
        if self._running or self.state == SyncState.TERMINATED:
            return report

        self._running = True
        try:
            await self._run(report)
        finally:
            self._running = False
            if self._stop_requested:
                self.state = SyncState.TERMINATED
            elif self.state != SyncState.TERMINATED:
                self.state = SyncState.IDLE
        return report

    async def _run(self, report: SyncReport) -> None:
        if not self._enter(SyncState.POLLING):
            return
        try:
            batch = await self.source.poll_new_messages(self.cache, self.cursors)
        except Exception as e:
            logger.error(f"Error polling sessions: {e}")
            report.source_error = True
            return
        report.polled = len(batch.messages)

        if not self._enter(SyncState.EXTRACTING):
            return
        tasks: List[ExtractedTask] = []
        for message in batch.messages:
            if self.cache.seen(message.key):
                continue
            try:
                task = evaluate_message(message)
            except Exception:
                logger.exception(f"Error evaluating message {message.key}")
                task = None
            self.cache.mark(message.key)
            if task is not None:
                tasks.append(task)
        report.extracted = len(tasks)
        self.cursors.advance(batch.cursors)

        if tasks and self._enter(SyncState.DISPATCHING):
            for task in tasks:
                if self._stop_requested:
                    break
                try:
                    todo_id = await self.dispatcher.add_todo(task)
                except Exception:
                    logger.exception(
                        f"Error dispatching task from session {task.session_key}, "
                        f"message {task.message_id}"
                    )
                    todo_id = None

                if todo_id is None:
                    report.failed += 1
                else:
                    report.dispatched += 1

        report.evicted = self.cache.evict_if_oversized()

        if report.polled:
            logger.info(
                f"Sync run: {report.polled} new messages, {report.extracted} tasks, "
                f"{report.dispatched} added, {report.failed} failed"
            )
