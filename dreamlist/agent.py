"""
Dream List sync agent - entry point.

Watches assistant sessions (through the gateway or local transcripts) and
adds the tasks it finds to the Dream List API.

Usage:
    dreamlist-sync [--api-url URL] [--source remote|file] [--poll-interval MS]
                   [--transcript-dir DIR] [--session-kinds K1,K2] [--max-history N]
"""

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import List, Optional, Tuple

from dreamlist.config.logging_config import configure_logging
from dreamlist.config.settings import Settings, get_settings
from dreamlist.domain.processed_message import ProcessedMessageCache
from dreamlist.infrastructure.openclaw_gateway import OpenClawGateway
from dreamlist.infrastructure.scheduler import create_scheduler, start_scheduler, stop_scheduler
from dreamlist.infrastructure.session_source import (
    RemoteSessionSource,
    SessionSource,
    TranscriptFileSource,
)
from dreamlist.infrastructure.todo_client import TaskStoreClient
from dreamlist.usecases.sync_service import TaskDispatcher, TodoSyncService

logger = logging.getLogger("dreamlist.agent")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dreamlist-sync",
        description="Monitor assistant sessions and add the tasks they mention to Dream List.",
        epilog="Every option can also be set with a DREAMLIST_* environment variable.",
    )
    parser.add_argument("--api-url", help="Dream List API URL (DREAMLIST_API_URL)")
    parser.add_argument("--source", choices=["remote", "file"], help="Session source strategy")
    parser.add_argument("--poll-interval", type=int, metavar="MS", help="Poll interval in milliseconds")
    parser.add_argument("--transcript-dir", help="Directory of JSONL transcripts (file source)")
    parser.add_argument("--session-kinds", help="Comma-separated session kinds to list (remote source)")
    parser.add_argument("--max-history", type=int, help="Messages fetched per session per poll")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command-line flags applied on top."""
    overrides = {
        "api_url": args.api_url,
        "source_mode": args.source,
        "poll_interval_ms": args.poll_interval,
        "transcript_dir": args.transcript_dir,
        "session_kinds": args.session_kinds,
        "max_history": args.max_history,
    }
    update = {key: value for key, value in overrides.items() if value is not None}
    if args.debug:
        update["debug"] = True
    return settings.model_copy(update=update) if update else settings


def build_session_source(settings: Settings) -> Tuple[SessionSource, Optional[OpenClawGateway]]:
    """
    Select the session source strategy from settings.

    Returns:
        The source, plus the gateway client to close on shutdown (remote only)
    """
    if settings.source_mode == "file":
        return TranscriptFileSource(settings.transcript_path), None

    if settings.source_mode != "remote":
        raise ValueError(f"Unknown source mode: {settings.source_mode}")

    gateway = OpenClawGateway(
        settings.gateway_url,
        token=settings.gateway_token,
        timeout=settings.request_timeout_s,
    )
    source = RemoteSessionSource(
        gateway,
        list_kinds=settings.session_kinds_list,
        session_filter=settings.session_filter_list,
        list_limit=settings.session_list_limit,
        history_limit=settings.max_history,
    )
    return source, gateway


async def run_agent(
    settings: Settings,
    dispatcher: Optional[TaskDispatcher] = None,
    source: Optional[SessionSource] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> int:
    """
    Run the sync agent until stopped.

    Args:
        settings: Agent settings
        dispatcher: Task store client (built from settings if omitted)
        source: Session source (built from settings if omitted)
        stop_event: Event that ends the agent when set (SIGINT/SIGTERM set it)

    Returns:
        Process exit status: 0 on clean shutdown, 1 if the task API is unreachable
    """
    client: Optional[TaskStoreClient] = None
    gateway: Optional[OpenClawGateway] = None
    if dispatcher is None:
        client = TaskStoreClient(
            settings.api_url,
            source=settings.task_source,
            tag=settings.task_tag,
            timeout=settings.request_timeout_s,
        )
        dispatcher = client
    if source is None:
        source, gateway = build_session_source(settings)

    service = TodoSyncService(
        source,
        dispatcher,
        cache=ProcessedMessageCache(settings.max_history, settings.cache_multiplier),
    )

    logger.info("Dream List sync agent starting")
    logger.info(f"API URL: {settings.api_url}")
    logger.info(f"Source: {settings.source_mode}")
    logger.info(f"Poll interval: {settings.poll_interval_ms}ms")

    try:
        if not await service.probe():
            logger.error(
                f"Cannot connect to the Dream List API at {settings.api_url}. "
                "Make sure the app is running."
            )
            return 1
        logger.info("Connected to Dream List API, watching for new tasks...")

        if stop_event is None:
            stop_event = asyncio.Event()
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                # Not available on Windows event loops
                with contextlib.suppress(NotImplementedError):
                    loop.add_signal_handler(sig, stop_event.set)

        scheduler = create_scheduler(service, settings.poll_interval_seconds)
        start_scheduler(scheduler)
        try:
            await stop_event.wait()
        finally:
            service.stop()
            stop_scheduler(scheduler)
        logger.info("Sync agent stopped")
        return 0
    finally:
        if client is not None:
            await client.aclose()
        if gateway is not None:
            await gateway.aclose()


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = apply_overrides(get_settings(), args)

    configure_logging(settings.debug)

    sys.exit(asyncio.run(run_agent(settings)))


if __name__ == "__main__":
    main()
