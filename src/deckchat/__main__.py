"""Application entry point for deckchat."""

import argparse
import asyncio
import signal
import sys
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError
from structlog.stdlib import BoundLogger

from deckchat.application.services.session import ChatSession
from deckchat.application.services.session_loop import SessionLoop
from deckchat.config import (
    AppConfig,
    ConfigError,
    ConfigFileNotFoundError,
    load_config,
)
from deckchat.domain.entities.event import Event
from deckchat.domain.errors import PersistenceError
from deckchat.infrastructure import (
    Database,
    EventQueue,
    InMemoryTimeline,
    SqliteSessionRepository,
)
from deckchat.infrastructure.logging import get_logger, setup_logging
from deckchat.infrastructure.network import create_publisher
from deckchat.presentation.http.server import HTTPServer

# Shutdown timeout in seconds
SHUTDOWN_TIMEOUT = 30


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Command line arguments. If None, uses sys.argv.
    """
    parser = argparse.ArgumentParser(
        prog="deckchat",
        description="deckchat - Hashtag channel chat session service",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to configuration file (default: config.yaml)",
    )
    return parser.parse_args(args)


async def _cancel_and_wait(*tasks: asyncio.Task) -> None:
    for task in tasks:
        task.cancel()
    for task in tasks:
        try:
            await task
        except asyncio.CancelledError:
            pass


async def run_main_loop(
    event_queue: EventQueue,
    session_loop: SessionLoop,
    shutdown_event: asyncio.Event,
    running_check: Callable[[], bool],
    logger: BoundLogger,
) -> None:
    """Feed queued events to the session loop until shutdown.

    An event dequeued in the same iteration as the shutdown signal is still
    applied before returning.

    Args:
        event_queue: Source of events.
        session_loop: Applies each event to the session.
        shutdown_event: Set by the signal handler.
        running_check: Returns False once shutdown has begun.
        logger: Logger instance.
    """
    while running_check():
        dequeue_task = asyncio.create_task(event_queue.dequeue())
        shutdown_task = asyncio.create_task(shutdown_event.wait())

        try:
            done, pending = await asyncio.wait(
                [dequeue_task, shutdown_task],
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            await _cancel_and_wait(dequeue_task, shutdown_task)
            raise

        await _cancel_and_wait(*pending)

        if dequeue_task in done:
            event = dequeue_task.result()
            await _process_event(event, session_loop, event_queue, logger)
        if shutdown_task in done:
            return


async def _process_event(
    event: Event,
    session_loop: SessionLoop,
    event_queue: EventQueue,
    logger: BoundLogger,
) -> None:
    """Apply one event; failures are logged and the event is always released."""
    try:
        await session_loop.process(event)
    except Exception as e:
        logger.error("Error processing event", event_id=event.id, error=str(e))
    finally:
        event_queue.mark_done(event)


async def _open_database(config: AppConfig, logger: BoundLogger) -> Database | None:
    database = Database.from_config(config.database)
    try:
        await database.initialize()
    except PersistenceError as e:
        logger.error(
            "Failed to initialize database", url=config.database.url, error=str(e)
        )
        return None
    return database


async def _shutdown(
    http_server: HTTPServer,
    event_queue: EventQueue,
    session: ChatSession,
    timeout: float,
    logger: BoundLogger,
) -> None:
    """Stop intake first, then flush the session."""
    try:
        await asyncio.wait_for(http_server.stop(), timeout=timeout)
        await event_queue.close()
        await asyncio.wait_for(session.close(), timeout=timeout)
        logger.info("deckchat stopped")
    except TimeoutError:
        logger.warning(
            "Shutdown timed out, forcing termination",
            timeout_seconds=timeout,
        )


async def main_async(
    config_path: Path,
    shutdown_timeout: float = SHUTDOWN_TIMEOUT,
) -> int:
    """Run the service until SIGINT or SIGTERM.

    Args:
        config_path: Path to configuration file.
        shutdown_timeout: Seconds allowed for each graceful shutdown step.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    config = load_config(config_path)

    setup_logging(config.logging)
    logger = get_logger(__name__)
    logger.info("Starting deckchat", config_path=str(config_path))

    database = await _open_database(config, logger)
    if database is None:
        return 1

    event_queue = EventQueue()
    publisher = create_publisher(config.reactions)
    session = await ChatSession.load(
        config.session,
        SqliteSessionRepository(database, logger=get_logger("repository")),
        InMemoryTimeline(),
        publisher,
        event_queue,
        reactions=config.reactions,
        logger=get_logger("session"),
    )
    session_loop = SessionLoop(session, logger=get_logger("session_loop"))
    http_server = HTTPServer(
        config=config.server,
        event_queue=event_queue,
        session=session,
        logger=get_logger("http_server"),
    )

    running = True
    shutdown_event = asyncio.Event()

    def on_signal(sig: signal.Signals) -> None:
        nonlocal running
        logger.info("Received signal, initiating shutdown", signal=sig.name)
        running = False
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, on_signal, sig)

    try:
        await http_server.start()
        logger.info("deckchat started successfully", identity=session.active_user)
        await run_main_loop(
            event_queue=event_queue,
            session_loop=session_loop,
            shutdown_event=shutdown_event,
            running_check=lambda: running,
            logger=logger,
        )
    except asyncio.CancelledError:
        logger.info("Main loop cancelled")
    finally:
        logger.info("Shutting down")
        try:
            await _shutdown(
                http_server, event_queue, session, shutdown_timeout, logger
            )
        finally:
            await publisher.close()
            await database.close()

    return 0


def main() -> None:
    """Main entry point."""
    config_path = parse_args().config

    try:
        sys.exit(asyncio.run(main_async(config_path)))
    except ConfigFileNotFoundError:
        print(f"Error: {config_path} not found", file=sys.stderr)
        sys.exit(1)
    except ConfigError as e:
        print(f"Error: Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Configuration validation error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
