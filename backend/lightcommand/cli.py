"""
Worker entry points

    lightcommand-worker --brand hue      # one per brand, each its own process
    lightcommand-resolver                # remote button presses -> queue
    lightcommand-init-db

Startup fails with exit code 1 if the database cannot be reached;
after that the workers run until terminated.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .core.config import settings
from .core.exceptions import StoreConnectivityError
from .db.database import SessionLocal, check_connection, create_tables
from .commands.registry import build_default_registry
from .services.button_config import ButtonConfig
from .services.event_resolver import ButtonEventProcessor, EventResolver
from .services.polling import PollingService
from .services.queue_processor import QueueProcessor

logger = logging.getLogger("lightcommand")


def configure_logging(level: str = settings.LOG_LEVEL):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _connect_or_fail() -> bool:
    try:
        check_connection()
    except StoreConnectivityError as e:
        logger.error(f"Fatal error: {e}")
        return False
    return True


def _run(service: PollingService) -> int:
    try:
        asyncio.run(service.run_forever())
    except KeyboardInterrupt:
        logger.info(f"{service.name} interrupted, exiting")
    return 0


def _polling_kwargs() -> dict:
    return {
        "poll_interval": settings.POLL_INTERVAL,
        "error_backoff": settings.ERROR_BACKOFF,
        "backoff_jitter": settings.ERROR_BACKOFF_JITTER,
    }


def worker_main(argv: Optional[List[str]] = None) -> int:
    """Run the queue processor for one brand"""
    parser = argparse.ArgumentParser(description='LightCommand queue processor')
    parser.add_argument('--brand', required=True, help='Brand to process (e.g. hue, govee)')
    parser.add_argument('--batch-size', type=int, default=settings.BATCH_SIZE, help='Commands claimed per cycle (max 10)')
    args = parser.parse_args(argv)

    configure_logging()
    logger.info(f"Starting {args.brand} queue processor")

    if not _connect_or_fail():
        return 1

    registry = build_default_registry(settings, SessionLocal)
    try:
        adapter = registry.get(args.brand)
    except (KeyError, ValueError) as e:
        logger.error(f"Fatal error: {e}")
        return 1

    processor = QueueProcessor(adapter, batch_size=args.batch_size, **_polling_kwargs())
    return _run(processor)


def resolver_main(argv: Optional[List[str]] = None) -> int:
    """Run the remote button resolver"""
    parser = argparse.ArgumentParser(description='LightCommand remote button resolver')
    parser.add_argument('--config', default=settings.BUTTON_CONFIG_PATH, help='Button mapping JSON file')
    parser.add_argument('--batch-size', type=int, default=settings.BATCH_SIZE, help='Presses resolved per cycle')
    args = parser.parse_args(argv)

    configure_logging()
    logger.info("Starting remote button monitor")

    try:
        button_config = ButtonConfig.load(args.config)
    except (OSError, ValueError) as e:
        logger.error(f"Fatal error: cannot load button config {args.config}: {e}")
        return 1

    if not _connect_or_fail():
        return 1

    resolver = EventResolver(SessionLocal, button_config)
    processor = ButtonEventProcessor(resolver, batch_size=args.batch_size, **_polling_kwargs())
    return _run(processor)


def init_db_main(argv: Optional[List[str]] = None) -> int:
    """Create the queue, device and button tables"""
    parser = argparse.ArgumentParser(description='Create LightCommand database tables')
    parser.parse_args(argv)

    configure_logging()
    if not _connect_or_fail():
        return 1

    create_tables()
    logger.info("Database tables created")
    return 0


if __name__ == '__main__':
    sys.exit(worker_main())
