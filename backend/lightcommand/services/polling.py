"""
Polling Service

Base for the long-running workers. One cycle is:
check store connection -> poll_once() -> sleep(poll_interval).
A failing cycle is logged, backed off and followed by a reconnect;
the loop itself only stops when stop() is called.
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..core.exceptions import StoreConnectivityError
from ..db.database import check_connection, reconnect

logger = logging.getLogger(__name__)


class PollingService(ABC):
    """Fixed-interval poller with jittered backoff on error"""

    name = "poller"

    def __init__(
        self,
        poll_interval: float = 0.1,
        error_backoff: float = 5.0,
        backoff_jitter: float = 1.0,
        check: Callable[[], None] = check_connection,
        reconnect: Callable[[], None] = reconnect
    ):
        """
        Args:
            poll_interval: Seconds to sleep after every cycle
            error_backoff: Seconds to wait after a failed cycle
            backoff_jitter: Upper bound of random seconds added to the backoff
            check: Raises StoreConnectivityError if the store is unreachable
            reconnect: Re-establishes the store connection
        """
        self.poll_interval = poll_interval
        self.error_backoff = error_backoff
        self.backoff_jitter = backoff_jitter
        self._check = check
        self._reconnect = reconnect
        self.running = False
        self.task: Optional[asyncio.Task] = None
        self.cycles = 0
        self.errors = 0

    @abstractmethod
    def poll_once(self) -> int:
        """Do one unit of work; returns the number of items handled"""
        pass

    def ensure_connection(self):
        """Reconnect before polling if the store dropped us"""
        try:
            self._check()
        except StoreConnectivityError as e:
            logger.info(f"{self.name}: reconnecting to database ({e})")
            self._reconnect()

    async def start(self):
        """Start polling as a background task"""
        if self.running:
            logger.warning(f"{self.name} already running")
            return

        self.running = True
        self.task = asyncio.create_task(self.run_forever())
        logger.info(f"{self.name} started")

    async def stop(self):
        """Stop polling"""
        if not self.running:
            return

        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass

        logger.info(f"{self.name} stopped")

    async def run_forever(self):
        """Main polling loop"""
        self.running = True
        loop = asyncio.get_running_loop()

        while self.running:
            try:
                # Blocking DB and HTTP work runs off the event loop
                await loop.run_in_executor(None, self._cycle)
                self.cycles += 1
                await asyncio.sleep(self.poll_interval)

            except asyncio.CancelledError:
                logger.info(f"{self.name} loop cancelled")
                break
            except Exception as e:
                self.errors += 1
                logger.error(f"{self.name} error: {e}", exc_info=True)
                await asyncio.sleep(self.error_backoff + random.uniform(0, self.backoff_jitter))

                try:
                    self._reconnect()
                except Exception as reconnect_error:
                    logger.error(f"{self.name}: failed to reconnect: {reconnect_error}")

    def _cycle(self) -> int:
        self.ensure_connection()
        return self.poll_once()
