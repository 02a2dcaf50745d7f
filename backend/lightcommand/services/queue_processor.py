"""
Command Queue Processor

Per-brand worker: claims small batches from the queue and hands them to
the brand's adapter. Run one per brand, each in its own process.
"""

import logging

from ..commands.adapters.base import VendorAdapter
from .polling import PollingService

logger = logging.getLogger(__name__)


class QueueProcessor(PollingService):
    """Polls command_queue for one brand"""

    def __init__(self, adapter: VendorAdapter, batch_size: int = 10, **kwargs):
        """
        Args:
            adapter: Adapter for the brand this worker serves
            batch_size: Commands claimed per cycle (capped at 10)
            **kwargs: Passed to PollingService (intervals, connection hooks)
        """
        super().__init__(**kwargs)
        self.adapter = adapter
        self.batch_size = max(1, min(batch_size, 10))
        self.name = f"{adapter.brand} queue processor"
        self.processed_total = 0
        self.failed_total = 0

    def poll_once(self) -> int:
        batch = self.adapter.process_batch(self.batch_size)

        if batch.processed:
            failed = sum(1 for r in batch.results if not r.success)
            self.processed_total += batch.processed
            self.failed_total += failed
            logger.info(
                f"{self.name}: processed {batch.processed} command(s), "
                f"{batch.processed - failed} ok, {failed} failed"
            )

        return batch.processed
