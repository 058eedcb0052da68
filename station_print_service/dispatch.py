"""
Print Dispatch Queue
====================

Serializes jobs per printer endpoint.

Two ESC/POS streams interleaved on one printer garble the paper, so jobs
for the same (host, port) run one at a time in arrival order. Each endpoint
gets a single-worker executor, created on first use and kept for the life
of the dispatcher; jobs for different endpoints run concurrently.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Any, Optional, Tuple

from .delivery import DeliveryChannel
from .models import EncodedJob

logger = logging.getLogger(__name__)

Deliver = Callable[[EncodedJob], Dict[str, Any]]


class PrintDispatcher:
    """Per-endpoint FIFO print queue."""

    def __init__(self, deliver: Optional[Deliver] = None):
        """
        Args:
            deliver: Callable sending one job and returning its outcome dict.
                Defaults to a DeliveryChannel with the configured timeouts.
        """
        self._deliver = deliver or DeliveryChannel().deliver
        self._workers: Dict[Tuple[str, int], ThreadPoolExecutor] = {}
        self._lock = threading.Lock()

    def _worker(self, key: Tuple[str, int]) -> ThreadPoolExecutor:
        with self._lock:
            worker = self._workers.get(key)
            if worker is None:
                worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f'print-{key[0]}-{key[1]}')
                self._workers[key] = worker
            return worker

    def _run(self, job: EncodedJob) -> Dict[str, Any]:
        try:
            return self._deliver(job)
        except Exception as e:
            logger.exception("Delivery to %s crashed", job.endpoint)
            return {
                'success': False,
                'reason': 'internal error',
                'error': str(e),
                'host': job.endpoint.host,
                'port': job.endpoint.port,
            }

    def enqueue(self, job: EncodedJob) -> 'Future[Dict[str, Any]]':
        """Queue a job behind earlier jobs for the same endpoint."""
        logger.debug("Queueing %d bytes for %s", len(job), job.endpoint)
        return self._worker(job.endpoint.key).submit(self._run, job)

    def dispatch(self, job: EncodedJob) -> Dict[str, Any]:
        """Queue a job and wait for its outcome."""
        return self.enqueue(job).result()

    @property
    def endpoint_count(self) -> int:
        with self._lock:
            return len(self._workers)

    def shutdown(self, wait: bool = True):
        """Stop all workers, finishing queued jobs if ``wait`` is set."""
        with self._lock:
            workers = list(self._workers.values())
            self._workers.clear()
        for worker in workers:
            worker.shutdown(wait=wait)
