"""
Print Service
=============

Print pipeline behind the HTTP facade:
formatter -> encoder -> dispatch queue -> delivery channel.
"""

import logging
import threading
from collections import deque
from typing import Any, Dict, List, Optional

from .config import DEFAULT_PRINTER_ID, JOB_HISTORY_LIMIT, PRINTER_CAPABILITIES, PRINTER_MODELS
from .delivery import DeliveryChannel
from .dispatch import PrintDispatcher
from .formatters import format_ticket, format_report
from .handlers import BaseHandler, get_handler
from .models import (
    EncodedJob, PrintJob, PrinterEndpoint, StatisticsReportRequest, TicketRequest,
)
from .store import ConfigStore, JsonConfigStore

logger = logging.getLogger(__name__)

STATISTICS = 'statistics'


class PrintService:
    """Formats, encodes and dispatches print requests."""

    def __init__(self, store: Optional[ConfigStore] = None,
                 dispatcher: Optional[PrintDispatcher] = None,
                 channel: Optional[DeliveryChannel] = None,
                 handler: Optional[BaseHandler] = None,
                 history_limit: int = JOB_HISTORY_LIMIT):
        self.store = store or JsonConfigStore()
        self.channel = channel or DeliveryChannel()
        self.dispatcher = dispatcher or PrintDispatcher(self.channel.deliver)
        self.handler = handler or get_handler(PRINTER_MODELS[PRINTER_CAPABILITIES['model']])()
        self._jobs = deque(maxlen=history_limit)
        self._jobs_lock = threading.Lock()

    # =========================================================================
    # Configuration
    # =========================================================================

    def get_config(self, printer_id: str = DEFAULT_PRINTER_ID) -> Dict[str, Any]:
        """Stored endpoint plus the static capability fields."""
        endpoint = self.store.get(printer_id)
        return {
            'id': printer_id,
            **PRINTER_CAPABILITIES,
            'ip': endpoint.host,
            'port': endpoint.port,
            'isDefault': printer_id == DEFAULT_PRINTER_ID,
        }

    def set_config(self, printer_id: str, data: Dict[str, Any]) -> PrinterEndpoint:
        return self.store.set(printer_id, data)

    def test_connection(self, printer_id: str = DEFAULT_PRINTER_ID) -> Dict[str, Any]:
        return self.channel.probe(self.store.get(printer_id))

    # =========================================================================
    # Printing
    # =========================================================================

    def print_ticket(self, kind: str, data: Dict[str, Any],
                     source_ip: Optional[str] = None) -> Dict[str, Any]:
        """
        Print a booking, day pass or exit pass ticket.

        Raises:
            ValidationError: Malformed request body
        """
        ticket = TicketRequest.from_dict(data, kind)
        return self._submit(kind, format_ticket(ticket, kind), ticket.endpoint, source_ip)

    def print_report(self, data: Dict[str, Any], source_ip: Optional[str] = None) -> Dict[str, Any]:
        """Print a statistics report."""
        report = StatisticsReportRequest.from_dict(data)
        return self._submit(STATISTICS, format_report(report), report.endpoint, source_ip)

    def _submit(self, kind: str, lines: List[str], endpoint: Optional[PrinterEndpoint],
                source_ip: Optional[str]) -> Dict[str, Any]:
        job = PrintJob(kind=kind, source_ip=source_ip)
        endpoint = endpoint or self.store.get(DEFAULT_PRINTER_ID)
        encoded = EncodedJob(endpoint, self.handler.encode(lines))

        job.start(endpoint)
        result = self.dispatcher.dispatch(encoded)

        if result['success']:
            job.complete(result.get('bytes_sent', len(encoded)))
        else:
            job.fail(result.get('error', 'Print failed'))
            logger.warning("%s job %s failed: %s", kind, job.id, job.error_message)

        with self._jobs_lock:
            self._jobs.append(job)

        return {**result, 'job': job.to_dict()}

    # =========================================================================
    # Job History
    # =========================================================================

    def list_jobs(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Most recent jobs first."""
        with self._jobs_lock:
            jobs = list(self._jobs)
        jobs.reverse()
        return [job.to_dict() for job in jobs[:max(limit, 0)]]

    def shutdown(self):
        self.dispatcher.shutdown()
