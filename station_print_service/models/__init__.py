"""
Station Print Service Models
"""

from .printer import PrinterEndpoint, ValidationError
from .job import EncodedJob, PrintJob
from .ticket import (
    TicketRequest, StaffRow, StatisticsReportRequest,
    BOOKING, DAYPASS, EXITPASS, TICKET_KINDS,
)

__all__ = [
    'PrinterEndpoint', 'ValidationError', 'EncodedJob', 'PrintJob',
    'TicketRequest', 'StaffRow', 'StatisticsReportRequest',
    'BOOKING', 'DAYPASS', 'EXITPASS', 'TICKET_KINDS',
]
