"""
Ticket and report layouts.
"""

from .ticket import format_ticket
from .report import format_report

__all__ = ['format_ticket', 'format_report']
