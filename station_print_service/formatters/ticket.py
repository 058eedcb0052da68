"""
Ticket Formatter
================

Lays out booking, day pass and exit pass tickets as plain text lines.
Pure functions: no clock reads, no I/O. The encoder centers every line,
so no padding is added here.
"""

from decimal import Decimal, MAX_EMAX, ROUND_HALF_UP, localcontext
from typing import List, Optional

from ..config import OPERATOR_NAME, CURRENCY, SERVICE_FEE_PER_SEAT
from ..models import TicketRequest, BOOKING, DAYPASS, EXITPASS, ValidationError

SEPARATOR = '=' * 32
RULE = '-' * 32

TITLES = {
    BOOKING: 'BILLET CLIENT',
    DAYPASS: 'PASS JOURNEE',
    EXITPASS: 'AUTORISATION DE SORTIE',
}


def fixed(amount: Decimal, places: int = 2) -> str:
    """Render an amount with a fixed number of decimals, rounding half up."""
    amount = Decimal(amount)
    with localcontext() as ctx:
        # quantize needs every integer digit to fit in the context precision
        ctx.prec = max(ctx.prec, amount.adjusted() + places + 2)
        ctx.Emax = MAX_EMAX
        value = amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return f'{value:.{places}f}'


def money(amount: Decimal, places: int = 2) -> str:
    return f'{fixed(amount, places)} {CURRENCY}'


def total(amount: Decimal) -> str:
    """Final payable amounts are printed with three decimals."""
    return money(amount, 3)


def header_lines() -> List[str]:
    return [SEPARATOR, OPERATOR_NAME, 'TRANSPORT', SEPARATOR]


def footer_lines() -> List[str]:
    return ['', SEPARATOR, 'Merci et bon voyage!', SEPARATOR]


def _optional(label: str, value: Optional[object]) -> List[str]:
    return [f'{label}: {value}'] if value is not None else []


def _issued_lines(ticket: TicketRequest) -> List[str]:
    lines = []
    if ticket.created_at is not None:
        lines.append(f"Date: {ticket.created_at.strftime('%d/%m/%Y %H:%M')}")
    lines += _optional('Agent', ticket.created_by)
    lines += _optional('Personnel', ticket.staff_name)
    return lines


def _booking_lines(ticket: TicketRequest) -> List[str]:
    seats = ticket.seat_count
    base_price = ticket.base_price if ticket.base_price is not None else Decimal(0)
    station_fee = ticket.station_fee if ticket.station_fee is not None else Decimal(SERVICE_FEE_PER_SEAT)

    lines = []
    lines += _optional('Vehicule', ticket.license_plate)
    lines += _optional('Destination', ticket.destination_name)
    lines += _optional('Station', ticket.station_name)
    lines.append(f'Sieges: {seats}')
    lines.append(f'Prix base: {money(base_price * seats)}')
    lines.append(f'Frais: {money(station_fee * seats)}')
    lines.append(RULE)
    # The caller's total is authoritative, even if the subtotals disagree
    lines.append(f'Montant TTC: {total(ticket.total_amount)}')
    lines += _issued_lines(ticket)
    return lines


def _daypass_lines(ticket: TicketRequest) -> List[str]:
    lines = []
    lines += _optional('Vehicule', ticket.license_plate)
    lines += _optional('Route', ticket.route_name or ticket.destination_name)
    lines += _optional('Station', ticket.station_name)
    lines.append(RULE)
    lines.append(f'Montant: {total(ticket.total_amount)}')
    lines += _issued_lines(ticket)
    lines.append(RULE)
    lines.append('Valide toute la journee')
    return lines


def _exitpass_lines(ticket: TicketRequest) -> List[str]:
    seats = ticket.seat_count
    capacity = ticket.vehicle_capacity

    lines = []
    lines += _optional('Sortie No', ticket.exit_pass_count)
    lines += _optional('Vehicule', ticket.license_plate)
    lines += _optional('Destination', ticket.destination_name)
    lines += _optional('Station', ticket.station_name)
    lines.append(RULE)

    if seats > 0:
        if capacity is not None and seats == capacity:
            # Empty departure: flat service fee over the whole vehicle
            fee = Decimal(SERVICE_FEE_PER_SEAT) * capacity
            lines.append(f'Capacite vehicule: {capacity} sieges')
            lines.append(f'Frais de service: {money(fee)}')
        elif ticket.base_price is not None:
            lines.append(f'Sieges reserves: {seats}')
            lines.append(f'Prix de base: {money(ticket.base_price * seats)}')

    lines.append(f'Montant total: {total(ticket.total_amount)}')
    lines += _issued_lines(ticket)
    lines.append(RULE)
    lines.append('Sortie autorisee')
    return lines


_BODIES = {
    BOOKING: _booking_lines,
    DAYPASS: _daypass_lines,
    EXITPASS: _exitpass_lines,
}


def format_ticket(ticket: TicketRequest, kind: str) -> List[str]:
    """
    Lay out a ticket.

    Args:
        ticket: Parsed ticket request
        kind: booking, daypass or exitpass

    Returns:
        Ordered text lines, header and footer included
    """
    body = _BODIES.get(kind)
    if body is None:
        raise ValidationError(f'Unknown ticket kind: {kind}')

    lines = header_lines()
    lines += ['', TITLES[kind], RULE]
    lines += body(ticket)
    lines += footer_lines()
    return lines
