"""
Ticket Request Models
=====================

Parsed print request bodies. Field names on the wire are the camelCase
names sent by the desktop UI; amounts are kept as Decimal so the printed
figures do not pick up binary floating point artifacts.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple

from .printer import PrinterEndpoint, ValidationError

BOOKING = 'booking'
DAYPASS = 'daypass'
EXITPASS = 'exitpass'

TICKET_KINDS = (BOOKING, DAYPASS, EXITPASS)


# =============================================================================
# Field Parsing
# =============================================================================

def _decimal(data: Dict[str, Any], key: str, required: bool = False) -> Optional[Decimal]:
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f'{key} is required')
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{key} must be a number')
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f'{key} must be a number')
    if not amount.is_finite():
        raise ValidationError(f'{key} must be a number')
    if amount < 0:
        raise ValidationError(f'{key} must not be negative')
    return amount


def _int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{key} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f'{key} must be an integer')


def _text(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ValidationError(f'{key} must be a string')
    text = str(value).strip()
    return text or None


def _timestamp(data: Dict[str, Any], key: str) -> Optional[datetime]:
    value = data.get(key)
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{key} must be an ISO-8601 timestamp')
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f'{key} must be an ISO-8601 timestamp')


def _endpoint(data: Dict[str, Any]) -> Optional[PrinterEndpoint]:
    config = data.get('printerConfig')
    if config is None:
        return None
    return PrinterEndpoint.from_dict(config)


def _require_object(data: Any):
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')


# =============================================================================
# Tickets
# =============================================================================

@dataclass(frozen=True)
class TicketRequest:
    """Booking, day pass or exit pass ticket content."""

    total_amount: Decimal
    seat_count: int = 0
    license_plate: Optional[str] = None
    destination_name: Optional[str] = None
    route_name: Optional[str] = None
    station_name: Optional[str] = None
    station_fee: Optional[Decimal] = None
    base_price: Optional[Decimal] = None
    vehicle_capacity: Optional[int] = None
    exit_pass_count: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    staff_first_name: Optional[str] = None
    staff_last_name: Optional[str] = None
    endpoint: Optional[PrinterEndpoint] = None

    @property
    def staff_name(self) -> Optional[str]:
        if self.staff_first_name and self.staff_last_name:
            return f'{self.staff_first_name} {self.staff_last_name}'
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: str) -> 'TicketRequest':
        """
        Parse a print request body.

        Args:
            data: Decoded JSON body
            kind: One of booking, daypass, exitpass

        Raises:
            ValidationError: Malformed body or unknown kind
        """
        if kind not in TICKET_KINDS:
            raise ValidationError(f'Unknown ticket kind: {kind}')
        _require_object(data)

        seats = _int(data, 'seatNumber')
        if kind == BOOKING:
            seats = seats if seats and seats > 0 else 1
        elif kind == DAYPASS:
            seats = 0
        else:
            seats = max(seats or 0, 0)

        capacity = _int(data, 'vehicleCapacity')

        return cls(
            total_amount=_decimal(data, 'totalAmount', required=True),
            seat_count=seats,
            license_plate=_text(data, 'licensePlate'),
            destination_name=_text(data, 'destinationName'),
            route_name=_text(data, 'routeName'),
            station_name=_text(data, 'stationName'),
            station_fee=_decimal(data, 'stationFee'),
            base_price=_decimal(data, 'basePrice'),
            vehicle_capacity=capacity if capacity and capacity > 0 else None,
            exit_pass_count=_int(data, 'exitPassCount'),
            created_by=_text(data, 'createdBy'),
            created_at=_timestamp(data, 'createdAt'),
            staff_first_name=_text(data, 'staffFirstName'),
            staff_last_name=_text(data, 'staffLastName'),
            endpoint=_endpoint(data),
        )


# =============================================================================
# Statistics Report
# =============================================================================

@dataclass(frozen=True)
class StaffRow:
    """Per-staff line of the statistics report."""

    name: str = ''
    seats: int = 0
    seat_income: Decimal = Decimal('0')
    day_passes: int = 0
    day_pass_income: Decimal = Decimal('0')
    income: Decimal = Decimal('0')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StaffRow':
        _require_object(data)
        return cls(
            name=_text(data, 'name') or '',
            seats=_int(data, 'seats') or 0,
            seat_income=_decimal(data, 'seatIncome') or Decimal('0'),
            day_passes=_int(data, 'dayPasses') or 0,
            day_pass_income=_decimal(data, 'dayPassIncome') or Decimal('0'),
            income=_decimal(data, 'income') or Decimal('0'),
        )


@dataclass(frozen=True)
class StatisticsReportRequest:
    """Income summary for a period, with optional per-staff breakdown."""

    period_label: str
    total_seats_booked: int = 0
    total_seat_income: Decimal = Decimal('0')
    total_day_passes_sold: int = 0
    total_day_pass_income: Decimal = Decimal('0')
    total_income: Decimal = Decimal('0')
    staff: Tuple[StaffRow, ...] = ()
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    endpoint: Optional[PrinterEndpoint] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StatisticsReportRequest':
        """Parse a statistics print request body."""
        _require_object(data)

        period = _text(data, 'periodLabel')
        if not period:
            raise ValidationError('periodLabel is required')

        counts = {}
        for key in ('totalSeatsBooked', 'totalDayPassesSold'):
            count = _int(data, key) or 0
            if count < 0:
                raise ValidationError(f'{key} must not be negative')
            counts[key] = count

        rows = data.get('staffData') or []
        if not isinstance(rows, list):
            raise ValidationError('staffData must be a list')

        return cls(
            period_label=period,
            total_seats_booked=counts['totalSeatsBooked'],
            total_seat_income=_decimal(data, 'totalSeatIncome') or Decimal('0'),
            total_day_passes_sold=counts['totalDayPassesSold'],
            total_day_pass_income=_decimal(data, 'totalDayPassIncome') or Decimal('0'),
            total_income=_decimal(data, 'totalIncome') or Decimal('0'),
            staff=tuple(StaffRow.from_dict(row) for row in rows),
            created_by=_text(data, 'createdBy'),
            created_at=_timestamp(data, 'createdAt'),
            endpoint=_endpoint(data),
        )
