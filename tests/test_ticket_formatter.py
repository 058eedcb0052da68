from decimal import Decimal

import pytest

from station_print_service.formatters import format_ticket
from station_print_service.formatters.ticket import SEPARATOR, money, total
from station_print_service.models import (
    TicketRequest, ValidationError, BOOKING, DAYPASS, EXITPASS,
)


def _ticket(kind, **data):
    data.setdefault('totalAmount', 10)
    return TicketRequest.from_dict(data, kind)


def test_booking_line_items(booking):
    lines = format_ticket(TicketRequest.from_dict(booking, BOOKING), BOOKING)

    assert 'Sieges: 3' in lines
    assert 'Prix base: 15.00 TND' in lines
    assert 'Frais: 0.45 TND' in lines
    assert 'Montant TTC: 15.450 TND' in lines


def test_booking_header_and_footer(booking):
    lines = format_ticket(TicketRequest.from_dict(booking, BOOKING), BOOKING)

    assert lines[:4] == [SEPARATOR, 'STE DHRAIFF SERVICES', 'TRANSPORT', SEPARATOR]
    assert lines[-3:] == [SEPARATOR, 'Merci et bon voyage!', SEPARATOR]
    assert 'BILLET CLIENT' in lines


def test_booking_optional_lines(booking):
    lines = format_ticket(TicketRequest.from_dict(booking, BOOKING), BOOKING)

    assert 'Vehicule: 123 TU 4567' in lines
    assert 'Destination: Tunis' in lines
    assert 'Station: Monastir' in lines
    assert 'Date: 01/05/2024 08:05' in lines
    assert 'Agent: Sami' in lines


def test_booking_prints_supplied_total_verbatim():
    lines = format_ticket(_ticket(BOOKING, seatNumber=2, basePrice=5, totalAmount=99), BOOKING)

    assert 'Prix base: 10.00 TND' in lines
    assert 'Montant TTC: 99.000 TND' in lines


@pytest.mark.parametrize('seats', [None, 0, -2])
def test_booking_seat_count_defaults_to_one(seats):
    ticket = _ticket(BOOKING, seatNumber=seats, basePrice=4)

    assert ticket.seat_count == 1
    assert 'Prix base: 4.00 TND' in format_ticket(ticket, BOOKING)


def test_booking_default_station_fee():
    lines = format_ticket(_ticket(BOOKING, seatNumber=2), BOOKING)

    assert 'Prix base: 0.00 TND' in lines
    assert 'Frais: 0.30 TND' in lines


def test_daypass_has_no_seat_breakdown():
    ticket = _ticket(DAYPASS, licensePlate='200 TU 1', routeName='Sousse', seatNumber=4, totalAmount=2.5)
    lines = format_ticket(ticket, DAYPASS)

    assert ticket.seat_count == 0
    assert 'PASS JOURNEE' in lines
    assert 'Route: Sousse' in lines
    assert 'Montant: 2.500 TND' in lines
    assert 'Valide toute la journee' in lines
    assert not any(line.startswith('Sieges') for line in lines)


def test_daypass_route_falls_back_to_destination():
    lines = format_ticket(_ticket(DAYPASS, destinationName='Sfax'), DAYPASS)

    assert 'Route: Sfax' in lines


def test_exitpass_empty_vehicle_uses_flat_service_fee():
    ticket = _ticket(EXITPASS, seatNumber=8, vehicleCapacity=8, basePrice=5, totalAmount=1.2)
    lines = format_ticket(ticket, EXITPASS)

    assert 'Capacite vehicule: 8 sieges' in lines
    assert 'Frais de service: 1.20 TND' in lines
    assert 'Montant total: 1.200 TND' in lines
    assert 'Sortie autorisee' in lines


def test_exitpass_partial_vehicle_uses_base_price():
    ticket = _ticket(EXITPASS, seatNumber=3, vehicleCapacity=8, basePrice=5, totalAmount=15)
    lines = format_ticket(ticket, EXITPASS)

    assert 'Sieges reserves: 3' in lines
    assert 'Prix de base: 15.00 TND' in lines
    assert not any(line.startswith('Capacite') for line in lines)


def test_exitpass_unknown_capacity_uses_base_price():
    lines = format_ticket(_ticket(EXITPASS, seatNumber=8, basePrice=2.5), EXITPASS)

    assert 'Sieges reserves: 8' in lines
    assert 'Prix de base: 20.00 TND' in lines


def test_exitpass_sequence_number():
    lines = format_ticket(_ticket(EXITPASS, exitPassCount=42), EXITPASS)

    assert 'Sortie No: 42' in lines


def test_staff_name_printed_when_complete():
    both = format_ticket(_ticket(BOOKING, staffFirstName='Amel', staffLastName='Trabelsi'), BOOKING)
    first_only = format_ticket(_ticket(BOOKING, staffFirstName='Amel'), BOOKING)

    assert 'Personnel: Amel Trabelsi' in both
    assert not any(line.startswith('Personnel') for line in first_only)


def test_no_date_line_without_timestamp():
    lines = format_ticket(_ticket(DAYPASS), DAYPASS)

    assert not any(line.startswith('Date') for line in lines)


def test_format_is_deterministic(booking):
    first = format_ticket(TicketRequest.from_dict(booking, BOOKING), BOOKING)
    second = format_ticket(TicketRequest.from_dict(dict(booking), BOOKING), BOOKING)

    assert first == second


def test_money_rounds_half_up():
    assert money(Decimal('2.675')) == '2.68 TND'
    assert total(Decimal('0.0005')) == '0.001 TND'


def test_amounts_beyond_default_decimal_precision():
    ticket = _ticket(DAYPASS, totalAmount=1e30)

    assert total(ticket.total_amount) == '1' + '0' * 30 + '.000 TND'
    assert money(Decimal('123456789012345678901234567.895')) == '123456789012345678901234567.90 TND'


def test_float_amounts_do_not_leak_binary_artifacts():
    ticket = _ticket(BOOKING, seatNumber=3, stationFee=0.1, totalAmount=0.3)

    assert ticket.station_fee == Decimal('0.1')
    assert 'Frais: 0.30 TND' in format_ticket(ticket, BOOKING)


@pytest.mark.parametrize('data, message', [
    ({}, 'totalAmount is required'),
    ({'totalAmount': 'abc'}, 'totalAmount must be a number'),
    ({'totalAmount': -1}, 'totalAmount must not be negative'),
    ({'totalAmount': True}, 'totalAmount must be a number'),
    ({'totalAmount': 5, 'seatNumber': 'two'}, 'seatNumber must be an integer'),
    ({'totalAmount': 5, 'seatNumber': '\u00b2'}, 'seatNumber must be an integer'),
    ({'totalAmount': 5, 'seatNumber': '--5'}, 'seatNumber must be an integer'),
    ({'totalAmount': 5, 'createdAt': 'yesterday'}, 'createdAt must be an ISO-8601 timestamp'),
    ({'totalAmount': 5, 'printerConfig': {'ip': 'bad host!', 'port': 9100}}, 'Invalid printer host'),
])
def test_invalid_ticket_requests(data, message):
    with pytest.raises(ValidationError, match=message):
        TicketRequest.from_dict(data, BOOKING)


def test_unknown_kind_is_rejected():
    with pytest.raises(ValidationError):
        TicketRequest.from_dict({'totalAmount': 1}, 'voucher')
    with pytest.raises(ValidationError):
        format_ticket(_ticket(BOOKING), 'voucher')
