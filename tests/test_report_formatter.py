import pytest

from station_print_service.formatters import format_report
from station_print_service.models import StatisticsReportRequest, ValidationError


@pytest.fixture
def report():
    return {
        'periodLabel': 'Mai 2024',
        'totalSeatsBooked': 20,
        'totalSeatIncome': 100.5,
        'totalDayPassesSold': 3,
        'totalDayPassIncome': 30,
        'totalIncome': 130.5,
        'createdBy': 'Sami',
        'createdAt': '2024-06-01T18:30:00',
        'staffData': [
            {'name': 'Mohamed Ben Ali', 'seats': 12, 'seatIncome': 60.5,
             'dayPasses': 2, 'dayPassIncome': 20, 'income': 80.5},
            {'name': 'Amel', 'seats': 8, 'seatIncome': 40,
             'dayPasses': 1, 'dayPassIncome': 10, 'income': 50},
        ],
    }


def _lines(data):
    return format_report(StatisticsReportRequest.from_dict(data))


def test_summary_block(report):
    lines = _lines(report)

    assert 'RAPPORT DE REVENUS' in lines
    assert 'Periode: Mai 2024' in lines
    assert 'Date: 01/06/2024 18:30' in lines
    assert 'Agent: Sami' in lines
    assert 'Total Sieges: 20' in lines
    assert 'Revenus Sieges: 100.500 TND' in lines
    assert 'Passes Jour: 3' in lines
    assert 'Revenus Passes: 30.000 TND' in lines
    assert 'REVENUS TOTAUX: 130.500 TND' in lines


def test_staff_rows_are_fixed_width(report):
    lines = _lines(report)

    assert 'Mohamed Be |     12 |      60.50 |      2 |      20.00 |      80.50' in lines
    assert 'Amel       |      8 |      40.00 |      1 |      10.00 |      50.00' in lines
    assert 'TOTAL      |     20 |     100.50 |      3 |      30.00 |     130.50' in lines


def test_staff_rows_keep_input_order(report):
    lines = _lines(report)
    names = [line.split(' | ')[0].strip() for line in lines if ' | ' in line]

    assert names == ['Personnel', 'Mohamed Be', 'Amel', 'TOTAL']


def test_no_table_without_staff(report):
    report['staffData'] = []
    lines = _lines(report)

    assert 'PERFORMANCE DU PERSONNEL' not in lines
    assert not any(' | ' in line for line in lines)


def test_report_is_deterministic(report):
    assert _lines(report) == _lines(dict(report))


def test_report_without_timestamp_has_no_date(report):
    del report['createdAt']

    assert not any(line.startswith('Date') for line in _lines(report))


def test_missing_aggregates_default_to_zero():
    lines = _lines({'periodLabel': 'Jour'})

    assert 'Total Sieges: 0' in lines
    assert 'REVENUS TOTAUX: 0.000 TND' in lines


@pytest.mark.parametrize('data', [
    {},
    {'periodLabel': ''},
    {'periodLabel': 'Jour', 'totalIncome': -5},
    {'periodLabel': 'Jour', 'totalSeatsBooked': -1},
    {'periodLabel': 'Jour', 'staffData': 'nobody'},
    {'periodLabel': 'Jour', 'staffData': ['nobody']},
])
def test_invalid_reports(data):
    with pytest.raises(ValidationError):
        StatisticsReportRequest.from_dict(data)
