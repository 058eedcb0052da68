"""
Report Formatter
================

Lays out the income statistics report as fixed-width text lines.
"""

from typing import List

from ..models import StatisticsReportRequest, StaffRow
from .ticket import RULE, header_lines, fixed, total


def _row(name: str, seats: int, seat_income, passes: int, pass_income, income) -> str:
    return ' | '.join([
        name[:10].ljust(10),
        str(seats).rjust(6),
        fixed(seat_income).rjust(10),
        str(passes).rjust(6),
        fixed(pass_income).rjust(10),
        fixed(income).rjust(10),
    ])


def _staff_row(staff: StaffRow) -> str:
    return _row(staff.name, staff.seats, staff.seat_income,
                staff.day_passes, staff.day_pass_income, staff.income)


def format_report(report: StatisticsReportRequest) -> List[str]:
    """
    Lay out a statistics report.

    Identical input always gives identical lines; nothing here reads the
    clock, so the date line only appears when the caller supplies one.
    """
    lines = header_lines()
    lines += ['', 'RAPPORT DE REVENUS', RULE]
    lines.append(f'Periode: {report.period_label}')
    if report.created_at is not None:
        lines.append(f"Date: {report.created_at.strftime('%d/%m/%Y %H:%M')}")
    if report.created_by:
        lines.append(f'Agent: {report.created_by}')
    lines += [RULE, '']

    # Summary
    lines += ['RESUME DES REVENUS', RULE]
    lines.append(f'Total Sieges: {report.total_seats_booked}')
    lines.append(f'Revenus Sieges: {total(report.total_seat_income)}')
    lines.append(f'Passes Jour: {report.total_day_passes_sold}')
    lines.append(f'Revenus Passes: {total(report.total_day_pass_income)}')
    lines.append(RULE)
    lines.append(f'REVENUS TOTAUX: {total(report.total_income)}')
    lines += [RULE, '']

    if report.staff:
        lines += ['PERFORMANCE DU PERSONNEL', RULE]
        lines.append('Personnel  | Sieges | Rev.Sieges | Passes | Rev.Passes |      Total')
        lines.append(RULE)
        lines += [_staff_row(staff) for staff in report.staff]
        lines.append(RULE)
        lines.append(_row('TOTAL', report.total_seats_booked, report.total_seat_income,
                          report.total_day_passes_sold, report.total_day_pass_income,
                          report.total_income))
        lines += [RULE, '']

    lines.append('Document genere automatiquement')
    lines.append('par le systeme de gestion')
    return lines
