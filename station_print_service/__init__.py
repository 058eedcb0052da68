"""
Station Print Service
=====================

Ticket printing service for the bus station desktop application.

Turns bookings, day passes, exit passes and statistics reports into
ESC/POS command streams and sends them over raw TCP to the station's
thermal printer.

Usage:
    python -m station_print_service

API Endpoints:
    GET  /health                        - Health check
    GET  /api/printer/config/{id}       - Get printer config
    PUT  /api/printer/config/{id}       - Update printer config
    POST /api/printer/test/{id}         - Test printer connection
    POST /api/printer/print/{kind}      - Print booking, daypass, exitpass
    POST /api/printer/print/statistics  - Print statistics report
    GET  /api/printer/jobs              - Job history
"""

__version__ = '1.0.0'
__author__ = 'STE Dhraiff Services'
