"""
Station Print Service Configuration
"""

import os
import logging

# =============================================================================
# Server Configuration
# =============================================================================

PORT = int(os.environ.get('STATION_PRINT_PORT', 8105))
HOST = os.environ.get('STATION_PRINT_HOST', '127.0.0.1')
DEBUG = os.environ.get('STATION_PRINT_DEBUG', 'false').lower() == 'true'

LOG_LEVEL = os.environ.get('STATION_PRINT_LOG_LEVEL', 'INFO').upper()

# =============================================================================
# Printer Defaults
# =============================================================================

DEFAULT_TIMEOUT = float(os.environ.get('STATION_PRINT_TIMEOUT', 5))  # seconds

# Time to wait for the printer to close after the write side is shut down
DEFAULT_LINGER = float(os.environ.get('STATION_PRINT_LINGER', 0.2))  # seconds

ESCPOS_PORT = 9100

DEFAULT_PRINTER_ID = 'printer1'
DEFAULT_PRINTER_HOST = '192.168.192.12'

# Installations set up before the address change still carry this host
LEGACY_PRINTER_HOST = '192.168.192.168'

# Static capability fields reported alongside the stored endpoint
PRINTER_CAPABILITIES = {
    'name': 'Local Thermal Printer',
    'width': 48,
    'timeout': int(DEFAULT_TIMEOUT * 1000),  # ms
    'model': 'ESC/POS',
    'enabled': True,
}

# Printer model tag -> encoder handler
PRINTER_MODELS = {
    'ESC/POS': 'escpos',
}

# =============================================================================
# Ticket Layout
# =============================================================================

OPERATOR_NAME = 'STE DHRAIFF SERVICES'
CURRENCY = 'TND'

# Flat per-seat service fee (station fee default, empty-vehicle exit fee)
SERVICE_FEE_PER_SEAT = '0.150'

# =============================================================================
# Storage Configuration
# =============================================================================

DATA_DIR = os.environ.get('STATION_PRINT_DATA_DIR', os.path.expanduser('~/.station_print_service'))

# Print jobs kept in memory for /api/printer/jobs
JOB_HISTORY_LIMIT = int(os.environ.get('STATION_PRINT_JOB_HISTORY', 100))


def setup_logging(level: str = LOG_LEVEL):
    """Configure root logging for the service processes."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
