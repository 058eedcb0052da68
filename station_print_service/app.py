"""
Station Print Service - Main Application
========================================

HTTP facade used by the station desktop UI to configure the ticket printer
and print tickets and reports.

Run: python -m station_print_service
"""

import sys
import logging
from datetime import datetime
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from . import __version__
from .config import PORT, HOST, DEBUG, DATA_DIR, setup_logging
from .models import BOOKING, DAYPASS, EXITPASS, ValidationError
from .service import PrintService

logger = logging.getLogger(__name__)

printer_api = Blueprint('printer', __name__)

MESSAGES = {
    BOOKING: 'booking ticket printed successfully',
    DAYPASS: 'day pass ticket printed successfully',
    EXITPASS: 'exit pass ticket printed successfully',
}


def _service() -> PrintService:
    return current_app.extensions['print_service']


def _error(message: str, status: int, **extra):
    return jsonify({'success': False, 'error': message, **extra}), status


def _json_body():
    """Decoded JSON object body, or None."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


# =============================================================================
# Health & Info Endpoints
# =============================================================================

@printer_api.route('/health', methods=['GET'])
def health():
    """Liveness check, no side effects."""
    return jsonify({
        'status': 'ok',
        'service': 'printer-service',
        'version': __version__,
        'timestamp': datetime.now().isoformat(),
    })


@printer_api.route('/api', methods=['GET'])
def api_info():
    """API info (JSON)."""
    return jsonify({
        'service': 'Station Print Service',
        'version': __version__,
        'status': 'running',
        'endpoints': {
            'health': '/health',
            'config': '/api/printer/config/{id}',
            'test': '/api/printer/test/{id}',
            'print': '/api/printer/print/{booking,daypass,exitpass,statistics}',
            'jobs': '/api/printer/jobs',
        }
    })


# =============================================================================
# Printer Configuration
# =============================================================================

@printer_api.route('/api/printer/config/<printer_id>', methods=['GET'])
def get_config(printer_id):
    """Current endpoint and capabilities of a printer."""
    return jsonify(_service().get_config(printer_id))


@printer_api.route('/api/printer/config/<printer_id>', methods=['PUT'])
def update_config(printer_id):
    """Store a new printer endpoint. Does not contact the printer."""
    data = _json_body()
    if data is None:
        return _error('Request body required', 400)

    try:
        endpoint = _service().set_config(printer_id, data)
    except ValidationError as e:
        return _error(str(e), 400)

    return jsonify({
        'success': True,
        'message': 'printer configuration updated successfully',
        'ip': endpoint.host,
        'port': endpoint.port,
    })


@printer_api.route('/api/printer/test/<printer_id>', methods=['POST'])
def test_printer(printer_id):
    """TCP connect/disconnect probe against the stored endpoint."""
    return jsonify(_service().test_connection(printer_id))


# =============================================================================
# Printing
# =============================================================================

def _print(submit, message: str):
    data = _json_body()
    if data is None:
        return _error('Request body required', 400)

    try:
        result = submit(data, request.remote_addr)
    except ValidationError as e:
        return _error(str(e), 400)
    except Exception:
        logger.exception("Print request failed")
        return _error('Failed to print ticket', 500)

    if not result['success']:
        return jsonify(result), 502

    return jsonify({'message': message, **result})


@printer_api.route('/api/printer/print/booking', methods=['POST'])
def print_booking():
    return _print(lambda data, ip: _service().print_ticket(BOOKING, data, ip), MESSAGES[BOOKING])


@printer_api.route('/api/printer/print/daypass', methods=['POST'])
def print_daypass():
    return _print(lambda data, ip: _service().print_ticket(DAYPASS, data, ip), MESSAGES[DAYPASS])


@printer_api.route('/api/printer/print/exitpass', methods=['POST'])
def print_exitpass():
    return _print(lambda data, ip: _service().print_ticket(EXITPASS, data, ip), MESSAGES[EXITPASS])


@printer_api.route('/api/printer/print/statistics', methods=['POST'])
def print_statistics():
    return _print(_service().print_report, 'statistics report printed successfully')


# =============================================================================
# Job History
# =============================================================================

@printer_api.route('/api/printer/jobs', methods=['GET'])
def list_jobs():
    """List recent jobs."""
    limit = request.args.get('limit', 50, type=int)
    jobs = _service().list_jobs(limit)

    return jsonify({
        'success': True,
        'jobs': jobs,
        'count': len(jobs)
    })


# =============================================================================
# Application Setup
# =============================================================================

def _handle_http_error(e: HTTPException):
    return _error(e.description if e.code != 404 else 'Not found', e.code)


def create_app(service: Optional[PrintService] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        service: Print pipeline to serve; defaults to one backed by the
            JSON config file in DATA_DIR
    """
    app = Flask(__name__)
    CORS(app, send_wildcard=True)

    app.extensions['print_service'] = service or PrintService()
    app.register_blueprint(printer_api)
    app.register_error_handler(HTTPException, _handle_http_error)

    return app


def main():
    """Run the service."""
    setup_logging()

    print("=" * 60)
    print("  Station Print Service")
    print("=" * 60)
    print(f"  Version: {__version__}")
    print(f"  Port: {PORT}")
    print(f"  Data: {DATA_DIR}")
    print("=" * 60)
    print("  API Endpoints:")
    print("    GET  /health                          - Health check")
    print("    GET  /api/printer/config/{id}         - Get printer config")
    print("    PUT  /api/printer/config/{id}         - Update printer config")
    print("    POST /api/printer/test/{id}           - Test connection")
    print("    POST /api/printer/print/booking       - Print booking ticket")
    print("    POST /api/printer/print/daypass       - Print day pass")
    print("    POST /api/printer/print/exitpass      - Print exit pass")
    print("    POST /api/printer/print/statistics    - Print statistics report")
    print("    GET  /api/printer/jobs                - Job history")
    print("=" * 60)

    app = create_app()
    endpoint = app.extensions['print_service'].store.get()
    print(f"  Printer: {endpoint}")
    print("=" * 60)

    try:
        app.run(host=HOST, port=PORT, debug=DEBUG, threaded=True)
    except OSError as e:
        logger.error("Cannot start printer service on port %s: %s", PORT, e)
        sys.exit(1)
    finally:
        app.extensions['print_service'].shutdown()


if __name__ == '__main__':
    main()
