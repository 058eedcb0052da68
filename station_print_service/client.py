"""
Station Print Service Client
============================

Python SDK for the station print service.

Usage:
    from station_print_service.client import PrintClient

    client = PrintClient('http://localhost:8105')

    # Point the service at the printer
    client.set_config('printer1', '192.168.192.12', 9100)
    client.test_connection('printer1')

    # Print a booking ticket
    result = client.print_booking({
        'destinationName': 'Tunis',
        'seatNumber': 2,
        'basePrice': 5.0,
        'totalAmount': 10.3,
    })
"""

import requests
from typing import Dict, Any, List


class PrintClient:
    """Client for the station print service."""

    def __init__(self, base_url: str = 'http://localhost:8105', timeout: float = 30):
        """
        Initialize client.

        Args:
            base_url: Base URL of the print service
            timeout: HTTP timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        """Get request headers."""
        return {'Content-Type': 'application/json'}

    def _request(self, method: str, endpoint: str, data: Dict = None) -> Dict[str, Any]:
        """Make API request."""
        url = f'{self.base_url}{endpoint}'

        try:
            response = requests.request(method, url, json=data, headers=self._headers(), timeout=self.timeout)
            return response.json()

        except requests.exceptions.Timeout:
            return {'success': False, 'error': 'Request timeout'}
        except requests.exceptions.ConnectionError:
            return {'success': False, 'error': f'Cannot connect to {self.base_url}'}
        except ValueError as e:
            return {'success': False, 'error': f'Invalid response: {e}'}

    # =========================================================================
    # Health
    # =========================================================================

    def health(self) -> Dict[str, Any]:
        """Check service health."""
        return self._request('GET', '/health')

    def is_online(self) -> bool:
        """Check if service is online."""
        return self.health().get('status') == 'ok'

    # =========================================================================
    # Configuration
    # =========================================================================

    def get_config(self, printer_id: str = 'printer1') -> Dict[str, Any]:
        """Get printer endpoint and capabilities."""
        return self._request('GET', f'/api/printer/config/{printer_id}')

    def set_config(self, printer_id: str, ip: str, port: int = 9100) -> Dict[str, Any]:
        """Store a new printer endpoint."""
        return self._request('PUT', f'/api/printer/config/{printer_id}', {'ip': ip, 'port': port})

    def test_connection(self, printer_id: str = 'printer1') -> Dict[str, Any]:
        """Test printer connection (TCP connect only)."""
        return self._request('POST', f'/api/printer/test/{printer_id}')

    def is_printer_online(self, printer_id: str = 'printer1') -> bool:
        """Quick check if the printer accepts connections."""
        return bool(self.test_connection(printer_id).get('connected'))

    # =========================================================================
    # Printing
    # =========================================================================

    def print_booking(self, ticket: Dict[str, Any]) -> Dict[str, Any]:
        """Print a booking ticket."""
        return self._request('POST', '/api/printer/print/booking', ticket)

    def print_daypass(self, ticket: Dict[str, Any]) -> Dict[str, Any]:
        """Print a day pass."""
        return self._request('POST', '/api/printer/print/daypass', ticket)

    def print_exitpass(self, ticket: Dict[str, Any]) -> Dict[str, Any]:
        """Print an exit pass."""
        return self._request('POST', '/api/printer/print/exitpass', ticket)

    def print_statistics(self, report: Dict[str, Any]) -> Dict[str, Any]:
        """Print a statistics report."""
        return self._request('POST', '/api/printer/print/statistics', report)

    # =========================================================================
    # Jobs
    # =========================================================================

    def list_jobs(self, limit: int = 50) -> List[Dict[str, Any]]:
        """List recent print jobs."""
        result = self._request('GET', f'/api/printer/jobs?limit={limit}')
        return result.get('jobs', [])
