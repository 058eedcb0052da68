"""
Delivery Channel
================

Raw TCP delivery of encoded jobs to network printers (port 9100 style).

The printers send no application-level acknowledgment. A job counts as
delivered once ``sendall`` has handed the whole buffer to the socket layer;
anything the socket does afterwards (peer close, reset, linger timeout) does
not change the outcome.
"""

import time
import socket
import logging
from typing import Dict, Any

from .config import DEFAULT_TIMEOUT, DEFAULT_LINGER
from .models import EncodedJob, PrinterEndpoint

logger = logging.getLogger(__name__)

# Failure reasons
UNREACHABLE = 'printer unreachable'
WRITE_FAILED = 'write failed'
TIMEOUT = 'timeout'


def _failure(endpoint: PrinterEndpoint, reason: str, error: str) -> Dict[str, Any]:
    return {
        'success': False,
        'reason': reason,
        'error': error,
        'host': endpoint.host,
        'port': endpoint.port,
    }


class DeliveryChannel:
    """Sends encoded jobs over TCP with bounded connect and write time."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, linger: float = DEFAULT_LINGER):
        """
        Args:
            timeout: Seconds allowed for connect and write together
            linger: How long to wait for the printer to close the connection
                after the write side is shut down
        """
        self.timeout = timeout
        self.linger = linger

    def _connect(self, endpoint: PrinterEndpoint) -> socket.socket:
        return socket.create_connection((endpoint.host, endpoint.port), timeout=self.timeout)

    def deliver(self, job: EncodedJob) -> Dict[str, Any]:
        """
        Send one job.

        Returns:
            Dict with success status; failures carry ``reason`` (one of
            printer unreachable, write failed, timeout) and ``error``
        """
        endpoint = job.endpoint
        deadline = time.monotonic() + self.timeout
        logger.info("Connecting to printer at %s", endpoint)

        try:
            sock = self._connect(endpoint)
        except socket.timeout:
            logger.warning("Printer connection timeout at %s", endpoint)
            return _failure(endpoint, TIMEOUT, f'Printer connection timeout at {endpoint}')
        except OSError as e:
            logger.warning("Printer unreachable at %s: %s", endpoint, e)
            return _failure(endpoint, UNREACHABLE, f'Printer unreachable at {endpoint}: {e}')

        with sock:
            logger.info("Sending %d bytes to %s", len(job), endpoint)
            try:
                # Connect and write share one timeout budget
                sock.settimeout(max(deadline - time.monotonic(), 0.001))
                sock.sendall(job.payload)
            except socket.timeout:
                logger.warning("Write timeout at %s", endpoint)
                return _failure(endpoint, TIMEOUT, f'Printer write timeout at {endpoint}')
            except OSError as e:
                logger.error("Write to %s failed: %s", endpoint, e)
                return _failure(endpoint, WRITE_FAILED, f'Write to printer at {endpoint} failed: {e}')

            self._drain(sock, endpoint)

        logger.info("Data sent to printer at %s", endpoint)
        return {
            'success': True,
            'host': endpoint.host,
            'port': endpoint.port,
            'bytes_sent': len(job),
        }

    def _drain(self, sock: socket.socket, endpoint: PrinterEndpoint):
        """Half-close and wait up to ``linger`` seconds for the printer to close."""
        deadline = time.monotonic() + self.linger
        try:
            sock.shutdown(socket.SHUT_WR)
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                sock.settimeout(remaining)
                if not sock.recv(1024):
                    break
        except OSError as e:
            # Data is already handed off; late socket events are ignored
            logger.debug("Socket to %s closed after write: %s", endpoint, e)

    def probe(self, endpoint: PrinterEndpoint) -> Dict[str, Any]:
        """
        Zero-payload connect/disconnect test.

        Returns:
            Dict with ``connected`` and, on failure, ``error``
        """
        try:
            sock = self._connect(endpoint)
        except socket.timeout:
            return {'connected': False, 'error': f'Connection timeout to {endpoint}'}
        except OSError as e:
            return {'connected': False, 'error': f'Could not connect to printer at {endpoint}: {e}'}

        sock.close()
        logger.info("Printer at %s is reachable", endpoint)
        return {'connected': True}
