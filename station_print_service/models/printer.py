"""
Printer Endpoint Model
======================

Network location of a thermal printer.
"""

import re
import ipaddress
from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

from ..config import ESCPOS_PORT


class ValidationError(ValueError):
    """Raised when request or configuration data is malformed."""


_HOST_LABEL = re.compile(r'^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$')


def is_valid_host(host: str) -> bool:
    """Check that host is an IPv4 address or an RFC 1123 hostname."""
    if not isinstance(host, str) or not host or len(host) > 253:
        return False

    try:
        ipaddress.IPv4Address(host)
        return True
    except ValueError:
        pass

    labels = host.rstrip('.').split('.')
    if not all(_HOST_LABEL.match(label) for label in labels):
        return False

    # Numeric-only names are malformed addresses, not hostnames
    return not labels[-1].isdigit()


def is_valid_port(port: Any) -> bool:
    """Check that port is an integer in 1..65535."""
    return isinstance(port, int) and not isinstance(port, bool) and 0 < port <= 65535


@dataclass(frozen=True)
class PrinterEndpoint:
    """Host and port of a network printer."""

    host: str
    port: int = ESCPOS_PORT

    def __post_init__(self):
        if not is_valid_host(self.host):
            raise ValidationError(f'Invalid printer host: {self.host!r}')
        if not is_valid_port(self.port):
            raise ValidationError(f'Invalid printer port: {self.port!r}')

    @property
    def key(self) -> Tuple[str, int]:
        """Identity used to serialize jobs per printer."""
        return self.host.lower(), self.port

    def __str__(self) -> str:
        return f'{self.host}:{self.port}'

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PrinterEndpoint':
        """
        Create from a request or storage dictionary.

        Accepts either ``host`` or the desktop UI's ``ip`` key. Numeric
        strings are accepted for the port.
        """
        if not isinstance(data, dict):
            raise ValidationError('Printer configuration must be an object')

        host = data.get('host', data.get('ip'))
        port = data.get('port', ESCPOS_PORT)
        if isinstance(port, str):
            try:
                port = int(port.strip())
            except ValueError:
                raise ValidationError(f'Invalid printer port: {port!r}')
        if isinstance(host, str):
            host = host.strip()

        return cls(host=host, port=port)
