"""
Print Job Models
================

EncodedJob is the immutable payload handed to the delivery channel.
PrintJob is the bookkeeping record kept in the job history.
"""

import uuid
from datetime import datetime
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from .printer import PrinterEndpoint


@dataclass(frozen=True)
class EncodedJob:
    """Encoded ESC/POS byte stream and its destination."""

    endpoint: PrinterEndpoint
    payload: bytes

    def __post_init__(self):
        # bytearray input would stay mutable behind the frozen dataclass
        object.__setattr__(self, 'payload', bytes(self.payload))

    def __len__(self) -> int:
        return len(self.payload)


@dataclass
class PrintJob:
    """Print job state."""

    # Identification
    id: str = field(default_factory=lambda: f"JOB-{str(uuid.uuid4())[:8].upper()}")
    kind: str = ""  # booking, daypass, exitpass, statistics

    # Destination
    host: str = ""
    port: int = 0
    bytes_sent: int = 0

    # Status
    status: str = "pending"  # pending, printing, completed, failed
    error_message: Optional[str] = None

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Source
    source_ip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        # Convert datetime to ISO format
        for key in ['created_at', 'started_at', 'completed_at']:
            if data.get(key):
                data[key] = data[key].isoformat()
        return data

    def start(self, endpoint: PrinterEndpoint):
        """Mark job as handed to the dispatch queue."""
        self.status = "printing"
        self.host = endpoint.host
        self.port = endpoint.port
        self.started_at = datetime.now()

    def complete(self, bytes_sent: int):
        """Mark job as completed."""
        self.status = "completed"
        self.bytes_sent = bytes_sent
        self.completed_at = datetime.now()

    def fail(self, error: str):
        """Mark job as failed."""
        self.status = "failed"
        self.completed_at = datetime.now()
        self.error_message = error
