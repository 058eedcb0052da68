"""
Virtual Printer
===============

Simulates a network ESC/POS thermal printer for testing without hardware.
Listens on TCP (port 9100 by default), collects each connection's bytes as
one print job, decodes the command subset the service emits and optionally
saves every job to a log directory.

Run:
    station-print-emulator --port 9100 --log-dir ./virtual-printer-logs
"""

import time
import socket
import logging
import argparse
import threading
from datetime import datetime
from pathlib import Path
from dataclasses import dataclass
from typing import List, Optional

from .config import ESCPOS_PORT, setup_logging

logger = logging.getLogger(__name__)

ALIGNMENTS = {0: 'LEFT', 1: 'CENTER', 2: 'RIGHT'}


def decode_escpos(data: bytes) -> List[str]:
    """
    Decode an ESC/POS stream into readable lines.

    Commands become bracketed tags such as ``[INIT]`` or ``[ALIGN CENTER]``;
    text is decoded as UTF-8 line by line.
    """
    lines = []
    text = bytearray()

    def flush():
        if text:
            lines.append(text.decode('utf-8', errors='replace'))
            text.clear()

    i = 0
    while i < len(data):
        byte = data[i]
        if byte == 0x1B and i + 1 < len(data):
            cmd = data[i + 1]
            if cmd == 0x40:
                flush()
                lines.append('[INIT]')
                i += 2
                continue
            if cmd == 0x61 and i + 2 < len(data):
                flush()
                lines.append(f'[ALIGN {ALIGNMENTS.get(data[i + 2], data[i + 2])}]')
                i += 3
                continue
            if cmd == 0x74 and i + 2 < len(data):
                flush()
                lines.append(f'[CODE TABLE {data[i + 2]}]')
                i += 3
                continue
        elif byte == 0x1D and i + 2 < len(data) and data[i + 1] == 0x56:
            flush()
            lines.append('[CUT]')
            i += 3
            continue
        elif byte == 0x0A:
            lines.append(text.decode('utf-8', errors='replace'))
            text.clear()
            i += 1
            continue

        text.append(byte)
        i += 1

    flush()
    return lines


@dataclass
class ReceivedJob:
    """Bytes received on one connection."""

    number: int
    client: str
    data: bytes
    opened_at: float

    @property
    def lines(self) -> List[str]:
        return decode_escpos(self.data)


class VirtualPrinter:
    """Threaded TCP printer emulator."""

    def __init__(self, host: str = '0.0.0.0', port: int = ESCPOS_PORT,
                 log_dir: Optional[str] = None, hold: float = 0.0):
        """
        Args:
            host: Interface to listen on
            port: TCP port, 0 for an ephemeral port
            log_dir: Save each job here as a text file when set
            hold: Seconds to wait after accepting before reading, to
                simulate a busy printer
        """
        self.host = host
        self.port = port
        self.log_dir = Path(log_dir) if log_dir else None
        self.hold = hold

        self.jobs: List[ReceivedJob] = []
        self._cond = threading.Condition()
        self._server: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self.running = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> 'VirtualPrinter':
        """Bind and start accepting connections in a background thread."""
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind((self.host, self.port))
        self._server.listen(16)
        self._server.settimeout(0.2)
        self.port = self._server.getsockname()[1]
        self.running = True

        self._thread = threading.Thread(target=self._accept_loop, name='virtual-printer', daemon=True)
        self._thread.start()
        logger.info("Virtual printer listening on %s:%s", self.host, self.port)
        return self

    def stop(self):
        self.running = False
        if self._server:
            self._server.close()
        if self._thread:
            self._thread.join(timeout=2)

    def __enter__(self) -> 'VirtualPrinter':
        return self.start()

    def __exit__(self, *exc):
        self.stop()

    def wait_for_jobs(self, count: int, timeout: float = 5.0) -> bool:
        """Block until ``count`` jobs have been received."""
        with self._cond:
            return self._cond.wait_for(lambda: len(self.jobs) >= count, timeout=timeout)

    # =========================================================================
    # Connections
    # =========================================================================

    def _accept_loop(self):
        while self.running:
            try:
                client, address = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            threading.Thread(target=self._handle_client, args=(client, address), daemon=True).start()

    def _handle_client(self, client: socket.socket, address):
        opened_at = time.monotonic()
        buffer = bytearray()
        try:
            if self.hold:
                time.sleep(self.hold)
            client.settimeout(30)
            while True:
                chunk = client.recv(4096)
                if not chunk:
                    break
                buffer.extend(chunk)
        except OSError as e:
            logger.warning("Socket error from %s:%s: %s", address[0], address[1], e)
        finally:
            client.close()

        with self._cond:
            if not buffer:
                logger.info("Connection from %s:%s closed without data", address[0], address[1])
                return
            job = ReceivedJob(
                number=len(self.jobs) + 1,
                client=f'{address[0]}:{address[1]}',
                data=bytes(buffer),
                opened_at=opened_at,
            )
            if self.log_dir:
                self._save(job)
            self.jobs.append(job)
            self._cond.notify_all()

        logger.info("Print job #%d: %d bytes from %s", job.number, len(job.data), job.client)

    def _save(self, job: ReceivedJob):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d-%H%M%S')
        path = self.log_dir / f'print-job-{timestamp}-{job.number}.txt'

        hex_dump = job.data.hex()
        output = [
            '=' * 60,
            f'VIRTUAL PRINTER - Print Job #{job.number}',
            f"Time: {datetime.now().strftime('%d/%m/%Y %H:%M:%S')}",
            f'Client: {job.client}',
            f'Data Size: {len(job.data)} bytes',
            '=' * 60,
            '',
            '--- DECODED OUTPUT ---',
            '',
            *job.lines,
            '',
            '=' * 60,
            '',
            '--- RAW DATA (HEX) ---',
            '',
            *[hex_dump[i:i + 32] for i in range(0, len(hex_dump), 32)],
            '',
            '=' * 60,
        ]
        path.write_text('\n'.join(output), encoding='utf-8')
        logger.info("Print job saved to %s", path)


def main(argv: Optional[List[str]] = None):
    """Run the virtual printer until interrupted."""
    parser = argparse.ArgumentParser(description='Virtual ESC/POS network printer')
    parser.add_argument('--host', default='0.0.0.0', help='Interface to listen on')
    parser.add_argument('--port', type=int, default=ESCPOS_PORT, help='TCP port (default 9100)')
    parser.add_argument('--log-dir', default='virtual-printer-logs', help='Directory for job logs')
    parser.add_argument('--hold', type=float, default=0.0, help='Seconds to stall before reading each job')
    args = parser.parse_args(argv)

    setup_logging()
    printer = VirtualPrinter(args.host, args.port, log_dir=args.log_dir, hold=args.hold)
    try:
        printer.start()
    except OSError as e:
        logger.error("Cannot listen on %s:%s: %s", args.host, args.port, e)
        raise SystemExit(1)

    print("=" * 60)
    print("  VIRTUAL THERMAL PRINTER SIMULATOR")
    print("=" * 60)
    print(f"  Listening on: {args.host}:{printer.port}")
    print(f"  Logs directory: {args.log_dir}")
    print("  Press Ctrl+C to stop")
    print("=" * 60)

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        printer.stop()
        print(f"  Total print jobs processed: {len(printer.jobs)}")


if __name__ == '__main__':
    main()
