"""
ESC/POS Handler
===============

Encoder for ESC/POS thermal printers (Epson and compatibles).

Only the command subset the station printers need is emitted: initialize,
character table, alignment, line feed and full cut. The byte values are the
wire contract with the device.
"""

import re
from typing import Iterable

from .base import BaseHandler, Line

LONE_SURROGATE = re.compile('[\ud800-\udfff]')


class ESCPOSHandler(BaseHandler):
    """Handler for ESC/POS printers."""

    model = 'ESC/POS'

    # ESC/POS commands
    ESC = b'\x1b'
    GS = b'\x1d'
    LF = b'\x0a'
    INIT = b'\x1b\x40'  # Initialize printer
    CUT = b'\x1d\x56\x00'  # Full cut
    CODE_TABLE = b'\x1b\x74'  # Select character code table, + n

    # Alignment
    ALIGN_LEFT = b'\x1b\x61\x00'
    ALIGN_CENTER = b'\x1b\x61\x01'
    ALIGN_RIGHT = b'\x1b\x61\x02'

    # PC850 multilingual
    DEFAULT_CODE_TABLE = 2

    def __init__(self, code_table: int = DEFAULT_CODE_TABLE, feed_lines: int = 4):
        if not 0 <= code_table <= 255:
            raise ValueError(f'Code table out of range: {code_table}')
        self.code_table = code_table
        self.feed_lines = feed_lines

    @staticmethod
    def _line_bytes(line: Line) -> bytes:
        if isinstance(line, (bytes, bytearray)):
            return bytes(line)
        # Lone surrogates (valid in JSON strings) print as U+FFFD
        return LONE_SURROGATE.sub('\ufffd', line).encode('utf-8')

    def encode(self, lines: Iterable[Line]) -> bytes:
        """
        Build the command stream for a document.

        Layout: init, code table, center, lines joined by LF, left align,
        paper feed, cut. Text is not validated.
        """
        data = bytearray()
        data.extend(self.INIT)
        data.extend(self.CODE_TABLE + bytes([self.code_table]))
        data.extend(self.ALIGN_CENTER)

        data.extend(self.LF.join(self._line_bytes(line) for line in lines))

        data.extend(self.ALIGN_LEFT)
        data.extend(self.LF * self.feed_lines)
        data.extend(self.CUT)

        return bytes(data)
