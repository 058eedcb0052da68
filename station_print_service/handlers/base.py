"""
Base Handler
============

Abstract base class for printer protocol encoders.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Union

Line = Union[str, bytes]


class BaseHandler(ABC):
    """Turns formatted text lines into a printer command stream."""

    #: Model tag reported in the printer configuration
    model = ''

    @abstractmethod
    def encode(self, lines: Iterable[Line]) -> bytes:
        """
        Encode a document.

        Args:
            lines: Text lines in print order. ``bytes`` lines are passed
                through untouched.

        Returns:
            Complete command stream, ready to write to the printer
        """
        pass
