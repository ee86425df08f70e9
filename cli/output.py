"""Shared output context handed to every built-in command."""

import sys
from typing import Optional, TextIO


class Terminal:
    """Thin wrapper over stdout/stderr so handlers can be captured in tests."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def println(self, message: str = "") -> None:
        print(message, file=self.out)

    def eprintln(self, message: str) -> None:
        print(message, file=self.err)
