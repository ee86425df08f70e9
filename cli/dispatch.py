#!/usr/bin/env python3
"""
streamctl plugin dispatch

Runs a resolved plugin with inherited stdio, waits for it, and describes
how it ended. `exit_with` is the only place that terminates the process.
"""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, NoReturn, Optional, Sequence, TextIO

logger = logging.getLogger(__name__)


class PluginLaunchError(Exception):
    """The plugin executable could not be started."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"failed to launch {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


@dataclass(frozen=True)
class Termination:
    """How a command finished: an exit code, or the signal that killed it."""
    code: Optional[int] = None
    signal: Optional[int] = None

    @property
    def exit_status(self) -> int:
        if self.signal is not None:
            return self.signal
        return self.code if self.code is not None else 0


class SignalSupport:
    """Platforms without signal semantics never report a killing signal."""

    def decode(self, returncode: int) -> Optional[int]:
        return None


class PosixSignalSupport(SignalSupport):
    """subprocess reports death by signal N as returncode -N."""

    def decode(self, returncode: int) -> Optional[int]:
        return -returncode if returncode < 0 else None


def platform_signal_support() -> SignalSupport:
    return PosixSignalSupport() if os.name == "posix" else SignalSupport()


class PluginDispatcher:
    """Launch one plugin at a time and block until it finishes."""

    def __init__(
        self,
        signals: Optional[SignalSupport] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.signals = signals if signals is not None else platform_signal_support()
        self.popen = popen

    def dispatch(self, path: Path, args: Sequence[str]) -> Termination:
        logger.debug("Launching external subcommand: %s %s", path, " ".join(args))

        try:
            proc = self.popen([str(path), *args])
        except OSError as e:
            raise PluginLaunchError(path, e) from e

        returncode = _wait(proc)
        signal = self.signals.decode(returncode)
        if signal is not None:
            return Termination(signal=signal)
        return Termination(code=returncode)


def _wait(proc: subprocess.Popen) -> int:
    # Ctrl-C reaches the child through the shared process group; keep waiting
    # so the parent reports whatever the child does with it.
    while True:
        try:
            return proc.wait()
        except KeyboardInterrupt:
            logger.debug("interrupt received while waiting for plugin pid %s", proc.pid)


def exit_with(termination: Termination, out: Optional[TextIO] = None) -> NoReturn:
    """Terminate the current process the same way the command terminated."""
    if termination.signal is not None:
        print(f"Extension killed via {termination.signal} signal", file=out or sys.stdout)
    sys.exit(termination.exit_status)
