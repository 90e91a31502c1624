"""
Exception types raised by the launcher.

Every error that should end an invocation derives from :class:`LauncherError`;
the CLI reports the message and exits non-zero.  Filesystem problems are left
as plain ``OSError`` and propagate the same way.
"""
from __future__ import annotations


class LauncherError(Exception):
    """Base class for all launcher failures."""


# ── argument grammar ─────────────────────────────────────────────────────────

class OptionError(LauncherError):
    """Malformed command line.  Parsing stops at the first one."""


class EmptyInvocationError(OptionError):
    pass


class DuplicateOptionError(OptionError):
    pass


class MissingValueError(OptionError):
    pass


class InvalidValueError(OptionError):
    pass


class UnknownOptionError(OptionError):
    pass


class RemovedOptionError(OptionError):
    """A flag that used to exist; the message says what to use instead."""


class ReadlineOptionError(OptionError):
    pass


class ArgumentAcquisitionError(LauncherError):
    """The platform command-line query failed or returned garbage."""


# ── environment / execution ──────────────────────────────────────────────────

class JavaNotFoundError(LauncherError):
    pass


class ToolsInstallError(LauncherError):
    pass


class ProcessError(LauncherError):
    """A launched process exited unsuccessfully."""

    def __init__(self, cmd: list[str], returncode: int) -> None:
        self.cmd = cmd
        self.returncode = returncode
        super().__init__(f"{cmd[0]} exited with status {returncode}")


class ProcessStartError(LauncherError):
    """The executable could not be started at all."""
