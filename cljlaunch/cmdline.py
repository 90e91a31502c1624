"""
Command-line re-acquisition for Windows.

Windows hands a process a single command-line string and each runtime splits
it its own way, which mangles EDN arguments such as ``-Sdeps '{:deps {...}}'``.
Unless ``--native-args`` is given, the launcher asks WMI for the original
string and splits it again with POSIX-like quoting rules.
"""
from __future__ import annotations

import os
import subprocess
from typing import List, Optional

from cljlaunch.errors import ArgumentAcquisitionError

_DOUBLE = '"'
_SINGLE = "'"


def linuxize(args: List[str], native: bool) -> List[str]:
    """Return *args* unchanged in native mode, else the re-split command line."""
    if native:
        return args
    return windows_args()


def wmic_command(pid: int) -> List[str]:
    return ["wmic", "process", "where", f"ProcessId={pid}", "get", "CommandLine"]


def windows_args(pid: Optional[int] = None) -> List[str]:
    cmd = wmic_command(os.getpid() if pid is None else pid)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ArgumentAcquisitionError(f"could not run wmic: {exc}") from exc

    lines = result.stdout.split("\r\n")
    if len(lines) < 2 or not lines[0].startswith("CommandLine") or not lines[1]:
        raise ArgumentAcquisitionError("could not retrieve windows command line using wmic")
    return split_to_args(lines[1])


def split_to_args(command_line: str) -> List[str]:
    """
    Split on spaces, keeping single- and double-quoted runs together.

    An unterminated quote swallows the rest of the line literally.
    """
    args: List[str] = []
    quote: Optional[str] = None
    current = ""

    for ch in command_line.replace("\r", "").strip():
        if quote is None:
            if ch == " ":
                if current:
                    args.append(trim_quotes(current))
                    current = ""
                continue
            if ch in (_DOUBLE, _SINGLE):
                quote = ch
            current += ch
        else:
            if ch == quote:
                quote = None
            current += ch

    if current:
        args.append(trim_quotes(current))
    return args


def trim_quotes(token: str) -> str:
    """
    Strip one pair of enclosing quotes.  Inside double quotes ``\\"`` becomes
    ``"``; single-quoted text is taken literally.
    """
    if len(token) >= 2 and token[0] == token[-1] == _DOUBLE:
        return token[1:-1].replace('\\"', '"')
    if len(token) >= 2 and token[0] == token[-1] == _SINGLE:
        return token[1:-1]
    return token
