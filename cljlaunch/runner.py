"""
Process launching.

``run`` starts a command and waits for it.  ``run_cancellable`` does the same
on a helper thread while the main thread keeps SIGINT / SIGTERM from tearing
the launcher down: the child shares our terminal and process group, receives
the same signal, and decides for itself when to exit.  Its status is then
reported back through a one-slot queue.
"""
from __future__ import annotations

import queue
import signal
import subprocess
import threading
from typing import Dict, Optional

import cljlaunch.logger as log
from cljlaunch.commands import Invocation
from cljlaunch.errors import ProcessError, ProcessStartError

_FORWARDED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def run(invocation: Invocation, *, verbose: bool = False) -> None:
    """
    Start *invocation* with inherited stdio and wait for it.

    Raises ProcessStartError if it cannot be started and ProcessError if it
    exits non-zero.
    """
    argv = list(invocation.argv)
    if verbose:
        log.info(f"Running: {invocation.display()}")
    try:
        proc = subprocess.Popen(argv, executable=invocation.executable)
    except OSError as exc:
        raise ProcessStartError(f"could not start {invocation.executable}: {exc}") from exc

    returncode = proc.wait()
    if returncode != 0:
        raise ProcessError(argv, returncode)


def _ignore_signals() -> Optional[Dict[int, object]]:
    """Install no-op handlers; returns the previous ones, or None off the main thread."""
    if threading.current_thread() is not threading.main_thread():
        return None

    def _on_signal(signum, frame):  # noqa: ANN001
        # the child got the same signal; wait for it to finish
        pass

    previous = {}
    for sig in _FORWARDED_SIGNALS:
        previous[sig] = signal.signal(sig, _on_signal)
    return previous


def _restore_signals(previous: Optional[Dict[int, object]]) -> None:
    if previous is None:
        return
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def run_cancellable(invocation: Invocation, *, verbose: bool = False) -> None:
    """Like :func:`run`, but survives Ctrl+C while the child is running."""
    done: "queue.Queue[Optional[BaseException]]" = queue.Queue(maxsize=1)

    def _target() -> None:
        try:
            run(invocation, verbose=verbose)
        except BaseException as exc:  # handed to the waiting thread
            done.put(exc)
        else:
            done.put(None)

    previous = _ignore_signals()
    try:
        worker = threading.Thread(target=_target, daemon=True, name="child-process")
        worker.start()
        error = done.get()
        worker.join()
    finally:
        _restore_signals(previous)

    if error is not None:
        raise error
