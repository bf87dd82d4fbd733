"""Managed execution of external tools with streamed output and cancellation."""

import logging
import os
import queue
import shlex
import signal
import subprocess
import sys
import threading
from collections.abc import Callable, Sequence
from typing import IO

from pydantic import BaseModel, Field

from dashenc.models.errors import EncodeCancelledError

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]

_STDOUT = "stdout"
_STDERR = "stderr"


class ExecutionResult(BaseModel):
    """Exit code and captured output of a finished process."""

    exit_code: int
    output: list[str] = Field(default_factory=list, description="stdout lines")
    errors: list[str] = Field(default_factory=list, description="stderr lines")


def _read_stream(name: str, stream: IO[str], lines: "queue.Queue[tuple[str, str | None]]") -> None:
    """Producer: push every line of one pipe, then a None sentinel."""
    try:
        for line in stream:
            lines.put((name, line.rstrip("\r\n")))
    except (ValueError, OSError):
        # Pipe closed after the process was killed
        pass
    finally:
        lines.put((name, None))


def _kill(process: subprocess.Popen) -> None:
    """Kill the process and, where the platform allows, its process group."""
    if process.poll() is not None:
        return
    try:
        if sys.platform != "win32":
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except (ProcessLookupError, PermissionError, OSError):
        process.kill()
    process.wait()


def run_managed(
    executable: str,
    arguments: str | Sequence[str],
    stdout_callback: LineCallback | None = None,
    stderr_callback: LineCallback | None = None,
    cancel: threading.Event | None = None,
    poll_interval: float = 0.1,
) -> ExecutionResult:
    """Run a tool to completion, feeding each output line to the callbacks.

    One reader thread per pipe feeds a queue that this thread drains, so the
    callbacks run on the caller's thread and each stream keeps its own order.
    Setting ``cancel`` kills the process and raises EncodeCancelledError.
    A nonzero exit code is returned, not raised.
    """
    args = shlex.split(arguments) if isinstance(arguments, str) else list(arguments)
    if cancel is not None and cancel.is_set():
        raise EncodeCancelledError(f"{executable} was cancelled before it started")

    logger.debug(f"Starting {executable} {shlex.join(args)}")
    process = subprocess.Popen(
        [executable, *args],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        start_new_session=sys.platform != "win32",
    )

    lines: queue.Queue[tuple[str, str | None]] = queue.Queue()
    readers = [
        threading.Thread(target=_read_stream, args=(_STDOUT, process.stdout, lines), daemon=True),
        threading.Thread(target=_read_stream, args=(_STDERR, process.stderr, lines), daemon=True),
    ]
    for reader in readers:
        reader.start()

    output: list[str] = []
    errors: list[str] = []
    open_streams = {_STDOUT, _STDERR}
    try:
        while open_streams:
            if cancel is not None and cancel.is_set():
                _kill(process)
                raise EncodeCancelledError(
                    f"{executable} was cancelled",
                    details={"output": output[-30:], "errors": errors[-30:]},
                )
            try:
                name, line = lines.get(timeout=poll_interval)
            except queue.Empty:
                continue
            if line is None:
                open_streams.discard(name)
                continue
            if name == _STDOUT:
                output.append(line)
                if stdout_callback:
                    stdout_callback(line)
            else:
                errors.append(line)
                if stderr_callback:
                    stderr_callback(line)
        exit_code = process.wait()
    except BaseException:
        _kill(process)
        raise
    finally:
        for stream in (process.stdout, process.stderr):
            if stream:
                stream.close()
        for reader in readers:
            reader.join(timeout=2.0)

    logger.debug(f"{executable} exited with code {exit_code}")
    return ExecutionResult(exit_code=exit_code, output=output, errors=errors)
