"""FFmpeg progress monitoring."""

import re
from collections.abc import Callable

PROGRESS_PATTERN = re.compile(r"time=\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")


def _ignore(line: str | None) -> None:
    pass


class FFmpegProgressMonitor:
    """Turn ffmpeg stderr lines into progress fractions and routed log lines."""

    def __init__(
        self,
        total_duration: float,
        callback: Callable[[float], None] | None = None,
        stdout_log: Callable[[str | None], None] | None = None,
        stderr_log: Callable[[str | None], None] | None = None,
    ):
        self.total_duration = total_duration
        self.callback = callback
        self.stdout_log = stdout_log or _ignore
        self.stderr_log = stderr_log or _ignore
        self.current_time = 0.0

    def parse_line(self, line: str) -> float | None:
        """Return the encode fraction for a `time=` line, None for any other line."""
        match = PROGRESS_PATTERN.search(line)
        if not match:
            return None
        hours, minutes, seconds = match.groups()
        self.current_time = int(hours) * 3600 + int(minutes) * 60 + float(seconds)
        fraction = self.progress
        if self.callback:
            self.callback(fraction)
        return fraction

    def handle_line(self, line: str | None) -> None:
        """Route one stderr line: progress lines to stdout_log, the rest to stderr_log."""
        if line is not None and self.parse_line(line) is not None:
            self.stdout_log(line)
        else:
            self.stderr_log(line)

    @property
    def progress(self) -> float:
        """Elapsed encode time over input duration, clamped to [0, 1]."""
        if self.total_duration <= 0:
            return 0.0
        return max(0.0, min(1.0, self.current_time / self.total_duration))
