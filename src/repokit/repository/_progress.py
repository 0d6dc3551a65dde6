"""Clone progress reporting.

dulwich reports transfer progress as the remote's sideband text. This
module turns that text into TransferProgress records for a callback, and
provides a console reporter that renders them.
"""

import re
from collections.abc import Callable
from typing import Final, final

from rich.console import Console

from repokit.repository._models import TransferProgress

type ProgressCallback = Callable[[TransferProgress], object]

_PROGRESS_LINE: Final = re.compile(
    rb"^(?P<label>[^%]+?):\s*(?P<percent>\d+)%\s*\((?P<done>\d+)/(?P<total>\d+)\)"
    rb"(?:,\s*(?P<size>\d+(?:\.\d+)?)\s*(?P<unit>bytes|KiB|MiB|GiB))?"
)
_UNITS: Final = {
    b"bytes": 1,
    b"KiB": 1024,
    b"MiB": 1024**2,
    b"GiB": 1024**3,
}
_LINE_BREAK: Final = re.compile(rb"[\r\n]")
_REPORT_STEP: Final = 10


def parse_progress_line(line: bytes) -> TransferProgress | None:
    """Parse one sideband progress line.

    Args:
        line: A single line such as ``Receiving objects:  50% (5/10), 1.00 KiB``.

    Returns:
        The parsed progress, or None if the line carries no counts.

    Examples:
        >>> parse_progress_line(b"Counting objects: 100% (3/3), done.")
        TransferProgress(received_objects=3, total_objects=3, received_bytes=0)
    """
    match = _PROGRESS_LINE.match(line.strip())
    if match is None:
        return None

    received_bytes = 0
    if match["size"] is not None:
        received_bytes = int(float(match["size"]) * _UNITS[match["unit"]])

    return TransferProgress(
        received_objects=int(match["done"]),
        total_objects=int(match["total"]),
        received_bytes=received_bytes,
    )


@final
class ProgressStream:
    """Binary stream handed to dulwich that forwards parsed progress.

    Text without counts is dropped.
    """

    __slots__ = ("_buffer", "_callback")

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self._buffer = b""

    def write(self, data: bytes) -> int:
        if self._callback is None:
            return len(data)

        *lines, self._buffer = _LINE_BREAK.split(self._buffer + data)
        for line in lines:
            progress = parse_progress_line(line)
            if progress is not None:
                self._callback(progress)
        return len(data)

    def flush(self) -> None:
        if self._buffer and self._callback is not None:
            progress = parse_progress_line(self._buffer)
            if progress is not None:
                self._callback(progress)
        self._buffer = b""


@final
class ConsoleProgressReporter:
    """Print transfer progress in ten percent steps.

    Output looks like ``Receiving objects:  40% (4/10),    1 kb`` and ends
    with a single ``done`` line per transfer.
    """

    __slots__ = ("_console", "_done", "_next_percent")

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the reporter.

        Args:
            console: Rich Console instance for output. If None, writes to stderr.
        """
        self._console = console or Console(stderr=True, highlight=False)
        self._next_percent = 0
        self._done = False

    def start(self, local_path: str) -> None:
        self._console.print(f"cloning into '{local_path}'...", markup=False, soft_wrap=True)

    def __call__(self, progress: TransferProgress) -> None:
        kbytes = progress.received_bytes // 1024
        if progress.received_objects < progress.total_objects:
            self._done = False
            percent = progress.percent
            if percent >= self._next_percent:
                self._console.print(
                    f"Receiving objects: {percent:3d}% "
                    f"({progress.received_objects}/{progress.total_objects}), {kbytes:4d} kb",
                    end="\r",
                    markup=False,
                    soft_wrap=True,
                )
                self._next_percent = (percent // _REPORT_STEP + 1) * _REPORT_STEP
        elif not self._done:
            self._console.print(
                f"Receiving objects: 100% "
                f"({progress.received_objects}/{progress.total_objects}), {kbytes:4d} kb, done.",
                markup=False,
                soft_wrap=True,
            )
            self._done = True
            self._next_percent = 0
