"""
Cooperative execution deadlines.

The registry installs a deadline for the duration of a tool call; long-running
work calls ``check_deadline()`` at safe points (the scanner does so per file).
Nothing is interrupted preemptively: a tool that never reaches a checkpoint
runs to completion.
"""

import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from upgrade_lens.domain.exceptions.domain_exceptions import ToolTimeoutError


@dataclass
class Deadline:
    """A soft time allowance measured on a monotonic clock."""

    seconds: float
    clock: Callable[[], float] = time.monotonic
    started_at: float = field(default=0.0)

    def __post_init__(self) -> None:
        if not self.started_at:
            self.started_at = self.clock()

    @property
    def elapsed(self) -> float:
        return self.clock() - self.started_at

    @property
    def remaining(self) -> float:
        return max(0.0, self.seconds - self.elapsed)

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.seconds

    def check(self) -> None:
        if self.expired:
            raise ToolTimeoutError(
                f"Execution exceeded the {self.seconds:g}s time limit"
            )


_current_deadline: ContextVar[Optional[Deadline]] = ContextVar(
    "upgrade_lens_deadline", default=None
)


def current_deadline() -> Optional[Deadline]:
    return _current_deadline.get()


def check_deadline() -> None:
    """Raise ToolTimeoutError if the active deadline has passed."""
    deadline = _current_deadline.get()
    if deadline is not None:
        deadline.check()


@contextmanager
def execution_deadline(
    seconds: float, clock: Callable[[], float] = time.monotonic
) -> Iterator[Optional[Deadline]]:
    """Install a deadline for the enclosed block; 0 or less disables it.

    The previously active deadline is restored on exit, including when the
    block raises.
    """
    deadline = Deadline(seconds=seconds, clock=clock) if seconds > 0 else None
    token = _current_deadline.set(deadline)
    try:
        yield deadline
    finally:
        _current_deadline.reset(token)
