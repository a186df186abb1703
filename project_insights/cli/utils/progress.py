"""Stage-by-stage progress output for long CLI commands."""

import time
from typing import Callable, List, Optional

import click


class ProgressTracker:
    """Announce each stage of a command and how long it took.

    ``start()`` prints the "[n/total] Stage" header of the current stage and
    ``advance()`` closes it, optionally with a result line carrying the
    stage's elapsed seconds.

    Attributes:
        stages: List of stage names
        total_stages: Total number of stages
        current_stage: Current stage index (0-based)

    Example:
        >>> tracker = ProgressTracker(["Loading records", "Calculating"])
        >>> tracker.get_current_message()
        '[1/2] Loading records'
    """

    def __init__(
        self,
        stages: List[str],
        echo: Callable[[str], None] = click.echo,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stages = stages
        self.total_stages = len(stages)
        self.current_stage = 0
        self._echo = echo
        self._clock = clock
        self._started_at: Optional[float] = None

    def start(self) -> None:
        """Print the header of the current stage and start its timer."""
        self._started_at = self._clock()
        self._echo(self.get_current_message())

    def advance(self, message: Optional[str] = None) -> None:
        """Finish the current stage, printing ``message`` with the elapsed time."""
        if message:
            if self._started_at is not None:
                elapsed = self._clock() - self._started_at
                message = f"{message} ({elapsed:.1f}s)"
            self._echo(f"  {message}")
        self._started_at = None
        self.current_stage += 1

    def get_current_message(self) -> str:
        if self.current_stage < self.total_stages:
            stage_name = self.stages[self.current_stage]
            return f"[{self.current_stage + 1}/{self.total_stages}] {stage_name}"
        return f"[{self.total_stages}/{self.total_stages}] Complete"

    def is_complete(self) -> bool:
        return self.current_stage >= self.total_stages
