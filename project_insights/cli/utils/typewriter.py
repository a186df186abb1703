"""Progressive text reveal for streaming AI answers to the terminal."""

import time
from typing import Callable, Iterator, Optional

import click


class Typewriter:
    """Lazy, restartable, cancelable sequence of growing text prefixes.

    Iterating yields ``text[:n]`` for n = chunk_size, 2 * chunk_size, ...
    up to the full text, sleeping ``delay`` seconds between steps. Every
    iteration starts again from the beginning. ``cancel()`` stops a running
    iteration after its current step, and ``restart(text)`` swaps in a new
    answer, which also ends any iteration still revealing the old one.

    Args:
        text: Text to reveal
        chunk_size: Characters added per step
        delay: Seconds to wait between steps
        sleep: Sleep function, injectable for tests

    Example:
        >>> list(Typewriter("abc", sleep=lambda s: None))
        ['a', 'ab', 'abc']
    """

    def __init__(
        self,
        text: str,
        chunk_size: int = 1,
        delay: float = 0.005,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.text = text
        self.chunk_size = chunk_size
        self.delay = delay
        self._sleep = sleep
        self._generation = 0
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def restart(self, text: Optional[str] = None) -> None:
        """Clear cancellation, optionally replacing the text."""
        if text is not None:
            self.text = text
        self._generation += 1
        self._cancelled = False

    def __iter__(self) -> Iterator[str]:
        generation = self._generation
        text = self.text
        position = 0
        while position < len(text):
            if self._cancelled or generation != self._generation:
                return
            position = min(position + self.chunk_size, len(text))
            yield text[:position]
            if position < len(text) and self.delay > 0:
                self._sleep(self.delay)


def stream_text(typewriter: Typewriter, echo: Callable[..., None] = click.echo) -> str:
    """Echo only the newly revealed characters of each prefix.

    Returns:
        The text revealed before the sequence ended
    """
    shown = ""
    for prefix in typewriter:
        echo(prefix[len(shown):], nl=False)
        shown = prefix
    echo("")
    return shown
