"""Deferred actions run once before the process exits."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from types import TracebackType
from typing import Any, Self

__all__ = ["CleanupScheduler"]


class CleanupScheduler:
    """Ordered list of deferred actions, drained exactly once.

    Use it as a context manager: actions still pending when the block exits
    (normally or through an exception) are run in scheduling order.
    """

    def __init__(self) -> None:
        self._actions: list[Callable[[], Any]] = []
        self._drained = False

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def drained(self) -> bool:
        """True once `run` was called."""
        return self._drained

    def schedule(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:  # noqa: ANN401
        """Schedule `fn(*args, **kwargs)` to run at exit."""
        self._actions.append(partial(fn, *args, **kwargs))

    def run(self) -> None:
        """Run the scheduled actions in order.

        Subsequent calls do nothing. Exceptions raised by an action propagate
        to the caller; the remaining actions are dropped.
        """
        if self._drained:
            return
        self._drained = True
        actions, self._actions = self._actions, []
        for action in actions:
            action()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.run()
