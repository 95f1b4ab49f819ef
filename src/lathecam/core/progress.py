"""Progress and cooperative cancellation collaborators."""

from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol


class ProgressReporter(Protocol):
    def set_progress(self, percent: int) -> None: ...

    def set_status(self, text: str) -> None: ...

    def is_cancelled(self) -> bool: ...


class NullProgress:
    """Reporter that ignores updates and is never cancelled."""

    def set_progress(self, percent: int) -> None:
        pass

    def set_status(self, text: str) -> None:
        pass

    def is_cancelled(self) -> bool:
        return False


class CancelToken:
    """Thread-safe reporter that records updates and can be cancelled.

    *on_update* (optional) is called with ``(percent, status)`` on every
    change, which is how a GUI or CLI would forward progress.
    """

    def __init__(self, on_update: Optional[Callable[[int, str], None]] = None):
        self._cancelled = threading.Event()
        self._on_update = on_update
        self.percent = 0
        self.status = ""

    def cancel(self) -> None:
        self._cancelled.set()

    def set_progress(self, percent: int) -> None:
        self.percent = max(0, min(100, int(percent)))
        if self._on_update is not None:
            self._on_update(self.percent, self.status)

    def set_status(self, text: str) -> None:
        self.status = text
        if self._on_update is not None:
            self._on_update(self.percent, self.status)

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()
