from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from relicta_sentry_core.errors import CancelledError

T = TypeVar("T")

POLL_INTERVAL = 0.05  # seconds


@dataclass
class CallContext:
    """Cancellation signal and optional deadline for one plugin invocation.

    ``deadline`` is a ``time.monotonic()`` timestamp. The host may call
    ``cancel()`` from another thread. Blocking calls made through ``run()``
    are abandoned as soon as the context is cancelled or the deadline passes,
    and callbacks registered with ``on_cancel()`` fire once on cancellation
    so owners can tear down the abandoned connection.
    """

    deadline: float | None = None
    cancelled: threading.Event = field(default_factory=threading.Event)
    _callbacks: list[Callable[[], None]] = field(default_factory=list, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def with_timeout(cls, seconds: float) -> CallContext:
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        with self._lock:
            if self.cancelled.is_set():
                return
            self.cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run on cancellation. Runs it now if already cancelled."""
        with self._lock:
            if not self.cancelled.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def raise_if_done(self) -> None:
        if self.cancelled.is_set():
            raise CancelledError("invocation cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise CancelledError("invocation deadline exceeded")

    def timeout_for(self, default: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return default
        return max(0.0, min(default, remaining))

    def run(self, fn: Callable[[], T]) -> T:
        """Call ``fn`` on a worker thread and wait for it while watching the context.

        Raises CancelledError as soon as the context is cancelled or expires,
        even if ``fn`` is still blocked. A result or error that arrives after
        cancellation is discarded in favour of CancelledError.
        """
        self.raise_if_done()
        future: Future = Future()

        def _target():
            try:
                future.set_result(fn())
            except Exception as exc:
                future.set_exception(exc)

        threading.Thread(target=_target, daemon=True).start()

        while True:
            try:
                result = future.result(timeout=POLL_INTERVAL)
            except FutureTimeoutError:
                self.raise_if_done()
                continue
            except Exception:
                self.raise_if_done()
                raise
            self.raise_if_done()
            return result
