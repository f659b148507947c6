"""
Asynchronous backend calls with a single serial delivery context.

Backends are blocking callables. ``TaskRunner.submit`` runs one on the Qt
thread pool and returns a ``BackendCall`` handle. Whatever happens on the
worker (value, exception, or cancellation) the done-callback fires exactly
once, and always on the thread that owns the ``SerialExecutor`` (the Qt main
thread), so session state is only ever touched from one context.
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Qt, Signal, Slot

from ...utils.logger import get_logger
from .errors import BackendError, FailureReason

logger = get_logger(__name__)


class SerialExecutor(QObject):
    """Runs posted callables one at a time on the thread this object lives in."""

    _posted = Signal(object)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._posted.connect(self._run, Qt.ConnectionType.QueuedConnection)

    def post(self, fn: Callable[[], None]) -> None:
        """Queue ``fn``; safe to call from any thread."""
        self._posted.emit(fn)

    @Slot(object)
    def _run(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception:
            logger.exception("Unhandled error in serial callback")


@dataclass(frozen=True)
class CallOutcome:
    value: Optional[str] = None
    error: Optional[BackendError] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.cancelled and self.error is None


DoneCallback = Callable[["BackendCall", CallOutcome], None]


class BackendCall:
    """
    Handle for one in-flight backend request.

    ``cancel()`` is a point-in-time request: the ``cancelled`` outcome is
    posted immediately, while the worker may still be blocked inside the
    backend. Whatever the worker produces afterwards is dropped. Once a
    result has been posted, cancel is a no-op.
    """

    def __init__(self, label: str, executor: SerialExecutor, on_done: DoneCallback):
        self.label = label
        self._executor = executor
        self._on_done = on_done
        self._lock = threading.Lock()
        self._cancelled = False
        self._completed = False
        self._runnable: Optional[QRunnable] = None

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def cancel(self) -> bool:
        with self._lock:
            if self._completed:
                return False
            self._completed = True
            self._cancelled = True
        logger.info(f"Cancelled {self.label}")
        self._post(CallOutcome(cancelled=True))
        return True

    def _complete(
        self, value: Optional[str] = None, error: Optional[BackendError] = None
    ) -> None:
        with self._lock:
            if self._completed:
                logger.debug(f"Dropping result of {self.label}, already delivered")
                return
            self._completed = True
        self._post(CallOutcome(value=value, error=error))

    def _post(self, outcome: CallOutcome) -> None:
        try:
            self._executor.post(lambda: self._on_done(self, outcome))
        except RuntimeError as e:
            # The executor is gone once the app has quit.
            logger.debug(f"Could not deliver outcome of {self.label}: {e}")

    def __repr__(self) -> str:
        return f"BackendCall({self.label!r})"


class _CallRunnable(QRunnable):
    def __init__(
        self,
        call: BackendCall,
        fn: Callable[..., str],
        args: tuple,
        error_type: Type[BackendError],
    ):
        super().__init__()
        self._call = call
        self._fn = fn
        self._args = args
        self._error_type = error_type

    def run(self) -> None:
        if self._call.cancelled:
            return

        try:
            value = self._fn(*self._args)
        except BackendError as e:
            logger.warning(f"{self._call.label} failed: {e.reason.value}: {e.detail}")
            self._call._complete(error=e)
        except Exception as e:
            logger.exception(f"{self._call.label} raised an unexpected error: {e}")
            self._call._complete(
                error=self._error_type(FailureReason.API_REJECTED, str(e))
            )
        else:
            self._call._complete(value=value)


class TaskRunner:
    """Submits backend calls to a worker pool and tracks the active ones."""

    def __init__(
        self,
        executor: Optional[SerialExecutor] = None,
        pool: Optional[QThreadPool] = None,
    ):
        self.executor = executor or SerialExecutor()
        self._pool = pool or QThreadPool.globalInstance()
        self._active: set[BackendCall] = set()

    @property
    def active_count(self) -> int:
        return len(self._active)

    def submit(
        self,
        label: str,
        fn: Callable[..., Any],
        *args: Any,
        on_done: DoneCallback,
        error_type: Type[BackendError] = BackendError,
    ) -> BackendCall:
        def deliver(call: BackendCall, outcome: CallOutcome) -> None:
            self._active.discard(call)
            on_done(call, outcome)

        call = BackendCall(label, self.executor, deliver)
        runnable = _CallRunnable(call, fn, args, error_type)
        call._runnable = runnable
        self._active.add(call)

        logger.debug(f"Submitting {label}")
        self._pool.start(runnable)
        return call

    def cancel_all(self) -> int:
        cancelled = sum(1 for call in list(self._active) if call.cancel())
        if cancelled:
            logger.info(f"Cancelled {cancelled} in-flight backend call(s)")
        return cancelled

    def wait_for_done(self, timeout_ms: int = -1) -> bool:
        return self._pool.waitForDone(timeout_ms)
