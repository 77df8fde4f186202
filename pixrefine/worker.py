"""Run transforms off the caller's thread, superseding stale requests.

Only the most recent request matters: submitting a new one cancels the
token of the run in flight, which then stops at its next stage boundary and
reports nothing.
"""
from __future__ import annotations

import threading
from typing import Callable, Optional

from .errors import Cancelled, ProcessingError
from .log import get_logger
from .pipeline import CancelToken, ProcessOptions, ProcessResult, transform

logger = get_logger(__name__)


class TransformWorker:
    """Background runner with one active transform at a time.

    Parameters
    ----------
    on_result : callable
        Called with the ``ProcessResult`` of a run that was not superseded.
    on_error : callable | None
        Called with the ``ProcessingError`` of a failed run that was not
        superseded.

    Callbacks run on the worker thread; UI callers should marshal them back
    to their own loop.
    """

    def __init__(
        self,
        on_result: Callable[[ProcessResult], None],
        on_error: Optional[Callable[[ProcessingError], None]] = None,
    ) -> None:
        self.on_result = on_result
        self.on_error = on_error
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._token: Optional[CancelToken] = None

    def submit(
        self,
        data: bytes,
        options: ProcessOptions,
        mime_type: Optional[str] = None,
    ) -> CancelToken:
        """Start a transform, cancelling any run still in flight."""
        token = CancelToken()
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._token = token
            self._thread = threading.Thread(
                target=self._run,
                args=(data, options, mime_type, token),
                daemon=True,
            )
            self._thread.start()
        return token

    def cancel(self) -> None:
        """Cancel the run in flight, if any."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the latest run; return True once it has finished."""
        with self._lock:
            thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def _run(
        self,
        data: bytes,
        options: ProcessOptions,
        mime_type: Optional[str],
        token: CancelToken,
    ) -> None:
        try:
            result = transform(data, options, cancel=token, mime_type=mime_type)
        except Cancelled:
            return
        except ProcessingError as exc:
            if token.cancelled:
                return
            if self.on_error is not None:
                self.on_error(exc)
            else:
                logger.error("background_transform_failed", error=exc.message)
            return
        if token.cancelled:
            logger.debug("background_result_discarded")
            return
        self.on_result(result)
