"""CharSource: non-blocking reads on top of a blocking character source.

The underlying read has no cancellable or non-blocking variant, so a single
background thread performs it on request and parks the result until a
caller picks it up. At most one call into the underlying read is ever in
flight.

State machine (all transitions under one condition variable)::

    IDLE --read(False)--> READING --thread read returns--> READY --consume--> IDLE
    IDLE --read(True)---> READING (inline, on the caller) --> READY --> IDLE
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, TextIO, Union

from tabline.types import EOF, NOT_READY, CharSourceState, ReadSignal

logger = logging.getLogger(__name__)

ReadResult = Union[str, ReadSignal]
TransitionCallback = Callable[[CharSourceState, CharSourceState], None]


class CharSourceShutdownError(RuntimeError):
    """Raised when a :class:`CharSource` is used after :meth:`~CharSource.shutdown`."""


class CharSource:
    """Non-blocking wrapper around a blocking ``read_char`` callable.

    *read_char* takes no arguments and returns one character, or ``""`` at
    end of input. Exceptions it raises are delivered to the next consumer of
    :meth:`read` instead of escaping on the background thread.
    """

    def __init__(
        self,
        read_char: Callable[[], str],
        *,
        name: str = "tabline-char-source",
        on_transition: TransitionCallback | None = None,
    ) -> None:
        self._read_char = read_char
        self._cond = threading.Condition()
        self._state = CharSourceState.IDLE
        self._is_shutdown = False
        # True while a read(wait=True) caller performs the read itself.
        self._inline_read = False
        self._pending_char: ReadResult = EOF
        self._pending_error: BaseException | None = None
        self._on_transition = on_transition

        self._thread = threading.Thread(target=self._thread_main, name=name, daemon=True)
        self._thread.start()

    @classmethod
    def from_stream(cls, stream: TextIO, **kwargs) -> CharSource:
        """Create a source reading one character at a time from *stream*."""
        return cls(lambda: stream.read(1), **kwargs)

    # -- public API ---------------------------------------------------------

    @property
    def state(self) -> CharSourceState:
        with self._cond:
            return self._state

    @property
    def is_shutdown(self) -> bool:
        with self._cond:
            return self._is_shutdown

    def read(self, wait: bool) -> ReadResult:
        """Read the next character.

        Returns the character, ``EOF`` at end of input, or ``NOT_READY`` when
        *wait* is false and nothing has arrived yet. A failure of the
        underlying read is re-raised here.
        """
        if wait:
            return self._read_wait()
        return self._read_no_wait()

    def shutdown(self) -> None:
        """Stop the background thread. Idempotent.

        A thread currently blocked in the underlying read cannot be
        interrupted; it exits as soon as that read returns.
        """
        with self._cond:
            if self._is_shutdown:
                return
            self._is_shutdown = True
            self._cond.notify_all()
        logger.debug("%s: shutdown requested", self._thread.name)

    def close(self) -> None:
        self.shutdown()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the background thread to exit; return True if it did."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def __enter__(self) -> CharSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # -- foreground paths ---------------------------------------------------

    def _read_wait(self) -> ReadResult:
        with self._cond:
            while True:
                self._verify_not_shutdown()
                if self._state is CharSourceState.IDLE:
                    # Claim the read; the background thread must not start one.
                    self._inline_read = True
                    self._set_state(CharSourceState.READING)
                    break
                if self._state is CharSourceState.READY:
                    return self._consume()
                self._cond.wait()

        # Outside the lock so other threads can still poll with read(False).
        try:
            char, error = self._call_read()
        except BaseException:
            # Interrupted (e.g. KeyboardInterrupt): release the claim so the
            # next read starts from IDLE.
            with self._cond:
                self._inline_read = False
                self._publish(EOF, None)
                self._consume()
            raise

        with self._cond:
            self._inline_read = False
            self._publish(char, error)
            return self._consume()

    def _read_no_wait(self) -> ReadResult:
        with self._cond:
            self._verify_not_shutdown()
            if self._state is CharSourceState.IDLE:
                self._set_state(CharSourceState.READING)
                self._cond.notify_all()
                return NOT_READY
            if self._state is CharSourceState.READING:
                return NOT_READY
            return self._consume()

    # -- background thread --------------------------------------------------

    def _thread_main(self) -> None:
        logger.debug("%s: started", self._thread.name)
        while True:
            with self._cond:
                while not self._is_shutdown and not self._should_thread_read():
                    self._cond.wait()
                if self._is_shutdown:
                    break

            try:
                char, error = self._call_read()
            except BaseException as exc:
                char, error = EOF, exc

            with self._cond:
                self._publish(char, error)
        logger.debug("%s: exited", self._thread.name)

    def _should_thread_read(self) -> bool:
        return self._state is CharSourceState.READING and not self._inline_read

    # -- helpers (callers hold the lock unless noted) -----------------------

    def _call_read(self) -> tuple[ReadResult, BaseException | None]:
        """Perform the underlying read. Called without the lock."""
        try:
            char = self._read_char()
        except Exception as exc:
            logger.debug("%s: read failed: %r", self._thread.name, exc)
            return EOF, exc
        return (char if char else EOF), None

    def _publish(self, char: ReadResult, error: BaseException | None) -> None:
        assert self._state is CharSourceState.READING
        self._pending_char = char
        self._pending_error = error
        self._set_state(CharSourceState.READY)
        self._cond.notify_all()

    def _consume(self) -> ReadResult:
        assert self._state is CharSourceState.READY
        self._set_state(CharSourceState.IDLE)
        self._cond.notify_all()
        error, self._pending_error = self._pending_error, None
        if error is not None:
            raise error
        return self._pending_char

    def _set_state(self, state: CharSourceState) -> None:
        previous = self._state
        self._state = state
        if self._on_transition is not None:
            self._on_transition(previous, state)

    def _verify_not_shutdown(self) -> None:
        if self._is_shutdown:
            raise CharSourceShutdownError(
                f"{self._thread.name} has been shut down"
            )
