"""
Errors and the diagnostics hook.

A BadTrailerError means a buffer's trailing bytes resolve to no terminator
under either form: the buffer was corrupted or never went through init(),
normalize() or a mutating operation. The invariant cannot be rebuilt from the
content alone, so strict decoding always raises after reporting.

The reporter only decides where the diagnostic goes. Embedding applications
can route it elsewhere with set_reporter(); the raise still happens.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class BDStringError(Exception):
    """Base class for bdstring errors."""


class BadTrailerError(BDStringError):
    """Trailing byte(s) do not resolve to a valid terminator position.

    Attributes:
        code: 1 if the short-form distance points before the buffer start,
              2 if neither form resolves.
        capacity: Capacity of the offending buffer.
        trailer: Value of the last byte.
    """

    def __init__(self, code: int, capacity: int, trailer: int) -> None:
        self.code = code
        self.capacity = capacity
        self.trailer = trailer
        super().__init__(
            f"encoding error {code} (capacity={capacity}, trailer={trailer})"
        )


Reporter = Callable[[BadTrailerError], None]


def _log_reporter(error: BadTrailerError) -> None:
    logger.error("encoding error %d: capacity=%d trailer=%d",
                 error.code, error.capacity, error.trailer)


_reporter: Reporter = _log_reporter


def set_reporter(reporter: Reporter | None) -> Reporter:
    """Install a diagnostics reporter. Returns the previous one.

    Passing None restores the default, which logs at ERROR.
    """
    global _reporter
    previous = _reporter
    _reporter = reporter if reporter is not None else _log_reporter
    return previous


def report_bad_trailer(code: int, capacity: int, trailer: int) -> BadTrailerError:
    """Build the error and hand it to the active reporter.

    The caller raises the returned error.
    """
    error = BadTrailerError(code, capacity, trailer)
    _reporter(error)
    return error
