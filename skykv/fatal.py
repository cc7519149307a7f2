"""Helpers that log a failure and end the process with exit code 1."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

_log = logging.getLogger(__name__)

T = TypeVar("T")


def exit_error(value: T | BaseException | None, msg: Any) -> T:
    """Return ``value``; if it is ``None`` or an exception, log ``msg`` and exit with 1."""
    if value is None:
        _log.error("%s", msg)
        sys.exit(1)
    if isinstance(value, BaseException):
        _log.error("%s : '%s'", msg, value)
        sys.exit(1)
    return value


@contextmanager
def exit_on_error(msg: Any) -> Iterator[None]:
    """Log ``msg`` with any exception raised in the block and exit with 1.

    Usable both as a context manager and as a decorator.
    """
    try:
        yield
    except Exception as exc:
        _log.error("%s : '%s'", msg, exc)
        sys.exit(1)