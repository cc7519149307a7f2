"""A thread pool whose workers keep per-worker state across jobs, plus random-string helpers."""

from __future__ import annotations

import os
import queue
import random
import string
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

_STOP = object()

_ALPHANUMERIC = string.ascii_uppercase + string.ascii_lowercase + string.digits
_ALPHABETIC = string.ascii_uppercase + string.ascii_lowercase


class Workpool:
    """A pool of worker threads.

    Each worker calls ``init_pre_loop_var()`` once to build its state, then
    ``on_loop(state, job)`` for every job it takes, and ``on_exit(state)`` when
    the pool is finished. A worker whose callbacks raise stops taking jobs; the
    failure is reported when the pool is finished.
    """

    def __init__(
        self,
        count: int,
        init_pre_loop_var: Callable[[], Any],
        on_loop: Callable[[Any, Any], Any],
        on_exit: Callable[[Any], Any],
    ) -> None:
        if count <= 0:
            raise ValueError(f"bad value `{count}` for thread count")
        self.count = count
        self._init_pre_loop_var = init_pre_loop_var
        self._on_loop = on_loop
        self._on_exit = on_exit
        self._jobs: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._errors: list[BaseException] = []
        self._errors_lock = threading.Lock()
        self._finish_lock = threading.Lock()
        self._finished = False
        self._threads = [
            threading.Thread(target=self._work, daemon=True) for _ in range(count)
        ]
        for thread in self._threads:
            thread.start()

    @classmethod
    def new_default_threads(
        cls,
        init_pre_loop_var: Callable[[], Any],
        on_loop: Callable[[Any, Any], Any],
        on_exit: Callable[[Any], Any],
    ) -> Workpool:
        """Create a pool with twice as many workers as there are logical CPUs."""
        return cls((os.cpu_count() or 1) * 2, init_pre_loop_var, on_loop, on_exit)

    def _work(self) -> None:
        try:
            state = self._init_pre_loop_var()
            while True:
                job = self._jobs.get()
                if job is _STOP:
                    self._on_exit(state)
                    return
                self._on_loop(state, job)
        except BaseException as exc:  # noqa: BLE001 - reported by finish()
            with self._errors_lock:
                self._errors.append(exc)

    def execute(self, inp: Any) -> None:
        """Queue one job for the next free worker."""
        if self._finished:
            raise RuntimeError("the workpool has already been finished")
        self._jobs.put(inp)

    def execute_iter(self, items: Iterable[Any]) -> None:
        """Queue every item of ``items`` as a job."""
        for item in items:
            self.execute(item)

    def execute_and_finish_iter(self, items: Iterable[Any]) -> None:
        """Queue every item and then wait for all the workers to finish."""
        self.execute_iter(items)
        self.finish()

    def finish(self) -> None:
        """Let the workers drain the queue, run their exit hooks and stop.

        Raises RuntimeError if any worker terminated with an exception.
        Calling it again does nothing.
        """
        with self._finish_lock:
            if self._finished:
                return
            self._finished = True
            for _ in self._threads:
                self._jobs.put(_STOP)
            for thread in self._threads:
                thread.join()
        if self._errors:
            raise RuntimeError(
                f"{len(self._errors)} worker(s) terminated abnormally"
            ) from self._errors[0]

    def clone(self) -> Workpool:
        """Create a fresh pool with the same worker count and callbacks."""
        return Workpool(
            self.count, self._init_pre_loop_var, self._on_loop, self._on_exit
        )

    def __enter__(self) -> Workpool:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.finish()


@dataclass(frozen=True)
class PoolConfig:
    """A reusable recipe for building workpools."""

    count: int
    init_pre_loop_var: Callable[[], Any]
    on_loop: Callable[[Any, Any], Any]
    on_exit: Callable[[Any], Any]

    def get_pool(self) -> Workpool:
        """Build a workpool from this configuration."""
        return self.get_pool_with_workers(self.count)

    def get_pool_with_workers(self, count: int) -> Workpool:
        """Build a workpool from this configuration with a different worker count."""
        return Workpool(count, self.init_pre_loop_var, self.on_loop, self.on_exit)

    def with_loop_closure(self, on_loop: Callable[[Any, Any], Any]) -> Workpool:
        """Build a workpool from this configuration with a different loop callback."""
        return Workpool(self.count, self.init_pre_loop_var, on_loop, self.on_exit)


def _rng(rng: random.Random | None) -> random.Random:
    return random.Random() if rng is None else rng


def ran_string(length: int, rng: random.Random | None = None) -> str:
    """Return a random string of ``length`` ASCII letters and digits."""
    return "".join(_rng(rng).choices(_ALPHANUMERIC, k=length))


def generate_random_string_vector(
    count: int,
    size: int,
    rng: random.Random | None = None,
    unique: bool = False,
) -> list[str]:
    """Return ``count`` random alphanumeric strings of length ``size``.

    With ``unique`` set, no string appears twice.
    """
    rng = _rng(rng)
    if not unique:
        return [ran_string(size, rng) for _ in range(count)]
    keys: set[str] = set()
    while len(keys) < count:
        keys.add(ran_string(size, rng))
    return list(keys)


def rand_alphastring(length: int, rng: random.Random | None = None) -> str:
    """Return a random string of ``length`` ASCII letters."""
    return "".join(_rng(rng).choices(_ALPHABETIC, k=length))