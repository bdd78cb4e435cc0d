"""Shared machinery for the threaded frame pipelines: ordered output and workers."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass

from mtcompress.errors import ErrorCode, MTError


@dataclass
class Counters:
    """Byte and frame statistics of one compression or decompression run."""

    insize: int = 0
    outsize: int = 0
    frames: int = 0


class OrderedWriter:
    """Hands frames to ``sink`` strictly in frame-number order.

    Workers finish frames in any order; a frame that arrives early is held
    back until every frame before it has been written.
    """

    def __init__(self, sink: Callable[[bytes], object]) -> None:
        self._sink = sink
        self._lock = threading.Lock()
        self._held: dict[int, bytes] = {}
        self.written = 0
        self.outsize = 0

    def submit(self, frame: int, data: bytes) -> None:
        """Queue ``data`` as frame number ``frame`` and flush what is ready."""
        with self._lock:
            self._held[frame] = data
            while self.written in self._held:
                chunk = self._held.pop(self.written)
                try:
                    self._sink(chunk)
                except OSError as exc:
                    raise MTError(ErrorCode.WRITE_FAIL, detail=str(exc) or None) from exc
                self.outsize += len(chunk)
                self.written += 1

    def pending(self) -> int:
        """Number of frames waiting for an earlier frame to be written."""
        with self._lock:
            return len(self._held)


def run_workers(worker: Callable[[], None], threads: int) -> None:
    """Run ``worker`` on ``threads`` threads and wait for all of them.

    With one thread the worker runs in the calling thread. If any worker
    raises, the error of the last failing thread (in start order) is raised
    once all threads have finished.
    """
    if threads < 1:
        raise ValueError("threads must be at least 1")
    if threads == 1:
        worker()
        return

    errors: list[BaseException | None] = [None] * threads

    def _guarded(slot: int) -> None:
        try:
            worker()
        except BaseException as exc:  # collected and re-raised by the caller
            errors[slot] = exc

    pool = [threading.Thread(target=_guarded, args=(slot,)) for slot in range(threads)]
    for thread in pool:
        thread.start()
    for thread in pool:
        thread.join()

    failure = None
    for exc in errors:
        if exc is not None:
            failure = exc
    if failure is not None:
        raise failure