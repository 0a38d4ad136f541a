"""Some concrete sources

`BytesSource` and `ChunkSource` produce bytes from memory; the latter follows a script,
which makes it handy for replaying a particular sequence of reads, waits and failures.

`FdSource` reads from a non-blocking file descriptor, such as a pipe. When the file
descriptor has nothing for us, it hands the waker to a `Readiness`, which is
responsible for waking it once the file descriptor is readable. `TrioReadiness` does
that with trio's own IO machinery.

"""
from __future__ import annotations
from dataclasses import dataclass
from drainio.source import Source, Poll, PENDING, Pending
from drainio.waker import Waker
import abc
import collections
import os
import outcome
import trio
import typing as t

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "BytesSource",
    "ChunkSource",
    "Raise",
    "FdSource",
    "Readiness",
    "TrioReadiness",
]

class BytesSource(Source):
    """Reads out the contents of an in-memory bytes object.

    Never blocks. If `max_read` is set, at most that many bytes are produced by each
    read, to imitate a source which dribbles data out.

    """
    def __init__(self, data: bytes, max_read: t.Optional[int]=None) -> None:
        if max_read is not None and max_read <= 0:
            raise ValueError("max_read must be positive, not", max_read)
        self.data = bytes(data)
        self.max_read = max_read
        self.offset = 0

    def requires_preinit(self) -> bool:
        # we only ever write into dest
        return False

    def attempt_read(self, waker: Waker, dest: memoryview) -> Poll:
        count = min(len(dest), len(self.data) - self.offset)
        if self.max_read is not None:
            count = min(count, self.max_read)
        dest[:count] = self.data[self.offset:self.offset+count]
        self.offset += count
        return outcome.Value(count)

    def __str__(self) -> str:
        return f"BytesSource({self.offset}/{len(self.data)})"

@dataclass
class Raise:
    "A ChunkSource script entry: raise this exception out of attempt_read, rather than returning it."
    exn: BaseException

ScriptEntry = t.Union[bytes, Pending, BaseException, Raise]

class ChunkSource(Source):
    """Follows a script of reads, waits and failures.

    Each script entry is consumed by one or more calls to `attempt_read`:

    - bytes are copied out, over as many reads as it takes to fit them into the regions
      we're given; an empty bytes entry is an explicit end of stream.
    - `PENDING` is returned as-is. We wake the waker immediately, unless
      `wake_on_pending` is False, in which case the waker is parked until `release`.
    - an exception is returned as `outcome.Error`.
    - `Raise(exn)` raises `exn`.

    Once the script runs out, every read reports end of stream.

    We record what we saw for the benefit of tests: `calls` counts reads, and
    `saw_zeroed` has one entry per read, True if the region we were handed was all
    zeroes. Unless `trusted` is set, we claim to need our regions zeroed.

    """
    def __init__(self, script: t.Iterable[ScriptEntry],
                 trusted: bool=False, wake_on_pending: bool=True) -> None:
        self.script: t.Deque[ScriptEntry] = collections.deque(script)
        self.trusted = trusted
        self.wake_on_pending = wake_on_pending
        self.parked: t.List[Waker] = []
        self.calls = 0
        self.saw_zeroed: t.List[bool] = []

    def requires_preinit(self) -> bool:
        return not self.trusted

    def release(self) -> None:
        "Wake everyone parked on a `PENDING` entry."
        parked, self.parked = self.parked, []
        for waker in parked:
            waker.wake()

    def attempt_read(self, waker: Waker, dest: memoryview) -> Poll:
        self.calls += 1
        self.saw_zeroed.append(not any(dest))
        if not self.script:
            return outcome.Value(0)
        entry = self.script.popleft()
        if entry is PENDING:
            if self.wake_on_pending:
                waker.wake()
            else:
                self.parked.append(waker)
            return PENDING
        elif isinstance(entry, Raise):
            raise entry.exn
        elif isinstance(entry, BaseException):
            return outcome.Error(entry)
        else:
            count = min(len(entry), len(dest))
            dest[:count] = entry[:count]
            if count < len(entry):
                self.script.appendleft(entry[count:])
            return outcome.Value(count)

    def __str__(self) -> str:
        return f"ChunkSource({len(self.script)} entries left)"

class Readiness:
    "Something that can wake a waker when a file descriptor becomes readable."
    @abc.abstractmethod
    def notify_readable(self, fd: int, waker: Waker) -> None: ...

class TrioReadiness(Readiness):
    """Waits for readability with `trio.lowlevel.wait_readable`, in tasks in a nursery.

    trio only allows one task at a time to wait for a given file descriptor, so we keep
    at most one waiting task per file descriptor; registering again while it's waiting
    just replaces the waker it will wake.

    """
    def __init__(self, nursery: trio.Nursery) -> None:
        self.nursery = nursery
        self._wakers: t.Dict[int, Waker] = {}

    def notify_readable(self, fd: int, waker: Waker) -> None:
        already_waiting = fd in self._wakers
        self._wakers[fd] = waker
        if not already_waiting:
            self.nursery.start_soon(self._wait_readable, fd)

    async def _wait_readable(self, fd: int) -> None:
        try:
            await trio.lowlevel.wait_readable(fd)
        finally:
            waker = self._wakers.pop(fd)
        logger.debug("TrioReadiness: fd %d is readable, waking %s", fd, waker)
        waker.wake()

class FdSource(Source):
    """Reads from a file descriptor, which must be in non-blocking mode.

    Reads go straight into the region we're handed, with `os.readv`. The kernel only
    writes to that region, so it needn't be zeroed first.

    """
    def __init__(self, fd: int, readiness: Readiness) -> None:
        self.fd = fd
        self.readiness = readiness

    def requires_preinit(self) -> bool:
        return False

    def attempt_read(self, waker: Waker, dest: memoryview) -> Poll:
        try:
            count = os.readv(self.fd, [dest])
        except BlockingIOError:
            self.readiness.notify_readable(self.fd, waker)
            return PENDING
        except OSError as e:
            return outcome.Error(e)
        return outcome.Value(count)

    def __str__(self) -> str:
        return f"FdSource({self.fd})"
