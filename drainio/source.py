"""The interface to things we can drain bytes out of

A `Source` is asked, over and over, to read into a region of storage we hand it. Each
attempt produces a `Poll`, which is one of:

- `outcome.Value(n)`: `n` bytes were written at the start of the region; `n == 0` means
  end of stream.
- `PENDING`: nothing can be read right now. The source has arranged for the waker it
  was passed to be woken when that changes.
- `outcome.Error(exn)`: the read failed.

The region handed to a source may contain garbage left over from earlier use of the
storage. Most sources only ever write into it, but we can't know that in general, so
by default we zero the region before handing it over. A source which promises never
to read the region before writing it says so by overriding `Source.requires_preinit`
to return False, and we skip the zeroing.

"""
from __future__ import annotations
import abc
import enum
import outcome
import typing as t
from drainio.buffer import GrowableBuffer
if t.TYPE_CHECKING:
    from drainio.read_to_end import ReadToEnd
    from drainio.waker import Waker

__all__ = [
    "Source",
    "Initializer",
    "Pending",
    "PENDING",
    "Poll",
]

class Pending(enum.Enum):
    PENDING = "pending"

    def __repr__(self) -> str:
        return "PENDING"

PENDING = Pending.PENDING
"Returned when an attempt can't make progress until its waker is woken"

Poll = t.Union[outcome.Value, outcome.Error, Pending]

class Initializer:
    """Prepares storage before a source is allowed to see it.

    Make one with `Initializer.zeroing` or `Initializer.skip`.

    """
    def __init__(self, zero: bool) -> None:
        "Don't construct directly; use one of the constructor methods, zeroing or skip."
        self.zero = zero

    @staticmethod
    def zeroing() -> Initializer:
        "Zero the storage; safe for any source."
        return Initializer(True)

    @staticmethod
    def skip() -> Initializer:
        "Leave the storage as it is; only for sources which never read before writing."
        return Initializer(False)

    def should_initialize(self) -> bool:
        return self.zero

    def initialize(self, view: memoryview) -> None:
        if self.zero:
            view[:] = bytes(len(view))

    def __str__(self) -> str:
        return "Initializer.zeroing()" if self.zero else "Initializer.skip()"

class Source:
    "A stream of bytes which can be read without blocking."
    @abc.abstractmethod
    def attempt_read(self, waker: Waker, dest: memoryview) -> Poll:
        """Try to read some bytes into the start of `dest`.

        If this returns `PENDING`, the implementation must make sure `waker.wake()` is
        called once it's worth trying again. It's fine to call it immediately.

        An exception raised from here, rather than returned as `outcome.Error`, propagates
        out of whatever is driving the read; the bytes read so far are kept.

        """
        pass

    def requires_preinit(self) -> bool:
        "Whether `dest` must be zeroed before being passed to `attempt_read`."
        return True

    def initializer(self) -> Initializer:
        if self.requires_preinit():
            return Initializer.zeroing()
        else:
            return Initializer.skip()

    def read_to_end(self, buf: GrowableBuffer) -> ReadToEnd:
        "Make an operation which appends everything left in this source to `buf`."
        from drainio.read_to_end import ReadToEnd
        return ReadToEnd(self, buf)
