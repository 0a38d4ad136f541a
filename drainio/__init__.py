"""Drain non-blocking byte streams into growable buffers

drainio provides one operation, `ReadToEnd`, which appends everything a `Source`
produces to a `GrowableBuffer`. It is driven by calling `ReadToEnd.resume` repeatedly,
as a cooperative scheduler would; each call runs until the source is exhausted, fails,
or would block.

## Sources

A `Source` is anything with an `attempt_read(waker, dest)` method, which writes into
the start of the writable `memoryview` `dest` and returns `outcome.Value(count)`,
`outcome.Error(exn)`, or `PENDING`. A count of 0 means end of stream. On `PENDING`, the
source takes responsibility for waking the `Waker` it was passed.

The region passed to a source may hold garbage, so we zero it first, unless the source
declares with `Source.requires_preinit` that it only ever writes to it.

`drainio.sources` has some concrete sources: in-memory ones, and `FdSource`, for
non-blocking file descriptors.

## Buffers

`GrowableBuffer` separates the valid length of a buffer from the capacity of its
storage. `ReadToEnd` hands the spare capacity to the source, and uses a `LengthGuard`
so that, whenever it returns or raises, the buffer's length covers exactly the bytes the
source wrote, and never any storage the source didn't write.

All progress is kept in the buffer. Abandoning a `ReadToEnd` part way through leaves
the bytes read so far in the buffer.

## Driving

`drainio.trio_driver.drive` runs a `ReadToEnd` to completion from a trio task, sleeping
until woken whenever the source is pending. To drive one by hand, pass a
`RecordingWaker` to `resume` and call again once it has been woken.

"""
from drainio.buffer import GrowableBuffer, UNINIT_POISON
from drainio.guard import LengthGuard
from drainio.source import Source, Initializer, Poll, Pending, PENDING
from drainio.waker import Waker, RecordingWaker, TrioWaker
from drainio.read_to_end import ReadToEnd, ResumedAfterCompletion, read_to_end_internal, INITIAL_RESERVE
from drainio.trio_driver import drive, read_to_end

__all__ = [
    "GrowableBuffer",
    "UNINIT_POISON",
    "LengthGuard",
    "Source",
    "Initializer",
    "Poll",
    "Pending",
    "PENDING",
    "Waker",
    "RecordingWaker",
    "TrioWaker",
    "ReadToEnd",
    "ResumedAfterCompletion",
    "read_to_end_internal",
    "INITIAL_RESERVE",
    "drive",
    "read_to_end",
]
