"""Drain a source into a buffer, one resumable step at a time

`ReadToEnd` is an operation which appends everything a `Source` produces to a
`GrowableBuffer`, until end of stream or an error. It doesn't run itself; something
calls `ReadToEnd.resume` repeatedly, and each call runs until the source says it's
done, failed, or would have to wait.

The operation keeps no record of where it got to. All progress is stored in the
buffer's length, and each call to `resume` starts the loop from scratch, picking up
from there. That's why there's nothing to save or restore across a `PENDING`.

To read into the buffer, we extend its length out over its spare capacity, hand that
region to the source, and then cut the length back down to what the source actually
wrote. That cut happens in a `LengthGuard`, so it happens no matter how we leave,
including when the source raises. The unwritten storage never shows up in the buffer.

We grow the buffer adaptively. We don't want to allocate and zero a huge region if
the source only has a few bytes to give us, but we do want to make large reads if it
has a lot. So we ask for a small amount of extra room whenever the buffer fills, and
rely on `GrowableBuffer.reserve` at least doubling the capacity each time it grows.
Tacking a fixed-size chunk onto the end each time instead would make us reallocate
O(S) times for S bytes.

"""
from __future__ import annotations
from drainio.buffer import GrowableBuffer
from drainio.guard import LengthGuard
from drainio.source import Source, Poll, PENDING
from drainio.waker import Waker
import enum
import outcome

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "ReadToEnd",
    "ResumedAfterCompletion",
    "read_to_end_internal",
    "INITIAL_RESERVE",
]

INITIAL_RESERVE = 32
"How much extra room we ask for each time the buffer fills up"

class ResumedAfterCompletion(RuntimeError):
    "Raised by `ReadToEnd.resume` if the operation has already finished."
    pass

def read_to_end_internal(source: Source, waker: Waker, buf: GrowableBuffer) -> Poll:
    """Read from `source` into `buf` until end of stream, an error, or `PENDING`.

    Returns `outcome.Value(None)` at end of stream, the source's `outcome.Error` if it
    fails, or `PENDING` if the source would block. In all cases, `buf.length` includes
    exactly the bytes the source has written so far.

    """
    with LengthGuard(buf) as g:
        while True:
            if g.valid == buf.length:
                buf.reserve(INITIAL_RESERVE)
                buf.set_length(buf.capacity)
                with buf.spare(g.valid) as spare:
                    source.initializer().initialize(spare)
            with buf.spare(g.valid) as spare:
                available = len(spare)
                ret = source.attempt_read(waker, spare)
            if ret is PENDING:
                logger.debug("read_to_end(%s): pending with %d bytes", source, g.valid)
                return PENDING
            elif isinstance(ret, outcome.Value):
                count = ret.value
                if not (0 <= count <= available):
                    raise ValueError("source", source, "claimed to read", count,
                                     "bytes into a region of size", available)
                if count == 0:
                    logger.debug("read_to_end(%s): end of stream with %d bytes", source, g.valid)
                    return outcome.Value(None)
                g.valid += count
            elif isinstance(ret, outcome.Error):
                logger.debug("read_to_end(%s): error %s with %d bytes", source, ret.error, g.valid)
                return ret
            else:
                raise TypeError("source", source, "returned something other than an outcome or PENDING", ret)

class State(enum.Enum):
    """Where a ReadToEnd is in its life.

    There's no state for being part way through; how far we've got is just the length
    of the buffer.

    """
    INCOMPLETE = "incomplete"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

class ReadToEnd:
    """An operation appending all of a source's remaining bytes to a buffer.

    Both the source and the buffer belong to this operation until it completes; nothing
    else should read or write them in the meantime. If the operation is abandoned
    part way through, the buffer holds exactly the bytes read so far.

    Drive it by calling `resume` until it returns something other than `PENDING`, or
    use `drainio.trio_driver.drive`.

    """
    def __init__(self, source: Source, buf: GrowableBuffer) -> None:
        self.source = source
        self.buf = buf
        self.state = State.INCOMPLETE

    @property
    def done(self) -> bool:
        return self.state is not State.INCOMPLETE

    def resume(self, waker: Waker) -> Poll:
        """Make as much progress as the source allows.

        Returns `PENDING` if the source would block; it will wake `waker` when it's worth
        calling again. Otherwise returns `outcome.Value(None)` at end of stream, or the
        source's own `outcome.Error`, and the operation is complete. If the source raises,
        the exception propagates and the operation is complete.

        """
        if self.done:
            raise ResumedAfterCompletion("this operation has already completed", self, self.state)
        try:
            ret = read_to_end_internal(self.source, waker, self.buf)
        except BaseException:
            self.state = State.FAILED
            raise
        if isinstance(ret, outcome.Value):
            self.state = State.SUCCEEDED
        elif isinstance(ret, outcome.Error):
            self.state = State.FAILED
        return ret

    poll = resume

    def __str__(self) -> str:
        return f"ReadToEnd({self.source}, {self.buf}, {self.state.value})"

    def __repr__(self) -> str:
        return str(self)
