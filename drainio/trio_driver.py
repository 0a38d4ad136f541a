"Run ReadToEnd operations from trio tasks."
from __future__ import annotations
from drainio.buffer import GrowableBuffer
from drainio.read_to_end import ReadToEnd
from drainio.source import Source, PENDING
from drainio.waker import TrioWaker
import typing as t
import trio

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "drive",
    "read_to_end",
]

async def drive(op: ReadToEnd) -> None:
    """Resume `op` until it completes, sleeping in between until its source wakes us.

    Raises the source's error if it fails. Cancelling this just stops resuming `op`;
    whatever was read before that stays in the buffer.

    """
    while True:
        waker = TrioWaker()
        ret = op.resume(waker)
        if ret is PENDING:
            logger.debug("drive(%s): waiting to be woken", op)
            await waker.wait()
        else:
            await trio.lowlevel.checkpoint()
            return ret.unwrap()

async def read_to_end(source: Source, buf: t.Optional[GrowableBuffer]=None) -> GrowableBuffer:
    "Read everything from `source` into `buf`, or a new buffer; return the buffer."
    if buf is None:
        buf = GrowableBuffer()
    await drive(source.read_to_end(buf))
    return buf
