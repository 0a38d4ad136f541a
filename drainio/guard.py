"Restore a buffer's valid length on every exit from a block."
from __future__ import annotations
from drainio.buffer import GrowableBuffer
import typing as t

__all__ = [
    "LengthGuard",
]

class LengthGuard:
    """Pins a buffer's length to the bytes we've actually confirmed, however we leave.

    On entry, we remember the buffer's current length in `valid`. Inside the block, the
    caller is free to raise the buffer's length to expose spare storage to some reader,
    and bumps `valid` as the reader confirms it wrote bytes. On exit, the buffer's length
    is set back to `valid`.

    That happens whether the block falls off the end, returns, or is unwound by an
    exception; the exception is never suppressed. This is what keeps unwritten storage
    from ever being visible in the buffer after the block.

    """
    def __init__(self, buf: GrowableBuffer) -> None:
        self.buf = buf
        self.valid = buf.length

    def __enter__(self) -> LengthGuard:
        self.valid = self.buf.length
        return self

    def __exit__(self, *args: t.Any) -> None:
        self.buf.set_length(self.valid)
