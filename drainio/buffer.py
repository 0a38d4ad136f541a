"""A growable byte buffer with an explicit length and capacity.

A `bytearray` conflates the bytes we consider valid with the storage backing them.
For draining a stream we need to tell them apart: the storage past the valid length
is handed to a reader to fill in, and until the reader reports how much it wrote,
that storage is garbage. So `GrowableBuffer` keeps its own `length`, which may be
anywhere up to the size of the backing storage, its `capacity`.

Storage which has been reserved but never written is filled with `UNINIT_POISON`,
the way debugging allocators poison fresh memory. Storage which was written and
then dropped by shrinking the length keeps its stale contents. Either way, nothing
past `length` should ever be trusted, and nothing past `length` is returned by
`GrowableBuffer.getvalue`.

"""
from __future__ import annotations
import contextlib
import typing as t

import logging
logger = logging.getLogger(__name__)

__all__ = [
    "GrowableBuffer",
    "UNINIT_POISON",
]

UNINIT_POISON = 0xA5
"The byte which fills storage that was reserved but never written"

class GrowableBuffer:
    """An owned byte buffer whose capacity grows geometrically.

    `length` is the number of valid bytes; `capacity` is the size of the underlying
    storage. Growing the capacity at least doubles it, so appending S bytes a little at
    a time costs O(log S) reallocations; `grow_count` counts them.

    Like `bytearray`, the storage can't be resized while a view of it is exported, so
    take views with `GrowableBuffer.spare` and let them be released before growing.

    """
    def __init__(self, data: bytes=b"", capacity: int=0, poison: int=UNINIT_POISON) -> None:
        self._poison = poison
        self._storage = bytearray(data)
        self._length = len(self._storage)
        self.grow_count = 0
        "How many times the storage has actually been reallocated by `reserve`"
        if capacity > self._length:
            self._storage.extend(self._fresh(capacity - self._length))

    def _fresh(self, size: int) -> bytes:
        return bytes((self._poison,)) * size

    @property
    def length(self) -> int:
        "The number of valid bytes at the start of the storage."
        return self._length

    @property
    def capacity(self) -> int:
        "The total size of the storage, valid or not."
        return len(self._storage)

    def __len__(self) -> int:
        return self._length

    def reserve(self, additional: int) -> None:
        """Make sure there's room for at least `additional` more bytes past `length`.

        If the storage has to grow, it grows to at least twice its current capacity.

        """
        if additional < 0:
            raise ValueError("can't reserve a negative amount of space", additional)
        needed = self._length + additional
        old_capacity = self.capacity
        if needed <= old_capacity:
            return
        new_capacity = max(2*old_capacity, needed)
        logger.debug("GrowableBuffer: growing capacity %d -> %d", old_capacity, new_capacity)
        self._storage.extend(self._fresh(new_capacity - old_capacity))
        self.grow_count += 1

    def set_length(self, length: int) -> None:
        """Declare the first `length` bytes of storage valid, without touching the storage.

        Raising the length exposes whatever is in the storage, which may be poison or stale
        data; it's on the caller to make sure that's only done temporarily, or after the
        storage has been written.

        """
        if not (0 <= length <= self.capacity):
            raise ValueError("length", length, "falls outside the buffer's storage", self.capacity)
        self._length = length

    @contextlib.contextmanager
    def spare(self, start: int) -> t.Iterator[memoryview]:
        """Yield a writable view of the storage from `start` up to `length`.

        The view is released when the block exits; if some other reference to the
        storage is still alive at that point, the buffer can't grow until it's dropped.

        """
        if not (0 <= start <= self._length):
            raise ValueError("start", start, "falls outside the valid length", self._length)
        with memoryview(self._storage) as whole:
            with whole[start:self._length] as view:
                yield view

    def extend(self, data: bytes) -> None:
        "Append these bytes, growing the storage if needed."
        size = len(data)
        self.reserve(size)
        self._storage[self._length:self._length+size] = data
        self._length += size

    def getvalue(self) -> bytes:
        "Return a copy of the valid bytes."
        return bytes(self._storage[:self._length])

    def __bytes__(self) -> bytes:
        return self.getvalue()

    def __str__(self) -> str:
        return f"GrowableBuffer(length={self._length}, capacity={self.capacity})"

    def __repr__(self) -> str:
        return str(self)
