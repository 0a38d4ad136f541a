"""Wakers: how a suspended operation asks to be resumed

A source which can't make progress right now returns `PENDING`, and takes
responsibility for calling `Waker.wake` on the waker it was handed once it can make
progress again. Whoever is driving the operation then calls `resume` again.

Wakes are never lost: waking before the driver gets around to waiting, or waking
several times, is fine; the driver just resumes once.

"""
from __future__ import annotations
import abc
import trio

__all__ = [
    "Waker",
    "RecordingWaker",
    "TrioWaker",
]

class Waker:
    "Something a source calls to ask that the operation it's reading for be resumed."
    @abc.abstractmethod
    def wake(self) -> None: ...

class RecordingWaker(Waker):
    """Just counts wakes, for driving an operation by hand.

    The caller checks `woken` and decides for itself when to resume.

    """
    def __init__(self) -> None:
        self.wakes = 0

    def wake(self) -> None:
        self.wakes += 1

    @property
    def woken(self) -> bool:
        return self.wakes > 0

    def __str__(self) -> str:
        return f"RecordingWaker(wakes={self.wakes})"

class TrioWaker(Waker):
    "Wakes a trio task which is blocked in `TrioWaker.wait`."
    def __init__(self) -> None:
        self._event = trio.Event()

    def wake(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        "Block until woken; returns immediately, after a checkpoint, if already woken."
        await self._event.wait()

    def __str__(self) -> str:
        return f"TrioWaker(woken={self._event.is_set()})"
