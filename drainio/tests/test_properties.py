"Property-based tests: whatever the source does, the buffer holds exactly what it delivered."
from __future__ import annotations
from drainio.buffer import GrowableBuffer, UNINIT_POISON
from drainio.read_to_end import ReadToEnd, INITIAL_RESERVE
from drainio.source import PENDING
from drainio.sources import ChunkSource, Raise
from drainio.waker import RecordingWaker
from hypothesis import given, settings, strategies as st
import math
import outcome
import unittest

class MyException(Exception):
    pass

# no poison bytes in the data, so any poison in the result must have leaked
def unpoisoned(data: bytes) -> bytes:
    return data.replace(bytes((UNINIT_POISON,)), b"\0")

payload = st.binary(min_size=1, max_size=300).map(unpoisoned)
steps = st.lists(st.one_of(payload, st.just(PENDING)), max_size=20)
endings = st.sampled_from(["eof", "error", "raise"])

class TestDrainProperties(unittest.TestCase):
    @given(st.binary(max_size=50).map(unpoisoned),
           steps, endings, st.booleans())
    @settings(max_examples=200, deadline=None)
    def test_buffer_is_prefix_plus_chunks(self, original, script, ending, trusted) -> None:
        exn = MyException("ending")
        if ending == "error":
            script = script + [exn]
        elif ending == "raise":
            script = script + [Raise(exn)]
        buf = GrowableBuffer(original)
        source = ChunkSource(script, trusted=trusted)
        op = ReadToEnd(source, buf)
        delivered = b""
        for step in script:
            if isinstance(step, bytes):
                delivered += step
        pending_points = 0
        while True:
            waker = RecordingWaker()
            try:
                ret = op.resume(waker)
            except MyException as raised:
                self.assertEqual(ending, "raise")
                self.assertIs(raised, exn)
                break
            self.assertNotIn(UNINIT_POISON, buf.getvalue())
            self.assertTrue(buf.getvalue().startswith(original))
            if ret is PENDING:
                pending_points += 1
                self.assertTrue(waker.woken)
                continue
            if ending == "eof":
                self.assertIsInstance(ret, outcome.Value)
            else:
                self.assertIsInstance(ret, outcome.Error)
                self.assertIs(ret.error, exn)
            break
        self.assertEqual(buf.getvalue(), original + delivered)
        self.assertEqual(buf.length, len(original) + len(delivered))
        self.assertNotIn(UNINIT_POISON, buf.getvalue())
        self.assertEqual(pending_points, script.count(PENDING))
        self.assertTrue(op.done)
        if not trusted:
            # every region we handed over was zeroed, even ones re-exposed after PENDING
            self.assertTrue(all(source.saw_zeroed))

    @given(st.integers(min_value=1, max_value=1 << 16), st.integers(min_value=1, max_value=4096))
    @settings(max_examples=50, deadline=None)
    def test_growth_count_is_logarithmic(self, size, chunk) -> None:
        data = b"x" * size
        script = [data[i:i+chunk] for i in range(0, size, chunk)]
        buf = GrowableBuffer()
        op = ReadToEnd(ChunkSource(script, trusted=True), buf)
        self.assertIsInstance(op.resume(RecordingWaker()), outcome.Value)
        self.assertEqual(buf.length, size)
        self.assertLessEqual(buf.grow_count, max(0, math.ceil(math.log2(size/INITIAL_RESERVE))) + 2)
