from __future__ import annotations
from drainio.buffer import GrowableBuffer, UNINIT_POISON
import unittest

class TestGrowableBuffer(unittest.TestCase):
    def test_initial(self) -> None:
        buf = GrowableBuffer(b"hello", capacity=8)
        self.assertEqual(buf.length, 5)
        self.assertEqual(len(buf), 5)
        self.assertEqual(buf.capacity, 8)
        self.assertEqual(buf.getvalue(), b"hello")
        self.assertEqual(bytes(buf), b"hello")
        self.assertEqual(buf.grow_count, 0)

    def test_capacity_smaller_than_data(self) -> None:
        buf = GrowableBuffer(b"hello", capacity=2)
        self.assertEqual(buf.capacity, 5)

    def test_reserve_doubles(self) -> None:
        buf = GrowableBuffer()
        buf.reserve(32)
        self.assertEqual(buf.capacity, 32)
        buf.set_length(32)
        buf.reserve(32)
        self.assertEqual(buf.capacity, 64)
        buf.set_length(64)
        buf.reserve(32)
        self.assertEqual(buf.capacity, 128)
        self.assertEqual(buf.grow_count, 3)

    def test_reserve_large_request(self) -> None:
        buf = GrowableBuffer(capacity=32)
        buf.reserve(1000)
        self.assertEqual(buf.capacity, 1000)
        self.assertEqual(buf.grow_count, 1)

    def test_reserve_with_room_is_noop(self) -> None:
        buf = GrowableBuffer(b"ab", capacity=64)
        buf.reserve(32)
        self.assertEqual(buf.capacity, 64)
        self.assertEqual(buf.grow_count, 0)

    def test_reserve_negative(self) -> None:
        with self.assertRaises(ValueError):
            GrowableBuffer().reserve(-1)

    def test_fresh_storage_is_poisoned(self) -> None:
        buf = GrowableBuffer(b"ab")
        buf.reserve(4)
        buf.set_length(buf.capacity)
        self.assertEqual(buf.getvalue()[2:], bytes([UNINIT_POISON])*(buf.capacity - 2))

    def test_custom_poison(self) -> None:
        buf = GrowableBuffer(capacity=4, poison=0)
        buf.set_length(4)
        self.assertEqual(buf.getvalue(), b"\0\0\0\0")

    def test_set_length_keeps_storage(self) -> None:
        buf = GrowableBuffer(b"hello world")
        buf.set_length(5)
        self.assertEqual(buf.getvalue(), b"hello")
        self.assertEqual(buf.capacity, 11)
        buf.set_length(11)
        self.assertEqual(buf.getvalue(), b"hello world")

    def test_set_length_out_of_range(self) -> None:
        buf = GrowableBuffer(capacity=4)
        with self.assertRaises(ValueError):
            buf.set_length(5)
        with self.assertRaises(ValueError):
            buf.set_length(-1)
        self.assertEqual(buf.length, 0)

    def test_spare_writes_through(self) -> None:
        buf = GrowableBuffer(b"ab", capacity=6)
        buf.set_length(6)
        with buf.spare(2) as view:
            self.assertEqual(len(view), 4)
            view[:] = b"cdef"
        self.assertEqual(buf.getvalue(), b"abcdef")

    def test_spare_out_of_range(self) -> None:
        buf = GrowableBuffer(b"ab")
        with self.assertRaises(ValueError):
            with buf.spare(3):
                pass

    def test_spare_released(self) -> None:
        buf = GrowableBuffer(b"ab")
        with buf.spare(0) as view:
            pass
        with self.assertRaises(ValueError):
            view[0]
        # nothing is exported any more, so we can grow
        buf.reserve(100)

    def test_no_growth_while_exported(self) -> None:
        buf = GrowableBuffer(b"ab")
        with buf.spare(0):
            with self.assertRaises(BufferError):
                buf.reserve(100)
        self.assertEqual(buf.capacity, 2)

    def test_extend(self) -> None:
        buf = GrowableBuffer()
        for i in range(10):
            buf.extend(b"x" * 10)
        self.assertEqual(buf.getvalue(), b"x" * 100)
        self.assertLessEqual(buf.grow_count, 5)
