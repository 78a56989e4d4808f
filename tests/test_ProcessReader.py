"""
Tests for the output readers.

The readers are driven with fake processes whose stdout hands out
pre-arranged chunks, so chunk boundaries can fall inside multi-byte
characters.
"""

import threading
import time

import pytest

from Errors import DrainFault
from RawProcessReader import RawProcessReader
from StringProcessReader import StringProcessReader
from LineProcessReader import LineProcessReader


class ChunkedStream:
    """Returns the given chunks one read at a time, then EOF."""

    def __init__(self, chunks, gate=None):
        self.chunks = list(chunks)
        self.gate = gate
        self.closed = False

    def read(self, size=-1):
        if self.gate is not None:
            self.gate.wait(10)
        if not self.chunks:
            return b""
        return self.chunks.pop(0)

    def close(self):
        self.closed = True


class FailingStream(ChunkedStream):

    def read(self, size=-1):
        if self.chunks:
            return self.chunks.pop(0)
        raise OSError("read failed")


class FakeProcess:
    pid = 4242

    def __init__(self, stream):
        self.stdout = stream


def split_every(data, size):
    return [data[i:i + size] for i in range(0, len(data), size)]


def drain(reader, chunks):
    stream = ChunkedStream(chunks)
    reader.read_from(FakeProcess(stream))
    reader.start()
    assert reader.wait(10)
    return stream


TEXT = "héllo wörld, ünïcödé ✓ 日本語 🎉\nsecond line\r\nthird"


class TestStringProcessReader:

    @pytest.mark.parametrize("size", [1, 2, 3, 5])
    def test_multibyte_split_reconstructs_text(self, size):
        reader = StringProcessReader()
        drain(reader, split_every(TEXT.encode("utf-8"), size))
        assert reader.get_data() == TEXT
        assert reader.succeeded

    def test_none_reads_are_skipped(self):
        reader = StringProcessReader()
        drain(reader, [b"ab", None, b"cd"])
        assert reader.get_string_data() == "abcd"

    def test_truncated_trailing_sequence_is_replaced(self):
        reader = StringProcessReader()
        drain(reader, [b"ok\xe2\x9c"])
        assert reader.get_data() == "ok\ufffd"


class TestLineProcessReader:

    def test_lines_split_across_chunks(self):
        reader = LineProcessReader()
        drain(reader, split_every(TEXT.encode("utf-8"), 3))
        assert reader.get_lines() == ("héllo wörld, ünïcödé ✓ 日本語 🎉", "second line", "third")

    def test_trailing_newline_adds_no_empty_line(self):
        reader = LineProcessReader()
        drain(reader, [b"a\nb\n"])
        assert reader.get_lines() == ("a", "b")

    def test_string_data_joins_lines(self):
        reader = LineProcessReader()
        drain(reader, [b"a\r\n", b"b"])
        assert reader.get_string_data() == "a\nb"


class TestRawProcessReader:

    def test_bytes_kept_verbatim(self):
        data = bytes(range(256))
        reader = RawProcessReader()
        stream = drain(reader, split_every(data, 7))
        assert reader.get_data() == data
        assert stream.closed


class TestFaultsAndCompletion:

    def test_read_error_is_recorded_not_raised(self):
        reader = StringProcessReader()
        reader.read_from(FakeProcess(FailingStream([b"partial"])))
        reader.start()
        assert reader.wait(10)
        assert reader.finished
        assert not reader.succeeded
        assert isinstance(reader.fault, DrainFault)
        assert isinstance(reader.fault.__cause__, OSError)
        assert reader.get_data() == "partial"

    def test_waiters_released_only_after_drain(self):
        gate = threading.Event()
        reader = RawProcessReader()
        reader.read_from(FakeProcess(ChunkedStream([b"late"], gate=gate)))
        reader.start()

        assert not reader.wait(0.1)
        gate.set()
        assert reader.wait(10)
        assert reader.get_data() == b"late"

    def test_start_requires_process(self):
        with pytest.raises(RuntimeError):
            RawProcessReader().start()

    def test_reader_cannot_be_started_twice(self):
        reader = RawProcessReader()
        drain(reader, [b"x"])
        with pytest.raises(RuntimeError):
            reader.start()


class TimedStream(ChunkedStream):
    """Records the time of every read."""

    def __init__(self, chunks):
        super().__init__(chunks)
        self.read_times = []

    def read(self, size=-1):
        self.read_times.append(time.monotonic())
        return super().read(size)


class TestEmptyReads:

    def test_empty_reads_back_off(self):
        reader = RawProcessReader()
        reader.poll_interval = 0.05
        stream = TimedStream([None, None, b"data"])
        reader.read_from(FakeProcess(stream))
        reader.start()
        assert reader.wait(10)

        assert reader.get_data() == b"data"
        gaps = [b - a for a, b in zip(stream.read_times, stream.read_times[1:3])]
        assert len(gaps) == 2
        assert all(gap >= 0.04 for gap in gaps)
