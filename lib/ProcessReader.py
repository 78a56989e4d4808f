"""
Process Output Reader Module

This module defines the base class for background readers that
drain the output of a running process. A reader consumes the
process output on its own thread so the process never blocks on
a full pipe, and signals completion exactly once.

Responsibilities:
- Bind a reader to a live process
- Run the read loop on a daemon thread
- Record capture faults without raising them
- Provide a one-shot completion signal for waiters
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import time
import threading
from abc import ABC, abstractmethod

## import private pkgs
from Errors import DrainFault

class ProcessReader(ABC):
    """
    Base class for process output readers.

    Subclasses decide how the drained bytes are stored by
    implementing read() and get_string_data(). The captured
    data is only meaningful after the reader has finished.

    Attributes:
        chunk_size (int): Maximum bytes requested per read
        fault (DrainFault): Capture fault, or None
    """

    ## back-off between empty reads of a non-blocking stream
    poll_interval = 0.01

    def __init__(self, chunk_size: int = 8192) -> None:
        """
        Initialize an unbound reader.

        Args:
            chunk_size (int): Maximum bytes requested per read

        Returns:
            None
        """

        self.chunk_size = chunk_size
        self.fault = None

        ## bound process and reader thread
        self._process = None
        self._thread = None

        ## one-shot completion signal
        self._finished = threading.Event()

    def read_from(self, process: object) -> None:
        """
        Bind this reader to a process.

        Args:
            process (object): Process exposing a readable stdout

        Returns:
            None
        """

        if self._thread is not None:
            raise RuntimeError('reader is already running')

        self._process = process

    @property
    def process(self) -> object:
        return self._process

    def start(self) -> None:
        """
        Start the background read loop.

        Returns:
            None
        """

        if self._process is None:
            raise RuntimeError('reader is not bound to a process')

        if self._thread is not None:
            raise RuntimeError('reader is already running')

        self._thread = threading.Thread(
            target = self.run,
            name = 'reader-%s' % (getattr(self._process, 'pid', '?')),
            daemon = True,
        )
        self._thread.start()

    def run(self) -> None:
        """
        Drain the process output until end of stream.

        Any failure while reading is stored on self.fault. The
        completion signal is set whatever the outcome.

        Returns:
            None
        """

        stream = self._process.stdout
        try:
            for chunk in self._chunks(stream):
                self.read(chunk)

            self.flush()

        except Exception as e:
            ## capture faults stay on the reader
            self.fault = DrainFault('%s: %s' % (type(e).__name__, e))
            self.fault.__cause__ = e

        finally:
            try:
                stream.close()

            except Exception:
                pass

            self._finished.set()

    def _chunks(self, stream: object):
        """
        Yield non-empty chunks from a byte stream.

        A read returning None carries no data, so the loop backs off
        for poll_interval seconds before reading again. An empty bytes
        object marks the end of the stream.
        """

        read = getattr(stream, 'read1', stream.read)
        while True:
            chunk = read(self.chunk_size)
            if chunk is None:
                ## non-blocking stream with nothing buffered yet
                time.sleep(self.poll_interval)
                continue

            if len(chunk) == 0:
                return

            yield chunk

    def wait(self, timeout: float = None) -> bool:
        """
        Block until the reader has finished.

        Args:
            timeout (float): Maximum seconds to wait, or None

        Returns:
            bool: True if the reader finished
        """

        return self._finished.wait(timeout)

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    @property
    def succeeded(self) -> bool:
        """True when the reader finished without a capture fault."""
        return self.finished and self.fault is None

    @abstractmethod
    def read(self, data: bytes) -> None:
        """Consume one chunk of process output."""

    def flush(self) -> None:
        """Called once after the final chunk."""

    @abstractmethod
    def get_string_data(self) -> str:
        """Return the captured output as text."""
