"""
Raw Process Output Reader

Keeps every byte a process writes, verbatim.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import private pkgs
from ProcessReader import ProcessReader

class RawProcessReader(ProcessReader):
    """
    Reader that accumulates raw bytes.
    """

    def __init__(self, chunk_size: int = 8192) -> None:
        super().__init__(chunk_size)

        self._output = bytearray()

    def get_data(self) -> bytes:
        """
        Everything read so far.

        Returns:
            bytes: Accumulated output
        """

        return bytes(self._output)

    def get_string_data(self) -> str:
        """
        Everything read so far, decoded as UTF-8.

        Returns:
            str: Accumulated output, undecodable bytes replaced
        """

        ## decode on demand
        return self.get_data().decode('utf-8', errors = 'replace')

    def read(self, data: bytes) -> None:
        """
        Append a chunk to the buffer.

        Args:
            data (bytes): Chunk read from the process

        Returns:
            None
        """

        self._output.extend(data)
