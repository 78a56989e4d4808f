"""
Text Process Output Reader

Decodes process output as UTF-8 while it arrives. Multi-byte
sequences split across read chunks are held by an incremental
decoder until they are complete.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import codecs

## import private pkgs
from ProcessReader import ProcessReader

class StringProcessReader(ProcessReader):
    """
    Reader that accumulates decoded text.
    """

    def __init__(self, chunk_size: int = 8192, encoding: str = 'utf-8') -> None:
        super().__init__(chunk_size)

        self._decoder = codecs.getincrementaldecoder(encoding)(errors = 'replace')
        self._parts = []

    def get_data(self) -> str:
        return ''.join(self._parts)

    def get_string_data(self) -> str:
        return self.get_data()

    def read(self, data: bytes) -> None:
        text = self._decoder.decode(data)
        if text:
            self._parts.append(text)

    def flush(self) -> None:
        ## emit whatever a truncated trailing sequence decodes to
        text = self._decoder.decode(b'', final = True)
        if text:
            self._parts.append(text)
