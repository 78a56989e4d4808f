"""
Line Process Output Reader

Splits process output into newline-delimited lines, keeping them
in the order they were written.
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import codecs

## import private pkgs
from ProcessReader import ProcessReader

class LineProcessReader(ProcessReader):
    """
    Reader that collects complete text lines.

    Line terminators are not kept. A trailing carriage return is
    dropped so CRLF output reads the same as LF output.
    """

    def __init__(self, chunk_size: int = 8192, encoding: str = 'utf-8') -> None:
        super().__init__(chunk_size)

        self._decoder = codecs.getincrementaldecoder(encoding)(errors = 'replace')
        self._pending = ''
        self._lines = []

    def get_lines(self) -> tuple:
        return tuple(self._lines)

    def get_string_data(self) -> str:
        return '\n'.join(self._lines)

    def read(self, data: bytes) -> None:
        self._pending += self._decoder.decode(data)

        ## move every completed line out of the pending buffer
        while '\n' in self._pending:
            line, self._pending = self._pending.split('\n', 1)
            self._lines.append(line.rstrip('\r'))

    def flush(self) -> None:
        self._pending += self._decoder.decode(b'', final = True)

        ## last line without a terminator
        if self._pending:
            self._lines.append(self._pending.rstrip('\r'))
            self._pending = ''
