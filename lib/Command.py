"""
Command Execution Module

This module provides the process launcher used by every action
that runs an external program. A Command owns an argument vector,
starts the process, and hands its output to a ProcessReader that
drains it in the background.

Responsibilities:
- Build and normalize the argument vector
- Launch the process and attach the output reader
- Wait for both process exit and reader completion
- Render a shell-quotable form of the command line
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import os
import logging
import subprocess
from pathlib import Path

## import private pkgs
from Errors import LaunchError
from RawProcessReader import RawProcessReader

class Command(object):
    """
    External process launcher.

    The first element of the argument vector is always the
    executable. Arguments are normalized when they are added:
    path-like values become absolute paths, anything else is
    converted with str(). Once started, the argument vector can
    no longer be modified.
    """

    def __init__(self, executable: object, *args, cwd: str = None, env: dict = None, stderr: int = subprocess.STDOUT, logger: object = None) -> None:
        """
        Initialize a command.

        Args:
            executable (object): Program name or path
            *args: Initial arguments
            cwd (str): Working directory for the process
            env (dict): Environment for the process
            stderr (int): Standard error target, merged into stdout by default
            logger (object): Application logger

        Returns:
            None
        """

        self.logger = logger or logging.getLogger('Command')
        self.cwd = cwd
        self.env = env
        self.stderr = stderr

        ## argument vector, argv[0] is the executable
        self._argv = []

        ## runtime state
        self._process = None
        self._rval = None
        self._reader = RawProcessReader()

        self.set_executable(executable)
        self.add_arguments(*args)

    @staticmethod
    def _normalize(value: object) -> str:
        if isinstance(value, str):
            return value

        if isinstance(value, os.PathLike):
            return str(Path(value).absolute())

        return str(value)

    def _check_mutable(self) -> None:
        if self._process is not None:
            raise RuntimeError('command has already been started')

    @property
    def argv(self) -> list:
        """
        Argument vector, executable first.

        Returns:
            list: A copy of the argument vector
        """

        return list(self._argv)

    def set_executable(self, executable: object) -> 'Command':
        """
        Set or replace the executable.

        Args:
            executable (object): Program name or path

        Returns:
            Command: This command
        """

        self._check_mutable()
        executable = self._normalize(executable)

        ## overwrite argv[0] rather than append
        if self._argv:
            self._argv[0] = executable

        else:
            self._argv.append(executable)

        return self

    def add_argument(self, arg: object) -> 'Command':
        """
        Append one argument.

        Args:
            arg (object): Argument, normalized before it is stored

        Returns:
            Command: This command
        """

        self._check_mutable()
        self._argv.append(self._normalize(arg))
        return self

    def add_arguments(self, *args) -> 'Command':
        """
        Append several arguments in order.

        Args:
            *args: Arguments to append

        Returns:
            Command: This command
        """

        for arg in args:
            self.add_argument(arg)

        return self

    def add_argument_list(self, args: list) -> 'Command':
        """
        Append every argument of a list in order.

        Args:
            args (list): Arguments to append

        Returns:
            Command: This command
        """

        for arg in args:
            self.add_argument(arg)

        return self

    def attach_output_reader(self, reader: object) -> 'Command':
        """
        Select the reader that drains the process output.

        Args:
            reader (ProcessReader): Unstarted reader

        Returns:
            Command: This command
        """

        self._check_mutable()
        self._reader = reader
        return self

    @property
    def output_reader(self) -> object:
        """
        Reader draining the process output.

        Returns:
            ProcessReader: The attached reader
        """

        return self._reader

    def render(self) -> None:
        """Hook for subclasses that build arguments lazily."""

    def start(self) -> subprocess.Popen:
        """
        Launch the process and begin draining its output.

        Standard error is merged into standard output unless another
        target was given, so a single reader drains everything the
        process writes.

        Returns:
            subprocess.Popen: The running process

        Raises:
            LaunchError: The process could not be created
        """

        self._check_mutable()
        self.render()

        self.logger.debug({'execute': self.quoted_string()})
        try:
            process = subprocess.Popen(
                self._argv,
                stdin = subprocess.PIPE,
                stdout = subprocess.PIPE,
                stderr = self.stderr,
                bufsize = 0,
                cwd = self.cwd,
                env = self.env,
            )

        except (OSError, ValueError) as e:
            raise LaunchError(self._argv, e) from e

        self._process = process
        self._reader.read_from(process)
        self._reader.start()

        return process

    @property
    def process(self) -> subprocess.Popen:
        """
        Running or finished process.

        Returns:
            subprocess.Popen: The process, or None before start()
        """

        return self._process

    @property
    def input(self) -> object:
        """The process standard input stream."""

        if self._process is None:
            raise RuntimeError('command has not been started')

        return self._process.stdin

    def wait_for_completion(self, timeout: float = None) -> int:
        """
        Wait for the process to exit and its output to be drained.

        Only one caller should wait on a given execution. Calling
        again after completion returns the same exit code.

        Args:
            timeout (float): Maximum seconds to wait for process exit

        Returns:
            int: Process exit code

        Raises:
            subprocess.TimeoutExpired: The process outlived the timeout
        """

        if self._process is None:
            raise RuntimeError('command has not been started')

        if self._rval is None:
            rval = self._process.wait(timeout = timeout)

            ## the reader may still be consuming buffered output
            self._reader.wait()
            self._rval = rval

        return self._rval

    def kill(self) -> None:
        """
        Terminate the process if it is still running.

        Returns:
            None
        """

        if self._process is not None and self._process.poll() is None:
            self.logger.warning({'kill': self.quoted_string()})
            try:
                self._process.kill()

            except OSError as e:
                self.logger.warning({'kill': self.quoted_string(), 'error': str(e)})

    def quoted_string(self) -> str:
        """
        Render the command line in a shell-quotable form.

        Returns:
            str: Arguments joined by spaces, double-quoting the ones
                 that contain whitespace
        """

        parts = []
        for arg in self._argv:
            if any(c.isspace() for c in arg):
                parts.append('"%s"' % (arg))

            else:
                parts.append(arg)

        return ' '.join(parts)

    def __str__(self) -> str:
        return self.quoted_string()

    def __repr__(self) -> str:
        return 'Command(%r)' % (self._argv)
