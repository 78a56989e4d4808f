"""
WP-CLI Invocation Module

This module wraps the WP-CLI tool. A WPCLI object describes one
command (group, subcommand, arguments and --options) and runs it
through Command, choosing the output reader that matches how the
result is consumed.

Responsibilities:
- Render WP-CLI argument vectors with global options
- Run the tool and check its exit status
- Parse text, line and JSON results
"""

## version related
__author__ = "Kyle"
__version__ = "0.0.1"
__email__ = "kyle@hacking-linux.com"

## import builtin pkgs
import io
import json
import logging
import subprocess

## import private pkgs
from Command import Command
from Errors import WPCLIError
from LineProcessReader import LineProcessReader
from StringProcessReader import StringProcessReader

class WPCLI(object):
    """
    A single WP-CLI command.

    Options are kept by name, so setting an option twice replaces
    the first value. An option with a value of None renders as a
    bare flag.
    """

    def __init__(self, tool_path: str, group: str, command: str, *command_args, timeout: int = None, logger: object = None) -> None:
        """
        Initialize a WP-CLI command.

        Args:
            tool_path (str): Path to the wp executable
            group (str): Command group, e.g. 'cron'
            command (str): Subcommand, e.g. 'event'
            *command_args: Positional arguments
            timeout (int): Seconds before the process is killed
            logger (object): Application logger

        Returns:
            None
        """

        self.logger = logger or logging.getLogger('WPCLI')
        self.tool_path = tool_path
        self.group = group
        self.command = command
        self.command_args = [str(arg) for arg in command_args]
        self.timeout = timeout

        ## named options, rendered after positional arguments
        self.options = {}

        ## data written to the process standard input
        self.stdin = io.BytesIO()

        ## last launched command
        self._cmd = None

    def add_argument(self, argument: str) -> None:
        """
        Append a positional argument.

        Args:
            argument (str): Argument, stringified

        Returns:
            None
        """

        self.command_args.append(str(argument))

    def set_option(self, name: str, value: object = None) -> None:
        """
        Set a named option, replacing any earlier value.

        Args:
            name (str): Option name without the leading dashes
            value (object): Option value, None for a bare flag

        Returns:
            None
        """

        self.options[name] = value

    def remove_option(self, name: str) -> None:
        """
        Drop a named option if present.

        Args:
            name (str): Option name without the leading dashes

        Returns:
            None
        """

        self.options.pop(name, None)

    def set_site(self, site: object) -> None:
        """
        Target a single site of the installation.

        Args:
            site (Site): Site whose domain becomes the --url option

        Returns:
            None
        """

        ## a site without a domain keeps the default --url
        if site.domain:
            self.set_option('url', site.domain)

    def set_format(self, fmt: str) -> None:
        """
        Select the output format.

        Args:
            fmt (str): Format name, None or 'default' for the tool's own

        Returns:
            None
        """

        if fmt is None or fmt == 'default':
            self.remove_option('format')

        else:
            self.set_option('format', fmt)

    def set_fields(self, *fields) -> None:
        """
        Restrict the output to the given fields.

        Args:
            *fields: Field names, in output order

        Returns:
            None
        """

        self.set_option('fields', ','.join(fields))

    def load_themes(self, enabled: bool) -> None:
        """
        Toggle theme loading.

        Args:
            enabled (bool): False adds --skip-themes

        Returns:
            None
        """

        if enabled:
            self.remove_option('skip-themes')

        else:
            self.set_option('skip-themes')

    def load_plugins(self, enabled: bool) -> None:
        """
        Toggle plugin loading.

        Args:
            enabled (bool): False adds --skip-plugins

        Returns:
            None
        """

        if enabled:
            self.remove_option('skip-plugins')

        else:
            self.set_option('skip-plugins')

    def render(self) -> list:
        """
        Build the argument list that follows the executable.

        Returns:
            list: Group, subcommand, arguments and options
        """

        argv = [self.group, self.command] + self.command_args
        for name, value in self.options.items():
            if value is None:
                argv.append('--%s' % (name))

            else:
                argv.append('--%s=%s' % (name, value))

        return argv

    def build_command(self, stderr: int = subprocess.STDOUT) -> Command:
        """
        Build the process launcher for this invocation.

        Args:
            stderr (int): Standard error target

        Returns:
            Command: Unstarted command
        """

        return Command(self.tool_path, *self.render(), stderr = stderr, logger = self.logger)

    def run_command(self, reader: object, stderr: int = subprocess.STDOUT) -> None:
        """
        Run the command, draining output into the given reader.

        Args:
            reader (ProcessReader): Reader receiving the output
            stderr (int): Standard error target

        Returns:
            None

        Raises:
            LaunchError: The tool could not be started
            WPCLIError: The tool failed or timed out
        """

        cmd = self.build_command(stderr)
        cmd.attach_output_reader(reader)
        self._cmd = cmd
        cmd.start()

        ## write buffered input, then close so the tool sees EOF
        data = self.stdin.getvalue()
        try:
            if data:
                cmd.input.write(data)
                cmd.input.flush()

        except BrokenPipeError:
            self.logger.warning({'command': cmd.quoted_string(), 'status': 'stdin closed early'})

        finally:
            try:
                cmd.input.close()

            except BrokenPipeError:
                pass

        try:
            result = cmd.wait_for_completion(self.timeout)

        except subprocess.TimeoutExpired:
            cmd.kill()
            result = cmd.wait_for_completion()
            self.logger.error({'command': cmd.quoted_string(), 'status': 'timeout', 'timeout': self.timeout})
            raise WPCLIError(cmd.quoted_string(), result, 'timed out after %s seconds' % (self.timeout))

        if result != 0:
            output = reader.get_string_data()

            ## some commands exit non-zero but still report success
            if '\nSuccess: ' in output:
                return

            self.logger.error({'command': cmd.quoted_string(), 'result': result})
            raise WPCLIError(cmd.quoted_string(), result, output)

    def execute(self) -> str:
        """
        Run the command and collect its output.

        Returns:
            str: Combined output

        Raises:
            WPCLIError: The tool failed or timed out
        """

        reader = StringProcessReader()
        self.run_command(reader)
        return reader.get_data()

    def read_value(self) -> str:
        """
        Run the command and return its trimmed output.

        Returns:
            str: Output without surrounding whitespace
        """

        return self.execute().strip()

    def read_lines(self) -> list:
        """
        Run the command and split its output into lines.

        Returns:
            list: Output lines without terminators
        """

        reader = LineProcessReader()
        self.run_command(reader)
        return list(reader.get_lines())

    def read_json(self) -> object:
        """
        Run the command in JSON format and decode the result.

        Standard error is discarded so warnings printed by the tool
        cannot corrupt the JSON document.

        Returns:
            object: Decoded JSON value

        Raises:
            WPCLIError: The tool failed or printed invalid JSON
        """

        self.set_format('json')
        reader = StringProcessReader()
        self.run_command(reader, stderr = subprocess.DEVNULL)

        data = reader.get_data()
        try:
            return json.loads(data)

        except ValueError as e:
            raise WPCLIError(str(self), 0, 'invalid JSON response: %s' % (data)) from e

    def check_success(self) -> bool:
        """
        Run the command and report whether it succeeded.

        Returns:
            bool: True on success, False if the tool failed
        """

        try:
            self.execute()
            return True

        except WPCLIError as e:
            self.logger.debug({'command': str(self), 'error': str(e)})
            return False

    def kill(self) -> None:
        """Kill the running process, if any."""

        if self._cmd is not None:
            self._cmd.kill()

    def __str__(self) -> str:
        return 'WPCLI:%s' % (Command(self.tool_path, *self.render()).quoted_string())

class WPCLIFactory(object):
    """
    Builds WP-CLI commands with the installation-wide options.
    """

    def __init__(self, config: dict, logger: object = None) -> None:
        """
        Initialize the factory.

        Args:
            config (dict): The 'wpcli' configuration section
            logger (object): Application logger

        Returns:
            None
        """

        self.logger = logger
        self.tool_path = config['path']
        self.wordpress_dir = config.get('wordpress_dir')
        self.default_host = config.get('default_host')

    def build(self, group: str, command: str, *args, timeout: int = None) -> WPCLI:
        wpcli = WPCLI(self.tool_path, group, command, *args, timeout = timeout, logger = self.logger)

        wpcli.set_option('allow-root')
        wpcli.set_option('no-color')
        if self.wordpress_dir:
            wpcli.set_option('path', self.wordpress_dir)

        if self.default_host:
            wpcli.set_option('url', self.default_host)

        return wpcli
