"""Process builtins: shell and sleep."""

import subprocess
import time
from typing import Any, List

from minilux.builtin_function import BuiltinFunction, BuiltinTable
from minilux.errors import ProcessExecutionError, TypeMismatch
from minilux.values import is_integer, type_name


def run_shell(command: str) -> str:
    """Run ``command`` through the system shell and return its stdout.

    Blocks until the child exits. One trailing newline (and a carriage
    return before it) is trimmed. A non-zero exit status is not an error;
    failing to start the shell is.
    """
    try:
        result = subprocess.run(command, shell=True, capture_output=True)
    except OSError as e:
        raise ProcessExecutionError(f"failed to run {command!r}: {e}")
    output = result.stdout.decode('utf-8', errors='replace')
    if output.endswith('\n'):
        output = output[:-1]
        if output.endswith('\r'):
            output = output[:-1]
    return output


def populate_process_builtins() -> BuiltinTable:
    table = BuiltinTable()

    def std_shell(args: List[Any]) -> Any:
        if not isinstance(args[0], str):
            raise TypeMismatch(f'shell expects Text, got {type_name(args[0])}')
        return run_shell(args[0])

    def std_sleep(args: List[Any]) -> Any:
        if not is_integer(args[0]):
            raise TypeMismatch(f'sleep expects Integer, got {type_name(args[0])}')
        time.sleep(max(args[0], 0))
        return ''

    table.register(BuiltinFunction('shell', 1, std_shell))
    table.register(BuiltinFunction('sleep', 1, std_sleep))
    return table
