"""
Wire codec module.

Every message on the wire is one UTF-8 line terminated by '\\n'.
Reading returns None when the stream can no longer produce a line,
which is the only disconnect signal the server relies on. A final line
the client sends without a terminator before closing is still returned.
"""

import asyncio
from typing import Optional, Tuple

from relay_common.constants import CONTROL_MESSAGE_SPECIFIER, ControlCommands


async def read_line(reader: asyncio.StreamReader) -> Optional[str]:
    """Read one line from the stream, or None on close or failure."""
    try:
        data = await reader.readline()
    except (asyncio.IncompleteReadError, asyncio.LimitOverrunError, ValueError, OSError):
        return None

    # b'' only at EOF; an unterminated tail before EOF is still a line
    if not data:
        return None

    try:
        return data.decode('utf-8').rstrip('\r\n')
    except UnicodeDecodeError:
        return None


async def write_line(writer: asyncio.StreamWriter, line: str):
    """Write one line and flush it before returning."""
    writer.write(line.encode('utf-8') + b'\n')
    await writer.drain()


def is_control_message(line: str) -> bool:
    """Return True if the line carries a control command."""
    return line.startswith(CONTROL_MESSAGE_SPECIFIER)


def parse_control_message(line: str) -> Tuple[Optional[str], str]:
    """
    Split a control line into (command, argument).

    The command is one of ControlCommands.ALL, or None when the body does not
    start with a known command. For SET MY NAME= and CONNECT TO PEER WITH NAME=
    the argument is the raw text after '='; otherwise it is the body itself.
    """
    body = line[len(CONTROL_MESSAGE_SPECIFIER):].lstrip()

    for command in ControlCommands.ALL:
        if body.startswith(command):
            if command in ControlCommands.PARAMETERIZED:
                return command, body[len(command):]
            return command, body

    return None, body
