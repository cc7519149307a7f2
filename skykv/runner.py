"""Running queries typed at a prompt and printing the server's answers."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from io import StringIO
from typing import Any, Protocol, TextIO

from skykv.kvstore import RespCode
from skykv.query import turn_into_query
from skykv.terminal import Color, write_with_col

_ERROR_NAMES = {
    RespCode.ACTION_ERR: "Action Error",
    RespCode.OTHER_ERR: "Other Error",
    RespCode.NIL: "Not Found",
    RespCode.OVERWRITE_ERR: "Overwrite Error",
    RespCode.PACKET_ERR: "Packet Error",
    RespCode.SERVER_ERR: "Server Error",
}

INVALID_RESPONSE = "ERROR: The server sent an invalid response\n"
PARSE_ERROR = "ERROR: The client failed to deserialize data sent by the server\n"


class AsyncSocket(Protocol):
    """A connection that sends a query and awaits the decoded response."""

    async def run_simple_query(self, query: tuple[str, ...]) -> Any: ...


def _colored(text: str, color: Color) -> str:
    buf = StringIO()
    write_with_col(text, color, buf)
    return buf.getvalue()


def _text(item: Any) -> str:
    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item).decode("utf-8", errors="replace")
    return str(item)


def _is_uint(item: Any) -> bool:
    return isinstance(item, int) and not isinstance(item, bool)


def format_rcode(code: RespCode, idx: int | None = None) -> str:
    """Render a response code: OKAY in cyan, errors in red with their index."""
    if code is RespCode.OKAY:
        return _colored("(Okay)\n", Color.CYAN)
    name = _ERROR_NAMES.get(code)
    if name is None:
        name = "Unknown Error" if code.value.isdigit() else code.value
    body = f"({name})\n" if idx is None else f"({idx}) ({name})\n"
    return _colored(body, Color.RED)


def format_flat_array(items: Sequence[Any]) -> str:
    """Render each item as a quoted string numbered from 1."""
    return "".join(f'({idx}) "{_text(item)}"\n' for idx, item in enumerate(items, 1))


def format_array(items: Sequence[Any]) -> str:
    """Render an array of strings, integers, codes and flat arrays, numbered from 1."""
    parts = []
    for idx, item in enumerate(items, 1):
        if isinstance(item, (str, bytes, bytearray, memoryview)):
            parts.append(f'({idx}) "{_text(item)}"\n')
        elif isinstance(item, RespCode):
            parts.append(format_rcode(item, idx))
        elif _is_uint(item):
            parts.append(f'({idx}) "{item}"\n')
        elif isinstance(item, (list, tuple)):
            parts.append(format_flat_array(item))
        else:
            raise TypeError(f"cannot print array element of type {type(item).__name__}")
    return "".join(parts)


def format_element(element: Any) -> str:
    """Render a whole response; None stands for an invalid response."""
    if element is None:
        return INVALID_RESPONSE
    if isinstance(element, (str, bytes, bytearray, memoryview)):
        return f'"{_text(element)}"\n'
    if isinstance(element, RespCode):
        return format_rcode(element)
    if _is_uint(element):
        return f"{element}\n"
    if isinstance(element, (list, tuple)):
        return format_array(element)
    return f"The server possibly sent a newer data type that we can't parse: {element!r}\n"


class Runner:
    """Sends typed query lines over a connection and prints the answers."""

    def __init__(self, con: AsyncSocket, stream: TextIO | None = None) -> None:
        self.con = con
        self.stream = stream

    @property
    def _out(self) -> TextIO:
        return sys.stdout if self.stream is None else self.stream

    async def run_query(self, line: str) -> None:
        """Run one query line and print the response.

        A ValueError from the connection means the response could not be
        decoded. An OSError is reported on stderr and ends the process with 1.
        """
        query = turn_into_query(line)
        try:
            response = await self.con.run_simple_query(query)
        except OSError as exc:
            print(f"An I/O error occurred while querying: {exc}", file=sys.stderr)
            sys.exit(1)
        except ValueError:
            self._out.write(PARSE_ERROR)
            return
        self._out.write(format_element(response))