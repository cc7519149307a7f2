"""Splitting of command lines typed by a user into query arguments."""

from __future__ import annotations

import re

# A token is a double-quoted run, a single-quoted run or a run of non-space
# characters; adjacent pieces glue together into one argument.
_ARG_PATTERN = re.compile(r"""("[^"]*"|'[^']*'|\S+)+""")


def split_into_args(q: str) -> list[str]:
    """Split a command line into arguments, honouring quotes and dropping them."""
    return [
        match.group(0).replace("'", "").replace('"', "")
        for match in _ARG_PATTERN.finditer(q)
    ]


def turn_into_query(q: str) -> tuple[str, ...]:
    """Turn a command line into an immutable query: the ordered tuple of its arguments."""
    return tuple(split_into_args(q))