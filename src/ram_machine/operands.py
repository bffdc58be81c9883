"""Operand resolution for the three RAM addressing modes.

    N    direct     the value stored at address N
    *N   indirect   the value stored at address mem[N]
    =N   immediate  the literal N (readable, never writable)

Indirection reads mem[N] and uses that value as a direct address. The
pointed-to value is never dereferenced again, so indirection is exactly one
level deep.
"""

import re
from typing import Optional

from .errors import ErrorKind, RAMError
from .memory import Memory

INDIRECT = "*"
IMMEDIATE = "="

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_numeral(text: str) -> Optional[int]:
    """Parse the leading decimal integer of a string.

    Trailing characters after the digits are ignored ("12abc" -> 12).

    Args:
        text: Text to parse

    Returns:
        The integer, or None if the text does not start with one
    """
    match = _LEADING_INT.match(text)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # more digits than the interpreter converts
        return None


def _numeral(text: str, token: str) -> int:
    value = parse_numeral(text)
    if value is None:
        raise RAMError(ErrorKind.INVALID_OPERAND, f"Operand {token[:32]} is invalid")
    return value


def _checked_address(address: int) -> int:
    if address < 0:
        raise RAMError(ErrorKind.INVALID_ADDRESS, "Invalid address")
    return address


def resolve_value(memory: Memory, token: str) -> int:
    """Resolve an operand token to the value it denotes.

    Args:
        memory: Memory to read from
        token: Operand token (``N``, ``*N`` or ``=N``)

    Returns:
        Resolved integer value

    Raises:
        RAMError: MEMORY_UNDEFINED for a read of an unwritten address,
            INVALID_OPERAND for a token without a numeral
    """
    if token.startswith(INDIRECT):
        pointer = _numeral(token[1:], token)
        return memory.read(memory.read(pointer))
    if token.startswith(IMMEDIATE):
        return _numeral(token[1:], token)
    return memory.read(_numeral(token, token))


def resolve_address(memory: Memory, token: str) -> int:
    """Resolve an operand token to the memory address it names.

    Args:
        memory: Memory to read pointers from
        token: Operand token (``N`` or ``*N``)

    Returns:
        Target address

    Raises:
        RAMError: INVALID_ADDRESS for an immediate token or a negative
            address, MEMORY_UNDEFINED for an unwritten pointer
    """
    if token.startswith(INDIRECT):
        pointer = _numeral(token[1:], token)
        return _checked_address(memory.read(pointer))
    if token.startswith(IMMEDIATE):
        raise RAMError(ErrorKind.INVALID_ADDRESS, "Invalid address")
    return _checked_address(_numeral(token, token))
