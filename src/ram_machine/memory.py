"""Sparse integer memory for the RAM interpreter.

Addresses are non-negative integers and grow on demand. Address 0 is the
accumulator (r0). Memory is not zero-initialised: reading an address that
was never written is an error.
"""

from typing import Callable, Dict, Optional

from .errors import ErrorKind, RAMError

ACCUMULATOR = 0

MemoryObserver = Callable[[Dict[int, int]], None]


def _address_text(address: int) -> str:
    try:
        return str(address)
    except ValueError:
        return f"<{address.bit_length()}-bit address>"


class Memory:
    """Sparse address -> value store with a write observer.

    Attributes:
        on_change: Called with a full snapshot after every write
    """

    def __init__(self, on_change: Optional[MemoryObserver] = None):
        self._cells: Dict[int, int] = {}
        self.on_change = on_change

    def read(self, address: int) -> int:
        """Read the value stored at an address.

        Raises:
            RAMError: MEMORY_UNDEFINED if the address was never written
        """
        if address not in self._cells:
            raise RAMError(ErrorKind.MEMORY_UNDEFINED, f"Memory {_address_text(address)} is not defined")
        return self._cells[address]

    def write(self, address: int, value: int) -> None:
        """Store a value and notify the observer."""
        self._cells[address] = value
        if self.on_change is not None:
            self.on_change(self.snapshot())

    def snapshot(self) -> Dict[int, int]:
        """Copy of all defined cells, ordered by address."""
        return dict(sorted(self._cells.items()))

    @property
    def accumulator(self) -> int:
        return self.read(ACCUMULATOR)

    def __contains__(self, address: int) -> bool:
        return address in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __str__(self) -> str:
        cells = " ".join(f"r{addr}={value}" for addr, value in self.snapshot().items())
        return f"[{cells}]"
