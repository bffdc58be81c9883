"""RAM Machine: interpreter for the Random Access Machine teaching language.

A RAM program is a list of accumulator instructions over an unbounded,
sparse integer memory. Address 0 is the accumulator (r0); operands use
direct (N), indirect (*N) or immediate (=N) addressing.

Pipeline:
    SOURCE -> LOADER -> (lines, labels) -> STEP -> REGISTRY -> MEMORY/STATE
                 |                           |          |
          [comments, labels]         [keyword, operands] [handlers]

Modules:
    errors: ErrorKind and RAMError
    loader: Program loader (comments, labels, operand splitting)
    memory: Sparse memory with a write observer
    operands: Direct / indirect / immediate operand resolution
    state: ExecutionState dataclass
    registry: Instruction semantics
    machine: RAMMachine execution engine
"""

__version__ = "0.1.0"

from .errors import ErrorKind, RAMError
from .loader import ProgramLine, parse_program
from .memory import Memory
from .state import ExecutionState
from .registry import InstructionRegistry
from .machine import RAMMachine, TraceEntry, iter_input

__all__ = [
    "ErrorKind",
    "RAMError",
    "ProgramLine",
    "parse_program",
    "Memory",
    "ExecutionState",
    "InstructionRegistry",
    "RAMMachine",
    "TraceEntry",
    "iter_input",
]
