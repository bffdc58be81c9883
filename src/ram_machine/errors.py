"""Error model for the RAM interpreter.

Every failure the interpreter can produce is a RAMError carrying an
ErrorKind, so callers can match on the kind instead of parsing the
message text. The engine tags each error with the 1-based source line
of the step in progress before reporting and re-raising it.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of interpreter failure."""

    # Load-time
    INVALID_LABEL = "invalid_label"

    # Syntax / arity
    USAGE = "usage"
    UNKNOWN_COMMAND = "unknown_command"
    INVALID_OPERAND = "invalid_operand"

    # Addressing
    INVALID_ADDRESS = "invalid_address"

    # Memory
    MEMORY_UNDEFINED = "memory_undefined"

    # Control flow
    LABEL_NOT_FOUND = "label_not_found"

    # Arithmetic
    DIVISION_BY_ZERO = "division_by_zero"

    # Program bounds
    END_OF_PROGRAM = "end_of_program"
    ALREADY_FINISHED = "already_finished"

    # Input
    INPUT_CANCELLED = "input_cancelled"
    INVALID_INPUT = "invalid_input"

    # Safety limit
    STEP_LIMIT = "step_limit"


_CATEGORIES = {
    ErrorKind.INVALID_LABEL: "load",
    ErrorKind.USAGE: "syntax",
    ErrorKind.UNKNOWN_COMMAND: "syntax",
    ErrorKind.INVALID_OPERAND: "syntax",
    ErrorKind.INVALID_ADDRESS: "addressing",
    ErrorKind.MEMORY_UNDEFINED: "memory",
    ErrorKind.LABEL_NOT_FOUND: "control-flow",
    ErrorKind.DIVISION_BY_ZERO: "arithmetic",
    ErrorKind.END_OF_PROGRAM: "bounds",
    ErrorKind.ALREADY_FINISHED: "bounds",
    ErrorKind.INPUT_CANCELLED: "input",
    ErrorKind.INVALID_INPUT: "input",
    ErrorKind.STEP_LIMIT: "limit",
}


class RAMError(RuntimeError):
    """Interpreter failure with a kind, a message and a source line.

    Attributes:
        kind: ErrorKind of the failure
        message: Human-readable message (e.g. "Memory 5 is not defined")
        line: 1-based source line, or None until the engine tags it
    """

    def __init__(self, kind: ErrorKind, message: str, line: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.line = line
        super().__init__(self._render())

    def _render(self) -> str:
        if self.line is None:
            return self.message
        return f"Error at line {self.line}: {self.message}"

    def at_line(self, line: int) -> "RAMError":
        """Tag the error with a source line (first tag wins).

        Args:
            line: 1-based source line number

        Returns:
            The same error, for chaining into ``raise``
        """
        if self.line is None:
            self.line = line
            self.args = (self._render(),)
        return self

    @property
    def category(self) -> str:
        """Error family (load, syntax, addressing, memory, ...)."""
        return _CATEGORIES[self.kind]

    def __str__(self) -> str:
        return self._render()
