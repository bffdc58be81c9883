"""InstructionRegistry: semantics of the RAM instruction set.

Each instruction is registered once with its arity, a usage message and
a handler. The registry is frozen after initialization.

Instructions (r0 is memory address 0, the accumulator):
    LOAD x      r0 <- value(x)
    STORE x     mem[address(x)] <- r0
    ADD x       r0 <- r0 + value(x)
    SUB x       r0 <- r0 - value(x)
    MULT x      r0 <- r0 * value(x)
    DIV x       r0 <- floor(r0 / value(x))
    JUMP L      pc <- L
    JZERO L     pc <- L if r0 == 0
    JGTZ L      pc <- L if r0 > 0
    SJ X,Y,Z    mem[address(X)] <- value(X) - value(Y), pc <- Z if that is 0
    READ x      mem[address(x)] <- next input value
    WRITE x     output value(x)
    HALT        stop

Each handler is a function: (machine, ExecutionState, args) -> ExecutionState.
Handlers mutate the machine's memory and return the next state; failures
are raised as RAMError and tagged with the line number by the machine.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .errors import ErrorKind, RAMError
from .memory import ACCUMULATOR
from .operands import parse_numeral, resolve_address, resolve_value
from .state import ExecutionState

if TYPE_CHECKING:
    from .machine import RAMMachine

Handler = Callable[["RAMMachine", ExecutionState, List[str]], ExecutionState]

HALT_MESSAGES = ("Run successfully", "-" * 20)


@dataclass(frozen=True)
class Instruction:
    """A registered instruction.

    Attributes:
        keyword: Instruction keyword (e.g. "LOAD")
        arity: Exact number of operands
        usage: Message reported on an arity mismatch
        handler: Function implementing the instruction
    """
    keyword: str
    arity: int
    usage: str
    handler: Handler


def _usage(keyword: str, arity: int, example: str) -> str:
    if arity == 0:
        return f"{keyword} command takes no arguments (e.g. {example})"
    plural = "argument" if arity == 1 else "arguments"
    return f"{keyword} command requires {arity} {plural} (e.g. {example})"


class InstructionRegistry:
    """Frozen registry of RAM instructions.

    Attributes:
        _instructions: Dictionary mapping keywords to Instruction records
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self):
        """Initialize registry with the full instruction set."""
        self._instructions: Dict[str, Instruction] = {}
        self._frozen = False
        self._register_all_instructions()
        self.freeze()

    def _register_all_instructions(self) -> None:
        # Accumulator transfer
        self.register("LOAD", 1, "LOAD 0", self._op_load)
        self.register("STORE", 1, "STORE 1", self._op_store)

        # Arithmetic
        self.register("ADD", 1, "ADD 1", self._op_add)
        self.register("SUB", 1, "SUB 1", self._op_sub)
        self.register("MULT", 1, "MULT 1", self._op_mult)
        self.register("DIV", 1, "DIV 1", self._op_div)

        # Control flow
        self.register("JUMP", 1, "JUMP label", self._op_jump)
        self.register("JZERO", 1, "JZERO label", self._op_jzero)
        self.register("JGTZ", 1, "JGTZ label", self._op_jgtz)
        self.register("SJ", 3, "SJ X,Y,Z", self._op_sj)

        # I/O
        self.register("READ", 1, "READ 1", self._op_read)
        self.register("WRITE", 1, "WRITE 0", self._op_write)

        self.register("HALT", 0, "HALT", self._op_halt)

    def register(self, keyword: str, arity: int, example: str, handler: Handler) -> None:
        """Register an instruction.

        Args:
            keyword: Instruction keyword
            arity: Exact operand count
            example: Example form used in the usage message
            handler: Function that takes (machine, state, args) and returns new state

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If keyword already registered
        """
        if self._frozen:
            raise RuntimeError("Cannot register instructions: registry is frozen")
        if keyword in self._instructions:
            raise ValueError(f"Instruction already registered: {keyword}")
        self._instructions[keyword] = Instruction(keyword, arity, _usage(keyword, arity, example), handler)

    def freeze(self) -> None:
        self._frozen = True

    def is_frozen(self) -> bool:
        return self._frozen

    def get_keywords(self) -> set:
        """Get set of all registered keywords."""
        return set(self._instructions.keys())

    def get(self, keyword: str) -> Optional[Instruction]:
        return self._instructions.get(keyword)

    def execute(self, machine: "RAMMachine", state: ExecutionState,
                keyword: str, args: List[str]) -> ExecutionState:
        """Execute one decoded instruction.

        An empty keyword (blank or label-only line) is a no-op.

        Args:
            machine: Machine whose memory and I/O the instruction uses
            state: Current execution state
            keyword: Instruction keyword
            args: Operand tokens

        Returns:
            New execution state

        Raises:
            RAMError: UNKNOWN_COMMAND, USAGE or any error of the handler
        """
        if keyword == "":
            return state.advance()

        instruction = self._instructions.get(keyword)
        if instruction is None:
            raise RAMError(ErrorKind.UNKNOWN_COMMAND, f"Command {keyword} is not found")
        if len(args) != instruction.arity:
            raise RAMError(ErrorKind.USAGE, instruction.usage)

        return instruction.handler(machine, state, args)

    # =========================================================================
    # Accumulator Transfer
    # =========================================================================

    def _op_load(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        memory = machine.memory
        memory.write(ACCUMULATOR, resolve_value(memory, args[0]))
        return state.advance()

    def _op_store(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        memory = machine.memory
        memory.write(resolve_address(memory, args[0]), memory.accumulator)
        return state.advance()

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def _op_add(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        memory = machine.memory
        memory.write(ACCUMULATOR, memory.accumulator + resolve_value(memory, args[0]))
        return state.advance()

    def _op_sub(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        memory = machine.memory
        memory.write(ACCUMULATOR, memory.accumulator - resolve_value(memory, args[0]))
        return state.advance()

    def _op_mult(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        memory = machine.memory
        memory.write(ACCUMULATOR, memory.accumulator * resolve_value(memory, args[0]))
        return state.advance()

    def _op_div(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        """DIV x - floor division, so -7 DIV 2 gives -4."""
        memory = machine.memory
        dividend = memory.accumulator
        divisor = resolve_value(memory, args[0])
        if divisor == 0:
            raise RAMError(ErrorKind.DIVISION_BY_ZERO, "Division by zero")
        memory.write(ACCUMULATOR, dividend // divisor)
        return state.advance()

    # =========================================================================
    # Control Flow
    # =========================================================================

    def _label_target(self, machine: "RAMMachine", label: str) -> int:
        if label not in machine.labels:
            raise RAMError(ErrorKind.LABEL_NOT_FOUND, f"Label {label} is not found")
        return machine.labels[label]

    def _op_jump(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        return state.jump(self._label_target(machine, args[0]))

    def _op_jzero(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        if machine.memory.accumulator == 0:
            return state.jump(self._label_target(machine, args[0]))
        return state.advance()

    def _op_jgtz(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        if machine.memory.accumulator > 0:
            return state.jump(self._label_target(machine, args[0]))
        return state.advance()

    def _op_sj(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        """SJ X,Y,Z - subtract Y from X in place, jump to Z if the result is 0.

        Identical X and Y tokens zero the target without reading it.
        """
        memory = machine.memory
        x, y, z = args

        if x == y:
            memory.write(resolve_address(memory, x), 0)
        else:
            memory.write(resolve_address(memory, x), resolve_value(memory, x) - resolve_value(memory, y))

        if memory.read(resolve_address(memory, x)) == 0:
            return state.jump(self._label_target(machine, z))
        return state.advance()

    # =========================================================================
    # I/O
    # =========================================================================

    def _op_read(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        raw = machine.request_input()
        if raw is None:
            raise RAMError(ErrorKind.INPUT_CANCELLED, "Input cancelled")

        value = raw if isinstance(raw, int) else parse_numeral(str(raw))
        if value is None:
            raise RAMError(ErrorKind.INVALID_INPUT, "Invalid input, expected a number")

        memory = machine.memory
        memory.write(resolve_address(memory, args[0]), value)
        return state.advance()

    def _op_write(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        value = resolve_value(machine.memory, args[0])
        try:
            text = str(value)
        except ValueError:
            raise RAMError(ErrorKind.INVALID_OPERAND, "Value is too large to write")
        machine.emit(text)
        return state.advance()

    def _op_halt(self, machine: "RAMMachine", state: ExecutionState, args: List[str]) -> ExecutionState:
        new_state = state.halt()
        for message in HALT_MESSAGES:
            machine.emit(message)
        return new_state


# Singleton registry instance
_registry: Optional[InstructionRegistry] = None


def get_registry() -> InstructionRegistry:
    """Get the shared, frozen InstructionRegistry."""
    global _registry
    if _registry is None:
        _registry = InstructionRegistry()
    return _registry
