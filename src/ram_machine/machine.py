"""RAMMachine: execution engine for RAM assembly programs.

Pipeline for one step:
    PROGRAM LINE -> SPLIT (keyword, operands) -> REGISTRY -> EXECUTE -> STATE

The machine owns one program, one label table, one Memory and one
ExecutionState. It talks to the outside world only through injected
collaborators:

    on_memory_change(snapshot)   after every memory write
    on_error(line, message)      before an error is raised
    output(text)                 one call per output line
    input_provider()             one call per READ; None means cancelled

A single machine is driven by one caller at a time. Between two calls to
step() the state is always consistent, so an external scheduler can stop
at any step boundary.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from .errors import ErrorKind, RAMError
from .loader import parse_program, split_instruction
from .memory import Memory, MemoryObserver
from .registry import InstructionRegistry, get_registry
from .state import ExecutionState

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[int, str], None]
OutputSink = Callable[[str], None]
InputProvider = Callable[[], Optional[Union[int, str]]]


@dataclass
class TraceEntry:
    """Record of one step.

    Attributes:
        step: Step number (0-indexed)
        line: 1-based source line of the step
        instruction: Executable text of the line
        pre_state: State snapshot before the step
        post_state: State snapshot after the step
        memory: Memory snapshot after the step
        output: Lines emitted during the step
        error: Error raised by the step, if any
    """
    step: int
    line: int
    instruction: str
    pre_state: dict
    post_state: dict
    memory: Dict[int, int] = field(default_factory=dict)
    output: List[str] = field(default_factory=list)
    error: Optional[RAMError] = None


def prompt_input() -> Optional[str]:
    """Blocking stdin prompt; end of input counts as cancellation."""
    try:
        return input("Input number: ")
    except EOFError:
        return None


def iter_input(values: Iterable[Union[int, str]]) -> InputProvider:
    """Build an input provider that hands out values in order.

    Once the values are exhausted the provider returns None, which READ
    reports as a cancelled input.
    """
    iterator = iter(values)

    def provider() -> Optional[Union[int, str]]:
        return next(iterator, None)

    return provider


class RAMMachine:
    """Random Access Machine interpreter.

    The program is loaded in the constructor. A load error is reported
    through on_error and raised from the constructor.

    Attributes:
        program: Loaded program lines
        labels: Label name -> 0-based line index
        memory: Sparse memory (address 0 is the accumulator)
        state: Current ExecutionState
        trace: One TraceEntry per attempted step
        output_lines: Every line emitted so far, ready message included
        max_steps: Optional safety limit on executed steps
    """

    READY_MESSAGE = "RAM compiler is ready"

    def __init__(
        self,
        source: str,
        on_memory_change: Optional[MemoryObserver] = None,
        on_error: Optional[ErrorReporter] = None,
        output: Optional[OutputSink] = None,
        input_provider: Optional[InputProvider] = None,
        max_steps: Optional[int] = None
    ):
        """Load a program and prepare a fresh run.

        Args:
            source: RAM assembly source
            on_memory_change: Called with a memory snapshot after every write
            on_error: Called with (1-based line, message) for every error
            output: Called with each output line
            input_provider: Supplies READ values (defaults to a stdin prompt)
            max_steps: Stop with a STEP_LIMIT error after this many steps

        Raises:
            RAMError: INVALID_LABEL if the source has a malformed label
        """
        self.registry: InstructionRegistry = get_registry()
        self.memory = Memory(on_change=on_memory_change)
        self.on_error = on_error
        self.output = output
        self.input_provider = input_provider or prompt_input
        self.max_steps = max_steps
        self.state = ExecutionState()
        self.trace: List[TraceEntry] = []
        self.output_lines: List[str] = []
        self._step_output: List[str] = []

        try:
            self.program, self.labels = parse_program(source)
        except RAMError as e:
            self.program = []
            self.labels = {}
            self.state = self.state.fail()
            self._report(e)
            raise

        self.emit(self.READY_MESSAGE)

    # =========================================================================
    # Collaborator plumbing
    # =========================================================================

    def emit(self, text: str) -> None:
        """Send one line of text to the output sink."""
        self.output_lines.append(text)
        self._step_output.append(text)
        if self.output is not None:
            self.output(text)

    def request_input(self) -> Optional[Union[int, str]]:
        """Ask the input provider for one READ value."""
        return self.input_provider()

    def _report(self, error: RAMError) -> None:
        logger.warning("%s", error)
        if self.on_error is not None:
            self.on_error(error.line, error.message)

    def _fail(self, error: RAMError, instruction: str, pre_state: dict) -> None:
        """Tag, record and report an error; the caller re-raises it."""
        error.at_line(self.state.line)
        self.state = self.state.fail()
        self.trace.append(TraceEntry(
            step=self.state.step_count,
            line=error.line,
            instruction=instruction,
            pre_state=pre_state,
            post_state=self.state.snapshot(),
            memory=self.memory.snapshot(),
            output=self._step_output,
            error=error
        ))
        self._report(error)

    def _precondition_error(self) -> Optional[RAMError]:
        state = self.state
        if state.halted:
            return RAMError(ErrorKind.ALREADY_FINISHED, "Code is already finished")
        if state.errored:
            return RAMError(ErrorKind.ALREADY_FINISHED, "Code has already failed")
        if self.max_steps is not None and state.step_count >= self.max_steps:
            return RAMError(ErrorKind.STEP_LIMIT, f"Max steps ({self.max_steps}) exceeded")
        if state.pc >= len(self.program):
            return RAMError(ErrorKind.END_OF_PROGRAM, "EOF is reached. Did you forget to execute HALT?")
        return None

    # =========================================================================
    # Execution
    # =========================================================================

    def step(self) -> TraceEntry:
        """Execute a single instruction.

        Performs: FETCH -> SPLIT -> EXECUTE

        Returns:
            TraceEntry for the step

        Raises:
            RAMError: Any interpreter error; the machine is errored afterwards
        """
        self._step_output = []
        pre_state = self.state.snapshot()

        error = self._precondition_error()
        if error is not None:
            self._fail(error, "", pre_state)
            raise error

        line = self.program[self.state.pc]
        keyword, args = split_instruction(line.text)

        try:
            new_state = self.registry.execute(self, self.state, keyword, args)
        except RAMError as e:
            self._fail(e, line.text, pre_state)
            raise
        except ValueError as e:
            # int <-> str conversion past the interpreter digit limit
            error = RAMError(ErrorKind.INVALID_OPERAND, f"Value out of range: {e}")
            self._fail(error, line.text, pre_state)
            raise error from e

        self.state = new_state.count_step()
        logger.debug("line %d: %s -> %s", line.number, line.text or "<empty>", self.state)

        entry = TraceEntry(
            step=pre_state["step_count"],
            line=line.number,
            instruction=line.text,
            pre_state=pre_state,
            post_state=self.state.snapshot(),
            memory=self.memory.snapshot(),
            output=self._step_output
        )
        self.trace.append(entry)
        return entry

    # Single-step entry point for external schedulers
    interactive = step

    def run(self) -> List[TraceEntry]:
        """Run until HALT or an error.

        Returns:
            Complete execution trace

        Raises:
            RAMError: The first error met; the machine is errored afterwards
        """
        while not self.state.finished:
            self.step()
        return self.trace

    # =========================================================================
    # Inspection
    # =========================================================================

    def is_halted(self) -> bool:
        return self.state.halted

    def is_errored(self) -> bool:
        return self.state.errored

    def get_pc(self) -> int:
        return self.state.pc

    def current_line(self) -> int:
        """1-based source line of the next instruction."""
        return self.state.line

    def get_memory(self) -> Dict[int, int]:
        return self.memory.snapshot()

    def get_errors(self) -> List[RAMError]:
        return [entry.error for entry in self.trace if entry.error is not None]

    def get_summary(self) -> Dict:
        """Get execution summary.

        Returns:
            Dictionary with execution statistics and final state
        """
        return {
            "steps": self.state.step_count,
            "halted": self.is_halted(),
            "errored": self.is_errored(),
            "pc": self.state.pc,
            "memory": self.get_memory(),
            "output": list(self.output_lines[1:]),
            "trace_length": len(self.trace),
            "errors": [str(e) for e in self.get_errors()],
        }

    def print_trace(self) -> None:
        """Print execution trace in human-readable format."""
        print("=" * 70)
        print("RAM EXECUTION TRACE")
        print("=" * 70)

        previous: Dict[int, int] = {}
        for entry in self.trace:
            status = "OK" if entry.error is None else f"ERROR: {entry.error.message}"
            print(f"\n[Step {entry.step}] line {entry.line} {status}")
            print(f"  Instruction: {entry.instruction}")

            changes = [
                f"r{addr}: {previous.get(addr, '-')} → {value}"
                for addr, value in entry.memory.items()
                if previous.get(addr) != value
            ]
            if changes:
                print(f"  Changes: {', '.join(changes)}")
            previous = entry.memory

            pre_pc = entry.pre_state["pc"]
            post_pc = entry.post_state["pc"]
            if post_pc != pre_pc + 1 and entry.error is None:
                print(f"  PC: {pre_pc} → {post_pc}")
            for text in entry.output:
                print(f"  Output: {text}")

        print("\n" + "=" * 70)
        print("FINAL STATE")
        print("=" * 70)
        print(f"  Memory: {self.memory}")
        print(f"  PC: {self.state.pc}")
        print(f"  Steps: {self.state.step_count}")
        print(f"  Halted: {self.is_halted()}")
        print(f"  Errored: {self.is_errored()}")
