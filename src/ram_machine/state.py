"""ExecutionState: program counter and lifecycle flags of one RAM run.

State Components:
    - pc: 0-based index into the loaded program
    - halted: HALT has executed
    - errored: an error was reported (sticky)
    - step_count: number of steps attempted

Lifecycle: Ready -> Running -> {Halted | Errored}. Once either flag is set
the run is finished and no further instruction may execute. All updates
return new state objects so trace entries can hold the state before and
after each step.

Memory is not part of this object: it lives in a Memory store owned by
the same machine.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionState:
    """Immutable execution state.

    Attributes:
        pc: Program counter (0-based line index)
        halted: Whether HALT has executed
        errored: Whether an error has been reported
        step_count: Number of steps executed so far
    """
    pc: int = 0
    halted: bool = False
    errored: bool = False
    step_count: int = 0

    @property
    def finished(self) -> bool:
        """True once the run is halted or errored."""
        return self.halted or self.errored

    @property
    def line(self) -> int:
        """1-based source line of the instruction at pc."""
        return self.pc + 1

    def snapshot(self) -> dict:
        """Plain-dict copy of the state for tracing."""
        return {
            "pc": self.pc,
            "halted": self.halted,
            "errored": self.errored,
            "step_count": self.step_count,
        }

    def advance(self) -> "ExecutionState":
        """Create new state with pc moved to the next line."""
        return ExecutionState(
            pc=self.pc + 1,
            halted=self.halted,
            errored=self.errored,
            step_count=self.step_count
        )

    def jump(self, target: int) -> "ExecutionState":
        """Create new state with pc set to a line index.

        Args:
            target: 0-based line index (a label's value)
        """
        return ExecutionState(
            pc=target,
            halted=self.halted,
            errored=self.errored,
            step_count=self.step_count
        )

    def halt(self) -> "ExecutionState":
        """Create new state with the halted flag set; pc is unchanged."""
        return ExecutionState(
            pc=self.pc,
            halted=True,
            errored=self.errored,
            step_count=self.step_count
        )

    def fail(self) -> "ExecutionState":
        """Create new state with the errored flag set; pc is unchanged."""
        return ExecutionState(
            pc=self.pc,
            halted=self.halted,
            errored=True,
            step_count=self.step_count
        )

    def count_step(self) -> "ExecutionState":
        return ExecutionState(
            pc=self.pc,
            halted=self.halted,
            errored=self.errored,
            step_count=self.step_count + 1
        )

    def __str__(self) -> str:
        status = "HALTED" if self.halted else "ERRORED" if self.errored else ""
        return f"[Step {self.step_count}] PC={self.pc} {status}".rstrip()
