"""Tests for ExecutionState dataclass."""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import dataclasses

import pytest
from ram_machine.state import ExecutionState


class TestExecutionStateCreation:
    """Test ExecutionState initialization and defaults."""

    def test_default_state(self):
        """Fresh state is ready: pc 0, no flags set."""
        state = ExecutionState()
        assert state.pc == 0
        assert state.step_count == 0
        assert state.halted is False
        assert state.errored is False
        assert state.finished is False

    def test_line_is_one_based(self):
        assert ExecutionState(pc=4).line == 5

    def test_frozen(self):
        state = ExecutionState()
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.pc = 3


class TestExecutionStateTransitions:
    """Test immutable state operations."""

    def test_advance_returns_new_state(self):
        state = ExecutionState()
        new_state = state.advance()
        assert state.pc == 0  # Original unchanged
        assert new_state.pc == 1

    def test_jump(self):
        new_state = ExecutionState(pc=7).jump(2)
        assert new_state.pc == 2

    def test_halt_keeps_pc(self):
        state = ExecutionState(pc=3)
        new_state = state.halt()
        assert state.halted is False
        assert new_state.halted is True
        assert new_state.pc == 3
        assert new_state.finished is True

    def test_fail_is_sticky(self):
        state = ExecutionState(pc=2).fail()
        assert state.errored is True
        assert state.advance().errored is True
        assert state.jump(0).errored is True
        assert state.finished is True

    def test_count_step(self):
        state = ExecutionState()
        new_state = state.count_step()
        assert state.step_count == 0
        assert new_state.step_count == 1
        assert new_state.pc == 0


class TestExecutionStateSnapshot:
    """Test state snapshot for tracing."""

    def test_snapshot(self):
        state = ExecutionState(pc=5, halted=True, step_count=9)
        assert state.snapshot() == {
            "pc": 5,
            "halted": True,
            "errored": False,
            "step_count": 9,
        }

    def test_str(self):
        assert str(ExecutionState(pc=2, step_count=4)) == "[Step 4] PC=2"
        assert str(ExecutionState(halted=True)) == "[Step 0] PC=0 HALTED"
