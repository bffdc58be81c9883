"""Tests for Memory and operand resolution."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from ram_machine.errors import ErrorKind, RAMError
from ram_machine.memory import Memory
from ram_machine.operands import parse_numeral, resolve_address, resolve_value

requires_digit_limit = pytest.mark.skipif(
    not hasattr(sys, "get_int_max_str_digits"),
    reason="interpreter has no int/str digit limit"
)


@pytest.fixture
def memory():
    """Memory with r1=2, r2=3, r3=99, r5=-4."""
    mem = Memory()
    mem.write(1, 2)
    mem.write(2, 3)
    mem.write(3, 99)
    mem.write(5, -4)
    return mem


class TestMemory:
    """Test the sparse memory store."""

    def test_read_unwritten_address(self):
        """Memory is not zero-initialised."""
        mem = Memory()
        with pytest.raises(RAMError) as excinfo:
            mem.read(7)
        assert excinfo.value.kind == ErrorKind.MEMORY_UNDEFINED
        assert excinfo.value.message == "Memory 7 is not defined"
        assert len(mem) == 0

    def test_write_then_read(self):
        """Addresses grow on demand."""
        mem = Memory()
        mem.write(1000000, -12)
        assert mem.read(1000000) == -12
        assert 1000000 in mem

    def test_observer_gets_full_snapshot(self):
        """Observer sees every cell, ordered by address, after each write."""
        snapshots = []
        mem = Memory(on_change=snapshots.append)
        mem.write(3, 1)
        mem.write(0, 2)
        assert snapshots == [{3: 1}, {0: 2, 3: 1}]
        assert list(snapshots[1].keys()) == [0, 3]

    def test_snapshot_is_a_copy(self):
        """Modifying a snapshot doesn't affect memory."""
        mem = Memory()
        mem.write(0, 1)
        snapshot = mem.snapshot()
        snapshot[0] = 999
        assert mem.read(0) == 1

    def test_accumulator(self):
        """accumulator reads address 0."""
        mem = Memory()
        mem.write(0, 8)
        assert mem.accumulator == 8

    def test_unwritten_huge_address(self):
        """A huge unwritten address still raises MEMORY_UNDEFINED."""
        mem = Memory()
        with pytest.raises(RAMError) as excinfo:
            mem.read(10 ** 5000)
        assert excinfo.value.kind == ErrorKind.MEMORY_UNDEFINED


class TestParseNumeral:
    """Test leading-integer parsing."""

    def test_plain(self):
        """Plain decimal digits."""
        assert parse_numeral("42") == 42

    def test_negative(self):
        """Leading minus sign."""
        assert parse_numeral("-4") == -4

    def test_trailing_junk_ignored(self):
        """Characters after the digits are dropped."""
        assert parse_numeral("12abc") == 12

    def test_no_digits(self):
        """Text without a leading integer gives None."""
        assert parse_numeral("abc") is None
        assert parse_numeral("") is None

    @requires_digit_limit
    def test_beyond_digit_limit(self):
        """Too many digits to convert gives None, not ValueError."""
        assert parse_numeral("9" * 5000) is None


class TestResolveValue:
    """Test value resolution in all three addressing modes."""

    def test_direct(self, memory):
        """N reads mem[N]."""
        assert resolve_value(memory, "3") == 99

    def test_immediate(self, memory):
        """=N is the literal N."""
        assert resolve_value(memory, "=17") == 17
        assert resolve_value(memory, "=-3") == -3

    def test_indirect(self, memory):
        """*1 reads mem[mem[1]] = mem[2]."""
        assert resolve_value(memory, "*1") == 3

    def test_indirect_matches_direct(self, memory):
        """*A where mem[A] = V resolves like V."""
        assert resolve_value(memory, "*2") == resolve_value(memory, "3")

    def test_indirection_is_single_level(self, memory):
        """The pointed-to value is used as a plain address, never re-dereferenced."""
        assert resolve_value(memory, "*1") != 99

    def test_indirect_huge_pointer(self, memory):
        """A huge pointer is an unwritten address, not a conversion failure."""
        memory.write(6, 10 ** 5000)
        with pytest.raises(RAMError) as excinfo:
            resolve_value(memory, "*6")
        assert excinfo.value.kind == ErrorKind.MEMORY_UNDEFINED

    def test_direct_unwritten(self, memory):
        """Direct read of an unwritten address fails."""
        with pytest.raises(RAMError) as excinfo:
            resolve_value(memory, "8")
        assert excinfo.value.kind == ErrorKind.MEMORY_UNDEFINED

    def test_indirect_through_negative_pointer(self, memory):
        """A negative pointer reads an address that can never be written."""
        with pytest.raises(RAMError) as excinfo:
            resolve_value(memory, "*5")
        assert excinfo.value.message == "Memory -4 is not defined"

    def test_invalid_operand(self, memory):
        """Token without a numeral is INVALID_OPERAND."""
        with pytest.raises(RAMError) as excinfo:
            resolve_value(memory, "abc")
        assert excinfo.value.kind == ErrorKind.INVALID_OPERAND
        assert excinfo.value.message == "Operand abc is invalid"

    @requires_digit_limit
    def test_immediate_beyond_digit_limit(self, memory):
        """An immediate too long to convert is INVALID_OPERAND."""
        with pytest.raises(RAMError) as excinfo:
            resolve_value(memory, "=" + "9" * 5000)
        assert excinfo.value.kind == ErrorKind.INVALID_OPERAND

    def test_does_not_mutate(self, memory):
        """Resolution never writes memory."""
        before = memory.snapshot()
        resolve_value(memory, "*1")
        resolve_value(memory, "=5")
        assert memory.snapshot() == before


class TestResolveAddress:
    """Test address resolution."""

    def test_direct(self, memory):
        """N names address N, written or not."""
        assert resolve_address(memory, "8") == 8

    def test_indirect(self, memory):
        """*1 names address mem[1]."""
        assert resolve_address(memory, "*1") == 2

    def test_indirect_matches_direct(self, memory):
        """*A where mem[A] = V names the same address as V."""
        assert resolve_address(memory, "*2") == resolve_address(memory, "3")

    def test_immediate_is_not_an_address(self, memory):
        """=N can be read but never written."""
        with pytest.raises(RAMError) as excinfo:
            resolve_address(memory, "=1")
        assert excinfo.value.kind == ErrorKind.INVALID_ADDRESS
        assert excinfo.value.message == "Invalid address"

    def test_negative_address(self, memory):
        """A negative pointer is not a valid write target."""
        with pytest.raises(RAMError) as excinfo:
            resolve_address(memory, "*5")
        assert excinfo.value.kind == ErrorKind.INVALID_ADDRESS

    def test_indirect_huge_pointer(self, memory):
        """A huge pointer value is returned as-is."""
        memory.write(6, 10 ** 5000)
        assert resolve_address(memory, "*6") == 10 ** 5000

    def test_indirect_unwritten_pointer(self, memory):
        """The pointer cell itself must be defined."""
        with pytest.raises(RAMError) as excinfo:
            resolve_address(memory, "*9")
        assert excinfo.value.kind == ErrorKind.MEMORY_UNDEFINED
