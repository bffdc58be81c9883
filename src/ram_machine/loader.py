"""Program loader for RAM assembly source.

Turns raw source text into an ordered list of ProgramLine records and a
label table. Loading keeps one record per physical line, so the program
counter doubles as a 0-based line index and error line numbers map
straight back to the source.

Line syntax:
    [label:] KEYWORD [operand[,operand...]] [; comment]
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .errors import ErrorKind, RAMError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgramLine:
    """One physical line of a loaded program.

    Attributes:
        number: 1-based source line number
        source: Original line text
        text: Executable text (label and comment stripped, may be empty)
    """
    number: int
    source: str
    text: str


def parse_program(source: str) -> Tuple[List[ProgramLine], Dict[str, int]]:
    """Parse RAM source code into program lines and a label table.

    Handles:
        - Trailing carriage returns and leading whitespace
        - Comments (from the first ``;`` to end of line)
        - Labels (``name:`` before the instruction, on the same line)

    Labels map to the 0-based index of the line they appear on. A label
    defined twice keeps the later index.

    Args:
        source: RAM assembly source code

    Returns:
        Tuple of (list of ProgramLine, label-to-index dict)

    Raises:
        RAMError: INVALID_LABEL if a label name contains a space or tab
    """
    program: List[ProgramLine] = []
    labels: Dict[str, int] = {}

    for index, raw in enumerate(source.split("\n")):
        line = raw[:-1] if raw.endswith("\r") else raw
        original = line
        line = line.lstrip()
        line = line.split(";", 1)[0]

        if ":" in line:
            label, *rest = line.split(":")
            if " " in label or "\t" in label:
                raise RAMError(ErrorKind.INVALID_LABEL, f"Label {label} is invalid", line=index + 1)
            if label in labels:
                logger.debug("label %r redefined at line %d", label, index + 1)
            labels[label] = index
            line = " ".join(rest)

        program.append(ProgramLine(number=index + 1, source=original, text=line.strip()))

    logger.debug("loaded %d lines, %d labels", len(program), len(labels))
    return program, labels


def split_instruction(text: str) -> Tuple[str, List[str]]:
    """Split executable text into a keyword and its operand tokens.

    Operands are joined with all whitespace removed and then split on
    commas, so ``SJ 1, 2, done`` gives ``["1", "2", "done"]``.

    Args:
        text: Executable text of one line

    Returns:
        Tuple of (keyword, operand list); ("", []) for an empty line
    """
    text = text.split(";", 1)[0].strip()
    if not text:
        return "", []

    parts = text.split(None, 1)
    keyword = parts[0]
    operands = "".join(parts[1].split()) if len(parts) > 1 else ""
    return keyword, operands.split(",") if operands else []
