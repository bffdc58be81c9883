#!/usr/bin/env python3
"""RAM Machine Command Line Interface.

Run RAM assembly programs to completion.

Usage:
    python main.py --program programs/factorial.ram --input 5
    python main.py --inline "LOAD =6|MULT =7|WRITE 0|HALT"
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from ram_machine import RAMError, RAMMachine, iter_input
from ram_machine.registry import HALT_MESSAGES

DEFAULT_MAX_STEPS = 100000


def main():
    parser = argparse.ArgumentParser(
        description="RAM Machine: Random Access Machine interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Factorial of 5, input given on the command line
    python main.py --program programs/factorial.ram --input 5

    # Same program, prompting for READ values on stdin
    python main.py --program programs/factorial.ram

    # Full execution trace
    python main.py --program programs/reverse.ram --input 3,1,2,3 --trace

    # Inline program (instructions separated by |)
    python main.py --inline "LOAD =6|MULT =7|WRITE 0|HALT"
        """
    )

    parser.add_argument(
        "--program", "-p",
        type=str,
        help="Path to RAM program file (.ram)"
    )
    parser.add_argument(
        "--inline", "-i",
        type=str,
        help="Inline program (separate instructions with |)"
    )
    parser.add_argument(
        "--input",
        type=str,
        help="Comma-separated values for READ. Default: prompt on stdin"
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help=f"Maximum execution steps (safety limit, 0 for none). Default: {DEFAULT_MAX_STEPS}"
    )
    parser.add_argument(
        "--trace", "-t",
        action="store_true",
        help="Print full execution trace"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output (program output only)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every executed step"
    )

    args = parser.parse_args()

    if not args.program and not args.inline:
        parser.error("Either --program or --inline is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.program:
        program_path = Path(args.program)
        if not program_path.exists():
            print(f"Error: Program file not found: {args.program}")
            return 1
        source = program_path.read_text()
        if not args.quiet:
            print(f"Loading program: {args.program}")
    else:
        source = args.inline.replace("|", "\n")
        if not args.quiet:
            print("Running inline program")

    input_provider = None
    if args.input is not None:
        input_provider = iter_input(value.strip() for value in args.input.split(",") if value.strip())

    try:
        machine = RAMMachine(
            source,
            output=None if args.quiet else print,
            input_provider=input_provider,
            max_steps=args.max_steps or None
        )
    except RAMError as e:
        print(f"Load error: {e}")
        return 1

    if not args.quiet:
        print("-" * 60)

    try:
        machine.run()
    except RAMError as e:
        print(f"Execution error: {e}")

    if args.trace:
        machine.print_trace()
    elif args.quiet:
        for text in machine.output_lines[1:]:
            if text not in HALT_MESSAGES:
                print(text)
    else:
        summary = machine.get_summary()
        print()
        print(f"Steps: {summary['steps']}")
        print(f"Halted: {summary['halted']}")
        print(f"Memory: {machine.memory}")

    return 0 if machine.is_halted() else 1


if __name__ == "__main__":
    sys.exit(main())
