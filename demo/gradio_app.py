"""RAM Machine Interactive Demo.

A Gradio web interface for stepping through RAM programs.

Usage:
    cd /path/to/ram-machine
    python demo/gradio_app.py

Features:
    - Write or load RAM programs
    - Supply READ values up front
    - Step one instruction at a time or run to completion
    - Watch memory and console after every step
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from ram_machine import RAMError, RAMMachine, iter_input


# =============================================================================
# Example Programs
# =============================================================================

PROGRAMS_DIR = Path(__file__).parent.parent / "programs"

EXAMPLE_PROGRAMS = {
    "Factorial": ("factorial.ram", "5"),
    "Sum 1..n": ("sum_to_n.ram", "10"),
    "Reverse (indirect)": ("reverse.ram", "4, 7, 8, 9, 10"),
    "Custom": (None, ""),
}

DEMO_MAX_STEPS = 10000


# =============================================================================
# Execution Functions
# =============================================================================

def format_memory(machine: RAMMachine) -> str:
    """Render memory as one register per line."""
    if machine is None:
        return ""
    lines = ["MEMORY", "=" * 30]
    for address, value in machine.get_memory().items():
        name = "r0 (acc)" if address == 0 else f"r{address}"
        lines.append(f"  {name:<10} {value:>12}")
    return "\n".join(lines)


def format_console(machine: RAMMachine) -> str:
    lines = list(machine.output_lines)
    for error in machine.get_errors():
        lines.append(str(error))
    return "\n".join(lines)


def format_status(machine: RAMMachine) -> str:
    state = machine.state
    if state.errored:
        return f"**Errored** after {state.step_count} steps"
    if state.halted:
        return f"**Halted** after {state.step_count} steps"
    if state.pc < len(machine.program):
        line = machine.program[state.pc]
        return f"Next: line {line.number} `{line.source.strip() or '(empty)'}`"
    return f"Next: line {machine.current_line()} (end of program)"


def render(machine: RAMMachine, error_msg: str = None) -> tuple:
    status = format_status(machine)
    if error_msg:
        status += f"\n\nRuntime: {error_msg}"
    return machine, format_console(machine), format_memory(machine), status


def load_program(source: str, input_values: str) -> tuple:
    """Build a fresh machine for the source and input values.

    Returns:
        Tuple of (machine, console_text, memory_text, status_text)
    """
    values = [value.strip() for value in input_values.split(",") if value.strip()]
    try:
        machine = RAMMachine(source, input_provider=iter_input(values), max_steps=DEMO_MAX_STEPS)
    except RAMError as e:
        return None, str(e), "", "**Load failed**"
    return render(machine)


def step_program(machine: RAMMachine) -> tuple:
    """Execute one instruction of the loaded machine."""
    if machine is None:
        return None, "Load a program first", "", ""
    try:
        machine.step()
    except RAMError as e:
        return render(machine, str(e))
    return render(machine)


def run_program(machine: RAMMachine) -> tuple:
    """Run the loaded machine until HALT or an error."""
    if machine is None:
        return None, "Load a program first", "", ""
    try:
        machine.run()
    except RAMError as e:
        return render(machine, str(e))
    return render(machine)


def load_example(example_name: str) -> tuple:
    """Load an example program and its input values."""
    filename, input_values = EXAMPLE_PROGRAMS.get(example_name, (None, ""))
    if filename is None:
        return "", input_values
    return (PROGRAMS_DIR / filename).read_text(), input_values


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio demo interface."""

    initial_source, initial_inputs = load_example("Factorial")

    with gr.Blocks(title="RAM Machine Demo", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # RAM Machine

        An interpreter for the Random Access Machine used in algorithm analysis.
        Memory is unbounded; address 0 is the accumulator.
        """)

        machine_state = gr.State(None)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### Program")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_PROGRAMS.keys()),
                    value="Factorial",
                    label="Load Example"
                )

                program_input = gr.Textbox(
                    value=initial_source,
                    label="Source Code",
                    lines=18,
                    placeholder="Enter RAM code here..."
                )

                input_values = gr.Textbox(
                    value=initial_inputs,
                    label="READ values (comma separated)"
                )

                with gr.Row():
                    load_button = gr.Button("Load", variant="primary")
                    step_button = gr.Button("Step")
                    run_button = gr.Button("Run")

            with gr.Column(scale=3):
                status_output = gr.Markdown("Load a program to start")
                with gr.Row():
                    console_output = gr.Textbox(
                        label="Console",
                        lines=16,
                        interactive=False
                    )
                    memory_output = gr.Textbox(
                        label="Memory",
                        lines=16,
                        interactive=False
                    )

        with gr.Accordion("Instruction Reference", open=False):
            gr.Markdown("""
            | Instruction | Description | Example |
            |-------------|-------------|---------|
            | `LOAD x` | r0 = value(x) | `LOAD =5` |
            | `STORE x` | mem[x] = r0 | `STORE 1` |
            | `ADD x` / `SUB x` | r0 = r0 +/- value(x) | `ADD 1` |
            | `MULT x` / `DIV x` | r0 = r0 * value(x), floor division | `DIV =2` |
            | `JUMP L` | Jump to label | `JUMP loop` |
            | `JZERO L` | Jump if r0 == 0 | `JZERO done` |
            | `JGTZ L` | Jump if r0 > 0 | `JGTZ loop` |
            | `SJ X,Y,Z` | mem[X] = X - Y, jump to Z if zero | `SJ 3,5,done` |
            | `READ x` | mem[x] = next input | `READ 1` |
            | `WRITE x` | Output value(x) | `WRITE 0` |
            | `HALT` | Stop execution | `HALT` |

            **Operands**: `N` direct, `*N` indirect, `=N` immediate
            **Labels**: `name:` before the instruction
            **Comments**: from `;` to end of line
            """)

        outputs = [machine_state, console_output, memory_output, status_output]

        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[program_input, input_values]
        )

        load_button.click(
            fn=load_program,
            inputs=[program_input, input_values],
            outputs=outputs
        )

        step_button.click(fn=step_program, inputs=[machine_state], outputs=outputs)
        run_button.click(fn=run_program, inputs=[machine_state], outputs=outputs)

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )
