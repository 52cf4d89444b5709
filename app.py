# app.py

import argparse
import sys

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt, IntPrompt
from rich.text import Text

from config.config_loader import DEFAULT_CONFIG, load_config, machine_options
from simulator.errors import OutOfBoundsError, SimulatorError
from simulator.evaluator import run_machine
from simulator.turing_machine import Status
from tools.machine_loader import load_definition, build_machine, render_transition_table

console = Console()

STATUS_COLOR = {
    Status.RUNNING: "cyan",
    Status.HALTED: "green",
    Status.STUCK: "red",
}

# === Rendering ===
def render_tape(machine, window=10):
    """Cells around the cursor with the head marked on the line below."""
    tape_line = Text()
    head_line = Text()
    for pos, symbol in machine.window(window):
        if pos == machine.cursor:
            tape_line.append(f"{symbol} ", style="bold reverse")
            head_line.append("^ ", style="bold yellow")
        else:
            tape_line.append(f"{symbol} ")
            head_line.append("  ")
    return tape_line, head_line

def show_machine(machine, window=10):
    tape_line, head_line = render_tape(machine, window)
    console.print(tape_line)
    console.print(head_line)
    color = STATUS_COLOR[machine.status]
    console.print(f"State: [{color}]{escape(machine.state_label)}[/{color}]  "
                  f"Cursor: {machine.cursor}  Undo depth: {len(machine.history)}")

def show_menu():
    console.print("\n[bold cyan]Turing Machine Simulator[/bold cyan]")
    console.print(escape("[f] Forward   [b] Backward   [r] Run   [t] Rules   [x] Reset   [q] Quit"))

# === Interactive Mode ===
def interactive_main(machine, tape_text, config):
    show_machine(machine)

    while True:
        show_menu()
        choice = Prompt.ask("\nChoose an option", choices=["f", "b", "r", "t", "x", "q"], default="f")

        try:
            if choice == "f":
                if not machine.forward():
                    console.print("[yellow]No transition applied: machine is "
                                  f"{machine.status.value}.[/yellow]")
            elif choice == "b":
                if not machine.backward():
                    console.print("[yellow]Nothing to undo.[/yellow]")
            elif choice == "r":
                limit = IntPrompt.ask("Max Steps", default=config["max_steps"])
                steps = machine.run(limit)
                console.print(f"[cyan]Committed {steps:,} steps.[/cyan]")
            elif choice == "t":
                console.print(render_transition_table(machine))
                continue
            elif choice == "x":
                machine.reset()
                machine.set_tape(tape_text)
            elif choice == "q":
                console.print("[bold green]Goodbye![/bold green]")
                break
        except OutOfBoundsError as e:
            console.print(f"[red]Out of bounds: {escape(str(e))}[/red]")

        show_machine(machine)

# === CLI Mode for Automation ===
def cli_main(machine, max_steps):
    result = run_machine(machine, max_steps=max_steps)
    show_machine(machine)
    if result.out_of_bounds:
        console.print("[red]Stopped: the head ran off the tape.[/red]")
    console.print(f"Steps: {result.steps:,}  Status: {result.status.value}")
    console.print(f"Tape: {escape(result.tape)}")
    return 0 if result.halted else 1

def main(argv=None):
    parser = argparse.ArgumentParser(description="Deterministic single-tape Turing machine simulator")
    parser.add_argument("machine", help="Machine definition (JSON)")
    parser.add_argument("--tape", default=None, help="Initial tape text (overrides the definition)")
    parser.add_argument("--run", action="store_true", help="Run to completion instead of stepping interactively")
    parser.add_argument("--max-steps", type=int, default=None, help="Step limit for --run")
    parser.add_argument("--config", default=None, help="Runtime config JSON")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else DEFAULT_CONFIG
        definition = load_definition(args.machine)
        if args.tape is not None:
            definition["tape"] = args.tape
        machine = build_machine(definition, machine_options(config))
    except (SimulatorError, FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 2

    if args.run:
        max_steps = config["max_steps"] if args.max_steps is None else args.max_steps
        return cli_main(machine, max_steps)

    interactive_main(machine, definition.get("tape", ""), config)
    return 0

if __name__ == "__main__":
    sys.exit(main())
