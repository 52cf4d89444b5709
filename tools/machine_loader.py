import json
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from simulator.errors import MachineDefinitionError, SimulatorError
from simulator.turing_machine import HALT, START, TuringMachine

RULE_FIELDS = ("state", "read", "write", "move", "next")


def parse_rule(rule):
    """Accept [state, read, write, move, next] or the same keys as an object."""
    if isinstance(rule, dict):
        missing = [field for field in RULE_FIELDS if field not in rule]
        if missing:
            raise MachineDefinitionError(f"Rule {rule!r} is missing {', '.join(missing)}.")
        return tuple(rule[field] for field in RULE_FIELDS)
    if isinstance(rule, (list, tuple)) and len(rule) == len(RULE_FIELDS):
        return tuple(rule)
    raise MachineDefinitionError(f"Rule {rule!r} must be a 5-item list or an object with {RULE_FIELDS}.")


def build_machine(definition, options=None):
    """
    Build a TuringMachine from a parsed definition.

    ``options`` are TuringMachine keyword arguments (usually from the runtime
    config); ``capacity`` and ``blank`` in the definition take precedence.
    """
    if not isinstance(definition, dict):
        raise MachineDefinitionError("Machine definition must be a JSON object.")
    rules = definition.get("transitions")
    if not isinstance(rules, list):
        raise MachineDefinitionError("Machine definition needs a 'transitions' list.")

    kwargs = dict(options or {})
    if "capacity" in definition:
        kwargs["capacity"] = definition["capacity"]
    if "blank" in definition:
        kwargs["blank"] = definition["blank"]

    try:
        machine = TuringMachine(**kwargs)
        for rule in rules:
            state, read, write, move, next_state = parse_rule(rule)
            machine.add_rule(state, read, write, move, next_state)
        machine.set_tape(definition.get("tape", ""))
    except MachineDefinitionError:
        raise
    except (SimulatorError, ValueError) as e:
        raise MachineDefinitionError(f"Invalid machine definition: {e}") from e

    return machine


def load_definition(path):
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Machine definition {path} not found.")
    with open(path, "r", encoding="utf-8") as f:
        try:
            definition = json.load(f)
        except json.JSONDecodeError as e:
            raise MachineDefinitionError(f"{path} is not valid JSON: {e}") from e
    if isinstance(definition, dict):
        definition.setdefault("name", path.stem)
    return definition


def load_machine(path, options=None):
    return build_machine(load_definition(path), options)


def render_transition_table(machine, title="Transition Table"):
    """State x symbol grid in compact write/move/next notation, e.g. '1RB'."""
    states = []
    symbols = []
    for state, symbol in machine.transitions:
        if state not in states:
            states.append(state)
        if symbol not in symbols:
            symbols.append(symbol)
    # START row first
    states.sort(key=lambda s: s != START)
    symbols.sort()

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("State", justify="left")
    for symbol in symbols:
        table.add_column(escape(repr(symbol)), justify="center")

    for state in states:
        row = [escape(str(state))]
        for symbol in symbols:
            transition = machine.lookup(state, symbol)
            if transition is None:
                row.append("---")
            else:
                action = escape(f"{transition.write}{transition.move.value}{transition.next_state}")
                row.append(f"[green]{action}[/green]" if transition.next_state == HALT else action)
        table.add_row(*row)
    return table
