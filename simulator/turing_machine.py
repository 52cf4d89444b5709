from collections import deque
from enum import Enum
from types import MappingProxyType
from typing import Hashable, NamedTuple

import numpy as np

from simulator.errors import InvalidSymbolError, OutOfBoundsError

START = "START"
HALT = "HALT"
UNRECOGNIZED = "UNRECOGNIZED"
BLANK = "_"

# Preallocated so small machines never pay for tape growth.
DEFAULT_TAPE_CAPACITY = 2048


class Direction(Enum):
    LEFT = "L"
    RIGHT = "R"

    @property
    def offset(self):
        return -1 if self is Direction.LEFT else 1

    @property
    def inverse(self):
        return Direction.RIGHT if self is Direction.LEFT else Direction.LEFT

    @classmethod
    def parse(cls, value):
        """Accept a Direction, 'L'/'R' or 'left'/'right' (any case)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        if text in ("L", "LEFT"):
            return cls.LEFT
        if text in ("R", "RIGHT"):
            return cls.RIGHT
        raise ValueError(f"Unknown direction {value!r}, expected 'L' or 'R'.")


class Status(Enum):
    RUNNING = "running"
    HALTED = "halted"
    STUCK = "stuck"


class Transition(NamedTuple):
    write: str
    move: Direction
    next_state: Hashable


class UndoEntry(NamedTuple):
    """Inverse of one committed transition."""
    symbol: str
    move: Direction
    state: Hashable


def check_symbol(symbol):
    # "<U1" storage drops NUL, so it could never be read back
    if not isinstance(symbol, str) or len(symbol) != 1 or symbol == "\x00":
        raise InvalidSymbolError(symbol)
    return symbol


class TuringMachine:
    """
    Deterministic single-tape Turing machine with step-back support.

    The tape is a fixed-capacity buffer of single-character symbols, every
    cell starting out blank. Each committed ``forward()`` pushes the exact
    inverse of the applied transition onto the undo history, so
    ``backward()`` restores the previous tape cell, cursor and control state.
    Running off either end of the tape raises ``OutOfBoundsError`` before
    anything is mutated.
    """

    def __init__(self, capacity=DEFAULT_TAPE_CAPACITY, blank=BLANK, history_limit=None):
        if capacity <= 0:
            raise ValueError(f"Tape capacity must be positive, got {capacity}.")
        if history_limit is not None and history_limit <= 0:
            raise ValueError(f"History limit must be positive or None, got {history_limit}.")
        self.blank = check_symbol(blank)
        self.history_limit = history_limit
        self._tape = np.full(capacity, self.blank, dtype="<U1")
        self._transitions = {}
        self._history = deque(maxlen=history_limit)
        self._cursor = 0
        self._state = START
        self._status = Status.RUNNING

    @classmethod
    def from_text(cls, text, **kwargs):
        machine = cls(**kwargs)
        machine.set_tape(text)
        return machine

    # --- introspection ---

    @property
    def capacity(self):
        return self._tape.shape[0]

    @property
    def cursor(self):
        return self._cursor

    @property
    def current_state(self):
        """Last control state entered. When stuck, the state that had no matching rule."""
        return self._state

    @property
    def status(self):
        return self._status

    @property
    def state_label(self):
        if self._status is Status.STUCK:
            return UNRECOGNIZED
        return str(self._state)

    @property
    def is_halted(self):
        return self._status is Status.HALTED

    @property
    def is_stuck(self):
        return self._status is Status.STUCK

    @property
    def is_terminal(self):
        return self._status is not Status.RUNNING

    @property
    def tape(self):
        """Read-only view of the whole tape."""
        view = self._tape.view()
        view.flags.writeable = False
        return view

    @property
    def history(self):
        return tuple(self._history)

    @property
    def transitions(self):
        return MappingProxyType(self._transitions)

    def contents(self):
        """Tape text up to and including the last non-blank cell."""
        written = np.flatnonzero(self._tape != self.blank)
        if written.size == 0:
            return ""
        return "".join(self._tape[:written[-1] + 1].tolist())

    def window(self, radius=10):
        """(position, symbol) pairs around the cursor, clipped to the tape."""
        lo = max(0, self._cursor - radius)
        hi = min(self.capacity, self._cursor + radius + 1)
        return [(pos, str(self._tape[pos])) for pos in range(lo, hi)]

    # --- configuration ---

    def set_tape(self, text):
        """Write ``text`` into the leading cells. Cursor and state are untouched."""
        symbols = list(text)
        if len(symbols) > self.capacity:
            raise OutOfBoundsError(len(symbols) - 1, self.capacity)
        for symbol in symbols:
            check_symbol(symbol)
        self._tape[:len(symbols)] = symbols

    def add_transition(self, state, expected_symbol, transition):
        """Register (or replace) the rule for ``(state, expected_symbol)``."""
        check_symbol(expected_symbol)
        try:
            write, move, next_state = transition
        except (TypeError, ValueError) as e:
            raise ValueError(f"Transition must be (write, move, next_state), got {transition!r}.") from e
        transition = Transition(check_symbol(write), Direction.parse(move), next_state)
        self._transitions[(state, expected_symbol)] = transition

    def add_rule(self, state, symbol, new_symbol, direction, new_state):
        self.add_transition(state, symbol, Transition(new_symbol, Direction.parse(direction), new_state))

    def lookup(self, state, symbol):
        return self._transitions.get((state, symbol))

    # --- tape access ---

    def _check_position(self, position):
        if not 0 <= position < self.capacity:
            raise OutOfBoundsError(position, self.capacity)

    def read(self):
        self._check_position(self._cursor)
        return str(self._tape[self._cursor])

    def write(self, symbol):
        check_symbol(symbol)
        self._check_position(self._cursor)
        self._tape[self._cursor] = symbol

    def step(self, symbol, direction):
        """
        Write ``symbol`` under the cursor, then move one cell.

        A raw tape edit: no rule lookup, no state change and nothing is
        pushed onto the undo history.
        """
        check_symbol(symbol)
        target = self._cursor + Direction.parse(direction).offset
        self._check_position(self._cursor)
        self._check_position(target)
        self._tape[self._cursor] = symbol
        self._cursor = target

    # --- execution ---

    def forward(self):
        """
        Apply the rule matching the current state and symbol.

        Returns True when a transition was committed. Returns False without
        touching anything when the machine is halted or stuck; a missing
        rule moves the machine into the stuck state.
        """
        if self._status is not Status.RUNNING:
            return False

        symbol = self.read()
        transition = self._transitions.get((self._state, symbol))
        if transition is None:
            self._status = Status.STUCK
            return False

        target = self._cursor + transition.move.offset
        self._check_position(target)

        self._history.append(UndoEntry(symbol, transition.move.inverse, self._state))
        self._tape[self._cursor] = transition.write
        self._cursor = target
        self._state = transition.next_state
        self._status = Status.HALTED if transition.next_state == HALT else Status.RUNNING
        return True

    def backward(self):
        """Undo the most recent committed forward step. Returns False if there is none."""
        if not self._history:
            return False

        entry = self._history[-1]
        target = self._cursor + entry.move.offset
        self._check_position(target)

        self._history.pop()
        self._cursor = target
        self._tape[target] = entry.symbol
        self._state = entry.state
        self._status = Status.HALTED if entry.state == HALT else Status.RUNNING
        return True

    def run(self, max_steps=10000):
        """Step until the machine halts, gets stuck, or ``max_steps`` steps are committed."""
        steps = 0
        while not self.is_terminal and steps < max_steps:
            if self.forward():
                steps += 1
        return steps

    def reset(self):
        """Blank the tape and return to START. Transitions are kept."""
        self._tape[:] = self.blank
        self._history.clear()
        self._cursor = 0
        self._state = START
        self._status = Status.RUNNING

    def __repr__(self):
        return (f"{type(self).__name__}(state={self.state_label!r}, cursor={self._cursor}, "
                f"rules={len(self._transitions)}, history={len(self._history)})")
