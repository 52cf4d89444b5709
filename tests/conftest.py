from pathlib import Path

import pytest

from simulator.turing_machine import TuringMachine

MACHINES_DIR = Path(__file__).resolve().parent.parent / "machines"


def binary_increment(tape="#1011", **kwargs):
    """Adds one to the binary number after the '#' marker."""
    tm = TuringMachine.from_text(tape, **kwargs)
    tm.add_rule("START", "#", "#", "R", "SCAN")
    tm.add_rule("SCAN", "0", "0", "R", "SCAN")
    tm.add_rule("SCAN", "1", "1", "R", "SCAN")
    tm.add_rule("SCAN", "_", "_", "L", "CARRY")
    tm.add_rule("CARRY", "1", "0", "L", "CARRY")
    tm.add_rule("CARRY", "0", "1", "R", "HALT")
    return tm


@pytest.fixture
def increment():
    return binary_increment()


@pytest.fixture
def machines_dir():
    return MACHINES_DIR


@pytest.fixture
def make_increment():
    return binary_increment
