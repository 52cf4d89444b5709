from dataclasses import dataclass

import numpy as np

from simulator.errors import OutOfBoundsError
from simulator.turing_machine import Status


@dataclass
class RunResult:
    steps: int
    status: Status
    state: str
    cursor: int
    tape: str
    out_of_bounds: bool = False

    @property
    def halted(self):
        return self.status is Status.HALTED

    @property
    def stuck(self):
        return self.status is Status.STUCK

    def to_dict(self):
        return {
            "steps_taken": self.steps,
            "status": self.status.value,
            "state": self.state,
            "cursor": self.cursor,
            "tape": self.tape,
            "out_of_bounds": self.out_of_bounds,
        }


def run_machine(machine, max_steps=10000):
    """
    Drive one machine until it halts, gets stuck, falls off the tape or
    commits ``max_steps`` steps. Running off the tape ends the run instead
    of propagating; the machine is left in its last valid configuration.
    """
    steps = 0
    out_of_bounds = False
    while not machine.is_terminal and steps < max_steps:
        try:
            if machine.forward():
                steps += 1
        except OutOfBoundsError:
            out_of_bounds = True
            break

    return RunResult(
        steps=steps,
        status=machine.status,
        state=machine.state_label,
        cursor=machine.cursor,
        tape=machine.contents(),
        out_of_bounds=out_of_bounds,
    )


def evaluate_batch(machines, max_steps=10000):
    """
    Run a list of independent machines.
    Returns numpy arrays: steps, halted, stuck, out_of_bounds (one row per machine).
    """
    num_machines = len(machines)

    steps = np.zeros((num_machines,), dtype=np.int64)
    halts = np.zeros((num_machines,), dtype=np.bool_)
    stuck = np.zeros((num_machines,), dtype=np.bool_)
    out_of_bounds = np.zeros((num_machines,), dtype=np.bool_)

    for idx, machine in enumerate(machines):
        result = run_machine(machine, max_steps=max_steps)
        steps[idx] = result.steps
        halts[idx] = result.halted
        stuck[idx] = result.stuck
        out_of_bounds[idx] = result.out_of_bounds

    return {"steps": steps, "halted": halts, "stuck": stuck, "out_of_bounds": out_of_bounds}
