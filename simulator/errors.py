class SimulatorError(Exception):
    """Base class for every error raised by the simulator package."""


class OutOfBoundsError(SimulatorError, IndexError):
    """The cursor would leave (or already sits outside) the tape."""

    def __init__(self, position, capacity):
        self.position = position
        self.capacity = capacity
        super().__init__(f"Tape position {position} is outside the tape (capacity {capacity}).")


class InvalidSymbolError(SimulatorError, ValueError):
    def __init__(self, symbol):
        self.symbol = symbol
        super().__init__(f"Tape symbols must be single characters, got {symbol!r}.")


class MachineDefinitionError(SimulatorError, ValueError):
    pass
