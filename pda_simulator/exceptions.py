class PdaError(Exception):
    """Base class for every error raised by the PDA simulator."""


class DefinitionError(PdaError):
    """The PDA definition cannot be turned into a configuration."""


class NonDeterministicTransitionError(DefinitionError):
    """A state has more than one applicable move for the same stack top."""


class UndefinedStateError(DefinitionError):
    """A transition references a state that was not declared."""


class UndefinedSymbolError(DefinitionError):
    """A transition references an input or stack symbol that was not declared."""


class MalformedTransitionError(DefinitionError):
    """A transition cell does not follow the <nextState>/<pushString> grammar."""


class UnexpectedSymbolError(PdaError):
    """The input word contains a symbol outside the configured alphabet."""

    def __init__(self, symbol: str, position: int):
        super().__init__(f"Unexpected symbol '{symbol}' at position {position}")
        self.symbol = symbol
        self.position = position


class EpsilonLoopError(PdaError):
    """Epsilon closure did not settle within the configured number of moves."""

    def __init__(self, state: str, max_steps: int):
        super().__init__(
            f"Epsilon closure from state '{state}' exceeded {max_steps} moves; "
            f"the transitions contain a non-terminating epsilon cycle"
        )
        self.state = state
        self.max_steps = max_steps
