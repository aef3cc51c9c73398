import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, FrozenSet, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from .constants import (
    ACCEPT_FINAL_STATE,
    ACCEPT_FINAL_STATE_EMPTY_STACK,
    ACCEPTANCE_MODES,
    BOTTOM_MARKER,
    DEFAULT_MAX_EPSILON_STEPS,
)
from .exceptions import DefinitionError, EpsilonLoopError, UnexpectedSymbolError
from .transition_table import Step, TransitionTable

logger = logging.getLogger(__name__)

Word = Union[str, Sequence[str]]

_EMPTY_TABLE = TransitionTable()


@dataclass(frozen=True)
class PdaConfiguration:
    """
    Immutable description of a deterministic PDA.

    Attributes:
        alphabet: Ordered input symbols (never contains the epsilon marker)
        states: Ordered state identifiers
        initial_state: The state every session starts in
        final_states: Accepting states
        transitions: Read-only mapping of state -> TransitionTable
        stack_alphabet: Ordered stack symbols, bottom marker first
        initial_stack: Stack content every session starts with
        acceptance: ACCEPT_FINAL_STATE_EMPTY_STACK (final state with nothing
            but bottom markers left on the stack) or ACCEPT_FINAL_STATE
    """
    alphabet: Tuple[str, ...]
    states: Tuple[str, ...]
    initial_state: str
    final_states: FrozenSet[str]
    transitions: Mapping[str, TransitionTable]
    stack_alphabet: Tuple[str, ...] = (BOTTOM_MARKER,)
    initial_stack: Tuple[str, ...] = field(default=(BOTTOM_MARKER,))
    acceptance: str = ACCEPT_FINAL_STATE_EMPTY_STACK

    def __post_init__(self):
        if self.acceptance not in ACCEPTANCE_MODES:
            raise DefinitionError(f"Unknown acceptance mode '{self.acceptance}'")
        object.__setattr__(self, 'alphabet', tuple(self.alphabet))
        object.__setattr__(self, 'states', tuple(self.states))
        object.__setattr__(self, 'final_states', frozenset(self.final_states))
        object.__setattr__(self, 'stack_alphabet', tuple(self.stack_alphabet))
        object.__setattr__(self, 'initial_stack', tuple(self.initial_stack))
        object.__setattr__(self, 'transitions', MappingProxyType(dict(self.transitions)))

    def table_for(self, state: str) -> TransitionTable:
        """Transition table of ``state``; states without moves get an empty table"""
        return self.transitions.get(state, _EMPTY_TABLE)

    def is_final(self, state: str) -> bool:
        return state in self.final_states

    def is_accepting(self, state: str, stack: Sequence[str]) -> bool:
        """Whether a settled configuration reached at the end of the word accepts it."""
        if not self.is_final(state):
            return False
        if self.acceptance == ACCEPT_FINAL_STATE:
            return True
        return all(symbol == BOTTOM_MARKER for symbol in stack)


class TraceStep(NamedTuple):
    """One row of a traced run"""
    state: str
    remaining_input: str
    stack: Tuple[str, ...]
    annotation: str


class PdaEngine:
    """
    One simulation session over a PdaConfiguration.

    The engine owns the mutable part of a run (current state and stack, the
    last element of ``stack`` being the top). The configuration it wraps is
    never modified and can be shared between engines.
    """

    def __init__(self, pda: PdaConfiguration, max_epsilon_steps: int = DEFAULT_MAX_EPSILON_STEPS):
        self.pda = pda
        self.max_epsilon_steps = max_epsilon_steps
        self.state = pda.initial_state
        self.stack: List[str] = list(pda.initial_stack)

    def reset(self):
        self.state = self.pda.initial_state
        self.stack = list(self.pda.initial_stack)

    def apply_step(self, step: Optional[Step]) -> bool:
        """
        Move to ``step.state`` and push ``step.push`` so its first symbol is on top.

        Returns:
            False (leaving the engine untouched) if there is no step to apply
        """
        if step is None:
            return False
        self.state = step.state
        self.stack.extend(reversed(step.push))
        return True

    def resolve_epsilon_closure(self, on_step: Optional[Callable[[], None]] = None):
        """
        Apply epsilon moves until none matches the current state and stack top.

        A move that would restore the very configuration it starts from (same
        state, same symbol pushed back) is a fixpoint and ends the closure.

        Args:
            on_step: Called after every epsilon move that was applied

        Raises:
            EpsilonLoopError: If more than ``max_epsilon_steps`` moves are applied
        """
        moves = 0
        while self.stack:
            stack_top = self.stack.pop()
            step = self.pda.table_for(self.state).lookup_epsilon(stack_top)
            if self._is_identity(step, stack_top) or not self.apply_step(step):
                self.stack.append(stack_top)
                return

            moves += 1
            if moves > self.max_epsilon_steps:
                raise EpsilonLoopError(self.state, self.max_epsilon_steps)
            if on_step is not None:
                on_step()

    def _is_identity(self, step: Optional[Step], stack_top: str) -> bool:
        return step is not None and step.state == self.state and tuple(step.push) == (stack_top,)

    def _consume(self, symbol: str) -> bool:
        """Pop the stack top and take the input move for ``symbol``, if there is one."""
        stack_top = self.stack.pop()
        if not self.apply_step(self.pda.table_for(self.state).lookup_input(symbol, stack_top)):
            # Leave the stuck configuration visible to the caller
            self.stack.append(stack_top)
            logger.debug("No move from state %s on input %r with stack top %r",
                         self.state, symbol, stack_top)
            return False
        return True

    def _validate_word(self, word: Word):
        for position, symbol in enumerate(word):
            if symbol not in self.pda.alphabet:
                raise UnexpectedSymbolError(symbol, position)

    def is_in_final_state(self) -> bool:
        return self.pda.is_final(self.state)

    def is_accepting(self) -> bool:
        return self.pda.is_accepting(self.state, self.stack)

    def accepts(self, word: Word) -> bool:
        """
        Decide whether the PDA accepts ``word``, starting from the current configuration.

        Raises:
            UnexpectedSymbolError: If ``word`` has a symbol outside the alphabet;
                raised before the engine is touched
        """
        self._validate_word(word)

        for symbol in word:
            self.resolve_epsilon_closure()
            if not self.stack:
                logger.debug("Stack emptied before input %r was read", symbol)
                return False
            if not self._consume(symbol):
                return False

        self.resolve_epsilon_closure()
        return self.is_accepting()

    def step_through(self, word: Word) -> List[TraceStep]:
        """
        Run ``word`` like accepts(), recording every intermediate configuration.

        The trace starts with an "initial" row, has one "ε" row per epsilon move
        and one "->x" row per consumed symbol x, and ends with "accept" or
        "reject". The run stops at the first rejection.

        Raises:
            UnexpectedSymbolError: If ``word`` has a symbol outside the alphabet
        """
        self._validate_word(word)
        symbols = list(word)
        trace: List[TraceStep] = []

        def record(remaining: Sequence[str], annotation: str):
            trace.append(TraceStep(self.state, ''.join(remaining), tuple(self.stack), annotation))

        record(symbols, 'initial')

        for index, symbol in enumerate(symbols):
            remaining = symbols[index:]
            self.resolve_epsilon_closure(lambda: record(remaining, 'ε'))
            if not self.stack or not self._consume(symbol):
                record(remaining, 'reject')
                return trace
            record(remaining[1:], f'->{symbol}')

        self.resolve_epsilon_closure(lambda: record([], 'ε'))
        record([], 'accept' if self.is_accepting() else 'reject')
        return trace


def trace_accepted(trace: Sequence[TraceStep]) -> bool:
    """True if a trace produced by PdaEngine.step_through ends in acceptance"""
    return bool(trace) and trace[-1].annotation == 'accept'
