from typing import Dict, Iterable, Iterator, NamedTuple, Optional, Tuple

from .constants import EPSILON
from .exceptions import NonDeterministicTransitionError


class Step(NamedTuple):
    """Target of a transition: the next state and the symbols to push.

    ``push`` is written top-of-stack-first, so ``push[0]`` ends up on top.
    An empty ``push`` pops the matched symbol and pushes nothing.
    """
    state: str
    push: Tuple[str, ...] = ()


class Transition(NamedTuple):
    """A single move of a state; ``input_symbol`` is EPSILON for epsilon moves"""
    state: str
    input_symbol: str
    stack_top: str
    next: Step


class TransitionTable:
    """
    Deterministic lookup structure for the transitions leaving one state.

    Epsilon moves are keyed by stack top only, input moves by stack top and
    then input symbol. A stack top may appear in one of the two maps but not
    in both, otherwise the closure and the input lookup would compete for the
    same configuration.
    """

    def __init__(self, transitions: Iterable[Transition] = ()):
        self.epsilon: Dict[str, Step] = {}
        self.on_input: Dict[str, Dict[str, Step]] = {}
        owner = None

        for transition in transitions:
            owner = transition.state
            if transition.input_symbol == EPSILON:
                self._add(self.epsilon, transition.stack_top, transition)
            else:
                input_map = self.on_input.setdefault(transition.stack_top, {})
                self._add(input_map, transition.input_symbol, transition)

        for stack_top in self.epsilon:
            if stack_top in self.on_input:
                raise NonDeterministicTransitionError(
                    f"State '{owner}' has both an epsilon move and an input move "
                    f"for stack top '{stack_top}'"
                )

    @classmethod
    def build(cls, transitions: Iterable[Transition]) -> 'TransitionTable':
        return cls(transitions)

    @staticmethod
    def _add(mapping: Dict[str, Step], key: str, transition: Transition):
        existing = mapping.get(key)
        if existing is not None and existing != transition.next:
            raise NonDeterministicTransitionError(
                f"State '{transition.state}' has two moves for input '{transition.input_symbol}' "
                f"and stack top '{transition.stack_top}'"
            )
        mapping[key] = transition.next

    def lookup_epsilon(self, stack_top: str) -> Optional[Step]:
        return self.epsilon.get(stack_top)

    def lookup_input(self, input_symbol: str, stack_top: str) -> Optional[Step]:
        input_map = self.on_input.get(stack_top)
        return input_map.get(input_symbol) if input_map else None

    def transitions(self, state: str) -> Iterator[Transition]:
        """Yield the table's moves back as transitions leaving ``state``."""
        for stack_top, step in self.epsilon.items():
            yield Transition(state, EPSILON, stack_top, step)
        for stack_top, input_map in self.on_input.items():
            for input_symbol, step in input_map.items():
                yield Transition(state, input_symbol, stack_top, step)

    def __len__(self):
        return len(self.epsilon) + sum(len(input_map) for input_map in self.on_input.values())

    def __repr__(self):
        return f"TransitionTable(epsilon={self.epsilon!r}, on_input={self.on_input!r})"
