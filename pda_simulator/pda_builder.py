import logging
import re
from typing import Dict, Iterable, List, Set, Tuple

from .constants import ACCEPT_FINAL_STATE_EMPTY_STACK, ACCEPTANCE_MODES, BOTTOM_MARKER, EPSILON
from .exceptions import (
    DefinitionError,
    MalformedTransitionError,
    UndefinedStateError,
    UndefinedSymbolError,
)
from .pda_engine import PdaConfiguration
from .transition_table import Step, Transition, TransitionTable

logger = logging.getLogger(__name__)

_SEPARATOR = re.compile(r'\s*,\s*|\s+')
_CELL = re.compile(r'^(\w*)/(\w*)$')
_STATE = re.compile(r'^(\*)?(\w+)$')
_SYMBOL = re.compile(r'^\w$')

# Aliases accepted for the epsilon selector in definition dicts
_EPSILON_KEYS = {EPSILON, ''}


def _split(text: str) -> List[str]:
    return [entry for entry in _SEPARATOR.split(text.strip()) if entry]


def parse_transition_cell(cell: str, default_state: str) -> Step:
    """
    Parses a transition cell of the form <nextState>/<pushString>.

    Args:
        cell: Cell text, e.g. 'S1/AZ', '/AA' or 'S1/'
        default_state: State used when <nextState> is omitted

    Returns:
        Step whose push tuple lists the pushed symbols top-of-stack-first
    """
    match = _CELL.match(cell.strip())
    if match is None:
        raise MalformedTransitionError(f"Unexpected cell value '{cell}'")

    next_state, push_string = match.groups()
    return Step(next_state or default_state, tuple(push_string))


def parse_states(text: str) -> Tuple[List[str], Set[str]]:
    """
    Parses a state list such as 'S0, S1, *S2'; a leading '*' marks a final state.

    Returns:
        (states in declaration order, final states)
    """
    states = []
    final_states = set()

    for entry in _split(text):
        match = _STATE.match(entry)
        if match is None:
            raise DefinitionError(f"Invalid state name '{entry}'")
        final, state = match.groups()
        if state in states:
            raise DefinitionError(f"State '{state}' is declared twice")
        states.append(state)
        if final:
            final_states.add(state)

    if not states:
        raise DefinitionError('At least one state is required')
    return states, final_states


def _check_symbols(symbols: Iterable[str], kind: str) -> List[str]:
    checked = []
    for symbol in symbols:
        if not isinstance(symbol, str) or not _SYMBOL.match(symbol) or symbol == EPSILON:
            raise DefinitionError(f"Invalid {kind} symbol '{symbol}'")
        if symbol in checked:
            raise DefinitionError(f"{kind.capitalize()} symbol '{symbol}' is declared twice")
        checked.append(symbol)
    return checked


def parse_alphabet(text: str) -> List[str]:
    """Parses an input alphabet such as 'a, b, c'; each symbol is a single word character."""
    return _check_symbols(_split(text), 'input')


def parse_stack_symbols(text: str) -> List[str]:
    """Parses a stack alphabet such as 'A, B'; the bottom marker is prepended."""
    return _stack_alphabet(_split(text))


def _stack_alphabet(symbols: Iterable[str]) -> List[str]:
    symbols = list(symbols)
    if BOTTOM_MARKER in symbols:
        raise DefinitionError(f"Stack symbol '{BOTTOM_MARKER}' is reserved for the stack bottom")
    return [BOTTOM_MARKER] + _check_symbols(symbols, 'stack')


def validate_pda_structure(definition: Dict) -> Dict:
    """
    Validates that the PDA definition has the structure build_pda() expects.

    Args:
        definition: The PDA definition dictionary to validate

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not isinstance(definition, dict):
        return {'valid': False, 'error': 'PDA definition must be a dictionary'}

    for key in ['states', 'alphabet', 'transitions']:
        if key not in definition:
            return {'valid': False, 'error': f'Missing required key: {key}'}

    # states and alphabets may also be given as text, e.g. 'S0, *S1'
    for key in ['states', 'alphabet', 'stackAlphabet', 'acceptingStates']:
        if key in definition:
            if isinstance(definition[key], str) and key != 'acceptingStates':
                continue
            if not isinstance(definition[key], list):
                return {'valid': False, 'error': f'{key} must be a list'}
            if not all(isinstance(entry, str) for entry in definition[key]):
                return {'valid': False, 'error': f'{key} must only contain strings'}

    if definition.get('acceptance', ACCEPT_FINAL_STATE_EMPTY_STACK) not in ACCEPTANCE_MODES:
        return {'valid': False, 'error': f"acceptance must be one of {', '.join(ACCEPTANCE_MODES)}"}

    if not definition['states']:
        return {'valid': False, 'error': 'At least one state is required'}

    if not isinstance(definition['transitions'], dict):
        return {'valid': False, 'error': 'transitions must be a dictionary'}

    for state, rows in definition['transitions'].items():
        if not isinstance(rows, dict):
            return {'valid': False, 'error': f'transitions of state {state} must be a dictionary'}
        for input_symbol, cells in rows.items():
            if not isinstance(cells, dict) or not all(isinstance(cell, str) for cell in cells.values()):
                return {'valid': False,
                        'error': f'transitions of state {state} on {input_symbol!r} must map stack symbols to cells'}

    return {'valid': True}


def build_transition_tables(transitions: Iterable[Transition]) -> Dict[str, TransitionTable]:
    """Groups transitions by source state and builds one TransitionTable per state."""
    by_state: Dict[str, List[Transition]] = {}
    for transition in transitions:
        by_state.setdefault(transition.state, []).append(transition)
    return {state: TransitionTable.build(state_transitions) for state, state_transitions in by_state.items()}


def build_pda(definition: Dict) -> PdaConfiguration:
    """
    Builds an immutable PDA configuration from a definition dictionary.

    Args:
        definition: A dictionary with the following keys:
            - states: List of states; a '*' prefix marks a final state
            - alphabet: List of input symbols
            - stackAlphabet: List of stack symbols (optional, bottom marker is implicit)
          states, alphabet and stackAlphabet may instead be text such as
          'S0, *S1' or 'a b', read with parse_states, parse_alphabet and
          parse_stack_symbols
            - startingState: The starting state (optional, defaults to the first state)
            - acceptingStates: List of final states (optional)
            - acceptance: One of ACCEPTANCE_MODES (optional, defaults to final state
              with an empty stack)
            - transitions: {state: {input_or_epsilon: {stack_top: '<nextState>/<pushString>'}}}

    Raises:
        DefinitionError: Or one of its subclasses if the definition is unusable
    """
    validation = validate_pda_structure(definition)
    if not validation['valid']:
        raise DefinitionError(validation['error'])

    states_text = definition['states']
    if not isinstance(states_text, str):
        states_text = ' '.join(states_text)
    states, final_states = parse_states(states_text)
    final_states.update(definition.get('acceptingStates', []))
    for state in final_states:
        if state not in states:
            raise UndefinedStateError(f"Accepting state '{state}' is not a declared state")

    initial_state = definition.get('startingState') or states[0]
    if initial_state not in states:
        raise UndefinedStateError(f"Starting state '{initial_state}' is not a declared state")

    alphabet = definition['alphabet']
    alphabet = parse_alphabet(alphabet) if isinstance(alphabet, str) else _check_symbols(alphabet, 'input')
    stack_symbols = definition.get('stackAlphabet', [])
    if isinstance(stack_symbols, str):
        stack_alphabet = parse_stack_symbols(stack_symbols)
    else:
        stack_alphabet = _stack_alphabet(stack_symbols)

    transitions = []
    for state, rows in definition['transitions'].items():
        if state not in states:
            raise UndefinedStateError(f"Undefined state '{state}'")

        for input_symbol, cells in rows.items():
            if input_symbol in _EPSILON_KEYS:
                input_symbol = EPSILON
            elif input_symbol not in alphabet:
                raise UndefinedSymbolError(f"Undefined input symbol '{input_symbol}' in state '{state}'")

            for stack_top, cell in cells.items():
                if not cell.strip():
                    continue
                if stack_top not in stack_alphabet:
                    raise UndefinedSymbolError(f"Undefined stack symbol '{stack_top}' in state '{state}'")

                step = parse_transition_cell(cell, state)
                if step.state not in states:
                    raise UndefinedStateError(f"Undefined state '{step.state}' in cell '{cell}'")
                undefined = [symbol for symbol in step.push if symbol not in stack_alphabet]
                if undefined:
                    raise UndefinedSymbolError(f"Undefined stack symbol in '{cell}': {', '.join(undefined)}")

                transitions.append(Transition(state, input_symbol, stack_top, step))

    tables = build_transition_tables(transitions)
    logger.debug("Built PDA with %d states and %d transitions", len(states), len(transitions))

    return PdaConfiguration(
        alphabet=tuple(alphabet),
        states=tuple(states),
        initial_state=initial_state,
        final_states=frozenset(final_states),
        transitions=tables,
        stack_alphabet=tuple(stack_alphabet),
        initial_stack=(BOTTOM_MARKER,),
        acceptance=definition.get('acceptance', ACCEPT_FINAL_STATE_EMPTY_STACK),
    )
