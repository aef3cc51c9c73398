import unittest
from pda_simulator.constants import ACCEPT_FINAL_STATE, ACCEPT_FINAL_STATE_EMPTY_STACK, EPSILON
from pda_simulator.exceptions import (
    DefinitionError,
    MalformedTransitionError,
    NonDeterministicTransitionError,
    UndefinedStateError,
    UndefinedSymbolError,
)
from pda_simulator.pda_builder import (
    build_pda,
    build_transition_tables,
    parse_alphabet,
    parse_stack_symbols,
    parse_states,
    parse_transition_cell,
    validate_pda_structure,
)
from pda_simulator.pda_engine import PdaEngine
from pda_simulator.transition_table import Step, Transition


def anbn_definition():
    return {
        'states': ['S0', 'S1'],
        'alphabet': ['a', 'b'],
        'stackAlphabet': ['A'],
        'startingState': 'S0',
        'acceptingStates': ['S1'],
        'transitions': {
            'S0': {'a': {'Z': 'S0/AZ', 'A': '/AA'}, 'b': {'A': 'S1/'}},
            'S1': {'b': {'A': '/'}, 'ε': {'Z': '/Z'}},
        },
    }


class TestParsing(unittest.TestCase):
    def test_parse_transition_cell(self):
        self.assertEqual(parse_transition_cell('S1/AZ', 'S0'), Step('S1', ('A', 'Z')))
        # Omitted state defaults to the owning state
        self.assertEqual(parse_transition_cell('/aa', 'S0'), Step('S0', ('a', 'a')))
        # Empty push string pops only
        self.assertEqual(parse_transition_cell('S2/', 'S1'), Step('S2', ()))
        self.assertEqual(parse_transition_cell('/', 'S1'), Step('S1', ()))
        self.assertEqual(parse_transition_cell(' S1/A ', 'S0'), Step('S1', ('A',)))

    def test_malformed_cells(self):
        for cell in ['S1', 'S1/A/B', 'S 1/A', 'S1/A-B', '']:
            with self.assertRaises(MalformedTransitionError, msg=cell):
                parse_transition_cell(cell, 'S0')

    def test_parse_states(self):
        states, final_states = parse_states('S0, S1, *S2')
        self.assertEqual(states, ['S0', 'S1', 'S2'])
        self.assertEqual(final_states, {'S2'})

        states, final_states = parse_states('q0 *q1,q2')
        self.assertEqual(states, ['q0', 'q1', 'q2'])
        self.assertEqual(final_states, {'q1'})

    def test_invalid_states(self):
        for text in ['S0, S-1', '**S0', 'S0, S0', '', '  ']:
            with self.assertRaises(DefinitionError, msg=text):
                parse_states(text)

    def test_parse_alphabet(self):
        self.assertEqual(parse_alphabet('a, b, c'), ['a', 'b', 'c'])
        self.assertEqual(parse_alphabet('0 1'), ['0', '1'])

        for text in ['ab, c', 'a, a', 'a, ε', 'a, +']:
            with self.assertRaises(DefinitionError, msg=text):
                parse_alphabet(text)

    def test_parse_stack_symbols(self):
        self.assertEqual(parse_stack_symbols('A, B'), ['Z', 'A', 'B'])
        self.assertEqual(parse_stack_symbols(''), ['Z'])

        # Bottom marker is reserved
        with self.assertRaises(DefinitionError):
            parse_stack_symbols('A, Z')
        with self.assertRaises(DefinitionError):
            parse_stack_symbols('AB')


class TestValidation(unittest.TestCase):
    def test_valid_definition(self):
        self.assertEqual(validate_pda_structure(anbn_definition()), {'valid': True})

    def test_invalid_definitions(self):
        self.assertFalse(validate_pda_structure(['S0'])['valid'])

        for key in ['states', 'alphabet', 'transitions']:
            definition = anbn_definition()
            del definition[key]
            result = validate_pda_structure(definition)
            self.assertFalse(result['valid'])
            self.assertEqual(result['error'], f'Missing required key: {key}')

        definition = anbn_definition()
        definition['states'] = {'S0': True}
        self.assertEqual(validate_pda_structure(definition)['error'], 'states must be a list')

        definition = anbn_definition()
        definition['acceptingStates'] = 'S1'
        self.assertEqual(validate_pda_structure(definition)['error'], 'acceptingStates must be a list')

        definition = anbn_definition()
        definition['alphabet'] = ['a', 1]
        self.assertFalse(validate_pda_structure(definition)['valid'])

        definition = anbn_definition()
        definition['states'] = []
        self.assertFalse(validate_pda_structure(definition)['valid'])

        definition = anbn_definition()
        definition['transitions'] = {'S0': {'a': {'Z': 3}}}
        self.assertFalse(validate_pda_structure(definition)['valid'])

        definition = anbn_definition()
        definition['acceptance'] = 'sometimes'
        self.assertFalse(validate_pda_structure(definition)['valid'])


class TestBuildPda(unittest.TestCase):
    def test_build_anbn(self):
        pda = build_pda(anbn_definition())

        self.assertEqual(pda.alphabet, ('a', 'b'))
        self.assertEqual(pda.states, ('S0', 'S1'))
        self.assertEqual(pda.initial_state, 'S0')
        self.assertEqual(pda.final_states, frozenset({'S1'}))
        self.assertEqual(pda.stack_alphabet, ('Z', 'A'))
        self.assertEqual(pda.initial_stack, ('Z',))
        self.assertEqual(pda.acceptance, ACCEPT_FINAL_STATE_EMPTY_STACK)

        self.assertEqual(pda.transitions['S0'].lookup_input('a', 'Z'), Step('S0', ('A', 'Z')))
        self.assertEqual(pda.transitions['S0'].lookup_input('a', 'A'), Step('S0', ('A', 'A')))
        self.assertEqual(pda.transitions['S1'].lookup_epsilon('Z'), Step('S1', ('Z',)))

        engine = PdaEngine(pda)
        for word, accepted in {'ab': True, 'aabb': True, 'aab': False, '': False, 'ba': False}.items():
            engine.reset()
            self.assertEqual(engine.accepts(word), accepted, word)

    def test_defaults_and_markers(self):
        # Final states marked inline, starting state defaults to the first one,
        # empty string works as the epsilon selector and empty cells are skipped
        pda = build_pda({
            'states': ['S0', 'S1', '*S2'],
            'alphabet': ['a', 'b'],
            'stackAlphabet': ['a'],
            'transitions': {
                'S0': {'a': {'Z': '/aZ', 'a': '/aa'}, 'b': {'a': 'S1/', 'Z': ''}},
                'S1': {'b': {'a': '/'}, '': {'Z': 'S2/'}},
            },
        })

        self.assertEqual(pda.initial_state, 'S0')
        self.assertEqual(pda.final_states, frozenset({'S2'}))
        self.assertEqual(pda.transitions['S1'].lookup_epsilon('Z'), Step('S2', ()))
        self.assertIsNone(pda.transitions['S0'].lookup_input('b', 'Z'))
        self.assertNotIn('S2', pda.transitions)
        self.assertTrue(PdaEngine(pda).accepts('aabb'))

    def test_text_lists(self):
        definition = anbn_definition()
        definition.update({'states': 'S0, *S1', 'alphabet': 'a b', 'stackAlphabet': 'A'})
        del definition['acceptingStates']
        self.assertEqual(validate_pda_structure(definition), {'valid': True})

        pda = build_pda(definition)
        self.assertEqual(pda.states, ('S0', 'S1'))
        self.assertEqual(pda.final_states, frozenset({'S1'}))
        self.assertEqual(pda.alphabet, ('a', 'b'))
        self.assertEqual(pda.stack_alphabet, ('Z', 'A'))
        self.assertTrue(PdaEngine(pda).accepts('aabb'))

        # Text goes through the same symbol checks as lists
        for key, text in [('alphabet', 'ab, c'), ('stackAlphabet', 'A, Z'), ('states', 'S0, S-1')]:
            broken = dict(definition, **{key: text})
            with self.assertRaises(DefinitionError, msg=key):
                build_pda(broken)

    def test_acceptance_mode(self):
        definition = anbn_definition()
        definition['acceptance'] = ACCEPT_FINAL_STATE
        pda = build_pda(definition)

        self.assertEqual(pda.acceptance, ACCEPT_FINAL_STATE)
        self.assertTrue(PdaEngine(pda).accepts('aab'))

    def test_undefined_states(self):
        definition = anbn_definition()
        definition['transitions']['S0']['b']['A'] = 'S9/'
        with self.assertRaises(UndefinedStateError):
            build_pda(definition)

        definition = anbn_definition()
        definition['transitions']['S9'] = {'a': {'Z': '/Z'}}
        with self.assertRaises(UndefinedStateError):
            build_pda(definition)

        definition = anbn_definition()
        definition['startingState'] = 'S9'
        with self.assertRaises(UndefinedStateError):
            build_pda(definition)

        definition = anbn_definition()
        definition['acceptingStates'] = ['S9']
        with self.assertRaises(UndefinedStateError):
            build_pda(definition)

    def test_undefined_symbols(self):
        # Input symbol
        definition = anbn_definition()
        definition['transitions']['S0']['c'] = {'Z': '/Z'}
        with self.assertRaises(UndefinedSymbolError):
            build_pda(definition)

        # Stack top
        definition = anbn_definition()
        definition['transitions']['S0']['a']['B'] = '/B'
        with self.assertRaises(UndefinedSymbolError):
            build_pda(definition)

        # Pushed symbol
        definition = anbn_definition()
        definition['transitions']['S0']['a']['A'] = '/AB'
        with self.assertRaises(UndefinedSymbolError):
            build_pda(definition)

    def test_malformed_cell(self):
        definition = anbn_definition()
        definition['transitions']['S0']['a']['A'] = 'AA'
        with self.assertRaises(MalformedTransitionError):
            build_pda(definition)

    def test_non_deterministic_definition(self):
        definition = anbn_definition()
        # S1 already has an input move on stack top A
        definition['transitions']['S1']['ε']['A'] = '/'
        with self.assertRaises(NonDeterministicTransitionError):
            build_pda(definition)

    def test_reserved_and_invalid_symbols(self):
        definition = anbn_definition()
        definition['stackAlphabet'] = ['A', 'Z']
        with self.assertRaises(DefinitionError):
            build_pda(definition)

        definition = anbn_definition()
        definition['alphabet'] = ['a', 'ε']
        with self.assertRaises(DefinitionError):
            build_pda(definition)

        with self.assertRaises(DefinitionError):
            build_pda({'states': ['S0']})

    def test_build_transition_tables(self):
        tables = build_transition_tables([
            Transition('S0', 'a', 'Z', Step('S0', ('A', 'Z'))),
            Transition('S1', EPSILON, 'Z', Step('S1', ())),
            Transition('S0', 'b', 'A', Step('S1', ())),
        ])

        self.assertEqual(sorted(tables), ['S0', 'S1'])
        self.assertEqual(len(tables['S0']), 2)
        self.assertEqual(len(tables['S1']), 1)


if __name__ == '__main__':
    unittest.main()
