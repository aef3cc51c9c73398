# Marker used as the input selector of epsilon transitions.
EPSILON = 'ε'

# Seeds the initial stack; users may not declare it in their stack alphabet.
BOTTOM_MARKER = 'Z'

DEFAULT_MAX_EPSILON_STEPS = 10_000

DEFAULT_FUZZ_BUDGET_MS = 5000
DEFAULT_FUZZ_MAX_LENGTH = 100
MAX_FUZZ_BUDGET_MS = 30000

FUZZ_EXHAUSTED = 'exhausted'
FUZZ_TIMED_OUT = 'timed out'

# Acceptance conditions checked once the word is consumed and the closure settled
ACCEPT_FINAL_STATE = 'final_state'
ACCEPT_FINAL_STATE_EMPTY_STACK = 'final_state_empty_stack'
ACCEPTANCE_MODES = (ACCEPT_FINAL_STATE_EMPTY_STACK, ACCEPT_FINAL_STATE)
