import json
import logging
import math

from django.conf import settings
from django.http import JsonResponse, StreamingHttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .constants import (
    DEFAULT_FUZZ_BUDGET_MS,
    DEFAULT_FUZZ_MAX_LENGTH,
    DEFAULT_MAX_EPSILON_STEPS,
    MAX_FUZZ_BUDGET_MS,
)
from .exceptions import PdaError
from .fuzz import FuzzDriver
from .pda_builder import build_pda, validate_pda_structure
from .pda_engine import PdaEngine, trace_accepted
from .word_enumeration import WordEnumerator

logger = logging.getLogger(__name__)


class BadRequest(Exception):
    """Request body is missing something the view needs"""


def _load_pda(request):
    """
    Parses the JSON body and builds the PDA configuration it describes.

    Returns:
        (request data, PdaConfiguration)
    """
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    definition = data.get('pda')

    if not definition:
        raise BadRequest('Missing PDA definition')

    validation = validate_pda_structure(definition)
    if not validation['valid']:
        raise BadRequest(validation['error'])

    return data, build_pda(definition)


def _make_engine(pda):
    max_steps = getattr(settings, 'PDA_SIMULATOR_MAX_EPSILON_STEPS', DEFAULT_MAX_EPSILON_STEPS)
    return PdaEngine(pda, max_epsilon_steps=max_steps)


def _fuzz_parameters(data):
    """Reads max_length and budget_ms from the request, clamping the budget."""
    max_budget = getattr(settings, 'PDA_SIMULATOR_MAX_FUZZ_BUDGET_MS', MAX_FUZZ_BUDGET_MS)
    try:
        max_length = int(data.get('max_length', DEFAULT_FUZZ_MAX_LENGTH))
        budget_ms = float(data.get('budget_ms', DEFAULT_FUZZ_BUDGET_MS))
    except (TypeError, ValueError):
        raise BadRequest('max_length and budget_ms must be numbers')

    if not math.isfinite(budget_ms):
        raise BadRequest('budget_ms must be a finite number')
    if max_length < 0 or budget_ms < 0:
        raise BadRequest('max_length and budget_ms must be non-negative')
    return max_length, min(budget_ms, max_budget)


def _read_word(data):
    """Reads the word to run: a string or a list of one-symbol strings."""
    word = data.get('input', '')
    if isinstance(word, str):
        return word
    if isinstance(word, list) and all(isinstance(symbol, str) for symbol in word):
        return word
    raise BadRequest('input must be a string or a list of symbols')


def _error_response(error, status=400):
    return JsonResponse({'error': str(error), 'error_type': type(error).__name__}, status=status)


def _trace_row(step):
    return {
        'state': step.state,
        'remaining': step.remaining_input,
        'stack': list(step.stack),
        'annotation': step.annotation,
    }


@csrf_exempt
@require_POST
def simulate_pda(request):
    """
    Django view to decide whether a PDA accepts a word.

    Expects a POST request with a JSON body containing:
    - pda: The PDA definition (see pda_builder.build_pda)
    - input: The word to run

    Returns a JSON response with the decision.
    """
    try:
        data, pda = _load_pda(request)
        input_string = _read_word(data)

        accepted = _make_engine(pda).accepts(input_string)

        return JsonResponse({'accepted': accepted, 'input': input_string})

    except (BadRequest, PdaError, ValueError) as e:
        return _error_response(e)
    except Exception as e:
        logger.exception('PDA simulation failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def step_through_pda(request):
    """
    Django view returning the step-by-step trace of a PDA run.

    Each trace row holds the state, the remaining input, the stack (bottom
    first) and an annotation: initial, ε, ->symbol, accept or reject.
    """
    try:
        data, pda = _load_pda(request)
        input_string = _read_word(data)

        trace = _make_engine(pda).step_through(input_string)

        return JsonResponse({
            'accepted': trace_accepted(trace),
            'input': input_string,
            'trace': [_trace_row(step) for step in trace],
        })

    except (BadRequest, PdaError, ValueError) as e:
        return _error_response(e)
    except Exception as e:
        logger.exception('PDA trace failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def fuzz_pda_view(request):
    """
    Django view searching for accepted words up to a length, under a time budget.

    Expects a POST request with a JSON body containing:
    - pda: The PDA definition
    - max_length: Longest word to try (optional)
    - budget_ms: Wall-clock budget in milliseconds (optional, clamped)

    Returns the accepted words in enumeration order and whether the search
    covered the whole space ('exhausted') or ran out of time ('timed out').
    """
    try:
        data, pda = _load_pda(request)
        max_length, budget_ms = _fuzz_parameters(data)

        result = FuzzDriver().run(_make_engine(pda), WordEnumerator(pda.alphabet, max_length), budget_ms)

        return JsonResponse({
            'accepted_words': result.accepted_words,
            'status': result.status,
            'words_tested': result.words_tested,
            'elapsed_ms': result.elapsed_ms,
        })

    except (BadRequest, PdaError, ValueError) as e:
        return _error_response(e)
    except Exception as e:
        logger.exception('PDA fuzz search failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def fuzz_pda_stream(request):
    """
    Django view streaming a fuzz search as Server-Sent Events.

    Accepted words and periodic progress updates are sent as they are found,
    followed by the summary and an end-of-stream marker.
    """
    def error_stream(message, status):
        def error_generator():
            yield f"data: {json.dumps({'error': message})}\n\n"

        return StreamingHttpResponse(error_generator(), content_type='text/event-stream', status=status)

    try:
        data, pda = _load_pda(request)
        max_length, budget_ms = _fuzz_parameters(data)
        engine = _make_engine(pda)
        enumerator = WordEnumerator(pda.alphabet, max_length)

        def result_generator():
            """Generator to stream fuzz events as Server-Sent Events"""
            try:
                for event in FuzzDriver().iter_run(engine, enumerator, budget_ms):
                    if event['type'] == 'tested':
                        continue
                    yield f"data: {json.dumps(event)}\n\n"

                yield f"data: {json.dumps({'type': 'end'})}\n\n"

            except PdaError as e:
                yield f"data: {json.dumps({'type': 'error', 'message': str(e)})}\n\n"

        response = StreamingHttpResponse(result_generator(), content_type='text/event-stream')
        response['Cache-Control'] = 'no-cache'
        response['X-Accel-Buffering'] = 'no'  # Disable nginx buffering
        return response

    except (BadRequest, PdaError, ValueError) as e:
        return error_stream(str(e), 400)
    except Exception as e:
        logger.exception('PDA fuzz stream failed')
        return error_stream(f'Server error: {str(e)}', 500)


@csrf_exempt
@require_POST
def check_pda(request):
    """
    Django view to check that a PDA definition builds.

    Returns a summary of the configuration, or the reason it was rejected
    (undefined states or symbols, malformed cells, non-determinism).
    """
    try:
        _, pda = _load_pda(request)

        return JsonResponse({
            'valid': True,
            'states': list(pda.states),
            'initial_state': pda.initial_state,
            'acceptance': pda.acceptance,
            'final_states': sorted(pda.final_states),
            'alphabet': list(pda.alphabet),
            'stack_alphabet': list(pda.stack_alphabet),
            'transition_count': sum(len(table) for table in pda.transitions.values()),
        })

    except (BadRequest, PdaError) as e:
        return JsonResponse({'valid': False, 'error': str(e), 'error_type': type(e).__name__}, status=400)
    except ValueError as e:
        return _error_response(e)
    except Exception as e:
        logger.exception('PDA check failed')
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
