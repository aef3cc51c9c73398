import logging
import time
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional

from .constants import (
    DEFAULT_FUZZ_BUDGET_MS,
    DEFAULT_FUZZ_MAX_LENGTH,
    FUZZ_EXHAUSTED,
    FUZZ_TIMED_OUT,
)
from .pda_engine import PdaConfiguration, PdaEngine
from .word_enumeration import WordEnumerator

logger = logging.getLogger(__name__)


class FuzzResult(NamedTuple):
    """Outcome of a fuzz search"""
    accepted_words: List[str]
    status: str  # FUZZ_EXHAUSTED or FUZZ_TIMED_OUT
    words_tested: int
    elapsed_ms: float


class FuzzDriver:
    """
    Searches a word space for words the PDA accepts, under a wall-clock budget.

    The budget is checked between words, never while a word is being run,
    and before each word is pulled, so a budget of 0 tests nothing.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, progress_interval: int = 250):
        self.clock = clock
        self.progress_interval = progress_interval

    def iter_run(self, engine: PdaEngine, enumerator: WordEnumerator, budget_ms: float) -> Iterator[Dict]:
        """
        Generator form of run() that hands control back after every word.

        Yields:
            Dictionary with information about the search:
            - For accepted words: {'type': 'accepted', 'word': str, 'index': int}
            - For progress updates: {'type': 'progress', 'words_tested': int, 'elapsed_ms': float}
              every ``progress_interval`` words
            - For anything else: {'type': 'tested', 'words_tested': int}
            - For the final summary: {'type': 'summary', 'status': str,
              'accepted_words': [...], 'words_tested': int, 'elapsed_ms': float}
        """
        start = self.clock()
        accepted_words = []
        words_tested = 0

        def elapsed_ms():
            return (self.clock() - start) * 1000

        while True:
            if elapsed_ms() >= budget_ms:
                status = FUZZ_TIMED_OUT
                break

            word = next(enumerator, None)
            if word is None:
                status = FUZZ_EXHAUSTED
                break

            engine.reset()
            accepted = engine.accepts(word)
            words_tested += 1

            if accepted:
                accepted_words.append(word)
                yield {'type': 'accepted', 'word': word, 'index': words_tested - 1}
            elif words_tested % self.progress_interval == 0:
                yield {'type': 'progress', 'words_tested': words_tested, 'elapsed_ms': elapsed_ms()}
            else:
                yield {'type': 'tested', 'words_tested': words_tested}

        total_ms = elapsed_ms()
        if status == FUZZ_TIMED_OUT:
            logger.warning("Fuzz search timed out after %d words (%.0f ms budget)", words_tested, budget_ms)
        else:
            logger.info("Fuzz search exhausted %d words in %.0f ms", words_tested, total_ms)

        yield {
            'type': 'summary',
            'status': status,
            'accepted_words': accepted_words,
            'words_tested': words_tested,
            'elapsed_ms': total_ms,
        }

    def run(self, engine: PdaEngine, enumerator: WordEnumerator, budget_ms: float,
            on_accepted: Optional[Callable[[str], None]] = None) -> FuzzResult:
        """
        Run the search to completion.

        Args:
            engine: Engine to test words with; it is reset before every word
            enumerator: Source of candidate words
            budget_ms: Wall-clock budget in milliseconds
            on_accepted: Receives every accepted word, in enumeration order

        Returns:
            FuzzResult whose status tells a timeout apart from full coverage
        """
        for event in self.iter_run(engine, enumerator, budget_ms):
            if event['type'] == 'accepted' and on_accepted is not None:
                on_accepted(event['word'])
            elif event['type'] == 'summary':
                return FuzzResult(
                    accepted_words=event['accepted_words'],
                    status=event['status'],
                    words_tested=event['words_tested'],
                    elapsed_ms=event['elapsed_ms'],
                )


def fuzz_pda(pda: PdaConfiguration, max_length: int = DEFAULT_FUZZ_MAX_LENGTH,
             budget_ms: float = DEFAULT_FUZZ_BUDGET_MS,
             on_accepted: Optional[Callable[[str], None]] = None, **engine_options) -> FuzzResult:
    """Fuzz a configuration with a fresh engine over every word up to ``max_length``."""
    engine = PdaEngine(pda, **engine_options)
    enumerator = WordEnumerator(pda.alphabet, max_length)
    return FuzzDriver().run(engine, enumerator, budget_ms, on_accepted)
