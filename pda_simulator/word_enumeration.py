from typing import List, Optional, Sequence


def count_words(alphabet_size: int, max_length: int) -> int:
    """Number of words of length 0..max_length over an alphabet of the given size."""
    return sum(alphabet_size ** length for length in range(max_length + 1))


class WordEnumerator:
    """
    Lazy cursor over every word of length 0..max_length over an ordered alphabet.

    Words come out shortest first, starting with the empty word. Within a
    length the word behaves like an odometer whose first position turns
    fastest: over (a, b) the order is '', a, b, aa, ba, ab, bb, aaa, ...

    An enumerator is single-use; build a new one to start over.
    """

    def __init__(self, alphabet: Sequence[str], max_length: int):
        if max_length < 0:
            raise ValueError(f"max_length must be non-negative, got {max_length}")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("Alphabet contains duplicate symbols")

        self.alphabet = tuple(alphabet)
        self.max_length = max_length
        # Digit i indexes the alphabet symbol at word position i; None once done
        self._digits: Optional[List[int]] = []

    @property
    def total_words(self) -> int:
        return count_words(len(self.alphabet), self.max_length)

    def __iter__(self):
        return self

    def __next__(self) -> str:
        if self._digits is None:
            raise StopIteration

        word = ''.join(self.alphabet[digit] for digit in self._digits)
        self._digits = self._successor(self._digits)
        return word

    def _successor(self, digits: List[int]) -> Optional[List[int]]:
        radix = len(self.alphabet)
        digits = list(digits)

        index = 0
        while index < len(digits):
            digits[index] = (digits[index] + 1) % radix
            if digits[index] != 0:
                return digits
            index += 1

        # Every position wrapped around: move on to the next length
        if radix == 0 or len(digits) >= self.max_length:
            return None
        return [0] * (len(digits) + 1)
