"""Per-letter access counters updated by name lookups."""

ALPHABET_SIZE = 26
INITIAL_PROBABILITY = 0.5
BUMP_STEP = 0.1


class AccessStats:
    """A fixed table of 26 access "probabilities", one per letter.

    The values are raw usage counters: they start at 0.5 and grow by 0.1
    per traversal without any upper bound.
    """

    def __init__(self) -> None:
        """Initialize every letter to the starting value."""
        self.probabilities: list[float] = [
            INITIAL_PROBABILITY,
        ] * ALPHABET_SIZE

    def bump(self, letter_index: int) -> None:
        """Increment the counter of a letter.

        Args:
            letter_index (int): The letter's position in the alphabet (0-25).

        Raises:
            IndexError: If `letter_index` is outside 0-25.

        """
        if not 0 <= letter_index < ALPHABET_SIZE:
            raise IndexError(
                f"Letter index {letter_index} is out of range "
                f"0-{ALPHABET_SIZE - 1}.",
            )
        self.probabilities[letter_index] += BUMP_STEP

    def get(self, letter: str) -> float:
        """Return the current value of `letter` (either case)."""
        if len(letter) == 1 and "a" <= letter <= "z":
            return self.probabilities[ord(letter) - ord("a")]
        if len(letter) == 1 and "A" <= letter <= "Z":
            return self.probabilities[ord(letter) - ord("A")]
        raise ValueError(f"Not an ASCII letter: {letter!r}")

    def average(self) -> float:
        """Return the arithmetic mean of all 26 values."""
        return sum(self.probabilities) / ALPHABET_SIZE

    def snapshot(self) -> list[tuple[str, float]]:
        """Return `(letter, value)` pairs ordered a to z."""
        return [
            (chr(ord("a") + index), value)
            for index, value in enumerate(self.probabilities)
        ]

    def teardown(self) -> None:
        """Release the table; the object starts over from fresh values."""
        self.probabilities = [INITIAL_PROBABILITY] * ALPHABET_SIZE


def create_stats() -> AccessStats:
    """Create a fresh statistics table."""
    return AccessStats()


def stats_snapshot(stats: AccessStats) -> list[tuple[str, float]]:
    """Return the ordered `(letter, value)` pairs of `stats`."""
    return stats.snapshot()


def stats_average(stats: AccessStats) -> float:
    """Return the mean value of `stats`."""
    return stats.average()


def teardown(stats: AccessStats) -> None:
    """Release `stats`."""
    stats.teardown()
