# =============================================================================
# core/sauce_codes.py - Sauce Code Allocation
# =============================================================================
# Every sauce gets a short blind-judging code: category letter + 3-digit
# sequence, e.g. "H001" for the first Hot Chili Sauce.
#
# The allocator is created once per request. The first sauce of a letter
# reads the highest existing code from storage; later sauces with the same
# letter in the same batch count up in memory.
# =============================================================================

import logging
import re
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

# Fixed 1:1 mapping; letters are printed on stickers, never change them
# mid-season.
CATEGORY_LETTERS: dict[str, str] = {
    "Mild Chili Sauce": "M",
    "Medium Chili Sauce": "D",
    "Hot Chili Sauce": "H",
    "Extra Hot Chili Sauce": "X",
    "Extract Based Chili Sauce": "E",
    "BBQ Chili Sauce": "B",
    "Chili Ketchup": "K",
    "Sweet": "S",
    "Chili Honey": "Y",
    "Garlic Chili Sauce": "G",
    "Sambal, Chutney & Pickles": "P",
    "Chili Oil": "O",
    "Freestyle": "F",
    "Asian Style Chili Sauce": "A",
    "Chili Paste": "T",
    "Salt & Condiments": "C",
}

CATEGORIES: tuple[str, ...] = tuple(CATEGORY_LETTERS)

_CODE_PATTERN = re.compile(r"^([A-Z])(\d+)$")


def category_letter(category: str) -> str:
    """
    Look up the code letter for a category.

    Raises:
        KeyError: If the category is not a competition category
    """
    return CATEGORY_LETTERS[category]


def format_code(letter: str, number: int) -> str:
    """Format a code, zero-padding to three digits (H001, H042, H1000)."""
    return f"{letter}{number:03d}"


def parse_code(code: str | None) -> tuple[str, int] | None:
    """
    Split a code into (letter, number).

    Returns:
        Tuple of (letter, number), or None if the code is malformed
    """
    if not code:
        return None
    match = _CODE_PATTERN.match(code.strip())
    if not match:
        return None
    return match.group(1), int(match.group(2))


def highest_number(codes: Iterable[str | None], letter: str) -> int:
    """Highest numeric suffix among codes with the given letter (0 if none)."""
    numbers = [
        parsed[1]
        for parsed in (parse_code(code) for code in codes)
        if parsed and parsed[0] == letter
    ]
    return max(numbers, default=0)


class SauceCodeAllocator:
    """
    Per-request allocator of sauce codes.

    Args:
        fetch_codes: Callable returning every existing code for a letter.
            Called once per letter, and again after reseed().

    Example:
        allocator = SauceCodeAllocator(SauceService.fetch_codes_for_letter)
        allocator.allocate("Hot Chili Sauce")  # "H001"
        allocator.allocate("Hot Chili Sauce")  # "H002"
    """

    def __init__(self, fetch_codes: Callable[[str], list[str]]):
        self._fetch_codes = fetch_codes
        self._next_numbers: dict[str, int] = {}

    def allocate(self, category: str) -> str:
        """
        Allocate the next code for a category.

        Raises:
            KeyError: If the category is unknown
        """
        letter = category_letter(category)

        if letter not in self._next_numbers:
            existing = self._fetch_codes(letter)
            self._next_numbers[letter] = highest_number(existing, letter) + 1

        number = self._next_numbers[letter]
        self._next_numbers[letter] = number + 1
        return format_code(letter, number)

    def reseed(self, category: str) -> None:
        """
        Forget the cached counter for a category's letter.

        Called after a unique violation: another request took the code, so
        the next allocate() re-reads storage.
        """
        letter = category_letter(category)
        self._next_numbers.pop(letter, None)
        logger.info(f"Reseeding sauce code counter for letter {letter}")
