# src/search/alias_expander.py
# Responsibility: Expands abbreviations and romanization variants to canonical catalog terms.

from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from src.search.text_normalizer import normalize_text

SEARCH_ALIASES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    # Certification abbreviations
    'tokuju': ('tokubetsu juyo', 'tokubetsu_juyo'),
    'tokuho': ('tokubetsu hozon', 'tokubetsu_hozon'),
    'tokukicho': ('tokubetsu kicho', 'tokubetsu_kicho'),

    # Item type abbreviations
    'waki': ('wakizashi',),
    'nagi': ('naginata',),
    'fuchikashira': ('fuchi_kashira', 'fuchi-kashira', 'fuchi kashira'),

    # Romanization variants
    'tuba': ('tsuba',),
    'tanto': ('tantou', 'tantō'),
    'katana': ('katana',),
})


class AliasExpander:
    """
    Handles expansion of single search words using a fixed alias dictionary.
    The dictionary is injected by value and never modified.
    """

    def __init__(self, aliases: Optional[Mapping[str, Tuple[str, ...]]] = None):
        """
        Args:
            aliases (Mapping): word -> expansions. Keys must already be normalized.
        """
        self.aliases: Mapping[str, Tuple[str, ...]] = aliases if aliases is not None else SEARCH_ALIASES

    def expand(self, word: Optional[str]) -> List[str]:
        """
        Expands one word into itself plus its aliases.

        Logic:
        1. Normalize the word (case, macrons, whitespace).
        2. Multi-word input is not looked up; it is returned as-is.
        3. Look up the exact word; append normalized expansions.
        4. Remove duplicates while keeping the original word first.

        Args:
            word (str): A single whitespace-delimited token.

        Returns:
            List[str]: e.g. 'tokuju' -> ['tokuju', 'tokubetsu juyo', 'tokubetsu_juyo'].
        """
        normalized = normalize_text(word)
        if not normalized:
            return []
        if ' ' in normalized:
            return [normalized]

        expansions = [normalized]
        for alias in self.aliases.get(normalized, ()):
            candidate = normalize_text(alias)
            if candidate and candidate not in expansions:
                expansions.append(candidate)
        return expansions


_default_expander = AliasExpander()


def expand_aliases(word: Optional[str]) -> List[str]:
    """Expands a word with the built-in alias dictionary."""
    return _default_expander.expand(word)
