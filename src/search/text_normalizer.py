# src/search/text_normalizer.py
# Responsibility: Canonical text normalization for romaji search and escaping of user text for SQL patterns.

import re
import unicodedata
from typing import Optional

# Long-vowel marks used in Hepburn romanization.
MACRON_MAP = {
    'ā': 'a', 'Ā': 'A',
    'ē': 'e', 'Ē': 'E',
    'ī': 'i', 'Ī': 'I',
    'ō': 'o', 'Ō': 'O',
    'ū': 'u', 'Ū': 'U',
}

_MACRON_RE = re.compile('[' + ''.join(MACRON_MAP) + ']')
_COMBINING_MARKS_RE = re.compile(r'[\u0300-\u036f]')
_WHITESPACE_RE = re.compile(r'\s+')
# PostgreSQL text cannot hold NUL; psycopg2 refuses to adapt it.
_NUL_RE = re.compile(r'\x00')

# LIKE wildcards plus the escape character itself.
_LIKE_SPECIAL_RE = re.compile(r'([\\%_])')

# Characters with operator meaning inside a PostgreSQL tsquery.
_TSQUERY_SPECIAL_RE = re.compile(r'[&|!():<>\\*\'"]')


def remove_macrons(text: Optional[str]) -> str:
    """
    Replaces macron vowels with their plain ASCII letter, preserving case.

    Example:
        remove_macrons('Gotō') -> 'Goto'
    """
    if not text:
        return ""
    return _MACRON_RE.sub(lambda m: MACRON_MAP[m.group(0)], text)


class TextNormalizer:
    """
    Normalizes free text so that 'Gotō', 'GOTO' and ' goto ' compare equal.
    """

    @staticmethod
    def normalize(text: Optional[str]) -> str:
        """
        Normalizes a text fragment for search matching.

        Steps:
        1. Macron replacement: Fixed table (ō -> o, Ū -> U, ...). NUL bytes are dropped first.
        2. Lowercasing.
        3. NFD + combining mark removal: Catches diacritics outside the macron table.
        4. NFC recomposition: Keeps kana with voicing marks intact.
        5. Whitespace cleanup: Collapses runs and trims ends.

        Args:
            text (str): Raw text, may be None.

        Returns:
            str: Normalized text ("" for empty input).
        """
        if not text:
            return ""

        normalized = _NUL_RE.sub('', text)
        normalized = remove_macrons(normalized)
        normalized = normalized.lower()

        normalized = unicodedata.normalize('NFD', normalized)
        normalized = _COMBINING_MARKS_RE.sub('', normalized)
        normalized = unicodedata.normalize('NFC', normalized)

        normalized = _WHITESPACE_RE.sub(' ', normalized).strip()
        return normalized

    @staticmethod
    def escape_like(text: str) -> str:
        """
        Escapes LIKE/ILIKE metacharacters so user input matches literally.
        Pair with `ESCAPE '\\'` in the SQL clause. NUL bytes are dropped.
        """
        if not text:
            return ""
        return _LIKE_SPECIAL_RE.sub(r'\\\1', _NUL_RE.sub('', text))

    @staticmethod
    def strip_tsquery_operators(text: str) -> str:
        """
        Replaces tsquery operator characters with spaces.
        'test & query' -> 'test query'
        """
        if not text:
            return ""
        stripped = _TSQUERY_SPECIAL_RE.sub(' ', text)
        return _WHITESPACE_RE.sub(' ', stripped).strip()


# Module-level aliases, mirroring how callers import the normalizer elsewhere.
normalize_text = TextNormalizer.normalize
escape_like = TextNormalizer.escape_like
strip_tsquery_operators = TextNormalizer.strip_tsquery_operators
