# src/search/dispatcher.py
# Responsibility: Classifies a raw query into exactly one search strategy and builds its field predicates.

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from src.search.alias_expander import AliasExpander
from src.search.cjk_detector import contains_cjk
from src.search.kanji_variants import KANJI_VARIANTS, get_search_variants
from src.search.text_normalizer import escape_like, normalize_text, strip_tsquery_operators
from src.search.url_detector import detect_url

logger = logging.getLogger(__name__)

URL_FIELD = "url"

# Searched with substring matching on the CJK path.
CJK_SEARCH_FIELDS: Tuple[str, ...] = (
    "title",
    "smith",
    "tosogu_maker",
    "school",
    "tosogu_school",
    "description",
)

# Full-text prefix search skips the free-text description.
ROMAJI_SEARCH_FIELDS: Tuple[str, ...] = tuple(f for f in CJK_SEARCH_FIELDS if f != "description")

MIN_QUERY_LENGTH = 2
MIN_TERM_LENGTH = 2

# "rai kunimitsu" or 'rai kunimitsu'
_PHRASE_RE = re.compile(r'["\']([^"\']+)["\']')


class MatchMode(str, Enum):
    SUBSTRING_INSENSITIVE = "substring-insensitive"
    PREFIX_TOKENIZED = "prefix-tokenized"


# A substring predicate carries one LIKE-escaped string; a prefix predicate
# carries token groups (AND across groups, OR within a group).
PredicateValue = Union[str, Tuple[Tuple[str, ...], ...]]


@dataclass(frozen=True)
class FieldPredicate:
    field: str
    mode: MatchMode
    value: PredicateValue

    def to_dict(self) -> Dict[str, Any]:
        value: Any = self.value
        if self.mode is MatchMode.PREFIX_TOKENIZED:
            value = [list(group) for group in self.value]
        return {"field": self.field, "mode": self.mode.value, "value": value}


@dataclass(frozen=True)
class EmptyQuery:
    """Terminal state: nothing worth sending to the datastore."""
    name: ClassVar[str] = "empty"
    reason: str


@dataclass(frozen=True)
class UrlLookup:
    name: ClassVar[str] = "url_lookup"
    url_key: str


@dataclass(frozen=True)
class CjkFieldScan:
    name: ClassVar[str] = "cjk_field_scan"
    variants: Tuple[str, ...]
    fields: Tuple[str, ...] = CJK_SEARCH_FIELDS


@dataclass(frozen=True)
class RomajiFieldScan:
    name: ClassVar[str] = "romaji_field_scan"
    text: str
    tokens: Tuple[str, ...]
    alternatives: Tuple[Tuple[str, ...], ...] = ()
    fields: Tuple[str, ...] = ROMAJI_SEARCH_FIELDS


SearchStrategy = Union[EmptyQuery, UrlLookup, CjkFieldScan, RomajiFieldScan]


@dataclass(frozen=True)
class QueryPlan:
    """
    Output of the dispatcher: one strategy and the ordered predicates
    to hand to the datastore.
    """
    strategy: SearchStrategy
    predicates: Tuple[FieldPredicate, ...] = ()
    apply_availability_filter: bool = False
    normalized_query: str = ""

    @property
    def is_empty(self) -> bool:
        return isinstance(self.strategy, EmptyQuery)

    @property
    def strategy_name(self) -> str:
        return self.strategy.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy_name,
            "normalized_query": self.normalized_query,
            "apply_availability_filter": self.apply_availability_filter,
            "predicates": [p.to_dict() for p in self.predicates],
        }


class QueryDispatcher:
    """
    Decides how a raw query is searched.

    Guards are evaluated in a fixed order and the first match wins:
    too short (non-CJK) -> URL -> CJK -> romaji. Holds only read-only
    lookup tables, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        kanji_variants: Mapping[str, str] = KANJI_VARIANTS,
        alias_expander: Optional[AliasExpander] = None,
        min_query_length: int = MIN_QUERY_LENGTH,
    ):
        self.kanji_variants = kanji_variants
        self.alias_expander = alias_expander or AliasExpander()
        self.min_query_length = min_query_length

    def dispatch(self, raw_query: Optional[str]) -> QueryPlan:
        """
        Classifies the query and builds its predicate set.

        Args:
            raw_query (str): Unmodified user input.

        Returns:
            QueryPlan: Exactly one strategy, never None.
        """
        normalized = normalize_text(raw_query)
        is_cjk = contains_cjk(normalized)

        if len(normalized) < self.min_query_length and not is_cjk:
            return QueryPlan(strategy=EmptyQuery("too_short"), normalized_query=normalized)

        url_key = detect_url(raw_query)
        is_url = url_key is not None

        if is_url:
            plan = self._build_url_plan(url_key, normalized)
        elif is_cjk:
            plan = self._build_cjk_plan(normalized)
        else:
            plan = self._build_romaji_plan(normalized)

        logger.debug("Query %r classified as %s (%d predicates)",
                     raw_query, plan.strategy_name, len(plan.predicates))
        return plan

    def _build_url_plan(self, url_key: str, normalized: str) -> QueryPlan:
        # Sale state is ignored so a pasted link always finds its listing.
        predicate = FieldPredicate(URL_FIELD, MatchMode.SUBSTRING_INSENSITIVE, escape_like(url_key))
        return QueryPlan(
            strategy=UrlLookup(url_key),
            predicates=(predicate,),
            apply_availability_filter=False,
            normalized_query=normalized,
        )

    def _build_cjk_plan(self, normalized: str) -> QueryPlan:
        variants = tuple(get_search_variants(normalized, self.kanji_variants))
        predicates = tuple(
            FieldPredicate(f, MatchMode.SUBSTRING_INSENSITIVE, escape_like(variant))
            for variant in variants
            for f in CJK_SEARCH_FIELDS
        )
        return QueryPlan(
            strategy=CjkFieldScan(variants=variants),
            predicates=predicates,
            apply_availability_filter=True,
            normalized_query=normalized,
        )

    def _build_romaji_plan(self, normalized: str) -> QueryPlan:
        tokens = self._tokenize(normalized)
        if not tokens:
            return QueryPlan(strategy=EmptyQuery("no_terms"), normalized_query=normalized)

        groups = tuple(self._expand_token(token) for token in tokens)
        predicates = tuple(
            FieldPredicate(f, MatchMode.PREFIX_TOKENIZED, groups)
            for f in ROMAJI_SEARCH_FIELDS
        )
        return QueryPlan(
            strategy=RomajiFieldScan(text=normalized, tokens=tokens, alternatives=groups),
            predicates=predicates,
            apply_availability_filter=True,
            normalized_query=normalized,
        )

    @staticmethod
    def _tokenize(normalized: str) -> Tuple[str, ...]:
        """
        Splits on whitespace after operator stripping; drops 1-char and duplicate tokens.
        A quoted phrase stays together as one space-joined token.
        """
        tokens: List[str] = []

        def add(token: str) -> None:
            if len(token) >= MIN_TERM_LENGTH and token not in tokens:
                tokens.append(token)

        for match in _PHRASE_RE.finditer(normalized):
            words = [w for w in strip_tsquery_operators(match.group(1)).split(' ') if len(w) >= MIN_TERM_LENGTH]
            add(' '.join(words))

        remaining = _PHRASE_RE.sub(' ', normalized)
        for token in strip_tsquery_operators(remaining).split(' '):
            add(token)
        return tuple(tokens)

    def _expand_token(self, token: str) -> Tuple[str, ...]:
        alternatives: List[str] = []
        for alias in self.alias_expander.expand(token):
            safe = strip_tsquery_operators(alias)
            if safe and safe not in alternatives:
                alternatives.append(safe)
        return tuple(alternatives) or (token,)


def clamp_limit(value: Any, default: int = 5, minimum: int = 1, maximum: int = 10) -> int:
    """
    Parses and clamps a requested result limit.

    Non-numeric input falls back to the default, floats are truncated
    ('3.7' -> 3), and the result always lies in [minimum, maximum].
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        limit = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(minimum, min(limit, maximum))
