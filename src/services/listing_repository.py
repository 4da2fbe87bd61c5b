# src/services/listing_repository.py
# Responsibility: Translates a QueryPlan into SQL against the listings table and runs it.

import logging
import re
from typing import Any, Dict, List, Sequence, Tuple

import psycopg2
from psycopg2.extras import RealDictCursor

from src.config.settings import settings
from src.search.dispatcher import MatchMode, QueryPlan
from src.services.db import DBTransaction
from src.services.errors import DatastoreError

logger = logging.getLogger(__name__)

# Columns a predicate may reference. Field names never come from user input,
# but they are interpolated into SQL, so they are checked anyway.
SEARCHABLE_COLUMNS = frozenset({
    "url",
    "title",
    "smith",
    "tosogu_maker",
    "school",
    "tosogu_school",
    "description",
})

STATUS_AVAILABLE = "(l.status = 'available' OR l.is_available IS TRUE)"
STATUS_SOLD = "(l.status IN ('sold', 'presumed_sold') OR l.is_sold IS TRUE)"

_WORD_SPLIT_RE = re.compile(r"[\W_]+")

SELECT_CLAUSE = """
    SELECT
        l.id,
        l.url,
        l.title,
        l.item_type,
        l.price_value,
        l.price_currency,
        l.cert_type,
        l.smith,
        l.tosogu_maker,
        l.images,
        l.stored_images,
        l.first_seen_at,
        d.name AS dealer_name,
        d.domain AS dealer_domain
"""

FROM_CLAUSE = "FROM listings l JOIN dealers d ON d.id = l.dealer_id"


def _column(field: str) -> str:
    if field not in SEARCHABLE_COLUMNS:
        raise ValueError(f"Unsupported search field: {field}")
    return f"l.{field}"


def build_tsquery(groups: Sequence[Sequence[str]]) -> str:
    """
    Builds a prefix tsquery from token groups.

    Each group is OR'd internally, groups are AND'd. Multi-word alternatives
    become adjacency phrases.

    Example:
        build_tsquery([("tokuju", "tokubetsu juyo"), ("katana",)])
        -> '(tokuju:* | tokubetsu:* <-> juyo:*) & katana:*'
    """
    parts = []
    for group in groups:
        alternatives = []
        for alternative in group:
            words = [w for w in _WORD_SPLIT_RE.split(alternative) if w]
            phrase = " <-> ".join(f"{w}:*" for w in words)
            if phrase and phrase not in alternatives:
                alternatives.append(phrase)
        if not alternatives:
            continue
        if len(alternatives) == 1:
            parts.append(alternatives[0])
        else:
            parts.append(f"({' | '.join(alternatives)})")
    return " & ".join(parts)


def build_where_clause(plan: QueryPlan, tab: str = "available") -> Tuple[str, List[Any]]:
    """
    Compiles the plan's predicates and filters into a WHERE clause.

    Substring predicates are OR'd; prefix-tokenized predicates share one
    full-text document built from their fields. Filters are AND'd.

    Args:
        plan (QueryPlan): Non-empty dispatcher output.
        tab (str): 'available' or 'sold'; only used when the plan asks for filtering.

    Returns:
        Tuple[str, List[Any]]: SQL fragment and its parameters.
    """
    conditions: List[str] = []
    params: List[Any] = []

    prefix_fields: List[str] = []
    prefix_groups: Any = None

    for predicate in plan.predicates:
        if predicate.mode is MatchMode.SUBSTRING_INSENSITIVE:
            conditions.append(f"{_column(predicate.field)} ILIKE %s ESCAPE '\\'")
            params.append(f"%{predicate.value}%")
        elif predicate.mode is MatchMode.PREFIX_TOKENIZED:
            prefix_fields.append(_column(predicate.field))
            prefix_groups = predicate.value

    if prefix_fields:
        tsquery = build_tsquery(prefix_groups)
        if tsquery:
            document = " || ".join(
                f"to_tsvector('simple', COALESCE({col}, ''))" for col in prefix_fields
            )
            conditions.append(f"({document}) @@ to_tsquery('simple', %s)")
            params.append(tsquery)

    if not conditions:
        # Nothing searchable; match nothing rather than everything.
        return "WHERE FALSE", []

    where = f"WHERE ({' OR '.join(conditions)})"

    if plan.apply_availability_filter:
        where += f" AND {STATUS_SOLD if tab == 'sold' else STATUS_AVAILABLE}"
        where += " AND l.price_jpy IS NOT NULL AND l.price_jpy >= %s"
        params.append(settings.SEARCH.MIN_PRICE_JPY)

    return where, params


class ListingRepository:
    """
    Datastore collaborator for listing search.
    Evaluates dispatcher predicates and returns recency-ordered rows plus an exact total.
    """

    def find(self, plan: QueryPlan, limit: int, offset: int = 0,
             tab: str = "available") -> Tuple[List[Dict[str, Any]], int]:
        """
        Runs the plan against PostgreSQL.

        Args:
            plan (QueryPlan): Dispatcher output.
            limit (int): Maximum rows to return.
            offset (int): Rows to skip (paged search).
            tab (str): Sale-state tab for filtered plans.

        Returns:
            Tuple[List[Dict], int]: Rows ordered by first_seen_at DESC, and the total match count.

        Raises:
            DatastoreError: On any database failure.
        """
        if plan.is_empty:
            return [], 0

        where_clause, params = build_where_clause(plan, tab)

        rows_sql = (
            f"{SELECT_CLAUSE} {FROM_CLAUSE} {where_clause} "
            "ORDER BY l.first_seen_at DESC NULLS LAST, l.id DESC LIMIT %s OFFSET %s"
        )
        count_sql = f"SELECT COUNT(*) {FROM_CLAUSE} {where_clause}"

        try:
            with DBTransaction() as conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cur:
                    cur.execute(rows_sql, tuple(params) + (limit, offset))
                    rows = [dict(row) for row in cur.fetchall()]
                    cur.execute(count_sql, tuple(params))
                    total = cur.fetchone()["count"]
        except (psycopg2.Error, ValueError) as e:
            # psycopg2 raises ValueError for parameters it cannot adapt (e.g. NUL bytes).
            raise DatastoreError(str(e).strip() or "Datastore query failed",
                                 operation=plan.strategy_name) from e

        logger.debug("[Repository] %s matched %s rows (returned %d)", plan.strategy_name, total, len(rows))
        return rows, int(total)
