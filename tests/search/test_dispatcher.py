import pytest

from src.search.dispatcher import (
    CJK_SEARCH_FIELDS,
    ROMAJI_SEARCH_FIELDS,
    CjkFieldScan,
    EmptyQuery,
    FieldPredicate,
    MatchMode,
    QueryDispatcher,
    RomajiFieldScan,
    UrlLookup,
    clamp_limit,
)

STRATEGY_TYPES = (EmptyQuery, UrlLookup, CjkFieldScan, RomajiFieldScan)


@pytest.fixture
def dispatcher():
    return QueryDispatcher()


def test_romaji_scenario(dispatcher):
    plan = dispatcher.dispatch(" Gotō  Katana ")

    assert isinstance(plan.strategy, RomajiFieldScan)
    assert plan.normalized_query == "goto katana"
    assert plan.strategy.tokens == ("goto", "katana")
    assert plan.apply_availability_filter is True

    # One prefix predicate per field; every token is required
    assert [p.field for p in plan.predicates] == list(ROMAJI_SEARCH_FIELDS)
    assert "description" not in ROMAJI_SEARCH_FIELDS
    for predicate in plan.predicates:
        assert predicate.mode is MatchMode.PREFIX_TOKENIZED
        assert predicate.value == (("goto",), ("katana",))


def test_cjk_scenario(dispatcher):
    plan = dispatcher.dispatch("国広")

    assert isinstance(plan.strategy, CjkFieldScan)
    assert plan.strategy.variants == ("国広", "國廣")
    assert plan.apply_availability_filter is True

    expected = {
        (field, variant)
        for variant in ("国広", "國廣")
        for field in CJK_SEARCH_FIELDS
    }
    assert {(p.field, p.value) for p in plan.predicates} == expected
    assert len(plan.predicates) == len(expected)
    assert all(p.mode is MatchMode.SUBSTRING_INSENSITIVE for p in plan.predicates)


def test_url_scenario(dispatcher):
    plan = dispatcher.dispatch("choshuya.co.jp/sale/002")

    assert plan.strategy == UrlLookup("choshuya.co.jp/sale/002")
    assert plan.predicates == (
        FieldPredicate("url", MatchMode.SUBSTRING_INSENSITIVE, "choshuya.co.jp/sale/002"),
    )
    assert plan.apply_availability_filter is False


def test_url_takes_precedence_over_romaji(dispatcher):
    plan = dispatcher.dispatch("https://www.example.co.jp/item/42")
    assert isinstance(plan.strategy, UrlLookup)
    assert plan.strategy.url_key == "example.co.jp/item/42"


def test_url_takes_precedence_over_cjk(dispatcher):
    plan = dispatcher.dispatch("example.com/刀")
    assert isinstance(plan.strategy, UrlLookup)


def test_single_cjk_character_is_allowed(dispatcher):
    plan = dispatcher.dispatch("刀")
    assert isinstance(plan.strategy, CjkFieldScan)
    assert plan.strategy.variants == ("刀",)


@pytest.mark.parametrize("query", ["a", "", None, "   ", "\t\n  "])
def test_short_queries_are_rejected(dispatcher, query):
    plan = dispatcher.dispatch(query)
    assert plan.is_empty
    assert plan.strategy == EmptyQuery("too_short")
    assert plan.predicates == ()


def test_query_without_usable_terms_is_empty(dispatcher):
    plan = dispatcher.dispatch("a b")
    assert plan.strategy == EmptyQuery("no_terms")
    assert plan.predicates == ()


def test_single_character_tokens_are_dropped(dispatcher):
    plan = dispatcher.dispatch("a katana b")
    assert plan.strategy.tokens == ("katana",)


def test_aliases_expand_romaji_tokens(dispatcher):
    plan = dispatcher.dispatch("Tokuju katana")
    assert plan.strategy.alternatives == (
        ("tokuju", "tokubetsu juyo", "tokubetsu_juyo"),
        ("katana",),
    )


def test_tsquery_operators_never_reach_tokens(dispatcher):
    plan = dispatcher.dispatch("katana & (goto):*")
    assert plan.strategy.tokens == ("katana", "goto")


def test_cjk_values_are_like_escaped(dispatcher):
    plan = dispatcher.dispatch("刀_100%")
    assert plan.strategy.variants == ("刀_100%",)
    assert {p.value for p in plan.predicates} == {"刀\\_100\\%"}


def test_url_values_are_like_escaped(dispatcher):
    plan = dispatcher.dispatch("example.com/item_42")
    assert plan.strategy.url_key == "example.com/item_42"
    assert plan.predicates[0].value == "example.com/item\\_42"


@pytest.mark.parametrize("query", [
    None, "", "a", "刀", "国広", "katana", " Gotō  Katana ", "a b",
    "https://www.example.co.jp/item/42", "choshuya.co.jp/sale/002",
    "100%", "'; DROP TABLE listings; --", "正宗 katana",
])
def test_exactly_one_strategy_per_query(dispatcher, query):
    plan = dispatcher.dispatch(query)
    assert sum(isinstance(plan.strategy, t) for t in STRATEGY_TYPES) == 1


def test_plan_to_dict(dispatcher):
    data = dispatcher.dispatch("goto katana").to_dict()
    assert data["strategy"] == "romaji_field_scan"
    assert data["predicates"][0] == {
        "field": "title",
        "mode": "prefix-tokenized",
        "value": [["goto"], ["katana"]],
    }


@pytest.mark.parametrize("value,expected", [
    (500, 10),
    (0, 1),
    (-5, 1),
    (None, 5),
    ("", 5),
    ("abc", 5),
    ("3.7", 3),
    ("7", 7),
    (float("nan"), 5),
])
def test_clamp_limit(value, expected):
    assert clamp_limit(value) == expected


def test_clamp_limit_custom_bounds():
    assert clamp_limit("250", default=50, maximum=100) == 100


@pytest.mark.parametrize("query", ["刀\x00", "example.com/a\x00b"])
def test_predicates_never_carry_nul_bytes(dispatcher, query):
    plan = dispatcher.dispatch(query)
    assert plan.predicates
    assert all("\x00" not in p.value for p in plan.predicates)


def test_quoted_phrase_stays_one_token(dispatcher):
    plan = dispatcher.dispatch('"Rai Kunimitsu" tanto')
    assert plan.strategy.tokens == ("rai kunimitsu", "tanto")
    assert plan.strategy.alternatives[0] == ("rai kunimitsu",)


def test_single_quoted_phrase_drops_short_words(dispatcher):
    plan = dispatcher.dispatch("'Osafune a Kanemitsu'")
    assert plan.strategy.tokens == ("osafune kanemitsu",)


def test_unbalanced_quote_is_plain_text(dispatcher):
    plan = dispatcher.dispatch('"rai kunimitsu')
    assert plan.strategy.tokens == ("rai", "kunimitsu")
