from src.search.alias_expander import SEARCH_ALIASES, AliasExpander, expand_aliases


def test_certification_abbreviation_expands():
    assert expand_aliases("tokuju") == ["tokuju", "tokubetsu juyo", "tokubetsu_juyo"]


def test_lookup_is_case_insensitive():
    assert expand_aliases("TOKUHO") == ["tokuho", "tokubetsu hozon", "tokubetsu_hozon"]


def test_fuchikashira_separator_variants():
    assert expand_aliases("fuchikashira") == [
        "fuchikashira", "fuchi_kashira", "fuchi-kashira", "fuchi kashira",
    ]


def test_original_word_is_not_duplicated():
    assert expand_aliases("katana") == ["katana"]
    # 'tantō' normalizes to the original word
    assert expand_aliases("tanto") == ["tanto", "tantou"]


def test_unknown_word_returns_itself():
    assert expand_aliases("Masamune") == ["masamune"]


def test_multi_word_input_is_not_expanded():
    assert expand_aliases("tokuju katana") == ["tokuju katana"]


def test_empty_word():
    assert expand_aliases("") == []
    assert expand_aliases(None) == []


def test_injected_dictionary():
    expander = AliasExpander({"nbthk": ("nihon bijutsu token hozon kyokai",)})
    assert expander.expand("NBTHK") == ["nbthk", "nihon bijutsu token hozon kyokai"]
    assert expander.expand("tokuju") == ["tokuju"]


def test_default_dictionary_keys_are_normalized():
    for key in SEARCH_ALIASES:
        assert key == key.lower().strip()
