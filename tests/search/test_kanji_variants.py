import pytest

from src.search.kanji_variants import (
    KANJI_VARIANTS,
    get_search_variants,
    has_kanji_variants,
    to_traditional,
)


def test_table_has_fifty_entries():
    assert len(KANJI_VARIANTS) == 50
    assert KANJI_VARIANTS["国"] == "國"
    assert KANJI_VARIANTS["広"] == "廣"


def test_table_is_read_only():
    with pytest.raises(TypeError):
        KANJI_VARIANTS["刀"] = "刂"


def test_to_traditional_only_changes_mapped_characters():
    assert to_traditional("国") == "國"
    assert to_traditional("国広") == "國廣"
    assert to_traditional("備前国長船") == "備前國長船"


def test_text_without_mapped_characters_is_unchanged():
    assert has_kanji_variants("正宗") is False
    assert to_traditional("正宗") == "正宗"
    assert has_kanji_variants("katana") is False
    assert to_traditional("") == ""


def test_has_kanji_variants():
    assert has_kanji_variants("国") is True
    assert has_kanji_variants("長谷部国重") is True
    assert has_kanji_variants(None) is False


def test_search_variants():
    assert get_search_variants("国広") == ["国広", "國廣"]
    assert get_search_variants("正宗") == ["正宗"]
    assert get_search_variants(" 国 ") == ["国", "國"]
    assert get_search_variants("") == []


def test_custom_table():
    table = {"刀": "劒"}
    assert has_kanji_variants("名刀", table) is True
    assert to_traditional("名刀", table) == "名劒"
    assert get_search_variants("国", table) == ["国"]
