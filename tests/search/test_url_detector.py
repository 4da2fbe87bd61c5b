import pytest

from src.search.url_detector import detect_url


@pytest.mark.parametrize("text,expected", [
    ("https://www.example.co.jp/item/42", "example.co.jp/item/42"),
    ("choshuya.co.jp/sale/002", "choshuya.co.jp/sale/002"),
    ("http://Example.com/", "example.com"),
    ("www.aoijapan.com/katana///", "aoijapan.com/katana"),
    ("example.com:8080/item", "example.com:8080/item"),
    ("https://example.com/item?id=5", "example.com/item?id=5"),
    ("  https://nihonto.ca/tsuba/  ", "nihonto.ca/tsuba"),
    ("example.com/刀", "example.com/刀"),
])
def test_detects_urls(text, expected):
    assert detect_url(text) == expected


@pytest.mark.parametrize("text", [
    "katana",
    "goto katana",
    "a.b",
    "e.g.",
    "https://example.com/a b",
    "国広.com",
    "http://",
    "example.c",
    "",
    None,
])
def test_rejects_non_urls(text):
    assert detect_url(text) is None


def test_out_of_range_port_is_not_a_url():
    assert detect_url("example.com:99999/item") is None


def test_nul_bytes_never_reach_the_key():
    assert detect_url("example.com/a\x00b") == "example.com/ab"
