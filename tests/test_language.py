import pytest

from admincore.tools.language import parse_accept_language


def test_explicit_quality_orders_best_first():
    assert parse_accept_language("a;q=0.1,b;q=0.5,c;q=0.9", None) == ["c", "b", "a"]


def test_position_used_when_quality_missing():
    assert parse_accept_language("fr,de,en", None) == ["fr", "de", "en"]


def test_mixed_header_is_lowercased():
    result = parse_accept_language("en-US,en;q=0.9,fr;q=0.8", None)
    assert result == ["en-us", "en", "fr"]


def test_supported_languages_filter():
    assert parse_accept_language("en,fr,de", ["de", "fr"]) == ["fr", "de"]


def test_supported_match_is_exact():
    assert parse_accept_language("EN", ["EN"]) == []
    assert parse_accept_language("EN", ["en"]) == ["en"]


def test_empty_entries_are_skipped():
    assert parse_accept_language(" , en ,,", None) == ["en"]


def test_empty_header():
    assert parse_accept_language("", None) == []


def test_invalid_quality_counts_as_one():
    assert parse_accept_language("x;q=abc,y;q=0.5", None) == ["x", "y"]


def test_zero_quality_falls_back_to_position():
    assert parse_accept_language("a;q=0,b;q=0.5", None) == ["a", "b"]
    assert parse_accept_language("a;q=0.1,b;q=0.5", None) == ["b", "a"]


def test_other_parameters_use_position():
    assert parse_accept_language("a;level=1,b;q=5", None) == ["b", "a"]


def test_underscore_is_kept():
    assert parse_accept_language("en_US", None) == ["en_us"]


@pytest.mark.parametrize("header", ["en,fr;q=0.3,de;q=0.7", "de;q=0.7,en,fr;q=0.3"])
def test_result_is_a_permutation_of_inputs(header):
    assert sorted(parse_accept_language(header, None)) == ["de", "en", "fr"]