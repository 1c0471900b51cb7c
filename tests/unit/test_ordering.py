"""Tests for store child ordering."""

from trackdesk.shared.utils.ordering import ordered_children, store_key_order


def test_integer_keys_first_numerically_then_strings() -> None:
    value = {"b": 1, "10": 2, "a": 3, "2": 4, "-1": 5}
    assert [k for k, _ in ordered_children(value)] == ["-1", "2", "10", "a", "b"]


def test_non_canonical_numbers_sort_as_strings() -> None:
    assert store_key_order("007")[0] == 1
    assert store_key_order("99999999999")[0] == 1
    assert store_key_order("42") == (0, 42, "")


def test_lists_yield_indexes_and_skip_holes() -> None:
    assert ordered_children(["x", None, "z"]) == [("0", "x"), ("2", "z")]


def test_scalars_have_no_children() -> None:
    assert ordered_children("x") == []
    assert ordered_children(None) == []
