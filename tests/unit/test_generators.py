"""Tests for push key generation."""

from trackdesk.shared.utils.generators import (
    PUSH_CHARS,
    PUSH_KEY_LENGTH,
    PushKeyGenerator,
    generate_push_key,
)


def test_push_key_shape() -> None:
    key = generate_push_key()
    assert len(key) == PUSH_KEY_LENGTH == 20
    assert all(ch in PUSH_CHARS for ch in key)


def test_keys_are_unique() -> None:
    keys = {generate_push_key() for _ in range(500)}
    assert len(keys) == 500


def test_same_millisecond_keys_are_ordered() -> None:
    gen = PushKeyGenerator()
    keys = [gen(1_700_000_000_000) for _ in range(50)]
    assert keys == sorted(keys)
    assert len(set(keys)) == 50


def test_later_timestamp_sorts_after() -> None:
    gen = PushKeyGenerator()
    assert gen(1_000) < gen(2_000) < gen(1_700_000_000_000)


def test_timestamp_prefix_is_deterministic() -> None:
    assert PushKeyGenerator()(0)[:8] == "--------"
    assert PushKeyGenerator()(1)[:8] == "-------0"
