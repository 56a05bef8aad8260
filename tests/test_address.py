"""Tests for address validation, fragments and recent lookups."""

import json

import pytest

from dashboard.address import (
    INVALID_ADDRESS_MESSAGE, InvalidAddressError, address_from_fragment, fragment_for,
    is_valid_address, normalize_address, parse_address, trunc_addr,
)
from dashboard.recent import RecentLookups

VALID = "0x56687bf447db6ffa42ffe2204a05edaa20f55839"


class TestParseAddress:
    def test_valid(self):
        assert parse_address(VALID) == VALID

    def test_upper_case_prefix(self):
        assert parse_address("0X" + VALID[2:]) == VALID

    def test_prefix_and_whitespace_are_normalized(self):
        assert parse_address("  " + VALID[2:] + " ") == VALID

    def test_mixed_case_kept(self):
        mixed = "0x56687BF447db6ffa42ffe2204a05edaa20f55839"
        assert parse_address(mixed) == mixed

    @pytest.mark.parametrize("raw", ["", "0x", "0x123", VALID + "0", "0xzz" + VALID[4:]])
    def test_invalid(self, raw):
        with pytest.raises(InvalidAddressError) as exc:
            parse_address(raw)
        assert exc.value.message == INVALID_ADDRESS_MESSAGE
        assert exc.value.field == "address"

    def test_normalize_leaves_prefixed_alone(self):
        assert normalize_address(VALID) == VALID
        assert not is_valid_address(None)


class TestFragments:
    def test_round_trip(self):
        assert address_from_fragment(fragment_for(VALID)) == VALID

    def test_fragment_requires_prefix(self):
        assert address_from_fragment("#" + VALID[2:]) is None

    @pytest.mark.parametrize("fragment", ["", "#", "#hello"])
    def test_empty_or_junk(self, fragment):
        assert address_from_fragment(fragment) is None

    def test_no_address_no_fragment(self):
        assert fragment_for(None) == ""

    def test_trunc_addr(self):
        assert trunc_addr(VALID) == "0x56687b...f55839"


def addr(n):
    return "0x" + f"{n:040x}"


class TestRecentLookups:
    def test_most_recent_first(self, recent):
        recent.add(addr(1))
        recent.add(addr(2))
        assert recent.load() == [addr(2), addr(1)]

    def test_repeat_moves_to_front(self, recent):
        for n in (1, 2, 3):
            recent.add(addr(n))
        assert recent.add(addr(1)) == [addr(1), addr(3), addr(2)]

    def test_capacity(self, recent):
        for n in range(8):
            recent.add(addr(n))
        assert recent.load() == [addr(n) for n in (7, 6, 5, 4, 3)]

    def test_persisted_as_json(self, recent):
        recent.add(addr(1))
        with open(recent.path) as f:
            assert json.load(f) == [addr(1)]
        assert RecentLookups(path=recent.path).load() == [addr(1)]

    def test_missing_or_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "recent.json"
        lookups = RecentLookups(path=str(path))
        assert lookups.load() == []
        path.write_text("{not json")
        assert lookups.load() == []
        path.write_text('{"a": 1}')
        assert lookups.load() == []

    def test_clear(self, recent):
        recent.add(addr(1))
        recent.clear()
        assert recent.load() == []
        recent.clear()
