import pytest

from pdadirectory.config import Limits
from pdadirectory.errors import ValidationError
from pdadirectory.validate import (
    MAX_OFFSET,
    resolve_address,
    resolve_limit,
    resolve_offset,
    validate_request,
)

from registry_fixtures import PROGRAM_A


class TestResolveLimit:
    def test_default(self):
        assert resolve_limit(None) == 25

    def test_custom_defaults(self):
        assert resolve_limit(None, Limits(default_limit=5, max_limit=10)) == 5
        assert resolve_limit(99, Limits(default_limit=5, max_limit=10)) == 10

    @pytest.mark.parametrize("raw,want", [(1, 1), (10, 10), ("10", 10), (" 7 ", 7), (50, 50)])
    def test_accepted(self, raw, want):
        assert resolve_limit(raw) == want

    def test_clamped_to_max(self):
        assert resolve_limit(51) == 50
        assert resolve_limit("1000") == 50

    def test_huge_limit_clamped(self):
        assert resolve_limit(10**40) == 50

    def test_too_many_digits(self):
        with pytest.raises(ValidationError, match="limit is too large"):
            resolve_limit("9" * 5000)

    @pytest.mark.parametrize("raw", ["abc", "", "1.5", 1.5, True, [], {}, "+-3"])
    def test_not_an_integer(self, raw):
        with pytest.raises(ValidationError, match="limit must be an integer"):
            resolve_limit(raw)

    @pytest.mark.parametrize("raw", [0, -1, "-5"])
    def test_not_positive(self, raw):
        with pytest.raises(ValidationError, match="positive"):
            resolve_limit(raw)


class TestResolveOffset:
    def test_default(self):
        assert resolve_offset(None) == 0

    @pytest.mark.parametrize("raw,want", [(0, 0), (25, 25), ("100", 100)])
    def test_accepted(self, raw, want):
        assert resolve_offset(raw) == want

    def test_negative(self):
        with pytest.raises(ValidationError, match="non-negative"):
            resolve_offset(-1)

    def test_not_an_integer(self):
        with pytest.raises(ValidationError):
            resolve_offset("ten")

    @pytest.mark.parametrize("raw", [MAX_OFFSET, str(MAX_OFFSET)])
    def test_largest_accepted(self, raw):
        assert resolve_offset(raw) == 2**63 - 1

    @pytest.mark.parametrize("raw", [MAX_OFFSET + 1, str(MAX_OFFSET + 1), 10**30])
    def test_above_int64(self, raw):
        with pytest.raises(ValidationError, match="at most"):
            resolve_offset(raw)

    def test_too_many_digits(self):
        with pytest.raises(ValidationError, match="offset is too large"):
            resolve_offset("1" * 5000)


class TestValidateRequest:
    def test_empty_body(self):
        req = validate_request({})
        assert req.pda is None and req.program_id is None and req.cursor is None
        assert req.limit == 25 and req.offset == 0

    def test_none_body(self):
        assert validate_request(None).limit == 25

    def test_addresses_decoded(self):
        text = str(PROGRAM_A)
        req = validate_request({"program_id": text, "cursor": text, "limit": 3})
        assert req.program_id == bytes(PROGRAM_A)
        assert req.cursor == bytes(PROGRAM_A)
        assert req.limit == 3

    def test_empty_address_treated_as_absent(self):
        assert validate_request({"pda": ""}).pda is None

    def test_bad_address_names_field(self):
        with pytest.raises(ValidationError, match="cursor"):
            validate_request({"cursor": "not-an-address"})

    @pytest.mark.parametrize("body", [[], "pda", 3])
    def test_body_must_be_object(self, body):
        with pytest.raises(ValidationError, match="JSON object"):
            validate_request(body)


def test_resolve_address_absent():
    assert resolve_address(None, "pda") is None
