"""Normalization tests for strict and sanitize modes."""

import math
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from toon_codec import (
    MISSING,
    DepthExceededError,
    EncodeOptions,
    ErrorCode,
    InvalidValueError,
    encode,
    normalize,
)


class _Widget:
    def __str__(self) -> str:
        return "widget"


class TestStrictMode:
    """Strict mode accepts the JSON value space only."""

    def test_primitives_pass_through(self):
        assert normalize(None) is None
        assert normalize(True) is True
        assert normalize("text") == "text"
        assert normalize(42) == 42
        assert normalize(2.5) == 2.5

    def test_negative_zero_becomes_zero(self):
        result = normalize(-0.0)
        assert result == 0
        assert math.copysign(1, result) == 1

    def test_tuple_becomes_list(self):
        assert normalize((1, "a")) == [1, "a"]

    def test_nested_mapping_keeps_order(self):
        result = normalize({"b": {"y": 1, "x": 2}, "a": [None]})
        assert list(result) == ["b", "a"]
        assert list(result["b"]) == ["y", "x"]

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, value):
        with pytest.raises(InvalidValueError) as exc_info:
            normalize({"score": value})
        assert exc_info.value.code == ErrorCode.INVALID_VALUE
        assert exc_info.value.details["path"] == "$.score"

    def test_class_instance_rejected(self):
        with pytest.raises(InvalidValueError) as exc_info:
            normalize([1, _Widget()])
        assert "_Widget" in str(exc_info.value)
        assert exc_info.value.details == {"type": "_Widget", "path": "$[1]"}

    def test_big_integer_rejected(self):
        with pytest.raises(InvalidValueError):
            normalize(2**53 + 1)

    def test_exactly_representable_large_integer_accepted(self):
        assert normalize(2**60) == 2**60

    @pytest.mark.parametrize("value", [len, datetime(2024, 1, 1), MISSING, {1, 2}, b"raw"])
    def test_other_types_rejected(self, value):
        with pytest.raises(InvalidValueError):
            normalize(value)

    def test_non_string_key_rejected(self):
        with pytest.raises(InvalidValueError):
            normalize({1: "one"})

    def test_error_to_dict(self):
        with pytest.raises(InvalidValueError) as exc_info:
            normalize(float("nan"))
        payload = exc_info.value.to_dict()
        assert payload["code"] == "INVALID_VALUE"
        assert payload["details"]["type"] == "float"

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            normalize(1, "lenient")


class TestSanitizeMode:
    """Sanitize mode coerces instead of failing."""

    def test_non_finite_becomes_none(self):
        assert normalize([float("nan"), float("inf")], "sanitize") == [None, None]

    def test_big_integer_becomes_string(self):
        assert normalize(2**53 + 1, "sanitize") == "9007199254740993"

    def test_missing_dropped_from_mapping(self):
        assert normalize({"a": MISSING, "b": 1}, "sanitize") == {"b": 1}

    def test_missing_becomes_none_in_sequence(self):
        assert normalize([MISSING, 1, MISSING], "sanitize") == [None, 1, None]

    def test_aware_datetime_to_utc_iso(self):
        tz = timezone(timedelta(hours=2))
        value = datetime(2024, 3, 5, 14, 30, 0, 123456, tzinfo=tz)
        assert normalize(value, "sanitize") == "2024-03-05T12:30:00.123Z"

    def test_naive_datetime_taken_as_utc(self):
        assert normalize(datetime(2024, 1, 2, 3, 4, 5), "sanitize") == "2024-01-02T03:04:05.000Z"

    def test_date_to_iso(self):
        assert normalize(date(2024, 1, 2), "sanitize") == "2024-01-02"

    def test_callables_become_none(self):
        assert normalize({"fn": lambda: 1, "builtin": len}, "sanitize") == {"fn": None, "builtin": None}

    def test_other_objects_become_strings(self):
        assert normalize([_Widget(), Decimal("1.50")], "sanitize") == ["widget", "1.50"]

    def test_non_string_keys_stringified(self):
        assert normalize({1: "one", None: "none"}, "sanitize") == {"1": "one", "None": "none"}

    def test_missing_marker_repr(self):
        assert repr(MISSING) == "MISSING"
        assert not MISSING


class TestDepthGuard:
    """Deep or cyclic input fails with DepthExceededError."""

    def test_deep_nesting_rejected(self):
        value: list = []
        for _ in range(50):
            value = [value]
        with pytest.raises(DepthExceededError) as exc_info:
            normalize(value, max_depth=10)
        assert exc_info.value.code == ErrorCode.DEPTH_EXCEEDED

    def test_cycle_rejected_in_sanitize_mode(self):
        value: dict = {"name": "loop"}
        value["self"] = value
        with pytest.raises(DepthExceededError):
            normalize(value, "sanitize")

    def test_limit_above_stack_raises_depth_error(self):
        value: list = []
        for _ in range(3000):
            value = [value]
        with pytest.raises(DepthExceededError) as exc_info:
            normalize(value, "sanitize", max_depth=5000)
        assert exc_info.value.code == ErrorCode.DEPTH_EXCEEDED
        assert exc_info.value.details["max_depth"] == 5000

    def test_nesting_at_limit_allowed(self):
        value: list = []
        for _ in range(9):
            value = [value]
        assert normalize(value, max_depth=10) == value


class TestEncodeModes:
    """Mode selection through the encode driver."""

    def test_sanitize_drops_missing_field(self):
        value = {"a": MISSING, "b": [MISSING]}
        assert encode(value, EncodeOptions(sanitize=True)) == "b[1]: null\n"

    def test_strict_rejects_what_sanitize_accepts(self):
        value = {"w": _Widget(), "n": float("inf")}
        with pytest.raises(InvalidValueError):
            encode(value)
        assert encode(value, EncodeOptions(sanitize=True)) == "w: widget\nn: null\n"
