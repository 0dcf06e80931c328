"""
Value normalization for toon-codec.

Converts arbitrary Python values into the canonical value tree the encoder
consumes: None, bool, int/float, str, list, or dict with str keys.

Two modes:
- strict: anything outside the JSON value space raises InvalidValueError
- sanitize: best-effort coercion, never fails on acyclic input
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Literal

from .errors import DepthExceededError, InvalidValueError


NormalizeMode = Literal["strict", "sanitize"]

# Nesting levels allowed before DepthExceededError. Keeps well clear of the
# interpreter recursion limit, since the encoder spends several frames per level.
DEFAULT_MAX_DEPTH = 200


class _Missing:
    """Marker for an absent value (an unset field)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def normalize(
    value: Any,
    mode: NormalizeMode = "strict",
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Any:
    """
    Normalize a Python value into a canonical value tree.

    Args:
        value: Any Python value
        mode: "strict" or "sanitize"
        max_depth: Maximum nesting depth before DepthExceededError

    Returns:
        Canonical value (None, bool, int, float, str, list or dict)

    Raises:
        InvalidValueError: In strict mode, for non-JSON values
        DepthExceededError: If nesting exceeds max_depth (including cycles)
        ValueError: If mode is not recognised
    """
    if mode not in ("strict", "sanitize"):
        raise ValueError(f"Unknown normalize mode: {mode!r}")
    try:
        if mode == "sanitize":
            return _sanitize(value, 0, max_depth, "$")
        return _strict(value, 0, max_depth, "$")
    except RecursionError as exc:
        raise stack_exhausted(max_depth) from exc


def is_exact_float(num: int) -> bool:
    """True if an int survives a round trip through float64 unchanged."""
    try:
        return float(num) == num
    except OverflowError:
        return False


def stack_exhausted(max_depth: int) -> DepthExceededError:
    """Error for input that ran out of interpreter stack before reaching max_depth."""
    return DepthExceededError(
        f"Nesting depth exceeds the interpreter stack (max_depth={max_depth})",
        details={"max_depth": max_depth, "reason": "recursion_limit"},
    )


def _check_depth(depth: int, max_depth: int, path: str) -> None:
    if depth > max_depth:
        raise DepthExceededError(
            f"Nesting depth exceeds maximum of {max_depth}",
            details={"max_depth": max_depth, "path": path},
        )


def _invalid(value: Any, path: str, reason: str) -> InvalidValueError:
    type_name = type(value).__name__
    return InvalidValueError(
        f"{reason} in strict mode: {type_name} at {path}",
        details={"type": type_name, "path": path},
    )


def _strict(value: Any, depth: int, max_depth: int, path: str) -> Any:
    if value is None:
        return None

    # bool before int (bool is a subclass of int)
    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        return str(value)

    if isinstance(value, int):
        if not is_exact_float(value):
            raise _invalid(value, path, "Big integer")
        return int(value)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise _invalid(value, path, "Non-finite number")
        return 0 if value == 0 else float(value)

    if isinstance(value, (list, tuple)):
        _check_depth(depth + 1, max_depth, path)
        return [
            _strict(item, depth + 1, max_depth, f"{path}[{idx}]")
            for idx, item in enumerate(value)
        ]

    if isinstance(value, dict):
        _check_depth(depth + 1, max_depth, path)
        out: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise _invalid(key, f"{path}.{key!r}", "Non-string key")
            out[key] = _strict(item, depth + 1, max_depth, f"{path}.{key}")
        return out

    raise _invalid(value, path, "Non-JSON type")


def _iso_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-01-02T03:04:05.678Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _sanitize(value: Any, depth: int, max_depth: int, path: str) -> Any:
    if value is None or value is MISSING:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        return str(value)

    if isinstance(value, int):
        return int(value) if is_exact_float(value) else str(int(value))

    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return 0 if value == 0 else float(value)

    # datetime before date (datetime is a subclass of date)
    if isinstance(value, datetime):
        return _iso_timestamp(value)

    if isinstance(value, date):
        return value.isoformat()

    if isinstance(value, (list, tuple)):
        _check_depth(depth + 1, max_depth, path)
        # Missing elements become None to keep index alignment
        return [
            _sanitize(item, depth + 1, max_depth, f"{path}[{idx}]")
            for idx, item in enumerate(value)
        ]

    if isinstance(value, dict):
        _check_depth(depth + 1, max_depth, path)
        out: dict[str, Any] = {}
        for key, item in value.items():
            if item is MISSING:
                continue
            key = key if isinstance(key, str) else str(key)
            out[key] = _sanitize(item, depth + 1, max_depth, f"{path}.{key}")
        return out

    if callable(value):
        return None

    return str(value)
