"""
Primitive encoding for toon-codec.

CRITICAL: Output MUST be byte-identical to every other TOON encoder that
follows the same rules. Change nothing here without updating the golden
vectors in tests/fixtures.

Rules:
- Numbers: shortest round-trip digits, never exponential notation
- Strings: bare unless ambiguous, otherwise double-quoted with escapes
- null, true, false as literals
"""

import math
import re
from typing import Any

from .normalize import is_exact_float

COMMA = ","
TAB = "\t"

# Largest integer that every float64 consumer prints digit-for-digit.
_MAX_SAFE_INTEGER = 2**53 - 1

_NUMERIC_LITERAL = re.compile(r"^-?(0|[1-9]\d*)(\.\d+)?([eE][+-]?\d+)?$")
_EXPONENT_FORM = re.compile(r"^([+-]?)(\d+)(?:\.(\d+))?[eE]([+-]?\d+)$")
_LEADING_ZEROS = re.compile(r"^0+(?=\d)")

# Whitespace and line terminators per ECMAScript String.prototype.trim.
# str.isspace() also matches \x1c-\x1f and \x85, which trim() does not.
_TRIM_CHARS = (
    "\t\n\x0b\x0c\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def _strip_fraction_zeros(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def encode_number(num: int | float) -> str:
    """
    Encode a number as plain decimal digits.

    Uses the shortest representation that round-trips through float64 and
    expands any exponent form, so 1e21 becomes 1000000000000000000000 and
    1.5e-7 becomes 0.00000015.

    Booleans encode as their literals. Ints that float64 cannot hold
    exactly keep all their digits; normalize() never lets them through.
    """
    # Must check bool before int (bool is subclass of int in Python)
    if isinstance(num, bool):
        return "true" if num else "false"

    if isinstance(num, int) and (abs(num) <= _MAX_SAFE_INTEGER or not is_exact_float(num)):
        return str(num)

    num = float(num)
    if not math.isfinite(num):
        return "null"
    if num == 0:
        return "0"

    text = repr(num)
    if "e" not in text and "E" not in text:
        return _strip_fraction_zeros(text)

    match = _EXPONENT_FORM.match(text)
    if not match:
        return text

    sign = "-" if match.group(1) == "-" else ""
    int_part = match.group(2)
    frac_part = match.group(3) or ""
    exponent = int(match.group(4))

    digits = int_part + frac_part
    new_pos = len(int_part) + exponent

    if new_pos <= 0:
        significant = digits.lstrip("0")
        if not significant:
            return "0"
        out = "0." + "0" * -new_pos + significant
    elif new_pos >= len(digits):
        out = digits + "0" * (new_pos - len(digits))
    else:
        out = digits[:new_pos] + "." + digits[new_pos:]

    out = _LEADING_ZEROS.sub("", out)
    return sign + _strip_fraction_zeros(out)


def looks_like_number(text: str) -> bool:
    return _NUMERIC_LITERAL.match(text) is not None


def needs_quotes(text: str, delimiter: str) -> bool:
    """True if a bare string would be ambiguous in TOON output."""
    if not text:
        return True
    if text[0] in _TRIM_CHARS or text[-1] in _TRIM_CHARS:
        return True
    if text in ("true", "false", "null"):
        return True
    if looks_like_number(text):
        return True
    if text.startswith("-"):
        return True
    if any(ord(ch) < 0x20 for ch in text):
        return True
    if '"' in text or "\\" in text:
        return True
    if ":" in text:
        return True
    if delimiter in text:
        return True
    # Comma and tab are reserved whatever the active delimiter is
    if COMMA in text or TAB in text:
        return True
    return False


def escape_quoted(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def encode_string(text: str, delimiter: str = COMMA) -> str:
    """
    Encode a string, quoting and escaping it only when required.

    Args:
        text: String value
        delimiter: Active delimiter of the enclosing array (comma or tab)

    Returns:
        The bare string, or a double-quoted escaped form
    """
    if needs_quotes(text, delimiter):
        return f'"{escape_quoted(text)}"'
    return text


def encode_key(key: str) -> str:
    """Keys are always encoded against the comma delimiter."""
    return encode_string(key, COMMA)


def encode_primitive(value: Any, delimiter: str = COMMA) -> str:
    if value is None:
        return "null"

    # Must check bool before int (bool is subclass of int in Python)
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return encode_number(value)

    return encode_string(value, delimiter)
