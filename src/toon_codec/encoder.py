"""
TOON encoding for toon-codec.

Renders a canonical value tree as indented, line-oriented text. Arrays use
one of three layouts, tried in order:

- inline:  key[3]: 1,2,3
- tabular: key[2]{id,name}: followed by one row per object
- list:    key[2]: followed by one "- " item per element

CRITICAL: Every layout decision here is part of the format. Output MUST be
byte-identical for identical input.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Literal

from .errors import DepthExceededError
from .normalize import DEFAULT_MAX_DEPTH, normalize, stack_exhausted
from .primitives import COMMA, TAB, encode_key, encode_primitive, is_primitive

logger = logging.getLogger(__name__)

ArrayKind = Literal["inline", "tabular", "list"]

# Trailing spaces/tabs before any line terminator or the end of the text
_TRAILING_WHITESPACE = re.compile(r"[ \t]+(?=[\n\r\u2028\u2029]|\Z)")


@dataclass(frozen=True)
class EncodeOptions:
    """Options for encoding a value."""
    sanitize: bool = False
    indent_size: int = 2
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        if isinstance(self.indent_size, bool) or not isinstance(self.indent_size, int):
            raise ValueError(f"indent_size must be an integer, got {self.indent_size!r}")
        if self.indent_size < 0:
            raise ValueError(f"indent_size must be >= 0, got {self.indent_size}")
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise ValueError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")


@dataclass(frozen=True)
class EncodeContext:
    """Indent level of the line being rendered; each nested block adds one."""
    indent: int = 0
    indent_size: int = 2
    max_depth: int = DEFAULT_MAX_DEPTH

    def nested(self, levels: int = 1) -> "EncodeContext":
        return EncodeContext(self.indent + levels, self.indent_size, self.max_depth)

    def pad(self, extra: int = 0) -> str:
        return " " * ((self.indent + extra) * self.indent_size)


@dataclass
class EncodedArray:
    """An array rendered in one layout, before it is attached to its parent."""
    kind: ArrayKind
    header: str
    body: str
    delimiter: str
    tabular_fields: list[str] | None = None


def _check_depth(ctx: EncodeContext) -> None:
    if ctx.indent > ctx.max_depth:
        raise DepthExceededError(
            f"Nesting depth exceeds maximum of {ctx.max_depth}",
            details={"max_depth": ctx.max_depth},
        )


def choose_delimiter(values: list[Any]) -> str:
    """
    Tab if any string value contains a comma, otherwise comma.

    Only string values are scanned.
    """
    for value in values:
        if isinstance(value, str) and COMMA in value:
            return TAB
    return COMMA


def _shared_keys(rows: list[dict[str, Any]]) -> list[str] | None:
    """
    Key order of the first row if every row has exactly the same key set,
    otherwise None.
    """
    keys = list(rows[0].keys())
    key_set = set(keys)
    for row in rows[1:]:
        if len(row) != len(keys):
            return None
        if any(k not in key_set for k in row):
            return None
    return keys


def _encode_tabular(rows: list[dict[str, Any]], ctx: EncodeContext) -> EncodedArray | None:
    keys = _shared_keys(rows)
    if keys is None:
        return None
    if not all(is_primitive(row[k]) for row in rows for k in keys):
        return None

    delimiter = choose_delimiter([row[k] for row in rows for k in keys])
    fields = COMMA.join(encode_key(k) for k in keys)
    row_pad = ctx.pad(1)
    lines = [
        row_pad + delimiter.join(encode_primitive(row[k], delimiter) for k in keys)
        for row in rows
    ]
    return EncodedArray(
        kind="tabular",
        header=f"[{len(rows)}]{{{fields}}}",
        body="\n".join(lines),
        delimiter=delimiter,
        tabular_fields=keys,
    )


def encode_array(arr: list[Any], ctx: EncodeContext) -> EncodedArray:
    """
    Pick a layout for an array and render its header and body.

    Args:
        arr: Canonical list
        ctx: Context of the line the header attaches to

    Returns:
        EncodedArray; tabular and list bodies are indented one level deeper
        than ctx
    """
    _check_depth(ctx)
    count = len(arr)

    if all(is_primitive(item) for item in arr):
        delimiter = choose_delimiter(arr)
        body = delimiter.join(encode_primitive(item, delimiter) for item in arr)
        return EncodedArray(kind="inline", header=f"[{count}]", body=body, delimiter=delimiter)

    if all(isinstance(item, dict) for item in arr):
        tabular = _encode_tabular(arr, ctx)
        if tabular is not None:
            return tabular

    item_ctx = ctx.nested()
    body = "\n".join(encode_list_item(item, item_ctx) for item in arr)
    return EncodedArray(kind="list", header=f"[{count}]", body=body, delimiter=COMMA)


def _attach_array(token: str, enc: EncodedArray) -> str:
    """Join an array header onto the token before it (key, dash or nothing)."""
    if enc.kind == "inline":
        return f"{token}{enc.header}: {enc.body}"
    if enc.body:
        return f"{token}{enc.header}:\n{enc.body}"
    return f"{token}{enc.header}:"


def encode_object_field(key: str, value: Any, ctx: EncodeContext) -> str:
    pad = ctx.pad()
    token = encode_key(key)

    if is_primitive(value):
        return f"{pad}{token}: {encode_primitive(value)}"

    if isinstance(value, list):
        return _attach_array(pad + token, encode_array(value, ctx))

    if not value:
        return f"{pad}{token}:"

    body = encode_object(value, ctx.nested())
    return f"{pad}{token}:\n{body}" if body else f"{pad}{token}:"


def encode_object(obj: dict[str, Any], ctx: EncodeContext) -> str:
    _check_depth(ctx)
    return "\n".join(encode_object_field(k, v, ctx) for k, v in obj.items())


def _reindent(block: str, levels: int, ctx: EncodeContext) -> str:
    if not block:
        return ""
    prefix = " " * (levels * ctx.indent_size)
    return "\n".join(prefix + line if line else line for line in block.split("\n"))


def encode_list_item(item: Any, ctx: EncodeContext) -> str:
    """
    Render one element of a list-layout array as a "- " item.

    A mapping puts its first field on the dash line and the remaining
    fields one level deeper.
    """
    pad = ctx.pad()

    if is_primitive(item):
        return f"{pad}- {encode_primitive(item)}"

    if isinstance(item, list):
        return _attach_array(f"{pad}- ", encode_array(item, ctx))

    if not item:
        return f"{pad}-"

    _check_depth(ctx)
    fields = iter(item.items())
    first_key, first_value = next(fields)
    first_token = encode_key(first_key)
    tail: list[str] = []

    if is_primitive(first_value):
        first_line = f"{pad}- {first_token}: {encode_primitive(first_value)}"
    elif isinstance(first_value, list):
        enc = encode_array(first_value, ctx)
        if enc.kind == "inline":
            first_line = f"{pad}- {first_token}{enc.header}: {enc.body}"
        else:
            first_line = f"{pad}- {first_token}{enc.header}:"
            if enc.kind == "tabular":
                # Rows were indented for the dash column; move them under the key
                tail.append(_reindent(enc.body, 1, ctx))
            else:
                tail.append(enc.body)
    else:
        first_line = f"{pad}- {first_token}:"
        tail.append(encode_object(first_value, ctx.nested()))

    field_ctx = ctx.nested()
    for key, value in fields:
        tail.append(encode_object_field(key, value, field_ctx))

    rest = "\n".join(block for block in tail if block)
    return f"{first_line}\n{rest}" if rest else first_line


def _render_top_level(value: Any, ctx: EncodeContext) -> str:
    if is_primitive(value):
        return encode_primitive(value)
    if isinstance(value, list):
        enc = encode_array(value, ctx)
        if enc.kind == "inline":
            return f"{enc.header}: {enc.body}"
        return f"{enc.header}:\n{enc.body}"
    if not value:
        return ""
    return encode_object(value, ctx)


def encode_canonical(value: Any, options: EncodeOptions | None = None) -> str:
    """
    Encode an already-normalized value tree.

    The tree must satisfy the canonical invariants; use encode() for raw
    Python values.

    Args:
        value: Canonical value tree
        options: Encoding options (default: EncodeOptions())

    Returns:
        TOON text ending in exactly one newline
    """
    opts = options or EncodeOptions()
    ctx = EncodeContext(indent=0, indent_size=opts.indent_size, max_depth=opts.max_depth)
    try:
        out = _render_top_level(value, ctx)
    except RecursionError as exc:
        raise stack_exhausted(opts.max_depth) from exc
    return _TRAILING_WHITESPACE.sub("", out) + "\n"


def encode(value: Any, options: EncodeOptions | None = None) -> str:
    """
    Normalize a Python value and encode it as TOON.

    Args:
        value: Any Python value
        options: Encoding options (default: strict mode, 2-space indent)

    Returns:
        TOON text ending in exactly one newline

    Raises:
        InvalidValueError: Strict mode only, for values outside JSON
        DepthExceededError: If nesting exceeds options.max_depth
    """
    opts = options or EncodeOptions()
    mode = "sanitize" if opts.sanitize else "strict"
    canonical = normalize(value, mode, max_depth=opts.max_depth)
    text = encode_canonical(canonical, opts)
    logger.debug("Encoded %s value (%s mode) into %d chars", type(value).__name__, mode, len(text))
    return text
