"""
toon-codec: Deterministic TOON encoding for JSON-compatible values.

Identical input MUST produce byte-identical output across runs and across
implementations. Use the golden vector tests to check parity.
"""

from .encoder import (
    EncodeContext,
    EncodeOptions,
    EncodedArray,
    encode,
    encode_array,
    encode_canonical,
)
from .errors import (
    ErrorCode,
    ToonError,
    InvalidValueError,
    DepthExceededError,
)
from .keygen import (
    ALGORITHMS,
    Algorithm,
    KeyGenerationResult,
    KeyPair,
    PasswordOptions,
    generate_key,
    get_algorithm,
)
from .normalize import (
    DEFAULT_MAX_DEPTH,
    MISSING,
    normalize,
)
from .primitives import (
    encode_number,
    encode_primitive,
    encode_string,
)

__version__ = "0.1.0"
__all__ = [
    # Encoding
    "EncodeContext",
    "EncodeOptions",
    "EncodedArray",
    "encode",
    "encode_array",
    "encode_canonical",
    # Normalization
    "DEFAULT_MAX_DEPTH",
    "MISSING",
    "normalize",
    # Primitives
    "encode_number",
    "encode_primitive",
    "encode_string",
    # Key material
    "ALGORITHMS",
    "Algorithm",
    "KeyGenerationResult",
    "KeyPair",
    "PasswordOptions",
    "generate_key",
    "get_algorithm",
    # Errors
    "ErrorCode",
    "ToonError",
    "InvalidValueError",
    "DepthExceededError",
]
