"""
Key-material generation for toon-codec.

Produces secrets from algorithm presets: hex or base64url keys, PINs,
recovery codes, passphrases, passwords, and RSA key pairs as PEM text.
Results are plain strings, ready to be embedded in a value passed to
encode().

Randomness comes from an injected random.Random-compatible source. The
default is secrets.SystemRandom(); pass a seeded random.Random only in tests.

SECURITY: Never log generated values.
"""

import base64
import logging
import math
import random
import secrets
from dataclasses import dataclass
from typing import Any, Literal

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

logger = logging.getLogger(__name__)

AlgorithmKind = Literal["hex", "base64url", "pin", "recovery", "passphrase", "rsa-pair", "password"]
RsaAlgorithm = Literal["RSA-OAEP", "RSA-PSS"]


@dataclass(frozen=True)
class Algorithm:
    """A key-generation preset."""
    value: str
    label: str
    kind: AlgorithmKind
    length: int | None = None
    rsa_alg: RsaAlgorithm | None = None


ALGORITHMS: list[Algorithm] = [
    Algorithm("aes-256", "AES-256", "hex", 32),
    Algorithm("kek", "KEK", "hex", 32),
    Algorithm("master", "Master/Root Key", "hex", 32),
    Algorithm("hmac-sha256", "HMAC-SHA256 Key", "hex", 32),
    Algorithm("hmac-sha512", "HMAC-SHA512 Key", "hex", 64),
    Algorithm("poly1305", "Poly1305 Key", "hex", 32),
    Algorithm("rsa-oaep", "RSA-OAEP Key Pair", "rsa-pair", rsa_alg="RSA-OAEP"),
    Algorithm("rsa-pss", "RSA-PSS Key Pair", "rsa-pair", rsa_alg="RSA-PSS"),
    Algorithm("jwt-secret", "JWT Signing Secret", "base64url", 32),
    Algorithm("api-key", "API Key", "base64url", 24),
    Algorithm("pin", "PIN", "pin", 6),
    Algorithm("recovery", "Recovery Codes", "recovery"),
    Algorithm("passphrase", "Memorable Passphrase", "passphrase"),
    Algorithm("password", "Password", "password"),
]

BIT_OPTIONS = [128, 160, 192, 256, 320, 381]
PIN_OPTIONS = [4, 6, 8, 12, 16, 24]
PASSPHRASE_OPTIONS = [4, 8, 12, 24]
RECOVERY_OPTIONS = [8, 16]
PASSWORD_LENGTHS = [12, 24, 48, 64, 86, 102, 124]

API_KEY_PREFIX = "kagi_key_"
RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

_LOWER = "abcdefghijklmnopqrstuvwxyz"
_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_DIGITS = "0123456789"
_SYMBOLS = "!@#$%^&*()-_=+[]{};:,.<>?/|"

WORDS = [
    "astro", "binary", "cinder", "cobalt", "delta", "ember", "fable", "forge", "glyph", "harbor",
    "ivory", "jolt", "kernel", "lumen", "matrix", "nimbus", "onyx", "pulse", "quartz", "raven",
    "sable", "tango", "ultra", "vivid", "whisper", "xenon", "yonder", "zephyr", "axiom", "bravo",
    "cipher", "drift", "echo", "flare", "grit", "halo", "ionic", "jigsaw", "karma", "legend",
    "mosaic", "nova", "orbit", "prism", "quiver", "ripple", "signal", "tempo", "umbra", "vector",
    "warden", "zircon", "arc", "bolt", "crest", "dusk", "ember", "flux", "glint", "haze",
    "iris", "jolt", "kite", "latch", "mirth", "nylon", "opal", "pivot", "quest", "relic",
    "spectrum", "trace", "uplink", "vault", "wisp", "yarrow", "zenith", "anchor", "brisk", "crux",
    "dynamo", "ember", "frost", "groove", "hollow", "ion", "jolt", "keystone", "lyric", "manta",
    "noon", "oracle", "plasma", "quill", "rover", "stark", "thrum", "unity", "vortex", "weld",
    "yearn", "zen", "amber", "basil", "copper", "dahlia", "ember", "fennel", "garnet", "harrow",
    "indigo", "juniper", "kestrel", "laurel", "merit", "nectar", "olive", "piper", "quartz", "rumor",
]


@dataclass(frozen=True)
class PasswordOptions:
    """Character classes enabled for generated passwords."""
    symbols: bool = True
    numeric: bool = True
    camelcase: bool = True


@dataclass(frozen=True)
class KeyPair:
    """PEM-encoded key pair (SPKI public key, PKCS#8 private key)."""
    public_key: str
    private_key: str

    def to_dict(self) -> dict[str, str]:
        return {
            "publicKey": self.public_key,
            "privateKey": self.private_key,
        }


@dataclass(frozen=True)
class KeyGenerationResult:
    """Either a single secret string or a key pair."""
    kind: Literal["single", "pair"]
    value: str | None = None
    pair: KeyPair | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.kind == "pair" and self.pair is not None:
            return {"kind": "pair", "pair": self.pair.to_dict()}
        return {"kind": "single", "value": self.value}


def get_algorithm(value: str) -> Algorithm:
    """
    Look up a preset by its value.

    Raises:
        KeyError: If no preset has that value
    """
    for algorithm in ALGORITHMS:
        if algorithm.value == value:
            return algorithm
    raise KeyError(f"Unknown algorithm: {value}")


def supports_bit_selection(algorithm: Algorithm) -> bool:
    return algorithm.kind in ("hex", "base64url")


def build_initial_key_bits_by_alg() -> dict[str, int]:
    """Default key size in bits for every preset that has one."""
    initial: dict[str, int] = {}
    for algorithm in ALGORITHMS:
        if algorithm.value == "api-key":
            initial[algorithm.value] = 192
        elif algorithm.length is not None:
            initial[algorithm.value] = algorithm.length * 8
    return initial


def random_bits(bits: int, rng: random.Random) -> bytes:
    """Random bytes holding exactly `bits` bits; surplus high bits of the first byte are cleared."""
    if bits <= 0:
        raise ValueError(f"bits must be > 0, got {bits}")
    length = math.ceil(bits / 8)
    data = bytearray(rng.randbytes(length))
    extra = length * 8 - bits
    if extra > 0:
        data[0] &= 0xFF >> extra
    return bytes(data)


def to_base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def random_pin(length: int, rng: random.Random) -> str:
    return "".join(str(rng.randrange(10)) for _ in range(length))


def random_passphrase(words: int, rng: random.Random) -> str:
    return "-".join(rng.choice(WORDS) for _ in range(words))


def random_recovery_codes(count: int, rng: random.Random) -> str:
    return "\n".join(f"{random_pin(4, rng)}-{random_pin(4, rng)}" for _ in range(count))


def random_password(length: int, options: PasswordOptions, rng: random.Random) -> str:
    """Empty string when no character class is enabled."""
    charset = ""
    if options.camelcase:
        charset += _LOWER + _UPPER
    if options.numeric:
        charset += _DIGITS
    if options.symbols:
        charset += _SYMBOLS
    if not charset:
        return ""
    return "".join(charset[b % len(charset)] for b in rng.randbytes(length))


def generate_rsa_pem_pair(rsa_alg: RsaAlgorithm = "RSA-PSS") -> KeyPair:
    """
    Generate a 2048-bit RSA key pair as PEM text.

    RSA-OAEP and RSA-PSS keys share the same key material; rsa_alg only
    records the intended use.
    """
    logger.debug("Generating %d-bit RSA key pair for %s", RSA_KEY_SIZE, rsa_alg)
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return KeyPair(
        public_key=public_pem.decode("ascii").rstrip("\n"),
        private_key=private_pem.decode("ascii").rstrip("\n"),
    )


def generate_key(
    algorithm: Algorithm | str,
    key_bits_by_alg: dict[str, int] | None = None,
    pin_length: int = 6,
    passphrase_words: int = 4,
    recovery_count: int = 8,
    password_length: int = 24,
    password_options: PasswordOptions | None = None,
    rng: random.Random | None = None,
) -> KeyGenerationResult:
    """
    Generate key material for a preset.

    Args:
        algorithm: Preset, or its value (e.g. "aes-256")
        key_bits_by_alg: Key size overrides in bits, keyed by preset value
        pin_length: Digits in a PIN
        passphrase_words: Words in a passphrase
        recovery_count: Number of recovery codes
        password_length: Characters in a password
        password_options: Character classes for passwords (default: all)
        rng: Random source (default: secrets.SystemRandom())

    Returns:
        KeyGenerationResult with kind "pair" for RSA presets, else "single"

    Raises:
        KeyError: If algorithm names an unknown preset
        ValueError: If a password is requested with every class disabled
    """
    if isinstance(algorithm, str):
        algorithm = get_algorithm(algorithm)
    source = rng or secrets.SystemRandom()
    logger.debug("Generating key material for %s", algorithm.value)

    if algorithm.kind == "rsa-pair":
        pair = generate_rsa_pem_pair(algorithm.rsa_alg or "RSA-PSS")
        return KeyGenerationResult(kind="pair", pair=pair)

    if algorithm.kind == "pin":
        return KeyGenerationResult(kind="single", value=random_pin(pin_length, source))

    if algorithm.kind == "recovery":
        return KeyGenerationResult(kind="single", value=random_recovery_codes(recovery_count, source))

    if algorithm.kind == "passphrase":
        return KeyGenerationResult(kind="single", value=random_passphrase(passphrase_words, source))

    if algorithm.kind == "password":
        password = random_password(password_length, password_options or PasswordOptions(), source)
        if not password:
            raise ValueError("Select at least one password option.")
        return KeyGenerationResult(kind="single", value=password)

    length = algorithm.length or 32
    selected_bits = (key_bits_by_alg or {}).get(algorithm.value, length * 8)
    data = random_bits(selected_bits, source)
    raw = to_base64url(data) if algorithm.kind == "base64url" else data.hex()
    value = API_KEY_PREFIX + raw if algorithm.value == "api-key" else raw
    return KeyGenerationResult(kind="single", value=value)
