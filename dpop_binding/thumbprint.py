"""JWK Thumbprint computation (RFC 7638)"""

import base64
import hashlib
import json
import re
from typing import Any, Dict, Union

from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .errors import ThumbprintError, UnsupportedKeyType

# Required members per key type, in RFC 7638 (lexicographic) order
REQUIRED_MEMBERS = {
    "EC": ("crv", "kty", "x", "y"),
    "RSA": ("e", "kty", "n"),
}

_CURVE_NAMES = {
    "secp256r1": "P-256",
    "secp384r1": "P-384",
    "secp521r1": "P-521",
}

PublicKey = Union[ec.EllipticCurvePublicKey, rsa.RSAPublicKey]

_BASE64URL = re.compile(r"[A-Za-z0-9_-]+")


def compute_thumbprint(public_key: PublicKey) -> str:
    """
    Compute the JWK thumbprint of an EC or RSA public key.

    Args:
        public_key: A ``cryptography`` EC or RSA public key

    Returns:
        Base64url-encoded thumbprint
    """
    return compute_thumbprint_from_jwk(public_key_to_jwk(public_key))


def compute_thumbprint_from_jwk(jwk: Dict[str, Any]) -> str:
    """
    Compute JWK thumbprint from a JWK dictionary.

    Only the required members of the key type take part, so optional
    members such as ``kid`` or ``use`` never change the result.

    Args:
        jwk: JWK dictionary of type EC (crv, x, y) or RSA (n, e)

    Returns:
        Base64url-encoded SHA-256 thumbprint

    Raises:
        UnsupportedKeyType: If ``kty`` is neither EC nor RSA
        ThumbprintError: If a required member is missing
    """
    if not isinstance(jwk, dict):
        raise ThumbprintError("JWK must be a JSON object")

    kty = jwk.get("kty")
    members = REQUIRED_MEMBERS.get(kty) if isinstance(kty, str) else None
    if members is None:
        raise UnsupportedKeyType(kty)

    canonical = {}
    for name in members:
        value = jwk.get(name)
        if not isinstance(value, str) or not value:
            raise ThumbprintError(f"Missing required {kty} member: {name}")
        canonical[name] = value

    serialized = json.dumps(canonical, separators=(",", ":"), sort_keys=True)
    hash_bytes = hashlib.sha256(serialized.encode("utf-8")).digest()
    return _base64url_encode(hash_bytes)


def public_key_to_jwk(public_key: PublicKey) -> Dict[str, str]:
    """Convert an EC or RSA public key to its public JWK members."""
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        crv = _CURVE_NAMES.get(public_key.curve.name)
        if crv is None:
            raise ThumbprintError(f"Unsupported curve: {public_key.curve.name}")
        size = (public_key.curve.key_size + 7) // 8
        numbers = public_key.public_numbers()
        return {
            "kty": "EC",
            "crv": crv,
            "x": _int_to_base64url(numbers.x, size),
            "y": _int_to_base64url(numbers.y, size),
        }

    if isinstance(public_key, rsa.RSAPublicKey):
        numbers = public_key.public_numbers()
        return {
            "kty": "RSA",
            "n": _int_to_base64url(numbers.n),
            "e": _int_to_base64url(numbers.e),
        }

    raise UnsupportedKeyType(type(public_key).__name__)


def _int_to_base64url(value: int, length: int = 0) -> str:
    """Convert an integer to base64url-encoded big-endian bytes.

    With ``length`` of 0 the minimal byte length is used.
    """
    if not length:
        length = max(1, (value.bit_length() + 7) // 8)
    value_bytes = value.to_bytes(length, byteorder="big")
    return _base64url_encode(value_bytes)


def _base64url_to_int(data: str) -> int:
    """Decode a minimal-length base64url integer, as JWK RSA members require."""
    value_bytes = _base64url_decode_strict(data)
    if len(value_bytes) > 1 and value_bytes[0] == 0:
        raise ValueError("Integer has leading zero bytes")
    return int.from_bytes(value_bytes, "big")


def _base64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _base64url_decode(data: str) -> bytes:
    """Base64url decode with padding handling."""
    padding = 4 - len(data) % 4
    if padding != 4:
        data += "=" * padding
    return base64.urlsafe_b64decode(data)


def _base64url_decode_strict(data: str) -> bytes:
    """
    Base64url decode a JWK member, accepting only its canonical encoding.

    Every accepted string is exactly what ``_base64url_encode`` produces for
    the decoded bytes, so one key has one spelling and one thumbprint.
    """
    if not isinstance(data, str) or not _BASE64URL.fullmatch(data):
        raise ValueError("Invalid base64url value")
    decoded = _base64url_decode(data)
    if _base64url_encode(decoded) != data:
        raise ValueError("Non-canonical base64url value")
    return decoded
