"""Helper functions for building and inspecting proofs in tests."""

import base64
import json

NOW = 1_700_000_000
TOKEN_URL = "https://host/token"
BASE64URL_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def base64url_decode(data: str) -> bytes:
    """Base64url decode with padding handling."""
    padding = 4 - len(data) % 4
    if padding != 4:
        data += "=" * padding
    return base64.urlsafe_b64decode(data)


def base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode_header(proof: str) -> dict:
    return json.loads(base64url_decode(proof.split(".")[0]))


def decode_claims(proof: str) -> dict:
    return json.loads(base64url_decode(proof.split(".")[1]))


def flip_signature_bit(proof: str, byte_index: int = 5, bit: int = 0x01) -> str:
    """Flip one bit of the decoded signature and re-encode the proof."""
    header_b64, claims_b64, sig_b64 = proof.split(".")
    sig = bytearray(base64url_decode(sig_b64))
    sig[byte_index] ^= bit
    return f"{header_b64}.{claims_b64}.{base64url_encode(bytes(sig))}"
