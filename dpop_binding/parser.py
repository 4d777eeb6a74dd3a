"""Structural decoding of compact DPoP proofs."""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import MalformedProof
from .thumbprint import _base64url_decode


@dataclass(frozen=True)
class DPoPProof:
    """
    A decoded, not yet validated, DPoP proof.

    Accessors return ``None`` for absent members; validation decides
    what absence means.
    """

    header: Dict[str, Any]
    claims: Optional[Dict[str, Any]]
    signing_input: bytes
    signature: bytes

    @property
    def algorithm(self) -> Optional[Any]:
        return self.header.get("alg")

    @property
    def type(self) -> Optional[Any]:
        return self.header.get("typ")

    @property
    def embedded_key(self) -> Optional[Any]:
        return self.header.get("jwk")

    @property
    def issued_at(self) -> Optional[Any]:
        return self._claim("iat")

    @property
    def unique_id(self) -> Optional[Any]:
        return self._claim("jti")

    @property
    def http_method(self) -> Optional[Any]:
        return self._claim("htm")

    @property
    def http_uri(self) -> Optional[Any]:
        return self._claim("htu")

    @property
    def access_token_hash(self) -> Optional[Any]:
        return self._claim("ath")

    def _claim(self, name: str) -> Optional[Any]:
        if self.claims is None:
            return None
        return self.claims.get(name)


def parse_proof(proof: str) -> DPoPProof:
    """
    Decode a compact DPoP proof into header, claims and signature.

    Args:
        proof: The ``header.claims.signature`` compact serialization

    Returns:
        The decoded proof

    Raises:
        MalformedProof: If the proof is not a three-part compact token
            with a JSON object header
    """
    if not isinstance(proof, str):
        raise MalformedProof("Proof must be a string")

    parts = proof.split(".")
    if len(parts) != 3:
        raise MalformedProof("Proof must have 3 parts")

    try:
        header = json.loads(_base64url_decode(parts[0]))
    except (ValueError, RecursionError):
        raise MalformedProof("Failed to decode header")
    if not isinstance(header, dict):
        raise MalformedProof("Header must be a JSON object")

    try:
        claims = json.loads(_base64url_decode(parts[1]))
    except (ValueError, RecursionError):
        raise MalformedProof("Failed to decode claims")
    if claims is not None and not isinstance(claims, dict):
        raise MalformedProof("Claims must be a JSON object")

    try:
        signature = _base64url_decode(parts[2])
    except ValueError:
        raise MalformedProof("Failed to decode signature")

    return DPoPProof(
        header=header,
        claims=claims,
        signing_input=f"{parts[0]}.{parts[1]}".encode("ascii"),
        signature=signature,
    )
