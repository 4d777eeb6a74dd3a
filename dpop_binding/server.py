"""Server-side DPoP proof validation and token binding (RFC 9449)."""

import hmac
import json
import logging
import time
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .binding import IssuanceContext, TokenBinding, derive_binding
from .config import DEFAULT_CLOCK_SKEW, DEFAULT_VALIDITY_PERIOD
from .errors import InvalidDPoPProof
from .parser import parse_proof
from .replay import ReplayStore
from .thumbprint import PublicKey, compute_thumbprint, compute_thumbprint_from_jwk
from .validator import RequestContext, validate_proof

logger = logging.getLogger(__name__)

DPOP_HEADER = "DPoP"


def validate(
    proof: str,
    request: RequestContext,
    validity_period: int = DEFAULT_VALIDITY_PERIOD,
    *,
    context: Optional[IssuanceContext] = None,
    replay_store: Optional[ReplayStore] = None,
    clock_skew: int = DEFAULT_CLOCK_SKEW,
    now: Optional[int] = None,
) -> TokenBinding:
    """
    Validate a DPoP proof and derive the token binding for its key.

    Args:
        proof: The DPoP proof JWT
        request: The inbound request the proof must be bound to
        validity_period: Maximum proof age in seconds
        context: Issuance context that receives the binding and ``cnf`` claim
        replay_store: Optional store used to reject reused ``jti`` values
        clock_skew: Tolerance in seconds for proofs issued in the future
        now: Current time in seconds; read once from the clock if omitted

    Returns:
        The token binding on success

    Raises:
        MalformedProof: If the proof cannot be decoded
        InvalidDPoPProof: If any validation check fails
        UnsupportedKeyType: If the embedded key is neither EC nor RSA
    """
    if now is None:
        now = int(time.time())

    parsed = parse_proof(proof)
    validate_proof(parsed, request, validity_period, now, clock_skew)

    if context is not None and context.token_binding is not None:
        raise ValueError("Token binding already set for this issuance request")

    if replay_store is not None:
        expires_at = now + validity_period + clock_skew
        # JSON form keeps null, 1 and "1" apart
        jti_key = json.dumps(parsed.unique_id, sort_keys=True, separators=(",", ":"))
        if not replay_store.add_if_absent(jti_key, expires_at):
            logger.debug("DPoP proof replay detected")
            raise InvalidDPoPProof("DPoP proof replay detected")

    return derive_binding(parsed, context)


def key_thumbprint(public_key: Union[Dict[str, Any], PublicKey]) -> str:
    """
    Compute the thumbprint of a JWK dictionary or a ``cryptography`` public key.

    Raises:
        ThumbprintError: If the key lacks required members
        UnsupportedKeyType: If the key is neither EC nor RSA
    """
    if isinstance(public_key, dict):
        return compute_thumbprint_from_jwk(public_key)
    return compute_thumbprint(public_key)


def verify_binding(binding: Union[TokenBinding, str], token_jkt: str) -> None:
    """
    Verify that a proof's binding matches the token's cnf.jkt claim.

    Args:
        binding: The binding from ``validate``, or its reference
        token_jkt: The cnf.jkt claim from the access token

    Raises:
        InvalidDPoPProof: If they don't match
    """
    reference = binding.binding_reference if isinstance(binding, TokenBinding) else binding
    if not _constant_time_eq(reference, token_jkt):
        raise InvalidDPoPProof(f"Token jkt={token_jkt}, proof jkt={reference}")


def get_dpop_header(
    headers: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]],
) -> Optional[str]:
    """
    Return the DPoP header value from request headers.

    Header names match case-insensitively. A header given as a list of
    values yields its first value.
    """
    items = headers.items() if isinstance(headers, Mapping) else headers
    for name, value in items:
        if name is None or name.lower() != DPOP_HEADER.lower():
            continue
        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value
    return None


def _constant_time_eq(a: str, b: str) -> bool:
    """Constant-time string comparison."""
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a.encode(), b.encode())
