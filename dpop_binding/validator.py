"""Ordered validation of a parsed DPoP proof against the inbound request."""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Union

from .config import DEFAULT_CLOCK_SKEW
from .errors import EXPIRED_DPOP_ERROR, INVALID_DPOP_ERROR, InvalidDPoPProof
from .parser import DPoPProof
from .verifier import verify_signature

logger = logging.getLogger(__name__)

DPOP_JWT_TYPE = "dpop+jwt"

# Members that only appear in private JWKs
PRIVATE_KEY_MEMBERS = ("d", "p", "q", "dp", "dq", "qi", "k")


class RequestContext(Protocol):
    """The inbound HTTP request a proof must be bound to."""

    def method(self) -> str:
        ...

    def absolute_url(self) -> str:
        ...


@dataclass(frozen=True)
class HttpRequest:
    """A plain request context built from a method and a full URL."""

    http_method: str
    url: str

    def method(self) -> str:
        return self.http_method

    def absolute_url(self) -> str:
        return self.url


@dataclass(frozen=True)
class Accepted:
    proof: DPoPProof


@dataclass(frozen=True)
class Rejected:
    reason: str
    message: str = INVALID_DPOP_ERROR

    def to_error(self) -> InvalidDPoPProof:
        return InvalidDPoPProof(self.reason, self.message)


ValidationResult = Union[Accepted, Rejected]


@dataclass(frozen=True)
class _Inputs:
    proof: DPoPProof
    method: str
    url: str
    validity_period: int
    clock_skew: int
    now: int


def _check_jwk(inputs: _Inputs) -> Optional[Rejected]:
    jwk = inputs.proof.embedded_key
    if not isinstance(jwk, dict) or not jwk:
        return Rejected("'jwk' is not present in the DPoP proof header")
    if any(member in jwk for member in PRIVATE_KEY_MEMBERS):
        return Rejected("'jwk' in the DPoP proof header contains private key material")
    return None


def _check_alg(inputs: _Inputs) -> Optional[Rejected]:
    alg = inputs.proof.algorithm
    if not isinstance(alg, str) or not alg or alg.lower() == "none":
        return Rejected("'alg' is not present in the DPoP proof header")
    return None


def _check_type(inputs: _Inputs) -> Optional[Rejected]:
    typ = inputs.proof.type
    if not isinstance(typ, str) or typ.lower() != DPOP_JWT_TYPE:
        return Rejected(f"'typ' in the DPoP proof header is not '{DPOP_JWT_TYPE}'")
    return None


def _check_claims(inputs: _Inputs) -> Optional[Rejected]:
    if inputs.proof.claims is None:
        return Rejected("Claim set is missing in the DPoP proof")
    return None


def _check_issued_at(inputs: _Inputs) -> Optional[Rejected]:
    iat = inputs.proof.issued_at
    if iat is None:
        return Rejected("DPoP proof is missing the 'iat' claim")
    if isinstance(iat, bool) or not isinstance(iat, numbers.Real):
        return Rejected("'iat' claim of the DPoP proof is not a number")
    try:
        finite = math.isfinite(float(iat))
    except OverflowError:
        finite = False
    if not finite:
        return Rejected("'iat' claim of the DPoP proof is out of range")
    if inputs.now - iat > inputs.validity_period:
        return Rejected(
            f"Expired DPoP proof: iat={iat}, now={inputs.now}",
            EXPIRED_DPOP_ERROR,
        )
    if iat > inputs.now + inputs.clock_skew:
        return Rejected(f"DPoP proof issued in the future: iat={iat}, now={inputs.now}")
    return None


def _check_jti(inputs: _Inputs) -> Optional[Rejected]:
    if "jti" not in inputs.proof.claims:
        return Rejected("DPoP proof is missing the 'jti' claim")
    return None


def _check_http_method(inputs: _Inputs) -> Optional[Rejected]:
    htm = inputs.proof.http_method
    if not isinstance(htm, str) or htm.lower() != inputs.method.lower():
        return Rejected(f"DPoP proof HTTP method mismatch: expected {inputs.method}, got {htm}")
    return None


def _check_http_uri(inputs: _Inputs) -> Optional[Rejected]:
    htu = inputs.proof.http_uri
    if not isinstance(htu, str) or htu.lower() != inputs.url.lower():
        return Rejected(f"DPoP proof HTTP URI mismatch: expected {inputs.url}, got {htu}")
    return None


def _check_signature(inputs: _Inputs) -> Optional[Rejected]:
    if not verify_signature(inputs.proof):
        return Rejected("DPoP proof signature verification failed")
    return None


# Header checks, then payload checks, then the signature last
CHECKS: List[Callable[[_Inputs], Optional[Rejected]]] = [
    _check_jwk,
    _check_alg,
    _check_type,
    _check_claims,
    _check_issued_at,
    _check_jti,
    _check_http_method,
    _check_http_uri,
    _check_signature,
]


def check_proof(
    proof: DPoPProof,
    request: RequestContext,
    validity_period: int,
    now: int,
    clock_skew: int = DEFAULT_CLOCK_SKEW,
) -> ValidationResult:
    """
    Run the ordered proof checks and stop at the first failure.

    Args:
        proof: A parsed proof
        request: The inbound request the proof must be bound to
        validity_period: Maximum proof age in seconds
        now: Current time in seconds since the epoch
        clock_skew: Tolerance in seconds for proofs issued in the future

    Returns:
        ``Accepted`` or ``Rejected`` with the reason of the first failed check

    Raises:
        UnsupportedKeyType: If the embedded key is neither EC nor RSA
        ValueError: If the request has no method or URL
    """
    method = request.method()
    url = request.absolute_url()
    if method is None or url is None:
        raise ValueError("Request method and URL are required for DPoP validation")

    inputs = _Inputs(proof, method, url, validity_period, clock_skew, now)
    for check in CHECKS:
        rejected = check(inputs)
        if rejected is not None:
            logger.debug("Rejected DPoP proof: %s", rejected.reason)
            return rejected
    return Accepted(proof)


def validate_proof(
    proof: DPoPProof,
    request: RequestContext,
    validity_period: int,
    now: int,
    clock_skew: int = DEFAULT_CLOCK_SKEW,
) -> DPoPProof:
    """
    Validate a parsed proof, raising on the first failed check.

    Raises:
        InvalidDPoPProof: If any check fails
    """
    result = check_proof(proof, request, validity_period, now, clock_skew)
    if isinstance(result, Rejected):
        raise result.to_error()
    return result.proof
