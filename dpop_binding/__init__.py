"""
DPoP Binding - Demonstrating Proof of Possession (RFC 9449)

Validates DPoP proofs on the token endpoint and derives the token binding
that ties an issued access token to the client's key.
"""

from .binding import IssuanceContext, TokenBinding, derive_binding
from .client import DPoPClient
from .config import DEFAULT_VALIDITY_PERIOD, DPoPConfig, resolve_validity_period
from .errors import (
    ConfigurationError,
    DPoPError,
    InvalidDPoPProof,
    MalformedProof,
    ThumbprintError,
    UnsupportedKeyType,
)
from .parser import DPoPProof, parse_proof
from .replay import InMemoryReplayStore, ReplayStore
from .server import get_dpop_header, key_thumbprint, validate, verify_binding
from .thumbprint import compute_thumbprint, compute_thumbprint_from_jwk
from .validator import Accepted, HttpRequest, Rejected, RequestContext, check_proof

__version__ = "0.1.0"
__all__ = [
    "Accepted",
    "ConfigurationError",
    "DEFAULT_VALIDITY_PERIOD",
    "DPoPClient",
    "DPoPConfig",
    "DPoPError",
    "DPoPProof",
    "HttpRequest",
    "InMemoryReplayStore",
    "InvalidDPoPProof",
    "IssuanceContext",
    "MalformedProof",
    "Rejected",
    "ReplayStore",
    "RequestContext",
    "ThumbprintError",
    "TokenBinding",
    "UnsupportedKeyType",
    "check_proof",
    "compute_thumbprint",
    "compute_thumbprint_from_jwk",
    "derive_binding",
    "get_dpop_header",
    "key_thumbprint",
    "parse_proof",
    "resolve_validity_period",
    "validate",
    "verify_binding",
]
