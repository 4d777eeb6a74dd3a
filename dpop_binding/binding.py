"""Token binding derived from an accepted DPoP proof."""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .parser import DPoPProof
from .thumbprint import compute_thumbprint_from_jwk

logger = logging.getLogger(__name__)

DPOP_BINDING_TYPE = "DPoP"
CNF = "cnf"
JWK_THUMBPRINT = "jkt"


@dataclass(frozen=True)
class TokenBinding:
    """Links an access token to the thumbprint of a client key."""

    binding_type: str
    binding_value: str
    binding_reference: str


@dataclass
class IssuanceContext:
    """
    Mutable state of one token issuance request.

    Holds at most one token binding and the properties that end up in the
    issued token.
    """

    token_binding: Optional[TokenBinding] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    def set_token_binding(self, binding: TokenBinding) -> None:
        if self.token_binding is not None:
            raise ValueError("Token binding already set for this issuance request")
        self.token_binding = binding

    def add_property(self, name: str, value: Any) -> None:
        self.properties[name] = value


def make_binding_reference(binding_value: str) -> str:
    """Short fixed-length digest of a binding value, for indexing only."""
    return hashlib.md5(binding_value.encode("utf-8"), usedforsecurity=False).hexdigest()


def derive_binding(proof: DPoPProof, context: Optional[IssuanceContext] = None) -> TokenBinding:
    """
    Build the token binding of an accepted proof.

    When ``context`` is given the binding is stored on it and a
    ``cnf`` confirmation claim carrying the binding reference is added
    to its properties.
    """
    thumbprint = compute_thumbprint_from_jwk(proof.embedded_key)
    binding = TokenBinding(
        binding_type=DPOP_BINDING_TYPE,
        binding_value=thumbprint,
        binding_reference=make_binding_reference(thumbprint),
    )

    if context is not None:
        context.set_token_binding(binding)
        context.add_property(CNF, {JWK_THUMBPRINT: binding.binding_reference})

    logger.debug("Derived DPoP token binding %s", binding.binding_reference)
    return binding
