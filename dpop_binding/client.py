"""DPoP client for proof generation."""

import hashlib
import json
import time
import uuid
from typing import Any, Dict, Optional, Union

from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from .errors import UnsupportedKeyType
from .thumbprint import _base64url_encode, compute_thumbprint, public_key_to_jwk
from .verifier import EC_CURVES, RSA_ALGORITHMS

PrivateKey = Union[ec.EllipticCurvePrivateKey, rsa.RSAPrivateKey]

_GENERATE_CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}


class DPoPClient:
    """
    DPoP client for generating proofs.

    Example:
        >>> client = DPoPClient.generate()
        >>> print(f"Thumbprint: {client.thumbprint}")
        >>> proof = client.create_proof("POST", "https://api.example.com/token")
    """

    def __init__(self, private_key: PrivateKey, algorithm: Optional[str] = None):
        """
        Create a DPoP client from an existing private key.

        Args:
            private_key: An EC (P-256, P-384, P-521) or RSA private key
            algorithm: JWS algorithm; defaults to the curve's ES algorithm
                for EC keys and RS256 for RSA keys
        """
        self._private_key = private_key
        self._jwk = public_key_to_jwk(private_key.public_key())
        self._thumbprint = compute_thumbprint(private_key.public_key())

        if isinstance(private_key, ec.EllipticCurvePrivateKey):
            default_alg = EC_CURVES[self._jwk["crv"]][3]
        else:
            default_alg = "RS256"
        self._algorithm = algorithm or default_alg

    @classmethod
    def generate(cls, key_type: str = "EC", curve: str = "P-256", key_size: int = 2048) -> "DPoPClient":
        """Generate a new DPoP client with a random EC or RSA keypair."""
        if key_type == "EC":
            private_key = ec.generate_private_key(_GENERATE_CURVES[curve]())
        elif key_type == "RSA":
            private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
        else:
            raise UnsupportedKeyType(key_type)
        return cls(private_key)

    @property
    def thumbprint(self) -> str:
        """Get the JWK thumbprint of this client's public key."""
        return self._thumbprint

    @property
    def jwk(self) -> Dict[str, str]:
        """Get the public JWK."""
        return dict(self._jwk)

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def public_key(self):
        """Get the public key."""
        return self._private_key.public_key()

    def create_proof(
        self,
        method: str,
        target: str,
        nonce: Optional[str] = None,
    ) -> str:
        """
        Create a DPoP proof for an HTTP request.

        Args:
            method: HTTP method (e.g., "GET", "POST")
            target: Target URI (e.g., "https://api.example.com/token")
            nonce: Optional server-provided nonce

        Returns:
            A signed JWT proof
        """
        return self.sign_token(self.header(), self.claims(method, target, nonce=nonce))

    def create_proof_with_ath(
        self,
        method: str,
        target: str,
        access_token: str,
        nonce: Optional[str] = None,
    ) -> str:
        """
        Create a DPoP proof with an access token hash.

        Args:
            method: HTTP method
            target: Target URI
            access_token: The access token to bind
            nonce: Optional server-provided nonce

        Returns:
            A signed JWT proof with ath claim
        """
        hash_bytes = hashlib.sha256(access_token.encode()).digest()
        claims = self.claims(method, target, nonce=nonce)
        claims["ath"] = _base64url_encode(hash_bytes)
        return self.sign_token(self.header(), claims)

    def header(self) -> Dict[str, Any]:
        """Build the standard proof header."""
        return {
            "typ": "dpop+jwt",
            "alg": self._algorithm,
            "jwk": self.jwk,
        }

    def claims(
        self,
        method: str,
        target: str,
        nonce: Optional[str] = None,
        iat: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Build the standard proof claims."""
        claims = {
            "jti": str(uuid.uuid4()),
            "htm": method,
            "htu": target,
            "iat": int(time.time()) if iat is None else iat,
        }
        if nonce is not None:
            claims["nonce"] = nonce
        return claims

    def sign_token(self, header: Dict[str, Any], claims: Any) -> str:
        """Encode and sign an arbitrary header and claim set."""
        header_b64 = _base64url_encode(json.dumps(header, separators=(",", ":")).encode())
        claims_b64 = _base64url_encode(json.dumps(claims, separators=(",", ":")).encode())

        message = f"{header_b64}.{claims_b64}".encode()
        sig_b64 = _base64url_encode(self._sign(message))

        return f"{header_b64}.{claims_b64}.{sig_b64}"

    def _sign(self, message: bytes) -> bytes:
        if isinstance(self._private_key, ec.EllipticCurvePrivateKey):
            _, size, hash_type, _ = EC_CURVES[self._jwk["crv"]]
            der_sig = self._private_key.sign(message, ec.ECDSA(hash_type()))
            # JWS uses raw r||s rather than DER
            r, s = decode_dss_signature(der_sig)
            return r.to_bytes(size, "big") + s.to_bytes(size, "big")

        use_pss, hash_type = RSA_ALGORITHMS[self._algorithm]
        if use_pss:
            pad = padding.PSS(mgf=padding.MGF1(hash_type()), salt_length=hash_type.digest_size)
        else:
            pad = padding.PKCS1v15()
        return self._private_key.sign(message, pad, hash_type())
