"""Signature verification against the key embedded in a DPoP proof."""

import logging
from typing import Any, Dict

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from .errors import UnsupportedKeyType
from .parser import DPoPProof
from .thumbprint import _base64url_decode_strict, _base64url_to_int

logger = logging.getLogger(__name__)

# crv -> (curve, coordinate size, hash, matching alg)
EC_CURVES = {
    "P-256": (ec.SECP256R1, 32, hashes.SHA256, "ES256"),
    "P-384": (ec.SECP384R1, 48, hashes.SHA384, "ES384"),
    "P-521": (ec.SECP521R1, 66, hashes.SHA512, "ES512"),
}

# alg -> (uses PSS, hash)
RSA_ALGORITHMS = {
    "RS256": (False, hashes.SHA256),
    "RS384": (False, hashes.SHA384),
    "RS512": (False, hashes.SHA512),
    "PS256": (True, hashes.SHA256),
    "PS384": (True, hashes.SHA384),
    "PS512": (True, hashes.SHA512),
}


def verify_signature(proof: DPoPProof) -> bool:
    """
    Verify the proof signature with its embedded public key.

    The verifier is chosen from the key's ``kty``; the header ``alg`` only
    selects a hash within that family and must agree with the key.

    Returns:
        True if the signature is valid

    Raises:
        UnsupportedKeyType: If the embedded key is neither EC nor RSA
    """
    jwk = proof.embedded_key
    kty = jwk.get("kty") if isinstance(jwk, dict) else None

    if kty == "EC":
        return _verify_ec(jwk, proof)
    if kty == "RSA":
        return _verify_rsa(jwk, proof)
    raise UnsupportedKeyType(kty)


def _verify_ec(jwk: Dict[str, Any], proof: DPoPProof) -> bool:
    crv = jwk.get("crv")
    params = EC_CURVES.get(crv) if isinstance(crv, str) else None
    if params is None:
        logger.debug("Unsupported EC curve: %s", crv)
        return False
    curve, size, hash_type, alg = params

    if proof.algorithm != alg:
        logger.debug("Algorithm %s does not match curve %s", proof.algorithm, crv)
        return False

    if len(proof.signature) != 2 * size:
        logger.debug("EC signature must be %d bytes", 2 * size)
        return False

    try:
        x_bytes = _base64url_decode_strict(jwk["x"])
        y_bytes = _base64url_decode_strict(jwk["y"])
        if len(x_bytes) != size or len(y_bytes) != size:
            raise ValueError("Invalid coordinate length")
        numbers = ec.EllipticCurvePublicNumbers(
            int.from_bytes(x_bytes, "big"),
            int.from_bytes(y_bytes, "big"),
            curve(),
        )
        public_key = numbers.public_key()
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Invalid EC key parameters: %s", e)
        return False

    r = int.from_bytes(proof.signature[:size], "big")
    s = int.from_bytes(proof.signature[size:], "big")
    try:
        public_key.verify(
            encode_dss_signature(r, s),
            proof.signing_input,
            ec.ECDSA(hash_type()),
        )
    except InvalidSignature:
        return False
    return True


def _verify_rsa(jwk: Dict[str, Any], proof: DPoPProof) -> bool:
    alg = proof.algorithm
    params = RSA_ALGORITHMS.get(alg) if isinstance(alg, str) else None
    if params is None:
        logger.debug("Algorithm %s is not an RSA algorithm", alg)
        return False
    use_pss, hash_type = params

    try:
        numbers = rsa.RSAPublicNumbers(
            _base64url_to_int(jwk["e"]),
            _base64url_to_int(jwk["n"]),
        )
        public_key = numbers.public_key()
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Invalid RSA key parameters: %s", e)
        return False

    if use_pss:
        pad = padding.PSS(
            mgf=padding.MGF1(hash_type()),
            salt_length=hash_type.digest_size,
        )
    else:
        pad = padding.PKCS1v15()

    try:
        public_key.verify(proof.signature, proof.signing_input, pad, hash_type())
    except InvalidSignature:
        return False
    return True
