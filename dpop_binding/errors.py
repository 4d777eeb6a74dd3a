"""DPoP error hierarchy."""

INVALID_DPOP_PROOF = "invalid_dpop_proof"
INVALID_DPOP_ERROR = "Invalid DPoP proof"
EXPIRED_DPOP_ERROR = "Expired DPoP proof"


class DPoPError(Exception):
    """Base class for DPoP errors."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class MalformedProof(DPoPError):
    """The proof cannot be decoded as a compact signed token."""

    def __init__(self, message: str = "Malformed DPoP proof"):
        super().__init__(INVALID_DPOP_PROOF, message)


class InvalidDPoPProof(DPoPError):
    """
    A proof failed validation.

    ``message`` is what the client may see; ``reason`` names the failed
    check and is meant for logs only.
    """

    def __init__(self, reason: str, message: str = INVALID_DPOP_ERROR):
        self.reason = reason
        super().__init__(INVALID_DPOP_PROOF, message)


class ThumbprintError(DPoPError):
    """A key thumbprint could not be computed."""

    def __init__(self, message: str, code: str = "INVALID_KEY_PARAMS"):
        super().__init__(code, message)


class UnsupportedKeyType(ThumbprintError):
    """The key is neither EC nor RSA."""

    def __init__(self, key_type):
        self.key_type = key_type
        super().__init__(f"Unsupported key type: {key_type}", code="UNSUPPORTED_KEY_TYPE")


class ConfigurationError(DPoPError):
    """A configuration value could not be parsed."""

    def __init__(self, message: str):
        super().__init__("CONFIGURATION_ERROR", message)
