"""Command line tool for generating and checking DPoP proofs."""

import json
import logging
import sys

from .client import DPoPClient
from .config import DPoPConfig
from .errors import DPoPError, InvalidDPoPProof
from .server import key_thumbprint, validate, verify_binding
from .validator import HttpRequest

METHOD = "POST"
TARGET = "https://dpop.example.com/token"

USAGE = "Usage: {prog} <generate|validate|thumbprint> [file]"


def generate(output_file: str, key_type: str = "EC") -> int:
    """Generate a proof and save to file."""
    client = DPoPClient.generate(key_type=key_type)
    proof = client.create_proof(METHOD, TARGET)

    data = {
        "proof": proof,
        "thumbprint": client.thumbprint,
        "method": METHOD,
        "target": TARGET,
    }

    with open(output_file, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Generated proof: {output_file}")
    return 0


def validate_file(input_file: str) -> int:
    """Validate a proof from file."""
    with open(input_file) as f:
        data = json.load(f)

    config = DPoPConfig.from_env()
    request = HttpRequest(data["method"], data["target"])

    try:
        binding = validate(
            data["proof"],
            request,
            config.validity_period,
            clock_skew=config.clock_skew,
        )
        if "thumbprint" in data and binding.binding_value != data["thumbprint"]:
            raise InvalidDPoPProof(
                f"Expected thumbprint {data['thumbprint']}, got {binding.binding_value}"
            )
        if "jkt" in data:
            verify_binding(binding, data["jkt"])
    except DPoPError as e:
        detail = getattr(e, "reason", e.message)
        print(f"FAIL: {e.code}: {detail}", file=sys.stderr)
        return 1

    print(f"PASS: {input_file} validated successfully")
    print(f"jkt: {binding.binding_reference}")
    return 0


def thumbprint(jwk_file: str) -> int:
    """Print the thumbprint of a JWK stored in a file."""
    with open(jwk_file) as f:
        jwk = json.load(f)

    try:
        print(key_thumbprint(jwk))
    except DPoPError as e:
        print(f"FAIL: {e.code}: {e.message}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv
    prog = argv[0] if argv else "dpop-binding"

    if len(argv) < 2:
        print(USAGE.format(prog=prog), file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.WARNING)
    command = argv[1]

    if command == "generate":
        output_file = argv[2] if len(argv) > 2 else "dpop_proof.json"
        key_type = argv[3] if len(argv) > 3 else "EC"
        return generate(output_file, key_type)
    if command in ("validate", "thumbprint"):
        if len(argv) < 3:
            print(f"Usage: {prog} {command} <file>", file=sys.stderr)
            return 1
        if command == "validate":
            return validate_file(argv[2])
        return thumbprint(argv[2])

    print(f"Unknown command: {command}", file=sys.stderr)
    return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
