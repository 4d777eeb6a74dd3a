"""Tests for key thumbprint computation."""

import base64
import hashlib

import pytest

from dpop_binding import (
    DPoPClient,
    ThumbprintError,
    UnsupportedKeyType,
    compute_thumbprint,
    compute_thumbprint_from_jwk,
    key_thumbprint,
)


def _expected(canonical: str) -> str:
    digest = hashlib.sha256(canonical.encode()).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()


class TestECThumbprint:
    """Tests for EC key thumbprints."""

    def test_canonical_member_order(self, ec_client):
        """Test EC thumbprint hashes crv, kty, x, y in order."""
        jwk = ec_client.jwk
        canonical = f'{{"crv":"P-256","kty":"EC","x":"{jwk["x"]}","y":"{jwk["y"]}"}}'
        assert compute_thumbprint_from_jwk(jwk) == _expected(canonical)

    def test_thumbprint_is_deterministic(self, ec_client):
        """Test thumbprint is deterministic for same key."""
        thumb1 = compute_thumbprint(ec_client.public_key)
        thumb2 = compute_thumbprint(ec_client.public_key)

        assert thumb1 == thumb2
        # SHA-256 = 32 bytes = 43 base64url chars
        assert len(thumb1) == 43

    def test_key_object_matches_jwk(self, ec_client):
        """Test key objects and JWK dictionaries agree."""
        assert compute_thumbprint(ec_client.public_key) == compute_thumbprint_from_jwk(ec_client.jwk)

    def test_optional_members_ignored(self, ec_client):
        """Test kid, use and member order don't change the thumbprint."""
        jwk = ec_client.jwk
        decorated = {"use": "sig", "y": jwk["y"], "kid": "key-1", "x": jwk["x"], "kty": "EC", "crv": "P-256"}
        assert compute_thumbprint_from_jwk(decorated) == ec_client.thumbprint

    def test_different_keys_different_thumbprints(self):
        """Test different keys have different thumbprints."""
        client1 = DPoPClient.generate()
        client2 = DPoPClient.generate()

        assert client1.thumbprint != client2.thumbprint

    def test_coordinate_change_changes_thumbprint(self, ec_client):
        """Test a single coordinate change yields a different thumbprint."""
        jwk = ec_client.jwk
        other = dict(jwk, y=jwk["x"])
        assert compute_thumbprint_from_jwk(other) != compute_thumbprint_from_jwk(jwk)

    @pytest.mark.parametrize("curve", ["P-384", "P-521"])
    def test_other_curves(self, curve):
        """Test larger curves carry their name into the thumbprint."""
        client = DPoPClient.generate(curve=curve)
        assert client.jwk["crv"] == curve
        assert compute_thumbprint_from_jwk(client.jwk) == client.thumbprint


class TestRSAThumbprint:
    """Tests for RSA key thumbprints."""

    def test_canonical_member_order(self, rsa_client):
        """Test RSA thumbprint hashes e, kty, n in order."""
        jwk = rsa_client.jwk
        assert jwk["e"] == "AQAB"
        canonical = f'{{"e":"AQAB","kty":"RSA","n":"{jwk["n"]}"}}'
        assert compute_thumbprint_from_jwk(jwk) == _expected(canonical)

    def test_key_object_matches_jwk(self, rsa_client):
        """Test RSA key objects and JWK dictionaries agree."""
        assert compute_thumbprint(rsa_client.public_key) == rsa_client.thumbprint
        assert compute_thumbprint_from_jwk(rsa_client.jwk) == rsa_client.thumbprint

    def test_modulus_change_changes_thumbprint(self, rsa_client):
        """Test a different modulus yields a different thumbprint."""
        jwk = rsa_client.jwk
        other = dict(jwk, n=jwk["n"][:-2] + ("AA" if jwk["n"][-2:] != "AA" else "AB"))
        assert compute_thumbprint_from_jwk(other) != rsa_client.thumbprint


class TestThumbprintErrors:
    """Tests for thumbprint failures."""

    def test_unsupported_key_type(self):
        """Test OKP keys are rejected rather than guessed."""
        with pytest.raises(UnsupportedKeyType) as exc:
            compute_thumbprint_from_jwk({"kty": "OKP", "crv": "Ed25519", "x": "abc"})
        assert exc.value.key_type == "OKP"
        assert exc.value.code == "UNSUPPORTED_KEY_TYPE"

    def test_missing_kty(self):
        """Test a JWK without kty is unsupported."""
        with pytest.raises(UnsupportedKeyType):
            compute_thumbprint_from_jwk({"x": "abc", "y": "def"})

    def test_missing_required_member(self, ec_client):
        """Test a JWK missing a coordinate is rejected."""
        jwk = ec_client.jwk
        del jwk["y"]
        with pytest.raises(ThumbprintError) as exc:
            compute_thumbprint_from_jwk(jwk)
        assert "y" in exc.value.message

    def test_not_a_dict(self):
        """Test non-object JWKs are rejected."""
        with pytest.raises(ThumbprintError):
            compute_thumbprint_from_jwk("not a jwk")


class TestKeyThumbprint:
    """Tests for the key_thumbprint entry point."""

    def test_accepts_jwk_and_key(self, ec_client):
        """Test key_thumbprint handles dicts and key objects."""
        assert key_thumbprint(ec_client.jwk) == ec_client.thumbprint
        assert key_thumbprint(ec_client.public_key) == ec_client.thumbprint

    def test_rejects_other_key_objects(self):
        """Test non EC/RSA key objects are unsupported."""
        from cryptography.hazmat.primitives.asymmetric import ed25519

        public_key = ed25519.Ed25519PrivateKey.generate().public_key()
        with pytest.raises(UnsupportedKeyType):
            key_thumbprint(public_key)
