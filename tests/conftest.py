"""Shared fixtures for dpop_binding tests."""

import pytest

from dpop_binding import DPoPClient


@pytest.fixture
def ec_client():
    return DPoPClient.generate()


@pytest.fixture(scope="session")
def rsa_client():
    # RSA key generation is slow, share one key across the session
    return DPoPClient.generate(key_type="RSA", key_size=2048)
