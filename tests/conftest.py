"""
Shared pytest fixtures for Origin Trial Token tests.
"""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from origin_trial_token import Token, Usage
from origin_trial_token.signer import Ed25519Signer, EcdsaP256Signer
from origin_trial_token.verifier import verifier_for_key


def private_pem(key) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_pem(key) -> bytes:
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture
def ed25519_key() -> Ed25519PrivateKey:
    """Fresh Ed25519 private key."""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def p256_key() -> ec.EllipticCurvePrivateKey:
    """Fresh ECDSA P-256 private key."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def ed25519_signer(ed25519_key) -> Ed25519Signer:
    return Ed25519Signer(ed25519_key)


@pytest.fixture
def ed25519_verifier(ed25519_signer):
    return verifier_for_key(ed25519_signer.public_key())


@pytest.fixture
def p256_signer(p256_key) -> EcdsaP256Signer:
    return EcdsaP256Signer(p256_key)


@pytest.fixture
def p256_verifier(p256_signer):
    return verifier_for_key(p256_signer.public_key())


@pytest.fixture
def ed25519_pem_files(tmp_path, ed25519_key):
    """(private key path, public key path) for an Ed25519 key on disk."""
    private_path = tmp_path / "ed25519.pem"
    public_path = tmp_path / "ed25519.pub"
    private_path.write_bytes(private_pem(ed25519_key))
    public_path.write_bytes(public_pem(ed25519_key))
    return private_path, public_path


@pytest.fixture
def p256_pem_files(tmp_path, p256_key):
    """(private key path, public key path) for a P-256 key on disk."""
    private_path = tmp_path / "p256.pem"
    public_path = tmp_path / "p256.pub"
    private_path.write_bytes(private_pem(p256_key))
    public_path.write_bytes(public_pem(p256_key))
    return private_path, public_path


@pytest.fixture
def sample_token() -> Token:
    """The token from the documentation example."""
    return Token(origin="https://example.com:443", feature="Frobulate", expiry=1609459199)


@pytest.fixture
def third_party_token() -> Token:
    return Token(
        origin="https://thirdparty.com:443",
        feature="Frobulate",
        expiry=1609459199,
        is_third_party=True,
        usage=Usage.SUBSET,
    )
