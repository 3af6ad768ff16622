"""
Cryptographic utilities for the signed-request gateway.

Uses:
  • BLAKE2b-512 for request body digests
  • Ed25519 for request signing / verification and the signing keypair
  • X25519 for the encryption keypair

Every key crossing a module boundary is the bare key (32 bytes for
both algorithms), base64-encoded.  Wrapped encodings (SPKI / PKCS8)
exist only transiently inside the generators below.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from shared.schemas import KeyPair, VerificationStatus

logger = logging.getLogger(__name__)

DIGEST_SIZE = 64
RAW_KEY_SIZE = 32


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------

def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(value: str) -> bytes:
    """Strict base64 decode; raises ``binascii.Error`` on bad input."""
    return base64.b64decode(value, validate=True)


# ---------------------------------------------------------------------------
# Digest
# ---------------------------------------------------------------------------

def compute_digest_bytes(body: bytes | str) -> bytes:
    """BLAKE2b-512 over the exact body bytes as received."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hashlib.blake2b(body, digest_size=DIGEST_SIZE).digest()


def compute_digest(body: bytes | str) -> str:
    """Base64-encoded BLAKE2b-512 digest of *body*."""
    return b64encode(compute_digest_bytes(body))


# ---------------------------------------------------------------------------
# Key generation
# ---------------------------------------------------------------------------

def _strip_envelope(private_key: Ed25519PrivateKey | X25519PrivateKey) -> KeyPair:
    """Serialise to SPKI / PKCS8 DER, then reduce both to the bare key bytes."""
    spki = private_key.public_key().public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    pkcs8 = private_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )

    public_raw = serialization.load_der_public_key(spki).public_bytes(
        serialization.Encoding.Raw,
        serialization.PublicFormat.Raw,
    )
    private_raw = serialization.load_der_private_key(pkcs8, password=None).private_bytes(
        serialization.Encoding.Raw,
        serialization.PrivateFormat.Raw,
        serialization.NoEncryption(),
    )
    return KeyPair(public_key=b64encode(public_raw), private_key=b64encode(private_raw))


def generate_signing_keypair() -> KeyPair:
    """Generate a fresh Ed25519 keypair as base64 raw bytes."""
    return _strip_envelope(Ed25519PrivateKey.generate())


def generate_encryption_keypair() -> KeyPair:
    """Generate a fresh X25519 keypair as base64 raw bytes."""
    return _strip_envelope(X25519PrivateKey.generate())


def signing_key_from_b64(private_key_b64: str) -> Ed25519PrivateKey:
    return Ed25519PrivateKey.from_private_bytes(b64decode(private_key_b64))


def public_key_from_b64(public_key_b64: str) -> Ed25519PublicKey:
    return Ed25519PublicKey.from_public_bytes(b64decode(public_key_b64))


# ---------------------------------------------------------------------------
# Signing / verification
# ---------------------------------------------------------------------------

def sign_digest(private_key_b64: str, digest: bytes) -> str:
    """Sign raw digest bytes; return base64-encoded signature."""
    sig = signing_key_from_b64(private_key_b64).sign(digest)
    return b64encode(sig)


def verify_signature(
    digest: bytes,
    signature_b64: str,
    declared_digest_b64: str | None,
    public_key_b64: str,
) -> VerificationStatus:
    """
    Verify an Ed25519 signature over *digest*.

    When the caller declared a digest it must match *digest* byte for
    byte, otherwise ``DIGEST_MISMATCH`` is returned before any signature
    math.  Every other failure, including undecodable input, is
    ``SIGNATURE_INVALID``.
    """
    if declared_digest_b64:
        try:
            declared = b64decode(declared_digest_b64)
        except (binascii.Error, ValueError):
            declared = b""
        if not hmac.compare_digest(declared, digest):
            logger.warning(
                "Digest mismatch (computed %s...)", b64encode(digest)[:20]
            )
            return VerificationStatus.DIGEST_MISMATCH

    try:
        pub = public_key_from_b64(public_key_b64)
        pub.verify(b64decode(signature_b64), digest)
    except InvalidSignature:
        logger.warning("Ed25519 signature does not match digest")
        return VerificationStatus.SIGNATURE_INVALID
    except Exception as exc:
        logger.warning("Could not verify signature: %s", exc)
        return VerificationStatus.SIGNATURE_INVALID

    logger.debug("Signature verified")
    return VerificationStatus.VERIFIED
