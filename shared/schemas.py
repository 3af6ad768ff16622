"""
Canonical data schemas for the signed-request gateway.

These Pydantic models are shared by the header codec, the verifier,
the registry resolvers and the gateway middleware so the shapes are
defined in one place.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    BYPASSED = "bypassed"
    MISSING_HEADER = "missing_header"
    MALFORMED_HEADER = "malformed_header"
    SUBSCRIBER_NOT_FOUND = "subscriber_not_found"
    DIGEST_MISMATCH = "digest_mismatch"
    SIGNATURE_INVALID = "signature_invalid"
    INTERNAL_ERROR = "internal_error"

    @property
    def admitted(self) -> bool:
        return self in (VerificationStatus.VERIFIED, VerificationStatus.BYPASSED)


# Human-readable reasons returned in the NACK body.
REJECTION_MESSAGES: dict[VerificationStatus, str] = {
    VerificationStatus.MISSING_HEADER: "Missing authorization header",
    VerificationStatus.MALFORMED_HEADER: "Invalid authorization header format",
    VerificationStatus.SUBSCRIBER_NOT_FOUND: "Subscriber not found",
    VerificationStatus.DIGEST_MISMATCH: "Digest mismatch",
    VerificationStatus.SIGNATURE_INVALID: "Signature verification failed",
    VerificationStatus.INTERNAL_ERROR: "Authentication failed",
}


# ---------------------------------------------------------------------------
# Authorization header
# ---------------------------------------------------------------------------

class SignatureParams(BaseModel):
    """Structured view of a ``Signature ...`` authorization header."""
    model_config = ConfigDict(frozen=True)

    subscriber_id: str
    unique_key_id: str
    key_algorithm: str
    algorithm: str
    signature: str  # base64-encoded Ed25519 signature
    digest: str | None = None  # base64-encoded, caller-declared
    created: str | None = None
    expires: str | None = None
    headers: str | None = None  # declared signed-header list, not enforced


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class Subscriber(BaseModel):
    """A network participant as published by the registry."""
    model_config = ConfigDict(frozen=True)

    subscriber_id: str
    unique_key_id: str
    signing_public_key: str  # base64 raw 32-byte Ed25519 key
    encryption_public_key: str | None = None
    valid_until: str | None = None


# ---------------------------------------------------------------------------
# Verification outcome
# ---------------------------------------------------------------------------

class VerificationOutcome(BaseModel):
    """Exactly one outcome per request; identity only when verified."""
    model_config = ConfigDict(frozen=True)

    status: VerificationStatus
    subscriber: Subscriber | None = None

    @model_validator(mode="after")
    def _identity_only_when_verified(self) -> "VerificationOutcome":
        verified = self.status == VerificationStatus.VERIFIED
        if verified != (self.subscriber is not None):
            raise ValueError("subscriber must be set if and only if status is verified")
        return self

    @classmethod
    def verified(cls, subscriber: Subscriber) -> "VerificationOutcome":
        return cls(status=VerificationStatus.VERIFIED, subscriber=subscriber)

    @classmethod
    def bypassed(cls) -> "VerificationOutcome":
        return cls(status=VerificationStatus.BYPASSED)

    @classmethod
    def failed(cls, status: VerificationStatus) -> "VerificationOutcome":
        return cls(status=status)

    @property
    def admitted(self) -> bool:
        return self.status.admitted

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES.get(self.status, "")


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------

class KeyPair(BaseModel):
    """Raw key bytes, base64-encoded."""
    public_key: str
    private_key: str


class KeyMaterial(BaseModel):
    """This participant's own keys, loaded once at start-up.

    Any field may be missing; callers decide whether partial key
    material is acceptable.
    """
    model_config = ConfigDict(frozen=True)

    signing_private_key: str | None = None
    signing_public_key: str | None = None
    encryption_private_key: str | None = None
    encryption_public_key: str | None = None

    @property
    def has_signing_keys(self) -> bool:
        return bool(self.signing_private_key and self.signing_public_key)

    @property
    def has_encryption_keys(self) -> bool:
        return bool(self.encryption_private_key and self.encryption_public_key)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class Ack(BaseModel):
    status: str


class AckMessage(BaseModel):
    ack: Ack


class ErrorBody(BaseModel):
    code: str
    message: str


class NackResponse(BaseModel):
    """Uniform rejection body returned for every failed authentication."""
    message: AckMessage
    error: ErrorBody

    @classmethod
    def build(cls, status_code: int, reason: str) -> "NackResponse":
        return cls(
            message=AckMessage(ack=Ack(status="NACK")),
            error=ErrorBody(code=str(status_code), message=reason),
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
