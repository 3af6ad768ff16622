"""Tests for shared.schemas – outcome invariants and response shapes."""

import pytest
from pydantic import ValidationError

from shared.schemas import (
    KeyMaterial,
    NackResponse,
    SignatureParams,
    Subscriber,
    VerificationOutcome,
    VerificationStatus,
)

SUB = Subscriber(subscriber_id="buyer.example.com", unique_key_id="uk-1", signing_public_key="k")


def test_verified_outcome_carries_identity():
    outcome = VerificationOutcome.verified(SUB)
    assert outcome.status == VerificationStatus.VERIFIED
    assert outcome.subscriber == SUB
    assert outcome.admitted


def test_failed_outcome_has_no_identity():
    outcome = VerificationOutcome.failed(VerificationStatus.SIGNATURE_INVALID)
    assert outcome.subscriber is None
    assert not outcome.admitted
    assert outcome.message == "Signature verification failed"


def test_outcome_cannot_be_both_verified_and_failed():
    with pytest.raises(ValidationError):
        VerificationOutcome(status=VerificationStatus.DIGEST_MISMATCH, subscriber=SUB)
    with pytest.raises(ValidationError):
        VerificationOutcome(status=VerificationStatus.VERIFIED)


def test_bypass_is_admitted_without_identity():
    outcome = VerificationOutcome.bypassed()
    assert outcome.admitted
    assert outcome.subscriber is None


def test_every_rejection_has_a_message():
    for status in VerificationStatus:
        if status.admitted:
            continue
        assert VerificationOutcome.failed(status).message


def test_nack_shape():
    body = NackResponse.build(401, "Subscriber not found").to_dict()
    assert body == {
        "message": {"ack": {"status": "NACK"}},
        "error": {"code": "401", "message": "Subscriber not found"},
    }


def test_signature_params_immutable():
    params = SignatureParams(
        subscriber_id="a", unique_key_id="b", key_algorithm="ed25519",
        algorithm="ed25519", signature="c2ln",
    )
    with pytest.raises(ValidationError):
        params.subscriber_id = "other"


def test_key_material_flags():
    assert not KeyMaterial().has_signing_keys
    km = KeyMaterial(signing_private_key="a", signing_public_key="b")
    assert km.has_signing_keys
    assert not km.has_encryption_keys
