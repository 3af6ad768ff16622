"""
Request authentication for the gateway.

Verifies that inbound requests:
  • Carry a well-formed ``Signature`` authorization header
  • Come from a subscriber the registry knows
  • Have not been tampered with (digest + Ed25519 signature)
"""

from __future__ import annotations

import logging

from gateway.config import HEALTH_PATH, INTERNAL_PREFIX
from registry.base import SubscriberResolver
from shared.crypto import compute_digest_bytes, verify_signature
from shared.headers import parse_auth_header
from shared.schemas import VerificationOutcome, VerificationStatus

logger = logging.getLogger(__name__)


class RequestAuthenticator:
    """Decides, per request, whether it is admitted and as whom."""

    def __init__(
        self,
        resolver: SubscriberResolver,
        health_path: str = HEALTH_PATH,
        internal_prefix: str = INTERNAL_PREFIX,
    ):
        self._resolver = resolver
        self._health_path = health_path
        self._internal_prefix = internal_prefix

    def is_bypassed(self, path: str) -> bool:
        return path == self._health_path or path.startswith(self._internal_prefix)

    async def authenticate(
        self,
        path: str,
        authorization: str | None,
        body: bytes,
    ) -> VerificationOutcome:
        """
        Run the full admission check for one request.

        *body* must be the raw bytes exactly as received.  Never raises;
        unexpected failures come back as ``INTERNAL_ERROR``.
        """
        if self.is_bypassed(path):
            return VerificationOutcome.bypassed()

        try:
            return await self._authenticate(path, authorization, body)
        except Exception:
            logger.exception("Authentication error on %s", path)
            return VerificationOutcome.failed(VerificationStatus.INTERNAL_ERROR)

    async def _authenticate(
        self,
        path: str,
        authorization: str | None,
        body: bytes,
    ) -> VerificationOutcome:
        if not authorization:
            logger.warning("Missing authorization header (path=%s)", path)
            return VerificationOutcome.failed(VerificationStatus.MISSING_HEADER)

        params = parse_auth_header(authorization)
        if params is None:
            logger.warning("Invalid authorization header format (path=%s)", path)
            return VerificationOutcome.failed(VerificationStatus.MALFORMED_HEADER)

        try:
            subscriber = await self._resolver.lookup(
                params.subscriber_id, params.unique_key_id
            )
        except Exception as exc:
            logger.warning(
                "Registry lookup failed for %s (key %s): %s",
                params.subscriber_id, params.unique_key_id, exc,
            )
            subscriber = None

        if subscriber is None:
            logger.warning(
                "Could not find subscriber in registry: %s (key %s, path=%s)",
                params.subscriber_id, params.unique_key_id, path,
            )
            return VerificationOutcome.failed(VerificationStatus.SUBSCRIBER_NOT_FOUND)

        status = verify_signature(
            digest=compute_digest_bytes(body),
            signature_b64=params.signature,
            declared_digest_b64=params.digest,
            public_key_b64=subscriber.signing_public_key,
        )
        if status != VerificationStatus.VERIFIED:
            logger.warning(
                "Signature verification failed for %s (key %s, path=%s): %s",
                params.subscriber_id, params.unique_key_id, path, status.value,
            )
            return VerificationOutcome.failed(status)

        return VerificationOutcome.verified(subscriber)
