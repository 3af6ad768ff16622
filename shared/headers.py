"""
Authorization header codec.

Wire format::

    Signature keyId="<subscriber_id>|<unique_key_id>|<key_algorithm>",
              algorithm="ed25519",created="<unix>",expires="<unix>",
              headers="(created) (expires) digest",signature="<base64>"

(on a single line).  Parsing is a small hand-written tokenizer: an
attribute is ``name="value"`` where *name* is letters, digits or
underscore and *value* is everything up to the next double quote.
There is no escaping.  Text that does not start an attribute is
skipped, so separators and stray whitespace are tolerated exactly the
way a ``([A-Za-z0-9_]+)="([^"]*)"`` scan would tolerate them.
"""

from __future__ import annotations

import logging
import time

from shared.crypto import compute_digest, compute_digest_bytes, sign_digest
from shared.schemas import SignatureParams

logger = logging.getLogger(__name__)

SCHEME_PREFIX = "Signature "
SIGNATURE_ALGORITHM = "ed25519"
DEFAULT_TTL_SECONDS = 3600
DEFAULT_SIGNED_HEADERS = "(created) (expires) digest"

_REQUIRED = ("keyId", "signature", "algorithm")


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

def _is_name_char(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ("0" <= ch <= "9")


def tokenize_attributes(text: str) -> dict[str, str]:
    """Collect every ``name="value"`` attribute; last duplicate wins."""
    attrs: dict[str, str] = {}
    i, n = 0, len(text)

    while i < n:
        if not _is_name_char(text[i]):
            i += 1
            continue

        start = i
        while i < n and _is_name_char(text[i]):
            i += 1
        name = text[start:i]

        # Need `="` right after the name, else this run was not an attribute
        # (no suffix of the run can be one either).
        if text.startswith('="', i):
            close = text.find('"', i + 2)
            if close == -1:
                break  # unterminated value; no further quotes to pair
            attrs[name] = text[i + 2:close]
            i = close + 1
    return attrs


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------

def parse_auth_header(header: str) -> SignatureParams | None:
    """
    Parse a raw ``Authorization`` value.

    Returns *None* for anything that is not a well-formed signature
    header.  Never raises.
    """
    try:
        if not header.startswith(SCHEME_PREFIX):
            return None

        attrs = tokenize_attributes(header[len(SCHEME_PREFIX):])
        if not all(attrs.get(name) for name in _REQUIRED):
            return None

        parts = attrs["keyId"].split("|")
        if len(parts) != 3:
            return None
        subscriber_id, unique_key_id, key_algorithm = parts

        return SignatureParams(
            subscriber_id=subscriber_id,
            unique_key_id=unique_key_id,
            key_algorithm=key_algorithm,
            algorithm=attrs["algorithm"],
            signature=attrs["signature"],
            digest=attrs.get("digest") or None,
            created=attrs.get("created"),
            expires=attrs.get("expires"),
            headers=attrs.get("headers"),
        )
    except Exception as exc:
        logger.error("Error parsing auth header: %s", exc)
        return None


# ---------------------------------------------------------------------------
# Build (outgoing requests)
# ---------------------------------------------------------------------------

def build_auth_header(
    subscriber_id: str,
    unique_key_id: str,
    signing_private_key: str,
    body: bytes | str,
    *,
    created: int | None = None,
    expires: int | None = None,
    include_digest: bool = False,
) -> str:
    """Sign *body* and render the matching ``Signature ...`` header value."""
    created = int(time.time()) if created is None else created
    expires = created + DEFAULT_TTL_SECONDS if expires is None else expires

    signature = sign_digest(signing_private_key, compute_digest_bytes(body))

    attrs = [
        ("keyId", f"{subscriber_id}|{unique_key_id}|{SIGNATURE_ALGORITHM}"),
        ("algorithm", SIGNATURE_ALGORITHM),
        ("created", str(created)),
        ("expires", str(expires)),
        ("headers", DEFAULT_SIGNED_HEADERS),
    ]
    if include_digest:
        attrs.append(("digest", compute_digest(body)))
    attrs.append(("signature", signature))

    return SCHEME_PREFIX + ",".join(f'{k}="{v}"' for k, v in attrs)
