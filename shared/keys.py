"""
Persistence for this participant's own key material.

Four plain-text files, one base64 raw key each, live in a keys
directory.  Environment variables override the files key by key.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from shared.crypto import generate_encryption_keypair, generate_signing_keypair
from shared.schemas import KeyMaterial, KeyPair

logger = logging.getLogger(__name__)

DEFAULT_KEYS_DIR = "./keys"
KEYS_DIR_ENV = "KEYS_DIR"

SIGNING_PRIVATE_FILE = "signing_private_key.b64"
SIGNING_PUBLIC_FILE = "signing_public_key.b64"
ENCRYPTION_PRIVATE_FILE = "encryption_private_key.b64"
ENCRYPTION_PUBLIC_FILE = "encryption_public_key.b64"

# KeyMaterial field -> (environment variable, file name)
KEY_SOURCES: dict[str, tuple[str, str]] = {
    "signing_private_key": ("ONDC_SIGNING_PRIVATE_KEY", SIGNING_PRIVATE_FILE),
    "signing_public_key": ("ONDC_SIGNING_PUBLIC_KEY", SIGNING_PUBLIC_FILE),
    "encryption_private_key": ("ONDC_ENCRYPTION_PRIVATE_KEY", ENCRYPTION_PRIVATE_FILE),
    "encryption_public_key": ("ONDC_ENCRYPTION_PUBLIC_KEY", ENCRYPTION_PUBLIC_FILE),
}


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

def save_keys(
    directory: str | Path,
    signing: KeyPair,
    encryption: KeyPair,
) -> Path:
    """Persist both keypairs to *directory*; returns the directory path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    (directory / SIGNING_PRIVATE_FILE).write_text(signing.private_key)
    (directory / SIGNING_PUBLIC_FILE).write_text(signing.public_key)
    (directory / ENCRYPTION_PRIVATE_FILE).write_text(encryption.private_key)
    (directory / ENCRYPTION_PUBLIC_FILE).write_text(encryption.public_key)
    return directory


def generate_and_save_keys(
    directory: str | Path = DEFAULT_KEYS_DIR,
) -> tuple[KeyPair, KeyPair]:
    """Generate signing + encryption keypairs and write them to *directory*."""
    signing = generate_signing_keypair()
    encryption = generate_encryption_keypair()
    save_keys(directory, signing, encryption)
    logger.info("Keys generated and saved to %s", directory)
    return signing, encryption


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

def _read_key_file(path: Path) -> str | None:
    if not path.exists():
        return None
    try:
        return path.read_text(encoding="utf-8").strip() or None
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error loading key from %s: %s", path, exc)
        return None


def load_keys(
    keys_dir: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> KeyMaterial:
    """
    Load key material: environment first, then files in *keys_dir*.

    Missing keys are left as *None*; partial availability is not an
    error here.
    """
    env = os.environ if environ is None else environ
    directory = Path(keys_dir or env.get(KEYS_DIR_ENV) or DEFAULT_KEYS_DIR)

    found: dict[str, str | None] = {}
    for field_name, (env_var, file_name) in KEY_SOURCES.items():
        value = env.get(env_var) or _read_key_file(directory / file_name)
        found[field_name] = value

    missing = [name for name, value in found.items() if value is None]
    if missing:
        logger.warning("Key material incomplete, missing: %s", ", ".join(missing))
    return KeyMaterial(**found)
