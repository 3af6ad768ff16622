#!/usr/bin/env python3
"""
Generate this participant's signing (Ed25519) and encryption (X25519)
keypairs and write them to a keys directory.

Run:
    python scripts/generate_keys.py [output_dir]
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from shared.keys import DEFAULT_KEYS_DIR, KEY_SOURCES, generate_and_save_keys  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    output_dir = Path(argv[0]) if argv else Path(DEFAULT_KEYS_DIR)

    print("Generating cryptographic keys…")
    print(f"Output directory: {output_dir}")

    signing, encryption = generate_and_save_keys(output_dir)

    print("\nKey generation complete!")
    print("\nRegister these public keys with the network registry")
    print("-" * 59)
    print(f"Signing Public Key:\n{signing.public_key}")
    print(f"\nEncryption Public Key:\n{encryption.public_key}")

    values = {
        "signing_private_key": signing.private_key,
        "signing_public_key": signing.public_key,
        "encryption_private_key": encryption.private_key,
        "encryption_public_key": encryption.public_key,
    }
    print("\nAdd the following to your .env file:")
    print("-" * 59)
    for field_name, (env_var, _) in KEY_SOURCES.items():
        print(f"{env_var}={values[field_name]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
