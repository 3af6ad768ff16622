"""Tests for shared.keys – persisting and loading this participant's keys."""

import base64
import tempfile
from pathlib import Path

from shared.crypto import generate_encryption_keypair, generate_signing_keypair
from shared.keys import (
    ENCRYPTION_PRIVATE_FILE,
    ENCRYPTION_PUBLIC_FILE,
    SIGNING_PRIVATE_FILE,
    SIGNING_PUBLIC_FILE,
    generate_and_save_keys,
    load_keys,
    save_keys,
)


def test_save_writes_four_plain_base64_files(tmp_path):
    signing = generate_signing_keypair()
    encryption = generate_encryption_keypair()
    save_keys(tmp_path, signing, encryption)

    assert (tmp_path / SIGNING_PRIVATE_FILE).read_text() == signing.private_key
    assert (tmp_path / SIGNING_PUBLIC_FILE).read_text() == signing.public_key
    assert (tmp_path / ENCRYPTION_PRIVATE_FILE).read_text() == encryption.private_key
    assert (tmp_path / ENCRYPTION_PUBLIC_FILE).read_text() == encryption.public_key
    for name in (SIGNING_PUBLIC_FILE, ENCRYPTION_PUBLIC_FILE):
        assert len(base64.b64decode((tmp_path / name).read_text())) == 32


def test_save_creates_missing_directory(tmp_path):
    target = tmp_path / "nested" / "keys"
    save_keys(target, generate_signing_keypair(), generate_encryption_keypair())
    assert (target / SIGNING_PUBLIC_FILE).exists()


def test_generate_and_load_from_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        signing, encryption = generate_and_save_keys(tmpdir)
        keys = load_keys(tmpdir, environ={})

    assert keys.signing_private_key == signing.private_key
    assert keys.signing_public_key == signing.public_key
    assert keys.encryption_private_key == encryption.private_key
    assert keys.encryption_public_key == encryption.public_key
    assert keys.has_signing_keys
    assert keys.has_encryption_keys


def test_env_takes_precedence_over_files(tmp_path):
    generate_and_save_keys(tmp_path)
    env = {"ONDC_SIGNING_PRIVATE_KEY": "ZW52LXByaXZhdGU=", "ONDC_SIGNING_PUBLIC_KEY": "ZW52LXB1YmxpYw=="}
    keys = load_keys(tmp_path, environ=env)

    assert keys.signing_private_key == "ZW52LXByaXZhdGU="
    assert keys.signing_public_key == "ZW52LXB1YmxpYw=="
    # Not overridden → still read from disk
    assert keys.encryption_public_key == (tmp_path / ENCRYPTION_PUBLIC_FILE).read_text()


def test_keys_dir_from_environment(tmp_path):
    signing, _ = generate_and_save_keys(tmp_path)
    keys = load_keys(environ={"KEYS_DIR": str(tmp_path)})
    assert keys.signing_public_key == signing.public_key


def test_partial_keys_are_not_fatal(tmp_path):
    (tmp_path / SIGNING_PUBLIC_FILE).write_text("  cHVibGlj\n")
    keys = load_keys(tmp_path, environ={})

    assert keys.signing_public_key == "cHVibGlj"
    assert keys.signing_private_key is None
    assert keys.encryption_private_key is None
    assert not keys.has_signing_keys


def test_missing_directory_yields_empty_material(tmp_path):
    keys = load_keys(Path(tmp_path) / "does-not-exist", environ={})
    assert keys.signing_private_key is None
    assert keys.encryption_public_key is None


def test_undecodable_key_file_is_skipped(tmp_path):
    signing, encryption = generate_and_save_keys(tmp_path)
    (tmp_path / SIGNING_PUBLIC_FILE).write_bytes(b"\xff\xfe\x00garbage")
    keys = load_keys(tmp_path, environ={})

    assert keys.signing_public_key is None
    assert keys.signing_private_key == signing.private_key
    assert keys.encryption_public_key == encryption.public_key
