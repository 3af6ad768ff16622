"""Tests for gateway.config and the provisioning script."""

import base64

from gateway.config import GatewayConfig
from scripts.generate_keys import main as generate_keys_main
from shared.keys import SIGNING_PUBLIC_FILE


def test_defaults():
    config = GatewayConfig.from_env({})
    assert config.registry_url == ""
    assert config.enable_authentication is True
    assert config.keys_dir == "./keys"
    assert config.health_path == "/health"
    assert config.internal_prefix == "/internal/"


def test_from_env():
    config = GatewayConfig.from_env({
        "REGISTRY_URL": "https://registry.example.com",
        "REGISTRY_TIMEOUT": "2.5",
        "ENABLE_AUTHENTICATION": "false",
        "KEYS_DIR": "/etc/gateway/keys",
        "GATEWAY_PORT": "9000",
    })
    assert config.registry_url == "https://registry.example.com"
    assert config.registry_timeout == 2.5
    assert config.enable_authentication is False
    assert config.keys_dir == "/etc/gateway/keys"
    assert config.port == 9000


def test_generate_keys_script(tmp_path, capsys):
    assert generate_keys_main([str(tmp_path)]) == 0
    out = capsys.readouterr().out

    public_key = (tmp_path / SIGNING_PUBLIC_FILE).read_text()
    assert len(base64.b64decode(public_key)) == 32
    assert f"ONDC_SIGNING_PUBLIC_KEY={public_key}" in out
