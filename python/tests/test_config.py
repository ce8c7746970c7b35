"""
配置测试
"""

import pytest
from unittest.mock import patch

from erc_indexer.config import Settings, get_network_params


ENV_KEYS = [
    "HEDERA_NETWORK",
    "MIRROR_NODE_URL",
    "MIRROR_NODE_URL_WEB3",
    "STARTING_POINT",
    "SCAN_CONTRACT_LIMIT",
    "RETRY_DELAY_MS",
    "REQUEST_TIMEOUT",
    "REGISTRY_DB_PATH",
    "WALLET_RPC_URL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    with patch("erc_indexer.config.load_dotenv"):
        yield


def test_defaults():
    settings = Settings.from_env()

    assert settings.network == "testnet"
    assert settings.mirror_node_url == "https://testnet.mirrornode.hedera.com"
    assert settings.mirror_node_url_web3 == settings.mirror_node_url
    assert settings.scan_contract_limit == 100
    assert settings.retry_delay == 9.0
    assert settings.starting_point is None
    assert settings.registry_db_path == "data/erc-registry-testnet.db"


def test_local_network(monkeypatch):
    monkeypatch.setenv("HEDERA_NETWORK", "LOCAL")
    monkeypatch.setenv("STARTING_POINT", "0.0.1001")
    monkeypatch.setenv("RETRY_DELAY_MS", "250")

    settings = Settings.from_env()

    assert settings.mirror_node_url == "http://127.0.0.1:5551"
    assert settings.mirror_node_url_web3 == "http://127.0.0.1:8545"
    assert settings.starting_point == "0.0.1001"
    assert settings.retry_delay == 0.25


def test_explicit_urls_win(monkeypatch):
    monkeypatch.setenv("MIRROR_NODE_URL", "http://mirror:5551")
    monkeypatch.setenv("MIRROR_NODE_URL_WEB3", "http://mirror:8545")

    settings = Settings.from_env()

    assert settings.mirror_node_url == "http://mirror:5551"
    assert settings.mirror_node_url_web3 == "http://mirror:8545"


@pytest.mark.parametrize("key,value", [
    ("HEDERA_NETWORK", "ropsten"),
    ("SCAN_CONTRACT_LIMIT", "0"),
    ("SCAN_CONTRACT_LIMIT", "many"),
    ("RETRY_DELAY_MS", "-1"),
])
def test_invalid_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError):
        Settings.from_env()


def test_network_params():
    params = get_network_params("mainnet")

    assert params["chainId"] == "0x127"
    assert params["rpcUrls"] == ["https://mainnet.hashio.io/api"]

    with pytest.raises(ValueError):
        get_network_params("devnet")
