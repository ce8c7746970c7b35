"""
注册表测试
"""

import pytest

from erc_indexer.utils.registry_db import RegistryDB


ERC20_RECORD = {
    "address": "0x00000000000000000000000000000000000004d2",
    "contract_id": "0.0.1234",
    "name": "Token",
    "symbol": "TKN",
    "decimals": 18,
    "total_supply": "1000000000000000000000",
}


def test_save_and_list(registry):
    registry.save_contract("ERC20", ERC20_RECORD)

    assert registry.has_contract("0.0.1234") is True
    assert registry.has_contract("0.0.9") is False
    assert registry.list_contracts("ERC20") == [ERC20_RECORD]
    assert registry.list_contracts("ERC721") == []


def test_save_is_idempotent(registry):
    registry.save_contract("ERC20", ERC20_RECORD)
    registry.save_contract("ERC20", {**ERC20_RECORD, "symbol": "TKN2"})

    assert registry.count("ERC20") == 1
    assert registry.list_contracts("ERC20")[0]["symbol"] == "TKN2"


def test_same_contract_two_standards(registry):
    registry.save_contract("ERC20", ERC20_RECORD)
    registry.save_contract("ERC721", {"address": ERC20_RECORD["address"], "contract_id": "0.0.1234"})

    assert registry.count() == 2
    assert registry.count("ERC721") == 1


def test_list_pagination(registry):
    for i in range(5):
        registry.save_contract("ERC721", {"address": f"0x{i:040x}", "contract_id": f"0.0.{i}"})

    page = registry.list_contracts("ERC721", limit=2, offset=2)

    assert [r["contract_id"] for r in page] == ["0.0.2", "0.0.3"]


def test_unknown_standard(registry):
    with pytest.raises(ValueError):
        registry.save_contract("ERC1155", ERC20_RECORD)


def test_state(registry):
    assert registry.get_state("next_pointer") is None

    registry.set_state("next_pointer", "/api/v1/contracts?limit=100&contract.id=gt:0.0.10")
    registry.set_state("next_pointer", "/api/v1/contracts?limit=100&contract.id=gt:0.0.20")

    assert registry.get_state("next_pointer").endswith("0.0.20")


def test_clear(registry):
    registry.save_contract("ERC20", ERC20_RECORD)
    registry.set_state("next_pointer", "x")

    registry.clear()

    assert registry.count() == 0
    assert registry.get_state("next_pointer") is None


def test_creates_parent_directory(tmp_path):
    db = RegistryDB(str(tmp_path / "nested" / "dir" / "registry.db"))
    assert db.count() == 0
