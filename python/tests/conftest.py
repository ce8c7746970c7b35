"""
测试公共工具
"""

import json
import os
import sys

import pytest
import requests

# 添加项目路径
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from erc_indexer.utils.registry_db import RegistryDB


REST_URL = "https://mirror.test"
WEB3_URL = "http://web3.test:8545"


def make_response(status_code: int, payload=None, url: str = REST_URL) -> requests.Response:
    """构造真实的 requests.Response"""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    response._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    return response


def contracts_payload(contract_ids, next_link=None):
    """合约列表响应"""
    return {
        "contracts": [
            {
                "contract_id": cid,
                "evm_address": "0x" + cid.split(".")[-1].rjust(40, "0"),
                "created_timestamp": "1700000000.000000000",
            }
            for cid in contract_ids
        ],
        "links": {"next": next_link},
    }


@pytest.fixture
def registry(tmp_path):
    return RegistryDB(str(tmp_path / "registry.db"))
