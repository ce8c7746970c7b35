"""
索引器配置
从 .env / 环境变量读取 Mirror Node 地址、扫描参数和钱包网络参数
"""

import os
from dataclasses import dataclass
from typing import Dict, Optional, Any
from dotenv import load_dotenv


# Mirror Node API 路径
GET_CONTRACT_ENDPOINT = "/api/v1/contracts"
CONTRACT_CALL_ENDPOINT = "/api/v1/contracts/call"

# Mirror Node 单页最大条数
MAX_PAGE_SIZE = 100

# 默认配置
DEFAULT_SCAN_CONTRACT_LIMIT = 100
DEFAULT_RETRY_DELAY_MS = 9000
DEFAULT_TIMEOUT = 30

# 各网络的 Mirror Node / JSON-RPC 地址
HEDERA_NETWORKS: Dict[str, Dict[str, Any]] = {
    "mainnet": {
        "mirror_node_url": "https://mainnet-public.mirrornode.hedera.com",
        "mirror_node_url_web3": "https://mainnet-public.mirrornode.hedera.com",
        "chain_id_hex": "0x127",
        "chain_name": "Hedera Mainnet",
        "rpc_url": "https://mainnet.hashio.io/api",
        "block_explorer_url": "https://hashscan.io/mainnet/dashboard",
    },
    "testnet": {
        "mirror_node_url": "https://testnet.mirrornode.hedera.com",
        "mirror_node_url_web3": "https://testnet.mirrornode.hedera.com",
        "chain_id_hex": "0x128",
        "chain_name": "Hedera Testnet",
        "rpc_url": "https://testnet.hashio.io/api",
        "block_explorer_url": "https://hashscan.io/testnet/dashboard",
    },
    "previewnet": {
        "mirror_node_url": "https://previewnet.mirrornode.hedera.com",
        "mirror_node_url_web3": "https://previewnet.mirrornode.hedera.com",
        "chain_id_hex": "0x129",
        "chain_name": "Hedera Previewnet",
        "rpc_url": "https://previewnet.hashio.io/api",
        "block_explorer_url": "https://hashscan.io/previewnet/dashboard",
    },
    "local": {
        "mirror_node_url": "http://127.0.0.1:5551",
        "mirror_node_url_web3": "http://127.0.0.1:8545",
        "chain_id_hex": "0x12a",
        "chain_name": "Hedera Localnet",
        "rpc_url": "http://127.0.0.1:7546",
        "block_explorer_url": "http://127.0.0.1:8080/devnet/dashboard",
    },
}

NATIVE_CURRENCY = {"name": "HBAR", "symbol": "HBAR", "decimals": 18}


def get_network_params(network: str) -> Dict[str, Any]:
    """
    获取 wallet_addEthereumChain 所需的网络参数

    Args:
        network: 网络名称 (mainnet, testnet, previewnet, local)

    Returns:
        EIP-3085 格式的网络参数
    """
    if network not in HEDERA_NETWORKS:
        raise ValueError(f"Unknown network: {network}")

    info = HEDERA_NETWORKS[network]
    return {
        "chainId": info["chain_id_hex"],
        "chainName": info["chain_name"],
        "nativeCurrency": dict(NATIVE_CURRENCY),
        "rpcUrls": [info["rpc_url"]],
        "blockExplorerUrls": [info["block_explorer_url"]],
    }


def _get_int(key: str, default: int) -> int:
    """读取整数环境变量，空值使用默认值"""
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """索引器运行配置"""
    network: str = "testnet"
    mirror_node_url: str = ""
    mirror_node_url_web3: str = ""
    starting_point: Optional[str] = None
    scan_contract_limit: int = DEFAULT_SCAN_CONTRACT_LIMIT
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    timeout: int = DEFAULT_TIMEOUT
    registry_db_path: str = ""
    wallet_rpc_url: str = ""

    def __post_init__(self):
        if self.network not in HEDERA_NETWORKS:
            raise ValueError(f"Unknown network: {self.network}")

        info = HEDERA_NETWORKS[self.network]
        if not self.mirror_node_url:
            self.mirror_node_url = info["mirror_node_url"]
        if not self.mirror_node_url_web3:
            self.mirror_node_url_web3 = info["mirror_node_url_web3"]
        if not self.wallet_rpc_url:
            self.wallet_rpc_url = info["rpc_url"]
        if not self.registry_db_path:
            self.registry_db_path = f"data/erc-registry-{self.network}.db"

        if self.scan_contract_limit < 1:
            raise ValueError("SCAN_CONTRACT_LIMIT must be a positive integer")
        if self.retry_delay_ms < 0:
            raise ValueError("RETRY_DELAY_MS must not be negative")

    @property
    def retry_delay(self) -> float:
        """限流重试间隔 (秒)"""
        return self.retry_delay_ms / 1000

    @classmethod
    def from_env(cls) -> "Settings":
        """
        从环境变量构建配置

        会先加载当前目录下的 .env 文件，已存在的环境变量优先
        """
        load_dotenv()

        return cls(
            network=os.getenv("HEDERA_NETWORK", "testnet").strip().lower(),
            mirror_node_url=os.getenv("MIRROR_NODE_URL", "").strip(),
            mirror_node_url_web3=os.getenv("MIRROR_NODE_URL_WEB3", "").strip(),
            starting_point=os.getenv("STARTING_POINT", "").strip() or None,
            scan_contract_limit=_get_int("SCAN_CONTRACT_LIMIT", DEFAULT_SCAN_CONTRACT_LIMIT),
            retry_delay_ms=_get_int("RETRY_DELAY_MS", DEFAULT_RETRY_DELAY_MS),
            timeout=_get_int("REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
            registry_db_path=os.getenv("REGISTRY_DB_PATH", "").strip(),
            wallet_rpc_url=os.getenv("WALLET_RPC_URL", "").strip(),
        )
