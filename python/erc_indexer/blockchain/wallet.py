"""
钱包客户端封装
基于注入的 JSON-RPC provider 提供余额、账户、链切换等操作

所有方法都返回字典: 成功时为结果字段，失败时为 {"err": 错误}，不会向外抛出异常
"""

import logging
from typing import Dict, List, Optional, Any
from web3 import Web3

from erc_indexer.config import HEDERA_NETWORKS, get_network_params


logger = logging.getLogger(__name__)

# EIP-1193: 钱包中不存在该链
UNRECOGNIZED_CHAIN_ERROR = 4902


class WalletRPCError(Exception):
    """provider 返回的 JSON-RPC 错误"""
    def __init__(self, code: Optional[int], message: str):
        self.code = code
        self.message = message
        super().__init__(f"RPC Error [{code}]: {message}")


def find_network_by_chain_id(chain_id: str) -> Optional[str]:
    """按链 ID (hex) 查找网络名称，未知链返回 None"""
    for name, info in HEDERA_NETWORKS.items():
        if info["chain_id_hex"] == chain_id.lower():
            return name
    return None


class WalletClient:
    """钱包客户端"""

    def __init__(self, provider: Any, network: str = "testnet"):
        """
        初始化钱包客户端

        Args:
            provider: 实现 make_request(method, params) 的 provider (如 Web3.HTTPProvider)
            network: 目标网络名称 (mainnet, testnet, previewnet, local)
        """
        if network not in HEDERA_NETWORKS:
            raise ValueError(f"Unknown network: {network}")

        self.provider = provider
        self.network = network

    def _send(self, method: str, params: List[Any]) -> Any:
        """发送 JSON-RPC 请求，返回 result 字段"""
        response = self.provider.make_request(method, params)

        error = response.get("error") if isinstance(response, dict) else None
        if error:
            if isinstance(error, dict):
                raise WalletRPCError(error.get("code"), error.get("message", "Unknown error"))
            raise WalletRPCError(None, str(error))

        return response.get("result")

    def get_balance(self, account: str) -> Dict[str, Any]:
        """
        获取账户余额

        Args:
            account: 账户地址

        Returns:
            {"balance": 余额 (hex, wei)} 或 {"err": 错误}
        """
        try:
            balance = self._send("eth_getBalance", [account, "latest"])
            return {"balance": balance}
        except Exception as e:
            logger.error("Error getting balance for %s: %s", account, e)
            return {"err": e}

    def get_current_chain_id(self) -> Dict[str, Any]:
        """
        获取 provider 当前连接的链 ID

        Returns:
            {"current_chain_id": 链 ID (hex)} 或 {"err": 错误}
        """
        try:
            return {"current_chain_id": self._send("eth_chainId", [])}
        except Exception as e:
            return {"err": e}

    def request_accounts(self) -> Dict[str, Any]:
        """
        请求钱包中已连接的账户

        Returns:
            {"accounts": [地址, ...]} 或 {"err": 错误}
        """
        try:
            return {"accounts": self._send("eth_requestAccounts", [])}
        except Exception as e:
            return {"err": e}

    def add_network(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        请求钱包添加网络

        Args:
            params: EIP-3085 网络参数，不提供则使用当前网络的默认参数

        Returns:
            {"err": None} 表示成功
        """
        if params is None:
            params = get_network_params(self.network)

        try:
            self._send("wallet_addEthereumChain", [params])
            return {"err": None}
        except Exception as e:
            logger.error("Error adding %s chain: %s", params.get("chainName", "unknown"), e)
            return {"err": e}

    def switch_network(self, chain_id: Optional[str] = None) -> Dict[str, Any]:
        """
        请求钱包切换网络，钱包中还没有该网络时先添加

        Args:
            chain_id: 目标链 ID (hex)，不提供则使用当前网络

        Returns:
            {"err": None} 表示成功
        """
        if chain_id is None:
            chain_id = HEDERA_NETWORKS[self.network]["chain_id_hex"]

        try:
            self._send("wallet_switchEthereumChain", [{"chainId": chain_id}])
            return {"err": None}
        except WalletRPCError as e:
            if e.code == UNRECOGNIZED_CHAIN_ERROR:
                network = find_network_by_chain_id(chain_id)
                if network is not None:
                    return self.add_network(get_network_params(network))
                logger.error("Chain %s is not a known Hedera network", chain_id)
                return {"err": e}
            logger.error("Error switching to chain %s: %s", chain_id, e)
            return {"err": e}
        except Exception as e:
            logger.error("Error switching to chain %s: %s", chain_id, e)
            return {"err": e}

    def __repr__(self) -> str:
        return f"WalletClient(network={self.network}, provider={type(self.provider).__name__})"


def get_wallet_client(rpc_url: Optional[str], network: str = "testnet") -> Dict[str, Any]:
    """
    创建钱包客户端

    Args:
        rpc_url: JSON-RPC 地址

    Returns:
        {"wallet": WalletClient} 或 {"err": "!HEDERA"} (没有可用的 provider)
    """
    if not rpc_url:
        return {"err": "!HEDERA"}

    provider = Web3.HTTPProvider(rpc_url)
    return {"wallet": WalletClient(provider, network=network)}
