"""
区块链交互模块

包含:
- MirrorNodeClient: Mirror Node API 客户端 (合约列表/详情/合约调用)
- BytecodeAnalyzer: ERC-20 / ERC-721 检测
- WalletClient: 钱包 provider 封装
"""

from .mirror_node_client import (
    MirrorNodeClient,
    MirrorNodeContract,
    ContractPage,
    ContractDetail,
    ContractCallData,
    build_contracts_url,
)
from .bytecode_analyzer import BytecodeAnalyzer, ERC20, ERC721
from .wallet import WalletClient, WalletRPCError, get_wallet_client

__all__ = [
    # Mirror Node
    "MirrorNodeClient",
    "MirrorNodeContract",
    "ContractPage",
    "ContractDetail",
    "ContractCallData",
    "build_contracts_url",
    # ERC 检测
    "BytecodeAnalyzer",
    "ERC20",
    "ERC721",
    # 钱包
    "WalletClient",
    "WalletRPCError",
    "get_wallet_client",
]
