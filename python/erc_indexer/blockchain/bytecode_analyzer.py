"""
字节码分析器
通过字节码中的函数选择器 / 事件 topic 判断合约是否实现 ERC-20 / ERC-721，
再用只读合约调用 (name, symbol, decimals, totalSupply) 确认并读取代币信息
"""

import logging
from typing import Dict, List, Optional, Any, Set, Tuple

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from .mirror_node_client import ContractCallData, ContractDetail, MirrorNodeClient


logger = logging.getLogger(__name__)

ERC20 = "ERC20"
ERC721 = "ERC721"

# 各标准必须出现在字节码中的函数签名
STANDARD_FUNCTIONS = {
    ERC20: [
        "totalSupply()",
        "balanceOf(address)",
        "transfer(address,uint256)",
        "transferFrom(address,address,uint256)",
        "approve(address,uint256)",
        "allowance(address,address)",
    ],
    ERC721: [
        "balanceOf(address)",
        "ownerOf(uint256)",
        "safeTransferFrom(address,address,uint256,bytes)",
        "safeTransferFrom(address,address,uint256)",
        "transferFrom(address,address,uint256)",
        "approve(address,uint256)",
        "setApprovalForAll(address,bool)",
        "getApproved(uint256)",
        "isApprovedForAll(address,address)",
    ],
}

# 各标准必须出现在字节码中的事件签名
STANDARD_EVENTS = {
    ERC20: [
        "Transfer(address,address,uint256)",
        "Approval(address,address,uint256)",
    ],
    ERC721: [
        "Transfer(address,address,uint256)",
        "Approval(address,address,uint256)",
        "ApprovalForAll(address,address,bool)",
    ],
}

# 探测调用: (字段名, 函数签名, 返回类型)
ERC20_PROBES: List[Tuple[str, str, str]] = [
    ("name", "name()", "string"),
    ("symbol", "symbol()", "string"),
    ("decimals", "decimals()", "uint8"),
    ("total_supply", "totalSupply()", "uint256"),
]

ERC721_PROBES: List[Tuple[str, str, str]] = [
    ("name", "name()", "string"),
    ("symbol", "symbol()", "string"),
]


def _strip_hex_prefix(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def function_selector(signature: str) -> str:
    """函数选择器 (keccak 前 4 字节，不带 0x)"""
    return bytes(Web3.keccak(text=signature)[:4]).hex()


def event_topic(signature: str) -> str:
    """事件 topic (完整 keccak，不带 0x)"""
    return bytes(Web3.keccak(text=signature)).hex()


def build_call_data(to: str, signature: str) -> ContractCallData:
    """
    构建无参数只读调用

    Args:
        to: 合约 EVM 地址
        signature: 函数签名，如 "name()"

    Returns:
        ContractCallData
    """
    return ContractCallData(to=to, data="0x" + function_selector(signature))


def decode_result(result_hex: Optional[str], abi_type: str) -> Optional[Any]:
    """
    解码合约调用的返回数据

    Args:
        result_hex: contracts/call 返回的 result 字段
        abi_type: 返回值 ABI 类型 (string, uint8, uint256)

    Returns:
        解码后的值，空结果或格式错误返回 None
    """
    if not result_hex:
        return None

    raw = _strip_hex_prefix(result_hex)
    if not raw:
        return None

    try:
        (value,) = decode([abi_type], bytes.fromhex(raw))
    except (DecodingError, ValueError, OverflowError) as e:
        logger.debug("Could not decode %s result %s: %s", abi_type, result_hex, e)
        return None
    return value


class BytecodeAnalyzer:
    """ERC 标准检测器"""

    def __init__(self, client: MirrorNodeClient):
        """
        Args:
            client: Mirror Node 客户端 (用于探测调用)
        """
        self.client = client

    @staticmethod
    def detect_standards(bytecode: Optional[str]) -> Set[str]:
        """
        根据字节码判断可能实现的标准

        Args:
            bytecode: 合约字节码 (hex)

        Returns:
            命中的标准集合，如 {"ERC20"}
        """
        if not bytecode:
            return set()

        code = _strip_hex_prefix(bytecode).lower()
        if not code:
            return set()

        detected = set()
        for standard, signatures in STANDARD_FUNCTIONS.items():
            selectors = [function_selector(sig) for sig in signatures]
            topics = [event_topic(sig) for sig in STANDARD_EVENTS[standard]]

            if all(s in code for s in selectors) and all(t in code for t in topics):
                detected.add(standard)

        return detected

    def _probe(
        self,
        evm_address: str,
        probes: List[Tuple[str, str, str]]
    ) -> Optional[Dict[str, Any]]:
        """依次执行探测调用，任一失败即视为不符合标准"""
        info: Dict[str, Any] = {}

        for field_name, signature, abi_type in probes:
            result = self.client.contract_call_request(build_call_data(evm_address, signature))
            value = decode_result(result, abi_type)
            if value is None:
                return None
            info[field_name] = value

        return info

    def probe_erc20(self, contract: ContractDetail) -> Optional[Dict[str, Any]]:
        """
        读取 ERC-20 代币信息

        Returns:
            {address, contract_id, name, symbol, decimals, total_supply}，不符合返回 None
        """
        info = self._probe(contract.evm_address, ERC20_PROBES)
        if info is None:
            return None

        # uint256 超出 SQLite INTEGER 范围，按字符串保存
        info["total_supply"] = str(info["total_supply"])
        return {"address": contract.evm_address, "contract_id": contract.contract_id, **info}

    def probe_erc721(self, contract: ContractDetail) -> Optional[Dict[str, Any]]:
        """
        读取 ERC-721 代币信息

        Returns:
            {address, contract_id, name, symbol}，不符合返回 None
        """
        info = self._probe(contract.evm_address, ERC721_PROBES)
        if info is None:
            return None
        return {"address": contract.evm_address, "contract_id": contract.contract_id, **info}

    def analyze(self, contract: ContractDetail) -> Dict[str, Dict[str, Any]]:
        """
        完整分析一个合约

        Args:
            contract: 合约详情

        Returns:
            {标准: 代币信息}，例如 {"ERC20": {...}}，都不符合时为空字典
        """
        found = {}
        standards = self.detect_standards(contract.code)

        if ERC20 in standards:
            erc20 = self.probe_erc20(contract)
            if erc20 is not None:
                found[ERC20] = erc20

        if ERC721 in standards:
            erc721 = self.probe_erc721(contract)
            if erc721 is not None:
                found[ERC721] = erc721

        return found
