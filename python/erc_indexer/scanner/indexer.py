# -*- coding: utf-8 -*-
"""
ERC 合约索引器
遍历全部合约，逐个获取字节码、判断 ERC 标准、探测代币信息并写入注册表

流程 (每个合约):
1. fetch_contract_object() 获取字节码
2. BytecodeAnalyzer 检测 ERC-20 / ERC-721 选择器
3. contract_call_request() 探测 name / symbol / decimals / totalSupply
4. 写入 RegistryDB

每页处理完之后保存续扫游标，下次运行从该游标继续。
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import Dict, Optional, Any

from erc_indexer.blockchain.bytecode_analyzer import BytecodeAnalyzer, ERC20, ERC721
from erc_indexer.blockchain.mirror_node_client import (
    MirrorNodeClient,
    MirrorNodeContract,
    build_contracts_url,
)
from erc_indexer.config import GET_CONTRACT_ENDPOINT
from erc_indexer.scanner.contract_scanner import ContractScanner
from erc_indexer.utils.registry_db import RegistryDB


logger = logging.getLogger(__name__)

NEXT_POINTER_KEY = "next_pointer"

CONTRACT_ID_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
EVM_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass
class ScanSummary:
    """一次扫描的统计"""
    pages: int = 0
    contracts_seen: int = 0
    erc20_found: int = 0
    erc721_found: int = 0
    skipped: int = 0
    next_cursor: Optional[str] = None
    completed: bool = False
    failed: bool = False

    def to_dict(self) -> Dict:
        return asdict(self)


class ErcIndexer:
    """ERC 合约索引器"""

    def __init__(
        self,
        client: MirrorNodeClient,
        registry: RegistryDB,
        analyzer: Optional[BytecodeAnalyzer] = None,
        starting_point: Optional[str] = None
    ):
        """
        Args:
            client: Mirror Node 客户端
            registry: 注册表
            analyzer: ERC 检测器，不提供则基于 client 创建
            starting_point: 起始位置 (合约 ID / EVM 地址 / 列表游标)，仅在没有续扫游标时使用
        """
        self.client = client
        self.registry = registry
        self.analyzer = analyzer or BytecodeAnalyzer(client)
        self.starting_point = starting_point

    def resolve_starting_point(self, value: str) -> str:
        """
        把起始位置转换为列表游标

        Args:
            value: 0.0.x 合约 ID、0x EVM 地址或 /api/v1/contracts 开头的游标

        Returns:
            列表游标
        """
        value = value.strip()

        if value.startswith(GET_CONTRACT_ENDPOINT):
            return value

        if EVM_ADDRESS_PATTERN.match(value):
            detail = self.client.fetch_contract_object(value)
            if detail is None or not detail.contract_id:
                raise ValueError(f"Could not resolve contract id for starting point {value}")
            value = detail.contract_id

        if CONTRACT_ID_PATTERN.match(value):
            return (
                f"{GET_CONTRACT_ENDPOINT}?limit={self.client.scan_contract_limit}"
                f"&order=asc&contract.id=gte:{value}"
            )

        raise ValueError(f"Invalid starting point: {value}")

    def get_start_cursor(self) -> Optional[str]:
        """续扫游标优先，其次是配置的起始位置"""
        stored = self.registry.get_state(NEXT_POINTER_KEY)
        if stored:
            logger.info("Resuming scan from stored pointer: %s", stored)
            return stored

        if self.starting_point:
            cursor = self.resolve_starting_point(self.starting_point)
            logger.info("Starting scan from %s", cursor)
            return cursor

        return None

    def process_contract(self, contract: MirrorNodeContract) -> Dict[str, Dict[str, Any]]:
        """
        处理单个合约

        Returns:
            {标准: 代币信息}，不是 ERC 合约或详情获取失败时为空字典
        """
        detail = self.client.fetch_contract_object(contract.contract_id)
        if detail is None:
            return {}

        found = self.analyzer.analyze(detail)
        for standard, record in found.items():
            self.registry.save_contract(standard, record)
            logger.info(
                "Found %s contract %s (%s) %s",
                standard, record["contract_id"], record["address"], record.get("symbol", "")
            )
        return found

    def run(self, max_pages: Optional[int] = None) -> ScanSummary:
        """
        执行扫描

        Args:
            max_pages: 最多处理的页数，None 表示扫到最后一页

        Returns:
            ScanSummary
        """
        summary = ScanSummary()
        scanner = ContractScanner(self.client)
        start_cursor = self.get_start_cursor()

        for page in scanner.iter_pages(start_cursor):
            for contract in page.contracts:
                summary.contracts_seen += 1

                if self.registry.has_contract(contract.contract_id):
                    summary.skipped += 1
                    continue

                found = self.process_contract(contract)
                if ERC20 in found:
                    summary.erc20_found += 1
                if ERC721 in found:
                    summary.erc721_found += 1

            summary.pages += 1

            # 最后一页保存本页游标，下次运行重新检查该页的新合约
            pointer = (
                page.next_cursor
                or page.request_cursor
                or build_contracts_url(None, self.client.scan_contract_limit)
            )
            self.registry.set_state(NEXT_POINTER_KEY, pointer)
            summary.next_cursor = page.next_cursor

            logger.info(
                "Processed page %d: %d contracts, next=%s",
                summary.pages, len(page.contracts), page.next_cursor
            )

            if max_pages is not None and summary.pages >= max_pages:
                break

        summary.failed = scanner.failed
        summary.completed = not scanner.failed and not summary.next_cursor
        logger.info(
            "Scan finished: %d pages, %d contracts, %d ERC20, %d ERC721",
            summary.pages, summary.contracts_seen, summary.erc20_found, summary.erc721_found
        )
        return summary
