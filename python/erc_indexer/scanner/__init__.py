"""
扫描模块

包含:
- ContractScanner: 合约列表顺序分页遍历
- ErcIndexer: ERC 合约索引 (检测 + 探测 + 持久化 + 续扫)
"""

from .contract_scanner import ContractScanner
from .indexer import ErcIndexer, ScanSummary, NEXT_POINTER_KEY

__all__ = ["ContractScanner", "ErcIndexer", "ScanSummary", "NEXT_POINTER_KEY"]
