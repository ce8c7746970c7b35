"""
ERC Contract Indexer

遍历 Hedera Mirror Node 的合约列表，识别 ERC-20 / ERC-721 合约并写入注册表
"""

__version__ = "1.0.0"
