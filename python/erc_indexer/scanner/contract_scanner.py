"""
合约列表遍历器
按游标顺序逐页遍历 Mirror Node 合约列表
"""

import logging
from typing import Iterator, Optional

from erc_indexer.blockchain.mirror_node_client import (
    ContractPage,
    MirrorNodeClient,
    MirrorNodeContract,
)


logger = logging.getLogger(__name__)


class ContractScanner:
    """
    顺序分页遍历

    iter_pages() 是生成器: 调用方处理完当前页 (包括其中的详情 / 调用请求) 之后，
    才会请求下一页，任何时刻最多只有一个列表请求在进行。

    遍历在以下情况结束:
    - 某一页没有 links.next
    - 某一页请求失败 (failed 为 True)
    """

    def __init__(self, client: MirrorNodeClient):
        self.client = client
        self.pages_fetched = 0
        self.last_cursor: Optional[str] = None
        self.failed = False

    def iter_pages(self, start_cursor: Optional[str] = None) -> Iterator[ContractPage]:
        """
        逐页遍历

        Args:
            start_cursor: 起始游标，None 表示从第一页开始

        Yields:
            ContractPage
        """
        cursor = start_cursor
        self.failed = False

        while True:
            page = self.client.fetch_contracts(cursor)
            if page is None:
                logger.error("Failed to fetch contract page (cursor=%s), stopping scan", cursor)
                self.failed = True
                return

            self.pages_fetched += 1
            self.last_cursor = page.next_cursor
            yield page

            if not page.next_cursor:
                return
            cursor = page.next_cursor

    def iter_contracts(self, start_cursor: Optional[str] = None) -> Iterator[MirrorNodeContract]:
        """逐个遍历合约摘要"""
        for page in self.iter_pages(start_cursor):
            yield from page.contracts
