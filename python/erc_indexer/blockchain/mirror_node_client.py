"""
Mirror Node API 客户端
遍历 Hedera Mirror Node 的合约列表，并提供合约详情 / 合约调用查询

核心能力:
- fetch_contracts(): 按游标分页获取合约列表
- fetch_contract_object(): 获取单个合约详情 (含字节码)
- contract_call_request(): 通过 web3 端点执行只读合约调用 (ERC 探测)

错误处理策略 (三个方法一致):
- 429 限流: 固定间隔等待后用完全相同的参数重试，不设重试上限
- 400 校验失败: 仅在合约调用路径上视为正常结果 (非 ERC 合约会拒绝探测调用)，静默返回 None
- 其他错误: 记录日志并返回 None，不向调用方抛出异常

文档: https://docs.hedera.com/hedera/sdks-and-apis/rest-api
"""

import logging
import time
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional, Any, Union

import requests

from erc_indexer.config import (
    CONTRACT_CALL_ENDPOINT,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_SCAN_CONTRACT_LIMIT,
    DEFAULT_TIMEOUT,
    GET_CONTRACT_ENDPOINT,
    MAX_PAGE_SIZE,
)


logger = logging.getLogger(__name__)


@dataclass
class MirrorNodeContract:
    """合约列表中的单条合约摘要"""
    contract_id: str
    evm_address: str
    created_timestamp: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "MirrorNodeContract":
        return cls(
            contract_id=item.get("contract_id", ""),
            evm_address=item.get("evm_address", ""),
            created_timestamp=item.get("created_timestamp"),
        )


@dataclass
class ContractPage:
    """一页合约列表 + 下一页游标 (None 表示遍历结束)"""
    contracts: List[MirrorNodeContract] = field(default_factory=list)
    next_cursor: Optional[str] = None
    request_cursor: Optional[str] = None  # 请求本页时使用的游标

    @property
    def has_next(self) -> bool:
        return bool(self.next_cursor)


@dataclass
class ContractDetail:
    """合约详情"""
    contract_id: str
    evm_address: str
    bytecode: Optional[str] = None
    runtime_bytecode: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)

    @property
    def code(self) -> str:
        """运行时字节码，没有则退回部署字节码"""
        return self.runtime_bytecode or self.bytecode or "0x"

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "ContractDetail":
        return cls(
            contract_id=item.get("contract_id", ""),
            evm_address=item.get("evm_address", ""),
            bytecode=item.get("bytecode"),
            runtime_bytecode=item.get("runtime_bytecode"),
        )


@dataclass
class ContractCallData:
    """只读合约调用描述 (POST /api/v1/contracts/call 的请求体)"""
    to: str
    data: str
    from_address: Optional[str] = None
    gas: Optional[int] = None
    block: str = "latest"
    estimate: bool = False

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "to": self.to,
            "data": self.data,
            "block": self.block,
            "estimate": self.estimate,
        }
        if self.from_address:
            body["from"] = self.from_address
        if self.gas is not None:
            body["gas"] = self.gas
        return body


def build_contracts_url(next_cursor: Optional[str], limit: int) -> str:
    """
    构建合约列表请求路径

    Args:
        next_cursor: 上一页返回的 links.next，None 表示第一页
        limit: 每页数量

    Returns:
        第一页: /api/v1/contracts?limit={limit}&order=asc
        之后: 原样返回服务端给出的游标
    """
    if next_cursor:
        return next_cursor
    return f"{GET_CONTRACT_ENDPOINT}?limit={limit}&order=asc"


class MirrorNodeClient:
    """
    Mirror Node API 客户端

    REST 端点 (合约列表 / 详情) 和 web3 端点 (合约调用) 使用两个独立的会话，
    可以指向不同的地址和端口，限流重试逻辑由 _request() 统一处理。

    使用示例:
        >>> client = MirrorNodeClient("https://testnet.mirrornode.hedera.com",
        ...                           "https://testnet.mirrornode.hedera.com")
        >>> page = client.fetch_contracts()
        >>> for contract in page.contracts:
        ...     detail = client.fetch_contract_object(contract.contract_id)

    注意:
        - 429 重试没有次数上限，持续限流时扫描会一直等待，直到服务端恢复或进程被终止
    """

    def __init__(
        self,
        mirror_node_url: str,
        mirror_node_url_web3: Optional[str] = None,
        scan_contract_limit: int = DEFAULT_SCAN_CONTRACT_LIMIT,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """
        初始化 Mirror Node 客户端

        Args:
            mirror_node_url: REST API 基础 URL
            mirror_node_url_web3: web3 (contracts/call) 基础 URL，不提供则与 REST 相同
            scan_contract_limit: 每页合约数量 (1 ~ 100)
            retry_delay_ms: 429 限流后的固定等待时间 (毫秒)
            timeout: 请求超时时间 (秒)
        """
        if not mirror_node_url:
            raise ValueError("Mirror node URL is required")

        self.mirror_node_url = mirror_node_url.rstrip("/")
        self.mirror_node_url_web3 = (mirror_node_url_web3 or mirror_node_url).rstrip("/")
        self.scan_contract_limit = min(max(1, scan_contract_limit), MAX_PAGE_SIZE)
        self.retry_delay = retry_delay_ms / 1000
        self.timeout = timeout

        self.rest_session = self._build_session()
        self.web3_session = self._build_session()

        # 统计信息
        self._request_count = 0
        self._retry_count = 0

    @classmethod
    def from_settings(cls, settings) -> "MirrorNodeClient":
        """根据 Settings 创建客户端"""
        return cls(
            settings.mirror_node_url,
            settings.mirror_node_url_web3,
            scan_contract_limit=settings.scan_contract_limit,
            retry_delay_ms=settings.retry_delay_ms,
            timeout=settings.timeout,
        )

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        return session

    # ==================== 核心 API 方法 ====================

    def fetch_contracts(self, next_cursor: Optional[str] = None) -> Optional[ContractPage]:
        """
        获取一页合约列表

        Args:
            next_cursor: 分页游标 (来自上一页的 links.next)，None 表示从头开始

        Returns:
            ContractPage，请求失败返回 None
        """
        path = build_contracts_url(next_cursor, self.scan_contract_limit)
        logger.debug("Fetching contract batch from URL: %s", path)

        result = self._request(self.rest_session, self.mirror_node_url, "GET", path)
        if result is None:
            return None

        contracts = [
            MirrorNodeContract.from_api(item)
            for item in result.get("contracts") or []
            if isinstance(item, dict)
        ]
        links = result.get("links")
        if not isinstance(links, dict):
            links = {}

        return ContractPage(
            contracts=contracts,
            next_cursor=links.get("next"),
            request_cursor=next_cursor
        )

    def fetch_contract_object(self, contract_id: str) -> Optional[ContractDetail]:
        """
        获取合约详情 (含字节码)

        Args:
            contract_id: 合约 ID (0.0.x) 或 EVM 地址

        Returns:
            ContractDetail，请求失败返回 None
        """
        path = f"{GET_CONTRACT_ENDPOINT}/{contract_id}"
        result = self._request(self.rest_session, self.mirror_node_url, "GET", path)
        if result is None:
            return None
        return ContractDetail.from_api(result)

    def contract_call_request(
        self,
        call_data: Union[ContractCallData, Dict[str, Any]]
    ) -> Optional[str]:
        """
        发送只读合约调用

        非 ERC 合约会以 400 拒绝探测调用，这种情况静默返回 None。

        Args:
            call_data: 调用描述 (目标地址 + 编码后的调用数据)

        Returns:
            响应中的 result 字段 (hex 字符串)，失败返回 None
        """
        body = call_data.to_dict() if isinstance(call_data, ContractCallData) else call_data

        result = self._request(
            self.web3_session,
            self.mirror_node_url_web3,
            "POST",
            CONTRACT_CALL_ENDPOINT,
            json_data=body,
            silent_bad_request=True,
        )
        if result is None:
            return None
        return result.get("result")

    def get_stats(self) -> Dict[str, Any]:
        """
        获取客户端统计信息

        Returns:
            {
                "request_count": 请求次数 (含重试),
                "retry_count": 限流重试次数,
                "mirror_node_url": REST 基础 URL,
                "mirror_node_url_web3": web3 基础 URL
            }
        """
        return {
            "request_count": self._request_count,
            "retry_count": self._retry_count,
            "mirror_node_url": self.mirror_node_url,
            "mirror_node_url_web3": self.mirror_node_url_web3,
        }

    def close(self) -> None:
        self.rest_session.close()
        self.web3_session.close()

    # ==================== 内部方法 ====================

    def _request(
        self,
        session: requests.Session,
        base_url: str,
        method: str,
        path: str,
        params: Optional[Dict] = None,
        json_data: Optional[Dict] = None,
        silent_bad_request: bool = False
    ) -> Optional[Dict]:
        """
        发送 API 请求，限流时等待后原样重试

        Args:
            session: 使用的会话 (REST / web3)
            base_url: 基础 URL
            method: HTTP 方法 (GET, POST)
            path: 请求路径，已是完整 URL 时直接使用
            params: URL 参数
            json_data: 请求体数据
            silent_bad_request: 400 时不记录日志

        Returns:
            解析后的 JSON 响应，失败返回 None
        """
        url = path if path.startswith(("http://", "https://")) else f"{base_url}{path}"

        while True:
            self._request_count += 1

            try:
                if method.upper() == "GET":
                    response = session.get(url, params=params, timeout=self.timeout)
                else:
                    response = session.post(
                        url,
                        params=params,
                        json=json_data,
                        timeout=self.timeout
                    )
            except requests.exceptions.RequestException as e:
                logger.error("Error returned from the mirror node: %s", e)
                return None

            if response.status_code == 429:
                self._retry_count += 1
                logger.warning(
                    "Rate limit exceeded. Retrying in %sms...",
                    int(self.retry_delay * 1000)
                )
                time.sleep(self.retry_delay)
                continue

            if response.status_code == 400 and silent_bad_request:
                return None

            try:
                response.raise_for_status()
                data = response.json()
            except requests.exceptions.HTTPError as e:
                logger.error("Error returned from the mirror node: %s", e)
                return None
            except ValueError as e:
                logger.error("Invalid JSON from the mirror node (%s): %s", url, e)
                return None

            if not isinstance(data, dict):
                logger.error(
                    "Unexpected response body from the mirror node (%s): %s",
                    url, type(data).__name__
                )
                return None
            return data

    def __repr__(self) -> str:
        return (
            f"MirrorNodeClient("
            f"rest={self.mirror_node_url}, "
            f"web3={self.mirror_node_url_web3}, "
            f"requests={self._request_count})"
        )
