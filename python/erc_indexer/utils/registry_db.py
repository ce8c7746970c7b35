"""
ERC 合约注册表
用 SQLite 保存扫描到的 ERC-20 / ERC-721 合约和断点续扫游标
"""

import sqlite3
import json
from pathlib import Path
from datetime import datetime
from typing import Any, Dict, List, Optional


# 注册表支持的标准
STANDARDS = ("ERC20", "ERC721")


class RegistryDB:
    """ERC 合约注册表"""

    def __init__(self, db_path: str = "data/erc-registry.db"):
        """
        初始化数据库

        Args:
            db_path: 数据库文件路径
        """
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self._init_db()

    def _init_db(self) -> None:
        """初始化数据库表"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        # 合约表: 同一合约可以同时符合多个标准
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS contracts (
                contract_id TEXT NOT NULL,
                standard TEXT NOT NULL,
                address TEXT NOT NULL,
                data TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (contract_id, standard)
            )
        """)

        # 扫描状态表 (next_pointer 等)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS scan_state (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        conn.commit()
        conn.close()

    def save_contract(self, standard: str, record: Dict[str, Any]) -> None:
        """
        保存合约

        Args:
            standard: ERC20 / ERC721
            record: 合约信息，必须包含 contract_id 和 address
        """
        if standard not in STANDARDS:
            raise ValueError(f"Unsupported standard: {standard}")

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute(
            "INSERT OR REPLACE INTO contracts (contract_id, standard, address, data, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                record["contract_id"],
                standard,
                record["address"],
                json.dumps(record, ensure_ascii=False),
                datetime.now().isoformat(),
            )
        )

        conn.commit()
        conn.close()

    def has_contract(self, contract_id: str) -> bool:
        """合约是否已经在注册表中 (任一标准)"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            "SELECT 1 FROM contracts WHERE contract_id = ? LIMIT 1",
            (contract_id,)
        )
        found = cursor.fetchone() is not None
        conn.close()
        return found

    def list_contracts(
        self,
        standard: str,
        limit: int = 100,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        """
        按标准列出合约 (按写入顺序)

        Args:
            standard: ERC20 / ERC721
            limit: 返回数量
            offset: 偏移量

        Returns:
            合约信息列表
        """
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            "SELECT data FROM contracts WHERE standard = ? "
            "ORDER BY created_at, rowid LIMIT ? OFFSET ?",
            (standard, limit, offset)
        )
        rows = cursor.fetchall()
        conn.close()

        return [json.loads(data) for (data,) in rows]

    def count(self, standard: Optional[str] = None) -> int:
        """统计合约数量，不指定标准时统计全部"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        if standard:
            cursor.execute("SELECT COUNT(*) FROM contracts WHERE standard = ?", (standard,))
        else:
            cursor.execute("SELECT COUNT(*) FROM contracts")

        (total,) = cursor.fetchone()
        conn.close()
        return total

    def get_state(self, key: str) -> Optional[str]:
        """读取扫描状态，不存在返回 None"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM scan_state WHERE key = ?", (key,))
        row = cursor.fetchone()
        conn.close()
        return row[0] if row else None

    def set_state(self, key: str, value: Optional[str]) -> None:
        """保存扫描状态"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO scan_state (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, datetime.now().isoformat())
        )
        conn.commit()
        conn.close()

    def clear(self) -> None:
        """清空注册表和扫描状态"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("DELETE FROM contracts")
        cursor.execute("DELETE FROM scan_state")
        conn.commit()
        conn.close()
