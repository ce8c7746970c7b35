# -*- coding: utf-8 -*-
"""
ERC 注册表 API
只读查询扫描结果，供前端调用
"""

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from erc_indexer.config import Settings
from erc_indexer.scanner.indexer import NEXT_POINTER_KEY
from erc_indexer.utils.registry_db import RegistryDB


# 创建 FastAPI 应用
app = FastAPI(
    title="ERC Registry API",
    description="Mirror Node ERC-20 / ERC-721 合约注册表",
    version="1.0.0"
)

# CORS 配置 - 允许前端跨域访问
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 路径参数 -> 注册表中的标准名
STANDARD_ALIASES = {
    "erc20": "ERC20",
    "erc-20": "ERC20",
    "erc721": "ERC721",
    "erc-721": "ERC721",
}

# 全局实例
settings: Optional[Settings] = None
registry: Optional[RegistryDB] = None


def get_settings() -> Settings:
    """获取配置（懒加载）"""
    global settings
    if settings is None:
        settings = Settings.from_env()
    return settings


def get_registry() -> RegistryDB:
    """获取注册表（懒加载）"""
    global registry
    if registry is None:
        registry = RegistryDB(get_settings().registry_db_path)
    return registry


# ============ 响应模型 ============

class StatusResponse(BaseModel):
    """注册表状态"""
    network: str
    erc20_count: int
    erc721_count: int
    next_pointer: Optional[str]


class ContractListResponse(BaseModel):
    """合约列表"""
    standard: str
    total: int
    limit: int
    offset: int
    contracts: List[Dict[str, Any]]


# ============ API 路由 ============

@app.get("/health")
async def health():
    """健康检查"""
    return {
        "status": "ok",
        "service": "ERC Registry API",
        "version": "1.0.0"
    }


@app.get("/api/status", response_model=StatusResponse)
async def get_status():
    """获取注册表状态"""
    r = get_registry()
    return StatusResponse(
        network=get_settings().network,
        erc20_count=r.count("ERC20"),
        erc721_count=r.count("ERC721"),
        next_pointer=r.get_state(NEXT_POINTER_KEY),
    )


@app.get("/api/contracts/{standard}", response_model=ContractListResponse)
async def list_contracts(
    standard: str,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0)
):
    """
    按标准列出合约

    参数:
    - standard: erc20 / erc721
    - limit: 返回数量 (1 ~ 1000)
    - offset: 偏移量
    """
    name = STANDARD_ALIASES.get(standard.lower())
    if name is None:
        raise HTTPException(status_code=404, detail=f"Unknown standard: {standard}")

    r = get_registry()
    return ContractListResponse(
        standard=name,
        total=r.count(name),
        limit=limit,
        offset=offset,
        contracts=r.list_contracts(name, limit=limit, offset=offset),
    )
