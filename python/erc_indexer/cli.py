# -*- coding: utf-8 -*-
"""
命令行入口

用法:
    erc-indexer scan [--max-pages N] [--starting-point 0.0.1234] [--reset]
    erc-indexer serve [--host 0.0.0.0] [--port 8000]
    erc-indexer wallet (--balance ADDRESS | --chain-id)
"""

import argparse
import logging
import sys
from typing import List, Optional

from erc_indexer.blockchain.mirror_node_client import MirrorNodeClient
from erc_indexer.blockchain.wallet import get_wallet_client
from erc_indexer.config import Settings
from erc_indexer.scanner.indexer import ErcIndexer
from erc_indexer.utils.logger import setup_logging
from erc_indexer.utils.registry_db import RegistryDB


logger = logging.getLogger("erc_indexer.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="erc-indexer",
        description="Scan Hedera Mirror Node contracts for ERC-20 / ERC-721 tokens"
    )
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-file", default=None, help="Optional log file path")

    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan contracts and update the registry")
    scan.add_argument("--max-pages", type=int, default=None, help="Stop after N pages")
    scan.add_argument("--starting-point", default=None,
                      help="Contract id (0.0.x), EVM address or list cursor")
    scan.add_argument("--reset", action="store_true",
                      help="Clear the registry and stored pointer before scanning")

    serve = sub.add_parser("serve", help="Serve the registry over HTTP")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    wallet = sub.add_parser("wallet", help="Query the configured wallet provider")
    group = wallet.add_mutually_exclusive_group(required=True)
    group.add_argument("--balance", metavar="ADDRESS", help="Print account balance")
    group.add_argument("--chain-id", action="store_true", help="Print current chain id")

    return parser


def run_scan(settings: Settings, args: argparse.Namespace) -> int:
    """执行一次扫描"""
    registry = RegistryDB(settings.registry_db_path)
    if args.reset:
        registry.clear()

    client = MirrorNodeClient.from_settings(settings)
    indexer = ErcIndexer(
        client,
        registry,
        starting_point=args.starting_point or settings.starting_point
    )

    try:
        summary = indexer.run(max_pages=args.max_pages)
    finally:
        client.close()

    print(
        f"Pages: {summary.pages} | Contracts: {summary.contracts_seen} | "
        f"ERC20: {summary.erc20_found} | ERC721: {summary.erc721_found} | "
        f"Skipped: {summary.skipped}"
    )
    print(f"Next pointer: {summary.next_cursor or '-'}")
    if summary.failed:
        print("Scan stopped: page fetch failed")
        return 1
    return 0 if summary.pages > 0 else 1


def run_serve(args: argparse.Namespace) -> int:
    """启动 API 服务"""
    import uvicorn
    from erc_indexer.api.main import app

    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def run_wallet(settings: Settings, args: argparse.Namespace) -> int:
    """钱包查询"""
    result = get_wallet_client(settings.wallet_rpc_url, network=settings.network)
    if "err" in result:
        print(f"Wallet unavailable: {result['err']}")
        return 1

    wallet = result["wallet"]
    response = wallet.get_balance(args.balance) if args.balance else wallet.get_current_chain_id()

    if response.get("err") is not None:
        print(f"Error: {response['err']}")
        return 1

    for key, value in response.items():
        print(f"{key}: {value}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, log_file=args.log_file)

    try:
        settings = Settings.from_env()
        if args.command == "scan":
            return run_scan(settings, args)
        if args.command == "serve":
            return run_serve(args)
        return run_wallet(settings, args)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
