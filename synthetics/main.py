"""
Command line entry point.

    python -m synthetics.main key POOL_AMOUNT address:0x... address:0x...
    python -m synthetics.main scores positions.json
    python -m synthetics.main options
    python -m synthetics.main config
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from synthetics.config.config import Settings
from synthetics.config.tokens import TokenCatalog
from synthetics.core.errors import EncodingError, SyntheticsError
from synthetics.core.hashing import derive_key
from synthetics.core.json_utils import dumps, loads
from synthetics.infra.logging_cfg import build_logger, log_event
from synthetics.leaderboards.position_scores import Position, compute_scores
from synthetics.market_data.markets import MarketsInfo
from synthetics.market_data.price_feed import AsyncPriceFeed
from synthetics.state.state_atomic import AtomicStateStore
from synthetics.state.trade_config import TradeConfig
from synthetics.state.trade_options import trade_options_key

log = logging.getLogger("synthetics")


def parse_typed_arg(text: str) -> Tuple[str, Any]:
    """``uint256:5`` -> ("uint256", 5); ``bool:true`` -> ("bool", True)."""
    abi_type, sep, raw = text.partition(":")
    if not sep:
        raise EncodingError(f"expected TYPE:VALUE, got {text!r}")
    if abi_type == "bool":
        if raw.lower() not in {"true", "false", "1", "0"}:
            raise EncodingError(f"invalid bool: {raw!r}")
        return abi_type, raw.lower() in {"true", "1"}
    if abi_type.startswith(("uint", "int")):
        try:
            return abi_type, int(raw, 0)
        except ValueError as exc:
            raise EncodingError(f"invalid {abi_type}: {raw!r}") from exc
    return abi_type, raw


def cmd_key(args: argparse.Namespace) -> int:
    typed = [parse_typed_arg(a) for a in args.args]
    print(derive_key(args.name, *typed))
    return 0


async def _scores(cfg: Settings, positions_path: str) -> List[dict]:
    catalog = TokenCatalog.load(cfg.catalog_path)
    markets = MarketsInfo(catalog.markets(cfg.chain_id))
    positions = [Position.from_dict(p) for p in loads(Path(positions_path).read_bytes())]
    feed = AsyncPriceFeed(cfg.oracle_url, cfg.chain_id, catalog, timeout=cfg.http_timeout)
    try:
        prices = await feed.fetch()
    finally:
        await feed.close()
    scores = compute_scores(positions, prices, markets, catalog, cfg.chain_id)
    log_event(log, "scores_computed", chain_id=cfg.chain_id, positions=len(scores))
    return [s.to_dict() for s in scores]


def cmd_scores(args: argparse.Namespace, cfg: Settings) -> int:
    print(dumps(asyncio.run(_scores(cfg, args.positions))))
    return 0


async def _options(cfg: Settings) -> TradeConfig:
    account = cfg.resolve_account() if (cfg.account or cfg.private_key) else None
    store = AtomicStateStore(cfg.chain_id, account, cfg.state_dir)
    return TradeConfig.from_dict(await store.get(trade_options_key(cfg.chain_id)))


def cmd_options(cfg: Settings) -> int:
    print(dumps(asyncio.run(_options(cfg)).to_dict()))
    return 0


def cmd_config(cfg: Settings) -> int:
    print(dumps(cfg.dump()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="synthetics", description="Synthetics client core tools")
    sub = parser.add_subparsers(dest="command", required=True)

    key = sub.add_parser("key", help="derive a DataStore key")
    key.add_argument("name", help="key domain name, e.g. POOL_AMOUNT")
    key.add_argument("args", nargs="*", help="typed arguments as TYPE:VALUE")

    scores = sub.add_parser("scores", help="score open positions at current prices")
    scores.add_argument("positions", help="JSON file with a list of position records")

    sub.add_parser("options", help="show persisted trade options")
    sub.add_parser("config", help="show effective settings")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "key":
        # Pure derivation; no settings or logging setup needed.
        try:
            return cmd_key(args)
        except EncodingError as exc:
            print(f"error: {exc.message}", file=sys.stderr)
            return 2

    cfg = Settings.load()
    build_logger(level=getattr(logging, cfg.log_level), file_path=cfg.log_file)
    log_event(log, "config_loaded", level=logging.DEBUG, settings=cfg.dump())
    try:
        if args.command == "scores":
            return cmd_scores(args, cfg)
        if args.command == "options":
            return cmd_options(cfg)
        return cmd_config(cfg)
    except SyntheticsError as exc:
        log_event(log, "command_failed", level=logging.ERROR, command=args.command, error=exc.to_dict())
        return 1


if __name__ == "__main__":
    sys.exit(main())
