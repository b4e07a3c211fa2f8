#!/usr/bin/env python3
"""Deploy a new ERC20 token by calling ``create`` on the BEVM factory contract."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from web3.exceptions import Web3Exception

from bevm_erc20_factory.factory import (
    DEFAULT_ABI_PATH,
    DEFAULT_LOG_INDEX,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    ERC20Factory,
    TokenParams,
)
from bevm_erc20_factory.networks import DEFAULT_NETWORK, NETWORK_CONFIGS, get_network
from bevm_erc20_factory.wallet import load_env_file, load_signer


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--network",
        default=os.getenv("BEVM_NETWORK") or DEFAULT_NETWORK,
        choices=sorted(NETWORK_CONFIGS),
        help=f"Target network ({', '.join(sorted(NETWORK_CONFIGS))}). Defaults to {DEFAULT_NETWORK}.",
    )
    parser.add_argument(
        "--rpc-url",
        default=os.getenv("BEVM_RPC_URL"),
        help="Override the JSON-RPC endpoint of the selected network.",
    )
    parser.add_argument(
        "--factory-address",
        default=os.getenv("BEVM_FACTORY_ADDRESS"),
        help="Override the factory contract address of the selected network.",
    )
    parser.add_argument(
        "--abi",
        type=Path,
        default=DEFAULT_ABI_PATH,
        help=f"Factory contract ABI (default: {DEFAULT_ABI_PATH})",
    )
    parser.add_argument("--name", required=True, help="Token name")
    parser.add_argument("--symbol", required=True, help="Token symbol")
    parser.add_argument("--protocol", default="brc-20", help="Bitcoin asset protocol tag (default: brc-20)")
    parser.add_argument("--decimals", type=int, default=18, help="Token decimals (default: 18)")
    parser.add_argument("--owner", default=None, help="Token owner. Defaults to the signer address.")
    parser.add_argument("--admin", default=None, help="Token admin. Defaults to the signer address.")
    parser.add_argument(
        "--gas-limit",
        type=int,
        default=None,
        help="Skip gas estimation and use this gas limit.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_RECEIPT_TIMEOUT,
        help=f"Seconds to wait for the transaction receipt (default: {DEFAULT_RECEIPT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between receipt polls (default: {DEFAULT_POLL_INTERVAL:g})",
    )
    parser.add_argument(
        "--log-index",
        type=int,
        default=DEFAULT_LOG_INDEX,
        help=f"Receipt log carrying the new token address (default: {DEFAULT_LOG_INDEX})",
    )
    parser.add_argument("--json", action="store_true", help="Emit the result as JSON.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging verbosity (DEBUG, INFO, WARNING)",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    load_env_file()
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        network = get_network(args.network, rpc_url=args.rpc_url, factory_address=args.factory_address)
        account = load_signer()
        params = TokenParams(
            name=args.name,
            symbol=args.symbol,
            protocol=args.protocol,
            decimals=args.decimals,
            owner=args.owner or account.address,
            admin=args.admin or account.address,
        )
        factory = ERC20Factory.connect(network.rpc_url, args.abi, network.factory_address)
        logging.info("Calling %s factory %s via %s", network.name, network.factory_address, network.rpc_url)
        result = factory.create_erc20(
            params,
            account,
            gas_limit=args.gas_limit,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            log_index=args.log_index,
        )
    except (ValueError, RuntimeError, OSError, Web3Exception) as exc:
        logging.error("Failed to create ERC20 token: %s", exc)
        return 1

    if args.json:
        json.dump(result.as_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        print(f"New contract address: {result.token_address}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
