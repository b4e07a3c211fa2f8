"""Deploy ERC20 tokens through the BEVM Bitcoin-assets factory contract."""
from __future__ import annotations

from .factory import (
    CreateResult,
    ERC20Factory,
    FactoryError,
    ReceiptTimeout,
    TokenParams,
    TransactionReverted,
    encode_create_call,
    extract_token_address,
    load_abi,
)
from .networks import DEFAULT_NETWORK, NETWORK_CONFIGS, NetworkConfig, get_network
from .wallet import load_env_file, load_signer

__all__ = [
    "CreateResult",
    "DEFAULT_NETWORK",
    "ERC20Factory",
    "FactoryError",
    "NETWORK_CONFIGS",
    "NetworkConfig",
    "ReceiptTimeout",
    "TokenParams",
    "TransactionReverted",
    "encode_create_call",
    "extract_token_address",
    "get_network",
    "load_abi",
    "load_env_file",
    "load_signer",
]
