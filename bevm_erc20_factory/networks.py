"""Known BEVM deployments of the Bitcoin-assets ERC20 factory."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional

from eth_utils import is_hex_address, to_checksum_address


@dataclass(frozen=True)
class NetworkConfig:
    """RPC endpoint and factory contract for a single chain."""

    name: str
    rpc_url: str
    factory_address: str


BEVM_MAINNET = NetworkConfig(
    name="mainnet",
    rpc_url="https://mainnet.chainx.org/rpc",
    factory_address="0x124e3E8D56db6ADA37aF2b7662F275D49BA850e6",
)

BEVM_TESTNET = NetworkConfig(
    name="testnet",
    rpc_url="https://testnet3.chainx.org/rpc",
    factory_address="0xeB789d5f6f66104AE9876175A5B9A03bDa0545A8",
)

NETWORK_CONFIGS: Dict[str, NetworkConfig] = {
    BEVM_MAINNET.name: BEVM_MAINNET,
    BEVM_TESTNET.name: BEVM_TESTNET,
}

DEFAULT_NETWORK = BEVM_TESTNET.name


def get_network(
    name: str,
    *,
    rpc_url: Optional[str] = None,
    factory_address: Optional[str] = None,
) -> NetworkConfig:
    """Return the configuration for ``name`` with optional overrides applied.

    Raises:
        ValueError: If ``name`` is not a known network or the factory address
            override is not a valid hex address.
    """

    try:
        config = NETWORK_CONFIGS[name.strip().lower()]
    except KeyError:
        supported = ", ".join(sorted(NETWORK_CONFIGS))
        raise ValueError(f"Unsupported network {name!r} (expected one of: {supported})") from None

    if rpc_url:
        config = replace(config, rpc_url=rpc_url)
    if factory_address:
        if not is_hex_address(factory_address):
            raise ValueError(f"Invalid factory address: {factory_address}")
        config = replace(config, factory_address=to_checksum_address(factory_address))
    return config


__all__ = [
    "BEVM_MAINNET",
    "BEVM_TESTNET",
    "DEFAULT_NETWORK",
    "NETWORK_CONFIGS",
    "NetworkConfig",
    "get_network",
]
