from __future__ import annotations

import pytest

from bevm_erc20_factory.networks import (
    BEVM_MAINNET,
    BEVM_TESTNET,
    DEFAULT_NETWORK,
    get_network,
)


def test_default_network_is_testnet():
    assert DEFAULT_NETWORK == "testnet"
    assert get_network(DEFAULT_NETWORK) is BEVM_TESTNET


def test_get_network_is_case_insensitive():
    assert get_network(" MainNet ") is BEVM_MAINNET


def test_get_network_applies_overrides_without_mutating_defaults():
    config = get_network(
        "mainnet",
        rpc_url="http://localhost:8545",
        factory_address="0x1111111111111111111111111111111111111111",
    )

    assert config.rpc_url == "http://localhost:8545"
    assert config.factory_address == "0x1111111111111111111111111111111111111111"
    assert BEVM_MAINNET.rpc_url == "https://mainnet.chainx.org/rpc"


def test_get_network_normalises_factory_override_to_checksum():
    config = get_network("testnet", factory_address="0x5fbdb2315678afecb367f032d93f642f64180aa3")
    assert config.factory_address == "0x5FbDB2315678afecb367f032d93F642f64180aa3"


def test_get_network_rejects_unknown_names():
    with pytest.raises(ValueError, match="mainnet, testnet"):
        get_network("sepolia")


def test_get_network_rejects_invalid_factory_override():
    with pytest.raises(ValueError):
        get_network("testnet", factory_address="0x1234")
