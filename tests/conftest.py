"""Shared fixtures: a scripted stand-in for ``Web3`` and a throwaway signer."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from eth_account import Account
from eth_utils import keccak
from web3.exceptions import TransactionNotFound

from bevm_erc20_factory.factory import ERC20Factory, load_abi

REPO_ROOT = Path(__file__).resolve().parents[1]
ABI_PATH = REPO_ROOT / "abis" / "BitcoinAssetsErc20Factory.json"

# Well-known development key (Hardhat/Anvil account #0).
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

FACTORY_ADDRESS = "0xeB789d5f6f66104AE9876175A5B9A03bDa0545A8"
TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


def make_receipt(token_address: str = TOKEN_ADDRESS, *, status: int = 1, block_number: int = 42) -> Dict[str, Any]:
    token_word = "0x" + "00" * 12 + token_address[2:].lower()
    return {
        "status": status,
        "blockNumber": block_number,
        "logs": [
            {"data": "0x"},
            {"data": "0x" + "00" * 32},
            {"data": token_word},
        ],
    }


class FakeEth:
    """Records calls the factory makes and replays scripted node answers."""

    def __init__(
        self,
        *,
        chain_id: int = 11503,
        gas_price: int = 50_000_000,
        nonce: int = 7,
        estimate: Any = 180_000,
        receipts: Optional[List[Any]] = None,
    ) -> None:
        self.chain_id = chain_id
        self.gas_price = gas_price
        self.nonce = nonce
        self.estimate = estimate
        self.receipts = list(receipts or [])
        self.nonce_calls: List[tuple] = []
        self.estimate_calls: List[Dict[str, Any]] = []
        self.sent: List[bytes] = []
        self.receipt_calls = 0

    def get_transaction_count(self, address: str, block_identifier: str = "latest") -> int:
        self.nonce_calls.append((address, block_identifier))
        return self.nonce

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        self.estimate_calls.append(transaction)
        if isinstance(self.estimate, Exception):
            raise self.estimate
        return self.estimate

    def send_raw_transaction(self, raw: bytes) -> bytes:
        self.sent.append(bytes(raw))
        return keccak(bytes(raw))

    def get_transaction_receipt(self, tx_hash: bytes) -> Any:
        self.receipt_calls += 1
        answer = self.receipts.pop(0) if self.receipts else None
        if answer is None:
            raise TransactionNotFound(f"Transaction with hash {tx_hash!r} not found")
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeWeb3:
    def __init__(self, eth: FakeEth) -> None:
        self.eth = eth


class FakeClock:
    """Monotonic clock that only advances when ``sleep`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def factory_abi() -> List[Dict[str, Any]]:
    return load_abi(ABI_PATH)


@pytest.fixture
def signer():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def fake_eth() -> FakeEth:
    return FakeEth(receipts=[make_receipt()])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def factory(factory_abi, fake_eth: FakeEth, clock: FakeClock) -> ERC20Factory:
    return ERC20Factory(
        FakeWeb3(fake_eth),
        factory_abi,
        FACTORY_ADDRESS,
        sleep=clock.sleep,
        clock=clock,
    )
