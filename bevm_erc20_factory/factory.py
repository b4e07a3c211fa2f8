"""Client for the Bitcoin-assets ERC20 factory contract.

The factory exposes a single state-changing entry point::

    create(string name, string symbol, uint8 decimals, address owner,
           string protocol, address admin)

Calling it deploys a fresh ERC20 token. The helpers below encode that call
from the contract ABI, sign a legacy EIP-155 transaction locally, submit it
over JSON-RPC and poll until the node reports a receipt. The address of the
new token is read back from the factory's creation event in the receipt.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TYPE_CHECKING

from eth_abi import encode
from eth_abi.exceptions import ABITypeError, EncodingError, ParseError, PredicateMappingError
from eth_utils import function_abi_to_4byte_selector, is_hex_address, to_checksum_address, to_hex
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception

if TYPE_CHECKING:  # pragma: no cover - typing only
    from eth_account.signers.local import LocalAccount
else:
    LocalAccount = Any  # type: ignore[assignment]

_LOGGER = logging.getLogger(__name__)

CREATE_FUNCTION = "create"
DEFAULT_ABI_PATH = Path("abis/BitcoinAssetsErc20Factory.json")
DEFAULT_GAS_LIMIT = 2_200_000
DEFAULT_RECEIPT_TIMEOUT = 60.0
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_LOG_INDEX = 2
UINT8_MAX = 255


class FactoryError(RuntimeError):
    """Raised when the factory call cannot be completed."""


class ReceiptTimeout(FactoryError):
    """Raised when no receipt shows up before the polling deadline."""


class TransactionReverted(FactoryError):
    """Raised when the ``create`` transaction was mined but failed."""


@dataclass(frozen=True)
class TokenParams:
    """Arguments forwarded to the factory ``create`` function."""

    name: str
    symbol: str
    protocol: str
    decimals: int
    owner: str
    admin: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Token name must not be empty")
        if not self.symbol:
            raise ValueError("Token symbol must not be empty")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ValueError(f"Decimals must be an integer, got {self.decimals!r}")
        if not 0 <= self.decimals <= UINT8_MAX:
            raise ValueError(f"Decimals must fit in uint8 (0-{UINT8_MAX}), got {self.decimals}")
        for field_name in ("owner", "admin"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not is_hex_address(value):
                raise ValueError(f"Invalid {field_name} address: {value!r}")
            object.__setattr__(self, field_name, to_checksum_address(value))

    def as_call_args(self) -> List[Any]:
        """Return the positional arguments in the order ``create`` expects."""

        return [self.name, self.symbol, self.decimals, self.owner, self.protocol, self.admin]


@dataclass(frozen=True)
class CreateResult:
    """Outcome of a successful ``create`` call."""

    tx_hash: str
    token_address: str
    sender: str
    nonce: int
    chain_id: int
    gas_limit: int
    gas_price: int
    block_number: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        """Serialise the result to a JSON-friendly dictionary."""

        return asdict(self)


def load_abi(path: Path | str) -> List[Dict[str, Any]]:
    """Read a contract ABI from ``path``.

    Both a bare ABI list and a compiler artifact carrying an ``abi`` key are
    accepted.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not valid JSON or has no ABI list.
    """

    abi_path = Path(path)
    if not abi_path.is_file():
        raise FileNotFoundError(f"Contract ABI not found: {abi_path}")

    try:
        payload = json.loads(abi_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse contract ABI {abi_path}: {exc}") from exc

    if isinstance(payload, Mapping):
        payload = payload.get("abi")
    if not isinstance(payload, list) or not all(isinstance(entry, Mapping) for entry in payload):
        raise ValueError(f"Contract ABI {abi_path} is not a JSON list of ABI entries")
    return [dict(entry) for entry in payload]


def find_function(abi: Sequence[Mapping[str, Any]], name: str) -> Mapping[str, Any]:
    """Return the ABI entry of function ``name``."""

    for entry in abi:
        if entry.get("type", "function") == "function" and entry.get("name") == name:
            return entry
    raise ValueError(f"Function {name!r} not found in contract ABI")


def encode_create_call(abi: Sequence[Mapping[str, Any]], params: TokenParams) -> bytes:
    """Build the calldata for ``create`` (selector followed by encoded arguments)."""

    fn_abi = find_function(abi, CREATE_FUNCTION)
    try:
        types = [str(item["type"]) for item in fn_abi.get("inputs", [])]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"ABI for {CREATE_FUNCTION!r} has an input without a type") from exc
    args = params.as_call_args()
    if len(types) != len(args):
        raise ValueError(
            f"ABI for {CREATE_FUNCTION!r} takes {len(types)} arguments, expected {len(args)}"
        )
    try:
        encoded = encode(types, args)
    except (EncodingError, ABITypeError, ParseError, PredicateMappingError) as exc:
        raise ValueError(f"Cannot encode {CREATE_FUNCTION!r} arguments as ({','.join(types)}): {exc}") from exc
    return function_abi_to_4byte_selector(fn_abi) + encoded


def extract_token_address(receipt: Mapping[str, Any], log_index: int = DEFAULT_LOG_INDEX) -> str:
    """Return the new token address recorded in ``receipt``.

    The factory emits its creation event as the ``log_index``-th log of the
    transaction; the token address occupies the last 20 bytes of its data.
    """

    logs = receipt.get("logs") or []
    if log_index < 0 or len(logs) <= log_index:
        raise FactoryError(
            f"Receipt has {len(logs)} logs, cannot read token address from log {log_index}"
        )

    data = HexBytes(logs[log_index].get("data") or b"")
    if len(data) < 20:
        raise FactoryError(f"Log {log_index} data is too short to hold an address")
    return to_checksum_address("0x" + bytes(data[-20:]).hex())


class ERC20Factory:
    """Thin wrapper around a ``Web3`` client bound to one factory contract."""

    def __init__(
        self,
        w3: Any,
        abi: Sequence[Mapping[str, Any]],
        factory_address: str,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not is_hex_address(factory_address):
            raise ValueError(f"Invalid factory address: {factory_address!r}")
        self.w3 = w3
        self.abi = list(abi)
        find_function(self.abi, CREATE_FUNCTION)
        self.factory_address = to_checksum_address(factory_address)
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def connect(
        cls,
        rpc_url: str,
        abi_path: Path | str,
        factory_address: str,
        *,
        request_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> "ERC20Factory":
        """Connect to ``rpc_url`` over HTTP and bind the factory ABI."""

        abi = load_abi(abi_path)
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
        if not w3.is_connected():
            raise ConnectionError(f"Failed to connect to the Ethereum client at {rpc_url}")
        _LOGGER.debug("Connected to %s", rpc_url)
        return cls(w3, abi, factory_address)

    def estimate_gas(self, data: bytes, sender: str, gas_price: int) -> int:
        """Estimate gas for ``data``, falling back to :data:`DEFAULT_GAS_LIMIT`."""

        call = {
            "from": sender,
            "to": self.factory_address,
            "gasPrice": gas_price,
            "data": to_hex(data),
        }
        try:
            return int(self.w3.eth.estimate_gas(call))
        except (Web3Exception, ValueError) as exc:
            _LOGGER.warning(
                "Failed to estimate gas: %s, fallback to default gas limit %d", exc, DEFAULT_GAS_LIMIT
            )
            return DEFAULT_GAS_LIMIT

    def build_transaction(
        self,
        params: TokenParams,
        sender: str,
        *,
        gas_limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Assemble an unsigned legacy transaction calling ``create``."""

        nonce = self.w3.eth.get_transaction_count(sender, "pending")
        gas_price = self.w3.eth.gas_price
        chain_id = self.w3.eth.chain_id
        data = encode_create_call(self.abi, params)

        if gas_limit is None:
            gas_limit = self.estimate_gas(data, sender, gas_price)

        return {
            "chainId": chain_id,
            "nonce": nonce,
            "to": self.factory_address,
            "value": 0,
            "gas": gas_limit,
            "gasPrice": gas_price,
            "data": to_hex(data),
        }

    def send(self, tx: Mapping[str, Any], account: LocalAccount) -> HexBytes:
        """Sign ``tx`` with ``account`` and broadcast it."""

        signed = account.sign_transaction(dict(tx))
        tx_hash = HexBytes(self.w3.eth.send_raw_transaction(signed.raw_transaction))
        _LOGGER.info("Signed Tx Hash: %s", to_hex(tx_hash))
        return tx_hash

    def wait_for_receipt(
        self,
        tx_hash: bytes,
        *,
        timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> Mapping[str, Any]:
        """Poll the node until ``tx_hash`` has a receipt.

        Raises:
            ReceiptTimeout: If no receipt is available after ``timeout`` seconds.
        """

        deadline = self._clock() + timeout
        while True:
            try:
                return self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                _LOGGER.debug("Receipt for %s not found yet", to_hex(tx_hash))
            if self._clock() >= deadline:
                raise ReceiptTimeout(
                    f"Transaction receipt for {to_hex(tx_hash)} was not found within {timeout:g} seconds"
                )
            self._sleep(poll_interval)

    def create_erc20(
        self,
        params: TokenParams,
        account: LocalAccount,
        *,
        gas_limit: Optional[int] = None,
        timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        log_index: int = DEFAULT_LOG_INDEX,
    ) -> CreateResult:
        """Deploy a new token through the factory and return its address.

        Polling and log options are validated before anything is broadcast.
        """

        if gas_limit is not None and gas_limit <= 0:
            raise ValueError(f"Gas limit must be positive, got {gas_limit}")
        if timeout < 0:
            raise ValueError(f"Receipt timeout must be non-negative, got {timeout:g}")
        if poll_interval < 0:
            raise ValueError(f"Poll interval must be non-negative, got {poll_interval:g}")
        if log_index < 0:
            raise ValueError(f"Log index must be non-negative, got {log_index}")

        sender = account.address
        tx = self.build_transaction(params, sender, gas_limit=gas_limit)
        _LOGGER.info("User Address: %s, Nonce: %d, Chain ID: %s", sender, tx["nonce"], tx["chainId"])

        tx_hash = self.send(tx, account)
        receipt = self.wait_for_receipt(tx_hash, timeout=timeout, poll_interval=poll_interval)
        if receipt.get("status") == 0:
            raise TransactionReverted(f"Transaction {to_hex(tx_hash)} reverted")

        token_address = extract_token_address(receipt, log_index)
        return CreateResult(
            tx_hash=to_hex(tx_hash),
            token_address=token_address,
            sender=sender,
            nonce=tx["nonce"],
            chain_id=tx["chainId"],
            gas_limit=tx["gas"],
            gas_price=tx["gasPrice"],
            block_number=receipt.get("blockNumber"),
        )


__all__ = [
    "CREATE_FUNCTION",
    "CreateResult",
    "DEFAULT_ABI_PATH",
    "DEFAULT_GAS_LIMIT",
    "DEFAULT_LOG_INDEX",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_RECEIPT_TIMEOUT",
    "ERC20Factory",
    "FactoryError",
    "ReceiptTimeout",
    "TokenParams",
    "TransactionReverted",
    "encode_create_call",
    "extract_token_address",
    "find_function",
    "load_abi",
]
