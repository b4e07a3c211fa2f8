"""Loading the signing key used to call the factory."""
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Mapping, TYPE_CHECKING

from dotenv import load_dotenv
from eth_account import Account

if TYPE_CHECKING:  # pragma: no cover - typing only
    from eth_account.signers.local import LocalAccount
else:
    LocalAccount = Any  # type: ignore[assignment]

PRIVATE_KEY_ENV = "PRIVATE_KEY"

_PRIVATE_KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def load_env_file(path: Path | str = ".env") -> bool:
    """Merge ``path`` into ``os.environ`` without overriding existing variables.

    Returns ``False`` when the file does not exist.
    """

    env_path = Path(path)
    if not env_path.is_file():
        return False
    return load_dotenv(env_path, override=False)


def load_signer(env: Mapping[str, str] | None = None) -> LocalAccount:
    """Return the account whose key signs the ``create`` transaction.

    Parameters
    ----------
    env:
        Optional mapping used to resolve ``PRIVATE_KEY``. When omitted
        ``os.environ`` is used; call :func:`load_env_file` first to pick up a
        ``.env`` file (the CLI does this once at startup).

    Raises
    ------
    RuntimeError
        If no private key is configured.
    ValueError
        If the configured value is not a 32-byte hex string.
    """

    if env is None:
        env = os.environ

    private_key = (env.get(PRIVATE_KEY_ENV) or "").strip()
    if not private_key:
        raise RuntimeError(f"{PRIVATE_KEY_ENV} environment variable not set")

    if private_key[:2].lower() == "0x":
        private_key = private_key[2:]
    if not _PRIVATE_KEY_PATTERN.match(private_key):
        raise ValueError(f"Failed to convert private key: {PRIVATE_KEY_ENV} must be 32 bytes of hex")

    return Account.from_key("0x" + private_key)


__all__ = ["PRIVATE_KEY_ENV", "load_env_file", "load_signer"]
