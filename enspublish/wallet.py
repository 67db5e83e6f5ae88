"""
Signing identity for the contenthash update: a local keypair from ENS_PRIVATE_KEY.

The key is only ever taken from the environment (or .env); it is never read
from or written to a key file, and never logged.
"""

import re

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes

from enspublish.errors import ConfigError

ENV_PRIVATE_KEY = "ENS_PRIVATE_KEY"

_PRIVATE_KEY_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_private_key(private_key: str) -> str:
    """
    '  abcd...ef ' -> '0xabcd...ef'. Raises ConfigError unless the result is
    0x followed by exactly 64 hex characters.
    """
    value = (private_key or "").strip()
    prefixed = value if value.startswith("0x") else f"0x{value}"
    if not _PRIVATE_KEY_RE.match(prefixed):
        raise ConfigError(
            f"{ENV_PRIVATE_KEY} must be a 0x-prefixed 64-hex-character string (no quotes or whitespace)."
        )
    return prefixed


class PublisherWallet:
    """Wallet that signs the setContenthash transaction. Must be the name's manager on the resolver."""

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "PublisherWallet":
        return cls(Account.from_key(normalize_private_key(private_key)))

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def account(self) -> LocalAccount:
        return self._account

    def sign_transaction(self, tx: dict) -> HexBytes:
        """Sign a built transaction dict; returns the raw transaction for send_raw_transaction."""
        signed = self._account.sign_transaction(tx)
        return signed.raw_transaction

    def __repr__(self) -> str:
        return f"PublisherWallet({self.address})"
