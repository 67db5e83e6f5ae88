"""
ENS registry/resolver access for the contenthash update.

EnsClient is the only place that talks to contracts: one registry read
(resolver), one resolver read (contenthash), one resolver write
(setContenthash) and the receipt wait. Everything above it works with a
client object, so tests swap in a fake one.

ENS docs: https://docs.ens.domains/ (deployments, resolver interfaces).
"""

import time
from typing import Any, Callable, Optional, Sequence

import structlog
from web3 import Web3
from web3.types import TxReceipt

from enspublish.errors import ConfigError, ContenthashError, NoResolverError
from enspublish.retry import DEFAULT_MAX_ATTEMPTS, as_rpc_error, call_with_retry
from enspublish.rpc import connect
from enspublish.wallet import PublisherWallet

log = structlog.get_logger(__name__)

# Registry is the same address on mainnet and Sepolia; chain is determined by RPC.
ENS_REGISTRY = "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

REGISTRY_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "node", "type": "bytes32"}],
        "name": "resolver",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]

RESOLVER_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "node", "type": "bytes32"}],
        "name": "contenthash",
        "outputs": [{"name": "", "type": "bytes"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "node", "type": "bytes32"},
            {"name": "hash", "type": "bytes"},
        ],
        "name": "setContenthash",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


def is_zero_address(address: Optional[str]) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


class EnsClient:
    """Registry and resolver calls over a Web3 connection, signing with an optional wallet."""

    def __init__(
        self,
        w3: Web3,
        wallet: Optional[PublisherWallet] = None,
        registry_address: str = ENS_REGISTRY,
    ):
        self.w3 = w3
        self.wallet = wallet
        self.registry = w3.eth.contract(
            address=Web3.to_checksum_address(registry_address),
            abi=REGISTRY_ABI,
        )

    @classmethod
    def from_rpc_urls(
        cls,
        rpc_urls: Sequence[str],
        private_key: Optional[str] = None,
        registry_address: str = ENS_REGISTRY,
    ) -> "EnsClient":
        wallet = PublisherWallet.from_key(private_key) if private_key else None
        return cls(connect(rpc_urls), wallet=wallet, registry_address=registry_address)

    def _resolver_contract(self, resolver_address: str):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(resolver_address),
            abi=RESOLVER_ABI,
        )

    def resolver(self, node: bytes) -> str:
        return self.registry.functions.resolver(node).call()

    def contenthash(self, resolver_address: str, node: bytes) -> bytes:
        return bytes(self._resolver_contract(resolver_address).functions.contenthash(node).call())

    def set_contenthash(self, resolver_address: str, node: bytes, data: bytes) -> str:
        """Build, sign and broadcast setContenthash(node, data). Returns the 0x tx hash."""
        if self.wallet is None:
            raise ConfigError("A signing key (ENS_PRIVATE_KEY) is required to set the contenthash")
        tx = self._resolver_contract(resolver_address).functions.setContenthash(node, data).build_transaction(
            {
                "from": self.wallet.address,
                "chainId": self.w3.eth.chain_id,
                "nonce": self.w3.eth.get_transaction_count(self.wallet.address, "pending"),
            }
        )
        tx_hash = self.w3.eth.send_raw_transaction(self.wallet.sign_transaction(tx))
        return Web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)


def locate_resolver(
    client: Any,
    node: bytes,
    name: str = "",
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], Any] = time.sleep,
) -> str:
    """
    Resolver address bound to node in the registry.

    Raises NoResolverError for the zero address, RpcError when the read fails.
    """
    label = "registry.resolver"
    try:
        address = call_with_retry(lambda: client.resolver(node), label, max_attempts=max_attempts, sleep=sleep)
    except ContenthashError:
        raise
    except Exception as e:
        raise as_rpc_error(e, label) from e
    if is_zero_address(address):
        raise NoResolverError(name, Web3.to_hex(node))
    log.info("resolver_located", name=name, resolver=address)
    return address
