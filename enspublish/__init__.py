"""
enspublish: point an ENS name at an IPFS CID.

Sets the EIP-1577 contenthash record on the name's resolver:
- EIP-137 namehash of the name
- resolver lookup in the ENS registry
- CIDv1 -> CIDv0 normalization and ipfs-ns encoding
- no transaction when the record is already current
- retry with backoff when the RPC rate limits

One private key, one name, one run. Configure with ENS_NAME, IPFS_CID,
ETHEREUM_RPC_URL (or ETHEREUM_RPC_URLS) and ENS_PRIVATE_KEY, then run `enspublish`.
"""

__version__ = "0.1.0"

from enspublish.errors import (
    ConfigError,
    ContenthashError,
    NoResolverError,
    RpcError,
    TransientRpcError,
    UnsupportedCidError,
)
from enspublish.namehash import labelhash, namehash
from enspublish.contenthash import decode as decode_contenthash
from enspublish.contenthash import encode as encode_contenthash
from enspublish.retry import call_with_retry
from enspublish.wallet import PublisherWallet
from enspublish.ens import EnsClient, locate_resolver
from enspublish.config import UpdateConfig, load_config
from enspublish.schema import UpdateResult, UpdateState
from enspublish.updater import update_contenthash

__all__ = [
    "__version__",
    "ConfigError",
    "ContenthashError",
    "NoResolverError",
    "RpcError",
    "TransientRpcError",
    "UnsupportedCidError",
    "namehash",
    "labelhash",
    "encode_contenthash",
    "decode_contenthash",
    "call_with_retry",
    "PublisherWallet",
    "EnsClient",
    "locate_resolver",
    "UpdateConfig",
    "load_config",
    "UpdateResult",
    "UpdateState",
    "update_contenthash",
]
