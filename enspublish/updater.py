"""
Point an ENS name's contenthash at an IPFS CID.

Flow: namehash -> registry.resolver -> resolver.contenthash (current) ->
encode target -> compare -> setContenthash -> wait for receipt.

The run is idempotent against chain state: when the resolver already holds
the target record nothing is sent. A failing read of the current record is
treated as "no record" so a first publish is never blocked by it; this can
make an unreachable resolver look like an empty one, and the warning log is
the only trace of that.
"""

import time
from typing import Any, Callable, Optional

import structlog
from web3 import Web3

from enspublish.config import UpdateConfig
from enspublish.contenthash import decode, encode, normalize_cid, same_record, to_hex
from enspublish.ens import EnsClient, locate_resolver
from enspublish.errors import ContenthashError, RpcError
from enspublish.namehash import namehash
from enspublish.retry import DEFAULT_MAX_ATTEMPTS, as_rpc_error, call_with_retry
from enspublish.schema import UpdateResult, UpdateState

log = structlog.get_logger(__name__)


def read_current_contenthash(
    client: Any,
    resolver: str,
    node: bytes,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], Any] = time.sleep,
) -> bytes:
    """Current record, or b"" when it cannot be read."""
    try:
        current = call_with_retry(
            lambda: client.contenthash(resolver, node),
            "resolver.contenthash",
            max_attempts=max_attempts,
            sleep=sleep,
        )
    except Exception as e:
        log.warning("contenthash_read_failed", resolver=resolver, error=str(e))
        return b""
    return bytes(current or b"")


def submit_contenthash(
    client: Any,
    resolver: str,
    node: bytes,
    encoded: bytes,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], Any] = time.sleep,
) -> str:
    """Send setContenthash(node, encoded); returns the tx hash."""
    label = "resolver.setContenthash"
    try:
        return call_with_retry(
            lambda: client.set_contenthash(resolver, node, encoded),
            label,
            max_attempts=max_attempts,
            sleep=sleep,
        )
    except ContenthashError:
        raise
    except Exception as e:
        raise as_rpc_error(e, label) from e


def await_confirmation(client: Any, tx_hash: str, timeout: float) -> int:
    """Wait for the receipt; returns its block number. Reverts and timeouts raise RpcError."""
    label = "wait_for_transaction_receipt"
    try:
        receipt = client.wait_for_receipt(tx_hash, timeout)
    except Exception as e:
        raise as_rpc_error(e, label) from e
    block_number = receipt.get("blockNumber")
    if receipt.get("status") != 1:
        raise RpcError(f"Transaction {tx_hash} reverted (block {block_number})", label=label)
    if block_number is None:
        raise RpcError(f"Receipt for {tx_hash} has no block number", label=label)
    return int(block_number)


def update_contenthash(
    config: UpdateConfig,
    client: Optional[Any] = None,
    sleep: Callable[[float], Any] = time.sleep,
    dry_run: bool = False,
) -> UpdateResult:
    """
    Run the update described by config and return what happened.

    client defaults to an EnsClient over config.rpc_urls signing with
    config.private_key. With dry_run the run stops once the target record is
    encoded (state TARGET_ENCODED) and nothing is signed or sent.
    """
    if client is None:
        client = EnsClient.from_rpc_urls(
            config.rpc_urls,
            private_key=None if dry_run else config.private_key,
            registry_address=config.registry_address,
        )
    name = config.ens_name
    attempts = config.max_attempts

    node = namehash(name)
    result = UpdateResult(
        ens_name=name,
        node=Web3.to_hex(node),
        cid=config.ipfs_cid,
        state=UpdateState.NODE_COMPUTED,
    )

    resolver = locate_resolver(client, node, name=name, max_attempts=attempts, sleep=sleep)
    result.resolver = resolver
    result.state = UpdateState.RESOLVER_LOCATED

    current = read_current_contenthash(client, resolver, node, max_attempts=attempts, sleep=sleep)
    result.previous = to_hex(current)
    result.previous_cid = decode(current)
    result.state = UpdateState.CURRENT_READ
    log.info("contenthash_current", name=name, contenthash=result.previous, cid=result.previous_cid)

    result.cid_used = normalize_cid(config.ipfs_cid)
    encoded = encode(config.ipfs_cid)
    result.encoded = to_hex(encoded)
    result.state = UpdateState.TARGET_ENCODED

    if same_record(current, encoded):
        log.info("no-op", name=name, cid=config.ipfs_cid, message=f"{name} already points to {config.ipfs_cid}")
        result.state = UpdateState.NOOP_DONE
        return result

    result.changed = True
    log.info("updating_contenthash", name=name, cid=config.ipfs_cid, cid_used=result.cid_used)
    log.info("encoded_contenthash", hex_length=len(result.encoded), byte_length=len(encoded))
    if dry_run:
        log.info("dry_run", name=name, resolver=resolver, contenthash=result.encoded)
        return result

    result.tx_hash = submit_contenthash(client, resolver, node, encoded, max_attempts=attempts, sleep=sleep)
    result.state = UpdateState.SUBMITTED
    log.info("tx_submitted", tx_hash=result.tx_hash)

    result.block_number = await_confirmation(client, result.tx_hash, config.receipt_timeout)
    result.state = UpdateState.CONFIRMED
    log.info("tx_confirmed", tx_hash=result.tx_hash, block_number=result.block_number)
    return result
