"""
EIP-1577 contenthash records for IPFS.

An ipfs-ns record is varint(0xe3) followed by the binary CIDv1 of the content
(0x01, varint(codec), multihash). Resolver UIs and gateways expect dag-pb with
sha2-256, i.e. something that also has a CIDv0 (Qm...) form, so CIDv1 input is
normalized to CIDv0 first and anything without a CIDv0 form is rejected.

EIP: https://eips.ethereum.org/EIPS/eip-1577
"""

from typing import Optional, Union

import structlog
from multiformats import CID, varint

from enspublish.errors import UnsupportedCidError

log = structlog.get_logger(__name__)

# multicodec table: ipfs (namespace) and dag-pb
IPFS_NS_CODE = 0xE3
DAG_PB_CODE = 0x70
IPFS_NS_PREFIX = varint.encode(IPFS_NS_CODE)

_CIDV0_CODEC = "dag-pb"
_CIDV0_HASHFUN = "sha2-256"


def _parse(cid: str) -> Optional[CID]:
    try:
        return CID.decode(cid)
    except (KeyError, ValueError):
        return None


def _to_v0(parsed: CID) -> CID:
    codec, hashfun = parsed.codec.name, parsed.hashfun.name
    if codec != _CIDV0_CODEC or hashfun != _CIDV0_HASHFUN:
        raise UnsupportedCidError(
            f"Provided CID is CIDv1 ({codec}, {hashfun}) and cannot be converted to CIDv0. "
            "Ensure the CID is dag-pb with sha2-256, or provide a CIDv0 (Qm...)."
        )
    try:
        return parsed.set(base="base58btc", version=0)
    except ValueError as e:
        raise UnsupportedCidError(f"Provided CID cannot be converted to CIDv0: {e}") from e


def normalize_cid(cid: str) -> str:
    """
    Return the CID string that will actually be encoded.

    CIDv0 passes through, CIDv1 dag-pb/sha2-256 becomes its CIDv0 form, other
    CIDv1 raise UnsupportedCidError. Unparseable input is returned unchanged so
    the ipfs-ns encoder reports it.
    """
    text = (cid or "").strip()
    if not text:
        return text
    parsed = _parse(text)
    if parsed is None or parsed.version == 0:
        return text
    return str(_to_v0(parsed))


def _encode_ipfs_ns(cid: str) -> bytes:
    if not cid:
        raise UnsupportedCidError("IPFS CID is empty")
    try:
        parsed = CID.decode(cid)
    except (KeyError, ValueError) as e:
        raise UnsupportedCidError(f"Invalid IPFS CID {cid!r}: {e}") from e
    if parsed.codec.code != DAG_PB_CODE:
        raise UnsupportedCidError(f"ipfs-ns contenthash requires dag-pb content, got {parsed.codec.name}")
    return IPFS_NS_PREFIX + b"\x01" + varint.encode(parsed.codec.code) + bytes(parsed.digest)


def encode(cid: str) -> bytes:
    """CID string -> EIP-1577 ipfs-ns contenthash bytes."""
    original = (cid or "").strip()
    cid_for_ens = normalize_cid(original)
    if cid_for_ens != original:
        log.info("cid_converted", original=original, cidv0=cid_for_ens)
    else:
        log.debug("cid_used", cid=cid_for_ens)
    return _encode_ipfs_ns(cid_for_ens)


def decode(record: Union[bytes, str, None]) -> Optional[str]:
    """
    ipfs-ns contenthash -> CIDv0 string (CIDv1 when it has no v0 form).

    Returns None for an empty record or one in another namespace (ipns, swarm, ...).
    """
    data = to_bytes(record)
    if not data.startswith(IPFS_NS_PREFIX):
        return None
    try:
        parsed = CID.decode(data[len(IPFS_NS_PREFIX):])
    except (KeyError, ValueError):
        return None
    if parsed.codec.name == _CIDV0_CODEC and parsed.hashfun.name == _CIDV0_HASHFUN:
        return str(parsed.set(base="base58btc", version=0))
    return str(parsed)


def to_bytes(record: Union[bytes, str, None]) -> bytes:
    if not record:
        return b""
    if isinstance(record, str):
        return bytes.fromhex(record[2:] if record.startswith("0x") else record)
    return bytes(record)


def to_hex(record: Union[bytes, str, None]) -> str:
    """Record as 0x-prefixed hex; empty record is '0x'."""
    return "0x" + to_bytes(record).hex()


def same_record(a: Union[bytes, str, None], b: Union[bytes, str, None]) -> bool:
    """Case-insensitive comparison of two records over their hex form."""
    if isinstance(a, str) and isinstance(b, str):
        return a.lower() == b.lower()
    return to_hex(a).lower() == to_hex(b).lower()
