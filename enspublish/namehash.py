"""
EIP-137 name hashing: https://github.com/ethereum/EIPs/blob/master/EIPS/eip-137.md

Labels are only lowercased, no UTS-46 normalization.
"""

from eth_utils import keccak, to_bytes

ZERO_NODE = b"\x00" * 32


def normalize_name(name: str) -> str:
    """'  Site.ETH ' -> 'site.eth'."""
    return (name or "").strip().lower()


def labelhash(label: str) -> bytes:
    """keccak256 of a single label (also the .eth registrar token id, big-endian)."""
    return keccak(to_bytes(text=label))


def namehash(name: str) -> bytes:
    """
    ENS namehash: fold labels right to left, node = keccak(node + keccak(label)).

    'Example.eth' and 'example.eth' hash the same; '' is the zero node.
    """
    node = ZERO_NODE
    if not name:
        return node
    for label in reversed(name.lower().split(".")):
        node = keccak(node + labelhash(label))
    return node
