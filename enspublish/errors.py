"""
Errors raised while publishing a contenthash.

Everything here is fatal to a run except TransientRpcError, which the retry
layer absorbs until the attempt budget is spent.
"""


class ContenthashError(Exception):
    """Base class for every error this package raises on purpose."""


class ConfigError(ContenthashError):
    """Missing or malformed input (env var unset, bad private key, bad URL)."""


class NoResolverError(ContenthashError):
    """The ENS registry has no resolver bound to the name."""

    def __init__(self, name: str, node: str):
        self.name = name
        self.node = node
        super().__init__(
            f"No resolver set for {name}. Please set a resolver that supports contenthash."
        )


class UnsupportedCidError(ContenthashError):
    """The CID cannot be stored as an EIP-1577 ipfs-ns contenthash."""


class RpcError(ContenthashError):
    """Provider or contract call failed (revert, bad response, timeout)."""

    def __init__(self, message: str, label: str = ""):
        self.label = label
        super().__init__(message)


class TransientRpcError(RpcError):
    """Rate limit / overload reported by the provider; retried before it gets here."""
