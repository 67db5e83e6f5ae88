"""Test data and a fake EnsClient that never touches the network."""

# IPFS docs example CIDv1 (dag-pb, sha2-256) and its CIDv0 form
CID_V0 = "QmbWqxBEKC3P8tqsKc98xmWNzrzDtRLMiMPL8wBuTGsMnR"
CID_V1 = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"
OTHER_CID_V0 = "QmRAQB6YaCyidP37UdDnjFY5vQuiBrcqdyoW1CuDgwxkD4"

# eth-account docs key; never funded
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

RESOLVER = "0x231b0Ee14048e9dCcD1d247744d114a4EB5E8E63"
ZERO = "0x0000000000000000000000000000000000000000"
TX_HASH = "0x" + "ab" * 32


class RateLimited(Exception):
    """Stands in for a provider error carrying a 429 response."""

    class _Response:
        status_code = 429
        text = "Too Many Requests"

    def __init__(self):
        super().__init__("429 Client Error: Too Many Requests")
        self.response = self._Response()


class FakeEnsClient:
    """Records every call; behaviour is set per test."""

    def __init__(
        self,
        resolver=RESOLVER,
        current=b"",
        read_error=None,
        set_errors=(),
        receipt=None,
    ):
        self._resolver = resolver
        self._current = current
        self._read_error = read_error
        self._set_errors = list(set_errors)
        self._receipt = receipt if receipt is not None else {"status": 1, "blockNumber": 1234}
        self.calls = []

    def resolver(self, node):
        self.calls.append(("resolver", node))
        return self._resolver

    def contenthash(self, resolver, node):
        self.calls.append(("contenthash", resolver, node))
        if self._read_error is not None:
            raise self._read_error
        return self._current

    def set_contenthash(self, resolver, node, data):
        self.calls.append(("set_contenthash", resolver, node, data))
        if self._set_errors:
            raise self._set_errors.pop(0)
        return TX_HASH

    def wait_for_receipt(self, tx_hash, timeout):
        self.calls.append(("wait_for_receipt", tx_hash, timeout))
        return self._receipt

    def called(self, method):
        return [c for c in self.calls if c[0] == method]
