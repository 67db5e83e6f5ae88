import pytest

from enspublish.errors import ConfigError
from enspublish.wallet import PublisherWallet, normalize_private_key

from .fixtures import ADDRESS, PRIVATE_KEY


class TestNormalizePrivateKey:

    def test_adds_prefix_and_strips(self):
        assert normalize_private_key(f"  {PRIVATE_KEY[2:]}\n") == PRIVATE_KEY

    def test_keeps_prefixed_key(self):
        assert normalize_private_key(PRIVATE_KEY) == PRIVATE_KEY

    @pytest.mark.parametrize(
        "bad",
        ["", PRIVATE_KEY[:-1], PRIVATE_KEY + "00", f'"{PRIVATE_KEY}"', PRIVATE_KEY[:-1] + "g"],
    )
    def test_rejects(self, bad):
        with pytest.raises(ConfigError, match="64-hex-character"):
            normalize_private_key(bad)


class TestPublisherWallet:

    def test_address_from_key(self):
        assert PublisherWallet.from_key(PRIVATE_KEY).address == ADDRESS

    def test_repr_shows_address_only(self):
        wallet = PublisherWallet.from_key(PRIVATE_KEY)
        assert repr(wallet) == f"PublisherWallet({ADDRESS})"
        assert PRIVATE_KEY[2:] not in repr(wallet)

    def test_sign_transaction(self):
        wallet = PublisherWallet.from_key(PRIVATE_KEY)
        raw = wallet.sign_transaction(
            {
                "to": ADDRESS,
                "value": 0,
                "gas": 21000,
                "gasPrice": 1_000_000_000,
                "nonce": 0,
                "chainId": 1,
            }
        )
        assert isinstance(raw, bytes)
        assert len(raw) > 0
