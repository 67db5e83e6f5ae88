import pytest
import structlog

from enspublish.config import build_config
from enspublish.contenthash import encode

from .fixtures import CID_V1, PRIVATE_KEY


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def sleeps():
    """Backoff sleeps (seconds) recorded instead of slept."""
    return []


@pytest.fixture
def config():
    return build_config(
        ens_name="site.eth",
        ipfs_cid=CID_V1,
        rpc_urls=["http://localhost:8545"],
        private_key=PRIVATE_KEY,
    )


@pytest.fixture
def target_record():
    return encode(CID_V1)
