"""
Web3 connection over one RPC URL, or several with fallback.

With ETHEREUM_RPC_URLS set, every JSON-RPC request goes to the first endpoint
and falls through to the next one when it errors or is rate limited. When all
of them fail the caller sees a rate-limit answer if any endpoint gave one,
else the last exception, so the retry layer can still classify it.
"""

from typing import Any, List, Optional, Sequence

import structlog
from web3 import Web3
from web3.providers import BaseProvider, HTTPProvider
from web3.types import RPCEndpoint, RPCResponse

from enspublish.errors import ConfigError, RpcError
from enspublish.retry import is_transient

log = structlog.get_logger(__name__)

# 30s allows slow public RPCs
RPC_TIMEOUT = 30


def parse_rpc_urls(urls: Optional[str], fallback: Optional[str] = None) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']; uses fallback when urls is empty."""
    raw = urls or fallback or ""
    return [u.strip() for u in raw.split(",") if u.strip()]


def _rate_limited(response: RPCResponse) -> bool:
    error = response.get("error")
    if not error:
        return False
    message = error.get("message", "") if isinstance(error, dict) else str(error)
    return is_transient(Exception(message))


def http_provider(uri: str, request_timeout: int = RPC_TIMEOUT) -> HTTPProvider:
    """HTTPProvider with web3's own exception retries turned off; enspublish.retry does the retrying."""
    return HTTPProvider(
        uri,
        request_kwargs={"timeout": request_timeout},
        exception_retry_configuration=None,
    )


class FallbackProvider(BaseProvider):
    """Try each backing HTTPProvider in order until one answers."""

    def __init__(self, endpoint_uris: Sequence[str], request_timeout: int = RPC_TIMEOUT):
        super().__init__()
        if not endpoint_uris:
            raise ConfigError("FallbackProvider needs at least one RPC URL")
        self.endpoint_uris = list(endpoint_uris)
        self.providers = [
            http_provider(uri, request_timeout) for uri in self.endpoint_uris
        ]

    def __str__(self) -> str:
        return f"FallbackProvider({', '.join(self.endpoint_uris)})"

    def make_request(self, method: RPCEndpoint, params: Any) -> RPCResponse:
        last_err: Optional[Exception] = None
        last_response: Optional[RPCResponse] = None
        for uri, provider in zip(self.endpoint_uris, self.providers):
            try:
                response = provider.make_request(method, params)
            except Exception as e:
                log.debug("rpc_endpoint_failed", endpoint=uri, method=method, error=str(e))
                last_err = e
                continue
            if _rate_limited(response):
                log.debug("rpc_endpoint_rate_limited", endpoint=uri, method=method)
                last_response = response
                continue
            return response
        # a rate limit anywhere outranks a later connection failure
        if last_response is not None:
            return last_response
        raise last_err

    def is_connected(self, show_traceback: bool = False) -> bool:
        return any(p.is_connected(show_traceback=show_traceback) for p in self.providers)


def make_provider(rpc_urls: Sequence[str], request_timeout: int = RPC_TIMEOUT) -> BaseProvider:
    if not rpc_urls:
        raise ConfigError("At least one RPC URL is required (ETHEREUM_RPC_URL or ETHEREUM_RPC_URLS)")
    if len(rpc_urls) == 1:
        return http_provider(rpc_urls[0], request_timeout)
    return FallbackProvider(rpc_urls, request_timeout=request_timeout)


def connect(rpc_urls: Sequence[str], request_timeout: int = RPC_TIMEOUT) -> Web3:
    """Web3 over rpc_urls; raises RpcError when no endpoint answers."""
    w3 = Web3(make_provider(rpc_urls, request_timeout=request_timeout))
    if not w3.is_connected():
        raise RpcError(f"Could not connect to any RPC: {list(rpc_urls)}", label="connect")
    return w3
