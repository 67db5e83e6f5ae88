"""
Retry RPC calls that failed because the provider is rate limiting or overloaded.

Public RPCs answer 429 (or 599 from some gateways) or a JSON-RPC error saying
"rate limit" when hammered. Those are retried with exponential backoff
(1s, 2s, 4s, 8s, 10s); anything else is raised on the first failure.
"""

import time
from typing import Any, Callable, Iterator, Optional, Tuple, TypeVar

import structlog

from enspublish.errors import ContenthashError, RpcError, TransientRpcError

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5
BASE_BACKOFF_MS = 1000
MAX_BACKOFF_MS = 10_000

RATE_LIMIT_TEXT = "rate limit"
TRANSIENT_STATUSES = ("429", "599")


def backoff_ms(attempt: int) -> int:
    """Delay before retry number attempt+1 (attempt counts from 0)."""
    return min(MAX_BACKOFF_MS, BASE_BACKOFF_MS * 2 ** attempt)


def _messages(err: BaseException) -> Iterator[str]:
    yield str(err)
    for arg in getattr(err, "args", ()):
        if isinstance(arg, dict):
            # web3 surfaces JSON-RPC errors as {"code": ..., "message": ...}
            yield str(arg.get("message") or "")
        elif isinstance(arg, str):
            yield arg
    rpc_response = getattr(err, "rpc_response", None)
    if isinstance(rpc_response, dict):
        yield str((rpc_response.get("error") or {}).get("message") or "")


def _response_info(err: BaseException) -> Tuple[str, str]:
    """(body, status) of the HTTP response requests attached to an HTTPError, if any."""
    response = getattr(err, "response", None)
    if response is None:
        return "", ""
    body = getattr(response, "text", "") or ""
    status = getattr(response, "status_code", None) or ""
    return str(body), str(status)


def is_transient(err: BaseException) -> bool:
    """True when the error looks like rate limiting or provider overload."""
    if isinstance(err, TransientRpcError):
        return True
    if isinstance(err, ContenthashError):
        return False
    if any(RATE_LIMIT_TEXT in msg.lower() for msg in _messages(err)):
        return True
    body, status = _response_info(err)
    if RATE_LIMIT_TEXT in body.lower():
        return True
    return any(code in status for code in TRANSIENT_STATUSES)


def as_rpc_error(err: BaseException, label: str) -> RpcError:
    """Wrap a raw provider failure from `label` in the package error taxonomy."""
    if isinstance(err, RpcError):
        return err
    cls = TransientRpcError if is_transient(err) else RpcError
    return cls(f"{label} failed: {err}", label=label)


def call_with_retry(
    operation: Callable[[], T],
    label: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """
    Run operation(), retrying transient failures up to max_attempts times.

    Non-transient errors propagate immediately; after max_attempts transient
    failures the last one is re-raised as is.
    """
    attempt = 0
    last_err: Optional[BaseException] = None
    while attempt < max_attempts:
        try:
            return operation()
        except Exception as e:
            last_err = e
            if not is_transient(e):
                raise
            delay = backoff_ms(attempt)
            log.warning(
                "rpc_rate_limited",
                label=label,
                backoff_ms=delay,
                attempt=attempt + 1,
                max_attempts=max_attempts,
            )
            sleep(delay / 1000)
            attempt += 1
    if last_err is None:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    raise last_err
