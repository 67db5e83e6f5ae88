"""
Run configuration, captured once from the environment.

Required: ENS_NAME, IPFS_CID, ETHEREUM_RPC_URL (or ETHEREUM_RPC_URLS), ENS_PRIVATE_KEY.
Optional: ETHEREUM_RPC_URLS (comma-separated, overrides ETHEREUM_RPC_URL),
ENS_REGISTRY_ADDRESS, ENS_RECEIPT_TIMEOUT (seconds), ENS_RPC_MAX_ATTEMPTS.

Everything is validated here so a bad key or a missing variable fails
before any network call.
"""

import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from web3 import Web3

from enspublish.ens import ENS_REGISTRY
from enspublish.errors import ConfigError
from enspublish.namehash import normalize_name
from enspublish.retry import DEFAULT_MAX_ATTEMPTS
from enspublish.rpc import parse_rpc_urls
from enspublish.wallet import ENV_PRIVATE_KEY, normalize_private_key

ENV_ENS_NAME = "ENS_NAME"
ENV_IPFS_CID = "IPFS_CID"
ENV_RPC_URL = "ETHEREUM_RPC_URL"
ENV_RPC_URLS = "ETHEREUM_RPC_URLS"
ENV_REGISTRY = "ENS_REGISTRY_ADDRESS"
ENV_RECEIPT_TIMEOUT = "ENS_RECEIPT_TIMEOUT"
ENV_MAX_ATTEMPTS = "ENS_RPC_MAX_ATTEMPTS"

DEFAULT_RECEIPT_TIMEOUT = 600


class UpdateConfig(BaseModel):
    """Everything one contenthash update needs."""

    ens_name: str = Field(..., description="Dotted ENS name, e.g. site.eth (lowercased)")
    ipfs_cid: str = Field(..., description="IPFS CID to publish (CIDv0, or CIDv1 dag-pb/sha2-256)")
    rpc_urls: List[str] = Field(..., min_length=1, description="JSON-RPC endpoints, tried in order")
    private_key: str = Field(..., repr=False, description="0x-prefixed 32-byte hex signing key")
    registry_address: str = Field(ENS_REGISTRY, description="ENS registry contract")
    receipt_timeout: float = Field(DEFAULT_RECEIPT_TIMEOUT, gt=0, description="Seconds to wait for the receipt")
    max_attempts: int = Field(DEFAULT_MAX_ATTEMPTS, ge=1, description="Attempts per RPC call on rate limiting")

    @field_validator("ens_name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        name = normalize_name(v)
        if not name:
            raise ValueError("ENS name must not be empty")
        return name

    @field_validator("ipfs_cid")
    @classmethod
    def _check_cid(cls, v: str) -> str:
        cid = v.strip()
        if not cid:
            raise ValueError("IPFS CID must not be empty")
        return cid

    @field_validator("private_key")
    @classmethod
    def _check_key(cls, v: str) -> str:
        try:
            return normalize_private_key(v)
        except ConfigError as e:
            raise ValueError(str(e)) from None

    @field_validator("registry_address")
    @classmethod
    def _check_registry(cls, v: str) -> str:
        if not Web3.is_address(v.strip()):
            raise ValueError(f"not an address: {v!r}")
        return Web3.to_checksum_address(v.strip())


def _format_errors(err: ValidationError) -> str:
    # no input values: one of them is the private key
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in err.errors()
    )


def build_config(**values) -> UpdateConfig:
    """UpdateConfig(**values), raising ConfigError instead of pydantic's ValidationError."""
    try:
        return UpdateConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {_format_errors(e)}") from None


def required_env(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value or not value.strip():
        raise ConfigError(f"Missing required env: {name}")
    return value


def load_config(env: Optional[Mapping[str, str]] = None) -> UpdateConfig:
    """Read the run configuration from env (default: os.environ)."""
    env = os.environ if env is None else env
    ens_name = required_env(env, ENV_ENS_NAME)
    ipfs_cid = required_env(env, ENV_IPFS_CID)
    rpc_urls = parse_rpc_urls(env.get(ENV_RPC_URLS))
    if not rpc_urls:
        rpc_urls = parse_rpc_urls(required_env(env, ENV_RPC_URL))
    private_key = required_env(env, ENV_PRIVATE_KEY)

    values = {
        "ens_name": ens_name,
        "ipfs_cid": ipfs_cid,
        "rpc_urls": rpc_urls,
        "private_key": private_key,
    }
    optional = {
        "registry_address": ENV_REGISTRY,
        "receipt_timeout": ENV_RECEIPT_TIMEOUT,
        "max_attempts": ENV_MAX_ATTEMPTS,
    }
    for field, var in optional.items():
        raw = (env.get(var) or "").strip()
        if raw:
            values[field] = raw
    return build_config(**values)
