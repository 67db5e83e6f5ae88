"""
Result of one contenthash update run.

UpdateState names the steps of the run; a run ends in NOOP_DONE (record
already current), TARGET_ENCODED (dry run) or CONFIRMED (transaction mined).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UpdateState(str, Enum):
    START = "start"
    NODE_COMPUTED = "node_computed"
    RESOLVER_LOCATED = "resolver_located"
    CURRENT_READ = "current_read"
    TARGET_ENCODED = "target_encoded"
    NOOP_DONE = "noop_done"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"


class UpdateResult(BaseModel):
    """What the run found and did."""

    ens_name: str
    node: str = Field(..., description="0x namehash of ens_name")
    state: UpdateState = UpdateState.START
    cid: str = Field(..., description="CID as configured")
    resolver: Optional[str] = None
    cid_used: Optional[str] = Field(None, description="CID actually encoded (CIDv0 after conversion)")
    previous: str = Field("0x", description="Contenthash read before the update; 0x when empty or unreadable")
    previous_cid: Optional[str] = Field(None, description="previous decoded as an IPFS CID, if it is one")
    encoded: Optional[str] = Field(None, description="Target contenthash, 0x hex")
    changed: bool = False
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None

    @property
    def done(self) -> bool:
        return self.state in (UpdateState.NOOP_DONE, UpdateState.CONFIRMED)
