"""Client identification and hashrate information for mining clients."""

from __future__ import annotations

import time
from dataclasses import dataclass
from fractions import Fraction


@dataclass
class HashData:
    """Identification and hashrate of one connected mining client."""

    uuid: str
    account_id: str
    miner: str
    ip: str
    hash_rate: Fraction
    updated_on: int


def hash_data_id(account_id: str, extra_nonce1: str) -> str:
    """Return the unique hash data id of a client."""
    return extra_nonce1 + account_id


def new_hash_data(miner: str, account_id: str, ip: str, extra_nonce1: str,
                  hash_rate: Fraction) -> HashData:
    """Create hash data stamped with the current time in nanoseconds."""
    return HashData(
        uuid=hash_data_id(account_id, extra_nonce1),
        account_id=account_id,
        miner=miner,
        ip=ip,
        hash_rate=hash_rate,
        updated_on=time.time_ns(),
    )