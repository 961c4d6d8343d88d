"""Cached copies of work delivered to mining clients."""

from __future__ import annotations

import time
from dataclasses import dataclass

_UINT32_MAX = 2**32 - 1
_UINT64_MASK = 2**64 - 1


def height_to_big_endian_bytes(height: int) -> bytes:
    """Encode a block height as four big-endian bytes."""
    if not 0 <= height <= _UINT32_MAX:
        raise ValueError(f"height {height} does not fit in 32 bits")
    return height.to_bytes(4, "big")


def nano_to_big_endian_bytes(nano: int) -> bytes:
    """Encode a nanosecond timestamp as eight big-endian bytes."""
    return (nano & _UINT64_MASK).to_bytes(8, "big")


def job_id(height: int) -> str:
    """Return a unique job id for the given block height."""
    raw = height_to_big_endian_bytes(height) + nano_to_big_endian_bytes(
        time.time_ns())
    return raw.hex()


@dataclass
class Job:
    """Work delivered to clients at a given height."""

    uuid: str
    height: int
    header: str


def new_job(header: str, height: int) -> Job:
    """Create a job for the given header and height."""
    return Job(uuid=job_id(height), height=height, header=header)