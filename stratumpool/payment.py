"""Payments due to pool accounts and collected pool fees."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass

from stratumpool.job import height_to_big_endian_bytes, nano_to_big_endian_bytes

_UINT64_MAX = 2**64 - 1

_uuid_prng = random.Random(time.time_ns())


@dataclass
class PaymentSource:
    """The block and coinbase funding a payment."""

    block_hash: str
    coinbase: str


@dataclass
class Payment:
    """Value paid to a pool account, amounts in atoms."""

    uuid: str
    account: str
    estimated_maturity: int
    height: int
    amount: int
    created_on: int
    source: PaymentSource | None
    paid_on_height: int = 0
    transaction_id: str = ""


def payment_id(height: int, created_on_nano: int, account: str,
               rand_val: int) -> str:
    """Return a unique payment id from payment details and a random value."""
    if not 0 <= rand_val <= _UINT64_MAX:
        raise ValueError(f"random value {rand_val} does not fit in 64 bits")
    return (height_to_big_endian_bytes(height).hex()
            + nano_to_big_endian_bytes(created_on_nano).hex()
            + account
            + rand_val.to_bytes(8, "big").hex())


def new_payment(account: str, source: PaymentSource | None, amount: int,
                height: int, est_maturity: int) -> Payment:
    """Create a payment created now."""
    now = time.time_ns()
    return Payment(
        uuid=payment_id(height, now, account, _uuid_prng.getrandbits(64)),
        account=account,
        estimated_maturity=est_maturity,
        height=height,
        amount=amount,
        created_on=now,
        source=source,
    )