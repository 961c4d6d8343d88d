"""Block header assembly from stratum work notifications and submissions."""

from __future__ import annotations

import binascii
import struct
from dataclasses import dataclass

from stratumpool.message import ErrorKind, MessageError
from stratumpool.minerid import CPU, GOMINER

HEADER_SIZE = 180

_LAYOUT = struct.Struct("<i32s32s32sH6sHBBIIqIIII32sI")

_MIN_GEN_TX1_LEN = 288
_SOLVED_HEADER_MIN_LEN = 304

_FIXED_LENGTHS = {
    "prev_block": 32,
    "merkle_root": 32,
    "stake_root": 32,
    "final_state": 6,
    "extra_data": 32,
}


@dataclass
class BlockHeader:
    """A serialised block header of 180 little-endian bytes."""

    version: int
    prev_block: bytes
    merkle_root: bytes
    stake_root: bytes
    vote_bits: int
    final_state: bytes
    voters: int
    fresh_stake: int
    revocations: int
    pool_size: int
    bits: int
    sbits: int
    height: int
    size: int
    timestamp: int
    nonce: int
    extra_data: bytes
    stake_version: int

    def __post_init__(self) -> None:
        for name, length in _FIXED_LENGTHS.items():
            value = getattr(self, name)
            if len(value) != length:
                raise ValueError(f"{name} must be {length} bytes, "
                                 f"got {len(value)}")

    @classmethod
    def from_bytes(cls, data: bytes) -> "BlockHeader":
        """Decode a header from the first 180 bytes of data."""
        if len(data) < HEADER_SIZE:
            raise ValueError(f"block header needs {HEADER_SIZE} bytes, "
                             f"got {len(data)}")
        return cls(*_LAYOUT.unpack_from(data))

    def to_bytes(self) -> bytes:
        """Encode the header into its 180 byte form."""
        return _LAYOUT.pack(
            self.version, self.prev_block, self.merkle_root, self.stake_root,
            self.vote_bits, self.final_state, self.voters, self.fresh_stake,
            self.revocations, self.pool_size, self.bits, self.sbits,
            self.height, self.size, self.timestamp, self.nonce,
            self.extra_data, self.stake_version,
        )


def _unhex(text: str) -> bytes:
    return binascii.unhexlify(text)


def generate_block_header(block_version: str, prev_block: str, gen_tx1: str,
                          extra_nonce1: str) -> BlockHeader:
    """Build a header from mining.notify parts and a client's extranonce1."""
    func = "GenerateBlockHeader"
    if len(gen_tx1) < _MIN_GEN_TX1_LEN:
        raise MessageError(
            ErrorKind.DECODE,
            f"{func}: genTx1E field length of {len(gen_tx1)} is less than the "
            f"required minimum length of {_MIN_GEN_TX1_LEN}",
        )
    header_hex = (block_version + prev_block + gen_tx1[:216] + extra_nonce1
                  + gen_tx1[224:])
    try:
        raw = _unhex(header_hex)
    except (binascii.Error, ValueError) as exc:
        raise MessageError(
            ErrorKind.DECODE,
            f"{func}: unable to decode block header {header_hex}: {exc}",
        ) from exc
    try:
        return BlockHeader.from_bytes(raw)
    except (ValueError, struct.error) as exc:
        raise MessageError(
            ErrorKind.HEADER_INVALID,
            f"{func}: unable to create header from bytes {header_hex}: {exc}",
        ) from exc


def _overwrite(text: str, start: int, value: str) -> str:
    piece = value[:8]
    return text[:start] + piece + text[start + len(piece):]


def generate_solved_block_header(header: str, extra_nonce1: str,
                                 extra_nonce2: str, n_time: str, nonce: str,
                                 miner: str) -> BlockHeader:
    """Build the solved header of a mining.submit from its job's header."""
    if miner not in (CPU, GOMINER):
        raise MessageError(ErrorKind.MINER_UNKNOWN,
                           f"miner {miner} is unknown")
    if len(header) < _SOLVED_HEADER_MIN_LEN:
        raise MessageError(
            ErrorKind.DECODE,
            f"{miner}: header length of {len(header)} is less than the "
            f"required minimum length of {_SOLVED_HEADER_MIN_LEN}",
        )
    solved = header
    for start, value in ((272, n_time), (280, nonce), (288, extra_nonce1),
                         (296, extra_nonce2)):
        solved = _overwrite(solved, start, value)
    try:
        raw = _unhex(solved)
    except (binascii.Error, ValueError) as exc:
        raise MessageError(
            ErrorKind.DECODE,
            f"{miner}: unable to decode solved header: {exc}",
        ) from exc
    try:
        return BlockHeader.from_bytes(raw)
    except (ValueError, struct.error) as exc:
        raise MessageError(
            ErrorKind.PARSE,
            f"{miner}: unable to create header from bytes: {exc}",
        ) from exc